"""Utilities for resolving configuration and output paths."""

from __future__ import annotations

import os
from pathlib import Path
from typing import Mapping

DEFAULT_CONFIG_DIR = "~/.snowflake-runsql"
DEFAULT_CONFIG_FILE = "config.yaml"
RESULTS_SUBDIR = "snowflake-runsql"
LOCAL_RESULTS_DIR = "snowflake-results"

CONFIG_FILE_ENV = "RUNSQL_CONFIG_PATH"
RUNNER_TEMP_ENV = "RUNNER_TEMP"


def _expand(path_str: str) -> Path:
    """Return a Path with user and environment variables expanded."""
    return Path(os.path.expandvars(path_str)).expanduser()


def default_config_path(env: Mapping[str, str] | None = None) -> Path:
    """Return the default config file path, honouring the env override."""
    env = env if env is not None else os.environ
    override = env.get(CONFIG_FILE_ENV)
    if override:
        return _expand(override)
    return _expand(DEFAULT_CONFIG_DIR) / DEFAULT_CONFIG_FILE


def runner_temp_root(env: Mapping[str, str] | None = None) -> Path | None:
    """Return the CI runner's temp directory when one is advertised."""
    env = env if env is not None else os.environ
    raw = (env.get(RUNNER_TEMP_ENV) or "").strip()
    if not raw:
        return None
    return _expand(raw)


def resolve_path(path_str: str | Path) -> Path:
    """Expand user and environment variables for arbitrary paths."""
    if isinstance(path_str, Path):
        return _expand(str(path_str))
    return _expand(path_str)
