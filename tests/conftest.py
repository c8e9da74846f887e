from __future__ import annotations

from pathlib import Path

import pytest

from runsql_cli.shared import paths
from runsql_cli.shared.config import ENV_OVERRIDE_SPEC


@pytest.fixture(autouse=True)
def isolated_env(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep the developer's Snowflake/CI environment out of every test."""
    for env_keys in ENV_OVERRIDE_SPEC.values():
        for env_key in env_keys:
            monkeypatch.delenv(env_key, raising=False)
    monkeypatch.delenv(paths.RUNNER_TEMP_ENV, raising=False)
    monkeypatch.delenv("GITHUB_OUTPUT", raising=False)
    monkeypatch.setenv(paths.CONFIG_FILE_ENV, str(tmp_path / "missing-config.yaml"))
