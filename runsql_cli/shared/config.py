"""Configuration loading utilities for the snowflake-runsql action."""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Mapping, MutableMapping

import yaml

from . import paths
from .exceptions import ConfigurationError
from .logging import normalize_log_level

DEFAULT_RETURN_ROWS = 100
MAX_RETURN_ROWS = 1000
DEFAULT_RESULT_FILENAME = "snowflake-result.csv"


@dataclass(frozen=True, slots=True)
class ConnectionSettings:
    """Warehouse connection parameters handed to the execution service."""

    account: str | None
    user: str | None
    password: str | None = None
    private_key_path: Path | None = None
    role: str | None = None
    warehouse: str | None = None
    database: str | None = None
    schema: str | None = None


@dataclass(frozen=True, slots=True)
class QuerySettings:
    """Per-invocation query and persistence inputs."""

    sql: str
    return_rows: int = DEFAULT_RETURN_ROWS
    persist_results: bool = False
    result_filename: str = DEFAULT_RESULT_FILENAME
    result_dir: Path | None = None
    temp_root: Path | None = None


@dataclass(frozen=True, slots=True)
class AppConfig:
    """Top-level application configuration."""

    source_path: Path
    connection: ConnectionSettings
    query: QuerySettings
    log_level: str

    @property
    def verbose(self) -> bool:
        return self.log_level == "VERBOSE"


def _default_config() -> dict[str, Any]:
    return {
        "connection": {
            "account": None,
            "user": None,
            "password": None,
            "private_key_path": None,
            "role": None,
            "warehouse": None,
            "database": None,
            "schema": None,
        },
        "query": {
            "sql": None,
            "return_rows": DEFAULT_RETURN_ROWS,
            "persist_results": False,
            "result_filename": DEFAULT_RESULT_FILENAME,
            "result_dir": None,
        },
        "log_level": "MINIMAL",
    }


# Each dotted key lists its environment variables in priority order.
ENV_OVERRIDE_SPEC: dict[str, tuple[str, ...]] = {
    "connection.account": ("SNOWFLAKE_ACCOUNT", "SNOWFLAKE_ACCOUNT_URL"),
    "connection.user": ("SNOWFLAKE_USER",),
    "connection.password": ("SNOWFLAKE_PASSWORD",),
    "connection.private_key_path": ("SNOWFLAKE_PRIVATE_KEY_PATH",),
    "connection.role": ("SNOWFLAKE_ROLE",),
    "connection.warehouse": ("SNOWFLAKE_WAREHOUSE",),
    "connection.database": ("SNOWFLAKE_DATABASE",),
    "connection.schema": ("SNOWFLAKE_SCHEMA",),
    "query.sql": ("RUN_SQL_STATEMENT",),
    "query.return_rows": ("RUN_SQL_RETURN_ROWS",),
    "query.persist_results": ("RUN_SQL_PERSIST_RESULTS",),
    "query.result_filename": ("RUN_SQL_RESULT_FILENAME",),
    "query.result_dir": ("RUN_SQL_RESULT_DIR",),
    "log_level": ("SNOWFLAKE_LOG_LEVEL",),
}


def resolve_setting(*candidates: Any, default: Any = None) -> Any:
    """Return the first candidate that is set and not blank, else ``default``.

    Candidates are ordered from highest to lowest priority, e.g. an action input,
    then its environment variable, then the config file value.
    """
    for candidate in candidates:
        if candidate is None:
            continue
        if isinstance(candidate, str) and not candidate.strip():
            continue
        return candidate
    return default


def clamp_rows(value: Any) -> int:
    """Coerce a requested row cap into ``1..MAX_RETURN_ROWS``.

    Fractional values are floored. Missing, non-numeric and non-positive values, and
    values that floor to zero, fall back to ``DEFAULT_RETURN_ROWS``.
    """
    if value is None or isinstance(value, bool):
        return DEFAULT_RETURN_ROWS
    try:
        raw = float(str(value).strip())
    except ValueError:
        return DEFAULT_RETURN_ROWS
    if raw != raw or raw <= 0:  # NaN or non-positive
        return DEFAULT_RETURN_ROWS
    rows = int(min(MAX_RETURN_ROWS, raw))
    return rows if rows >= 1 else DEFAULT_RETURN_ROWS


def parse_bool(value: Any, *, default: bool = False) -> bool:
    if isinstance(value, bool):
        return value
    if value is None:
        return default
    lowered = str(value).strip().lower()
    if lowered in {"1", "true", "yes", "on"}:
        return True
    if lowered in {"0", "false", "no", "off"}:
        return False
    return default


def load_config(
    config_path: str | Path | None = None,
    env: Mapping[str, str] | None = None,
    overrides: Mapping[str, Any] | None = None,
) -> AppConfig:
    """Load configuration from defaults, YAML file, env vars and explicit overrides.

    ``overrides`` uses dotted keys (``"query.sql"``) and wins over every other
    source; blank values are skipped so an empty action input falls through to
    the environment.
    """
    env = dict(env if env is not None else os.environ)
    resolved_config_path = _resolve_config_path(config_path, env)
    file_data = _load_yaml(resolved_config_path)
    merged: dict[str, Any] = _deep_merge(_default_config(), file_data)
    merged = _apply_env_overrides(merged, env)
    merged = _apply_overrides(merged, overrides or {})
    return _build_config(merged, resolved_config_path, env)


def _resolve_config_path(config_path: str | Path | None, env: Mapping[str, str]) -> Path:
    if config_path:
        return paths.resolve_path(config_path)
    return paths.default_config_path(env=env)


def _load_yaml(path: Path) -> dict[str, Any]:
    if not path.exists():
        return {}
    with path.open("r", encoding="utf-8") as handle:
        try:
            data = yaml.safe_load(handle) or {}
        except yaml.YAMLError as exc:
            raise ConfigurationError(f"Config file at {path} is not valid YAML: {exc}") from exc
        if not isinstance(data, MutableMapping):
            raise ConfigurationError(f"Config file at {path} must define a mapping root object.")
        return dict(data)


def _deep_merge(base: Mapping[str, Any], override: Mapping[str, Any]) -> dict[str, Any]:
    result = dict(base)
    for key, value in override.items():
        if key in result and isinstance(result[key], Mapping) and isinstance(value, Mapping):
            result[key] = _deep_merge(result[key], value)
        else:
            result[key] = value
    return result


def _apply_env_overrides(config: dict[str, Any], env: Mapping[str, str]) -> dict[str, Any]:
    config_copy = _deep_merge(config, {})
    for dotted_key, env_keys in ENV_OVERRIDE_SPEC.items():
        value = resolve_setting(*(env.get(env_key) for env_key in env_keys))
        if value is not None:
            _assign_nested(config_copy, dotted_key.split("."), value.strip())
    return config_copy


def _apply_overrides(config: dict[str, Any], overrides: Mapping[str, Any]) -> dict[str, Any]:
    config_copy = _deep_merge(config, {})
    for dotted_key, raw_value in overrides.items():
        value = resolve_setting(raw_value)
        if value is not None:
            _assign_nested(config_copy, dotted_key.split("."), value)
    return config_copy


def _assign_nested(target: MutableMapping[str, Any], keys: list[str], value: Any) -> None:
    current = target
    for key in keys[:-1]:
        if key not in current or not isinstance(current[key], MutableMapping):
            current[key] = {}
        current = current[key]  # type: ignore[assignment]
    current[keys[-1]] = value


def _optional_str(value: Any) -> str | None:
    resolved = resolve_setting(value)
    return None if resolved is None else str(resolved).strip()


def _optional_path(value: Any) -> Path | None:
    resolved = _optional_str(value)
    return paths.resolve_path(resolved) if resolved else None


def _build_config(data: Mapping[str, Any], source_path: Path, env: Mapping[str, str]) -> AppConfig:
    try:
        conn_cfg = data["connection"]
        connection = ConnectionSettings(
            account=_optional_str(conn_cfg.get("account")),
            user=_optional_str(conn_cfg.get("user")),
            password=_optional_str(conn_cfg.get("password")),
            private_key_path=_optional_path(conn_cfg.get("private_key_path")),
            role=_optional_str(conn_cfg.get("role")),
            warehouse=_optional_str(conn_cfg.get("warehouse")),
            database=_optional_str(conn_cfg.get("database")),
            schema=_optional_str(conn_cfg.get("schema")),
        )
        query_cfg = data["query"]
        query = QuerySettings(
            sql=str(resolve_setting(query_cfg.get("sql"), default="")).strip(),
            return_rows=clamp_rows(query_cfg.get("return_rows")),
            persist_results=parse_bool(query_cfg.get("persist_results")),
            result_filename=str(
                resolve_setting(query_cfg.get("result_filename"), default=DEFAULT_RESULT_FILENAME)
            ).strip(),
            result_dir=_optional_path(query_cfg.get("result_dir")),
            temp_root=paths.runner_temp_root(env),
        )
    except (AttributeError, KeyError, TypeError, ValueError) as exc:
        raise ConfigurationError(f"Invalid configuration structure: {exc}") from exc

    return AppConfig(
        source_path=source_path,
        connection=connection,
        query=query,
        log_level=normalize_log_level(_optional_str(data.get("log_level"))),
    )
