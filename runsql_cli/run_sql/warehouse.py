"""Execution service adapters for running SQL against Snowflake."""

from __future__ import annotations

import re
from typing import Any, Protocol

import snowflake.connector
from snowflake.connector import DictCursor
from snowflake.connector.errors import Error as SnowflakeError

from runsql_cli.shared.config import ConnectionSettings
from runsql_cli.shared.exceptions import ConfigurationError, QueryError
from runsql_cli.shared.logging import Logger

from .types import QueryResult

_ACCOUNT_URL_RE = re.compile(r"^(?:https?://)?(?P<account>[^/]+?)(?:\.snowflakecomputing\.com)?/?$", re.IGNORECASE)


class SqlExecutionService(Protocol):
    """Anything able to run one statement and hand back its rows."""

    def execute(self, sql: str) -> QueryResult:
        ...


class SnowflakeExecutionService:
    """Run statements through ``snowflake-connector-python``."""

    def __init__(self, settings: ConnectionSettings, logger: Logger) -> None:
        self._settings = settings
        self._logger = logger

    def execute(self, sql: str) -> QueryResult:
        params = connection_parameters(self._settings)
        self._logger.debug(
            f"Connecting to account {params['account']} as {params['user']}"
            f" (warehouse={params.get('warehouse') or '-'}, role={params.get('role') or '-'})"
        )
        try:
            with snowflake.connector.connect(**params) as connection:
                with connection.cursor(DictCursor) as cursor:
                    cursor.execute(sql)
                    rows = cursor.fetchall() if cursor.description else []
                    columns = tuple(column[0] for column in cursor.description or ())
                    query_id = cursor.sfqid or ""
        except SnowflakeError as exc:
            raise QueryError(f"Snowflake error: {exc}") from exc

        self._logger.debug(f"Query {query_id} returned {len(rows)} rows.")
        return QueryResult(rows=[dict(row) for row in rows], columns=columns, query_id=query_id)


def connection_parameters(settings: ConnectionSettings) -> dict[str, Any]:
    """Translate settings into keyword arguments for ``snowflake.connector.connect``."""
    if not settings.account:
        raise ConfigurationError("Missing Snowflake account (set SNOWFLAKE_ACCOUNT or SNOWFLAKE_ACCOUNT_URL).")
    if not settings.user:
        raise ConfigurationError("Missing Snowflake user (set SNOWFLAKE_USER).")
    if not settings.password and not settings.private_key_path:
        raise ConfigurationError(
            "Provide SNOWFLAKE_PASSWORD or SNOWFLAKE_PRIVATE_KEY_PATH to authenticate."
        )

    params: dict[str, Any] = {
        "account": normalize_account(settings.account),
        "user": settings.user,
    }
    if settings.private_key_path:
        params["private_key_file"] = str(settings.private_key_path)
    else:
        params["password"] = settings.password
    for key in ("role", "warehouse", "database", "schema"):
        value = getattr(settings, key)
        if value:
            params[key] = value
    return params


def normalize_account(account: str) -> str:
    """Accept either an account identifier or its ``*.snowflakecomputing.com`` URL."""
    match = _ACCOUNT_URL_RE.match(account.strip())
    return match.group("account") if match else account.strip()
