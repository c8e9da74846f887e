"""Data structures shared across run-sql modules."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Mapping, Sequence

from runsql_cli.shared.config import DEFAULT_RESULT_FILENAME

Row = Mapping[str, Any]


@dataclass(frozen=True, slots=True)
class LimitPlan:
    """Decision record for server-side row limiting.

    ``reason`` is only populated when ``applied`` is false.
    """

    sql: str
    applied: bool
    reason: str | None = None


@dataclass(frozen=True, slots=True)
class QueryResult:
    """Rows returned by the execution service for one statement."""

    rows: Sequence[Row]
    columns: tuple[str, ...] = ()
    query_id: str = ""


@dataclass(frozen=True, slots=True)
class PersistenceOptions:
    """Where and under which name result artifacts are written."""

    enabled: bool = False
    filename: str = DEFAULT_RESULT_FILENAME
    directory: Path | None = None
    temp_root: Path | None = None


@dataclass(frozen=True, slots=True)
class ResultMetadata:
    """Identifying details stored next to a persisted CSV."""

    query_id: str
    requested_sql: str
    executed_sql: str


@dataclass(frozen=True, slots=True)
class PersistedFiles:
    """Absolute paths of the artifacts written for one query."""

    csv_path: Path
    metadata_path: Path


@dataclass(frozen=True, slots=True)
class QuerySummary:
    """Bounded, log-safe description of a query result."""

    executed_sql: str
    requested_sql: str
    query_id: str
    requested_rows: int
    rows_returned: int
    limit_applied_in_sql: bool
    limit_reason: str | None = None
    columns: tuple[str, ...] = ()
    preview_rows: tuple[Row, ...] = ()

    def to_payload(self) -> dict[str, Any]:
        """Return the summary keyed the way action consumers expect."""
        payload: dict[str, Any] = {
            "executedSql": self.executed_sql,
            "requestedSql": self.requested_sql,
            "queryId": self.query_id,
            "requestedRows": self.requested_rows,
            "rowsReturned": self.rows_returned,
            "limitAppliedInSql": self.limit_applied_in_sql,
        }
        if self.limit_reason is not None:
            payload["limitReason"] = self.limit_reason
        payload["columns"] = list(self.columns)
        payload["previewRows"] = [dict(row) for row in self.preview_rows]
        return payload


@dataclass(frozen=True, slots=True)
class RunOutcome:
    """Everything the CLI needs to report after a query ran."""

    summary: QuerySummary
    rows: Sequence[Row]
    truncated: bool = False
    notice: str | None = None
    csv_text: str | None = None
    persisted: PersistedFiles | None = None
    warnings: tuple[str, ...] = field(default_factory=tuple)
