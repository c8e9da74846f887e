"""Bounded summaries of query results for logs and action outputs."""

from __future__ import annotations

import json
from typing import Sequence

from .types import LimitPlan, QueryResult, QuerySummary, Row

PREVIEW_ROW_COUNT = 5
DEFAULT_LOG_CHARS = 4000


def build_summary(
    result: QueryResult,
    plan: LimitPlan,
    *,
    requested_sql: str,
    requested_rows: int,
) -> QuerySummary:
    """Summarise an already-truncated result.

    ``limit_applied_in_sql`` and ``limit_reason`` come straight from ``plan`` so
    consumers can tell server-side limiting apart from client-side truncation.
    """
    rows = list(result.rows)
    columns = _discover_columns(rows)
    return QuerySummary(
        executed_sql=plan.sql,
        requested_sql=requested_sql,
        query_id=result.query_id,
        requested_rows=requested_rows,
        rows_returned=len(rows),
        limit_applied_in_sql=plan.applied,
        limit_reason=plan.reason,
        columns=columns,
        preview_rows=tuple(rows[:PREVIEW_ROW_COUNT]),
    )


def format_summary_for_log(summary: QuerySummary, *, max_chars: int = DEFAULT_LOG_CHARS) -> str:
    """Render the summary as indented JSON, cut to at most ``max_chars`` characters."""
    text = json.dumps(summary.to_payload(), indent=2, default=str, ensure_ascii=False)
    if len(text) <= max_chars:
        return text
    dropped = len(text) - max_chars
    return f"{text[:max_chars]}\n… (truncated {dropped} chars)"


def _discover_columns(rows: Sequence[Row]) -> tuple[str, ...]:
    columns: list[str] = []
    seen: set[str] = set()
    for row in rows:
        for key in row:
            if key not in seen:
                seen.add(key)
                columns.append(key)
    return tuple(columns)
