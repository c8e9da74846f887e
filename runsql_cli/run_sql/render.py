"""Output rendering helpers for snowflake-runsql."""

from __future__ import annotations

import json
import sys
import uuid
from pathlib import Path
from typing import IO, Mapping

from runsql_cli.shared.logging import Logger

from .summary import DEFAULT_LOG_CHARS, format_summary_for_log
from .types import RunOutcome


def render_console_csv(outcome: RunOutcome, *, logger: Logger, stream: IO[str] | None = None) -> None:
    """Print the CSV rendering of a result that was not persisted."""
    output_stream = stream or sys.stdout
    if outcome.csv_text:
        output_stream.write(outcome.csv_text)
    else:
        logger.info("Query returned zero rows.")


def render_summary(outcome: RunOutcome, *, logger: Logger, max_chars: int = DEFAULT_LOG_CHARS) -> None:
    """Log a one-line headline, plus the bounded JSON summary when verbose."""
    summary = outcome.summary
    if summary.limit_applied_in_sql:
        limit_note = "limit applied in SQL"
    else:
        limit_note = f"limit not applied in SQL: {summary.limit_reason}"
    logger.info(
        f"Query {summary.query_id or '<unknown>'} returned {summary.rows_returned} row(s) "
        f"({limit_note}; requested {summary.requested_rows})."
    )
    logger.debug(format_summary_for_log(summary, max_chars=max_chars))


def build_action_outputs(outcome: RunOutcome) -> dict[str, str]:
    """Flatten a run outcome into string-valued action outputs."""
    summary = outcome.summary
    persisted = outcome.persisted
    return {
        "query-id": summary.query_id,
        "row-count": str(summary.rows_returned),
        "limit-applied": "true" if summary.limit_applied_in_sql else "false",
        "truncated": "true" if outcome.truncated else "false",
        "summary": json.dumps(summary.to_payload(), default=str, ensure_ascii=False),
        "csv-path": str(persisted.csv_path) if persisted else "",
        "metadata-path": str(persisted.metadata_path) if persisted else "",
    }


def write_action_outputs(outputs: Mapping[str, str], path: str | Path | None) -> None:
    """Append outputs to a GitHub Actions output file; no-op without a path."""
    if not path:
        return
    with Path(path).open("a", encoding="utf-8") as handle:
        for name, value in outputs.items():
            delimiter = f"ghadelimiter_{uuid.uuid4()}"
            handle.write(f"{name}<<{delimiter}\n{value}\n{delimiter}\n")
