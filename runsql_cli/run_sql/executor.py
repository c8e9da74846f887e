"""Run one ad-hoc statement: limit, execute, truncate, summarise, persist."""

from __future__ import annotations

from dataclasses import replace

from runsql_cli.shared.config import QuerySettings
from runsql_cli.shared.exceptions import InputError, PersistenceError, QueryError, RunSqlError
from runsql_cli.shared.logging import Logger

from .encoder import encode_csv
from .limiter import compute_limit_plan
from .persist import persist_result
from .summary import build_summary
from .types import PersistenceOptions, ResultMetadata, RunOutcome
from .warehouse import SqlExecutionService


def run_query(
    *,
    settings: QuerySettings,
    service: SqlExecutionService,
    logger: Logger,
) -> RunOutcome:
    """Execute ``settings.sql`` with a row cap and materialise the result.

    Persistence failures are downgraded to a single warning because the query
    already succeeded; execution failures propagate as :class:`QueryError`.
    """
    requested_sql = (settings.sql or "").strip()
    if not requested_sql:
        raise InputError("No SQL provided. Set the `sql` input or RUN_SQL_STATEMENT.")

    max_rows = settings.return_rows
    plan = compute_limit_plan(requested_sql, max_rows)
    logger.debug(f"SQL: {requested_sql}")
    logger.debug(f"Return rows: {max_rows}")
    if plan.applied:
        logger.debug(f"Executing with server-side limit: {plan.sql}")
    else:
        logger.debug(f"Server-side limit not applied ({plan.reason}); rows are truncated client-side.")

    try:
        result = service.execute(plan.sql)
    except RunSqlError:
        raise
    except Exception as exc:
        raise QueryError(str(exc) or exc.__class__.__name__) from exc

    truncated = len(result.rows) > max_rows
    kept_rows = list(result.rows)[:max_rows]
    result = replace(result, rows=kept_rows)
    notice = f"Result truncated to {max_rows} rows." if truncated else None

    summary = build_summary(result, plan, requested_sql=requested_sql, requested_rows=max_rows)

    options = persistence_options(settings)
    if not options.enabled:
        return RunOutcome(
            summary=summary,
            rows=kept_rows,
            truncated=truncated,
            notice=notice,
            csv_text=encode_csv(kept_rows),
        )

    metadata = ResultMetadata(
        query_id=result.query_id,
        requested_sql=requested_sql,
        executed_sql=plan.sql,
    )
    try:
        persisted = persist_result(kept_rows, metadata, options)
    except PersistenceError as exc:
        warning = f"Failed to persist query results: {exc}"
        logger.warning(warning)
        return RunOutcome(
            summary=summary,
            rows=kept_rows,
            truncated=truncated,
            notice=notice,
            warnings=(warning,),
        )

    logger.info(f"Saved {len(kept_rows)} rows to {persisted.csv_path}")
    return RunOutcome(
        summary=summary,
        rows=kept_rows,
        truncated=truncated,
        notice=notice,
        persisted=persisted,
    )


def persistence_options(settings: QuerySettings) -> PersistenceOptions:
    return PersistenceOptions(
        enabled=settings.persist_results,
        filename=settings.result_filename,
        directory=settings.result_dir,
        temp_root=settings.temp_root,
    )
