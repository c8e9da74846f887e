"""snowflake-runsql CLI entrypoint."""

from __future__ import annotations

import traceback

import click

from runsql_cli.shared.cli import CLIContext, common_cli_options, handle_cli_errors
from runsql_cli.shared.config import AppConfig
from runsql_cli.shared.exceptions import QueryError, RunSqlError
from runsql_cli.shared.logging import Logger

from . import executor, render
from .warehouse import SnowflakeExecutionService, SqlExecutionService


@click.command(help="Run one SQL statement against Snowflake with a bounded result set.")
@click.option("--sql", type=str, help="SQL statement to execute (falls back to RUN_SQL_STATEMENT).")
@click.option(
    "--return-rows",
    type=str,
    help="Maximum rows to return (default 100, capped at 1000; falls back to RUN_SQL_RETURN_ROWS).",
)
@click.option(
    "--persist-results",
    type=str,
    metavar="BOOLEAN",
    help="Write the result CSV and metadata to disk instead of printing them.",
)
@click.option("--result-filename", type=str, help="Base filename for persisted results.")
@click.option(
    "--result-dir",
    type=click.Path(path_type=str),
    help="Directory for persisted results (defaults to $RUNNER_TEMP/snowflake-runsql).",
)
@click.option(
    "--github-output",
    envvar="GITHUB_OUTPUT",
    type=click.Path(dir_okay=False, path_type=str),
    help="File to append action outputs to (defaults to $GITHUB_OUTPUT).",
)
@common_cli_options
@handle_cli_errors
def cli(github_output: str | None, cli_ctx: CLIContext) -> None:
    """Execute the configured statement and report or persist its rows."""
    logger = cli_ctx.logger
    settings = cli_ctx.config.query
    try:
        service = build_execution_service(cli_ctx.config, logger)
        outcome = executor.run_query(settings=settings, service=service, logger=logger)
    except RunSqlError as exc:
        logger.error("Snowflake query failed:")
        if isinstance(exc, QueryError):
            logger.error(traceback.format_exc())
        else:
            logger.debug(traceback.format_exc())
        raise click.ClickException(str(exc)) from exc

    logger.success("Snowflake query succeeded ✅")
    if outcome.notice:
        logger.warning(outcome.notice)
    if not settings.persist_results:
        render.render_console_csv(outcome, logger=logger)
    render.render_summary(outcome, logger=logger)
    render.write_action_outputs(render.build_action_outputs(outcome), github_output)


def build_execution_service(config: AppConfig, logger: Logger) -> SqlExecutionService:
    return SnowflakeExecutionService(config.connection, logger)


def main() -> None:
    """Entry point for console_scripts."""
    cli()


if __name__ == "__main__":  # pragma: no cover
    main()
