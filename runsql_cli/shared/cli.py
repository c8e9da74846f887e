"""Shared CLI helpers and decorators."""

from __future__ import annotations

import functools
from dataclasses import dataclass
from typing import Any, Callable, TypeVar

import click

from .config import AppConfig, load_config
from .exceptions import ConfigurationError, RunSqlError
from .logging import Logger, get_logger

F = TypeVar("F", bound=Callable[..., Any])


@dataclass(slots=True)
class CLIContext:
    """Runtime context shared across CLI invocations."""

    config: AppConfig
    verbose: bool
    logger: Logger


# Click parameter name -> dotted config key.
CONFIG_OVERRIDE_OPTIONS: dict[str, str] = {
    "sql": "query.sql",
    "return_rows": "query.return_rows",
    "persist_results": "query.persist_results",
    "result_filename": "query.result_filename",
    "result_dir": "query.result_dir",
}


def common_cli_options(func: F) -> F:
    """Decorator injecting shared CLI options and context creation.

    Any keyword arguments named in ``CONFIG_OVERRIDE_OPTIONS`` are consumed here and
    applied as the highest-priority configuration source.
    """

    @click.option("--config", "config_path", type=click.Path(path_type=str), help="Path to config file.")
    @click.option("--verbose", is_flag=True, help="Enable verbose logging output.")
    @click.pass_context
    @functools.wraps(func)
    def wrapper(
        ctx: click.Context,
        *args: Any,
        config_path: str | None = None,
        verbose: bool = False,
        **kwargs: Any,
    ) -> Any:
        overrides = {
            dotted_key: kwargs.pop(option_name)
            for option_name, dotted_key in CONFIG_OVERRIDE_OPTIONS.items()
            if option_name in kwargs
        }
        try:
            app_config = load_config(config_path, overrides=overrides)
        except ConfigurationError as exc:
            raise click.ClickException(str(exc)) from exc

        effective_verbose = verbose or app_config.verbose
        cli_ctx = CLIContext(
            config=app_config,
            verbose=effective_verbose,
            logger=get_logger(verbose=effective_verbose),
        )
        ctx.obj = cli_ctx
        kwargs["cli_ctx"] = cli_ctx
        return func(*args, **kwargs)

    return wrapper  # type: ignore[return-value]


def handle_cli_errors(func: F) -> F:
    """Convert project exceptions into Click-friendly errors."""

    @functools.wraps(func)
    def wrapper(*args: Any, **kwargs: Any) -> Any:
        try:
            return func(*args, **kwargs)
        except ConfigurationError as exc:
            raise click.ClickException(f"Configuration error: {exc}") from exc
        except RunSqlError as exc:
            raise click.ClickException(str(exc)) from exc
        except click.ClickException:
            raise
        except Exception as exc:  # pragma: no cover
            raise click.ClickException(f"Unexpected error: {exc}") from exc

    return wrapper  # type: ignore[return-value]
