"""Rich-based logging helpers shared across the action."""

from __future__ import annotations

from dataclasses import dataclass

from rich.console import Console
from rich.theme import Theme
from rich.traceback import install

install(show_locals=False)

_THEME = Theme(
    {
        "info": "cyan",
        "warning": "yellow",
        "error": "bold red",
        "success": "bold green",
        "debug": "dim",
    }
)

# Log chatter goes to stderr so stdout carries only result payloads.
#
# Highlighting stays off so SQL text and query ids (e.g. "01b2-0000-abcd") are printed
# verbatim; Rich would otherwise inject ANSI sequences around numbers and punctuation,
# which breaks CI log greps and tests that run with `FORCE_COLOR=1`.
_stderr_console = Console(stderr=True, theme=_THEME, highlight=False)
_verbose_console = Console(stderr=True, theme=_THEME, highlight=False)

LOG_LEVEL_MINIMAL = "MINIMAL"
LOG_LEVEL_VERBOSE = "VERBOSE"


@dataclass(slots=True)
class Logger:
    """Lightweight logger facade backed by Rich consoles."""

    verbose: bool = False

    def info(self, message: str) -> None:
        _stderr_console.print(message, style="info", markup=False)

    def success(self, message: str) -> None:
        _stderr_console.print(message, style="success", markup=False)

    def warning(self, message: str) -> None:
        _stderr_console.print(message, style="warning", markup=False)

    def error(self, message: str) -> None:
        _stderr_console.print(message, style="error", markup=False)

    def debug(self, message: str) -> None:
        if self.verbose:
            _verbose_console.print(f"[VERBOSE] {message}", style="debug", markup=False)


def normalize_log_level(value: str | None) -> str:
    """Map a raw log level to MINIMAL or VERBOSE."""
    upper = (value or LOG_LEVEL_MINIMAL).strip().upper()
    return LOG_LEVEL_VERBOSE if upper == LOG_LEVEL_VERBOSE else LOG_LEVEL_MINIMAL


def get_logger(verbose: bool = False) -> Logger:
    """Return a configured Logger instance."""
    return Logger(verbose=verbose)
