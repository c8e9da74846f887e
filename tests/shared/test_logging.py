from __future__ import annotations

from runsql_cli.shared.logging import get_logger, normalize_log_level


def test_logger_info_routes_to_stderr(capfd) -> None:
    logger = get_logger()

    logger.info("structured log to stderr")

    captured = capfd.readouterr()
    assert "structured log to stderr" in captured.err
    assert "structured log to stderr" not in captured.out


def test_debug_only_emitted_when_verbose(capfd) -> None:
    get_logger(verbose=False).debug("hidden detail")
    get_logger(verbose=True).debug("shown detail")

    captured = capfd.readouterr()
    assert "hidden detail" not in captured.err
    assert "[VERBOSE] shown detail" in captured.err


def test_normalize_log_level() -> None:
    assert normalize_log_level(None) == "MINIMAL"
    assert normalize_log_level(" verbose ") == "VERBOSE"
    assert normalize_log_level("debug") == "MINIMAL"
