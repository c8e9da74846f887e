"""Server-side row limiting for ad-hoc SQL.

The limiter classifies statements with a handful of regexes and a leading-token
allow-list. It is deliberately not a parser: anything it cannot classify as a
row-producing query is returned unchanged and the caller falls back to
truncating rows client-side.
"""

from __future__ import annotations

import re

from .types import LimitPlan

REASON_EMPTY_SQL = "empty-sql"
REASON_EXISTING_LIMIT = "existing-limit-detected"
REASON_UNSUPPORTED = "statement-type-not-supported-for-limit"

LIMITABLE_STATEMENTS = frozenset({"SELECT", "WITH", "SHOW", "DESC", "DESCRIBE"})

_LINE_COMMENT_RE = re.compile(r"--[^\n]*")
_BLOCK_COMMENT_RE = re.compile(r"/\*.*?\*/", re.DOTALL)
_EXISTING_LIMIT_RE = re.compile(r"\blimit\s+\d+", re.IGNORECASE)
_LEADING_TOKEN_RE = re.compile(r"[^\s()]*")
_TRAILING_SEMICOLONS_RE = re.compile(r"(?:\s*;)+\s*$")
_TRAILING_TERMINATOR_RE = re.compile(r"(?:\s*;|\s*--[^\n]*|\s*/\*.*?\*/)+\s*$", re.DOTALL)


def compute_limit_plan(sql_text: str, max_rows: int) -> LimitPlan:
    """Decide whether and how to append ``limit <max_rows>`` to ``sql_text``."""
    if max_rows <= 0:
        raise ValueError(f"max_rows must be positive, got {max_rows}")

    trimmed = (sql_text or "").strip()
    if not trimmed:
        return LimitPlan(sql=trimmed, applied=False, reason=REASON_EMPTY_SQL)

    detection = strip_comments(trimmed).strip()
    if _EXISTING_LIMIT_RE.search(detection):
        return LimitPlan(sql=trimmed, applied=False, reason=REASON_EXISTING_LIMIT)

    statement_type = leading_token(detection)
    if statement_type in LIMITABLE_STATEMENTS:
        body, had_semicolon = _split_trailing_semicolons(trimmed)
        separator = "\n" if _ends_with_line_comment(body) else " "
        limited = f"{body}{separator}limit {max_rows}"
        if had_semicolon:
            limited += ";"
        return LimitPlan(sql=limited, applied=True)

    if detection.upper().startswith("SELECT") or detection.startswith("("):
        body, had_semicolon = _split_trailing_semicolons(trimmed)
        wrapped = f"select * from (\n{body}\n) limit {max_rows}"
        if had_semicolon:
            wrapped += ";"
        return LimitPlan(sql=wrapped, applied=True)

    return LimitPlan(sql=trimmed, applied=False, reason=REASON_UNSUPPORTED)


def strip_comments(sql_text: str) -> str:
    """Remove ``/* ... */`` and ``-- ...`` comments; used for detection only."""
    without_blocks = _BLOCK_COMMENT_RE.sub(" ", sql_text)
    return _LINE_COMMENT_RE.sub("", without_blocks)


def leading_token(sql_text: str) -> str:
    """Return the first whitespace/paren-delimited token, upper-cased."""
    match = _LEADING_TOKEN_RE.match(sql_text)
    return match.group(0).upper() if match else ""


def _split_trailing_semicolons(sql_text: str) -> tuple[str, bool]:
    match = _TRAILING_SEMICOLONS_RE.search(sql_text)
    if match:
        return sql_text[: match.start()].rstrip(), True
    # A comment after the final semicolon is dropped with it; appending past the
    # semicolon would start a second statement.
    tail = _TRAILING_TERMINATOR_RE.search(sql_text)
    if tail and ";" in strip_comments(tail.group(0)):
        return sql_text[: tail.start()].rstrip(), True
    return sql_text, False


def _ends_with_line_comment(sql_text: str) -> bool:
    # Appending to a trailing "-- note" would comment the limit out.
    last_line = sql_text.rsplit("\n", 1)[-1]
    return "--" in _BLOCK_COMMENT_RE.sub(" ", last_line)
