"""CSV encoding for warehouse row sets."""

from __future__ import annotations

import json
from collections.abc import Mapping, Sequence
from datetime import date, datetime, time
from typing import Any

from .types import Row

_QUOTE_TRIGGERS = ('"', ",", "\n", "\r")


def encode_csv(rows: Sequence[Row]) -> str:
    """Serialise ``rows`` as CSV text with a header line.

    Columns are the union of keys across all rows in first-seen order, so sparse
    rows encode as empty fields. An empty row set encodes as an empty string.
    """
    if not rows:
        return ""

    columns = _collect_columns(rows)
    lines = [",".join(_escape_field(column) for column in columns)]
    for row in rows:
        lines.append(",".join(_escape_field(_stringify(row.get(column))) for column in columns))
    return "\n".join(lines) + "\n"


def _collect_columns(rows: Sequence[Row]) -> list[str]:
    seen: dict[str, None] = {}
    for row in rows:
        for key in row:
            seen.setdefault(key, None)
    return list(seen)


def _stringify(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (datetime, date, time)):
        return value.isoformat()
    if isinstance(value, (bytes, bytearray)):
        return bytes(value).hex()
    if isinstance(value, (Mapping, list, tuple, set, frozenset)):
        structured = sorted(value, key=str) if isinstance(value, (set, frozenset)) else value
        return json.dumps(structured, separators=(",", ":"), ensure_ascii=False, default=str)
    return str(value)


def _escape_field(field: str) -> str:
    if any(trigger in field for trigger in _QUOTE_TRIGGERS):
        return '"' + field.replace('"', '""') + '"'
    return field
