"""Write query results and their metadata to disk."""

from __future__ import annotations

import json
import re
import shutil
from datetime import datetime, timezone
from pathlib import Path
from typing import Sequence

from runsql_cli.shared import paths
from runsql_cli.shared.exceptions import PersistenceError

from .encoder import encode_csv
from .types import PersistedFiles, PersistenceOptions, ResultMetadata, Row

DEFAULT_BASENAME = "snowflake-result"
DEFAULT_EXTENSION = ".csv"
METADATA_SUFFIX = ".meta.json"
FALLBACK_QUERY_TOKEN = "result"

_UNSAFE_TOKEN_CHARS_RE = re.compile(r"[^A-Za-z0-9._-]")


def persist_result(
    rows: Sequence[Row],
    metadata: ResultMetadata,
    options: PersistenceOptions,
    *,
    now: datetime | None = None,
    cwd: Path | None = None,
) -> PersistedFiles:
    """Reset the output directory and write the CSV plus its ``.meta.json`` sibling.

    The directory is removed and recreated on every call so artifacts from an
    earlier run never sit next to the current ones. File-system failures surface
    as :class:`PersistenceError`.
    """
    directory = resolve_output_directory(options, cwd=cwd)
    files = build_artifact_paths(directory, options.filename, metadata.query_id)
    generated_at = (now or datetime.now(timezone.utc)).isoformat()

    document = {
        "queryId": metadata.query_id,
        "requestedSql": metadata.requested_sql,
        "executedSql": metadata.executed_sql,
        "rowCount": len(rows),
        "generatedAt": generated_at,
    }

    try:
        reset_directory(directory)
        files.csv_path.write_text(encode_csv(rows), encoding="utf-8")
        files.metadata_path.write_text(json.dumps(document, indent=2) + "\n", encoding="utf-8")
    except OSError as exc:
        raise PersistenceError(f"Unable to write results to {directory}: {exc}") from exc
    return files


def resolve_output_directory(options: PersistenceOptions, *, cwd: Path | None = None) -> Path:
    """Return the absolute directory results should be written to."""
    if options.directory is not None and str(options.directory).strip():
        target = paths.resolve_path(options.directory)
    elif options.temp_root is not None:
        target = paths.resolve_path(options.temp_root) / paths.RESULTS_SUBDIR
    else:
        target = Path(paths.LOCAL_RESULTS_DIR)
    if not target.is_absolute():
        target = (cwd or Path.cwd()) / target
    return target


def reset_directory(directory: Path) -> None:
    try:
        shutil.rmtree(directory)
    except FileNotFoundError:
        pass
    directory.mkdir(parents=True, exist_ok=True)


def safe_query_token(query_id: str | None) -> str:
    """Reduce a query id to a filesystem-safe suffix.

    Uses the last ``-`` separated segment, e.g. ``01b2c3-0000-9f8e`` -> ``9f8e``.
    """
    segment = (query_id or "").split("-")[-1] or FALLBACK_QUERY_TOKEN
    return _UNSAFE_TOKEN_CHARS_RE.sub("-", segment)


def split_filename(filename: str | None) -> tuple[str, str]:
    """Split ``filename`` into base name and extension, applying defaults."""
    name = Path((filename or "").strip()).name
    suffix = Path(name).suffix
    base = name[: -len(suffix)] if suffix else name
    return base or DEFAULT_BASENAME, suffix or DEFAULT_EXTENSION


def build_artifact_paths(directory: Path, filename: str | None, query_id: str | None) -> PersistedFiles:
    base, extension = split_filename(filename)
    stem = f"{base}-{safe_query_token(query_id)}"
    return PersistedFiles(
        csv_path=directory / f"{stem}{extension}",
        metadata_path=directory / f"{stem}{METADATA_SUFFIX}",
    )
