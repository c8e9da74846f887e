from __future__ import annotations

import json
from datetime import datetime, timezone
from pathlib import Path

import pytest

from runsql_cli.run_sql import persist
from runsql_cli.run_sql.persist import (
    build_artifact_paths,
    persist_result,
    resolve_output_directory,
    safe_query_token,
    split_filename,
)
from runsql_cli.run_sql.types import PersistenceOptions, ResultMetadata
from runsql_cli.shared.exceptions import PersistenceError

METADATA = ResultMetadata(
    query_id="01b2c3d4-0000-5e6f-0000-abc123",
    requested_sql="select * from t",
    executed_sql="select * from t limit 100",
)


def test_persist_writes_csv_and_metadata(tmp_path: Path) -> None:
    options = PersistenceOptions(enabled=True, filename="orders.csv", directory=tmp_path / "out")
    now = datetime(2024, 5, 1, 9, 0, tzinfo=timezone.utc)

    files = persist_result([{"id": 1, "name": "a,b"}], METADATA, options, now=now)

    assert files.csv_path == tmp_path / "out" / "orders-abc123.csv"
    assert files.metadata_path == tmp_path / "out" / "orders-abc123.meta.json"
    assert files.csv_path.read_bytes() == b'id,name\n1,"a,b"\n'
    document = json.loads(files.metadata_path.read_text(encoding="utf-8"))
    assert document == {
        "queryId": METADATA.query_id,
        "requestedSql": "select * from t",
        "executedSql": "select * from t limit 100",
        "rowCount": 1,
        "generatedAt": "2024-05-01T09:00:00+00:00",
    }


def test_persist_resets_directory_between_runs(tmp_path: Path) -> None:
    target = tmp_path / "out"
    target.mkdir()
    (target / "stale.csv").write_text("old", encoding="utf-8")
    (target / "nested").mkdir()
    options = PersistenceOptions(enabled=True, directory=target)

    files = persist_result([], METADATA, options)

    assert sorted(p.name for p in target.iterdir()) == [
        "snowflake-result-abc123.csv",
        "snowflake-result-abc123.meta.json",
    ]
    assert files.csv_path.read_text(encoding="utf-8") == ""
    assert json.loads(files.metadata_path.read_text(encoding="utf-8"))["rowCount"] == 0


def test_persist_creates_missing_parents(tmp_path: Path) -> None:
    target = tmp_path / "a" / "b" / "c"
    files = persist_result([{"x": 1}], METADATA, PersistenceOptions(enabled=True, directory=target))
    assert files.csv_path.parent == target
    assert files.csv_path.exists()


def test_persist_wraps_os_errors(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    def broken_reset(directory: Path) -> None:
        raise PermissionError(13, "Permission denied", str(directory))

    monkeypatch.setattr(persist, "reset_directory", broken_reset)
    options = PersistenceOptions(enabled=True, directory=tmp_path / "out")

    with pytest.raises(PersistenceError, match="Permission denied"):
        persist_result([{"x": 1}], METADATA, options)


def test_resolve_output_directory_precedence(tmp_path: Path) -> None:
    explicit = PersistenceOptions(directory=tmp_path / "explicit", temp_root=tmp_path / "tmp")
    assert resolve_output_directory(explicit) == tmp_path / "explicit"

    temp = PersistenceOptions(temp_root=tmp_path / "tmp")
    assert resolve_output_directory(temp) == tmp_path / "tmp" / "snowflake-runsql"

    assert resolve_output_directory(PersistenceOptions(), cwd=tmp_path) == tmp_path / "snowflake-results"


def test_relative_directory_resolves_against_cwd(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    options = PersistenceOptions(directory=Path("exports"))
    assert resolve_output_directory(options, cwd=tmp_path) == tmp_path / "exports"

    monkeypatch.chdir(tmp_path)
    assert resolve_output_directory(options) == tmp_path / "exports"


@pytest.mark.parametrize(
    "query_id, expected",
    [
        ("abc-123", "123"),
        ("01b2c3d4-0000-5e6f-0000-abc123", "abc123"),
        ("noseparator", "noseparator"),
        ("", "result"),
        (None, "result"),
        ("trailing-", "result"),
        ("x-we ird/id:7", "we-ird-id-7"),
        ("x-v1.2_ok", "v1.2_ok"),
    ],
)
def test_safe_query_token(query_id: str | None, expected: str) -> None:
    assert safe_query_token(query_id) == expected


@pytest.mark.parametrize(
    "filename, expected",
    [
        ("orders.csv", ("orders", ".csv")),
        ("orders", ("orders", ".csv")),
        ("report.tsv", ("report", ".tsv")),
        ("", ("snowflake-result", ".csv")),
        ("   ", ("snowflake-result", ".csv")),
        (None, ("snowflake-result", ".csv")),
        ("nested/dir/out.txt", ("out", ".txt")),
    ],
)
def test_split_filename(filename: str | None, expected: tuple[str, str]) -> None:
    assert split_filename(filename) == expected


def test_distinct_query_ids_never_collide(tmp_path: Path) -> None:
    first = build_artifact_paths(tmp_path, "snowflake-result.csv", "abc-123")
    second = build_artifact_paths(tmp_path, "snowflake-result.csv", "xyz-124")
    assert first.csv_path != second.csv_path
    assert first.metadata_path != second.metadata_path


def test_same_query_id_maps_to_same_paths(tmp_path: Path) -> None:
    first = build_artifact_paths(tmp_path, "snowflake-result.csv", "abc-123")
    second = build_artifact_paths(tmp_path, "snowflake-result.csv", "abc-123")
    assert first == second
