from __future__ import annotations

import csv
import io
from datetime import date, datetime, timezone
from decimal import Decimal

from runsql_cli.run_sql.encoder import encode_csv


def test_empty_rows_encode_to_empty_string() -> None:
    assert encode_csv([]) == ""


def test_sparse_rows_use_union_of_columns() -> None:
    assert encode_csv([{"a": 1, "b": 2}, {"a": 3}]) == "a,b\n1,2\n3,\n"


def test_columns_follow_first_seen_order() -> None:
    text = encode_csv([{"b": 1}, {"a": 2, "b": 3}, {"c": 4}])
    assert text.splitlines() == ["b,a,c", "1,,", "3,2,", ",,4"]


def test_fields_with_commas_and_quotes_are_quoted() -> None:
    assert encode_csv([{"a": "x,y"}]) == 'a\n"x,y"\n'
    assert encode_csv([{"a": 'he said "hi"'}]) == 'a\n"he said ""hi"""\n'


def test_newlines_are_quoted_and_round_trip_through_csv_reader() -> None:
    rows = [{"note": "line one\nline two", "plain": "ok"}]
    text = encode_csv(rows)
    assert text == 'note,plain\n"line one\nline two",ok\n'
    parsed = list(csv.DictReader(io.StringIO(text)))
    assert parsed == [{"note": "line one\nline two", "plain": "ok"}]


def test_header_names_are_escaped() -> None:
    assert encode_csv([{"total, usd": 5}]).splitlines()[0] == '"total, usd"'


def test_value_stringification() -> None:
    rows = [
        {
            "none": None,
            "flag": True,
            "when": datetime(2024, 5, 1, 12, 30, tzinfo=timezone.utc),
            "day": date(2024, 5, 1),
            "amount": Decimal("12.50"),
            "payload": {"k": [1, 2]},
            "tags": ["a", "b"],
        }
    ]
    lines = encode_csv(rows).splitlines()
    assert lines[0] == "none,flag,when,day,amount,payload,tags"
    assert lines[1] == (
        ',true,2024-05-01T12:30:00+00:00,2024-05-01,12.50,"{""k"":[1,2]}","[""a"",""b""]"'
    )


def test_output_is_deterministic() -> None:
    rows = [{"id": 1, "meta": {"x": 1}}, {"id": 2}]
    assert encode_csv(rows) == encode_csv(list(rows))
