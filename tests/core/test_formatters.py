"""Tests for result formatters."""

from __future__ import annotations

import pytest

from table_query.core.enums import OutputFormat
from table_query.core.formatters import (
    EMPTY_MARKDOWN,
    FORMATTERS,
    format_csv,
    format_json,
    format_markdown,
    format_result,
    format_stats,
    render_csv,
    render_markdown_table,
)
from table_query.core.models import QueryResult

FACETS = {"level": {"rows": [{"value": "error", "count": 3}], "total": 1}}


@pytest.fixture
def result() -> QueryResult:
    return QueryResult(
        rows=[
            {"level": "error", "message": "disk full", "retried": True},
            {"level": "info", "message": "a|b", "retried": None},
        ],
        total=7,
        facets=FACETS,
    )


def test_json_never_includes_facets(result):
    out = format_json(result)
    assert out == {"rows": result.rows, "total": 7}
    assert "facets" not in out


def test_stats_includes_facets_unchanged(result):
    out = format_stats(result)
    assert out["facets"] is FACETS
    assert out["total"] == 7


def test_stats_omits_facets_when_absent():
    out = format_stats(QueryResult(rows=[], total=0))
    assert "facets" not in out


def test_markdown_table(result):
    out = format_markdown(result)
    assert set(out) == {"markdown", "total"}
    assert out["markdown"].splitlines() == [
        "| level | message | retried |",
        "| --- | --- | --- |",
        "| error | disk full | true |",
        "| info | a\\|b |  |",
    ]


def test_markdown_replaces_newlines():
    text = render_markdown_table([{"message": "line one\nline two"}])
    assert "line one<br>line two" in text


def test_csv_quotes_special_fields():
    rows = [
        {"message": 'said "hi"', "count": 1},
        {"message": "a,b", "count": None},
        {"message": "two\nlines", "count": 3},
        {"message": "a\rb", "count": 4},
        {"message": "crlf\r\nend", "count": 5},
    ]
    assert render_csv(rows) == (
        'message,count\n"said ""hi""",1\n"a,b",\n"two\nlines",3\n'
        '"a\rb",4\n"crlf\r\nend",5\n'
    )


def test_csv_lone_carriage_return_is_quoted():
    assert render_csv([{"m": "a\rb"}]) == 'm\n"a\rb"\n'
    assert render_csv([{"a\rb": 1}]) == '"a\rb"\n1\n'


def test_csv_missing_keys_are_empty_fields():
    assert render_csv([{"a": 1, "b": 2}, {"a": 3}]) == "a,b\n1,2\n3,\n"


def test_csv_and_markdown_drop_rows(result):
    assert set(format_csv(result)) == {"csv", "total"}
    assert "rows" not in format_markdown(result)


@pytest.mark.parametrize("fmt", [f.value for f in OutputFormat])
def test_every_format_handles_empty_rows(fmt):
    out = format_result(QueryResult(rows=[], total=0), fmt)
    assert out["total"] == 0
    if fmt in ("markdown", "csv"):
        assert "rows" not in out


def test_empty_text_renderings():
    assert render_markdown_table([]) == EMPTY_MARKDOWN
    assert render_csv([]) == ""


def test_formatter_table_covers_every_format():
    assert set(FORMATTERS) == set(OutputFormat)


def test_unknown_format_raises_value_error(result):
    with pytest.raises(ValueError, match="xml"):
        format_result(result, "xml")
