"""Tests for the page request and query result models."""

from __future__ import annotations

import pytest

from table_query.core.models import PageRequest, QueryResult, facet_summary


def test_page_request_offset():
    assert PageRequest(filters={}, page=1, page_size=50).offset == 0
    assert PageRequest(filters={}, page=3, page_size=20).offset == 40


def test_from_mapping_copies_facets():
    facets = {"level": {"rows": [], "total": 0}}
    result = QueryResult.from_mapping({"rows": [{"a": 1}], "total": 4, "facets": facets})
    assert result.rows == [{"a": 1}]
    assert result.facets == facets
    assert result.facets is not facets


@pytest.mark.parametrize(
    "data, needle",
    [
        ({"total": 1}, "'rows'"),
        ({"rows": [[1, 2]], "total": 1}, "row 0"),
        ({"rows": [{"a": 1}, "b"], "total": 2}, "row 1"),
        ({"rows": [], "total": "3"}, "'total'"),
        ({"rows": [], "total": True}, "'total'"),
        ({"rows": [], "total": 0, "facets": [1]}, "'facets'"),
    ],
)
def test_from_mapping_rejects_malformed_results(data, needle):
    with pytest.raises(ValueError, match=needle):
        QueryResult.from_mapping(data)


def test_coerce_validates_instances():
    ok = QueryResult(rows=[{"a": 1}], total=1)
    assert QueryResult.coerce(ok) is ok
    with pytest.raises(ValueError, match="row 0"):
        QueryResult.coerce(QueryResult(rows=[("a", 1)], total=1))
    with pytest.raises(ValueError, match="Unsupported"):
        QueryResult.coerce([{"a": 1}])


def test_facet_summary_includes_bounds_only_when_given():
    assert facet_summary([], 0) == {"rows": [], "total": 0}
    assert facet_summary([], 2, min_value=0, max_value=9) == {
        "rows": [],
        "total": 2,
        "min": 0,
        "max": 9,
    }
