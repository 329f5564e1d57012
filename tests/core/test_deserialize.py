"""Tests for raw filter value deserialization."""

from __future__ import annotations

from datetime import datetime, timezone

import pytest

from table_query.core.deserialize import (
    EPOCH,
    datetime_to_millis,
    deserialize_filters,
    millis_to_datetime,
)
from table_query.core.errors import FilterValueError
from table_query.core.fields import array, boolean, literal, number, sort, string, timestamp


SCHEMA = {
    "message": string(),
    "latency": number(),
    "retried": boolean(),
    "level": literal("info", "error"),
    "services": array(string()),
    "at": timestamp(),
    "window": array(timestamp()),
    "sorting": sort(),
}


def test_timestamp_becomes_aware_utc_datetime():
    out = deserialize_filters(SCHEMA, {"at": 1704067200000})
    assert out["at"] == datetime(2024, 1, 1, tzinfo=timezone.utc)
    assert out["at"].tzinfo is not None


@pytest.mark.parametrize(
    "millis", [0, 1, -1, 999, 1704067200123, 253402300799999, -62135596800000]
)
def test_timestamp_round_trip_is_exact(millis):
    assert datetime_to_millis(millis_to_datetime(millis)) == millis


def test_array_of_timestamps_converted_elementwise():
    out = deserialize_filters(SCHEMA, {"window": [1000, 0, 2000]})
    assert out["window"] == [
        EPOCH.replace(second=1),
        EPOCH,
        EPOCH.replace(second=2),
    ]


def test_non_timestamp_values_are_identity():
    raw = {
        "message": "timeout",
        "latency": 12.5,
        "retried": True,
        "level": "error",
        "services": ["api", "worker"],
        "sorting": {"id": "at", "desc": True},
    }
    out = deserialize_filters(SCHEMA, raw)
    for key, value in raw.items():
        assert out[key] is value


def test_unknown_keys_pass_through_and_absent_keys_stay_absent():
    marker = object()
    out = deserialize_filters(SCHEMA, {"extra": marker})
    assert out == {"extra": marker}
    assert "at" not in out


def test_null_timestamp_passes_through():
    assert deserialize_filters(SCHEMA, {"at": None, "window": None}) == {
        "at": None,
        "window": None,
    }


@pytest.mark.parametrize(
    "raw",
    [
        {"at": "2024-01-01"},
        {"at": True},
        {"at": [1000]},
        {"window": 1000},
        {"window": [1000, "later"]},
        {"window": [False]},
    ],
)
def test_malformed_timestamps_raise_filter_value_error(raw):
    with pytest.raises(FilterValueError) as exc_info:
        deserialize_filters(SCHEMA, raw)
    assert exc_info.value.name == next(iter(raw))


def test_out_of_range_timestamp_is_filter_value_error():
    with pytest.raises(FilterValueError, match="out of range"):
        deserialize_filters(SCHEMA, {"at": 10**20})


def test_naive_datetime_taken_as_utc():
    assert datetime_to_millis(datetime(1970, 1, 1, 0, 0, 1)) == 1000
