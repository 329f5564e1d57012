"""Shared pytest fixtures: a log-table schema, sample rows and a fake host."""

from __future__ import annotations

from datetime import datetime, timedelta
from typing import Any, Dict, List, Optional

import polars as pl
import pytest

from table_query.core.fields import array, literal, sort, string, timestamp
from table_query.core.models import PageRequest, QueryResult, facet_summary
from table_query.protocol.dispatcher import Dispatcher

LEVELS = ["debug", "info", "warn", "error"]
BASE_TIME = datetime(2024, 1, 1, 12, 0, 0)


@pytest.fixture
def log_schema():
    """Schema of an application log table."""
    return {
        "level": array(literal(*LEVELS)),
        "service": array(string()),
        "message": string(),
        "timestamp": array(timestamp()),
        "sorting": sort(["timestamp", "level"]),
    }


@pytest.fixture
def error_rows() -> List[Dict[str, Any]]:
    """Twelve error records, one minute apart."""
    return [
        {
            "timestamp": 1704110400000 + i * 60_000,
            "level": "error",
            "service": "api" if i % 2 else "worker",
            "message": f"failure {i}",
        }
        for i in range(12)
    ]


class FakeHost:
    """Async fetch operation that slices a fixed row list and records calls."""

    def __init__(self, rows: List[Dict[str, Any]], facets: Optional[Dict[str, Any]] = None):
        self.rows = rows
        self.facets = facets
        self.calls: List[PageRequest] = []

    async def fetch_page(self, request: PageRequest) -> QueryResult:
        self.calls.append(request)
        page = self.rows[request.offset : request.offset + request.page_size]
        return QueryResult(rows=page, total=len(self.rows), facets=self.facets)


@pytest.fixture
def fake_host(error_rows) -> FakeHost:
    facets = {"level": facet_summary([{"value": "error", "count": 12}], 1)}
    return FakeHost(error_rows, facets)


@pytest.fixture
def dispatcher(log_schema, fake_host) -> Dispatcher:
    return Dispatcher(log_schema, fake_host.fetch_page)


def _tools_call(name: str, arguments: Any = None, rpc_id: Any = 1) -> Dict[str, Any]:
    params: Dict[str, Any] = {"name": name}
    if arguments is not None:
        params["arguments"] = arguments
    return {"jsonrpc": "2.0", "id": rpc_id, "method": "tools/call", "params": params}


@pytest.fixture
def call_tool():
    """Builder for tools/call request envelopes."""
    return _tools_call


@pytest.fixture
def log_frame() -> pl.DataFrame:
    """Twenty log records across three services and four levels."""
    records = []
    for i in range(20):
        records.append(
            {
                "timestamp": BASE_TIME + timedelta(minutes=i),
                "level": LEVELS[i % 4],
                "service": ["api", "worker", "billing"][i % 3],
                "message": f"Request {i} {'timed out' if i % 5 == 0 else 'ok'}",
                "latency_ms": float(10 * i),
                "retried": i % 2 == 0,
            }
        )
    return pl.DataFrame(records)
