"""Tool descriptions and ``query_table`` argument validation."""

from __future__ import annotations

from dataclasses import dataclass
from numbers import Real
from typing import Any, Dict, List, Mapping

from table_query.core.config import (
    DEFAULT_FORMAT,
    DEFAULT_PAGE,
    DEFAULT_PAGE_SIZE,
    DESCRIBE_TOOL,
    DESCRIBE_TOOL_DESCRIPTION,
    FORMAT_NAMES,
    MAX_PAGE_SIZE,
    QUERY_TOOL,
    QUERY_TOOL_DESCRIPTION,
    clamp_page_size,
)
from table_query.core.errors import InvalidParamsError
from table_query.core.fields import FieldDescriptor
from table_query.core.schema_bridge import schema_to_json_schema


@dataclass(frozen=True)
class QueryArguments:
    """Validated ``query_table`` arguments; filters are still raw JSON."""

    filters: Dict[str, Any]
    page: int
    page_size: int
    format: str


def _positive_int(arguments: Mapping[str, Any], key: str, default: int) -> int:
    value = arguments.get(key)
    if value is None:
        return default
    if isinstance(value, bool) or not isinstance(value, Real):
        raise InvalidParamsError(f"'{key}' must be an integer, got {value!r}", key)
    if isinstance(value, float):
        if not value.is_integer():
            raise InvalidParamsError(f"'{key}' must be an integer, got {value!r}", key)
        value = int(value)
    if value < 1:
        raise InvalidParamsError(f"'{key}' must be >= 1, got {value!r}", key)
    return int(value)


def parse_query_arguments(arguments: Any) -> QueryArguments:
    """Validate raw ``query_table`` arguments.

    ``pageSize`` above the maximum is clamped; every other violation raises.

    Raises:
        InvalidParamsError: On a malformed or out-of-range argument.
    """
    if arguments is None:
        arguments = {}
    if not isinstance(arguments, Mapping):
        raise InvalidParamsError("Tool arguments must be an object", "arguments")

    page = _positive_int(arguments, "page", DEFAULT_PAGE)
    page_size = clamp_page_size(_positive_int(arguments, "pageSize", DEFAULT_PAGE_SIZE))

    fmt = arguments.get("format")
    if fmt is None:
        fmt = DEFAULT_FORMAT
    if fmt not in FORMAT_NAMES:
        raise InvalidParamsError(
            f"'format' must be one of {', '.join(FORMAT_NAMES)}, got {fmt!r}", "format"
        )

    filters = arguments.get("filters")
    if filters is None:
        filters = {}
    if not isinstance(filters, Mapping):
        raise InvalidParamsError("'filters' must be an object", "filters")

    return QueryArguments(filters=dict(filters), page=page, page_size=page_size, format=fmt)


def query_input_schema(schema: Mapping[str, FieldDescriptor]) -> Dict[str, Any]:
    """Input description of ``query_table``: filters plus paging and format."""
    return {
        "type": "object",
        "properties": {
            "filters": schema_to_json_schema(schema),
            "page": {
                "type": "integer",
                "minimum": 1,
                "default": DEFAULT_PAGE,
                "description": "1-based page number",
            },
            "pageSize": {
                "type": "integer",
                "minimum": 1,
                "maximum": MAX_PAGE_SIZE,
                "default": DEFAULT_PAGE_SIZE,
                "description": f"Rows per page; values above {MAX_PAGE_SIZE} are clamped",
            },
            "format": {
                "type": "string",
                "enum": list(FORMAT_NAMES),
                "default": DEFAULT_FORMAT,
            },
        },
    }


def tool_definitions(schema: Mapping[str, FieldDescriptor]) -> List[Dict[str, Any]]:
    return [
        {
            "name": QUERY_TOOL,
            "description": QUERY_TOOL_DESCRIPTION,
            "inputSchema": query_input_schema(schema),
        },
        {
            "name": DESCRIBE_TOOL,
            "description": DESCRIBE_TOOL_DESCRIPTION,
            "inputSchema": {"type": "object", "properties": {}},
        },
    ]


__all__ = [
    "QueryArguments",
    "parse_query_arguments",
    "query_input_schema",
    "tool_definitions",
]
