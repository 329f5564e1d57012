"""Core enumerations used across the package."""

from __future__ import annotations

from enum import Enum


class FieldKind(str, Enum):
    """Tags of the closed field-descriptor variant.

    Values are the names advertised to clients and used in schema YAML files.
    """

    STRING = "string"
    NUMBER = "number"
    BOOLEAN = "boolean"
    TIMESTAMP = "timestamp"
    STRING_LITERAL = "stringLiteral"
    ARRAY = "array"
    SORT = "sort"


class OutputFormat(str, Enum):
    """Encodings a ``query_table`` result can be rendered in."""

    JSON = "json"
    STATS = "stats"
    MARKDOWN = "markdown"
    CSV = "csv"


__all__ = ["FieldKind", "OutputFormat"]
