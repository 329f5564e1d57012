"""Core building blocks: field model, schema bridge, deserializer, formatters.

Everything here is pure; the protocol layer composes these with the host
fetch operation.
"""

from .enums import FieldKind, OutputFormat
from .fields import FieldDescriptor, freeze_schema
from .schema_bridge import field_to_json_schema, schema_to_json_schema
from .deserialize import deserialize_filters, millis_to_datetime, datetime_to_millis
from .formatters import FORMATTERS, format_result
from .models import PageRequest, QueryResult
from .schema_loader import load_schema

__all__ = [
    "FieldKind",
    "OutputFormat",
    "FieldDescriptor",
    "freeze_schema",
    "field_to_json_schema",
    "schema_to_json_schema",
    "deserialize_filters",
    "millis_to_datetime",
    "datetime_to_millis",
    "FORMATTERS",
    "format_result",
    "PageRequest",
    "QueryResult",
    "load_schema",
]
