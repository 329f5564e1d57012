"""Translate field descriptors into JSON-Schema-shaped input descriptions.

The output is advertised as the ``query_table`` filter shape and returned
verbatim by ``describe_schema``. Translation is purely structural.
"""

from __future__ import annotations

from typing import Any, Dict, Mapping

from .enums import FieldKind
from .fields import FieldDescriptor

TIMESTAMP_NOTE = "Unix timestamp in milliseconds"

_PRIMITIVE_TYPES = {
    FieldKind.STRING: "string",
    FieldKind.NUMBER: "number",
    FieldKind.BOOLEAN: "boolean",
}


def field_to_json_schema(descriptor: FieldDescriptor) -> Dict[str, Any]:
    """Return the structural description of a single descriptor.

    Raises:
        TypeError: If the descriptor kind is not part of the closed variant.

    Examples:
        >>> from table_query.core.fields import array, timestamp
        >>> field_to_json_schema(array(timestamp()))
        {'type': 'array', 'items': {'type': 'number', 'description': 'Unix timestamp in milliseconds'}}
    """
    kind = descriptor.kind
    if kind in _PRIMITIVE_TYPES:
        out: Dict[str, Any] = {"type": _PRIMITIVE_TYPES[kind]}
    elif kind == FieldKind.TIMESTAMP:
        note = TIMESTAMP_NOTE
        if descriptor.description:
            note = f"{descriptor.description} ({TIMESTAMP_NOTE})"
        return {"type": "number", "description": note}
    elif kind == FieldKind.STRING_LITERAL:
        out = {"type": "string", "enum": list(descriptor.literals)}
    elif kind == FieldKind.ARRAY:
        out = {"type": "array", "items": field_to_json_schema(descriptor.item)}
    elif kind == FieldKind.SORT:
        id_schema: Dict[str, Any] = {"type": "string"}
        if descriptor.columns:
            id_schema["enum"] = list(descriptor.columns)
        out = {
            "type": "object",
            "properties": {
                "id": id_schema,
                "desc": {"type": "boolean"},
            },
            "required": ["id", "desc"],
        }
    else:
        raise TypeError(f"Unsupported field kind: {kind!r}")

    if descriptor.description:
        out["description"] = descriptor.description
    return out


def schema_to_json_schema(schema: Mapping[str, FieldDescriptor]) -> Dict[str, Any]:
    """Return an object description with one property per schema entry, in order."""
    return {
        "type": "object",
        "properties": {name: field_to_json_schema(d) for name, d in schema.items()},
    }


__all__ = ["TIMESTAMP_NOTE", "field_to_json_schema", "schema_to_json_schema"]
