from __future__ import annotations

from pathlib import Path
from typing import Any, Dict, Mapping

import yaml

from .enums import FieldKind
from .fields import FieldDescriptor


def _parse_field(name: str, entry: Any) -> FieldDescriptor:
    """Build a descriptor from one YAML entry (a mapping or a bare type name)."""
    if isinstance(entry, str):
        entry = {"type": entry}
    if not isinstance(entry, Mapping):
        raise ValueError(f"Field '{name}': expected a mapping, got {type(entry).__name__}")

    type_name = entry.get("type")
    try:
        kind = FieldKind(type_name)
    except ValueError as e:
        raise ValueError(f"Field '{name}': unknown type {type_name!r}") from e

    kwargs: Dict[str, Any] = {}
    if entry.get("description") is not None:
        kwargs["description"] = str(entry["description"])
    if kind == FieldKind.STRING_LITERAL:
        kwargs["literals"] = tuple(str(v) for v in entry.get("values") or [])
    elif kind == FieldKind.ARRAY:
        if "items" not in entry:
            raise ValueError(f"Field '{name}': array field requires 'items'")
        kwargs["item"] = _parse_field(f"{name}[]", entry["items"])
    elif kind == FieldKind.SORT and entry.get("columns"):
        kwargs["columns"] = tuple(str(c) for c in entry["columns"])

    try:
        return FieldDescriptor(kind, **kwargs)
    except ValueError as e:
        raise ValueError(f"Field '{name}': {e}") from e


def parse_schema(data: Mapping[str, Any]) -> Dict[str, FieldDescriptor]:
    """Parse a ``{"fields": {...}}`` document into an ordered schema."""
    fields = data.get("fields")
    if not isinstance(fields, Mapping) or not fields:
        raise ValueError("Schema document must define a non-empty 'fields' mapping")
    return {str(name): _parse_field(str(name), entry) for name, entry in fields.items()}


def load_schema(schema_file: Path) -> Dict[str, FieldDescriptor]:
    """Load a schema YAML file.

    Raises:
        FileNotFoundError: If the file does not exist.
        ValueError: If the document or one of its fields is malformed.
    """
    if not schema_file.exists():
        raise FileNotFoundError(f"Schema file not found: {schema_file}")
    with schema_file.open("r", encoding="utf-8") as f:
        data = yaml.safe_load(f) or {}
    if not isinstance(data, Mapping):
        raise ValueError(f"Schema file {schema_file} must contain a mapping")
    return parse_schema(data)


__all__ = ["load_schema", "parse_schema"]
