"""Field-type model shared by every component.

A schema is an ordered mapping of filter name to :class:`FieldDescriptor`.
Descriptors form a closed tagged variant keyed by :class:`FieldKind`; only
``array`` and ``sort`` are composite.
"""

from __future__ import annotations

from dataclasses import dataclass
from types import MappingProxyType
from typing import Iterable, Mapping, Optional, Tuple

from .enums import FieldKind

LEAF_KINDS = frozenset(
    {
        FieldKind.STRING,
        FieldKind.NUMBER,
        FieldKind.BOOLEAN,
        FieldKind.TIMESTAMP,
        FieldKind.STRING_LITERAL,
    }
)


@dataclass(frozen=True)
class FieldDescriptor:
    """Declarative description of one filter's value type.

    Attributes:
        kind: Variant tag.
        literals: Allowed values of a ``stringLiteral`` field (empty otherwise).
        item: Item descriptor of an ``array`` field (``None`` otherwise).
        columns: Optional sortable column ids of a ``sort`` field.
        description: Optional human-readable note advertised to clients.

    Examples:
        >>> literal("debug", "error").literals
        ('debug', 'error')
        >>> array(timestamp()).item.kind
        <FieldKind.TIMESTAMP: 'timestamp'>
    """

    kind: FieldKind
    literals: Tuple[str, ...] = ()
    item: Optional["FieldDescriptor"] = None
    columns: Optional[Tuple[str, ...]] = None
    description: Optional[str] = None

    def __post_init__(self) -> None:
        """Validate per-kind invariants."""
        if not isinstance(self.kind, FieldKind):
            raise TypeError(f"Unknown field kind: {self.kind!r}")
        if self.kind == FieldKind.STRING_LITERAL:
            if not self.literals:
                raise ValueError("stringLiteral field requires at least one value")
            if not all(isinstance(v, str) for v in self.literals):
                raise ValueError("stringLiteral values must be strings")
        elif self.literals:
            raise ValueError(f"{self.kind.value} field cannot carry literal values")

        if self.kind == FieldKind.ARRAY:
            if not isinstance(self.item, FieldDescriptor):
                raise ValueError("array field requires an item descriptor")
            if self.item.kind not in LEAF_KINDS and self.item.kind != FieldKind.ARRAY:
                raise ValueError(f"array items cannot be {self.item.kind.value} fields")
        elif self.item is not None:
            raise ValueError(f"{self.kind.value} field cannot carry an item descriptor")

        if self.columns is not None and self.kind != FieldKind.SORT:
            raise ValueError(f"{self.kind.value} field cannot carry sort columns")

    @property
    def is_composite(self) -> bool:
        return self.kind in (FieldKind.ARRAY, FieldKind.SORT)


def string(description: Optional[str] = None) -> FieldDescriptor:
    return FieldDescriptor(FieldKind.STRING, description=description)


def number(description: Optional[str] = None) -> FieldDescriptor:
    return FieldDescriptor(FieldKind.NUMBER, description=description)


def boolean(description: Optional[str] = None) -> FieldDescriptor:
    return FieldDescriptor(FieldKind.BOOLEAN, description=description)


def timestamp(description: Optional[str] = None) -> FieldDescriptor:
    return FieldDescriptor(FieldKind.TIMESTAMP, description=description)


def literal(*values: str, description: Optional[str] = None) -> FieldDescriptor:
    return FieldDescriptor(
        FieldKind.STRING_LITERAL, literals=tuple(values), description=description
    )


def array(item: FieldDescriptor, description: Optional[str] = None) -> FieldDescriptor:
    return FieldDescriptor(FieldKind.ARRAY, item=item, description=description)


def sort(
    columns: Optional[Iterable[str]] = None, description: Optional[str] = None
) -> FieldDescriptor:
    return FieldDescriptor(
        FieldKind.SORT,
        columns=tuple(columns) if columns is not None else None,
        description=description,
    )


def freeze_schema(schema: Mapping[str, FieldDescriptor]) -> Mapping[str, FieldDescriptor]:
    """Return a read-only, order-preserving copy of ``schema``.

    Raises:
        TypeError: If a key is not a string or a value is not a descriptor.
    """
    copied = {}
    for name, descriptor in schema.items():
        if not isinstance(name, str):
            raise TypeError(f"Schema keys must be strings, got {name!r}")
        if not isinstance(descriptor, FieldDescriptor):
            raise TypeError(f"Schema entry '{name}' is not a FieldDescriptor")
        copied[name] = descriptor
    return MappingProxyType(copied)


__all__ = [
    "FieldDescriptor",
    "LEAF_KINDS",
    "string",
    "number",
    "boolean",
    "timestamp",
    "literal",
    "array",
    "sort",
    "freeze_schema",
]
