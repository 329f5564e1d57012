"""Tests for the field-type model."""

from __future__ import annotations

import pytest

from table_query.core.enums import FieldKind
from table_query.core.fields import (
    LEAF_KINDS,
    FieldDescriptor,
    array,
    boolean,
    freeze_schema,
    literal,
    number,
    sort,
    string,
    timestamp,
)


def test_leaf_constructors_set_kind():
    assert string().kind == FieldKind.STRING
    assert number().kind == FieldKind.NUMBER
    assert boolean().kind == FieldKind.BOOLEAN
    assert timestamp().kind == FieldKind.TIMESTAMP
    assert not string().is_composite


def test_literal_keeps_values_in_order():
    d = literal("warn", "debug", "error")
    assert d.kind == FieldKind.STRING_LITERAL
    assert d.literals == ("warn", "debug", "error")


def test_literal_requires_values():
    with pytest.raises(ValueError, match="at least one value"):
        literal()


def test_array_and_sort_are_composite():
    assert array(string()).is_composite
    assert sort().is_composite
    assert sort(["timestamp"]).columns == ("timestamp",)


def test_array_requires_descriptor_item():
    with pytest.raises(ValueError):
        FieldDescriptor(FieldKind.ARRAY)
    with pytest.raises(ValueError, match="sort"):
        array(sort())


def test_leaf_kind_rejects_composite_attributes():
    with pytest.raises(ValueError):
        FieldDescriptor(FieldKind.STRING, literals=("a",))
    with pytest.raises(ValueError):
        FieldDescriptor(FieldKind.NUMBER, item=string())
    with pytest.raises(ValueError):
        FieldDescriptor(FieldKind.BOOLEAN, columns=("a",))


def test_unknown_kind_is_type_error():
    with pytest.raises(TypeError):
        FieldDescriptor("string")


def test_descriptors_are_immutable():
    d = string()
    with pytest.raises(AttributeError):
        d.kind = FieldKind.NUMBER  # type: ignore[misc]


def test_freeze_schema_is_read_only_and_ordered():
    source = {"b": string(), "a": number()}
    frozen = freeze_schema(source)
    assert list(frozen) == ["b", "a"]
    with pytest.raises(TypeError):
        frozen["c"] = boolean()  # type: ignore[index]
    source["c"] = boolean()
    assert "c" not in frozen


def test_freeze_schema_rejects_non_descriptors():
    with pytest.raises(TypeError, match="level"):
        freeze_schema({"level": "stringLiteral"})


@pytest.mark.parametrize("item", [string(), number(), boolean(), timestamp(), literal("a")])
def test_array_accepts_every_leaf_kind(item):
    assert item.kind in LEAF_KINDS
    assert array(item).item is item


def test_nested_arrays_are_allowed():
    assert array(array(number())).item.item.kind == FieldKind.NUMBER
