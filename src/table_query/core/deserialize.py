"""Convert raw wire filter values into typed filter values.

Only timestamp shapes are converted; everything else is passed through
unchanged so the host fetch operation stays the authority on meaning.
"""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from numbers import Real
from typing import Any, Dict, List, Mapping

from .enums import FieldKind
from .errors import FilterValueError
from .fields import FieldDescriptor

EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)
_ONE_MS = timedelta(milliseconds=1)


def millis_to_datetime(value: Real) -> datetime:
    """Convert epoch milliseconds to an aware UTC datetime.

    Uses timedelta arithmetic so integral inputs round-trip exactly through
    :func:`datetime_to_millis`.
    """
    if isinstance(value, int):
        return EPOCH + timedelta(milliseconds=value)
    return EPOCH + timedelta(milliseconds=float(value))


def datetime_to_millis(value: datetime) -> int:
    """Return epoch milliseconds for ``value`` (naive values are taken as UTC)."""
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return (value - EPOCH) // _ONE_MS


def _is_number(value: Any) -> bool:
    return isinstance(value, Real) and not isinstance(value, bool)


def _convert_timestamp(name: str, value: Any) -> Any:
    if value is None:
        return None
    if not _is_number(value):
        raise FilterValueError(name, f"expected a millisecond timestamp, got {value!r}")
    try:
        return millis_to_datetime(value)
    except (OverflowError, ValueError) as e:
        raise FilterValueError(name, f"timestamp out of range: {value!r}") from e


def _convert_timestamp_list(name: str, value: Any) -> Any:
    if value is None:
        return None
    if not isinstance(value, list):
        raise FilterValueError(name, f"expected a list of timestamps, got {value!r}")
    converted: List[datetime] = []
    for element in value:
        if not _is_number(element):
            raise FilterValueError(
                name, f"expected a list of timestamps, found element {element!r}"
            )
        converted.append(_convert_timestamp(name, element))
    return converted


def deserialize_filters(
    schema: Mapping[str, FieldDescriptor], raw: Mapping[str, Any]
) -> Dict[str, Any]:
    """Return the typed filter map for ``raw``.

    Keys missing from ``schema`` are kept as-is; keys missing from ``raw``
    are not defaulted.

    Raises:
        FilterValueError: If a timestamp-typed value has the wrong shape.
    """
    typed: Dict[str, Any] = {}
    for name, value in raw.items():
        descriptor = schema.get(name)
        if descriptor is None:
            typed[name] = value
        elif descriptor.kind == FieldKind.TIMESTAMP:
            typed[name] = _convert_timestamp(name, value)
        elif (
            descriptor.kind == FieldKind.ARRAY
            and descriptor.item.kind == FieldKind.TIMESTAMP
        ):
            typed[name] = _convert_timestamp_list(name, value)
        else:
            typed[name] = value
    return typed


__all__ = [
    "EPOCH",
    "millis_to_datetime",
    "datetime_to_millis",
    "deserialize_filters",
]
