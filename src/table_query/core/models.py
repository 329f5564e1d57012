"""Data models exchanged between the dispatcher and the host.

- PageRequest: what the dispatcher asks the host fetch operation for
- QueryResult: one page of rows plus the pre-pagination total and facets
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional


@dataclass(frozen=True)
class PageRequest:
    """Arguments of a single host fetch call.

    Attributes:
        filters: Typed filter map (timestamps already converted).
        page: 1-based page number.
        page_size: Rows per page, already clamped.
    """

    filters: Dict[str, Any]
    page: int
    page_size: int

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.page_size


@dataclass
class QueryResult:
    """One page of rows returned by the host.

    Attributes:
        rows: Records (column name -> value), already paginated.
        total: Number of rows matching the filters before pagination.
        facets: Optional column -> facet summary, computed over the full
            filtered set. Kept as plain dicts; the core never inspects them.
    """

    rows: List[Dict[str, Any]] = field(default_factory=list)
    total: int = 0
    facets: Optional[Dict[str, Dict[str, Any]]] = None

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "QueryResult":
        """Build a result from a host-supplied mapping.

        Raises:
            ValueError: If ``rows`` or ``total`` is missing or malformed.
        """
        facets = data.get("facets")
        result = cls(
            rows=data.get("rows"),
            total=data.get("total"),
            facets=dict(facets) if isinstance(facets, Mapping) else facets,
        )
        result.validate()
        return result

    def validate(self) -> None:
        """Check the shape the formatters rely on.

        Raises:
            ValueError: If ``rows`` is not a list of mappings, ``total`` is not
                an integer or ``facets`` is neither ``None`` nor a mapping.
        """
        if not isinstance(self.rows, list):
            raise ValueError("Query result 'rows' must be a list")
        for i, row in enumerate(self.rows):
            if not isinstance(row, Mapping):
                raise ValueError(
                    f"Query result row {i} must be a mapping, got {type(row).__name__}"
                )
        if isinstance(self.total, bool) or not isinstance(self.total, int):
            raise ValueError("Query result 'total' must be an integer")
        if self.facets is not None and not isinstance(self.facets, Mapping):
            raise ValueError("Query result 'facets' must be a mapping")

    @classmethod
    def coerce(cls, value: Any) -> "QueryResult":
        if isinstance(value, cls):
            value.validate()
            return value
        if isinstance(value, Mapping):
            return cls.from_mapping(value)
        raise ValueError(f"Unsupported query result type: {type(value).__name__}")


def facet_summary(
    rows: List[Dict[str, Any]],
    total: int,
    *,
    min_value: Any = None,
    max_value: Any = None,
) -> Dict[str, Any]:
    """Return a facet summary dict; ``min``/``max`` only when given."""
    summary: Dict[str, Any] = {"rows": rows, "total": total}
    if min_value is not None:
        summary["min"] = min_value
    if max_value is not None:
        summary["max"] = max_value
    return summary


__all__ = ["PageRequest", "QueryResult", "facet_summary"]
