"""Reference host: serve pages of a Polars frame to the dispatcher.

Filter semantics follow the declared field kind:
 - string: case-insensitive substring
 - number / boolean / stringLiteral / timestamp: equality
 - array: membership; an array of two timestamps is an inclusive range
 - sort: order by the named column
Unknown filter keys, empty lists and null values are ignored.
"""

from __future__ import annotations

import asyncio
import logging
from datetime import date, datetime, time, timezone
from pathlib import Path
from typing import Any, Dict, Iterable, List, Mapping, Optional, Tuple, Union

import polars as pl

from table_query.core.deserialize import datetime_to_millis
from table_query.core.enums import FieldKind
from table_query.core.fields import FieldDescriptor, freeze_schema
from table_query.core.models import PageRequest, QueryResult, facet_summary

logger = logging.getLogger(__name__)

DEFAULT_FACET_LIMIT = 20
_FACET_KINDS = (FieldKind.STRING_LITERAL, FieldKind.BOOLEAN, FieldKind.NUMBER)


def _jsonable(value: Any) -> Any:
    """Return a JSON-compatible rendering of a Polars cell value."""
    if isinstance(value, datetime):
        return datetime_to_millis(value)
    if isinstance(value, (date, time)):
        return value.isoformat()
    return value


def default_facet_columns(
    schema: Mapping[str, FieldDescriptor], columns: Iterable[str]
) -> Tuple[str, ...]:
    """Facet every literal, boolean and number field that is a frame column."""
    available = set(columns)
    return tuple(
        name
        for name, d in schema.items()
        if name in available
        and (
            d.kind in _FACET_KINDS
            or (d.kind == FieldKind.ARRAY and d.item.kind in _FACET_KINDS)
        )
    )


def scan_table(path: Path) -> pl.LazyFrame:
    """Return a LazyFrame scanning a CSV or Parquet file without materializing."""
    if not path.exists():
        raise FileNotFoundError(f"Table not found: {path}")
    suffix = path.suffix.lower()
    if suffix == ".csv":
        return pl.scan_csv(str(path), try_parse_dates=True)
    if suffix in (".parquet", ".pq"):
        return pl.scan_parquet(str(path))
    raise ValueError(f"Unsupported table format: {path.name} (expected .csv or .parquet)")


class PolarsTableSource:
    """Host fetch operation over a Polars frame.

    Args:
        frame: Data to serve (lazy or eager).
        schema: Filter schema; field names double as column names.
        facet_columns: Columns to summarize; defaults to every literal,
            boolean and number field present in the frame.
        facet_limit: Maximum value/count pairs per facet.
    """

    def __init__(
        self,
        frame: Union[pl.LazyFrame, pl.DataFrame],
        schema: Mapping[str, FieldDescriptor],
        *,
        facet_columns: Optional[Iterable[str]] = None,
        facet_limit: int = DEFAULT_FACET_LIMIT,
    ) -> None:
        self._lf = frame.lazy() if isinstance(frame, pl.DataFrame) else frame
        self.schema = freeze_schema(schema)
        self._dtypes: Dict[str, pl.DataType] = dict(self._lf.collect_schema())
        if facet_columns is None:
            self.facet_columns = default_facet_columns(self.schema, self._dtypes)
        else:
            missing = [c for c in facet_columns if c not in self._dtypes]
            if missing:
                raise ValueError(f"Facet columns not in table: {', '.join(missing)}")
            self.facet_columns = tuple(facet_columns)
        self.facet_limit = int(facet_limit)

    @classmethod
    def from_path(
        cls, path: Path, schema: Mapping[str, FieldDescriptor], **kwargs: Any
    ) -> "PolarsTableSource":
        return cls(scan_table(path), schema, **kwargs)

    @property
    def columns(self) -> List[str]:
        return list(self._dtypes)

    async def fetch_page(self, request: PageRequest) -> QueryResult:
        """Return one page of filtered rows with pre-pagination total and facets."""
        return await asyncio.to_thread(self._fetch_sync, request)

    # -------------------------
    # MARK: Query building
    # -------------------------

    def _timestamp_operand(self, column: str, value: datetime) -> Any:
        dtype = self._dtypes[column]
        if isinstance(dtype, pl.Datetime):
            if dtype.time_zone is None:
                return value.astimezone(timezone.utc).replace(tzinfo=None)
            return value
        if dtype.is_numeric():
            return datetime_to_millis(value)
        return value.isoformat()

    def _filter_expr(
        self, column: str, descriptor: FieldDescriptor, value: Any
    ) -> Optional[pl.Expr]:
        c = pl.col(column)
        kind = descriptor.kind
        if kind == FieldKind.STRING:
            return (
                c.cast(pl.Utf8, strict=False)
                .str.to_lowercase()
                .str.contains(str(value).lower(), literal=True)
            )
        if kind == FieldKind.TIMESTAMP:
            return c == self._timestamp_operand(column, value)
        if kind in (FieldKind.NUMBER, FieldKind.BOOLEAN, FieldKind.STRING_LITERAL):
            return c == value
        if kind == FieldKind.ARRAY:
            if not isinstance(value, list) or not value:
                return None
            if descriptor.item.kind == FieldKind.TIMESTAMP:
                operands = [self._timestamp_operand(column, v) for v in value]
                if len(operands) == 2:
                    start, end = sorted(operands)
                    return c.is_between(start, end, closed="both")
                return c.is_in(operands)
            return c.is_in(value)
        return None

    def _build_query(self, filters: Mapping[str, Any]) -> pl.LazyFrame:
        lf = self._lf
        exprs: List[pl.Expr] = []
        order: Optional[Tuple[str, bool]] = None
        for name, value in filters.items():
            descriptor = self.schema.get(name)
            if descriptor is None or value is None:
                continue
            if descriptor.kind == FieldKind.SORT:
                if isinstance(value, Mapping) and value.get("id") in self._dtypes:
                    order = (value["id"], bool(value.get("desc", False)))
                continue
            if name not in self._dtypes:
                logger.debug("Ignoring filter on unknown column: %s", name)
                continue
            expr = self._filter_expr(name, descriptor, value)
            if expr is not None:
                exprs.append(expr)
        if exprs:
            lf = lf.filter(pl.all_horizontal(exprs))
        if order is not None:
            lf = lf.sort(order[0], descending=order[1], nulls_last=True, maintain_order=True)
        return lf

    # -------------------------
    # MARK: Materialization
    # -------------------------

    def _facet(self, df: pl.DataFrame, column: str) -> Dict[str, Any]:
        series = df.get_column(column)
        if isinstance(series.dtype, pl.List):
            series = series.explode()
        counts = (
            series.to_frame("value")
            .group_by("value")
            .agg(pl.len().alias("count"))
            .sort(["count", "value"], descending=[True, False], nulls_last=True)
            .head(self.facet_limit)
        )
        rows = [
            {"value": _jsonable(r["value"]), "count": int(r["count"])}
            for r in counts.to_dicts()
        ]
        min_value = max_value = None
        if series.dtype.is_numeric() and series.drop_nulls().len() > 0:
            min_value = series.min()
            max_value = series.max()
        return facet_summary(
            rows, int(series.n_unique()), min_value=min_value, max_value=max_value
        )

    def _fetch_sync(self, request: PageRequest) -> QueryResult:
        df = self._build_query(request.filters).collect()
        page = df.slice(request.offset, request.page_size)
        rows = [{k: _jsonable(v) for k, v in r.items()} for r in page.to_dicts()]
        facets = None
        if self.facet_columns:
            facets = {c: self._facet(df, c) for c in self.facet_columns}
        logger.debug(
            "Fetched page %d (%d rows of %d matching)", request.page, len(rows), df.height
        )
        return QueryResult(rows=rows, total=df.height, facets=facets)


__all__ = ["PolarsTableSource", "scan_table", "default_facet_columns", "DEFAULT_FACET_LIMIT"]
