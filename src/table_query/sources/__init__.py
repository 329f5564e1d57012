"""Host-side data sources implementing the fetch-page operation."""

from .polars_table import PolarsTableSource, scan_table

__all__ = ["PolarsTableSource", "scan_table"]
