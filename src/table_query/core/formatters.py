"""Render a query result in one of the supported output encodings.

Each formatter is pure and total over empty pages:
 - json: rows and total, facets dropped
 - stats: rows, total and facets (when the host supplied them)
 - markdown: GitHub-flavoured table text and total
 - csv: CSV text and total
"""

from __future__ import annotations

import csv
from typing import Any, Callable, Dict, List

import pandas as pd

from .enums import OutputFormat
from .models import QueryResult

EMPTY_MARKDOWN = "_No rows._"


def _cell_text(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def _columns(rows: List[Dict[str, Any]]) -> List[str]:
    return list(rows[0].keys()) if rows else []


def format_json(result: QueryResult) -> Dict[str, Any]:
    return {"rows": result.rows, "total": result.total}


def format_stats(result: QueryResult) -> Dict[str, Any]:
    out: Dict[str, Any] = {"rows": result.rows, "total": result.total}
    if result.facets is not None:
        out["facets"] = result.facets
    return out


def _markdown_cell(value: Any) -> str:
    text = _cell_text(value).replace("|", "\\|")
    return text.replace("\r\n", "<br>").replace("\n", "<br>").replace("\r", "<br>")


def render_markdown_table(rows: List[Dict[str, Any]]) -> str:
    """Return a GitHub-flavoured table, headed by the first row's keys."""
    columns = _columns(rows)
    if not columns:
        return EMPTY_MARKDOWN
    lines = [
        "| " + " | ".join(_markdown_cell(c) for c in columns) + " |",
        "| " + " | ".join("---" for _ in columns) + " |",
    ]
    for row in rows:
        lines.append("| " + " | ".join(_markdown_cell(row.get(c)) for c in columns) + " |")
    return "\n".join(lines)


def format_markdown(result: QueryResult) -> Dict[str, Any]:
    return {"markdown": render_markdown_table(result.rows), "total": result.total}


def _unquoted_crlf_to_lf(text: str) -> str:
    # Even segments of a split on '"' lie outside quoted fields
    parts = text.split('"')
    for i in range(0, len(parts), 2):
        parts[i] = parts[i].replace("\r\n", "\n")
    return '"'.join(parts)


def render_csv(rows: List[Dict[str, Any]]) -> str:
    """Return CSV text with a header from the first row's keys.

    Fields holding a comma, quote, CR or LF are quoted, inner quotes
    doubled; records end with ``\\n``. Cells are stringified before pandas
    sees them so numeric columns with gaps keep their original text.
    """
    columns = _columns(rows)
    if not columns:
        return ""
    cells = [[_cell_text(row.get(c)) for c in columns] for row in rows]
    df = pd.DataFrame(cells, columns=columns, dtype=object)
    # A CRLF terminator makes the writer quote fields with a lone CR as well
    text = df.to_csv(index=False, lineterminator="\r\n", quoting=csv.QUOTE_MINIMAL)
    return _unquoted_crlf_to_lf(text)


def format_csv(result: QueryResult) -> Dict[str, Any]:
    return {"csv": render_csv(result.rows), "total": result.total}


FORMATTERS: Dict[OutputFormat, Callable[[QueryResult], Dict[str, Any]]] = {
    OutputFormat.JSON: format_json,
    OutputFormat.STATS: format_stats,
    OutputFormat.MARKDOWN: format_markdown,
    OutputFormat.CSV: format_csv,
}


def format_result(result: QueryResult, fmt: str) -> Dict[str, Any]:
    """Render ``result`` with the formatter registered for ``fmt``.

    Raises:
        ValueError: If ``fmt`` is not a known format name.
    """
    try:
        key = OutputFormat(fmt)
    except ValueError as e:
        raise ValueError(f"Unsupported format: {fmt}") from e
    return FORMATTERS[key](result)


__all__ = [
    "EMPTY_MARKDOWN",
    "FORMATTERS",
    "format_json",
    "format_stats",
    "format_markdown",
    "format_csv",
    "format_result",
    "render_markdown_table",
    "render_csv",
]
