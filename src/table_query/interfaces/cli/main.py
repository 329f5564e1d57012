import argparse
import asyncio
import json
import logging
import sys
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

import colorlog

from table_query import __version__ as _PACKAGE_VERSION
from table_query.core.config import (
    DEFAULT_ENDPOINT,
    DEFAULT_FORMAT,
    DEFAULT_HOST,
    DEFAULT_PAGE,
    DEFAULT_PAGE_SIZE,
    DEFAULT_PORT,
    FORMAT_NAMES,
    QUERY_TOOL,
)
from table_query.core.fields import FieldDescriptor
from table_query.core.schema_bridge import schema_to_json_schema
from table_query.core.schema_loader import load_schema
from table_query.protocol.dispatcher import Dispatcher
from table_query.sources.polars_table import PolarsTableSource


LOG_FORMAT = (
    "%(asctime)s:%(levelname)s:%(name)s in %(filename)s:%(funcName)s:%(lineno)d: %(message)s"
)
LOG_COLORS = {
    "DEBUG": "cyan",
    "INFO": "green",
    "WARNING": "yellow",
    "ERROR": "red",
    "CRITICAL": "bold_red",
}
# Per-request access lines drown out protocol warnings unless --verbose
ACCESS_LOGGERS = ("uvicorn.access",)


def _resolve_level(verbose: bool, warnings_only: bool, errors_only: bool) -> int:
    if errors_only:
        return logging.ERROR
    if warnings_only:
        return logging.WARNING
    return logging.DEBUG if verbose else logging.INFO


def setup_logging(
    verbose: bool = False, warnings_only: bool = False, errors_only: bool = False
) -> None:
    """Send colored log lines to stderr; stdout is reserved for query output."""
    root = logging.getLogger()
    for h in list(root.handlers):
        root.removeHandler(h)
    handler = colorlog.StreamHandler(sys.stderr)
    handler.setFormatter(
        colorlog.ColoredFormatter(f"%(log_color)s{LOG_FORMAT}", log_colors=LOG_COLORS)
    )
    root.addHandler(handler)
    level = _resolve_level(verbose, warnings_only, errors_only)
    root.setLevel(level)
    for name in ACCESS_LOGGERS:
        logging.getLogger(name).setLevel(level if verbose else max(level, logging.WARNING))


def _write_json(payload: Any) -> None:
    sys.stdout.write(json.dumps(payload, indent=2, ensure_ascii=False))
    sys.stdout.write("\n")


def _load_schema_arg(args: argparse.Namespace) -> Optional[Dict[str, FieldDescriptor]]:
    try:
        return load_schema(Path(args.schema))
    except (FileNotFoundError, ValueError) as e:
        logging.error("Failed to load schema: %s", e)
        return None


def _build_dispatcher(
    args: argparse.Namespace,
) -> Tuple[Optional[Dispatcher], int]:
    """Load schema and table from CLI args; returns (dispatcher, exit code)."""
    schema = _load_schema_arg(args)
    if schema is None:
        return None, 2
    facets = getattr(args, "facet", None) or None
    try:
        source = PolarsTableSource.from_path(Path(args.table), schema, facet_columns=facets)
    except (FileNotFoundError, ValueError) as e:
        logging.error("Failed to open table: %s", e)
        return None, 2
    logging.info(
        "Loaded table %s (%d columns, %d filters)", args.table, len(source.columns), len(schema)
    )
    return Dispatcher(schema, source.fetch_page), 0


def cmd_serve(args: argparse.Namespace) -> int:
    """Serve the table over the single JSON-RPC HTTP endpoint."""
    dispatcher, code = _build_dispatcher(args)
    if dispatcher is None:
        return code
    # Deferred so `describe` and `query` do not import the web stack
    from table_query.interfaces.http.app import run_http

    try:
        run_http(dispatcher, host=args.host, port=int(args.port), path=args.path)
    except KeyboardInterrupt:
        logging.info("Server stopped")
    return 0


def cmd_describe(args: argparse.Namespace) -> int:
    """Print the filter schema as JSON Schema."""
    schema = _load_schema_arg(args)
    if schema is None:
        return 2
    _write_json(schema_to_json_schema(schema))
    return 0


def cmd_query(args: argparse.Namespace) -> int:
    """Run one query_table call and print the tool result.

    Exit codes: 0 on success, 2 on bad input or a protocol error.
    """
    try:
        filters = json.loads(args.filters) if args.filters else {}
    except json.JSONDecodeError as e:
        logging.error("--filters is not valid JSON: %s", e)
        return 2

    dispatcher, code = _build_dispatcher(args)
    if dispatcher is None:
        return code

    request = {
        "jsonrpc": "2.0",
        "id": 1,
        "method": "tools/call",
        "params": {
            "name": QUERY_TOOL,
            "arguments": {
                "filters": filters,
                "page": args.page,
                "pageSize": args.page_size,
                "format": args.format,
            },
        },
    }
    response = asyncio.run(dispatcher.handle(request))
    if response is None or "error" in response:
        error = (response or {}).get("error", {})
        logging.error("Query failed (%s): %s", error.get("code"), error.get("message"))
        return 2
    result = response["result"]
    if args.format in ("markdown", "csv"):
        sys.stdout.write(result[args.format])
        logging.info("%d matching rows", result["total"])
        return 0
    _write_json(result)
    return 0


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(
        prog="table-query",
        description=f"Table Query MCP server (v{_PACKAGE_VERSION})",
    )
    p.add_argument("--verbose", action="store_true", help="Enable verbose logging")
    p.add_argument(
        "--warnings-only",
        action="store_true",
        help="Show only warnings and errors (overrides --verbose)",
    )
    p.add_argument(
        "--errors-only",
        action="store_true",
        help="Show only errors (overrides --warnings-only and --verbose)",
    )

    sub = p.add_subparsers(dest="command", required=True)

    def add_table_args(sp: argparse.ArgumentParser) -> None:
        sp.add_argument("--table", required=True, help="Path to a .csv or .parquet table")
        sp.add_argument("--schema", required=True, help="Path to the filter schema YAML")
        sp.add_argument(
            "--facet",
            action="append",
            default=None,
            help="Column to summarize in stats output (repeatable; default: literal, "
            "boolean and number fields)",
        )

    p_serve = sub.add_parser("serve", help="Serve the table over HTTP")
    add_table_args(p_serve)
    p_serve.add_argument(
        "--host", default=DEFAULT_HOST, help=f"Host to bind (default {DEFAULT_HOST})"
    )
    p_serve.add_argument(
        "--port", type=int, default=DEFAULT_PORT, help=f"Port to bind (default {DEFAULT_PORT})"
    )
    p_serve.add_argument(
        "--path", default=DEFAULT_ENDPOINT, help=f"Endpoint path (default {DEFAULT_ENDPOINT})"
    )
    p_serve.set_defaults(func=cmd_serve)

    p_describe = sub.add_parser("describe", help="Print the filter schema as JSON Schema")
    p_describe.add_argument("--schema", required=True, help="Path to the filter schema YAML")
    p_describe.set_defaults(func=cmd_describe)

    p_query = sub.add_parser("query", help="Run a single query_table call")
    add_table_args(p_query)
    p_query.add_argument("--filters", default=None, help="Filters as a JSON object")
    p_query.add_argument("--page", type=int, default=DEFAULT_PAGE, help="1-based page number")
    p_query.add_argument(
        "--page-size", type=int, default=DEFAULT_PAGE_SIZE, help="Rows per page"
    )
    p_query.add_argument(
        "--format", choices=list(FORMAT_NAMES), default=DEFAULT_FORMAT, help="Output format"
    )
    p_query.set_defaults(func=cmd_query)

    return p


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    setup_logging(
        verbose=bool(args.verbose),
        warnings_only=bool(getattr(args, "warnings_only", False)),
        errors_only=bool(getattr(args, "errors_only", False)),
    )
    return args.func(args)


if __name__ == "__main__":
    raise SystemExit(main())
