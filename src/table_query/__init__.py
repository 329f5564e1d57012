"""Table Query MCP: expose a tabular data source to AI agents.

Agents discover the filterable fields with ``describe_schema`` and query the
table with ``query_table`` over a single JSON-RPC 2.0 endpoint.
"""

__all__ = [
    "__version__",
]

__version__ = "0.1.0"
