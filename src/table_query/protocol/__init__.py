"""JSON-RPC protocol layer: method table, tool dispatch and envelopes."""

from .dispatcher import Dispatcher, FetchPage, error_response, success_response
from .tools import QueryArguments, parse_query_arguments, tool_definitions

__all__ = [
    "Dispatcher",
    "FetchPage",
    "error_response",
    "success_response",
    "QueryArguments",
    "parse_query_arguments",
    "tool_definitions",
]
