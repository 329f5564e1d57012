"""JSON-RPC 2.0 request dispatcher for the table query server.

Implements the MCP subset the server speaks:
 - initialize
 - notifications/initialized (no response body)
 - tools/list
 - tools/call (query_table, describe_schema)

The dispatcher keeps no per-request state. It is built once with its schema
and host fetch operation; every ``handle`` call is independent.
"""

from __future__ import annotations

import logging
from typing import Any, Awaitable, Callable, Dict, Mapping, Optional, Union

from table_query.core.config import (
    DESCRIBE_TOOL,
    PROTOCOL_VERSION,
    QUERY_TOOL,
    SERVER_NAME,
    SERVER_VERSION,
)
from table_query.core.deserialize import deserialize_filters
from table_query.core.errors import (
    FilterValueError,
    InvalidParamsError,
    InvalidRequestError,
    MethodNotFoundError,
    ProtocolError,
    ToolNotFoundError,
    UpstreamError,
)
from table_query.core.fields import FieldDescriptor, freeze_schema
from table_query.core.formatters import format_result
from table_query.core.models import PageRequest, QueryResult
from table_query.core.schema_bridge import schema_to_json_schema
from .tools import parse_query_arguments, tool_definitions

logger = logging.getLogger(__name__)

JSONRPC_VERSION = "2.0"
NOTIFICATION_PREFIX = "notifications/"

FetchPage = Callable[[PageRequest], Awaitable[Union[QueryResult, Mapping[str, Any]]]]
Handler = Callable[[Mapping[str, Any]], Awaitable[Any]]


class _NoResponse:
    """Marker returned by handlers whose call produces no body."""


NO_RESPONSE = _NoResponse()


def success_response(rpc_id: Any, result: Any) -> Dict[str, Any]:
    return {"jsonrpc": JSONRPC_VERSION, "id": rpc_id, "result": result}


def error_response(rpc_id: Any, error: ProtocolError) -> Dict[str, Any]:
    return {"jsonrpc": JSONRPC_VERSION, "id": rpc_id, "error": error.to_dict()}


class Dispatcher:
    """Stateless handler bound to a schema and a host fetch operation.

    Args:
        schema: Ordered filter name -> descriptor mapping. Copied read-only.
        fetch_page: Async host operation returning one page of results.
        server_name: Name reported in ``initialize``.
        server_version: Version reported in ``initialize``.
    """

    def __init__(
        self,
        schema: Mapping[str, FieldDescriptor],
        fetch_page: FetchPage,
        *,
        server_name: str = SERVER_NAME,
        server_version: str = SERVER_VERSION,
    ) -> None:
        self.schema = freeze_schema(schema)
        self._fetch_page = fetch_page
        self._server_info = {"name": server_name, "version": server_version}
        self._methods: Dict[str, Handler] = {
            "initialize": self._initialize,
            "notifications/initialized": self._initialized,
            "tools/list": self._list_tools,
            "tools/call": self._call_tool,
        }
        self._tools: Dict[str, Handler] = {
            QUERY_TOOL: self._query_table,
            DESCRIBE_TOOL: self._describe_schema,
        }

    @property
    def methods(self) -> tuple:
        return tuple(self._methods)

    @property
    def tools(self) -> tuple:
        return tuple(self._tools)

    async def handle(self, request: Any) -> Optional[Dict[str, Any]]:
        """Process one JSON-RPC request object.

        Returns:
            The response object, or ``None`` when no body must be sent.
        """
        if not isinstance(request, Mapping):
            return error_response(None, InvalidRequestError("Request must be a JSON object"))

        rpc_id = request.get("id")
        method = request.get("method")
        if not isinstance(method, str) or not method:
            return error_response(rpc_id, InvalidRequestError("Request has no method"))

        is_notification = method.startswith(NOTIFICATION_PREFIX)
        logger.debug("mcp method=%s id=%s", method, rpc_id)

        try:
            params = request.get("params")
            if params is None:
                params = {}
            elif not isinstance(params, Mapping):
                raise InvalidParamsError("'params' must be an object", "params")

            handler = self._methods.get(method)
            if handler is None:
                if is_notification:
                    logger.debug("Ignoring unsupported notification: %s", method)
                    return None
                raise MethodNotFoundError(method)
            result = await handler(params)
        except ProtocolError as e:
            logger.warning(
                "mcp method=%s id=%s error_code=%s: %s", method, rpc_id, e.error.code, e.message
            )
            if is_notification:
                return None
            return error_response(rpc_id, e)

        if result is NO_RESPONSE:
            return None
        return success_response(rpc_id, result)

    # -------------------------
    # MARK: Methods
    # -------------------------

    async def _initialize(self, params: Mapping[str, Any]) -> Dict[str, Any]:
        logger.info(
            "Client initialize (requested protocol %s)", params.get("protocolVersion", "unknown")
        )
        return {
            "protocolVersion": PROTOCOL_VERSION,
            "capabilities": {"tools": {"listChanged": False}},
            "serverInfo": dict(self._server_info),
        }

    async def _initialized(self, params: Mapping[str, Any]) -> _NoResponse:
        return NO_RESPONSE

    async def _list_tools(self, params: Mapping[str, Any]) -> Dict[str, Any]:
        return {"tools": tool_definitions(self.schema)}

    async def _call_tool(self, params: Mapping[str, Any]) -> Any:
        name = params.get("name")
        if not isinstance(name, str) or not name:
            raise InvalidParamsError("Tool name must be a non-empty string", "name")
        tool = self._tools.get(name)
        if tool is None:
            raise ToolNotFoundError(name)
        arguments = params.get("arguments")
        return await tool(arguments if arguments is not None else {})

    # -------------------------
    # MARK: Tools
    # -------------------------

    async def _describe_schema(self, arguments: Any) -> Dict[str, Any]:
        return schema_to_json_schema(self.schema)

    async def _query_table(self, arguments: Any) -> Dict[str, Any]:
        args = parse_query_arguments(arguments)
        try:
            filters = deserialize_filters(self.schema, args.filters)
        except FilterValueError as e:
            raise InvalidParamsError(str(e), f"filters.{e.name}") from e

        request = PageRequest(filters=filters, page=args.page, page_size=args.page_size)
        try:
            raw = await self._fetch_page(request)
        except ProtocolError:
            raise
        except Exception as e:
            logger.error("Error in %s fetch: %s", QUERY_TOOL, e)
            raise UpstreamError(e) from e

        try:
            result = QueryResult.coerce(raw)
        except ValueError as e:
            logger.error("Malformed result from %s fetch: %s", QUERY_TOOL, e)
            raise UpstreamError(e) from e

        logger.debug(
            "%s page=%d pageSize=%d format=%s total=%d rows=%d",
            QUERY_TOOL,
            args.page,
            args.page_size,
            args.format,
            result.total,
            len(result.rows),
        )
        return format_result(result, args.format)


__all__ = [
    "Dispatcher",
    "FetchPage",
    "JSONRPC_VERSION",
    "success_response",
    "error_response",
]
