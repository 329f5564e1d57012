"""Protocol-level errors.

Every error carries a fixed JSON-RPC code and is reported to the caller as an
error object; none of them is fatal to the server.
"""

from __future__ import annotations

from typing import Any, Dict, Optional

from mcp.shared.exceptions import McpError
from mcp.types import (
    INTERNAL_ERROR,
    INVALID_PARAMS,
    INVALID_REQUEST,
    METHOD_NOT_FOUND,
    PARSE_ERROR,
    ErrorData,
)


class ProtocolError(McpError):
    """Base class for errors reported in a JSON-RPC error object."""

    code: int = INTERNAL_ERROR

    def __init__(self, message: str, data: Optional[Dict[str, Any]] = None) -> None:
        super().__init__(ErrorData(code=self.code, message=message, data=data))

    @property
    def message(self) -> str:
        return self.error.message

    def to_dict(self) -> Dict[str, Any]:
        """Return the ``error`` member of a JSON-RPC response."""
        payload: Dict[str, Any] = {"code": self.error.code, "message": self.error.message}
        if self.error.data is not None:
            payload["data"] = self.error.data
        return payload


class InvalidRequestError(ProtocolError):
    code = INVALID_REQUEST


class MethodNotFoundError(ProtocolError):
    code = METHOD_NOT_FOUND

    def __init__(self, method: Any) -> None:
        super().__init__(f"Method not found: {method}", {"method": method})


class ToolNotFoundError(ProtocolError):
    code = INVALID_PARAMS

    def __init__(self, tool: Any) -> None:
        super().__init__(f"Unknown tool: {tool}", {"tool": tool})


class InvalidParamsError(ProtocolError):
    code = INVALID_PARAMS

    def __init__(self, message: str, field: Optional[str] = None) -> None:
        super().__init__(message, {"field": field} if field else None)


class UpstreamError(ProtocolError):
    """The host fetch operation failed; wrapped, never retried."""

    code = INTERNAL_ERROR

    def __init__(self, cause: BaseException) -> None:
        super().__init__(
            f"Data source failed: {cause}",
            {"type": type(cause).__name__},
        )


class FilterValueError(ValueError):
    """A raw filter value does not match the shape its descriptor declares."""

    def __init__(self, name: str, message: str) -> None:
        self.name = name
        super().__init__(f"Filter '{name}': {message}")


__all__ = [
    "PARSE_ERROR",
    "ProtocolError",
    "InvalidRequestError",
    "MethodNotFoundError",
    "ToolNotFoundError",
    "InvalidParamsError",
    "UpstreamError",
    "FilterValueError",
]
