"""Server configuration constants.

This module centralizes paging limits, defaults and the advertised server
identity. Adjust these constants to tune how much data a single call returns.

Paging policy:
    - page and pageSize below 1 are rejected
    - pageSize above MAX_PAGE_SIZE is clamped, not rejected
"""

from __future__ import annotations

from mcp.types import LATEST_PROTOCOL_VERSION

from table_query import __version__
from .enums import OutputFormat

# ============================================================================
# PAGING
# ============================================================================

DEFAULT_PAGE = 1
DEFAULT_PAGE_SIZE = 50
MAX_PAGE_SIZE = 500  # keeps agents from requesting unbounded pages

DEFAULT_FORMAT = OutputFormat.JSON.value
FORMAT_NAMES = tuple(f.value for f in OutputFormat)


# ============================================================================
# SERVER IDENTITY
# ============================================================================

SERVER_NAME = "table-query-mcp"
SERVER_VERSION = __version__
PROTOCOL_VERSION = LATEST_PROTOCOL_VERSION

DEFAULT_HOST = "127.0.0.1"
DEFAULT_PORT = 8765
DEFAULT_ENDPOINT = "/mcp"


# ============================================================================
# TOOLS
# ============================================================================

QUERY_TOOL = "query_table"
DESCRIBE_TOOL = "describe_schema"

QUERY_TOOL_DESCRIPTION = (
    "Query the table with structured filters. Returns one page of rows and the "
    "total number of matching rows. Use format 'stats' to also receive facet "
    "summaries (value counts, min/max) over the full filtered set, or 'markdown' "
    "/ 'csv' for text renderings. Call describe_schema first to see the filters."
)
DESCRIBE_TOOL_DESCRIPTION = (
    "Describe the filters accepted by query_table as a JSON Schema object. "
    "Timestamps are Unix timestamps in milliseconds."
)


# ============================================================================
# HELPER FUNCTIONS
# ============================================================================


def clamp_page_size(page_size: int) -> int:
    """Clamp a validated page size to MAX_PAGE_SIZE.

    Examples:
        >>> clamp_page_size(10000)
        500
        >>> clamp_page_size(20)
        20
    """
    return min(page_size, MAX_PAGE_SIZE)
