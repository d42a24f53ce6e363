"""MCP server setup.

The server talks JSON-RPC over stdio, so nothing in this package may write
to stdout; logs go to stderr.
"""

from mcp.server.fastmcp import FastMCP

from ..runtime import ScraperServices
from .tools.results_tools import register_results_tools


def create_server(services: ScraperServices, name: str = "bed-results") -> FastMCP:
    """Create the MCP server with every results tool registered."""
    mcp = FastMCP(name)
    register_results_tools(mcp, services)
    return mcp
