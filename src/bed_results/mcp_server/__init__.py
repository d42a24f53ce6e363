"""MCP server exposing the results scraper as tools."""

from .server import create_server

__all__ = ["create_server"]
