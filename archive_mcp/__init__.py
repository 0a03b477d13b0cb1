"""MCP tools for the 0xArchive market-data API."""

__version__ = "1.0.0"
