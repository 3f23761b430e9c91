"""MCP server exposing the Invapi e-invoicing API as tools."""

__version__ = "1.0.0"
