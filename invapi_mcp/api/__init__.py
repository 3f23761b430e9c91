"""API surface for invapi-mcp."""

from .tools import register_tools

__all__ = ["register_tools"]
