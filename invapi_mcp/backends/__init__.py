"""Invapi schema, transport and tool groups."""
