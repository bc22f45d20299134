"""Quire - local content management over MCP and REST."""

__version__ = "1.0.0"
