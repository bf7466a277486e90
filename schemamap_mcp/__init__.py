"""MCP Server for schemamap

This package exposes type mapping and DDL generation as MCP tools.
"""

from schemamap_mcp.handlers import MappingHandler

__all__ = ["MappingHandler"]
