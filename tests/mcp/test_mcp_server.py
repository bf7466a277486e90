"""Tests for MCP server"""

import asyncio
import json

from schemamap_mcp.server import app, call_tool, list_tools, mapping_handler


class TestServerInitialization:
    """Tests for server initialization"""

    def test_server_name(self) -> None:
        """Test that server is initialized with correct name"""
        assert app.name == "schemamap"

    def test_handler_initialized(self) -> None:
        assert mapping_handler is not None

    def test_tools_listed(self) -> None:
        tools = asyncio.run(list_tools())
        assert [tool.name for tool in tools] == ["generate_ddl", "map_type", "validate_mapping", "list_mappings"]
        for tool in tools:
            assert tool.inputSchema["type"] == "object"


class TestHandlerIntegration:
    """Tests for handler integration (not MCP protocol)"""

    def test_handler_methods_are_callable(self) -> None:
        assert callable(mapping_handler.generate_ddl)
        assert callable(mapping_handler.map_type)
        assert callable(mapping_handler.validate_mapping)
        assert callable(mapping_handler.list_mappings)


class TestToolDispatch:
    """Tests for call_tool routing"""

    def test_routes_to_handler(self) -> None:
        result = asyncio.run(call_tool("map_type", {"engine": "mysql", "data_type": "tinyint(1)"}))
        assert len(result) == 1
        assert json.loads(result[0].text)["snowflake_type"] == "BOOLEAN"

    def test_unknown_tool(self) -> None:
        result = asyncio.run(call_tool("drop_everything", {}))
        assert result[0].text == "Error: Unknown tool: drop_everything"

    def test_invalid_arguments(self) -> None:
        result = asyncio.run(call_tool("map_type", {"engine": "mysql"}))
        assert result[0].text.startswith("Error: Invalid arguments for tool 'map_type'")
