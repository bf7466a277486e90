"""
MCP Server for schemamap
Provides tools for Snowflake type mapping and DDL generation
"""

import traceback

from mcp.server import Server
from mcp.server.stdio import stdio_server
from mcp.types import TextContent, Tool

from schemamap_mcp.handlers import MappingHandler

# Initialize MCP server
app: Server = Server("schemamap")

# Initialize mapping handler (stateless)
mapping_handler = MappingHandler()

_ENGINE_PROPERTY = {
    "type": "string",
    "enum": ["postgresql", "mysql", "sqlserver"],
    "description": "Source database engine",
}


@app.list_tools()
async def list_tools() -> list[Tool]:
    """List available MCP tools"""
    return [
        Tool(
            name="generate_ddl",
            description=(
                "Generate Snowflake DDL from a saved schema mapping. Returns CREATE SCHEMA and "
                "CREATE TABLE statements followed by foreign key constraints, plus warnings for "
                "columns whose types could not be mapped exactly."
            ),
            inputSchema={
                "type": "object",
                "properties": {
                    "mapping": {
                        "type": "string",
                        "description": "Mapping name in the active installation, or path to a .mapping.json file",
                    },
                    "target_database": {
                        "type": "string",
                        "description": "Optional Snowflake database to create and use first",
                    },
                },
                "required": ["mapping"],
            },
        ),
        Tool(
            name="map_type",
            description=(
                "Map a single PostgreSQL, MySQL or SQL Server column type to its Snowflake type. "
                "Unknown types come back as unmapped VARCHAR with a warning."
            ),
            inputSchema={
                "type": "object",
                "properties": {
                    "engine": _ENGINE_PROPERTY,
                    "data_type": {
                        "type": "string",
                        "description": "Native type name, e.g. 'numeric(10,2)' or 'bigint unsigned'",
                    },
                    "precision": {"type": "integer", "description": "Declared precision"},
                    "scale": {"type": "integer", "description": "Declared scale"},
                    "length": {"type": "integer", "description": "Declared length (-1 for unbounded)"},
                    "is_identity": {"type": "boolean", "description": "Whether the column is auto-increment"},
                },
                "required": ["engine", "data_type"],
            },
        ),
        Tool(
            name="validate_mapping",
            description=(
                "Validate a mapping file: structure, format version and table/schema consistency. "
                "Optionally checks that the stored password decrypts with the installation key."
            ),
            inputSchema={
                "type": "object",
                "properties": {
                    "mapping": {
                        "type": "string",
                        "description": "Mapping name in the active installation, or path to a .mapping.json file",
                    },
                    "check_credentials": {
                        "type": "boolean",
                        "description": "Also decrypt the stored password (default: false)",
                    },
                },
                "required": ["mapping"],
            },
        ),
        Tool(
            name="list_mappings",
            description="List saved mappings with their source engine, database and table count.",
            inputSchema={"type": "object", "properties": {}},
        ),
    ]


@app.call_tool()
async def call_tool(name: str, arguments: dict[str, object]) -> list[TextContent]:
    """Handle tool calls - routes to appropriate handler"""

    # Tool dispatch registry
    handlers = {
        "generate_ddl": mapping_handler.generate_ddl,
        "map_type": mapping_handler.map_type,
        "validate_mapping": mapping_handler.validate_mapping,
        "list_mappings": mapping_handler.list_mappings,
    }

    try:
        # Look up handler
        handler = handlers.get(name)
        if not handler:
            return [TextContent(type="text", text=f"Error: Unknown tool: {name}")]

        # Call handler with arguments - let Python handle argument validation
        result_text = handler(**(arguments or {}))  # type: ignore[operator]
        return [TextContent(type="text", text=result_text or "Error: No result generated")]

    except TypeError as e:
        # Handle missing/invalid arguments
        error_text = f"Error: Invalid arguments for tool '{name}': {e!s}"
        return [TextContent(type="text", text=error_text)]
    except (ValueError, OSError, RuntimeError) as e:
        error_text = f"Error: {e!s}\n\n{traceback.format_exc()}"
        return [TextContent(type="text", text=error_text)]


async def main() -> None:
    """Run the MCP server"""
    async with stdio_server() as (read_stream, write_stream):
        await app.run(read_stream, write_stream, app.create_initialization_options())


def run() -> None:
    """Console script entry point"""
    import asyncio

    asyncio.run(main())


if __name__ == "__main__":
    run()
