"""
MCP stdio server exposing the tool registry.

Tool calls run the (blocking) registry in a worker thread so several calls can
be in flight at once. Results carry text content, the structured data dict,
and isError for failures.
"""

import functools
from typing import Any

import anyio
import mcp.types as types
from mcp.server.lowlevel import Server
from mcp.server.stdio import stdio_server

from minimax_image import __version__
from minimax_image.core.config import Config
from minimax_image.logging_config import get_logger
from minimax_image.tools.catalog import get_server_info
from minimax_image.tools.registry import ToolRegistry

logger = get_logger(__name__)


def build_tool_definitions(registry: ToolRegistry) -> list[types.Tool]:
    """Describe every registered tool for tools/list."""
    return [
        types.Tool(
            name=spec.name,
            description=spec.description,
            inputSchema=spec.input_schema(),
        )
        for spec in registry.tools()
    ]


def to_call_tool_result(result: Any) -> types.CallToolResult:
    """Convert a ToolResult into the MCP response envelope."""
    return types.CallToolResult(
        content=[types.TextContent(type="text", text=result.text)],
        structuredContent=result.data or None,
        isError=result.is_error,
    )


def create_server(registry: ToolRegistry) -> Server:
    """Build an MCP server whose tools dispatch to registry."""
    info = get_server_info()
    server: Server = Server(info.name, version=__version__, instructions=info.instructions or None)

    @server.list_tools()
    async def list_tools() -> list[types.Tool]:
        return build_tool_definitions(registry)

    # Arguments are validated by the registry so failures use its error format
    @server.call_tool(validate_input=False)
    async def call_tool(name: str, arguments: dict[str, Any]) -> types.CallToolResult:
        logger.debug("Tool call %s", name)
        result = await anyio.to_thread.run_sync(functools.partial(registry.call, name, arguments))
        return to_call_tool_result(result)

    return server


async def serve(config: Config) -> None:
    """Run the MCP server over stdio until the client disconnects."""
    registry = ToolRegistry(config)
    server = create_server(registry)
    async with stdio_server() as (read_stream, write_stream):
        logger.info("Minimax Image-01 MCP server started (model=%s)", config.model)
        await server.run(read_stream, write_stream, server.create_initialization_options())


def run(config: Config) -> None:
    """Blocking entry point used by the CLI."""
    anyio.run(serve, config)


__all__ = ["build_tool_definitions", "create_server", "run", "serve", "to_call_tool_result"]
