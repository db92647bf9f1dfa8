"""
MCP tool layer: tool names, bundled descriptions and the tool registry.

Import the registry from minimax_image.tools.registry; this package module only
re-exports names so the formatter can reference them without import cycles.
"""

from minimax_image.tools.names import (
    ALL_TOOLS,
    TOOL_ALIASES,
    TOOL_CANCEL_PREDICTION,
    TOOL_GENERATE,
    TOOL_GENERATE_ASYNC,
    TOOL_GET_PREDICTION,
)

__all__ = [
    "ALL_TOOLS",
    "TOOL_ALIASES",
    "TOOL_CANCEL_PREDICTION",
    "TOOL_GENERATE",
    "TOOL_GENERATE_ASYNC",
    "TOOL_GET_PREDICTION",
]
