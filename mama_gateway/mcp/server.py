"""
MAMA MCP Server - decision memory tools for MCP clients.

Exposes mama_search, mama_save, mama_load_checkpoint and mama_update over
the Model Context Protocol. The same ``execute_tool`` entry point backs the
host plugin's tool registrations.

Every tool returns a single text payload. Invalid arguments come back as
``Error: ...``; any other failure as ``MAMA error: ...``. Nothing is raised
to the client.

Usage:
    mama-gateway mcp  # Start MCP server (stdio transport)
"""

import asyncio
import logging
from typing import Any, Dict, Optional

from mcp.server import Server
from mcp.server.stdio import stdio_server
from mcp.types import TextContent, Tool

from mama_gateway.config import PluginConfig, get_config
from mama_gateway.init_gate import InitGate
from mama_gateway.mcp.handlers import HANDLERS, VALIDATORS
from mama_gateway.mcp.tool_definitions import TOOLS

logger = logging.getLogger(__name__)

# Initialize MCP server
mcp = Server("mama")

_gate: Optional[InitGate] = None


def set_gate(gate: Optional[InitGate]) -> None:
    """Set the init gate used by this server (None resets to a lazy default)."""
    global _gate
    _gate = gate


def get_gate() -> InitGate:
    """Get or create the init gate."""
    global _gate
    if _gate is None:
        _gate = InitGate(get_config())
    return _gate


def validate_tool_input(name: str, arguments: Any) -> Dict[str, Any]:
    """Validate and sanitize tool inputs.

    Raises:
        ValueError: If the tool is unknown or the arguments are invalid
    """
    if arguments is None:
        arguments = {}
    if not isinstance(arguments, dict):
        raise ValueError(f"arguments must be an object, got {type(arguments).__name__}")

    validator = VALIDATORS.get(name)
    if validator is None:
        raise ValueError(f"Unknown tool: {name}")
    return validator(arguments)


def format_tool_error(e: Exception, tool_name: str) -> str:
    if isinstance(e, ValueError):
        logger.warning(f"Invalid input for tool {tool_name}: {e}")
        return f"Error: {e}"

    logger.error(
        f"Error in tool {tool_name}",
        extra={"tool_name": tool_name, "error_type": type(e).__name__},
        exc_info=True,
    )
    return f"MAMA error: {e}"


async def execute_tool(
    name: str,
    arguments: Any,
    gate: Optional[InitGate] = None,
    config: Optional[PluginConfig] = None,
) -> str:
    """Run one tool call and return its text reply. Never raises."""
    gate = gate or get_gate()
    try:
        backend = await gate.ensure_initialized(config)
        sanitized_args = validate_tool_input(name, arguments)
        return await HANDLERS[name](sanitized_args, backend)
    except Exception as e:
        return format_tool_error(e, name)


# =============================================================================
# MCP PROTOCOL HANDLERS
# =============================================================================


@mcp.list_tools()
async def list_tools() -> list[Tool]:
    """List available memory tools."""
    return list(TOOLS)


@mcp.call_tool()
async def call_tool(name: str, arguments: dict[str, Any]) -> list[TextContent]:
    """Handle tool calls."""
    result = await execute_tool(name, arguments)
    return [TextContent(type="text", text=result)]


async def run_server():
    """Run the MCP server."""
    async with stdio_server() as (read_stream, write_stream):
        await mcp.run(
            read_stream,
            write_stream,
            mcp.create_initialization_options(),
        )


def main(config: Optional[PluginConfig] = None):
    """Entry point for MCP server."""
    set_gate(InitGate(config or get_config()))
    asyncio.run(run_server())


if __name__ == "__main__":
    main()
