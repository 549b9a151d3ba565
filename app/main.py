"""MCP server exposing SeedDream image generation over stdio."""

import asyncio
import logging
from typing import Any, Dict, List, Optional

import mcp.types as types
from mcp.server.lowlevel import Server
from mcp.server.stdio import stdio_server

from app.config import Settings, settings
from seedream_mcp.backends.replicate import ReplicateBackend
from seedream_mcp.core.errors import ConfigurationError
from seedream_mcp.core.image_generator import ImageGenerator
from seedream_mcp.core.tool import build_tool_definition, invoke_tool

# Configure logging; stdout carries the protocol so records go to stderr
logging.basicConfig(
    level=settings.log_level.upper(),
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)

SERVER_NAME = "seedream-replicate-server"


class ToolCallFailed(Exception):
    """Raised from the call_tool handler so the SDK flags the result as an error."""


def create_generator(config: Settings) -> ImageGenerator:
    """Create the image generator from configuration.

    A missing token does not stop the server: the generator is built
    without a backend and reports a configuration error on every call.

    Args:
        config: Application settings

    Returns:
        ImageGenerator, with or without a backend
    """
    backend: Optional[ReplicateBackend] = None
    try:
        config.validate_required_keys()
        backend = ReplicateBackend(config.replicate_api_token, version=config.seedream_model_version)
        logger.info("Replicate client initialized successfully")
    except ConfigurationError as e:
        logger.error(f"Configuration error: {e.message}")

    logger.debug(
        f"Configuration: model_version={config.seedream_model_version.value}, "
        f"log_level={config.log_level}, "
        f"max_concurrent_requests={config.max_concurrent_requests} (not enforced), "
        f"request_timeout={config.request_timeout}ms"
    )

    return ImageGenerator(
        backend,
        version=config.seedream_model_version,
        output_dir=config.output_dir,
        timeout_ms=config.request_timeout
    )


def create_server(generator: ImageGenerator) -> Server:
    """Build the MCP server with list_tools and call_tool handlers."""
    server = Server(SERVER_NAME)
    tool = types.Tool(**build_tool_definition(generator.version))

    @server.list_tools()
    async def list_tools() -> List[types.Tool]:
        return [tool]

    # Arguments are checked by the normalizer so callers get its error kinds
    @server.call_tool(validate_input=False)
    async def call_tool(name: str, arguments: Optional[Dict[str, Any]]) -> List[types.TextContent]:
        response = await invoke_tool(generator, name, arguments)
        if response.is_error:
            raise ToolCallFailed(response.text)
        return [types.TextContent(type="text", text=response.text)]

    return server


async def serve(config: Settings = settings) -> None:
    """Run the server on stdio until the client disconnects."""
    server = create_server(create_generator(config))

    async with stdio_server() as (read_stream, write_stream):
        logger.info(f"{SERVER_NAME} running on stdio")
        await server.run(read_stream, write_stream, server.create_initialization_options())


def main() -> None:
    """Console script entry point."""
    try:
        asyncio.run(serve())
    except KeyboardInterrupt:
        logger.info("Received interrupt, shutting down...")


if __name__ == "__main__":
    main()
