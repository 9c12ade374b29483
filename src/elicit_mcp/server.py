"""
Main entry point for Elicit MCP Server
"""

import argparse
import asyncio
import importlib
import os
import sys
from types import ModuleType
from typing import Any

import uvicorn
from fastapi import FastAPI

from . import __version__
from .core.registry import ToolRegistry
from .core.server import MCPServer
from .core.transport import SSETransport, StdioTransport
from .tools import BUILTIN_TOOLS
from .utils.logging import setup_logging


def build_registry(tool_modules: list[ModuleType] | None = None) -> ToolRegistry:
    """Built-in elicitation tools followed by any tools found in ``tool_modules``"""
    builtin = ToolRegistry.from_functions(BUILTIN_TOOLS)
    if not tool_modules:
        return builtin

    extra = ToolRegistry.discover(*tool_modules)
    return ToolRegistry([*builtin.definitions(), *extra.definitions()])


async def run_stdio_server(
    tool_modules: list[ModuleType] | None = None,
    server_name: str | None = None,
    log_level: str = "INFO",
) -> None:
    """Run MCP server with stdio transport"""
    # stdout carries the protocol, so logs go to stderr
    setup_logging(level=log_level, disable_stdio_logging=True)

    server = MCPServer(
        name=server_name or "elicit", tool_registry=build_registry(tool_modules)
    )
    await server.run(StdioTransport())


async def run_http_server(
    host: str = "localhost",
    port: int = 8000,
    tool_modules: list[ModuleType] | None = None,
    server_name: str | None = None,
    log_level: str = "INFO",
) -> None:
    """Run MCP server with HTTP/SSE transport"""
    setup_logging(level=log_level)

    app = FastAPI(title="Elicit MCP Server", version=__version__)

    server = MCPServer(
        name=server_name or "elicit", tool_registry=build_registry(tool_modules)
    )
    transport = SSETransport(host, port)
    transport.app = app
    await server.connect(transport)

    @app.get("/")
    async def root() -> dict[str, Any]:
        return {
            "message": "Elicit MCP Server",
            "version": __version__,
            "transport": "HTTP/SSE",
            "tools": server.tool_registry.names(),
            "endpoints": {
                "root": "POST / - Send MCP messages",
                "message": "POST /message - Send MCP messages and elicitation replies",
                "sse": "GET /sse - Server-sent events stream",
                "ping": "GET /ping - Health check",
            },
        }

    config = uvicorn.Config(app, host=host, port=port, log_level=log_level.lower())
    try:
        await uvicorn.Server(config).serve()
    finally:
        server.protocol.shutdown("HTTP server stopped")
        await transport.close()


def load_tool_modules(tools_path: str | None) -> list[ModuleType]:
    """Import the comma-separated tool modules named in ``tools_path``"""
    modules = []
    for path in (tools_path or "").split(","):
        path = path.strip()
        if not path:
            continue
        try:
            modules.append(importlib.import_module(path))
        except ImportError as e:
            print(f"Warning: Could not import tool module '{path}': {e}", file=sys.stderr)
    return modules


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Elicit MCP Server - ask the user a single typed question",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Environment Variables:
  ELICIT_MCP_TRANSPORT      Transport method (stdio or http)
  ELICIT_MCP_HOST           Host for HTTP transport
  ELICIT_MCP_PORT           Port for HTTP transport
  ELICIT_MCP_SERVER_NAME    Server name identifier
  ELICIT_MCP_LOG_LEVEL      Logging level (DEBUG, INFO, WARNING, ERROR)
  ELICIT_MCP_TOOLS_PATH     Comma-separated modules with additional tools

Examples:
  # Run with stdio (for MCP clients that spawn the server)
  elicit-mcp

  # Run HTTP server
  elicit-mcp --transport http --port 8080
""",
    )
    parser.add_argument(
        "--transport",
        choices=["stdio", "http"],
        default=os.getenv("ELICIT_MCP_TRANSPORT", "stdio"),
        help="Transport method (default: stdio, env: ELICIT_MCP_TRANSPORT)",
    )
    parser.add_argument(
        "--host",
        default=os.getenv("ELICIT_MCP_HOST", "localhost"),
        help="Host for HTTP transport (default: localhost, env: ELICIT_MCP_HOST)",
    )
    parser.add_argument(
        "--port",
        type=int,
        default=int(os.getenv("ELICIT_MCP_PORT", "8000")),
        help="Port for HTTP transport (default: 8000, env: ELICIT_MCP_PORT)",
    )
    parser.add_argument(
        "--log-level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        default=os.getenv("ELICIT_MCP_LOG_LEVEL", "INFO"),
        help="Logging level (default: INFO, env: ELICIT_MCP_LOG_LEVEL)",
    )
    parser.add_argument(
        "--server-name",
        default=os.getenv("ELICIT_MCP_SERVER_NAME"),
        help="Server name identifier (env: ELICIT_MCP_SERVER_NAME)",
    )
    parser.add_argument(
        "--tools-path",
        default=os.getenv("ELICIT_MCP_TOOLS_PATH"),
        help="Comma-separated modules with additional tools (env: ELICIT_MCP_TOOLS_PATH)",
    )
    return parser


def cli_main(argv: list[str] | None = None) -> None:
    """CLI entry point"""
    args = build_parser().parse_args(argv)
    tool_modules = load_tool_modules(args.tools_path)

    try:
        if args.transport == "stdio":
            asyncio.run(
                run_stdio_server(
                    tool_modules=tool_modules,
                    server_name=args.server_name,
                    log_level=args.log_level,
                )
            )
        else:
            asyncio.run(
                run_http_server(
                    args.host,
                    args.port,
                    tool_modules=tool_modules,
                    server_name=args.server_name,
                    log_level=args.log_level,
                )
            )
    except KeyboardInterrupt:
        print("Server stopped by user", file=sys.stderr)
        sys.exit(0)
    except Exception as e:
        print(f"Server error: {e}", file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    cli_main()
