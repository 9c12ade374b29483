"""Core components for Elicit MCP Server"""

from .protocol import MCPProtocol, RequestHandlerExtra
from .registry import ToolDefinition, ToolRegistry
from .server import MCPServer
from .transport import SSETransport, StdioTransport, Transport

__all__ = [
    "MCPServer",
    "ToolRegistry",
    "ToolDefinition",
    "MCPProtocol",
    "RequestHandlerExtra",
    "Transport",
    "StdioTransport",
    "SSETransport",
]
