"""
Elicit MCP Server - ask the human operator a single typed question
Exposes free text, choice, boolean, number, date, email and URI prompts as MCP tools
"""

__version__ = "0.2.0"

from .core.protocol import MCPProtocol
from .core.registry import ToolDefinition, ToolRegistry
from .core.server import MCPServer
from .core.transport import SSETransport, StdioTransport, Transport
from .elicitation import ElicitationMediator, MediationResult
from .tools.decorators import tool

__all__ = [
    "MCPServer",
    "ToolRegistry",
    "ToolDefinition",
    "Transport",
    "StdioTransport",
    "SSETransport",
    "MCPProtocol",
    "ElicitationMediator",
    "MediationResult",
    "tool",
]
