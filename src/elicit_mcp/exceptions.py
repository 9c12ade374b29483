"""
Exceptions raised by the Elicit MCP Server
"""

from typing import Any


class ElicitationError(Exception):
    """Base exception for elicitation-related errors"""

    code = -32000

    def __init__(self, message: str, diagnostics: Any | None = None) -> None:
        super().__init__(message)
        self.diagnostics = diagnostics


class InvalidArgumentError(ElicitationError):
    """Raised when tool arguments violate a precondition"""

    code = -32602


class UnknownToolError(ElicitationError):
    """Raised when a tool call names a tool that is not registered"""

    code = -32602


class SchemaViolationError(ElicitationError):
    """Raised when the reply content does not match the expected shape"""


class ProtocolViolationError(ElicitationError):
    """Raised when the client reply carries an unrecognized action"""


class ClientRequestError(Exception):
    """Raised when the client answers a server request with a JSON-RPC error"""

    def __init__(self, code: int, message: str, data: Any | None = None) -> None:
        super().__init__(f"Client error {code}: {message}")
        self.code = code
        self.message = message
        self.data = data
