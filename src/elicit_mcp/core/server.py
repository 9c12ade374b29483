"""
MCP server core: lifecycle, request loop and the built-in MCP methods
"""

import asyncio
import logging
from typing import Any

from .. import __version__
from ..elicitation.mediator import ElicitationMediator
from ..exceptions import InvalidArgumentError
from ..tools import BUILTIN_TOOLS
from .protocol import MCPProtocol, RequestHandlerExtra
from .registry import ToolRegistry
from .transport import StdioTransport, Transport

logger = logging.getLogger(__name__)

PROTOCOL_VERSION = "2025-06-18"


class MCPServer:
    """
    Serves the elicitation tools to one MCP client over one transport.

    Tool calls share a single mediator, which sends its
    ``elicitation/create`` requests back through the same protocol.
    """

    def __init__(
        self,
        name: str = "elicit",
        version: str = __version__,
        title: str = "Elicitation",
        tool_registry: ToolRegistry | None = None,
    ):
        self.name = name
        self.title = title
        self.version = version
        self.protocol = MCPProtocol()
        self.tool_registry = tool_registry or ToolRegistry.from_functions(BUILTIN_TOOLS)
        self.mediator = ElicitationMediator(self.protocol.send_request)
        self.transport: Transport | None = None
        self.initialized = False
        self.client_info: dict[str, Any] = {}
        self.client_capabilities: dict[str, Any] = {}
        self._tasks: set[asyncio.Task] = set()

        self._register_handlers()
        logger.info(f"Server '{name}' {version} ready with {len(self.tool_registry)} tools")

    def _register_handlers(self):
        handlers = {
            "ping": self._handle_ping,
            "initialize": self._handle_initialize,
            "tools/list": self._handle_list_tools,
            "tools/call": self._handle_call_tool,
        }

        for method, handler in handlers.items():
            self.protocol.set_request_handler(method, handler)

    async def run(self, transport: Transport | None = None):
        """Serve requests from ``transport`` (stdio by default) until it closes"""
        if transport is None:
            transport = StdioTransport()

        await self.connect(transport)

        try:
            while True:
                message = await transport.receive()
                if message is None:
                    logger.info("Client went away, stopping")
                    break

                if self.protocol.is_response(message):
                    # Resolves a pending elicitation; never blocks
                    await self.protocol.handle_message(message)
                    continue

                # Requests may wait on the user, so each runs on its own task
                task = asyncio.create_task(self._process_message(message, transport))
                self._tasks.add(task)
                task.add_done_callback(self._tasks.discard)

        finally:
            self.protocol.shutdown("Transport closed before the client answered")
            await self._drain_tasks()
            await transport.close()

    async def _process_message(self, message: dict[str, Any], transport: Transport):
        response = await self.protocol.handle_message(message)
        if response:
            try:
                await transport.send(response)
            except ConnectionError as e:
                logger.error(f"Could not send response (ID: {response.get('id')}): {e}")

    async def _drain_tasks(self):
        if not self._tasks:
            return
        logger.info(f"Waiting for {len(self._tasks)} in-flight requests")
        await asyncio.gather(*self._tasks, return_exceptions=True)

    async def connect(self, transport: Transport):
        """Wire the protocol to ``transport`` in both directions and open it"""
        if self.transport:
            logger.warning(f"Replacing transport {type(self.transport).__name__}")

        if not transport:
            raise ValueError("Cannot connect to null transport")

        self.transport = transport

        transport.set_message_handler(self.protocol.handle_message)
        self.protocol.set_send_implementation(transport.send)

        await transport.connect()
        logger.info(f"Connected over {type(transport).__name__}")

    async def _handle_initialize(
        self, params: dict[str, Any], extra: RequestHandlerExtra
    ) -> dict[str, Any]:
        """Record the client and advertise tools plus elicitation"""
        self.client_info = params.get("clientInfo") or {}
        self.client_capabilities = params.get("capabilities") or {}
        client_name = self.client_info.get("name", "Unknown Client")
        client_version = self.client_info.get("version", "N/A")

        logger.info(f"Client {client_name} {client_version} initializing (ID: {extra.id})")
        if "elicitation" not in self.client_capabilities:
            logger.warning(
                f"Client {client_name} did not declare the elicitation capability"
            )

        self.initialized = True

        return {
            "protocolVersion": params.get("protocolVersion") or PROTOCOL_VERSION,
            "serverInfo": {
                "name": self.name,
                "title": self.title,
                "version": self.version,
            },
            "capabilities": {
                "tools": {},
                "elicitation": {},
            },
        }

    async def _handle_ping(
        self, params: dict[str, Any], extra: RequestHandlerExtra
    ) -> dict[str, Any]:
        return {}

    async def _handle_list_tools(
        self, params: dict[str, Any], extra: RequestHandlerExtra
    ) -> dict[str, Any]:
        return {"tools": self.tool_registry.list_tools()}

    async def _handle_call_tool(
        self, params: dict[str, Any], extra: RequestHandlerExtra
    ) -> dict[str, Any]:
        """Run one tool; elicitation outcomes come back as results, failures as errors"""
        tool_name = params.get("name")
        if not tool_name:
            raise InvalidArgumentError("Missing required parameter: 'name'")

        logger.info(f"Calling {tool_name} (ID: {extra.id})")
        result = await self.tool_registry.dispatch(
            tool_name, params.get("arguments"), self.mediator
        )
        logger.info(f"Tool '{tool_name}' finished: {result.narration}")
        return result.to_tool_result()
