"""
JSON-RPC 2.0 layer of the MCP server

Routes client requests to registered handlers, and correlates the server's own
requests to the client (``elicitation/create``) with the responses that come
back for them.
"""

import asyncio
import itertools
import json
import logging
import traceback
from collections.abc import Awaitable, Callable
from typing import Any, NamedTuple

from ..exceptions import ClientRequestError, ElicitationError

logger = logging.getLogger(__name__)

# JSON-RPC error codes
INVALID_REQUEST = -32600
METHOD_NOT_FOUND = -32601
SERVER_ERROR = -32000


class RequestHandlerExtra(NamedTuple):
    """Per-request context handed to every request handler"""

    id: str | int | None


RequestHandler = Callable[[dict[str, Any], RequestHandlerExtra], Awaitable[Any]]
MessageSender = Callable[[dict[str, Any]], Awaitable[None]]


class MCPProtocol:
    """
    Handles MCP JSON-RPC messages in both directions.

    Incoming requests are dispatched by method name. Outgoing requests made
    with :meth:`send_request` park a future under their id until
    :meth:`handle_message` sees the matching response.
    """

    def __init__(self):
        self._request_handlers: dict[str, RequestHandler] = {}
        self._sender: MessageSender | None = None
        self._request_ids = itertools.count(1)
        self._pending_requests: dict[str | int, asyncio.Future] = {}
        self._shutdown_reason: str | None = None

    def set_request_handler(self, method: str, handler: RequestHandler):
        self._request_handlers[method] = handler
        logger.debug(f"Handler registered for '{method}'")

    def set_send_implementation(self, sender: MessageSender):
        """Route outgoing messages through ``sender``, normally ``Transport.send``"""
        self._sender = sender

    @staticmethod
    def is_response(message_data: dict[str, Any]) -> bool:
        """Whether the message answers a request previously sent by the server"""
        return "method" not in message_data and (
            "result" in message_data or "error" in message_data
        )

    async def handle_message(self, message_data: dict[str, Any]) -> dict[str, Any] | None:
        """
        Process one incoming message.

        Args:
            message_data: A decoded JSON-RPC message

        Returns:
            The response to send back, or None for notifications and for
            responses to the server's own requests
        """
        if message_data.get("jsonrpc") != "2.0":
            logger.warning(f"Rejecting non JSON-RPC 2.0 message: {str(message_data)[:150]}")
            return self._format_error(
                None, INVALID_REQUEST, "Invalid Request", "Invalid JSON-RPC version"
            )

        if self.is_response(message_data):
            self._resolve_pending(message_data)
            return None

        request_id = message_data.get("id")
        method = message_data.get("method")
        if not method:
            logger.warning(f"Rejecting message without method: {str(message_data)[:150]}")
            return self._format_error(
                request_id, INVALID_REQUEST, "Invalid Request", "'method' parameter is missing"
            )

        handler = self._request_handlers.get(method)
        if handler is None:
            if request_id is None:
                logger.debug(f"Ignoring notification '{method}'")
                return None
            logger.warning(f"Unknown method '{method}' (ID: {request_id})")
            return self._format_error(request_id, METHOD_NOT_FOUND, f"Method not found: {method}")

        params = message_data.get("params") or {}
        response = await self._run_handler(
            handler, method, params, RequestHandlerExtra(id=request_id)
        )
        return response if request_id is not None else None

    async def _run_handler(
        self,
        handler: RequestHandler,
        method: str,
        params: dict[str, Any],
        extra: RequestHandlerExtra,
    ) -> dict[str, Any]:
        try:
            result = await handler(params, extra)
        except ElicitationError as e:
            logger.warning(f"'{method}' failed (ID: {extra.id}): {type(e).__name__}: {e}")
            return self._format_error(extra.id, e.code, str(e), e.diagnostics)
        except Exception as e:
            message = f"Server error executing method '{method}': {type(e).__name__}: {e}"
            logger.error(f"{message} (ID: {extra.id})", exc_info=True)
            debug_data = traceback.format_exc() if logger.isEnabledFor(logging.DEBUG) else None
            return self._format_error(extra.id, SERVER_ERROR, message, debug_data)

        logger.debug(f"'{method}' handled (ID: {extra.id})")
        return self._format_result(extra.id, result)

    def _format_result(self, req_id: str | int | None, result: Any) -> dict[str, Any]:
        try:
            json.dumps(result)
        except TypeError as e:
            logger.error(f"Result for ID {req_id} cannot be encoded as JSON: {e}")
            result = f"[Non-Serializable Result: {type(result).__name__}] {str(result)[:500]}"
        return {"jsonrpc": "2.0", "id": req_id, "result": result}

    def _format_error(
        self, req_id: str | int | None, code: int, message: str, data: Any | None = None
    ) -> dict[str, Any]:
        error: dict[str, Any] = {"code": code, "message": message}
        if data is not None:
            try:
                json.dumps(data)
            except TypeError:
                logger.warning(f"Error data of type {type(data).__name__} is not JSON")
                data = f"Non-serializable data of type {type(data).__name__}: {str(data)[:100]}"
            error["data"] = data
        return {"jsonrpc": "2.0", "id": req_id, "error": error}

    async def send_request(self, method: str, params: dict[str, Any] | None = None) -> Any:
        """
        Send a request to the client and wait for its result.

        There is no deadline here; the caller waits until the client answers
        or the transport goes away.

        Raises:
            ConnectionError: No transport is configured, or it closed before answering
            ClientRequestError: The client answered with a JSON-RPC error
        """
        if self._shutdown_reason is not None:
            raise ConnectionError(f"Cannot send '{method}': {self._shutdown_reason}")
        if self._sender is None:
            raise ConnectionError(f"Cannot send '{method}': no transport connected")

        request_id = next(self._request_ids)
        future: asyncio.Future = asyncio.get_running_loop().create_future()
        self._pending_requests[request_id] = future

        try:
            logger.debug(f"-> {method} (ID: {request_id})")
            await self._sender(
                {"jsonrpc": "2.0", "id": request_id, "method": method, "params": params or {}}
            )
            return await future
        finally:
            self._pending_requests.pop(request_id, None)

    def _resolve_pending(self, message_data: dict[str, Any]) -> None:
        response_id = message_data.get("id")
        future = self._pending_requests.get(response_id)
        if future is None or future.done():
            logger.warning(f"Response for unknown request ID {response_id} ignored")
            return

        if "error" in message_data:
            error = message_data.get("error") or {}
            future.set_exception(
                ClientRequestError(
                    code=error.get("code", SERVER_ERROR),
                    message=error.get("message", "Unknown error"),
                    data=error.get("data"),
                )
            )
        else:
            future.set_result(message_data.get("result"))
        logger.debug(f"<- response (ID: {response_id})")

    def pending_request_count(self) -> int:
        return len(self._pending_requests)

    def fail_pending(self, error: Exception) -> None:
        """Fail every request still waiting for a client response"""
        for request_id, future in list(self._pending_requests.items()):
            if not future.done():
                logger.warning(f"Abandoning request ID {request_id}: {error}")
                future.set_exception(error)

    def shutdown(self, reason: str) -> None:
        """Refuse further outgoing requests and fail the ones still waiting"""
        self._shutdown_reason = reason
        self.fail_pending(ConnectionError(reason))

    async def send_notification(self, method: str, params: dict[str, Any] | None = None):
        """Fire-and-forget notification; failures are logged, not raised"""
        if self._sender is None:
            logger.error(f"Cannot send notification '{method}': no transport connected")
            return

        try:
            await self._sender({"jsonrpc": "2.0", "method": method, "params": params or {}})
        except Exception as e:
            logger.error(f"Failed to send notification '{method}': {e}", exc_info=True)
