"""
Transports carrying JSON-RPC messages between the server and one MCP client

Two flavors: newline-delimited JSON over stdin/stdout, and HTTP POST in with
Server-Sent Events out.
"""

import asyncio
import json
import logging
import sys
import time
import uuid
from abc import ABC, abstractmethod
from collections.abc import Callable, Coroutine
from typing import Any, TextIO

from fastapi import BackgroundTasks, FastAPI, Request, Response
from fastapi.responses import JSONResponse
from sse_starlette.sse import EventSourceResponse

logger = logging.getLogger(__name__)

MessageHandler = Callable[[dict[str, Any]], Coroutine[Any, Any, dict[str, Any] | None]]

# Upper bound for a single newline-delimited JSON message on stdin
STDIO_LINE_LIMIT = 4 * 1024 * 1024

SSE_KEEPALIVE_SECONDS = 15.0
SSE_CLIENT_QUEUE_SIZE = 100


def get_message_type(message: dict[str, Any]) -> str:
    """Classify a JSON-RPC message: request, notification, response, error or unknown"""
    if "method" in message:
        return "request" if "id" in message else "notification"
    if "result" in message:
        return "response"
    if "error" in message:
        return "error"
    return "unknown"


def _jsonrpc_error(code: int, message: str) -> dict[str, Any]:
    return {"jsonrpc": "2.0", "id": None, "error": {"code": code, "message": message}}


class Transport(ABC):
    """Moves JSON-RPC messages to and from a single client"""

    @abstractmethod
    async def connect(self):
        pass

    @abstractmethod
    async def send(self, message: dict[str, Any]) -> None:
        """
        Deliver one message to the client.

        Raises:
            ConnectionError: The message cannot be delivered
        """

    async def receive(self) -> dict[str, Any] | None:
        """Next incoming message, or None once the client is gone"""
        raise NotImplementedError

    @abstractmethod
    async def close(self) -> None:
        pass

    def set_message_handler(self, handler: MessageHandler):
        """Push-style transports hand incoming messages to ``handler``"""


class StdioTransport(Transport):
    """
    One JSON object per line: requests on stdin, everything else on stdout.

    Reaching EOF on stdin only ends the read side. stdout stays writable until
    :meth:`close`, so calls still in flight can send their final response.
    """

    def __init__(self, output: TextIO | None = None):
        self.closed = False
        self.input_ended = False
        self._output = output or sys.stdout
        self._receive_queue: asyncio.Queue = asyncio.Queue()
        self._stdin_reader: asyncio.StreamReader | None = None
        self._stdin_task: asyncio.Task | None = None

    async def connect(self):
        if self._stdin_task and not self._stdin_task.done():
            logger.warning("stdin reader already running")
            return

        loop = asyncio.get_running_loop()
        self._stdin_reader = asyncio.StreamReader(limit=STDIO_LINE_LIMIT, loop=loop)
        await loop.connect_read_pipe(
            lambda: asyncio.StreamReaderProtocol(self._stdin_reader, loop=loop),
            sys.stdin,
        )
        self._stdin_task = asyncio.create_task(self._read_lines(), name="stdin-reader")
        logger.info("Listening for JSON-RPC messages on stdin")

    async def _read_lines(self):
        try:
            while not self.closed:
                try:
                    line_bytes = await self._stdin_reader.readline()
                except ValueError as e:
                    # Longer than STDIO_LINE_LIMIT; a leftover tail gets its own parse error
                    logger.warning(f"Discarding oversized line from stdin: {e}")
                    await self.send(_jsonrpc_error(-32700, f"Parse error: {e}"))
                    continue
                if not line_bytes:
                    logger.info("stdin reached EOF")
                    break
                await self._process_line(line_bytes)
        except asyncio.CancelledError:
            logger.debug("stdin reader cancelled")
            raise
        except ConnectionError as e:
            logger.error(f"stdin reader stopped: {e}")
        finally:
            self.input_ended = True
            # Wake up receive() so the server loop can shut down
            self._receive_queue.put_nowait(None)

    async def _process_line(self, line_bytes: bytes) -> None:
        try:
            line = line_bytes.decode("utf-8").strip()
            if not line:
                return
            message = json.loads(line)
        except (UnicodeDecodeError, json.JSONDecodeError) as e:
            logger.warning(f"Discarding unparseable line from stdin: {e}")
            await self.send(_jsonrpc_error(-32700, f"Parse error: {e}"))
            return

        if not isinstance(message, dict):
            logger.warning(f"Discarding non-object JSON from stdin: {type(message).__name__}")
            await self.send(_jsonrpc_error(-32600, "Invalid Request"))
            return

        await self._receive_queue.put(message)

    async def send(self, message: dict[str, Any]) -> None:
        if self.closed:
            raise ConnectionError("stdio transport is closed")

        message.setdefault("jsonrpc", "2.0")
        self._output.write(json.dumps(message) + "\n")
        self._output.flush()
        logger.debug(f"stdout <- {get_message_type(message)} (ID: {message.get('id')})")

    async def receive(self) -> dict[str, Any] | None:
        if (self.closed or self.input_ended) and self._receive_queue.empty():
            return None
        return await self._receive_queue.get()

    async def close(self) -> None:
        if self.closed and self._stdin_task is None:
            return

        self.closed = True
        reader_task, self._stdin_task = self._stdin_task, None
        if reader_task and not reader_task.done():
            reader_task.cancel()
            try:
                await asyncio.wait_for(reader_task, timeout=1.0)
            except (asyncio.CancelledError, asyncio.TimeoutError):
                pass

        self._receive_queue.put_nowait(None)
        logger.info("stdio transport closed")


class SSETransport(Transport):
    """
    HTTP transport on a FastAPI app.

    Clients POST JSON-RPC messages, including their answers to
    ``elicitation/create``, to ``/`` or ``/message``. Everything the server
    emits (tool results and elicitation requests alike) is broadcast on the
    ``GET /sse`` event stream.
    """

    def __init__(self, host: str = "localhost", port: int = 8000):
        self.host = host
        self.port = port
        self.app: FastAPI | None = None
        self.clients: list[asyncio.Queue] = []
        self.closed = False
        self._message_handler: MessageHandler | None = None

    def set_message_handler(self, handler: MessageHandler):
        self._message_handler = handler

    async def connect(self):
        """Mount the MCP routes on ``self.app``"""
        if self.app is None:
            raise RuntimeError("SSETransport needs a FastAPI app assigned to .app")

        for path in ("/", "/message", "/sse"):
            self.app.post(path)(self._handle_message)
        self.app.get("/sse", response_class=EventSourceResponse)(self._handle_sse)
        self.app.get("/ping")(self._handle_ping)
        logger.info(f"MCP routes mounted for http://{self.host}:{self.port}")

    async def _handle_ping(self, request: Request):
        return JSONResponse(
            {"status": "ok", "timestamp": time.time(), "connected_clients": len(self.clients)}
        )

    async def _handle_sse(self, request: Request):
        peer = f"{request.client.host}:{request.client.port}" if request.client else "unknown"
        client_queue: asyncio.Queue = asyncio.Queue(maxsize=SSE_CLIENT_QUEUE_SIZE)
        self.clients.append(client_queue)
        logger.info(f"SSE client {peer} connected ({len(self.clients)} total)")

        async def stream():
            try:
                yield self._system_event("connected", "conn")
                while not self.closed:
                    try:
                        event = await asyncio.wait_for(
                            client_queue.get(), timeout=SSE_KEEPALIVE_SECONDS
                        )
                    except asyncio.TimeoutError:
                        yield {"comment": f"keep-alive ts={int(time.time())}"}
                        continue
                    yield event
            finally:
                if client_queue in self.clients:
                    self.clients.remove(client_queue)
                logger.info(f"SSE client {peer} disconnected ({len(self.clients)} left)")

        return EventSourceResponse(stream())

    async def _handle_message(self, request: Request, background_tasks: BackgroundTasks):
        try:
            message = json.loads(await request.body())
        except json.JSONDecodeError as e:
            return self._http_error(400, f"Invalid JSON: {e}")

        if not isinstance(message, dict) or message.get("jsonrpc") != "2.0":
            return self._http_error(400, "Invalid JSON-RPC structure")
        if self._message_handler is None:
            return self._http_error(501, "No message handler configured")

        method = message.get("method")
        accepted = JSONResponse(
            status_code=202,
            content={"jsonrpc": "2.0", "id": message.get("id"), "result": {"status": "accepted"}},
        )

        if not method:
            # The client answering one of our requests, e.g. elicitation/create
            if "result" not in message and "error" not in message:
                return self._http_error(400, "Missing method parameter")
            logger.debug(f"POST reply to server request {message.get('id')}")
            await self._message_handler(message)
            return accepted

        logger.info(f"POST {method} (ID: {message.get('id')})")

        if method == "initialize":
            return JSONResponse(status_code=200, content=await self._message_handler(message))

        if method == "tools/call":
            # Waits on the user; the result goes out over SSE when it is ready
            if not isinstance(message.get("params"), dict):
                return self._http_error(400, "Invalid parameters for tools/call")
            background_tasks.add_task(self._answer_in_background, message)
            return accepted

        response = await self._message_handler(message)
        if response is None:
            return Response(status_code=204)
        await self.send(response)
        return accepted

    async def _answer_in_background(self, message: dict[str, Any]):
        method = message.get("method")
        response = await self._message_handler(message)
        if response is None:
            return
        try:
            await self.send(response)
        except ConnectionError as e:
            logger.error(f"Dropped result of {method} (ID: {message.get('id')}): {e}")

    @staticmethod
    def _http_error(status_code: int, error: str) -> JSONResponse:
        logger.warning(f"Rejected POST with {status_code}: {error}")
        return JSONResponse(status_code=status_code, content={"error": error})

    @staticmethod
    def _system_event(event_type: str, id_prefix: str, **data: Any) -> dict[str, Any]:
        return {
            "event": "system",
            "data": json.dumps({"type": event_type, **data}),
            "id": f"{id_prefix}_{uuid.uuid4().hex[:8]}",
        }

    async def send(self, message: dict[str, Any]) -> None:
        """Broadcast a message to every connected SSE client"""
        if self.closed:
            raise ConnectionError("SSE transport is closed")

        message_type = get_message_type(message)
        if message_type == "request" and not self.clients:
            # Nobody could ever answer it
            raise ConnectionError(
                f"No SSE client connected to receive '{message.get('method')}'"
            )

        method = message.get("method") or ""
        if method == "notifications/progress":
            event_type = "progress"
        elif method.startswith("notifications/"):
            event_type = "system"
        else:
            event_type = "message"

        message.setdefault("jsonrpc", "2.0")
        event_id = f"sse_{message.get('id', uuid.uuid4().hex[:8])}"
        event = {"event": event_type, "data": json.dumps(message), "id": event_id}

        for client_queue in list(self.clients):
            try:
                await asyncio.wait_for(client_queue.put(event), timeout=0.5)
            except asyncio.TimeoutError:
                logger.warning(f"SSE client queue full, dropped event {event_id}")

        logger.debug(f"SSE <- {message_type} to {len(self.clients)} client(s)")

    async def receive(self) -> dict[str, Any] | None:
        """Incoming messages arrive through the message handler instead"""
        logger.warning("SSETransport.receive() is not used; messages arrive via POST")
        return None

    async def close(self) -> None:
        if self.closed:
            return

        self.closed = True
        shutdown = self._system_event("shutdown", "shut", reason="server_stopping")
        for client_queue in list(self.clients):
            try:
                client_queue.put_nowait(shutdown)
            except asyncio.QueueFull:
                logger.warning("SSE client queue full, dropped shutdown event")
        self.clients.clear()
        logger.info("SSE transport closed")
