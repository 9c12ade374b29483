"""
Transport layer tests for Elicit MCP Server
"""

import asyncio
import io
import json

import httpx
import pytest
import pytest_asyncio
from fastapi import FastAPI

from elicit_mcp.core.transport import (
    SSETransport,
    StdioTransport,
    Transport,
    get_message_type,
)


class MockStreamReader:
    """Stand-in for the stdin StreamReader that replays fixed lines"""

    def __init__(self, lines: list):
        self.lines = list(lines)

    async def readline(self) -> bytes:
        if self.lines:
            line = self.lines.pop(0)
            if isinstance(line, Exception):
                raise line
            return line
        return b""


@pytest.fixture
def output():
    return io.StringIO()


@pytest.fixture
def stdio_transport(output):
    return StdioTransport(output=output)


def written_messages(output: io.StringIO) -> list[dict]:
    return [json.loads(line) for line in output.getvalue().splitlines()]


class TestStdioTransport:
    @pytest.mark.asyncio
    async def test_basic(self, stdio_transport):
        assert stdio_transport.closed is False
        assert stdio_transport._stdin_reader is None
        assert stdio_transport._stdin_task is None

        # Should be able to close without connecting
        await stdio_transport.close()
        assert stdio_transport.closed is True

    @pytest.mark.asyncio
    async def test_send_writes_one_line(self, stdio_transport, output):
        await stdio_transport.send({"id": 1, "result": {"test": "message"}})

        assert output.getvalue().count("\n") == 1
        assert written_messages(output) == [
            {"id": 1, "result": {"test": "message"}, "jsonrpc": "2.0"}
        ]

    @pytest.mark.asyncio
    async def test_send_when_closed(self, stdio_transport):
        await stdio_transport.close()

        with pytest.raises(ConnectionError):
            await stdio_transport.send({"jsonrpc": "2.0", "id": 1, "result": {}})

    @pytest.mark.asyncio
    async def test_invalid_json_gets_parse_error(self, stdio_transport, output):
        await stdio_transport._process_line(b"{not json}\n")

        (error,) = written_messages(output)
        assert error["id"] is None
        assert error["error"]["code"] == -32700
        assert stdio_transport._receive_queue.empty()

    @pytest.mark.asyncio
    async def test_non_object_is_rejected(self, stdio_transport, output):
        await stdio_transport._process_line(b"[1, 2]\n")

        (error,) = written_messages(output)
        assert error["error"]["code"] == -32600

    @pytest.mark.asyncio
    async def test_blank_lines_are_skipped(self, stdio_transport, output):
        await stdio_transport._process_line(b"   \n")

        assert output.getvalue() == ""
        assert stdio_transport._receive_queue.empty()

    @pytest.mark.asyncio
    async def test_read_loop_queues_messages_then_eof(self, stdio_transport):
        request = {"jsonrpc": "2.0", "id": 1, "method": "ping"}
        reply = {"jsonrpc": "2.0", "id": 7, "result": {"action": "cancel"}}
        stdio_transport._stdin_reader = MockStreamReader(
            [json.dumps(request).encode() + b"\n", b"\n", json.dumps(reply).encode() + b"\n"]
        )

        await stdio_transport._read_lines()

        assert await stdio_transport.receive() == request
        assert await stdio_transport.receive() == reply
        assert await stdio_transport.receive() is None
        assert stdio_transport.input_ended is True
        assert stdio_transport.closed is False

    @pytest.mark.asyncio
    async def test_undecodable_line_does_not_stop_reading(self, stdio_transport, output):
        ping = {"jsonrpc": "2.0", "id": 7, "method": "ping"}
        stdio_transport._stdin_reader = MockStreamReader(
            [b"\xff\xfe garbage\n", json.dumps(ping).encode() + b"\n"]
        )

        await stdio_transport._read_lines()

        (error,) = written_messages(output)
        assert error["error"]["code"] == -32700
        assert await stdio_transport.receive() == ping

    @pytest.mark.asyncio
    async def test_oversized_line_does_not_stop_reading(self, stdio_transport, output):
        ping = {"jsonrpc": "2.0", "id": 8, "method": "ping"}
        stdio_transport._stdin_reader = MockStreamReader(
            [
                ValueError("Separator is found, but chunk is longer than limit"),
                json.dumps(ping).encode() + b"\n",
            ]
        )

        await stdio_transport._read_lines()

        (error,) = written_messages(output)
        assert error["error"]["code"] == -32700
        assert await stdio_transport.receive() == ping

    @pytest.mark.asyncio
    async def test_stdout_stays_open_after_eof(self, stdio_transport, output):
        stdio_transport._stdin_reader = MockStreamReader([])

        await stdio_transport._read_lines()
        await stdio_transport.send({"jsonrpc": "2.0", "id": 1, "result": {}})

        assert written_messages(output)[0]["id"] == 1
        assert await stdio_transport.receive() is None
        assert await stdio_transport.receive() is None

    @pytest.mark.asyncio
    async def test_receive_after_close(self, stdio_transport):
        await stdio_transport.close()

        assert await stdio_transport.receive() is None


def test_message_type_detection():
    assert get_message_type({"method": "tools/call", "id": 1}) == "request"
    assert get_message_type({"method": "notifications/initialized"}) == "notification"
    assert get_message_type({"id": 1, "result": {}}) == "response"
    assert get_message_type({"id": 1, "error": {}}) == "error"
    assert get_message_type({}) == "unknown"


@pytest.mark.asyncio
async def test_transport_base_receive_not_implemented():
    class MinimalTransport(Transport):
        async def connect(self):
            pass

        async def send(self, message):
            pass

        async def close(self):
            pass

    with pytest.raises(NotImplementedError):
        await MinimalTransport().receive()


class TestSSETransport:
    @pytest.mark.asyncio
    async def test_initialization(self):
        transport = SSETransport("localhost", 8001)

        assert transport.host == "localhost"
        assert transport.port == 8001
        assert transport.closed is False
        assert transport.clients == []

    @pytest.mark.asyncio
    async def test_connect_requires_app(self):
        with pytest.raises(RuntimeError, match="FastAPI app"):
            await SSETransport().connect()

    @pytest.mark.asyncio
    async def test_send_to_clients(self):
        transport = SSETransport()
        client_queue = asyncio.Queue()
        transport.clients.append(client_queue)

        await transport.send(
            {"jsonrpc": "2.0", "id": 3, "method": "elicitation/create", "params": {}}
        )

        event = client_queue.get_nowait()
        assert event["event"] == "message"
        assert event["id"] == "sse_3"
        assert json.loads(event["data"])["method"] == "elicitation/create"

    @pytest.mark.asyncio
    async def test_notification_event_type(self):
        transport = SSETransport()
        client_queue = asyncio.Queue()
        transport.clients.append(client_queue)

        await transport.send({"jsonrpc": "2.0", "method": "notifications/message"})

        assert client_queue.get_nowait()["event"] == "system"

    @pytest.mark.asyncio
    async def test_request_without_clients(self):
        transport = SSETransport()

        with pytest.raises(ConnectionError, match="No SSE client"):
            await transport.send({"jsonrpc": "2.0", "id": 1, "method": "elicitation/create"})

    @pytest.mark.asyncio
    async def test_response_without_clients_is_dropped(self):
        transport = SSETransport()

        await transport.send({"jsonrpc": "2.0", "id": 1, "result": {}})

    @pytest.mark.asyncio
    async def test_send_when_closed(self):
        transport = SSETransport()
        await transport.close()

        with pytest.raises(ConnectionError):
            await transport.send({"jsonrpc": "2.0", "id": 1, "result": {}})

    @pytest.mark.asyncio
    async def test_close_notifies_clients(self):
        transport = SSETransport()
        client_queue = asyncio.Queue()
        transport.clients.append(client_queue)

        await transport.close()

        event = client_queue.get_nowait()
        assert json.loads(event["data"])["type"] == "shutdown"
        assert transport.clients == []

    @pytest.mark.asyncio
    async def test_receive_not_applicable(self):
        assert await SSETransport().receive() is None


class TestSSEHttpRoutes:
    @pytest.fixture
    def handled(self):
        return []

    @pytest_asyncio.fixture
    async def transport(self, handled):
        transport = SSETransport("localhost", 8001)
        transport.app = FastAPI()

        async def handler(message):
            handled.append(message)
            if "method" not in message or "id" not in message:
                return None
            return {"jsonrpc": "2.0", "id": message["id"], "result": {"ok": True}}

        transport.set_message_handler(handler)
        await transport.connect()
        yield transport
        await transport.close()

    @pytest_asyncio.fixture
    async def client(self, transport):
        async with httpx.AsyncClient(
            transport=httpx.ASGITransport(app=transport.app), base_url="http://test"
        ) as client:
            yield client

    @pytest.mark.asyncio
    async def test_ping(self, client):
        response = await client.get("/ping")

        assert response.status_code == 200
        assert response.json()["status"] == "ok"

    @pytest.mark.asyncio
    async def test_invalid_json(self, client):
        response = await client.post("/message", content=b"invalid json")

        assert response.status_code == 400
        assert "Invalid JSON" in response.json()["error"]

    @pytest.mark.asyncio
    async def test_invalid_jsonrpc_version(self, client):
        response = await client.post("/", json={"jsonrpc": "1.0", "id": 1, "method": "ping"})

        assert response.status_code == 400

    @pytest.mark.asyncio
    async def test_missing_method(self, client):
        response = await client.post("/", json={"jsonrpc": "2.0", "id": 1, "params": {}})

        assert response.status_code == 400
        assert "Missing method parameter" in response.json()["error"]

    @pytest.mark.asyncio
    async def test_initialize_answered_in_body(self, client):
        response = await client.post(
            "/", json={"jsonrpc": "2.0", "id": 1, "method": "initialize", "params": {}}
        )

        assert response.status_code == 200
        assert response.json()["result"] == {"ok": True}

    @pytest.mark.asyncio
    async def test_elicitation_reply_is_routed(self, client, handled):
        reply = {"jsonrpc": "2.0", "id": 5, "result": {"action": "decline"}}

        response = await client.post("/message", json=reply)

        assert response.status_code == 202
        assert handled == [reply]

    @pytest.mark.asyncio
    async def test_tools_call_runs_in_background(self, client, transport, handled):
        client_queue = asyncio.Queue()
        transport.clients.append(client_queue)
        request = {
            "jsonrpc": "2.0",
            "id": 9,
            "method": "tools/call",
            "params": {"name": "elicit_boolean", "arguments": {"question": "Ok?"}},
        }

        response = await client.post("/", json=request)

        assert response.status_code == 202
        assert response.json()["result"] == {"status": "accepted"}
        assert handled == [request]
        event = client_queue.get_nowait()
        assert json.loads(event["data"])["id"] == 9

    @pytest.mark.asyncio
    async def test_tools_call_requires_params(self, client):
        response = await client.post(
            "/", json={"jsonrpc": "2.0", "id": 9, "method": "tools/call"}
        )

        assert response.status_code == 400

    @pytest.mark.asyncio
    async def test_notification_gets_no_content(self, client):
        response = await client.post(
            "/", json={"jsonrpc": "2.0", "method": "notifications/initialized"}
        )

        assert response.status_code == 204
