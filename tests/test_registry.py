"""
Tests for tool registry and dispatch
"""

from unittest.mock import AsyncMock

import pytest

from elicit_mcp import tools as builtin_tools
from elicit_mcp.core.registry import ToolDefinition, ToolRegistry
from elicit_mcp.elicitation import ElicitationMediator, MediationResult
from elicit_mcp.exceptions import InvalidArgumentError, UnknownToolError
from elicit_mcp.tools import BUILTIN_TOOLS, tool
from elicit_mcp.tools.base import NonEmptyStr, ToolArguments

EXPECTED_TOOLS = [
    "elicit_information",
    "elicit_options",
    "elicit_boolean",
    "elicit_number",
    "elicit_date_time",
    "elicit_email",
    "elicit_uri",
]


class EchoArgs(ToolArguments):
    spoken_text: NonEmptyStr


@tool(EchoArgs, title="Echo", description="Echo the text back without asking")
async def echo(args: EchoArgs, mediator: ElicitationMediator) -> MediationResult:
    return MediationResult.answered(args.spoken_text)


@pytest.fixture
def registry():
    return ToolRegistry.from_functions(BUILTIN_TOOLS)


@pytest.fixture
def send_request():
    return AsyncMock(return_value={"action": "accept", "content": {"answer": "blue"}})


@pytest.fixture
def mediator(send_request):
    return ElicitationMediator(send_request)


def test_registry_initialization():
    registry = ToolRegistry()
    assert len(registry) == 0
    assert registry.list_tools() == []


def test_builtin_tools_in_advertised_order(registry):
    assert registry.names() == EXPECTED_TOOLS
    assert [info["name"] for info in registry.list_tools()] == EXPECTED_TOOLS


def test_tool_metadata_format(registry):
    info = registry.get("elicit_information").to_mcp_tool()

    assert info["title"] == "Request information from user"
    assert info["description"].startswith("A tool to request information directly")

    input_schema = info["inputSchema"]
    assert input_schema["type"] == "object"
    assert set(input_schema["properties"]) == {
        "requestedInformationTitle",
        "requestedInformationDescription",
    }
    assert input_schema["required"] == ["requestedInformationTitle"]

    output_schema = info["outputSchema"]
    assert output_schema["required"] == ["answer"]


def test_date_time_schema_advertises_default(registry):
    properties = registry.get("elicit_date_time").to_mcp_tool()["inputSchema"]["properties"]

    assert properties["format"]["default"] == "date"
    assert properties["format"]["enum"] == ["date", "date-time"]


def test_registry_is_read_only(registry):
    with pytest.raises(TypeError):
        registry._tools["other"] = registry.get("elicit_uri")


def test_duplicate_names_are_rejected():
    definition = ToolDefinition.from_function(echo)

    with pytest.raises(ValueError, match="Duplicate tool name"):
        ToolRegistry([definition, definition])


def test_undecorated_function_is_rejected():
    async def plain(args, mediator):
        return None

    with pytest.raises(ValueError, match="does not have MCP tool metadata"):
        ToolRegistry.from_functions([plain])


def test_decorator_requires_async_handler():
    with pytest.raises(TypeError, match="must be an async function"):

        @tool(EchoArgs)
        def sync_handler(args, mediator):
            return None


def test_decorator_defaults_to_function_name_and_docstring():
    @tool(EchoArgs)
    async def shout_back(args, mediator):
        """
        Repeat the text loudly
        """
        return MediationResult.answered(args.spoken_text.upper())

    definition = ToolDefinition.from_function(shout_back)

    assert definition.name == "shout_back"
    assert definition.description == "Repeat the text loudly"
    assert definition.title is None
    assert "title" not in definition.to_mcp_tool()


def test_discover_builtin_package():
    registry = ToolRegistry.discover(builtin_tools)

    assert sorted(registry.names()) == sorted(EXPECTED_TOOLS)


def test_discover_module_by_name():
    registry = ToolRegistry.discover(__name__)

    assert registry.names() == ["echo"]
    assert registry.get("echo").title == "Echo"


class TestDispatch:
    @pytest.mark.asyncio
    async def test_dispatch(self, registry, mediator, send_request):
        result = await registry.dispatch(
            "elicit_information",
            {"requestedInformationTitle": "Favorite color"},
            mediator,
        )

        assert result.answer == "blue"
        assert send_request.await_args.args[1]["message"] == "Favorite color"

    @pytest.mark.asyncio
    async def test_unknown_tool(self, registry, mediator, send_request):
        with pytest.raises(UnknownToolError, match="Unknown tool: elicit_color"):
            await registry.dispatch("elicit_color", {}, mediator)

        send_request.assert_not_called()

    @pytest.mark.asyncio
    async def test_missing_argument(self, registry, mediator, send_request):
        with pytest.raises(InvalidArgumentError) as exc_info:
            await registry.dispatch("elicit_email", {}, mediator)

        assert exc_info.value.diagnostics[0]["loc"] == ("requestedEmailTitle",)
        send_request.assert_not_called()

    @pytest.mark.asyncio
    async def test_empty_title(self, registry, mediator, send_request):
        with pytest.raises(InvalidArgumentError):
            await registry.dispatch("elicit_boolean", {"question": ""}, mediator)

        send_request.assert_not_called()

    @pytest.mark.asyncio
    async def test_invalid_date_format(self, registry, mediator, send_request):
        with pytest.raises(InvalidArgumentError):
            await registry.dispatch(
                "elicit_date_time",
                {"requestedDateTimeTitle": "When", "format": "time"},
                mediator,
            )

    @pytest.mark.asyncio
    async def test_empty_options(self, registry, mediator, send_request):
        with pytest.raises(InvalidArgumentError):
            await registry.dispatch(
                "elicit_options",
                {"requestedInformationTitle": "Pick", "options": []},
                mediator,
            )

    @pytest.mark.asyncio
    async def test_handler_preconditions(self, registry, mediator, send_request):
        with pytest.raises(InvalidArgumentError, match="minimum value"):
            await registry.dispatch(
                "elicit_number",
                {"requestedNumberTitle": "Count", "minimum": 5, "maximum": 3},
                mediator,
            )

        send_request.assert_not_called()

    @pytest.mark.asyncio
    @pytest.mark.parametrize("bounds", [{"minimum": "5"}, {"maximum": True}])
    async def test_number_bounds_are_not_coerced(self, registry, mediator, send_request, bounds):
        with pytest.raises(InvalidArgumentError, match="Invalid arguments for tool 'elicit_number'"):
            await registry.dispatch(
                "elicit_number", {"requestedNumberTitle": "Count", **bounds}, mediator
            )

        send_request.assert_not_called()

    @pytest.mark.asyncio
    async def test_text_arguments_are_not_coerced(self, registry, mediator, send_request):
        with pytest.raises(InvalidArgumentError):
            await registry.dispatch("elicit_information", {"requestedInformationTitle": 42}, mediator)

        send_request.assert_not_called()

    @pytest.mark.asyncio
    async def test_integer_bounds_are_accepted(self, registry, mediator, send_request):
        send_request.return_value = {"action": "accept", "content": {"answer": 3}}

        result = await registry.dispatch(
            "elicit_number",
            {"requestedNumberTitle": "Count", "minimum": 1, "maximum": 5.5},
            mediator,
        )

        assert result.answer == "3"

    @pytest.mark.asyncio
    async def test_missing_arguments_object(self, mediator):
        registry = ToolRegistry.from_functions([echo])

        with pytest.raises(InvalidArgumentError):
            await registry.dispatch("echo", None, mediator)

    @pytest.mark.asyncio
    async def test_result_is_returned_unchanged(self, mediator, send_request):
        registry = ToolRegistry.from_functions([echo])

        result = await registry.dispatch("echo", {"spokenText": "hi"}, mediator)

        assert result == MediationResult.answered("hi")
        send_request.assert_not_called()
