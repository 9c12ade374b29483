"""
Tool registration decorators for Elicit MCP Server
"""

import inspect
import logging
from collections.abc import Callable

from pydantic import BaseModel

logger = logging.getLogger(__name__)


def tool(
    args_model: type[BaseModel],
    name: str | None = None,
    title: str | None = None,
    description: str | None = None,
) -> Callable[[Callable], Callable]:
    """
    Decorator to mark an async handler as an MCP tool.

    The handler receives the validated argument model and the elicitation
    mediator bound to the calling client. The advertised input schema is
    generated from ``args_model``.

    Args:
        args_model: pydantic model validating the raw tool arguments
        name: Optional custom name for the tool. Defaults to function name.
        title: Optional human-readable display title
        description: Optional description for the tool. Defaults to function docstring.

    Example:
        class AskColorArgs(ToolArguments):
            question: NonEmptyStr

        @tool(AskColorArgs, description="Ask the user for a color")
        async def ask_color(args: AskColorArgs, mediator: ElicitationMediator):
            return await mediator.mediate_contract(
                args.question, text_field(args.question), TEXT_REPLY
            )
    """

    def decorator(func: Callable) -> Callable:
        if not inspect.iscoroutinefunction(func):
            raise TypeError(f"Tool handler {func.__name__} must be an async function")

        tool_name = name or func.__name__
        tool_description = description or inspect.cleandoc(func.__doc__ or "")

        func._mcp_tool_metadata = {
            "name": tool_name,
            "title": title,
            "description": tool_description,
            "args_model": args_model,
            "function": func,
        }

        logger.debug(f"Tool decorated: {tool_name} ({args_model.__name__})")
        return func

    return decorator
