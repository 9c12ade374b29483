"""
URI elicitation
"""

from typing import Optional

from pydantic import Field

from ..elicitation import TEXT_REPLY, ElicitationMediator, MediationResult, uri_field
from .base import DESCRIPTION_HELP, NonEmptyStr, ToolArguments
from .decorators import tool


class ElicitUriArgs(ToolArguments):
    requested_uri_title: NonEmptyStr = Field(
        description="A concise title for the requested URI."
    )
    requested_uri_description: Optional[NonEmptyStr] = Field(
        default=None, description=DESCRIPTION_HELP
    )


@tool(
    ElicitUriArgs,
    name="elicit_uri",
    title="Request URI from user",
    description="""A tool to prompt the user for a URI input.
Only provide a brief title for the information being requested.
Avoid using lengthy phrases like 'Please provide ...' etc.""",
)
async def elicit_uri(args: ElicitUriArgs, mediator: ElicitationMediator) -> MediationResult:
    title = args.requested_uri_title
    return await mediator.mediate_contract(
        title, uri_field(title, args.requested_uri_description), TEXT_REPLY
    )
