"""
Free-form text elicitation
"""

from typing import Optional

from pydantic import Field

from ..elicitation import TEXT_REPLY, ElicitationMediator, MediationResult, text_field
from .base import DESCRIPTION_HELP, NonEmptyStr, ToolArguments
from .decorators import tool


class ElicitInformationArgs(ToolArguments):
    requested_information_title: NonEmptyStr = Field(
        description="A concise title for the requested information."
    )
    requested_information_description: Optional[NonEmptyStr] = Field(
        default=None, description=DESCRIPTION_HELP
    )


@tool(
    ElicitInformationArgs,
    name="elicit_information",
    title="Request information from user",
    description="""A tool to request information directly from the user, as a free-form text input.
Only provide a brief title for the information being requested.
Avoid using lengthy phrases like 'Please provide ...' etc.""",
)
async def elicit_information(
    args: ElicitInformationArgs, mediator: ElicitationMediator
) -> MediationResult:
    title = args.requested_information_title
    return await mediator.mediate_contract(
        title,
        text_field(title, args.requested_information_description),
        TEXT_REPLY,
    )
