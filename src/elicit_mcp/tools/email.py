"""
Email address elicitation
"""

from typing import Optional

from pydantic import Field

from ..elicitation import TEXT_REPLY, ElicitationMediator, MediationResult, email_field
from .base import DESCRIPTION_HELP, NonEmptyStr, ToolArguments
from .decorators import tool


class ElicitEmailArgs(ToolArguments):
    requested_email_title: NonEmptyStr = Field(
        description="A concise title for the requested email."
    )
    requested_email_description: Optional[NonEmptyStr] = Field(
        default=None, description=DESCRIPTION_HELP
    )


@tool(
    ElicitEmailArgs,
    name="elicit_email",
    title="Request email from user",
    description="""A tool to prompt the user for an email address input.
Only provide a brief title for the information being requested.
Avoid using lengthy phrases like 'Please provide ...' etc.""",
)
async def elicit_email(
    args: ElicitEmailArgs, mediator: ElicitationMediator
) -> MediationResult:
    title = args.requested_email_title
    return await mediator.mediate_contract(
        title, email_field(title, args.requested_email_description), TEXT_REPLY
    )
