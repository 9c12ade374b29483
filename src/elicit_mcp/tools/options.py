"""
Closed-choice elicitation
"""

from typing import Annotated, Optional

from pydantic import Field

from ..elicitation import TEXT_REPLY, ElicitationMediator, MediationResult, choice_field
from .base import DESCRIPTION_HELP, NonEmptyStr, ToolArguments
from .decorators import tool


class ElicitOptionsArgs(ToolArguments):
    requested_information_title: NonEmptyStr = Field(
        description="A concise title for the requested information."
    )
    requested_information_description: Optional[NonEmptyStr] = Field(
        default=None, description=DESCRIPTION_HELP
    )
    options: Annotated[list[NonEmptyStr], Field(min_length=1)] = Field(
        description="An array of option values to choose from."
    )
    option_names: Optional[Annotated[list[NonEmptyStr], Field(min_length=1)]] = Field(
        default=None,
        description=(
            "An optional array of human-readable names for the options. "
            "Must match the length and order of options if provided."
        ),
    )


@tool(
    ElicitOptionsArgs,
    name="elicit_options",
    title="Request a choice from user",
    description="""A tool to prompt the user to select from a list of options.
Only provide a brief title for the information being requested.
Avoid using lengthy phrases like 'Please select ...' etc.""",
)
async def elicit_options(
    args: ElicitOptionsArgs, mediator: ElicitationMediator
) -> MediationResult:
    title = args.requested_information_title
    field_spec = choice_field(
        title,
        args.requested_information_description,
        args.options,
        args.option_names,
    )
    return await mediator.mediate_contract(title, field_spec, TEXT_REPLY)
