"""
Numeric elicitation
"""

from typing import Optional

from pydantic import Field

from ..elicitation import NUMBER_REPLY, ElicitationMediator, MediationResult, number_field
from .base import DESCRIPTION_HELP, NonEmptyStr, ToolArguments
from .decorators import tool


class ElicitNumberArgs(ToolArguments):
    requested_number_title: NonEmptyStr = Field(
        description="A concise title for the requested number."
    )
    requested_number_description: Optional[NonEmptyStr] = Field(
        default=None, description=DESCRIPTION_HELP
    )
    minimum: Optional[float] = Field(
        default=None, description="An optional minimum value constraint."
    )
    maximum: Optional[float] = Field(
        default=None, description="An optional maximum value constraint."
    )


@tool(
    ElicitNumberArgs,
    name="elicit_number",
    title="Request number from user",
    description="""A tool to prompt the user for a number input.
Only provide a brief title for the information being requested.
Avoid using lengthy phrases like 'Please provide ...' etc.
You can optionally specify minimum and maximum constraints.""",
)
async def elicit_number(
    args: ElicitNumberArgs, mediator: ElicitationMediator
) -> MediationResult:
    title = args.requested_number_title
    field_spec = number_field(
        title, args.requested_number_description, args.minimum, args.maximum
    )
    return await mediator.mediate_contract(title, field_spec, NUMBER_REPLY)
