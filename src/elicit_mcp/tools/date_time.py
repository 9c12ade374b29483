"""
Date and date-time elicitation
"""

from typing import Literal, Optional

from pydantic import Field

from ..elicitation import TEXT_REPLY, ElicitationMediator, MediationResult, date_time_field
from .base import DESCRIPTION_HELP, NonEmptyStr, ToolArguments
from .decorators import tool


class ElicitDateTimeArgs(ToolArguments):
    requested_date_time_title: NonEmptyStr = Field(
        description="A concise title for the requested date/time."
    )
    requested_date_time_description: Optional[NonEmptyStr] = Field(
        default=None, description=DESCRIPTION_HELP
    )
    format: Literal["date", "date-time"] = Field(
        default="date",
        description=(
            "The format for the date/time input. "
            "'date' for date only, 'date-time' for date and time."
        ),
    )


@tool(
    ElicitDateTimeArgs,
    name="elicit_date_time",
    title="Request date/time from user",
    description="""A tool to prompt the user for a date or date-time input.
Only provide a brief title for the information being requested.
Avoid using lengthy phrases like 'Please provide ...' etc.
You can choose between date-only or date-time format.""",
)
async def elicit_date_time(
    args: ElicitDateTimeArgs, mediator: ElicitationMediator
) -> MediationResult:
    title = args.requested_date_time_title
    field_spec = date_time_field(
        title, args.requested_date_time_description, args.format
    )
    return await mediator.mediate_contract(title, field_spec, TEXT_REPLY)
