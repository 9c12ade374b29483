"""
Yes/no elicitation
"""

from typing import Optional

from pydantic import Field

from ..elicitation import BOOLEAN_REPLY, ElicitationMediator, MediationResult, boolean_field
from .base import DESCRIPTION_HELP, NonEmptyStr, ToolArguments
from .decorators import tool


class ElicitBooleanArgs(ToolArguments):
    question: NonEmptyStr = Field(
        description=(
            "A concise question that can be answered with a Boolean response "
            "(yes/no, true/false, on/off etc.)"
        )
    )
    question_description: Optional[NonEmptyStr] = Field(
        default=None, description=DESCRIPTION_HELP
    )


@tool(
    ElicitBooleanArgs,
    name="elicit_boolean",
    title="Request Boolean from user",
    description="""A tool to prompt the user for a Boolean response (yes/no, true/false, on/off etc.).
Only provide a brief question. Make sure that the question avoids double negatives.
Avoid using lengthy phrases like 'Please select ...' etc.""",
)
async def elicit_boolean(
    args: ElicitBooleanArgs, mediator: ElicitationMediator
) -> MediationResult:
    return await mediator.mediate_contract(
        args.question,
        boolean_field(args.question, args.question_description),
        BOOLEAN_REPLY,
    )
