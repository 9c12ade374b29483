"""
Shared pieces of the elicitation tool argument models
"""

from typing import Annotated

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

NonEmptyStr = Annotated[str, Field(min_length=1)]

DESCRIPTION_HELP = "An optional concise description for the requested information."


class ToolArguments(BaseModel):
    """
    Base for tool arguments; field names travel in camelCase on the wire.

    Validation is strict: a number bound sent as "5" or true is rejected
    rather than coerced.
    """

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, strict=True)
