"""
Requested-schema definitions and mediation results for elicitation requests
"""

import json
from dataclasses import dataclass
from enum import Enum
from typing import Any, Literal, Optional, Union

StringFormat = Literal["email", "uri", "date", "date-time"]


@dataclass(frozen=True)
class StringField:
    """A string answer, optionally constrained by format or a closed set of values"""

    title: str
    description: Optional[str] = None
    format: Optional[StringFormat] = None
    enum: Optional[tuple[str, ...]] = None
    enum_names: Optional[tuple[str, ...]] = None

    type = "string"

    def to_json_schema(self) -> dict[str, Any]:
        schema = _base_schema(self.type, self.title, self.description)
        if self.format:
            schema["format"] = self.format
        if self.enum is not None:
            schema["enum"] = list(self.enum)
        if self.enum_names is not None:
            schema["enumNames"] = list(self.enum_names)
        return schema


@dataclass(frozen=True)
class BooleanField:
    """A yes/no answer"""

    title: str
    description: Optional[str] = None

    type = "boolean"

    def to_json_schema(self) -> dict[str, Any]:
        return _base_schema(self.type, self.title, self.description)


@dataclass(frozen=True)
class NumberField:
    """A numeric answer with optional inclusive bounds"""

    title: str
    description: Optional[str] = None
    minimum: Optional[float] = None
    maximum: Optional[float] = None

    type = "number"

    def to_json_schema(self) -> dict[str, Any]:
        schema = _base_schema(self.type, self.title, self.description)
        if self.minimum is not None:
            schema["minimum"] = self.minimum
        if self.maximum is not None:
            schema["maximum"] = self.maximum
        return schema


AnswerField = Union[StringField, BooleanField, NumberField]


def _base_schema(
    field_type: str, title: str, description: Optional[str]
) -> dict[str, Any]:
    schema: dict[str, Any] = {"type": field_type, "title": title}
    if description is not None:
        schema["description"] = description
    return schema


@dataclass(frozen=True)
class FieldSpecification:
    """
    The requested schema of an elicitation: an object with a single
    ``answer`` property described by one of the answer field variants.
    """

    answer: AnswerField

    def to_json_schema(self) -> dict[str, Any]:
        """Convert to the JSON Schema subset accepted by elicitation/create"""
        return {
            "type": "object",
            "properties": {"answer": self.answer.to_json_schema()},
        }


@dataclass(frozen=True)
class ElicitationRequest:
    """Outbound elicitation/create request"""

    message: str
    requested_schema: FieldSpecification

    method = "elicitation/create"

    def to_params(self) -> dict[str, Any]:
        return {
            "message": self.message,
            "requestedSchema": self.requested_schema.to_json_schema(),
        }


class ElicitationAction(str, Enum):
    """Disposition of the human towards an elicitation request"""

    ACCEPT = "accept"
    DECLINE = "decline"
    CANCEL = "cancel"


class MediationState(str, Enum):
    """Terminal states of a single elicitation exchange"""

    ANSWERED = "answered"
    UNANSWERED = "unanswered"
    REFUSED = "refused"


ANSWERED_NARRATION = "User answered with: {answer}"
UNANSWERED_NARRATION = "User didn't provide an answer."
DECLINED_NARRATION = "User declined to answer."
CANCELED_NARRATION = "User canceled the dialog."


@dataclass(frozen=True)
class MediationResult:
    """Normalized outcome of one elicitation exchange"""

    answer: Optional[str]
    narration: str
    state: MediationState
    action: ElicitationAction

    @classmethod
    def answered(cls, answer: str) -> "MediationResult":
        return cls(
            answer=answer,
            narration=ANSWERED_NARRATION.format(answer=answer),
            state=MediationState.ANSWERED,
            action=ElicitationAction.ACCEPT,
        )

    @classmethod
    def unanswered(cls) -> "MediationResult":
        return cls(
            answer=None,
            narration=UNANSWERED_NARRATION,
            state=MediationState.UNANSWERED,
            action=ElicitationAction.ACCEPT,
        )

    @classmethod
    def refused(cls, action: ElicitationAction) -> "MediationResult":
        narration = (
            DECLINED_NARRATION
            if action is ElicitationAction.DECLINE
            else CANCELED_NARRATION
        )
        return cls(
            answer=None,
            narration=narration,
            state=MediationState.REFUSED,
            action=action,
        )

    @property
    def structured_content(self) -> dict[str, Optional[str]]:
        return {"answer": self.answer}

    def to_tool_result(self) -> dict[str, Any]:
        """
        Convert to a tools/call result.

        The structured payload is rendered first, as JSON text for clients
        that ignore ``structuredContent``, followed by the narration.
        """
        payload_text = json.dumps(self.structured_content, separators=(",", ":"))
        return {
            "content": [
                {"type": "text", "audience": ["assistant"], "text": payload_text},
                {"type": "text", "audience": ["assistant"], "text": self.narration},
            ],
            "structuredContent": self.structured_content,
            "isError": False,
        }


ANSWER_OUTPUT_SCHEMA: dict[str, Any] = {
    "type": "object",
    "properties": {
        "answer": {
            "type": ["string", "null"],
            "description": "The user's answer, or null if none was given",
        }
    },
    "required": ["answer"],
}
