"""
Elicitation module for the Elicit MCP Server
Asks the human operator for a single typed answer and normalizes the outcome
"""

from .contracts import (
    BOOLEAN_REPLY,
    NUMBER_REPLY,
    TEXT_REPLY,
    BooleanReply,
    NumberReply,
    ReplyContract,
    TextReply,
)
from .fields import (
    boolean_field,
    choice_field,
    date_time_field,
    email_field,
    number_field,
    text_field,
    uri_field,
)
from .mediator import ElicitationMediator
from .schemas import (
    BooleanField,
    ElicitationAction,
    ElicitationRequest,
    FieldSpecification,
    MediationResult,
    MediationState,
    NumberField,
    StringField,
)

__all__ = [
    "ElicitationMediator",
    "MediationResult",
    "MediationState",
    "ElicitationAction",
    "ElicitationRequest",
    "FieldSpecification",
    "StringField",
    "BooleanField",
    "NumberField",
    "ReplyContract",
    "TextReply",
    "BooleanReply",
    "NumberReply",
    "TEXT_REPLY",
    "BOOLEAN_REPLY",
    "NUMBER_REPLY",
    "text_field",
    "choice_field",
    "boolean_field",
    "number_field",
    "date_time_field",
    "email_field",
    "uri_field",
]
