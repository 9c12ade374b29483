"""
Reply validators and answer extractors for elicitation responses
"""

import math
from collections.abc import Callable
from dataclasses import dataclass
from decimal import Decimal
from typing import Any, Generic, Optional, TypeVar, Union

from pydantic import BaseModel, StrictFloat, StrictInt

ReplyT = TypeVar("ReplyT", bound=BaseModel)

AnswerExtractor = Callable[[ReplyT], Optional[str]]


@dataclass(frozen=True)
class ReplyContract(Generic[ReplyT]):
    """Pairs the expected reply shape with the function that reads the answer out of it"""

    reply_model: type[ReplyT]
    extractor: AnswerExtractor[ReplyT]


class TextReply(BaseModel):
    answer: Optional[str] = None


class BooleanReply(BaseModel):
    # Clients are free to send anything here; only real booleans count
    answer: Any = None


class NumberReply(BaseModel):
    answer: Optional[Union[StrictInt, StrictFloat]] = None


def extract_text(reply: TextReply) -> Optional[str]:
    """Return the answer untouched unless it is blank"""
    if isinstance(reply.answer, str) and reply.answer.strip():
        return reply.answer
    return None


def extract_boolean(reply: BooleanReply) -> Optional[str]:
    if isinstance(reply.answer, bool):
        return "true" if reply.answer else "false"
    return None


def extract_number(reply: NumberReply) -> Optional[str]:
    if reply.answer is None or isinstance(reply.answer, bool):
        return None
    return format_number(reply.answer)


def format_number(value: Union[int, float]) -> str:
    """
    Render a number the way JavaScript's ``Number.prototype.toString`` does.

    Integral floats lose their fractional part (``5.0`` becomes ``5``).
    Exponent notation is used only below ``1e-6`` and from ``1e21`` up, and it
    is written JS style (``1e-7``, ``1e+21``). Python ints are printed exactly.
    """
    if isinstance(value, int):
        return str(value)
    if not math.isfinite(value):
        return "NaN" if math.isnan(value) else ("Infinity" if value > 0 else "-Infinity")
    if value == 0:
        return "0"

    # Shortest round-trip digits, as value = 0.DIGITS x 10**point
    _, digit_tuple, exponent = Decimal(repr(abs(value))).as_tuple()
    padded = "".join(map(str, digit_tuple))
    digits = padded.rstrip("0")
    point = exponent + len(padded)
    sign = "-" if value < 0 else ""

    if len(digits) <= point <= 21:
        return sign + digits + "0" * (point - len(digits))
    if 0 < point <= 21:
        return sign + digits[:point] + "." + digits[point:]
    if -6 < point <= 0:
        return sign + "0." + "0" * -point + digits

    power = point - 1
    mantissa = digits if len(digits) == 1 else f"{digits[0]}.{digits[1:]}"
    return f"{sign}{mantissa}e{'+' if power > 0 else '-'}{abs(power)}"


TEXT_REPLY = ReplyContract(TextReply, extract_text)
BOOLEAN_REPLY = ReplyContract(BooleanReply, extract_boolean)
NUMBER_REPLY = ReplyContract(NumberReply, extract_number)
