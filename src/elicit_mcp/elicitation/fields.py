"""
Builders for the field specifications requested by each elicitation tool.

Every builder is pure: it either returns a ready-to-send
:class:`FieldSpecification` or raises :class:`InvalidArgumentError` before
anything reaches the client.
"""

from collections.abc import Sequence
from typing import Optional

from ..exceptions import InvalidArgumentError
from .schemas import BooleanField, FieldSpecification, NumberField, StringField

DATE_FORMATS = ("date", "date-time")


def _require_title(title: str) -> None:
    if not title:
        raise InvalidArgumentError("title must not be empty")


def text_field(title: str, description: Optional[str] = None) -> FieldSpecification:
    """Free-form text answer"""
    _require_title(title)
    return FieldSpecification(StringField(title=title, description=description))


def choice_field(
    title: str,
    description: Optional[str],
    options: Sequence[str],
    option_names: Optional[Sequence[str]] = None,
) -> FieldSpecification:
    """
    Closed-choice answer.

    Args:
        title: Title shown above the choices
        description: Optional explanation of the choice
        options: Raw option values, returned verbatim as the answer
        option_names: Display labels, parallel to ``options``. Defaults to
            the option values themselves.
    """
    _require_title(title)
    if not options:
        raise InvalidArgumentError("options must contain at least one value")
    if option_names is not None and len(option_names) != len(options):
        raise InvalidArgumentError(
            "optionNames array must have the same length as options array"
        )

    values = tuple(options)
    names = tuple(option_names) if option_names is not None else values
    return FieldSpecification(
        StringField(title=title, description=description, enum=values, enum_names=names)
    )


def boolean_field(title: str, description: Optional[str] = None) -> FieldSpecification:
    """Yes/no answer"""
    _require_title(title)
    return FieldSpecification(BooleanField(title=title, description=description))


def number_field(
    title: str,
    description: Optional[str] = None,
    minimum: Optional[float] = None,
    maximum: Optional[float] = None,
) -> FieldSpecification:
    """Numeric answer; bounds are inclusive"""
    _require_title(title)
    if minimum is not None and maximum is not None and minimum > maximum:
        raise InvalidArgumentError(
            "minimum value must be less than or equal to maximum value"
        )
    return FieldSpecification(
        NumberField(title=title, description=description, minimum=minimum, maximum=maximum)
    )


def date_time_field(
    title: str, description: Optional[str] = None, format: str = "date"
) -> FieldSpecification:
    """Date or date-time answer"""
    _require_title(title)
    if format not in DATE_FORMATS:
        raise InvalidArgumentError(
            f"format must be one of {', '.join(DATE_FORMATS)}, got {format!r}"
        )
    return FieldSpecification(
        StringField(title=title, description=description, format=format)
    )


def email_field(title: str, description: Optional[str] = None) -> FieldSpecification:
    _require_title(title)
    return FieldSpecification(
        StringField(title=title, description=description, format="email")
    )


def uri_field(title: str, description: Optional[str] = None) -> FieldSpecification:
    _require_title(title)
    return FieldSpecification(
        StringField(title=title, description=description, format="uri")
    )
