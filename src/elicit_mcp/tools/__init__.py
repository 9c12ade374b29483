"""
Built-in elicitation tools, one typed question per tool
"""

from .boolean import ElicitBooleanArgs, elicit_boolean
from .date_time import ElicitDateTimeArgs, elicit_date_time
from .decorators import tool
from .email import ElicitEmailArgs, elicit_email
from .information import ElicitInformationArgs, elicit_information
from .number import ElicitNumberArgs, elicit_number
from .options import ElicitOptionsArgs, elicit_options
from .uri import ElicitUriArgs, elicit_uri

# Advertised order in tools/list
BUILTIN_TOOLS = (
    elicit_information,
    elicit_options,
    elicit_boolean,
    elicit_number,
    elicit_date_time,
    elicit_email,
    elicit_uri,
)

__all__ = [
    "tool",
    "BUILTIN_TOOLS",
    "ElicitInformationArgs",
    "ElicitOptionsArgs",
    "ElicitBooleanArgs",
    "ElicitNumberArgs",
    "ElicitDateTimeArgs",
    "ElicitEmailArgs",
    "ElicitUriArgs",
    "elicit_information",
    "elicit_options",
    "elicit_boolean",
    "elicit_number",
    "elicit_date_time",
    "elicit_email",
    "elicit_uri",
]
