import re
from typing import Annotated

from markupsafe import escape
from pydantic import AfterValidator


def sanitize_html_content(content: str | None) -> str | None:
    """
    Sanitize HTML content by escaping markup and trimming whitespace.
    :param content: Raw user input
    :return: Sanitized content
    """
    if content is None:
        return content
    return str(escape(content)).strip()


USERNAME_PATTERN = re.compile(r"^[\w.'-]+$")


def validate_username(name: str) -> str:
    """
    Validate a username. Stored as typed, so markup characters are rejected rather than escaped.
    :param name: Raw user input
    :return: Trimmed username
    """
    name = name.strip()
    if not USERNAME_PATTERN.match(name):
        raise ValueError("Username may only contain letters, digits and . _ - '")
    return name


def normalize_access_code(code: str) -> str:
    """Access codes are matched case-insensitively."""
    return code.strip().upper()


SanitizedString = Annotated[str, AfterValidator(sanitize_html_content)]
SanitizedOptionalString = Annotated[str | None, AfterValidator(sanitize_html_content)]
Username = Annotated[str, AfterValidator(validate_username)]
