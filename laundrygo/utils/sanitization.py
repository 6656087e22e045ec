import html
import re
from typing import Optional

CONTROL_CHARACTERS = re.compile(r"[\x00-\x08\x0B\x0C\x0E-\x1F\x7F]")


def clean_text(value: Optional[str]) -> Optional[str]:
    """Trim and drop control characters; keeps the text comparable for uniqueness checks"""
    if value is None:
        return None
    return CONTROL_CHARACTERS.sub("", str(value)).strip()


def validate_and_sanitize_input(value: Optional[str], max_length: int = 500, escape: bool = True) -> str:
    """
    Validate and sanitize user input by removing potentially harmful content.

    Args:
        value: Input string to validate
        max_length: Maximum allowed length
        escape: Escape HTML special characters (free text such as descriptions and notes)

    Returns:
        Sanitized string

    Raises:
        ValueError: If input is invalid
    """
    if not value:
        return ""

    value = clean_text(value)
    if escape:
        value = html.escape(value, quote=True)

    # Measured after escaping, which is what gets stored
    if len(value) > max_length:
        raise ValueError(f"Input exceeds maximum length of {max_length} characters")

    return value
