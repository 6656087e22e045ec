"""Shared validation utilities"""

import re
from typing import Optional

EMAIL_PATTERN = r"^[a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}$"
TIME_PATTERN = r"^([01]\d|2[0-3]):[0-5]\d$"
CONTACT_PATTERN = r"^\+?[0-9][0-9\s()-]*$"


def validate_email(email: Optional[str]) -> Optional[str]:
    """
    Validate email format.

    Args:
        email: Email address string

    Returns:
        Lowercase email address

    Raises:
        ValueError: If email format is invalid
    """
    if not email:
        return email

    email = email.strip().lower()

    if not re.match(EMAIL_PATTERN, email):
        raise ValueError("Invalid email format")

    return email


def validate_contact_number(contact: Optional[str]) -> Optional[str]:
    """Accept local or international numbers; digits, spaces, dashes and parentheses only"""
    if not contact:
        return contact

    contact = contact.strip()
    if not re.match(CONTACT_PATTERN, contact):
        raise ValueError("Invalid contact number")

    digits = re.sub(r"\D", "", contact)
    if len(digits) < 7:
        raise ValueError("Contact number is too short")

    return contact


def validate_latitude(latitude: Optional[float]) -> Optional[float]:
    if latitude is not None and not -90 <= latitude <= 90:
        raise ValueError("Latitude must be between -90 and 90")
    return latitude


def validate_longitude(longitude: Optional[float]) -> Optional[float]:
    if longitude is not None and not -180 <= longitude <= 180:
        raise ValueError("Longitude must be between -180 and 180")
    return longitude


def validate_time_of_day(value: str) -> str:
    """24h HH:MM"""
    value = value.strip()
    if not re.match(TIME_PATTERN, value):
        raise ValueError("Time must use HH:MM (24 hour) format")
    return value
