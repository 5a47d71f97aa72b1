"""Shared validation utilities"""

import re
from datetime import date
from typing import Optional

EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
MOBILE_PATTERN = re.compile(r"^[+]?[\d\s\-()]+$")
HEX_COLOR_PATTERN = re.compile(r"^#(?:[0-9a-fA-F]{3}|[0-9a-fA-F]{6})$")


def validate_email(email: Optional[str]) -> Optional[str]:
    """
    Validate and normalize an email address.

    Raises:
        ValueError: If the email is malformed
    """
    if not email:
        return email
    email = email.strip().lower()
    if not EMAIL_PATTERN.match(email):
        raise ValueError("Please provide a valid email address")
    return email


def validate_mobile(mobile: Optional[str]) -> Optional[str]:
    """Accept digits, spaces, dashes, parentheses and a leading plus"""
    if not mobile:
        return mobile
    mobile = mobile.strip()
    if not MOBILE_PATTERN.match(mobile):
        raise ValueError("Please provide a valid mobile number")
    return mobile


def validate_hex_color(color: Optional[str]) -> Optional[str]:
    if not color:
        return color
    color = color.strip()
    if not HEX_COLOR_PATTERN.match(color):
        raise ValueError("Color must be a hex value like #1a2b3c")
    return color


def validate_hour(value: Optional[int], field: str) -> Optional[int]:
    """Hour-of-day bounds. 24 is allowed as an exclusive end of day."""
    if value is None:
        return value
    if value < 0 or value > 24:
        raise ValueError(f"{field} must be a number between 0 and 24")
    return value


ISO_DATE_PATTERN = re.compile(r"^\d{4}-\d{2}-\d{2}$")


def parse_iso_date(value, field: str) -> Optional[date]:
    """
    Parse a yyyy-mm-dd string into a calendar date.

    Raises:
        ValueError: If the value is not a real date in that exact format
    """
    if value is None or isinstance(value, date):
        return value
    if not isinstance(value, str) or not ISO_DATE_PATTERN.match(value.strip()):
        raise ValueError(f"Invalid date format for {field}. Use yyyy-mm-dd")
    try:
        return date.fromisoformat(value.strip())
    except ValueError as e:
        raise ValueError(f"Invalid date format for {field}. Use yyyy-mm-dd") from e


def coerce_hour(value, field: str) -> Optional[int]:
    """Accept whole hours given as ints, floats or numeric strings"""
    if value is None or value == "":
        return None
    if isinstance(value, bool):
        raise ValueError(f"{field} must be a number between 0 and 24")
    try:
        number = float(value)
    except (TypeError, ValueError):
        raise ValueError(f"{field} must be a number between 0 and 24") from None
    if not number.is_integer():
        raise ValueError(f"{field} must be a whole hour between 0 and 24")
    return int(number)
