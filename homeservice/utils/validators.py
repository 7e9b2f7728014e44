"""Shared request validation helpers"""

import datetime
import re
from typing import Optional

EMAIL_RE = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")
PHONE_RE = re.compile(r"^\d{10}$")
ZIP_RE = re.compile(r"^\d{6}$")
OTP_RE = re.compile(r"^\d{6}$")
TIME_RE = re.compile(r"^([01]\d|2[0-3]):[0-5]\d(:[0-5]\d)?$")


def missing_fields(data: dict, fields) -> list:
    """Return the required fields that are absent or blank in a JSON body."""
    missing = []
    for field in fields:
        value = data.get(field)
        if value is None or (isinstance(value, str) and not value.strip()):
            missing.append(field)
    return missing


def validate_email(email: Optional[str]) -> str:
    """
    Validate email format.

    Returns:
        Lowercase, stripped email address

    Raises:
        ValueError: If email format is invalid
    """
    if not isinstance(email, str) or not EMAIL_RE.match(email.strip()):
        raise ValueError("Invalid email format")
    return email.strip().lower()


def validate_phone(phone: Optional[str]) -> str:
    digits = re.sub(r"\D", "", phone or "")
    if not PHONE_RE.match(digits):
        raise ValueError("Phone number must be 10 digits")
    return digits


def validate_password(password: Optional[str]) -> str:
    if not isinstance(password, str) or not 6 <= len(password) <= 30:
        raise ValueError("Password must be between 6 and 30 characters")
    return password


def validate_name(name: Optional[str], minimum=3, maximum=50) -> str:
    if not isinstance(name, str):
        raise ValueError("Name must be a string")
    name = name.strip()
    if not minimum <= len(name) <= maximum:
        raise ValueError(f"Name must be between {minimum} and {maximum} characters")
    return name


def parse_positive_int(value, field: str) -> int:
    """Parse an id-like field; booleans and non-positive numbers are rejected."""
    if isinstance(value, bool):
        raise ValueError(f"{field} must be a positive integer")
    try:
        number = int(value)
    except (TypeError, ValueError):
        raise ValueError(f"{field} must be a positive integer")
    if isinstance(value, float) and value != number:
        raise ValueError(f"{field} must be a positive integer")
    if number <= 0:
        raise ValueError(f"{field} must be a positive integer")
    return number


def parse_date(value, field: str = "booking_date") -> datetime.date:
    """
    Accept YYYY-MM-DD or a full ISO-8601 datetime and return the calendar day.
    """
    if not isinstance(value, str) or not value.strip():
        raise ValueError(f"Invalid {field} format. Use YYYY-MM-DD")
    value = value.strip()
    try:
        return datetime.date.fromisoformat(value)
    except ValueError:
        pass
    try:
        return datetime.datetime.fromisoformat(value.replace("Z", "+00:00")).date()
    except ValueError:
        raise ValueError(f"Invalid {field} format. Use YYYY-MM-DD")


def parse_time(value, field: str) -> datetime.time:
    """Parse HH:MM or HH:MM:SS."""
    if not isinstance(value, str) or not TIME_RE.match(value.strip()):
        raise ValueError(f"{field} must be HH:MM or HH:MM:SS")
    return datetime.time.fromisoformat(value.strip())


def parse_rating(value) -> float:
    """Ratings are 1-5 with at most one decimal place."""
    if isinstance(value, bool):
        raise ValueError("Rating must be a number")
    try:
        rating = float(value)
    except (TypeError, ValueError):
        raise ValueError("Rating must be a number")
    if not 1 <= rating <= 5:
        raise ValueError("Rating must be between 1 and 5")
    return round(rating, 1)
