"""
Validation utilities
"""

import re
from datetime import date
from enum import Enum
from typing import Any, Optional, Type, TypeVar
from clearflow.utils.exceptions import ValidationError

E = TypeVar('E', bound=Enum)


def validate_email(email: str) -> bool:
    """
    Validate email format

    Args:
        email: Email to validate

    Returns:
        True if valid email
    """
    if not email or not isinstance(email, str):
        return False

    pattern = r'^[a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}$'
    return bool(re.match(pattern, email.strip()))


def validate_password(password: str) -> bool:
    """Passwords need at least 6 characters"""
    if not password or not isinstance(password, str):
        return False
    return len(password) >= 6


def validate_required(value: Any, field_name: str) -> None:
    """
    Validate required field

    Args:
        value: Value to validate
        field_name: Name of the field for error message

    Raises:
        ValidationError: If value is empty or None
    """
    if value is None or (isinstance(value, str) and not value.strip()):
        raise ValidationError(f"{field_name} is required")


def validate_phone_number(phone: str) -> bool:
    """
    Validate phone number format

    Args:
        phone: Phone number to validate

    Returns:
        True if valid phone number
    """
    if not phone or not isinstance(phone, str):
        return False

    # Remove all non-digit characters
    digits_only = re.sub(r'\D', '', phone)

    # Check if it's a valid length (7-15 digits)
    return 7 <= len(digits_only) <= 15


def validate_passing_year(year: int, today: Optional[date] = None) -> bool:
    """Passing year must fall between 2000 and ten years from now"""
    current_year = (today or date.today()).year
    return 2000 <= year <= current_year + 10


def validate_file_extension(filename: str, allowed_extensions: set) -> bool:
    """
    Validate file extension

    Args:
        filename: Name of the file
        allowed_extensions: Set of allowed extensions

    Returns:
        True if extension is allowed
    """
    if not filename or '.' not in filename:
        return False

    extension = filename.rsplit('.', 1)[1].lower()
    return extension in allowed_extensions


def parse_enum(enum_cls: Type[E], value: Any, field_name: str) -> E:
    """
    Convert a wire value (enum value, case-insensitive) into an enum member

    Raises:
        ValidationError: If value does not name a member
    """
    if isinstance(value, enum_cls):
        return value
    if isinstance(value, str):
        normalized = value.strip().lower()
        for member in enum_cls:
            if member.value == normalized:
                return member
    allowed = ', '.join(member.value for member in enum_cls)
    raise ValidationError(f"{field_name} must be one of: {allowed}")
