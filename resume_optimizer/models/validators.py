"""Field validation helpers shared by request models."""
import json
from typing import Any, List, Optional

from resume_optimizer.utils.cleaning import (
    EMAIL_PATTERN,
    LINKEDIN_PATTERN,
    PHONE_PATTERN,
    URL_PATTERN,
    clean_optional,
)


def required_text(value: Any, field_name: str, max_length: Optional[int] = None) -> str:
    if not isinstance(value, str) or not value.strip():
        raise ValueError(f"{field_name} is required")
    value = value.strip()
    if max_length and len(value) > max_length:
        raise ValueError(f"{field_name} cannot exceed {max_length} characters")
    return value


def optional_text(value: Any, field_name: str, max_length: Optional[int] = None) -> Optional[str]:
    if value is None:
        return None
    if not isinstance(value, str):
        raise ValueError(f"{field_name} must be a string")
    value = clean_optional(value)
    if value and max_length and len(value) > max_length:
        raise ValueError(f"{field_name} cannot exceed {max_length} characters")
    return value


def email_address(value: Any) -> str:
    if not isinstance(value, str) or not value.strip():
        raise ValueError("Email is required")
    value = value.strip()
    if not EMAIL_PATTERN.match(value):
        raise ValueError("Invalid email format")
    return value.lower()


def phone_number(value: Any) -> Optional[str]:
    value = optional_text(value, "Phone")
    if value and not PHONE_PATTERN.match(value):
        raise ValueError("Invalid phone number format")
    return value


def web_url(value: Any) -> Optional[str]:
    value = optional_text(value, "URL")
    if value and not URL_PATTERN.match(value):
        raise ValueError("Invalid URL format")
    return value


def linkedin_url(value: Any) -> Optional[str]:
    value = optional_text(value, "LinkedIn URL")
    if value and not LINKEDIN_PATTERN.match(value):
        raise ValueError("Invalid LinkedIn URL format")
    return value


def json_array(value: Any, field_name: str) -> List[Any]:
    """Accept a list or a JSON-encoded list; empty values become []."""
    if value is None or value == "":
        return []
    if isinstance(value, str):
        try:
            value = json.loads(value)
        except ValueError:
            raise ValueError(f"{field_name} contains invalid JSON")
    if not isinstance(value, list):
        raise ValueError(f"{field_name} must be an array")
    return value


def mobile_numbers(value: Any) -> List[str]:
    numbers = []
    for index, number in enumerate(json_array(value, "Mobile numbers")):
        if not isinstance(number, str):
            raise ValueError(f"Mobile number at index {index} must be a string")
        cleaned = phone_number(number)
        if not cleaned:
            raise ValueError(f"Mobile number at index {index} is invalid")
        numbers.append(cleaned)
    return numbers
