"""Utility functions for data cleaning and normalization."""
import re
from typing import Optional

EMAIL_PATTERN = re.compile(r'^[a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}$')
PHONE_PATTERN = re.compile(r'^[\+]?[0-9\s\-\(\)]{10,20}$')
URL_PATTERN = re.compile(
    r'^https?://(www\.)?[-a-zA-Z0-9@:%._\+~#=]{1,256}\.[a-zA-Z0-9()]{1,6}\b([-a-zA-Z0-9()@:%_\+.~#?&/=]*)$'
)
LINKEDIN_PATTERN = re.compile(r'^https?://(www\.)?linkedin\.com/in/[a-zA-Z0-9-]+/?$')
UUID_PATTERN = re.compile(
    r'^[0-9a-f]{8}-[0-9a-f]{4}-[1-5][0-9a-f]{3}-[89ab][0-9a-f]{3}-[0-9a-f]{12}$', re.IGNORECASE
)

API_KEY_QUERY_PATTERN = re.compile(r'([?&]key=)[^&]+')


def clean_optional(value: Optional[str]) -> Optional[str]:
    """Trim an optional string, mapping blank to None."""
    if value is None:
        return None
    value = value.strip()
    return value or None


def slugify_name(full_name: str) -> str:
    """'Ana  Lee' -> 'ana-lee' (used for default profile URLs)."""
    return re.sub(r'\s+', '-', full_name.strip().lower())


def default_profile_url(full_name: str) -> str:
    return f"https://linkedin.com/in/{slugify_name(full_name)}"


def content_preview(text: Optional[str], limit: int = 300) -> str:
    """First `limit` characters with an ellipsis when truncated."""
    if not text:
        return "No content"
    return text[:limit] + ("..." if len(text) > limit else "")


def word_count(text: Optional[str]) -> int:
    if not text:
        return 0
    return len(text.split())


def redact_api_key(url: str) -> str:
    """Hide the `key=` query parameter before a URL is logged."""
    return API_KEY_QUERY_PATTERN.sub(r'\1***', url)
