"""Utility modules."""
from resume_optimizer.utils.cleaning import (
    clean_optional,
    default_profile_url,
    content_preview,
    word_count,
    redact_api_key,
)
from resume_optimizer.utils.logging import setup_logging, get_logger

__all__ = [
    "clean_optional",
    "default_profile_url",
    "content_preview",
    "word_count",
    "redact_api_key",
    "setup_logging",
    "get_logger",
]
