"""Helpers that keep `extra=` logging payloads from clobbering LogRecord fields."""
from typing import Any, Dict, Optional

# Reserved LogRecord attributes that cannot be overwritten
RESERVED_LOGRECORD_ATTRS = {
    'name', 'msg', 'args', 'created', 'filename', 'funcName',
    'levelname', 'levelno', 'lineno', 'module', 'msecs', 'message',
    'pathname', 'process', 'processName', 'relativeCreated', 'thread',
    'threadName', 'exc_info', 'exc_text', 'stack_info', 'taskName'
}


def safe_extra(extra: Optional[Dict[str, Any]]) -> Dict[str, Any]:
    """
    Sanitize extra dict to remove reserved LogRecord attributes.

    Args:
        extra: Dictionary of extra attributes for logging

    Returns:
        Sanitized dictionary with reserved attributes renamed
    """
    if not extra:
        return {}

    safe_dict = {}
    for key, value in extra.items():
        if key in RESERVED_LOGRECORD_ATTRS:
            if key == 'name':
                safe_dict['record_name'] = value
            else:
                safe_dict[f'_{key}'] = value
        else:
            safe_dict[key] = value

    return safe_dict
