"""Constants for saved resume status."""

# Status values
STATUS_DRAFT = "draft"
STATUS_OPTIMIZED = "optimized"

# Valid status values
VALID_STATUSES = [
    STATUS_DRAFT,
    STATUS_OPTIMIZED,
]


def is_valid_status(status: str) -> bool:
    """Check a status filter or column value."""
    return status in VALID_STATUSES
