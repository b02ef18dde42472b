"""
Core Utilities.

Shared utility functions used across the package.
All modules should import utilities from this module.
"""

from datetime import datetime, timezone
from uuid import uuid4


def utc_now() -> datetime:
    """
    Return current UTC time as timezone-naive datetime.

    All datetime values in the application are timezone-naive
    and assumed to be UTC.

    Returns:
        Current UTC time with tzinfo stripped
    """
    return datetime.now(timezone.utc).replace(tzinfo=None)


def generate_id() -> str:
    """Return a new random identifier."""
    return str(uuid4())
