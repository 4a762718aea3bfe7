"""Timestamp helpers shared by the models."""

from datetime import datetime, timezone
from typing import Optional


def utc_now() -> datetime:
    """Current time as an aware UTC datetime."""
    return datetime.now(timezone.utc)


def format_timestamp(value: Optional[datetime]) -> Optional[str]:
    """ISO 8601 text, or None."""
    if value is None:
        return None
    return value.isoformat() if isinstance(value, datetime) else str(value)


def parse_timestamp(value) -> Optional[datetime]:
    """Parse ISO 8601 text (YAML may already hand back a datetime)."""
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value
    return datetime.fromisoformat(str(value))
