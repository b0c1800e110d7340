"""Serialization utilities for converting models to API responses."""
from typing import Optional
from uuid import UUID


def serialize_uuid(value: Optional[UUID]) -> Optional[str]:
    """
    Serialize UUID to string.

    Args:
        value: UUID value or None

    Returns:
        String representation or None
    """
    return str(value) if value else None


def parse_uuid(value: str, label: str = "ID") -> UUID:
    """Parse a path/body identifier, raising ValueError with a readable message."""
    try:
        return UUID(str(value))
    except (TypeError, ValueError):
        raise ValueError(f"Invalid {label} format: {value}")
