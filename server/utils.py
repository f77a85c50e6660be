"""Utility helper functions for the server."""

import uuid
from typing import List


def generate_uuid() -> str:
    """
    Generate a new UUID4 string.

    Returns:
        UUID4 string
    """
    return str(uuid.uuid4())


def parse_names(names_str: str) -> List[str]:
    """
    Parse a comma-separated list of usernames.

    Args:
        names_str: Comma-separated names (e.g., "alice, bob")

    Returns:
        List of trimmed, non-empty names
    """
    return [name.strip() for name in names_str.split(',') if name.strip()]
