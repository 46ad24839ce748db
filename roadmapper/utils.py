"""
Utility functions for the Roadmapper application.
"""

import uuid
from datetime import date, datetime
from typing import Dict, List, Optional, Union

from pydantic import ValidationError as PydanticValidationError

from roadmapper.constants import DATE_FORMATS, TEMP_ID_PREFIX


def parse_date(date_string: str) -> Optional[date]:
    """
    Parse a date string using multiple supported formats.

    Args:
        date_string: The date string to parse.

    Returns:
        A date object if parsing succeeds, None otherwise.

    Examples:
        >>> parse_date("2024-12-31")  # ISO 8601
        >>> parse_date("31/12/2024")  # DD/MM/YYYY
        >>> parse_date("31 December 2024")  # DD Month YYYY
    """
    for fmt in DATE_FORMATS:
        try:
            return datetime.strptime(date_string.strip(), fmt).date()
        except ValueError:
            continue
    return None


def format_date(value: Union[date, datetime]) -> str:
    """
    Format a date to the standard ISO 8601 format.

    Args:
        value: The date or datetime to format.

    Returns:
        A string in YYYY-MM-DD format.
    """
    return value.strftime("%Y-%m-%d")


def generate_id() -> str:
    """Generate a new permanent id for locally stored entities."""
    return str(uuid.uuid4())


def generate_temp_id() -> str:
    """Generate a placeholder id for an optimistically created entity."""
    return f"{TEMP_ID_PREFIX}{uuid.uuid4().hex[:12]}"


def is_temp_id(entity_id: str) -> bool:
    """Check whether an id is a not-yet-confirmed placeholder."""
    return entity_id.startswith(TEMP_ID_PREFIX)


def now_iso() -> str:
    """Current timestamp in ISO 8601 format."""
    return datetime.now().isoformat()


def validation_details(error: PydanticValidationError) -> List[Dict[str, str]]:
    """
    Flatten a pydantic ValidationError into ``{field, message}`` pairs.

    Field paths are dot-joined; model-level errors get an empty field.
    """
    details = []
    for item in error.errors():
        message = item.get("msg", "Invalid value")
        if message.startswith("Value error, "):
            message = message[len("Value error, "):]
        details.append({
            "field": ".".join(str(part) for part in item.get("loc", ())),
            "message": message,
        })
    return details
