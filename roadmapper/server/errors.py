"""
Map exceptions raised while handling a request to an error message and
HTTP status.
"""

from typing import Tuple

from roadmapper.exceptions import ConfigurationError, NotFoundError, ValidationError
from roadmapper.notion.client import NotionAPIError

INVALID_TOKEN = "Invalid Notion token"
NOT_FOUND = "Resource not found"

# Notion error codes that map to something other than 500
NOTION_CODE_STATUS = {
    "unauthorized": (INVALID_TOKEN, 401),
    "restricted_resource": (INVALID_TOKEN, 401),
    "object_not_found": (NOT_FOUND, 404),
}


def classify_error(error: Exception) -> Tuple[str, int]:
    """
    Convert an exception to ``(message, status)``.

    Structured Notion error codes win. Errors without a code fall back to
    matching substrings of the message.
    """
    if isinstance(error, ValidationError):
        return str(error), 400
    if isinstance(error, NotFoundError):
        return str(error) or NOT_FOUND, 404
    if isinstance(error, ConfigurationError):
        return str(error), 500

    if isinstance(error, NotionAPIError) and error.code:
        if error.code in NOTION_CODE_STATUS:
            return NOTION_CODE_STATUS[error.code]
        if error.code == "validation_error":
            return error.message, 400

    message = str(error)
    if not message:
        return "Unknown error", 500
    if "unauthorized" in message or "token" in message:
        return INVALID_TOKEN, 401
    if "not found" in message or "Could not find" in message:
        return NOT_FOUND, 404
    return message, 500
