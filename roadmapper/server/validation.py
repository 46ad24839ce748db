"""
Request body validation against the payload schemas.
"""

from typing import Any, Optional, Type, TypeVar

from pydantic import ValidationError as PydanticValidationError

from roadmapper.constants import VALIDATION_FAILED
from roadmapper.models.base import RoadmapModel
from roadmapper.server.http import ApiResponse
from roadmapper.utils import validation_details

Schema = TypeVar("Schema", bound=RoadmapModel)


def validate_body(schema: Type[Schema], body: Any, res: ApiResponse) -> Optional[Schema]:
    """
    Parse a request body, answering 400 on failure.

    Args:
        schema: Payload schema to validate against.
        body: Decoded JSON body; anything but an object is treated as empty.
        res: Response to write the error to.

    Returns:
        The parsed payload, or None if a 400 was written.
    """
    if not isinstance(body, dict):
        body = {}
    try:
        return schema.model_validate(body)
    except PydanticValidationError as e:
        res.status(400).json({"error": VALIDATION_FAILED, "details": validation_details(e)})
        return None
