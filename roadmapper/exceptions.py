"""
Custom exceptions for the Roadmapper application.
"""
from typing import Any, Dict, List, Optional


class RoadmapError(Exception):
    """Base exception for all Roadmapper errors."""
    pass


class ValidationError(RoadmapError):
    """Raised when validation fails for an item or request body.

    Carries field-level details in the ``{field, message}`` shape used by
    the HTTP error body.
    """

    def __init__(self, message: str, details: Optional[List[Dict[str, str]]] = None) -> None:
        super().__init__(message)
        self.details = details or []


class NotFoundError(RoadmapError):
    """Raised when a requested item is not found."""
    pass


class InvalidOperationError(RoadmapError):
    """Raised when an operation is not allowed in the current state."""
    pass


class ConfigurationError(RoadmapError):
    """Raised when there's a configuration or setup issue."""
    pass


class StorageError(RoadmapError):
    """Raised when reading or writing the local roadmap file fails."""
    pass


class ApiError(RoadmapError):
    """Raised by the HTTP backend when the server answers with an error status."""

    def __init__(
        self,
        status: int,
        message: str,
        details: Optional[List[Dict[str, Any]]] = None,
    ) -> None:
        super().__init__(message)
        self.status = status
        self.message = message
        self.details = details or []

    def __str__(self) -> str:
        return f"{self.message} (HTTP {self.status})"
