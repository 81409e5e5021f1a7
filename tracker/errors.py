"""Error taxonomy for the tracker API layer."""

from typing import Optional


class TrackerError(Exception):
    """Base class for all tracker errors."""


class ValidationError(TrackerError):
    """A required argument is missing or a value is not recognized.

    Raised before any store call, so no partial write happens.
    """

    def __init__(self, message: str, details: Optional[list[tuple[str, str]]] = None):
        super().__init__(message)
        self.message = message
        self.details = details or []

    def to_dict(self) -> dict:
        return {
            "error": "validation_error",
            "message": self.message,
            "details": [{"field": f, "message": m} for f, m in self.details],
        }


class PersistenceError(TrackerError):
    """The document store is unreachable or rejected the operation."""

    def to_dict(self) -> dict:
        return {"error": "persistence_error", "message": str(self)}
