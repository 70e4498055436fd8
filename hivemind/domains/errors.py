"""
Error taxonomy for HiveMind operations.

Domain errors are raised before any write happens. StorageError comes from the
data store adapters and wraps the underlying I/O or HTTP failure.
"""

from __future__ import annotations


class HiveMindError(Exception):
    """Base class for every error this package raises on purpose."""


class NotFound(HiveMindError):
    """An entity id did not resolve."""

    def __init__(self, kind: str, entity_id: str | None) -> None:
        super().__init__(f"{kind} not found: {entity_id}")
        self.kind = kind
        self.entity_id = entity_id


class Unauthorized(HiveMindError):
    """The acting user lacks the role the operation requires."""


class InvalidState(HiveMindError):
    """A transition was attempted on a terminal or ineligible entity."""


class ValidationError(HiveMindError):
    """A required field is empty or a value is out of range."""


class StorageError(HiveMindError):
    """Raised when the data store cannot be read or written."""

    def __init__(self, message: str, original: Exception | None = None) -> None:
        super().__init__(message)
        self.original = original
