"""Errors for the hierarchy module."""

from enum import Enum
from typing import Optional


class HierarchyError(Exception):
    """Base class for every error raised by the hierarchy module."""


class NotFoundError(HierarchyError):
    """Raised when a group or hierarchy edge does not exist.

    Attributes:
        resource: kind of resource that was missing ('group' or 'hierarchy')
        resource_id: identifier that was looked up
    """

    def __init__(self, message: str, resource: str = "", resource_id: str = ""):
        super().__init__(message)
        self.resource = resource
        self.resource_id = resource_id


class ConflictReason(str, Enum):
    """Why a hierarchy change conflicts with the current state."""

    DUPLICATE_EDGE = "duplicate_edge"
    CYCLE = "cycle"
    CONCURRENT_MUTATION = "concurrent_mutation"


class ConflictError(HierarchyError):
    """Raised when a change conflicts with the current hierarchy.

    Attributes:
        reason: ConflictReason telling callers which conflict occurred
    """

    def __init__(self, message: str, reason: ConflictReason):
        super().__init__(message)
        self.reason = reason


class StoreFailure(HierarchyError):
    """Raised when the underlying group store reports an error.

    Never retried inside the module; the original error is chained as
    ``__cause__``.

    Attributes:
        operation: the store primitive that failed
    """

    def __init__(self, message: str, operation: Optional[str] = None):
        super().__init__(message)
        self.operation = operation


class EventPublishFailure(HierarchyError):
    """Raised when a change notification could not be published.

    Only ever surfaced after the mutation committed; it does not undo it.

    Attributes:
        subject: subject the event was published on
    """

    def __init__(self, message: str, subject: Optional[str] = None):
        super().__init__(message)
        self.subject = subject
