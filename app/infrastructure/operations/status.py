"""Operation status enumeration.

Status codes for operation results, used to classify outcomes of operations
across the application for appropriate error handling and retries.
"""

from enum import Enum


class OperationStatus(Enum):
    """Status codes for operation results.

    Attributes:
        SUCCESS: Operation completed successfully
        TRANSIENT_ERROR: Retryable error (datastore unavailable, timeout)
        PERMANENT_ERROR: Non-retryable error (validation)
        NOT_FOUND: Resource not found
        CONFLICT: Request conflicts with current state (duplicate, cycle)
    """

    SUCCESS = "success"
    TRANSIENT_ERROR = "transient_error"
    PERMANENT_ERROR = "permanent_error"
    NOT_FOUND = "not_found"
    CONFLICT = "conflict"
