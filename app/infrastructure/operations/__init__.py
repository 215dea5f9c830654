"""Operation result types and status enums.

This module contains standardized result types returned at the service
boundary: a status enum and the OperationResult dataclass.
"""

from infrastructure.operations.result import OperationResult
from infrastructure.operations.status import OperationStatus

__all__ = [
    "OperationResult",
    "OperationStatus",
]
