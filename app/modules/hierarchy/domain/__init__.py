"""Domain layer - data models and errors."""

from modules.hierarchy.domain.models import (
    ChangeKind,
    DirectMembership,
    EnumeratedMembership,
    Group,
    HierarchyEdge,
    MembershipDiff,
    MembershipSnapshot,
    is_live,
)
from modules.hierarchy.domain.errors import (
    ConflictError,
    ConflictReason,
    EventPublishFailure,
    HierarchyError,
    NotFoundError,
    StoreFailure,
)

__all__ = [
    "ChangeKind",
    "DirectMembership",
    "EnumeratedMembership",
    "Group",
    "HierarchyEdge",
    "MembershipDiff",
    "MembershipSnapshot",
    "is_live",
    "ConflictError",
    "ConflictReason",
    "EventPublishFailure",
    "HierarchyError",
    "NotFoundError",
    "StoreFailure",
]
