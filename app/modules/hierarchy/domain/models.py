"""Internal data models for the hierarchy module.

Lightweight dataclasses representing the rows read from the group store and
the memberships derived from them. These are NOT Pydantic models and do NOT
provide runtime validation; request/response validation lives in
``modules.hierarchy.schemas``.

Key distinctions:
  - Group, DirectMembership, HierarchyEdge: rows owned by the group store
  - EnumeratedMembership: derived from the rows, never persisted
  - MembershipDiff: the change between two membership snapshots
"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import List, Optional, Tuple
from uuid import uuid4


class ChangeKind(str, Enum):
    """Kinds of hierarchy change accepted by the mutator."""

    INSERT = "insert"
    UPDATE = "update"
    DELETE = "delete"


def is_live(expires_at: Optional[datetime], now: datetime) -> bool:
    """Return True when an optional expiry has not passed at ``now``."""
    return expires_at is None or expires_at > now


@dataclass(frozen=True)
class Group:
    """A group that users and other groups can be members of.

    Attributes:
        id: Unique identifier of the group.
        slug: URL-safe short name.
        name: Display name.
        approver_group_id: Optional group whose admins approve requests for this one.
        deleted_at: Soft-delete marker; deleted groups are ignored by the hierarchy.
    """

    id: str
    slug: str = ""
    name: str = ""
    approver_group_id: Optional[str] = None
    deleted_at: Optional[datetime] = None

    @property
    def is_deleted(self) -> bool:
        return self.deleted_at is not None


@dataclass(frozen=True)
class DirectMembership:
    """An explicit (user, group) assignment.

    Attributes:
        user_id: Member user.
        group_id: Group the user was added to.
        is_admin: Whether the user administers the group.
        admin_expires_at: When the admin privilege lapses, if ever.
        expires_at: When the membership itself lapses, if ever.
    """

    user_id: str
    group_id: str
    is_admin: bool = False
    admin_expires_at: Optional[datetime] = None
    expires_at: Optional[datetime] = None

    def is_admin_at(self, now: datetime) -> bool:
        """Admin flag as of ``now``, honoring the admin expiry."""
        return self.is_admin and is_live(self.admin_expires_at, now)


@dataclass(frozen=True)
class HierarchyEdge:
    """A member group nested inside a parent group.

    Membership of ``member_group_id`` propagates upward into ``parent_group_id``.

    Attributes:
        parent_group_id: The containing group.
        member_group_id: The nested group.
        expires_at: When the nesting lapses, if ever.
        id: Unique identifier of the edge.
        created_at: When the edge was inserted.
        updated_at: When the edge was last changed.
    """

    parent_group_id: str
    member_group_id: str
    expires_at: Optional[datetime] = None
    id: str = field(default_factory=lambda: str(uuid4()))
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @property
    def key(self) -> Tuple[str, str]:
        return (self.parent_group_id, self.member_group_id)

    def is_live_at(self, now: datetime) -> bool:
        return is_live(self.expires_at, now)


@dataclass(frozen=True)
class EnumeratedMembership:
    """A user's effective membership in one group.

    Attributes:
        user_id: Member user.
        group_id: Group the user effectively belongs to.
        direct: True when the user holds an explicit membership in the group.
        is_admin: True only for a direct, unexpired admin membership.
        expires_at: Expiry of the direct membership; None for indirect ones.
    """

    user_id: str
    group_id: str
    direct: bool
    is_admin: bool = False
    expires_at: Optional[datetime] = None

    @property
    def key(self) -> Tuple[str, str]:
        return (self.user_id, self.group_id)


@dataclass
class MembershipDiff:
    """Memberships that appeared or disappeared across a mutation."""

    added: List[EnumeratedMembership] = field(default_factory=list)
    removed: List[EnumeratedMembership] = field(default_factory=list)

    @property
    def is_empty(self) -> bool:
        return not self.added and not self.removed


# A full membership snapshot as produced by the bulk enumeration
MembershipSnapshot = List[EnumeratedMembership]
