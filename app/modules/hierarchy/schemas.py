"""Pydantic request, response and event payload models for the hierarchy module."""

from datetime import datetime, timezone
from typing import Annotated, List, Optional
from uuid import uuid4

from pydantic import BaseModel, ConfigDict, Field, field_validator

from modules.hierarchy.domain.models import ChangeKind
from modules.hierarchy.events.subjects import EventAction


def _ensure_utc(value: Optional[datetime]) -> Optional[datetime]:
    """Treat naive datetimes as UTC so comparisons against the clock never fail."""
    if value is not None and value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


class HierarchyChangeRequest(BaseModel):
    """Schema for inserting, updating or deleting a hierarchy edge."""

    kind: Annotated[
        ChangeKind,
        Field(..., description="Change to apply", json_schema_extra={"example": "insert"}),
    ]
    parent_group_id: Annotated[
        str,
        Field(
            ...,
            min_length=1,
            description="Group the member group is nested in",
            json_schema_extra={"example": "group-eng"},
        ),
    ]
    member_group_id: Annotated[
        str,
        Field(
            ...,
            min_length=1,
            description="Group nested inside the parent",
            json_schema_extra={"example": "group-platform"},
        ),
    ]
    expires_at: Annotated[
        Optional[datetime],
        Field(
            default=None,
            description="When the nesting lapses; ignored for delete",
            json_schema_extra={"example": "2030-01-01T00:00:00Z"},
        ),
    ] = None
    actor_id: Annotated[
        str,
        Field(default="", description="User requesting the change"),
    ] = ""
    audit_id: Annotated[
        str,
        Field(
            default_factory=lambda: str(uuid4()),
            description="Audit record the change is attributed to",
        ),
    ]

    @field_validator("parent_group_id", "member_group_id", mode="before")
    @classmethod
    def _strip_ids(cls, v):
        if isinstance(v, str):
            return v.strip()
        return v

    @field_validator("expires_at", mode="after")
    @classmethod
    def _expires_at_utc(cls, v: Optional[datetime]) -> Optional[datetime]:
        return _ensure_utc(v)


class MembershipEvent(BaseModel):
    """Payload published on the members subject, one per changed (user, group) pair."""

    version: str = ""
    action: EventAction
    group_id: str
    user_id: str
    actor_id: str = ""
    audit_id: str = ""


class HierarchyEvent(BaseModel):
    """Payload published on the hierarchies subject for the edge itself.

    ``group_id`` is the parent group of the edge.
    """

    version: str = ""
    action: EventAction
    group_id: str
    actor_id: str = ""
    audit_id: str = ""


class MembershipResponse(BaseModel):
    """Schema for one effective membership."""

    model_config = ConfigDict(from_attributes=True)

    user_id: str
    group_id: str
    direct: bool
    is_admin: bool = False
    expires_at: Optional[datetime] = None


class HierarchyChangeResponse(BaseModel):
    """Schema for the outcome of a committed hierarchy change."""

    kind: ChangeKind
    parent_group_id: str
    member_group_id: str
    expires_at: Optional[datetime] = None
    audit_id: str = ""
    added: List[MembershipResponse] = Field(default_factory=list)
    removed: List[MembershipResponse] = Field(default_factory=list)
    published_events: int = 0


class HierarchyResponse(BaseModel):
    """Schema for one hierarchy edge as listed to callers."""

    id: str
    parent_group_id: str
    parent_slug: str = ""
    member_group_id: str
    member_slug: str = ""
    expires_at: Optional[datetime] = None
    is_live: bool = True
