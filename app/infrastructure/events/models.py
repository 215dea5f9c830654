"""Event models for infrastructure event system.

Provides the generic Event base class passed to registered handlers.
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict
from uuid import UUID, uuid4


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class Event:
    """Base class for all events in the system.

    Events are immutable records of something that happened, used for
    downstream notifications and cross-module communication.
    """

    event_type: str
    """The type of event (e.g., 'events.members')."""

    timestamp: datetime = field(default_factory=_utcnow)
    """When the event occurred (UTC)."""

    correlation_id: UUID = field(default_factory=uuid4)
    """Unique ID to track related events across the system."""

    actor_id: str = ""
    """User who triggered the event."""

    metadata: Dict[str, Any] = field(default_factory=dict)
    """Custom metadata for this event type."""

