"""Event subjects and actions published by the hierarchy module."""

from enum import Enum

# Subjects are published under the configured prefix, e.g. "events.members"
MEMBERS_SUBJECT = "members"
HIERARCHIES_SUBJECT = "hierarchies"


class EventAction(str, Enum):
    """Actions carried by hierarchy and membership events."""

    CREATE = "CREATE"
    UPDATE = "UPDATE"
    DELETE = "DELETE"


def qualified_subject(prefix: str, subject: str) -> str:
    """Join the configured prefix and a subject ("events" + "members" -> "events.members")."""
    if not prefix:
        return subject
    return f"{prefix}.{subject}"
