"""Hierarchy event subjects, actions and in-process handlers."""

from modules.hierarchy.events.handlers import register_handlers
from modules.hierarchy.events.subjects import (
    HIERARCHIES_SUBJECT,
    MEMBERS_SUBJECT,
    EventAction,
    qualified_subject,
)

__all__ = [
    "EventAction",
    "HIERARCHIES_SUBJECT",
    "MEMBERS_SUBJECT",
    "qualified_subject",
    "register_handlers",
]
