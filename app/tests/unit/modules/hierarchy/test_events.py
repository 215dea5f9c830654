"""Unit tests for hierarchy event subjects and handler registration."""

import pytest

from infrastructure.events import Event, dispatch_event, get_handlers_for_event
from modules.hierarchy.events import (
    HIERARCHIES_SUBJECT,
    MEMBERS_SUBJECT,
    qualified_subject,
    register_handlers,
)
from modules.hierarchy.events.handlers import (
    hierarchies_log_handler,
    members_log_handler,
)

pytestmark = pytest.mark.unit


class TestQualifiedSubject:
    def test_prefix_is_joined_with_dot(self):
        assert qualified_subject("events", MEMBERS_SUBJECT) == "events.members"
        assert qualified_subject("events", HIERARCHIES_SUBJECT) == "events.hierarchies"

    def test_empty_prefix(self):
        assert qualified_subject("", MEMBERS_SUBJECT) == "members"


class TestRegisterHandlers:
    def test_registers_log_handlers_for_both_subjects(self, clear_event_handlers):
        event_types = register_handlers("events")

        assert event_types == ["events.members", "events.hierarchies"]
        assert get_handlers_for_event("events.members") == [members_log_handler]
        assert get_handlers_for_event("events.hierarchies") == [hierarchies_log_handler]

    def test_registration_is_idempotent(self, clear_event_handlers):
        register_handlers("events")
        register_handlers("events")

        assert len(get_handlers_for_event("events.members")) == 1

    def test_registered_handlers_accept_events(self, clear_event_handlers):
        register_handlers("events")

        results = dispatch_event(
            Event(
                event_type="events.members",
                actor_id="actor-1",
                metadata={"action": "CREATE", "group_id": "g1", "user_id": "u1"},
            ),
            strict=True,
        )

        assert results == [None]
