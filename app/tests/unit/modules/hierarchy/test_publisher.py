"""Unit tests for the hierarchy event bus client."""

from unittest.mock import MagicMock, patch

import pytest

from infrastructure.events import register_event_handler
from modules.hierarchy.domain.errors import EventPublishFailure
from modules.hierarchy.events.subjects import EventAction
from modules.hierarchy.infrastructure.publisher import EventBusClient
from modules.hierarchy.schemas import HierarchyEvent, MembershipEvent

pytestmark = pytest.mark.unit


def _member_event(**overrides):
    fields = {
        "action": EventAction.CREATE,
        "group_id": "g1",
        "user_id": "u1",
        "actor_id": "actor-1",
        "audit_id": "audit-1",
    }
    fields.update(overrides)
    return MembershipEvent(**fields)


class TestEventBusClient:
    def test_publish_qualifies_subject_and_stamps_version(self):
        transport = MagicMock()
        client = EventBusClient(transport=transport, prefix="events", version="v1alpha1")

        client.publish("members", _member_event())

        transport.assert_called_once_with(
            "events.members",
            {
                "version": "v1alpha1",
                "action": "CREATE",
                "group_id": "g1",
                "user_id": "u1",
                "actor_id": "actor-1",
                "audit_id": "audit-1",
            },
        )

    def test_explicit_event_version_is_kept(self):
        transport = MagicMock()
        client = EventBusClient(transport=transport, prefix="events", version="v1alpha1")

        client.publish("members", _member_event(version="v0"))

        assert transport.call_args.args[1]["version"] == "v0"

    def test_empty_prefix_publishes_bare_subject(self):
        transport = MagicMock()
        client = EventBusClient(transport=transport, prefix="", version="v1")

        client.publish("hierarchies", HierarchyEvent(action=EventAction.DELETE, group_id="p"))

        assert transport.call_args.args[0] == "hierarchies"

    def test_empty_event_is_rejected(self):
        transport = MagicMock()
        client = EventBusClient(transport=transport, prefix="events", version="v1")

        with pytest.raises(EventPublishFailure, match="empty event") as exc_info:
            client.publish("members", None)

        assert exc_info.value.subject == "events.members"
        transport.assert_not_called()

    def test_transport_error_becomes_publish_failure(self):
        transport = MagicMock(side_effect=ConnectionError("broker unreachable"))
        client = EventBusClient(transport=transport, prefix="events", version="v1")

        with pytest.raises(EventPublishFailure) as exc_info:
            client.publish("members", _member_event())

        assert exc_info.value.subject == "events.members"
        assert isinstance(exc_info.value.__cause__, ConnectionError)

    def test_defaults_come_from_settings(self, monkeypatch):
        monkeypatch.setenv("EVENTS_SUBJECT_PREFIX", "governor")
        monkeypatch.setenv("EVENTS_VERSION", "v9")

        client = EventBusClient(transport=MagicMock())

        assert client.prefix == "governor"
        assert client.version == "v9"
        assert client.subject("members") == "governor.members"


class TestDispatcherTransport:
    def test_default_transport_dispatches_in_process(self, clear_event_handlers):
        handler = MagicMock()
        register_event_handler("events.members")(handler)
        client = EventBusClient(prefix="events", version="v1alpha1")

        client.publish("members", _member_event())

        handler.assert_called_once()
        event = handler.call_args.args[0]
        assert event.event_type == "events.members"
        assert event.actor_id == "actor-1"
        assert event.metadata["user_id"] == "u1"
        assert event.metadata["version"] == "v1alpha1"

    def test_failing_consumer_surfaces_as_publish_failure(self, clear_event_handlers):
        register_event_handler("events.members")(
            MagicMock(side_effect=RuntimeError("consumer crashed"))
        )
        client = EventBusClient(prefix="events", version="v1alpha1")

        with pytest.raises(EventPublishFailure):
            client.publish("members", _member_event())

    def test_no_consumers_is_not_an_error(self, clear_event_handlers):
        client = EventBusClient(prefix="events", version="v1alpha1")

        with patch(
            "modules.hierarchy.infrastructure.publisher.dispatch_event"
        ) as mock_dispatch:
            client.publish("members", _member_event())

        assert mock_dispatch.call_args.kwargs == {"strict": True}
