"""Infrastructure event system - centralized event dispatcher.

The event system provides a lightweight, in-process event dispatcher
for downstream notifications and cross-module communication.

Usage:

    from infrastructure.events import Event, register_event_handler, dispatch_event

    # Define a handler
    @register_event_handler("events.members")
    def handle_member_change(event: Event) -> None:
        # Process the event
        pass

    # Dispatch an event; strict dispatch raises if any handler failed
    event = Event(
        event_type="events.members",
        actor_id="user-1",
        metadata={"group_id": "123", "user_id": "456", "action": "CREATE"},
    )
    dispatch_event(event, strict=True)
"""

from infrastructure.events.dispatcher import (
    EventDispatchError,
    clear_handlers,
    dispatch_event,
    get_handlers_for_event,
    register_event_handler,
)
from infrastructure.events.models import Event

__all__ = [
    "Event",
    "EventDispatchError",
    "clear_handlers",
    "dispatch_event",
    "register_event_handler",
    "get_handlers_for_event",
]
