"""Event dispatcher for infrastructure event system.

Provides centralized event dispatcher with in-process handler registry.
Handlers are registered with decorators and called synchronously when
events are dispatched.
"""

from typing import Any, Callable, Dict, List, Tuple

from infrastructure.events.models import Event
from infrastructure.logging import get_module_logger

logger = get_module_logger()

# Event handler registry: event_type -> list of handlers
EVENT_HANDLERS: Dict[str, List[Callable]] = {}


class EventDispatchError(Exception):
    """Raised by a strict dispatch when one or more handlers failed.

    Attributes:
        event_type: The dispatched event type
        failures: (handler name, exception) pairs for every failed handler
    """

    def __init__(self, event_type: str, failures: List[Tuple[str, Exception]]):
        names = ", ".join(name for name, _ in failures)
        super().__init__(f"{len(failures)} handler(s) failed for {event_type}: {names}")
        self.event_type = event_type
        self.failures = failures


def register_event_handler(event_type: str):
    """Decorator to register an event handler for a specific event type.

    Args:
        event_type: The type of event to handle (e.g., 'events.members').

    Returns:
        Decorator function that registers the handler.
    """

    def decorator(handler_func: Callable) -> Callable:
        if event_type not in EVENT_HANDLERS:
            EVENT_HANDLERS[event_type] = []
        EVENT_HANDLERS[event_type].append(handler_func)
        handler_name = getattr(handler_func, "__name__", "unknown")
        logger.debug(
            "registered_event_handler",
            handler=handler_name,
            event_type=event_type,
            total_handlers=len(EVENT_HANDLERS[event_type]),
        )
        return handler_func

    return decorator


def dispatch_event(event: Event, strict: bool = False) -> List[Any]:
    """Dispatch event synchronously to all registered handlers.

    All handlers for the event type are called in order. If a handler
    raises an exception, it is caught and logged, and processing
    continues with remaining handlers.

    Args:
        event: The event to dispatch.
        strict: When True, raise EventDispatchError after all handlers ran
            if any of them failed.

    Returns:
        List of return values from all handlers that succeeded.

    Raises:
        EventDispatchError: In strict mode, when at least one handler failed.
    """
    results = []
    failures: List[Tuple[str, Exception]] = []
    handlers = EVENT_HANDLERS.get(event.event_type, [])

    logger.info(
        "dispatching_event",
        event_type=event.event_type,
        handler_count=len(handlers),
        correlation_id=str(event.correlation_id),
    )

    for handler in handlers:
        try:
            result = handler(event)
            results.append(result)
        except Exception as e:  # pylint: disable=broad-except
            handler_name = getattr(handler, "__name__", "unknown")
            failures.append((handler_name, e))
            logger.error(
                "event_handler_failed",
                handler=handler_name,
                event_type=event.event_type,
                error=str(e),
                correlation_id=str(event.correlation_id),
            )

    if strict and failures:
        raise EventDispatchError(event.event_type, failures)

    return results


def get_handlers_for_event(event_type: str) -> List[Callable]:
    """Get all handlers registered for a specific event type.

    Args:
        event_type: The event type to query.

    Returns:
        List of handler functions.
    """
    return EVENT_HANDLERS.get(event_type, [])


def clear_handlers() -> None:
    """Clear all registered handlers.

    WARNING: This is intended for testing only.
    """
    EVENT_HANDLERS.clear()
    logger.debug("cleared_all_event_handlers")
