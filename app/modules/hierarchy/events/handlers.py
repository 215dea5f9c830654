"""In-process consumers of hierarchy events.

Downstream systems subscribe to the member and hierarchy subjects; inside
the process the only consumer is the structured-log writer registered here.
"""

from typing import List

from infrastructure.events import get_handlers_for_event, register_event_handler
from infrastructure.events.handlers import LoggingHandler
from infrastructure.logging import get_module_logger
from modules.hierarchy.events.subjects import (
    HIERARCHIES_SUBJECT,
    MEMBERS_SUBJECT,
    qualified_subject,
)

logger = get_module_logger()

members_log_handler = LoggingHandler(component="hierarchy_members")
hierarchies_log_handler = LoggingHandler(component="hierarchy_edges")


def register_handlers(prefix: str) -> List[str]:
    """Register the log handlers for the member and hierarchy subjects.

    Safe to call more than once: a handler already registered for a subject
    is not added again.

    Args:
        prefix: Configured subject prefix

    Returns:
        The event types handlers were registered for
    """
    registrations = [
        (qualified_subject(prefix, MEMBERS_SUBJECT), members_log_handler),
        (qualified_subject(prefix, HIERARCHIES_SUBJECT), hierarchies_log_handler),
    ]
    for event_type, handler in registrations:
        if handler in get_handlers_for_event(event_type):
            continue
        register_event_handler(event_type)(handler)
        logger.debug("hierarchy_event_handler_registered", event_type=event_type)
    return [event_type for event_type, _ in registrations]
