"""Logging handler for event system.

Writes events to structured logs.
"""

from infrastructure.events.models import Event
from infrastructure.logging import get_module_logger

logger = get_module_logger()


class LoggingHandler:
    """Handles structured logging for events."""

    def __init__(self, component: str = "logging_handler"):
        """Initialize logging handler with base logger."""
        self.log = logger.bind(handler=component)

    def handle(self, event: Event) -> None:
        """Handle event by logging with structured fields.

        Args:
            event: The event to log.
        """
        log = self.log.bind(
            event_type=event.event_type,
            correlation_id=str(event.correlation_id),
            actor_id=event.actor_id,
        )
        log.info(
            "event_occurred",
            metadata=event.metadata,
            timestamp=event.timestamp.isoformat(),
        )

    __call__ = handle
