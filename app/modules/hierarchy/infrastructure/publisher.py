"""Event bus client for hierarchy change notifications.

Events are published on ``<prefix>.<subject>`` with the configured version
stamped on the payload. The default transport hands events to the
in-process dispatcher; any callable taking ``(subject, payload)`` can be
injected instead (e.g. a message broker client).
"""

from typing import Any, Callable, Dict, Optional

from pydantic import BaseModel

from infrastructure.events import Event, dispatch_event
from infrastructure.logging import get_module_logger
from infrastructure.services import get_settings
from modules.hierarchy.domain.errors import EventPublishFailure
from modules.hierarchy.events.subjects import qualified_subject

logger = get_module_logger()

Transport = Callable[[str, Dict[str, Any]], Any]


def dispatcher_transport(subject: str, payload: Dict[str, Any]) -> None:
    """Deliver a payload to in-process handlers registered for ``subject``.

    Dispatch is strict, so a failing handler surfaces as an error to the
    publisher instead of being logged and dropped.
    """
    dispatch_event(
        Event(event_type=subject, actor_id=payload.get("actor_id", ""), metadata=payload),
        strict=True,
    )


class EventBusClient:
    """Publishes hierarchy and membership events.

    Args:
        transport: Callable delivering ``(subject, payload)``; defaults to the
            in-process dispatcher
        prefix: Subject prefix; defaults to ``settings.events.subject_prefix``
        version: Version stamped on events; defaults to ``settings.events.version``
    """

    def __init__(
        self,
        transport: Optional[Transport] = None,
        prefix: Optional[str] = None,
        version: Optional[str] = None,
    ):
        if prefix is None or version is None:
            settings = get_settings()
            prefix = settings.events.subject_prefix if prefix is None else prefix
            version = settings.events.version if version is None else version
        self.transport = transport or dispatcher_transport
        self.prefix = prefix
        self.version = version

    def subject(self, subject: str) -> str:
        return qualified_subject(self.prefix, subject)

    def publish(self, subject: str, event: Optional[BaseModel]) -> None:
        """Publish one event.

        Args:
            subject: Unqualified subject (e.g. "members")
            event: Event payload model

        Raises:
            EventPublishFailure: If the event is empty or the transport failed
        """
        full_subject = self.subject(subject)
        if event is None:
            raise EventPublishFailure("empty event", subject=full_subject)

        if not getattr(event, "version", None):
            event = event.model_copy(update={"version": self.version})
        payload = event.model_dump(mode="json")

        try:
            self.transport(full_subject, payload)
        except Exception as e:  # pylint: disable=broad-except
            logger.warning(
                "event_publish_failed",
                subject=full_subject,
                error=str(e),
            )
            raise EventPublishFailure(
                f"failed to publish event on {full_subject}: {e}", subject=full_subject
            ) from e

        logger.debug("event_published", subject=full_subject, action=payload.get("action"))
