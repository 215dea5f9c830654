"""Event bus infrastructure settings."""

from pydantic import Field

from infrastructure.configuration.base import InfrastructureSettings


class EventBusSettings(InfrastructureSettings):
    """Event bus configuration.

    Environment Variables:
        EVENTS_SUBJECT_PREFIX: Prefix prepended to every published subject
            (e.g., 'events' produces 'events.members').
        EVENTS_VERSION: Version string stamped on every published event.

    Example:
        ```python
        from infrastructure.services import get_settings

        settings = get_settings()
        subject = f"{settings.events.subject_prefix}.members"
        ```
    """

    subject_prefix: str = Field(default="events", alias="EVENTS_SUBJECT_PREFIX")
    version: str = Field(default="v1alpha1", alias="EVENTS_VERSION")
