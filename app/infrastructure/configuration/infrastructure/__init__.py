"""Infrastructure settings __init__ - exports all infrastructure settings."""

from infrastructure.configuration.infrastructure.events import EventBusSettings

__all__ = [
    "EventBusSettings",
]
