"""Group hierarchy feature settings."""

from pydantic import Field, field_validator

from infrastructure.configuration.base import FeatureSettings


class HierarchyFeatureSettings(FeatureSettings):
    """Configuration for nested group hierarchies and membership diffing.

    Environment Variables:
        HIERARCHY_LOCK_TIMEOUT_SECONDS: How long a hierarchy mutation waits for
            the graph lock before giving up with a conflict. A negative value
            waits forever.
        HIERARCHY_EMIT_HIERARCHY_EVENTS: Publish one event for the edge itself
            in addition to the per-member events.

    Example:
        ```python
        from infrastructure.services import get_settings

        settings = get_settings()
        timeout = settings.hierarchy.lock_timeout_seconds
        ```
    """

    lock_timeout_seconds: float = Field(
        default=30.0,
        alias="HIERARCHY_LOCK_TIMEOUT_SECONDS",
        description="Seconds to wait for the hierarchy lock (-1 waits forever)",
    )
    emit_hierarchy_events: bool = Field(
        default=True,
        alias="HIERARCHY_EMIT_HIERARCHY_EVENTS",
        description="Publish an event on the hierarchies subject for each change",
    )

    @field_validator("lock_timeout_seconds", mode="after")
    @classmethod
    def _validate_lock_timeout(cls, v: float) -> float:
        """Normalize any negative timeout to -1 (wait forever)."""
        if v < 0:
            return -1.0
        return v
