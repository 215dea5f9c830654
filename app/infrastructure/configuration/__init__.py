"""Infrastructure configuration module - public API.

This module provides centralized configuration management for the group
hierarchy service using Pydantic BaseSettings with domain-based organization.

Exports:
    Settings: Main settings class (for testing/overrides)
    HierarchyFeatureSettings: Hierarchy feature settings class
    EventBusSettings: Event bus settings class

Example:
    ```python
    from infrastructure.services import get_settings

    settings = get_settings()

    lock_timeout = settings.hierarchy.lock_timeout_seconds
    subject_prefix = settings.events.subject_prefix

    if settings.is_production:
        # Production-specific logic...
    ```
"""

from infrastructure.configuration.settings import Settings
from infrastructure.configuration.features import HierarchyFeatureSettings
from infrastructure.configuration.infrastructure import EventBusSettings

__all__ = ["Settings", "HierarchyFeatureSettings", "EventBusSettings"]
