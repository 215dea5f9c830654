"""Feature settings __init__ - exports all feature settings."""

from infrastructure.configuration.features.hierarchy import HierarchyFeatureSettings

__all__ = [
    "HierarchyFeatureSettings",
]
