"""Infrastructure adapters - group store and event bus client."""

from modules.hierarchy.infrastructure.publisher import EventBusClient
from modules.hierarchy.infrastructure.store import GroupStore, InMemoryGroupStore

__all__ = [
    "EventBusClient",
    "GroupStore",
    "InMemoryGroupStore",
]
