"""Fixtures for infrastructure event system tests."""

import pytest
from datetime import datetime, timezone
from uuid import uuid4
from unittest.mock import MagicMock

from infrastructure.events.models import Event


@pytest.fixture
def event_factory():
    """Factory for creating test events."""

    def _factory(
        event_type: str = "test.event",
        timestamp: datetime = None,
        correlation_id=None,
        actor_id: str = "user-1",
        metadata: dict = None,
    ):
        return Event(
            event_type=event_type,
            timestamp=timestamp or datetime.now(timezone.utc),
            correlation_id=correlation_id or uuid4(),
            actor_id=actor_id,
            metadata=metadata or {},
        )

    return _factory


@pytest.fixture
def mock_event_handler():
    """Mock event handler function."""
    return MagicMock()
