"""Unit tests for the event logging handler."""

import pytest
from unittest.mock import MagicMock, patch

from infrastructure.events.handlers import LoggingHandler

pytestmark = pytest.mark.unit


class TestLoggingHandler:
    """Tests for LoggingHandler."""

    def test_handle_logs_event_fields(self, event_factory):
        """Handler binds event identity and logs the metadata."""
        bound = MagicMock()
        with patch("infrastructure.events.handlers.logging.logger") as mock_logger:
            mock_logger.bind.return_value.bind.return_value = bound
            handler = LoggingHandler(component="hierarchy_members")
            event = event_factory(
                event_type="events.members",
                actor_id="user-1",
                metadata={"action": "CREATE", "group_id": "g1", "user_id": "u1"},
            )

            handler.handle(event)

        mock_logger.bind.assert_called_once_with(handler="hierarchy_members")
        mock_logger.bind.return_value.bind.assert_called_once_with(
            event_type="events.members",
            correlation_id=str(event.correlation_id),
            actor_id="user-1",
        )
        bound.info.assert_called_once()
        args, kwargs = bound.info.call_args
        assert args == ("event_occurred",)
        assert kwargs["metadata"]["action"] == "CREATE"

    def test_handler_is_callable(self, event_factory):
        """Handler instances can be registered directly as event handlers."""
        handler = LoggingHandler()
        with patch.object(handler, "log") as mock_log:
            handler(event_factory())

        mock_log.bind.return_value.info.assert_called_once()
