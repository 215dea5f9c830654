"""Shared fixtures for the test suite."""

import pytest

from infrastructure.events import clear_handlers
from infrastructure.logging import clear_request_context
from infrastructure.services import get_settings
from tests.factories.hierarchy import (
    NOW,
    fixed_clock,
    make_engineering_store,
    make_five_group_store,
)


@pytest.fixture(autouse=True)
def reset_settings_cache():
    """Settings are cached per process; reload them for every test."""
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture(autouse=True)
def reset_logging_context():
    yield
    clear_request_context()


@pytest.fixture
def clear_event_handlers():
    """Clear event handlers before and after test."""
    clear_handlers()
    yield
    clear_handlers()


@pytest.fixture
def now():
    return NOW


@pytest.fixture
def clock():
    return fixed_clock(NOW)


@pytest.fixture
def engineering_store():
    """Eng <- Platform <- Backend with one user in Backend."""
    return make_engineering_store()


@pytest.fixture
def five_group_store():
    """Five users / five groups fixture with one soft-deleted group."""
    return make_five_group_store()
