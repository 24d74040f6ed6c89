"""Shared pytest fixtures."""

import pytest

from api.dependencies.rate_limits import get_limiter
from infrastructure.services import providers
from tests.factories.settings import make_settings


@pytest.fixture(autouse=True)
def clear_provider_caches():
    """Reset application-scoped singletons between tests."""
    providers.get_settings.cache_clear()
    providers.get_notification_service.cache_clear()
    providers.get_club_directory.cache_clear()
    yield
    providers.get_settings.cache_clear()
    providers.get_notification_service.cache_clear()
    providers.get_club_directory.cache_clear()


@pytest.fixture(autouse=True)
def reset_rate_limits():
    """Rate limit counters are process-wide; start every test from zero."""
    get_limiter().reset()
    yield
    get_limiter().reset()


@pytest.fixture
def settings_factory():
    """Factory for Settings instances that ignore the process environment.

    Example:
        settings = settings_factory(webpush={"VAPID_PRIVATE_KEY": "key", ...})
    """
    return make_settings


@pytest.fixture
def test_settings():
    """Settings with every provider unconfigured and small dispatch bounds."""
    return make_settings()
