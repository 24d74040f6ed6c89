"""Fixtures for API route tests."""

import pytest
from fastapi.testclient import TestClient

from infrastructure.notifications.service import NotificationService
from infrastructure.services.providers import (
    get_club_directory,
    get_notification_service,
    get_settings,
)
from modules.club_events.directory import InMemoryClubDirectory
from utils.tests import create_test_app


@pytest.fixture
def notification_service(test_settings):
    """Real service with every provider unconfigured."""
    return NotificationService(test_settings)


@pytest.fixture
def club_directory():
    return InMemoryClubDirectory(
        players={"sender-1": "Lucas"},
        channels={"channel-7": ["sender-1", "player-2"]},
    )


@pytest.fixture
def client_factory(test_settings, notification_service, club_directory):
    """Build a TestClient around routers with provider dependencies overridden.

    Example:
        client = client_factory(router, service=mock_service)
    """

    def _factory(router, service=None, directory=None, settings=None):
        app = create_test_app(router, prefix="/api/v1")
        app.dependency_overrides[get_settings] = lambda: settings or test_settings
        app.dependency_overrides[get_notification_service] = (
            lambda: service or notification_service
        )
        app.dependency_overrides[get_club_directory] = (
            lambda: directory or club_directory
        )
        return TestClient(app)

    return _factory
