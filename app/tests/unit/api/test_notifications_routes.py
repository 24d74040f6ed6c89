"""Tests for the manual notification route."""

from unittest.mock import MagicMock

import pytest

from api.v1.routes.notifications import router
from infrastructure.notifications.errors import InvalidEvent
from infrastructure.notifications.models import (
    AllSubscribers,
    DispatchReport,
    SpecificUsers,
)
from tests.factories.notifications import (
    make_delivered,
    make_fcm_address,
    make_onesignal_address,
    make_permanent_failure,
)


@pytest.fixture
def mock_service():
    service = MagicMock()
    service.dispatch.return_value = DispatchReport.from_results(
        [
            make_delivered(make_onesignal_address("p1")),
            make_permanent_failure(make_fcm_address("dead")),
        ]
    )
    return service


@pytest.mark.unit
class TestSendNotification:
    def test_report_returned(self, client_factory, mock_service):
        client = client_factory(router, service=mock_service)

        response = client.post(
            "/api/v1/notifications",
            json={"title": "Annonce", "body": "Assemblée générale vendredi"},
        )

        assert response.status_code == 200
        body = response.json()
        assert body["attempted"] == 2
        assert body["delivered"] == 1
        assert body["transient_failures"] == 0
        assert body["permanent_failures"] == [{"provider": "fcm", "token": "dead"}]
        assert body["summary_text"] == "sent to 1 of 2"
        assert len(body["results"]) == 2

    def test_default_audience_is_everyone(self, client_factory, mock_service):
        client = client_factory(router, service=mock_service)

        client.post("/api/v1/notifications", json={"title": "Annonce", "body": "Texte"})

        event = mock_service.dispatch.call_args.args[0]
        assert isinstance(event.audience, AllSubscribers)

    def test_targeted_users(self, client_factory, mock_service):
        client = client_factory(router, service=mock_service)

        client.post(
            "/api/v1/notifications",
            json={
                "title": "Annonce",
                "body": "Texte",
                "user_ids": ["u1", "u2"],
                "link": "https://club.example/news/1",
                "data": {"kind": "announcement"},
            },
        )

        event = mock_service.dispatch.call_args.args[0]
        assert event.audience == SpecificUsers(user_ids=frozenset({"u1", "u2"}))
        assert event.link == "https://club.example/news/1"
        assert event.data == {"kind": "announcement"}

    def test_invalid_event_rejected(self, client_factory, mock_service):
        mock_service.dispatch.side_effect = InvalidEvent("Notification title cannot be empty")
        client = client_factory(router, service=mock_service)

        response = client.post("/api/v1/notifications", json={"title": "", "body": "Texte"})

        assert response.status_code == 400
        assert response.json() == {"detail": "Notification title cannot be empty"}

    def test_missing_body_field(self, client_factory, mock_service):
        client = client_factory(router, service=mock_service)

        response = client.post("/api/v1/notifications", json={"title": "Annonce"})

        assert response.status_code == 422
        mock_service.dispatch.assert_not_called()

    def test_real_service_with_unconfigured_providers(self, client_factory, notification_service):
        notification_service.subscribe("u1", make_onesignal_address("p1"))
        client = client_factory(router)

        response = client.post("/api/v1/notifications", json={"title": "Annonce", "body": "Texte"})

        body = response.json()
        assert body["attempted"] == 1
        assert body["delivered"] == 0
        assert body["results"][0]["reason"] == "not configured"
        assert notification_service.registry.get_subscriber("u1").is_subscribed
