"""Tests for club directory routes."""

import pytest

from api.v1.routes.club import router


@pytest.fixture
def client(client_factory):
    return client_factory(router)


@pytest.mark.unit
class TestUpdatePlayer:
    def test_player_name_recorded(self, client, club_directory):
        response = client.put("/api/v1/club/players/p1", json={"name": "Inès"})

        assert response.status_code == 200
        assert response.json() == {"user_id": "p1", "name": "Inès"}
        assert club_directory.get_player_name("p1") == "Inès"

    def test_rename_replaces_previous_name(self, client, club_directory):
        client.put("/api/v1/club/players/sender-1", json={"name": "Lucas M."})

        assert club_directory.get_player_name("sender-1") == "Lucas M."

    def test_blank_name_rejected(self, client, club_directory):
        response = client.put("/api/v1/club/players/p1", json={"name": "  "})

        assert response.status_code == 400
        assert club_directory.get_player_name("p1") is None

    def test_missing_name_is_unprocessable(self, client):
        response = client.put("/api/v1/club/players/p1", json={})

        assert response.status_code == 422


@pytest.mark.unit
class TestUpdateChannelParticipants:
    def test_participants_replaced(self, client, club_directory):
        response = client.put(
            "/api/v1/club/channels/channel-7/participants",
            json={"user_ids": ["sender-1", "player-3"]},
        )

        assert response.status_code == 200
        assert response.json() == {
            "channel_id": "channel-7",
            "user_ids": ["sender-1", "player-3"],
        }
        assert club_directory.get_channel_participants("channel-7") == [
            "sender-1",
            "player-3",
        ]

    def test_blank_participant_rejected(self, client, club_directory):
        response = client.put(
            "/api/v1/club/channels/channel-7/participants",
            json={"user_ids": ["sender-1", ""]},
        )

        assert response.status_code == 400
        assert club_directory.get_channel_participants("channel-7") == [
            "sender-1",
            "player-2",
        ]
