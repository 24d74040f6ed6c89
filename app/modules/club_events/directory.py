"""Club directory: player names and chat channel participants.

The club database is owned by the web application; the notification service
only needs two lookups from it, behind the ClubDirectory protocol. The web
application keeps the directory current through the ``/club`` routes.
"""

import threading
from typing import Dict, Iterable, List, Optional, Protocol

from infrastructure.notifications.errors import InvalidArgument


class ClubDirectory(Protocol):
    """Lookups needed to address chat notifications, and their updates.

    Lookups return None when they fail; callers skip the notification in
    that case.
    """

    def get_player_name(self, user_id: str) -> Optional[str]:
        ...

    def get_channel_participants(self, channel_id: str) -> Optional[List[str]]:
        ...

    def set_player_name(self, user_id: str, name: str) -> None:
        ...

    def set_channel_participants(self, channel_id: str, user_ids: Iterable[str]) -> None:
        ...


def _require(value: str, field: str) -> str:
    if not isinstance(value, str) or not value.strip():
        raise InvalidArgument(f"{field} cannot be empty")
    return value


class InMemoryClubDirectory:
    """Thread-safe in-memory ClubDirectory."""

    def __init__(
        self,
        players: Optional[Dict[str, str]] = None,
        channels: Optional[Dict[str, Iterable[str]]] = None,
    ) -> None:
        self._players: Dict[str, str] = dict(players or {})
        self._channels: Dict[str, List[str]] = {
            str(channel_id): list(members)
            for channel_id, members in (channels or {}).items()
        }
        self._lock = threading.Lock()

    def set_player_name(self, user_id: str, name: str) -> None:
        """Record a player's display name.

        Raises:
            InvalidArgument: If user_id or name is blank
        """
        _require(user_id, "user_id")
        _require(name, "name")
        with self._lock:
            self._players[user_id] = name

    def set_channel_participants(self, channel_id: str, user_ids: Iterable[str]) -> None:
        """Replace the participants of a chat channel.

        Raises:
            InvalidArgument: If channel_id or any user ID is blank
        """
        _require(str(channel_id), "channel_id")
        members = [_require(user_id, "user_id") for user_id in user_ids]
        with self._lock:
            self._channels[str(channel_id)] = members

    def get_player_name(self, user_id: str) -> Optional[str]:
        with self._lock:
            return self._players.get(user_id)

    def get_channel_participants(self, channel_id: str) -> Optional[List[str]]:
        with self._lock:
            members = self._channels.get(str(channel_id))
            return list(members) if members is not None else None
