"""Club events: match updates and chat messages turned into notifications."""

from modules.club_events.directory import ClubDirectory, InMemoryClubDirectory
from modules.club_events.handlers import (
    event_for_new_message,
    events_for_match_update,
    handle_webhook,
)
from modules.club_events.models import (
    MatchRecord,
    MessageRecord,
    WebhookEnvelope,
    WebhookResult,
)

__all__ = [
    "ClubDirectory",
    "InMemoryClubDirectory",
    "MatchRecord",
    "MessageRecord",
    "WebhookEnvelope",
    "WebhookResult",
    "events_for_match_update",
    "event_for_new_message",
    "handle_webhook",
]
