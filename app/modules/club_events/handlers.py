"""Translate club database changes into notification events.

Supported changes:
- ``matches`` UPDATE: goal scored (either team), match poll opened
- ``messages`` INSERT: new chat message, sent to the other participants

Anything else is ignored.
"""

from datetime import datetime
from typing import Any, Dict, Iterable, List, Optional, TYPE_CHECKING

from pydantic import ValidationError

from infrastructure.logging import get_module_logger
from infrastructure.notifications.errors import InvalidArgument
from infrastructure.notifications.models import (
    AllSubscribers,
    NotificationEvent,
    SpecificUsers,
)
from modules.club_events.directory import ClubDirectory
from modules.club_events.models import (
    MatchRecord,
    MessageRecord,
    WebhookEnvelope,
    WebhookResult,
)

if TYPE_CHECKING:
    from infrastructure.configuration import Settings
    from infrastructure.notifications.service import NotificationService

logger = get_module_logger()

PROCESSED_MESSAGE = "Webhook processed."
IGNORED_MESSAGE = "Ignored: Event does not trigger a notification."


def format_match_date(value: Optional[str]) -> str:
    """Render an ISO date or datetime as dd/mm/yyyy, raw value if unparseable."""
    if not value:
        return ""
    try:
        parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        return value
    return parsed.strftime("%d/%m/%Y")


def events_for_match_update(
    old: MatchRecord,
    new: MatchRecord,
    base_url: str,
    club_name: str,
) -> List[NotificationEvent]:
    """Notifications triggered by a match row update.

    A home goal takes precedence over an away goal when both scores moved.

    Args:
        old: Row before the update
        new: Row after the update
        base_url: Club web application URL, without trailing slash
        club_name: Club display name

    Returns:
        Zero, one or two events, all addressed to every subscriber
    """
    events = []
    link = f"{base_url}/match/{new.id}"
    opponent = new.opponent
    home, away = new.scoreboard.home_score, new.scoreboard.away_score

    title = body = None
    if home > old.scoreboard.home_score:
        title = f"BUT POUR {club_name.upper()} !"
        body = f"Le score est maintenant de {home} - {away} contre {opponent}."
    elif away > old.scoreboard.away_score:
        title = f"But pour {opponent} !"
        body = f"Le score est maintenant de {home} - {away}."
    if title and body:
        events.append(
            NotificationEvent(
                title=title,
                body=body,
                tag=f"match-goal-{new.id}",
                link=link,
                audience=AllSubscribers(),
            )
        )

    if old.poll_status == "inactive" and new.poll_status == "active":
        events.append(
            NotificationEvent(
                title="Convocation pour le match",
                body=(
                    f"Répondez au sondage pour le match contre {opponent} "
                    f"le {format_match_date(new.details.date)}."
                ),
                tag=f"match-poll-{new.id}",
                link=link,
                audience=AllSubscribers(),
            )
        )

    return events


def event_for_new_message(
    message: MessageRecord,
    sender_name: str,
    participant_ids: Iterable[str],
    base_url: str,
) -> NotificationEvent:
    """Notification for a new chat message, for every participant but the sender."""
    recipients = frozenset(p for p in participant_ids if p != message.user_id)
    return NotificationEvent(
        title=f"Nouveau message de {sender_name}",
        body=message.content,
        tag=str(message.channel_id),
        link=f"{base_url}/chat/{message.channel_id}",
        audience=SpecificUsers(user_ids=recipients),
    )


def _handle_match_update(
    envelope: WebhookEnvelope, settings: "Settings"
) -> List[NotificationEvent]:
    old = MatchRecord.model_validate(envelope.old_record or {})
    new = MatchRecord.model_validate(envelope.record or {})
    return events_for_match_update(
        old, new, settings.club.base_url, settings.club.CLUB_NAME
    )


def _handle_new_message(
    message: MessageRecord,
    directory: ClubDirectory,
    settings: "Settings",
) -> List[NotificationEvent]:
    sender_name = directory.get_player_name(message.user_id)
    if sender_name is None:
        logger.error(
            "message_sender_not_found",
            user_id=message.user_id,
            channel_id=str(message.channel_id),
        )
        return []

    participants = directory.get_channel_participants(str(message.channel_id))
    if participants is None:
        logger.error("channel_participants_not_found", channel_id=str(message.channel_id))
        return []

    return [
        event_for_new_message(message, sender_name, participants, settings.club.base_url)
    ]


def handle_webhook(
    payload: Dict[str, Any],
    service: "NotificationService",
    directory: ClubDirectory,
    settings: "Settings",
) -> WebhookResult:
    """Process a club database webhook and dispatch resulting notifications.

    Args:
        payload: Decoded webhook body
        service: NotificationService used to dispatch
        directory: ClubDirectory for chat lookups
        settings: Settings (club name and base URL)

    Returns:
        WebhookResult with one DispatchReport per notification sent

    Raises:
        InvalidArgument: If the payload does not match the webhook envelope
            or the record shape of its table
    """
    try:
        envelope = WebhookEnvelope.model_validate(payload)
        logger.info("club_webhook_received", table=envelope.table, type=envelope.type)

        if envelope.table == "matches" and envelope.type == "UPDATE":
            events = _handle_match_update(envelope, settings)
        elif envelope.table == "messages" and envelope.type == "INSERT":
            message = MessageRecord.model_validate(envelope.record or {})
            if not message.content.strip():
                logger.info(
                    "club_message_without_content",
                    channel_id=str(message.channel_id),
                    user_id=message.user_id,
                )
                return WebhookResult(status="ignored", message=IGNORED_MESSAGE)
            events = _handle_new_message(message, directory, settings)
        else:
            return WebhookResult(status="ignored", message=IGNORED_MESSAGE)
    except ValidationError as e:
        logger.warning("club_webhook_invalid_payload", error=str(e))
        raise InvalidArgument(f"Invalid webhook payload: {e}") from e

    reports = []
    for event in events:
        report = service.dispatch(event)
        logger.info("club_event_notified", tag=event.tag, summary=report.summary())
        reports.append(report)

    return WebhookResult(status="processed", message=PROCESSED_MESSAGE, reports=reports)
