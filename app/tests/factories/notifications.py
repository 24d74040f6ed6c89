"""Test factories for notification infrastructure.

Factory functions for creating test data for the notification system.
All factories return Pydantic models for type safety and validation.
"""

from typing import Dict, Iterable, Optional

from infrastructure.notifications.models import (
    AllSubscribers,
    DeliveryResult,
    FcmAddress,
    NotificationEvent,
    OneSignalAddress,
    SpecificUsers,
    WebPushAddress,
)


def make_webpush_address(
    endpoint: str = "https://fcm.googleapis.com/fcm/send/endpoint-1",
    p256dh_key: str = "BNcRdreALRFXTkOOUHK1EtK2wtaz5Ry4YfYCA_0QTpQtUbVlUls0VJXg7A8u-Ts1XbjhazAkj7I99e8QcYP7DkM",
    auth_key: str = "tBHItJI5svbpez7KI4CCXg",
) -> WebPushAddress:
    """Create a test WebPushAddress.

    Example:
        >>> address = make_webpush_address(endpoint="https://push.example/abc")
    """
    return WebPushAddress(endpoint=endpoint, p256dh_key=p256dh_key, auth_key=auth_key)


def make_onesignal_address(player_id: str = "player-1") -> OneSignalAddress:
    return OneSignalAddress(player_id=player_id)


def make_fcm_address(token: str = "fcm-token-1") -> FcmAddress:
    return FcmAddress(token=token)


def make_event(
    title: str = "But pour Rennes !",
    body: str = "Le score est maintenant de 1 - 2.",
    icon: Optional[str] = None,
    tag: Optional[str] = "match-goal-42",
    link: Optional[str] = "https://club.example/match/42",
    user_ids: Optional[Iterable[str]] = None,
    data: Optional[Dict[str, str]] = None,
) -> NotificationEvent:
    """Create a test NotificationEvent.

    Args:
        title: Notification heading
        body: Notification text
        icon: Optional icon URL
        tag: Optional grouping tag
        link: Optional click-through URL
        user_ids: Restrict the audience to these users (default: everyone)
        data: Extra client data

    Returns:
        NotificationEvent instance

    Example:
        >>> event = make_event(user_ids=["u1", "u2"])
    """
    audience = (
        SpecificUsers(user_ids=frozenset(user_ids))
        if user_ids is not None
        else AllSubscribers()
    )
    return NotificationEvent(
        title=title,
        body=body,
        icon=icon,
        tag=tag,
        link=link,
        audience=audience,
        data=data or {},
    )


def make_delivered(address=None, external_id: Optional[str] = "msg-1") -> DeliveryResult:
    return DeliveryResult.delivered(
        address or make_onesignal_address(), external_id=external_id
    )


def make_permanent_failure(
    address=None, reason: str = "gone", error_code: str = "GONE"
) -> DeliveryResult:
    return DeliveryResult.permanent_failure(
        address or make_onesignal_address(), reason, error_code
    )


def make_transient_failure(
    address=None, reason: str = "server error", error_code: str = "SERVER_ERROR"
) -> DeliveryResult:
    return DeliveryResult.transient_failure(
        address or make_onesignal_address(), reason, error_code
    )
