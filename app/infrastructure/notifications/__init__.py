"""Push notification fan-out.

Provides provider-agnostic notification delivery (Web Push, OneSignal, FCM):
- Subscription registry (one channel per user and provider)
- Concurrent, bounded fan-out through provider adapters
- Classification of failures into transient and permanent
- Automatic revocation of permanently invalid addresses

Usage:
    from infrastructure.notifications import (
        NotificationEvent,
        SpecificUsers,
        WebPushAddress,
    )
    from infrastructure.services import get_notification_service

    service = get_notification_service()
    service.subscribe("player-7", WebPushAddress.from_subscription(subscription_json))

    report = service.dispatch(
        NotificationEvent(
            title="Nouveau message de Alex",
            body="Entraînement décalé à 20h",
            tag="channel-12",
            audience=SpecificUsers(user_ids=frozenset({"player-7"})),
        )
    )
    logger.info("dispatched", summary=report.summary())
"""

# Models
from infrastructure.notifications.models import (
    AllSubscribers,
    Audience,
    Channel,
    DeliveryAddress,
    DeliveryOutcome,
    DeliveryResult,
    DispatchReport,
    FcmAddress,
    NotificationEvent,
    OneSignalAddress,
    Provider,
    ResolvedChannel,
    SpecificUsers,
    Subscriber,
    WebPushAddress,
    parse_address,
)

# Errors
from infrastructure.notifications.errors import (
    InvalidArgument,
    InvalidEvent,
    NotificationError,
)

# Registry
from infrastructure.notifications.registry import (
    InMemorySubscriptionStore,
    SubscriptionRegistry,
    SubscriptionStore,
)

# Adapters
from infrastructure.notifications.adapters import (
    DeliveryAdapter,
    FcmAdapter,
    OneSignalAdapter,
    UnconfiguredAdapter,
    WebPushAdapter,
)

# Dispatcher and service
from infrastructure.notifications.dispatcher import NotificationDispatcher
from infrastructure.notifications.service import NotificationService

# Export all public interfaces
__all__ = [
    # Models
    "Provider",
    "WebPushAddress",
    "OneSignalAddress",
    "FcmAddress",
    "DeliveryAddress",
    "parse_address",
    "Channel",
    "Subscriber",
    "AllSubscribers",
    "SpecificUsers",
    "Audience",
    "ResolvedChannel",
    "NotificationEvent",
    "DeliveryOutcome",
    "DeliveryResult",
    "DispatchReport",
    # Errors
    "NotificationError",
    "InvalidArgument",
    "InvalidEvent",
    # Registry
    "SubscriptionRegistry",
    "SubscriptionStore",
    "InMemorySubscriptionStore",
    # Adapters
    "DeliveryAdapter",
    "WebPushAdapter",
    "OneSignalAdapter",
    "FcmAdapter",
    "UnconfiguredAdapter",
    # Dispatcher
    "NotificationDispatcher",
    "NotificationService",
]
