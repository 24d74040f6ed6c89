"""Notification service for dependency injection.

Provides a class-based interface to the notification system for easier DI
and testing: one object owning the registry, the provider adapters and the
dispatcher.
"""

from typing import Dict, List, Optional, TYPE_CHECKING

import structlog

from infrastructure.notifications.adapters import (
    DeliveryAdapter,
    FcmAdapter,
    OneSignalAdapter,
    UnconfiguredAdapter,
    WebPushAdapter,
)
from infrastructure.notifications.dispatcher import NotificationDispatcher
from infrastructure.notifications.models import (
    Channel,
    DispatchReport,
    NotificationEvent,
    Provider,
    Subscriber,
)
from infrastructure.notifications.registry import SubscriptionRegistry

if TYPE_CHECKING:
    from infrastructure.configuration import Settings

logger = structlog.get_logger()


def build_adapters(settings: "Settings") -> Dict[Provider, DeliveryAdapter]:
    """Create one adapter per provider from settings.

    Providers whose credentials are missing get an UnconfiguredAdapter.
    """
    timeout = settings.dispatch.NOTIFICATION_ATTEMPT_TIMEOUT_SECONDS
    adapters: Dict[Provider, DeliveryAdapter] = {}

    if settings.webpush.is_configured:
        adapters[Provider.WEBPUSH] = WebPushAdapter(
            vapid_private_key=settings.webpush.VAPID_PRIVATE_KEY,
            vapid_subject=settings.webpush.VAPID_SUBJECT,
            ttl=settings.webpush.WEBPUSH_TTL_SECONDS,
            timeout=timeout,
        )

    if settings.onesignal.is_configured:
        adapters[Provider.ONESIGNAL] = OneSignalAdapter(
            app_id=settings.onesignal.ONESIGNAL_APP_ID,
            rest_api_key=settings.onesignal.ONESIGNAL_REST_API_KEY,
            api_url=settings.onesignal.ONESIGNAL_API_URL,
            timeout=timeout,
        )

    if settings.fcm.is_configured:
        adapters[Provider.FCM] = FcmAdapter(
            credentials_file=settings.fcm.FCM_CREDENTIALS_FILE,
            project_id=settings.fcm.FCM_PROJECT_ID,
            app_name=settings.fcm.FCM_APP_NAME,
        )

    for provider in Provider:
        if provider not in adapters:
            logger.warning("provider_not_configured", provider=provider.value)
            adapters[provider] = UnconfiguredAdapter(provider)

    return adapters


class NotificationService:
    """Class-based notification service.

    Thin facade over SubscriptionRegistry and NotificationDispatcher. Applies
    the club logo as icon when an event has none.

    Usage:
        # Via dependency injection
        from infrastructure.services import NotificationServiceDep

        @router.post("/notifications")
        def send_notification(
            notification_service: NotificationServiceDep,
            event: NotificationEvent,
        ):
            report = notification_service.dispatch(event)
            return {"summary": report.summary()}

        # Direct instantiation
        from infrastructure.services import get_settings
        from infrastructure.notifications import NotificationService

        service = NotificationService(get_settings())
        service.subscribe("user-1", OneSignalAddress(player_id="abc"))
    """

    def __init__(
        self,
        settings: "Settings",
        registry: Optional[SubscriptionRegistry] = None,
        adapters: Optional[Dict[Provider, DeliveryAdapter]] = None,
        dispatcher: Optional[NotificationDispatcher] = None,
    ):
        """Initialize notification service.

        Args:
            settings: Settings instance (required, passed from provider).
            registry: Optional SubscriptionRegistry. Defaults to an in-memory one.
            adapters: Optional dict of Provider to DeliveryAdapter.
                     If not provided, creates adapters based on settings.
            dispatcher: Optional pre-configured NotificationDispatcher instance.
                       If not provided, creates one from registry and adapters.
        """
        self._settings = settings
        if dispatcher is None:
            if registry is None:
                registry = SubscriptionRegistry()
            if adapters is None:
                adapters = build_adapters(settings)
            dispatcher = NotificationDispatcher(
                registry=registry,
                adapters=adapters,
                attempt_timeout=settings.dispatch.NOTIFICATION_ATTEMPT_TIMEOUT_SECONDS,
                dispatch_timeout=settings.dispatch.NOTIFICATION_DISPATCH_TIMEOUT_SECONDS,
                batch_size=settings.dispatch.NOTIFICATION_BATCH_SIZE,
                max_workers=settings.dispatch.NOTIFICATION_MAX_WORKERS,
            )
        self._dispatcher = dispatcher

    @property
    def registry(self) -> SubscriptionRegistry:
        return self._dispatcher.registry

    @property
    def dispatcher(self) -> NotificationDispatcher:
        """Access underlying NotificationDispatcher instance."""
        return self._dispatcher

    def subscribe(self, user_id: str, address) -> Channel:
        """Register (or replace) the user's channel for the address's provider."""
        return self.registry.upsert_channel(user_id, address)

    def unsubscribe(self, user_id: str, provider) -> bool:
        """Remove the user's channel for a provider. Idempotent."""
        return self.registry.remove_channel(user_id, provider)

    def list_subscribers(self) -> List[Subscriber]:
        return self.registry.list_subscribers()

    def dispatch(self, event: NotificationEvent) -> DispatchReport:
        """Deliver an event to its audience.

        Raises:
            InvalidEvent: If the title or body is empty
        """
        if not event.icon:
            event = event.model_copy(update={"icon": self._settings.club.CLUB_LOGO_URL})
        return self._dispatcher.dispatch(event)

    def health_check(self) -> Dict[str, bool]:
        return self._dispatcher.health_check()
