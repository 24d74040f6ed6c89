"""Delivery adapter abstract base class.

All provider adapters (Web Push, OneSignal, FCM) implement this interface.
"""

from abc import ABC, abstractmethod
from typing import Any, Dict

from infrastructure.notifications.models import (
    DeliveryResult,
    NotificationEvent,
    Provider,
)
from infrastructure.operations import OperationResult


class DeliveryAdapter(ABC):
    """Abstract base class for push provider adapters.

    Each adapter delivers one event to one address of its provider, using
    credentials supplied at construction. Adapters never touch the registry
    and never retry.

    ``send`` must not raise: provider and network failures are classified
    into a transient or permanent DeliveryResult.

    Example Implementation:
        class LogAdapter(DeliveryAdapter):

            @property
            def provider(self) -> Provider:
                return Provider.WEBPUSH

            def send(self, address, event) -> DeliveryResult:
                logger.info("push", endpoint=address.endpoint, title=event.title)
                return DeliveryResult.delivered(address)
    """

    @property
    @abstractmethod
    def provider(self) -> Provider:
        """Provider this adapter delivers to."""
        pass

    @abstractmethod
    def send(self, address, event: NotificationEvent) -> DeliveryResult:
        """Deliver an event to a single address.

        Args:
            address: DeliveryAddress of this adapter's provider
            event: NotificationEvent to deliver

        Returns:
            DeliveryResult with DELIVERED, TRANSIENT_FAILURE or PERMANENT_FAILURE
        """
        pass

    def health_check(self) -> OperationResult:
        """Check that the adapter can reach its provider.

        Default implementation reports healthy; adapters with a cheap
        credentials check override it.
        """
        return OperationResult.success(message=f"{self.provider.value} adapter ready")

    def _wrong_address(self, address) -> DeliveryResult:
        return DeliveryResult.transient_failure(
            address,
            f"{self.provider.value} adapter cannot deliver to "
            f"{getattr(address, 'provider', 'unknown')} addresses",
            error_code="UNSUPPORTED_ADDRESS",
        )


def build_push_payload(event: NotificationEvent) -> Dict[str, Any]:
    """Payload understood by the club service worker.

    Shape: ``{title, body, icon, tag, data: {url, ...}}``. Optional fields are
    omitted when unset.
    """
    payload: Dict[str, Any] = {"title": event.title, "body": event.body}
    if event.icon:
        payload["icon"] = event.icon
    if event.tag:
        payload["tag"] = event.tag

    data: Dict[str, Any] = dict(event.data)
    if event.link:
        data["url"] = event.link
    payload["data"] = data
    return payload
