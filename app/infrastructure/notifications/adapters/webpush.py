"""Web Push (VAPID) delivery adapter.

Sends encrypted payloads to browser push services through pywebpush,
signing each request with the application's VAPID key.
"""

import json
from typing import Optional

import requests
import structlog
from pywebpush import webpush

from infrastructure.notifications.adapters.base import (
    DeliveryAdapter,
    build_push_payload,
)
from infrastructure.notifications.models import (
    DeliveryResult,
    NotificationEvent,
    Provider,
    WebPushAddress,
)
from infrastructure.operations.classifiers import classify_webpush_error

logger = structlog.get_logger()


class WebPushAdapter(DeliveryAdapter):
    """Delivers notifications to browser Push API subscriptions.

    Attributes:
        vapid_private_key: VAPID private key (base64url DER or PEM)
        vapid_subject: Contact claim (mailto: or https:// URI)
        ttl: Seconds the push service keeps an undelivered message
        timeout: HTTP timeout for the push service request

    Example:
        adapter = WebPushAdapter(
            vapid_private_key=settings.webpush.VAPID_PRIVATE_KEY,
            vapid_subject="mailto:admin@club.example",
        )
        result = adapter.send(address, event)
    """

    def __init__(
        self,
        vapid_private_key: str,
        vapid_subject: str,
        ttl: int = 3600,
        timeout: float = 10.0,
        session: Optional[requests.Session] = None,
    ):
        self.vapid_private_key = vapid_private_key
        self.vapid_subject = vapid_subject
        self.ttl = ttl
        self.timeout = timeout
        self.session = session

        logger.info("initialized_webpush_adapter", ttl=ttl, subject=vapid_subject)

    @property
    def provider(self) -> Provider:
        return Provider.WEBPUSH

    def send(self, address, event: NotificationEvent) -> DeliveryResult:
        if not isinstance(address, WebPushAddress):
            return self._wrong_address(address)

        payload = json.dumps(build_push_payload(event))

        try:
            # pywebpush adds aud/exp to the claims dict it receives
            response = webpush(
                subscription_info=address.to_subscription_info(),
                data=payload,
                vapid_private_key=self.vapid_private_key,
                vapid_claims={"sub": self.vapid_subject},
                ttl=self.ttl,
                timeout=self.timeout,
                requests_session=self.session,
            )
        except Exception as e:
            result = classify_webpush_error(e)
            logger.warning(
                "webpush_delivery_failed",
                endpoint=address.endpoint,
                status=result.status.value,
                error_code=result.error_code,
                error=result.message,
            )
            return DeliveryResult.from_operation_result(address, result)

        external_id = None
        headers = getattr(response, "headers", None)
        if headers:
            external_id = headers.get("Location")

        logger.debug("webpush_delivered", endpoint=address.endpoint)
        return DeliveryResult.delivered(address, external_id=external_id)
