"""OneSignal delivery adapter.

Creates one OneSignal notification per player through the REST API.
"""

from typing import Any, Dict, Optional

import requests
import structlog

from infrastructure.notifications.adapters.base import DeliveryAdapter
from infrastructure.notifications.models import (
    DeliveryResult,
    NotificationEvent,
    OneSignalAddress,
    Provider,
)
from infrastructure.operations import OperationResult
from infrastructure.operations.classifiers import (
    classify_onesignal_response,
    classify_request_exception,
)

logger = structlog.get_logger()

DEFAULT_API_URL = "https://onesignal.com/api/v1/notifications"


class OneSignalAdapter(DeliveryAdapter):
    """Delivers notifications to OneSignal players.

    Attributes:
        app_id: OneSignal application ID
        rest_api_key: REST API key, sent as Basic authorization
        api_url: Create-notification endpoint
        timeout: HTTP timeout in seconds

    Example:
        adapter = OneSignalAdapter(app_id="...", rest_api_key="...")
        result = adapter.send(OneSignalAddress(player_id="abc"), event)
    """

    def __init__(
        self,
        app_id: str,
        rest_api_key: str,
        api_url: str = DEFAULT_API_URL,
        timeout: float = 10.0,
        session: Optional[requests.Session] = None,
    ):
        self.app_id = app_id
        self.rest_api_key = rest_api_key
        self.api_url = api_url
        self.timeout = timeout
        self.session = session or requests.Session()

        logger.info("initialized_onesignal_adapter", api_url=api_url)

    @property
    def provider(self) -> Provider:
        return Provider.ONESIGNAL

    def _headers(self) -> Dict[str, str]:
        return {
            "Content-Type": "application/json; charset=utf-8",
            "Authorization": f"Basic {self.rest_api_key}",
        }

    def build_request_body(
        self, player_id: str, event: NotificationEvent
    ) -> Dict[str, Any]:
        """Create-notification body targeting a single player."""
        body: Dict[str, Any] = {
            "app_id": self.app_id,
            "include_player_ids": [player_id],
            "headings": {"en": event.title},
            "contents": {"en": event.body},
        }
        if event.link:
            body["web_url"] = event.link
        if event.icon:
            body["chrome_web_icon"] = event.icon
            body["firefox_icon"] = event.icon
        if event.tag:
            body["web_push_topic"] = event.tag
        if event.data:
            body["data"] = dict(event.data)
        return body

    def send(self, address, event: NotificationEvent) -> DeliveryResult:
        if not isinstance(address, OneSignalAddress):
            return self._wrong_address(address)

        try:
            response = self.session.post(
                self.api_url,
                json=self.build_request_body(address.player_id, event),
                headers=self._headers(),
                timeout=self.timeout,
            )
        except Exception as e:
            result = classify_request_exception(e, "OneSignal")
            logger.warning(
                "onesignal_request_failed",
                player_id=address.player_id,
                error_code=result.error_code,
                error=result.message,
            )
            return DeliveryResult.from_operation_result(address, result)

        try:
            body = response.json()
        except ValueError:
            body = None

        result = classify_onesignal_response(
            response.status_code,
            body if isinstance(body, dict) else None,
            player_id=address.player_id,
            retry_after=response.headers.get("Retry-After"),
        )
        if not result.is_success:
            logger.warning(
                "onesignal_delivery_failed",
                player_id=address.player_id,
                status_code=response.status_code,
                status=result.status.value,
                error_code=result.error_code,
                error=result.message,
            )
            return DeliveryResult.from_operation_result(address, result)

        notification_id = (result.data or {}).get("notification_id")
        logger.debug(
            "onesignal_delivered",
            player_id=address.player_id,
            notification_id=notification_id,
        )
        return DeliveryResult.delivered(address, external_id=notification_id or None)

    def health_check(self) -> OperationResult:
        if not (self.app_id and self.rest_api_key):
            return OperationResult.permanent_error(
                "OneSignal credentials missing", error_code="PROVIDER_UNCONFIGURED"
            )
        return super().health_check()
