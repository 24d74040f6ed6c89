"""Firebase Cloud Messaging delivery adapter.

Sends web push notifications to FCM registration tokens through the
Firebase Admin SDK, on a named Firebase app owned by this adapter.
"""

import threading
from typing import Dict, Optional

import firebase_admin
import structlog
from firebase_admin import credentials, messaging

from infrastructure.notifications.adapters.base import DeliveryAdapter
from infrastructure.notifications.models import (
    DeliveryResult,
    FcmAddress,
    NotificationEvent,
    Provider,
)
from infrastructure.operations import OperationResult
from infrastructure.operations.classifiers import classify_firebase_error

logger = structlog.get_logger()


class FcmAdapter(DeliveryAdapter):
    """Delivers notifications to FCM registration tokens.

    The Firebase app is created lazily on first use from the service account
    file, or reused when an app with the same name already exists. An app
    can also be injected directly (tests, custom credentials).

    Attributes:
        credentials_file: Path to the service account JSON file
        project_id: Firebase project ID
        app_name: Name of the Firebase app instance

    Example:
        adapter = FcmAdapter(
            credentials_file="/secrets/firebase.json",
            project_id="club-app",
        )
        result = adapter.send(FcmAddress(token="..."), event)
    """

    def __init__(
        self,
        credentials_file: Optional[str] = None,
        project_id: Optional[str] = None,
        app_name: str = "club-notifications",
        app: Optional[firebase_admin.App] = None,
    ):
        self.credentials_file = credentials_file
        self.project_id = project_id
        self.app_name = app_name
        self._app = app
        self._app_lock = threading.Lock()

        logger.info(
            "initialized_fcm_adapter", app_name=app_name, project_id=project_id
        )

    @property
    def provider(self) -> Provider:
        return Provider.FCM

    def _get_app(self) -> firebase_admin.App:
        if self._app is not None:
            return self._app
        with self._app_lock:
            if self._app is None:
                try:
                    self._app = firebase_admin.get_app(self.app_name)
                except ValueError:
                    options = {"projectId": self.project_id} if self.project_id else None
                    self._app = firebase_admin.initialize_app(
                        credentials.Certificate(self.credentials_file),
                        options,
                        name=self.app_name,
                    )
                    logger.info("firebase_app_initialized", app_name=self.app_name)
        return self._app

    def build_message(self, token: str, event: NotificationEvent) -> messaging.Message:
        """Web push message for a single registration token."""
        data: Dict[str, str] = dict(event.data)
        if event.link:
            data["url"] = event.link

        fcm_options = None
        # FCM only accepts HTTPS click-through links
        if event.link and event.link.startswith("https://"):
            fcm_options = messaging.WebpushFCMOptions(link=event.link)

        # TODO: move off the deprecated Message.token field before lifting the
        # firebase-admin<7 pin.
        return messaging.Message(
            token=token,
            notification=messaging.Notification(title=event.title, body=event.body),
            data=data or None,
            webpush=messaging.WebpushConfig(
                notification=messaging.WebpushNotification(
                    title=event.title,
                    body=event.body,
                    icon=event.icon,
                    tag=event.tag,
                ),
                fcm_options=fcm_options,
            ),
        )

    def send(self, address, event: NotificationEvent) -> DeliveryResult:
        if not isinstance(address, FcmAddress):
            return self._wrong_address(address)

        try:
            message_id = messaging.send(
                self.build_message(address.token, event), app=self._get_app()
            )
        except Exception as e:
            result = classify_firebase_error(e)
            logger.warning(
                "fcm_delivery_failed",
                status=result.status.value,
                error_code=result.error_code,
                error=result.message,
            )
            return DeliveryResult.from_operation_result(address, result)

        logger.debug("fcm_delivered", message_id=message_id)
        return DeliveryResult.delivered(address, external_id=message_id)

    def health_check(self) -> OperationResult:
        try:
            self._get_app()
        except Exception as e:
            logger.error("fcm_health_check_failed", error=str(e), exc_info=True)
            return OperationResult.transient_error(
                f"Firebase app unavailable: {str(e)}", error_code="PROVIDER_ERROR"
            )
        return super().health_check()
