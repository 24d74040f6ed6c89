"""Firebase Cloud Messaging integration settings."""

from pydantic import Field

from infrastructure.configuration.base import IntegrationSettings


class FcmSettings(IntegrationSettings):
    """Firebase Cloud Messaging configuration.

    Environment Variables:
        FCM_CREDENTIALS_FILE: Path to the service account JSON file
        FCM_PROJECT_ID: Firebase project ID
        FCM_APP_NAME: Name of the Firebase app instance owned by the
            notification service (default: club-notifications)

    Example:
        ```python
        from infrastructure.services import get_settings

        settings = get_settings()
        credentials_path = settings.fcm.FCM_CREDENTIALS_FILE
        ```
    """

    FCM_CREDENTIALS_FILE: str | None = Field(default=None, alias="FCM_CREDENTIALS_FILE")
    FCM_PROJECT_ID: str | None = Field(default=None, alias="FCM_PROJECT_ID")
    FCM_APP_NAME: str = Field(default="club-notifications", alias="FCM_APP_NAME")

    @property
    def is_configured(self) -> bool:
        return bool(self.FCM_CREDENTIALS_FILE and self.FCM_PROJECT_ID)
