"""OneSignal integration settings."""

from pydantic import Field

from infrastructure.configuration.base import IntegrationSettings


class OneSignalSettings(IntegrationSettings):
    """OneSignal REST API configuration.

    Environment Variables:
        ONESIGNAL_APP_ID: OneSignal application ID
        ONESIGNAL_REST_API_KEY: REST API key (sent as Basic authorization)
        ONESIGNAL_API_URL: Notifications endpoint
            (default: https://onesignal.com/api/v1/notifications)
    """

    ONESIGNAL_APP_ID: str | None = Field(default=None, alias="ONESIGNAL_APP_ID")
    ONESIGNAL_REST_API_KEY: str | None = Field(
        default=None, alias="ONESIGNAL_REST_API_KEY"
    )
    ONESIGNAL_API_URL: str = Field(
        default="https://onesignal.com/api/v1/notifications",
        alias="ONESIGNAL_API_URL",
    )

    @property
    def is_configured(self) -> bool:
        return bool(self.ONESIGNAL_APP_ID and self.ONESIGNAL_REST_API_KEY)
