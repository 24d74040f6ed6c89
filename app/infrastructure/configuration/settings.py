"""Club notification service configuration settings - main aggregator."""

from pydantic_settings import BaseSettings, SettingsConfigDict

# Integration settings
from infrastructure.configuration.integrations import (
    WebPushSettings,
    OneSignalSettings,
    FcmSettings,
)

# Feature settings
from infrastructure.configuration.features import ClubSettings

# Infrastructure settings
from infrastructure.configuration.infrastructure import (
    DispatchSettings,
    ServerSettings,
)


class Settings(BaseSettings):
    """Notification service configuration settings - main aggregator.

    Aggregates all domain-specific settings into a single configuration object.
    Settings are organized by concern:

    - **Integrations**: Push provider credentials (Web Push, OneSignal, FCM)
    - **Features**: Club identity used in notification content
    - **Infrastructure**: Dispatcher fan-out bounds and server configuration

    A provider whose credentials are missing is not an error: its adapter is
    replaced by one that reports every address as not configured.

    Environment Variables:
        PREFIX: Environment prefix, empty in production
        LOG_LEVEL: Logging level (DEBUG, INFO, WARNING, ERROR)
        GIT_SHA: Git commit SHA for deployment tracking

    Example:
        ```python
        from infrastructure.services import get_settings

        settings = get_settings()

        if settings.onesignal.is_configured:
            app_id = settings.onesignal.ONESIGNAL_APP_ID

        batch_size = settings.dispatch.NOTIFICATION_BATCH_SIZE
        ```
    """

    # Application-level settings
    PREFIX: str = ""
    LOG_LEVEL: str = "INFO"
    GIT_SHA: str = "Unknown"

    # Integration settings
    webpush: WebPushSettings
    onesignal: OneSignalSettings
    fcm: FcmSettings

    # Feature settings
    club: ClubSettings

    # Infrastructure settings
    dispatch: DispatchSettings
    server: ServerSettings

    @property
    def is_production(self) -> bool:
        """Check if the application is running in production.

        Returns:
            True if PREFIX is empty (production), False otherwise.
        """
        return not bool(self.PREFIX)

    def __init__(self, **kwargs):
        """Initialize Settings with automatic subsettings instantiation.

        Args:
            **kwargs: Optional overrides for specific settings sections.
        """
        settings_map = {
            # Integrations
            "webpush": WebPushSettings,
            "onesignal": OneSignalSettings,
            "fcm": FcmSettings,
            # Features
            "club": ClubSettings,
            # Infrastructure
            "dispatch": DispatchSettings,
            "server": ServerSettings,
        }

        for setting_name, setting_class in settings_map.items():
            if setting_name not in kwargs:
                kwargs[setting_name] = setting_class()

        super().__init__(**kwargs)

    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=True,
        extra="ignore",
    )
