"""Infrastructure configuration module - public API.

This module provides centralized configuration management for the club
notification service using Pydantic BaseSettings with domain-based
organization.

Exports:
    Settings: Main settings class
    WebPushSettings, OneSignalSettings, FcmSettings: Provider credentials
    ClubSettings: Club identity used in notification content
    DispatchSettings: Fan-out bounds (timeouts, batch size, workers)
    ServerSettings: HTTP server configuration

Example:
    ```python
    from infrastructure.services import get_settings

    settings = get_settings()

    vapid_subject = settings.webpush.VAPID_SUBJECT
    attempt_timeout = settings.dispatch.NOTIFICATION_ATTEMPT_TIMEOUT_SECONDS

    if settings.is_production:
        # Production-specific logic...
    ```
"""

from infrastructure.configuration.settings import Settings
from infrastructure.configuration.integrations import (
    WebPushSettings,
    OneSignalSettings,
    FcmSettings,
)
from infrastructure.configuration.features import ClubSettings
from infrastructure.configuration.infrastructure import (
    DispatchSettings,
    ServerSettings,
)

__all__ = [
    "Settings",
    "WebPushSettings",
    "OneSignalSettings",
    "FcmSettings",
    "ClubSettings",
    "DispatchSettings",
    "ServerSettings",
]
