"""Integration settings __init__ - exports all push provider settings."""

from infrastructure.configuration.integrations.webpush import WebPushSettings
from infrastructure.configuration.integrations.onesignal import OneSignalSettings
from infrastructure.configuration.integrations.fcm import FcmSettings

__all__ = [
    "WebPushSettings",
    "OneSignalSettings",
    "FcmSettings",
]
