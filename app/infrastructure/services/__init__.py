"""
Dependency injection services.

Provides type aliases and provider functions for FastAPI dependency injection.
"""

from infrastructure.services.dependencies import (
    SettingsDep,
    NotificationServiceDep,
    ClubDirectoryDep,
)
from infrastructure.services.providers import (
    get_settings,
    get_notification_service,
    get_club_directory,
)

__all__ = [
    "SettingsDep",
    "NotificationServiceDep",
    "ClubDirectoryDep",
    "get_settings",
    "get_notification_service",
    "get_club_directory",
]
