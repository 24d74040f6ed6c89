"""
Type aliases for FastAPI dependency injection.

Provides annotated type hints for common infrastructure dependencies.
"""

from typing import Annotated
from fastapi import Depends
from infrastructure.configuration import Settings
from infrastructure.notifications.service import NotificationService
from infrastructure.services.providers import (
    get_settings,
    get_notification_service,
    get_club_directory,
)
from modules.club_events.directory import ClubDirectory

# Settings dependency
SettingsDep = Annotated[Settings, Depends(get_settings)]

# Notification service dependency - registry, adapters and dispatcher
# Usage: service.subscribe(...), service.dispatch(event)
NotificationServiceDep = Annotated[
    NotificationService, Depends(get_notification_service)
]

# Club directory dependency (player names, chat participants)
ClubDirectoryDep = Annotated[ClubDirectory, Depends(get_club_directory)]

__all__ = [
    "SettingsDep",
    "NotificationServiceDep",
    "ClubDirectoryDep",
]
