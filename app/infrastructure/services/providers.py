"""
Factory functions for dependency injection.

Provides application-scoped singleton providers for core infrastructure services.
"""

from functools import lru_cache

from infrastructure.configuration import Settings
from infrastructure.notifications.service import NotificationService
from modules.club_events.directory import ClubDirectory, InMemoryClubDirectory


@lru_cache
def get_settings() -> Settings:
    """
    Get application-scoped settings singleton.

    This is the single source of truth for settings across the entire application.
    The @lru_cache decorator ensures only ONE instance is created per process,
    even if called from multiple packages.

    Infrastructure packages should use this directly to ensure singleton consistency:
        from infrastructure.services.providers import get_settings
        settings = get_settings()

    Application code should use the DI type alias for testability:
        from infrastructure.services import SettingsDep
        @router.get("/config")
        def get_config(settings: SettingsDep):
            return settings.club.CLUB_NAME

    Returns:
        Settings: Cached settings instance loaded from environment.
    """
    return Settings()


@lru_cache
def get_notification_service() -> NotificationService:
    """
    Get application-scoped notification service singleton.

    The service owns the subscription registry, so it must be shared by every
    request handler and event source of the process.

    Returns:
        NotificationService: Registry, adapters and dispatcher built from settings.

    Usage:
        @router.post("/notifications")
        def notify(service: NotificationServiceDep, event: NotificationEvent):
            return service.dispatch(event)
    """
    return NotificationService(settings=get_settings())


@lru_cache
def get_club_directory() -> ClubDirectory:
    """
    Get application-scoped club directory singleton.

    Player names and chat channel participants live in the club database,
    which is fed by the web application. The bundled directory is in-memory.

    Returns:
        ClubDirectory: Cached directory instance.
    """
    return InMemoryClubDirectory()
