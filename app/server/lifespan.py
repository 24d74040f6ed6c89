from contextlib import asynccontextmanager
from typing import AsyncIterator, TYPE_CHECKING

from fastapi import FastAPI
from structlog.stdlib import BoundLogger

from infrastructure.logging.setup import configure_logging
from infrastructure.services import (
    get_club_directory,
    get_notification_service,
    get_settings,
)

if TYPE_CHECKING:
    from infrastructure.configuration import Settings


def _get_logger(settings: "Settings") -> BoundLogger:
    return configure_logging(
        log_level=settings.LOG_LEVEL, is_production=settings.is_production
    )


def _list_configs(settings: "Settings", logger: BoundLogger) -> None:
    config_settings: dict[str, list[object]] = {"settings": []}

    for key, value in settings.model_dump().items():
        if isinstance(value, dict):
            config_settings[key] = list(value.keys())
        else:
            config_settings["settings"].append({key: value})

    logger.info("configuration_initialized", base_settings=config_settings["settings"])
    for key, value in config_settings.items():
        if key != "settings":
            logger.info("configuration_loaded", config_setting=key, keys=value)


def _log_provider_status(settings: "Settings", logger: BoundLogger) -> None:
    providers = {
        "webpush": settings.webpush.is_configured,
        "onesignal": settings.onesignal.is_configured,
        "fcm": settings.fcm.is_configured,
    }
    logger.info("push_providers_status", providers=providers)
    if not any(providers.values()):
        logger.warning(
            "no_push_provider_configured",
            message="Every delivery will be reported as not configured",
        )


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    settings = get_settings()
    logger = _get_logger(settings)

    app.state.settings = settings
    app.state.logger = logger

    logger.info("application_startup")
    _list_configs(settings, logger)
    _log_provider_status(settings, logger)

    app.state.notification_service = get_notification_service()
    app.state.club_directory = get_club_directory()

    yield

    logger.info("application_shutdown")
