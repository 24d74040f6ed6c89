from fastapi import APIRouter, Request

from api.dependencies.rate_limits import get_limiter
from infrastructure.services import NotificationServiceDep, SettingsDep

router = APIRouter(tags=["System"])
limiter = get_limiter()


@router.get("/health")
@limiter.limit("50/minute")
def get_health(
    request: Request,  # pylint: disable=unused-argument
    service: NotificationServiceDep,
    settings: SettingsDep,
):
    """Healthcheck endpoint with per-provider adapter status."""
    providers = service.health_check()
    return {
        "status": "ok" if any(providers.values()) else "degraded",
        "version": settings.GIT_SHA,
        "providers": providers,
    }
