from fastapi import APIRouter
from api.v1.routes.subscriptions import router as subscriptions_router
from api.v1.routes.notifications import router as notifications_router
from api.v1.routes.webhooks import router as webhooks_router
from api.v1.routes.health import router as health_router
from api.v1.routes.club import router as club_router


# Main v1 router (includes all endpoints)
router = APIRouter()
router.include_router(subscriptions_router)
router.include_router(notifications_router)
router.include_router(webhooks_router)
router.include_router(health_router)
router.include_router(club_router)
