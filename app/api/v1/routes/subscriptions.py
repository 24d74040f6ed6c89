from datetime import datetime
from typing import List

from fastapi import APIRouter, HTTPException
from pydantic import BaseModel, RootModel

from infrastructure.logging import get_module_logger
from infrastructure.notifications import (
    DeliveryAddress,
    InvalidArgument,
    Provider,
    Subscriber,
)
from infrastructure.services import NotificationServiceDep

logger = get_module_logger()
router = APIRouter(tags=["Subscriptions"])


class ChannelRegistration(RootModel[DeliveryAddress]):
    """Request body: one delivery address, discriminated by ``provider``."""


class ChannelResponse(BaseModel):
    user_id: str
    provider: Provider
    registered_at: datetime


class ChannelRemovalResponse(BaseModel):
    user_id: str
    provider: Provider
    removed: bool


@router.put("/subscribers/{user_id}/channels", response_model=ChannelResponse)
def register_channel(
    user_id: str,
    registration: ChannelRegistration,
    service: NotificationServiceDep,
):
    """Opt a user into a provider, replacing any previous address for it."""
    try:
        channel = service.subscribe(user_id, registration.root)
    except InvalidArgument as e:
        logger.warning("channel_registration_rejected", user_id=user_id, error=str(e))
        raise HTTPException(status_code=400, detail=str(e)) from e

    return ChannelResponse(
        user_id=user_id,
        provider=channel.provider,
        registered_at=channel.registered_at,
    )


@router.delete(
    "/subscribers/{user_id}/channels/{provider}",
    response_model=ChannelRemovalResponse,
)
def remove_channel(
    user_id: str,
    provider: Provider,
    service: NotificationServiceDep,
):
    """Opt a user out of a provider. Removing a missing channel is not an error."""
    try:
        removed = service.unsubscribe(user_id, provider)
    except InvalidArgument as e:
        raise HTTPException(status_code=400, detail=str(e)) from e

    return ChannelRemovalResponse(user_id=user_id, provider=provider, removed=removed)


@router.get("/subscribers", response_model=List[Subscriber])
def list_subscribers(service: NotificationServiceDep):
    """All known subscribers, subscribed first."""
    return service.list_subscribers()
