from typing import List

from fastapi import APIRouter, HTTPException
from pydantic import BaseModel

from infrastructure.logging import get_module_logger
from infrastructure.notifications import InvalidArgument
from infrastructure.services import ClubDirectoryDep

logger = get_module_logger()
router = APIRouter(prefix="/club", tags=["Club"])


class PlayerUpdate(BaseModel):
    name: str


class PlayerResponse(BaseModel):
    user_id: str
    name: str


class ParticipantsUpdate(BaseModel):
    user_ids: List[str]


class ParticipantsResponse(BaseModel):
    channel_id: str
    user_ids: List[str]


@router.put("/players/{user_id}", response_model=PlayerResponse)
def update_player(user_id: str, update: PlayerUpdate, directory: ClubDirectoryDep):
    """Record the display name used as the sender of chat notifications."""
    try:
        directory.set_player_name(user_id, update.name)
    except InvalidArgument as e:
        raise HTTPException(status_code=400, detail=str(e)) from e

    logger.info("club_player_updated", user_id=user_id)
    return PlayerResponse(user_id=user_id, name=update.name)


@router.put(
    "/channels/{channel_id}/participants", response_model=ParticipantsResponse
)
def update_channel_participants(
    channel_id: str,
    update: ParticipantsUpdate,
    directory: ClubDirectoryDep,
):
    """Replace the members of a chat channel."""
    try:
        directory.set_channel_participants(channel_id, update.user_ids)
    except InvalidArgument as e:
        raise HTTPException(status_code=400, detail=str(e)) from e

    logger.info(
        "club_channel_updated", channel_id=channel_id, participants=len(update.user_ids)
    )
    return ParticipantsResponse(channel_id=channel_id, user_ids=update.user_ids)
