import json
from typing import Any, Dict, Union

from fastapi import APIRouter, Body, HTTPException, Request

from api.dependencies.rate_limits import get_limiter, webhook_rate_limit
from infrastructure.logging import get_module_logger
from infrastructure.notifications import InvalidArgument
from infrastructure.services import (
    ClubDirectoryDep,
    NotificationServiceDep,
    SettingsDep,
)
from modules.club_events import handle_webhook

logger = get_module_logger()
router = APIRouter(tags=["Webhooks"])
limiter = get_limiter()


@router.post("/webhooks/match-update")
@limiter.limit(webhook_rate_limit)
def handle_match_update_webhook(
    request: Request,
    service: NotificationServiceDep,
    directory: ClubDirectoryDep,
    settings: SettingsDep,
    payload: Union[Dict[str, Any], str] = Body(...),
):
    """Handle club database webhooks (match updates, new chat messages).

    Args:
        request (Request): The incoming HTTP request (used for rate limiting).
        payload (Union[Dict[str, Any], str]): The webhook envelope, either as a
            JSON object or a JSON string.

    Raises:
        HTTPException: 400 if the payload is malformed, 500 if processing failed.

    Returns:
        dict: ``{"message": "Webhook processed."}`` or an "Ignored" message.
    """
    if isinstance(payload, dict):
        payload_dict = payload
    else:
        try:
            payload_dict = json.loads(payload)
        except json.JSONDecodeError as e:
            logger.error("payload_validation_error", error=str(e))
            raise HTTPException(status_code=400, detail=str(e)) from e
        if not isinstance(payload_dict, dict):
            raise HTTPException(status_code=400, detail="Payload must be a JSON object")

    try:
        result = handle_webhook(payload_dict, service, directory, settings)
    except InvalidArgument as e:
        raise HTTPException(status_code=400, detail=str(e)) from e
    except Exception as e:
        logger.exception("club_webhook_processing_error", error=str(e))
        raise HTTPException(status_code=500, detail="Internal Server Error") from e

    return {"message": result.message}
