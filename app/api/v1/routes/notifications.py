from typing import Dict, List, Optional

from fastapi import APIRouter, HTTPException
from pydantic import BaseModel, Field

from infrastructure.logging import get_module_logger
from infrastructure.notifications import (
    AllSubscribers,
    DispatchReport,
    InvalidEvent,
    NotificationEvent,
    SpecificUsers,
)
from infrastructure.services import NotificationServiceDep

logger = get_module_logger()
router = APIRouter(tags=["Notifications"])


class NotificationRequest(BaseModel):
    """Manual notification sent from the admin interface.

    ``user_ids`` absent means every subscriber.
    """

    title: str
    body: str
    icon: Optional[str] = None
    tag: Optional[str] = None
    link: Optional[str] = None
    user_ids: Optional[List[str]] = None
    data: Dict[str, str] = Field(default_factory=dict)

    def to_event(self) -> NotificationEvent:
        audience = (
            SpecificUsers(user_ids=frozenset(self.user_ids))
            if self.user_ids is not None
            else AllSubscribers()
        )
        return NotificationEvent(
            title=self.title,
            body=self.body,
            icon=self.icon,
            tag=self.tag,
            link=self.link,
            audience=audience,
            data=self.data,
        )


class NotificationResponse(DispatchReport):
    summary_text: str


@router.post("/notifications", response_model=NotificationResponse)
def send_notification(
    notification: NotificationRequest,
    service: NotificationServiceDep,
):
    """Dispatch a notification and return the delivery report."""
    try:
        report = service.dispatch(notification.to_event())
    except InvalidEvent as e:
        logger.warning("notification_rejected", error=str(e))
        raise HTTPException(status_code=400, detail=str(e)) from e

    return NotificationResponse(**report.model_dump(), summary_text=report.summary())
