"""Database webhook payload models for club events.

The club database posts row changes as ``{type, table, record, old_record,
schema}``. Match rows carry nested ``details`` and ``scoreboard`` JSON
columns; message rows are flat.
"""

from typing import Any, Dict, List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field

from infrastructure.notifications.models import DispatchReport


class Scoreboard(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    home_score: int = Field(default=0, alias="homeScore")
    away_score: int = Field(default=0, alias="awayScore")


class Poll(BaseModel):
    status: Optional[str] = None


class MatchDetails(BaseModel):
    opponent: Optional[str] = None
    date: Optional[str] = None
    poll: Optional[Poll] = None


class MatchRecord(BaseModel):
    """A row of the ``matches`` table."""

    id: Union[int, str]
    details: MatchDetails = Field(default_factory=MatchDetails)
    scoreboard: Scoreboard = Field(default_factory=Scoreboard)

    @property
    def opponent(self) -> str:
        return self.details.opponent or "Adversaire"

    @property
    def poll_status(self) -> Optional[str]:
        return self.details.poll.status if self.details.poll else None


class MessageRecord(BaseModel):
    """A row of the ``messages`` table."""

    id: Optional[Union[int, str]] = None
    channel_id: Union[int, str]
    user_id: str
    content: str


class WebhookEnvelope(BaseModel):
    """Database webhook envelope."""

    model_config = ConfigDict(populate_by_name=True)

    type: str
    table: str
    record: Optional[Dict[str, Any]] = None
    old_record: Optional[Dict[str, Any]] = None
    schema_name: Optional[str] = Field(default=None, alias="schema")


class WebhookResult(BaseModel):
    """Outcome of handling one database webhook.

    Attributes:
        status: "processed" or "ignored"
        message: Message returned to the webhook caller
        reports: One DispatchReport per notification sent
    """

    status: Literal["processed", "ignored"]
    message: str
    reports: List[DispatchReport] = Field(default_factory=list)
