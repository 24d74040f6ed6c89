"""Notification fan-out core models.

Provider-agnostic models shared by the registry, the delivery adapters and
the dispatcher. Event sources build a NotificationEvent; the dispatcher turns
it into one DeliveryResult per resolved channel and aggregates them into a
DispatchReport.

Uses Pydantic BaseModel for:
- Discriminated union of delivery addresses (one variant per provider)
- Immutable, hashable addresses usable as identity for deduplication
- Consistency with the API layer (request and response bodies)
"""

from datetime import datetime
from enum import Enum
from typing import Annotated, Any, Dict, FrozenSet, List, Literal, Mapping, Optional, Tuple, Union

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    TypeAdapter,
    computed_field,
    field_validator,
)

from infrastructure.operations import OperationResult


class Provider(str, Enum):
    """Push providers a subscriber can opt into."""

    WEBPUSH = "webpush"
    ONESIGNAL = "onesignal"
    FCM = "fcm"


def _require_text(value: str) -> str:
    if not value or not value.strip():
        raise ValueError("value cannot be empty")
    return value


class WebPushAddress(BaseModel):
    """Browser Push API subscription signed with VAPID.

    Keys are the base64url strings emitted by ``PushSubscription.toJSON()``.

    Example:
        address = WebPushAddress.from_subscription(
            {
                "endpoint": "https://fcm.googleapis.com/fcm/send/abc",
                "keys": {"p256dh": "BNc...", "auth": "tBH..."},
            }
        )
    """

    model_config = ConfigDict(frozen=True)

    provider: Literal["webpush"] = "webpush"
    endpoint: str
    p256dh_key: str
    auth_key: str

    @field_validator("endpoint")
    @classmethod
    def validate_endpoint(cls, v: str) -> str:
        """Push endpoints are absolute http(s) URLs."""
        _require_text(v)
        if not (v.startswith("https://") or v.startswith("http://")):
            raise ValueError(f"Push endpoint must be an http(s) URL: {v}")
        return v

    @field_validator("p256dh_key", "auth_key")
    @classmethod
    def validate_keys(cls, v: str) -> str:
        return _require_text(v)

    @property
    def key(self) -> Tuple[str, str]:
        return (self.provider, self.endpoint)

    @classmethod
    def from_subscription(cls, subscription: Mapping[str, Any]) -> "WebPushAddress":
        """Build an address from the browser subscription JSON shape."""
        keys = subscription.get("keys") or {}
        return cls(
            endpoint=subscription.get("endpoint", ""),
            p256dh_key=keys.get("p256dh", ""),
            auth_key=keys.get("auth", ""),
        )

    def to_subscription_info(self) -> Dict[str, Any]:
        """Subscription info in the shape pywebpush expects."""
        return {
            "endpoint": self.endpoint,
            "keys": {"p256dh": self.p256dh_key, "auth": self.auth_key},
        }


class OneSignalAddress(BaseModel):
    """OneSignal player (device) ID."""

    model_config = ConfigDict(frozen=True)

    provider: Literal["onesignal"] = "onesignal"
    player_id: str

    @field_validator("player_id")
    @classmethod
    def validate_player_id(cls, v: str) -> str:
        return _require_text(v)

    @property
    def key(self) -> Tuple[str, str]:
        return (self.provider, self.player_id)


class FcmAddress(BaseModel):
    """Firebase Cloud Messaging registration token."""

    model_config = ConfigDict(frozen=True)

    provider: Literal["fcm"] = "fcm"
    token: str

    @field_validator("token")
    @classmethod
    def validate_token(cls, v: str) -> str:
        return _require_text(v)

    @property
    def key(self) -> Tuple[str, str]:
        return (self.provider, self.token)


DeliveryAddress = Annotated[
    Union[WebPushAddress, OneSignalAddress, FcmAddress],
    Field(discriminator="provider"),
]

delivery_address_adapter: TypeAdapter = TypeAdapter(DeliveryAddress)


def parse_address(data: Any) -> Union[WebPushAddress, OneSignalAddress, FcmAddress]:
    """Validate raw data (dict or JSON-decoded body) into a delivery address."""
    return delivery_address_adapter.validate_python(data)


class Channel(BaseModel):
    """A delivery address registered for a subscriber."""

    model_config = ConfigDict(frozen=True)

    address: DeliveryAddress
    registered_at: datetime

    @property
    def provider(self) -> Provider:
        return Provider(self.address.provider)


class Subscriber(BaseModel):
    """A user known to the registry and their channels, one per provider.

    Instances are immutable snapshots; the registry replaces them on change.
    A subscriber persists after its last channel is removed.
    """

    model_config = ConfigDict(frozen=True)

    user_id: str
    created_at: datetime
    channels: Dict[Provider, Channel] = Field(default_factory=dict)

    @computed_field
    @property
    def is_subscribed(self) -> bool:
        return bool(self.channels)

    @computed_field
    @property
    def subscribed_at(self) -> Optional[datetime]:
        """Most recent channel registration, None when not subscribed."""
        if not self.channels:
            return None
        return max(channel.registered_at for channel in self.channels.values())


class AllSubscribers(BaseModel):
    """Every subscriber with at least one channel."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["all"] = "all"


class SpecificUsers(BaseModel):
    """Only the listed users; unknown IDs contribute nothing."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["users"] = "users"
    user_ids: FrozenSet[str]


Audience = Annotated[
    Union[AllSubscribers, SpecificUsers],
    Field(discriminator="kind"),
]


class ResolvedChannel(BaseModel):
    """One (user, address) pair the dispatcher will attempt."""

    model_config = ConfigDict(frozen=True)

    user_id: str
    address: DeliveryAddress


class NotificationEvent(BaseModel):
    """A logical notification to deliver to an audience.

    Title and body are checked by the dispatcher, which raises InvalidEvent
    instead of a validation error.

    Attributes:
        title: Notification heading
        body: Notification text
        icon: Icon URL (the service applies the club logo when missing)
        tag: Grouping key, providers supersede notifications sharing a tag
        link: URL opened when the notification is clicked
        audience: Who receives it (default: all subscribers)
        data: Extra string values forwarded to the client

    Example:
        event = NotificationEvent(
            title="But pour Rennes !",
            body="Le score est maintenant de 1 - 2.",
            tag="match-goal-42",
            link="https://club.example/match/42",
        )
    """

    title: str
    body: str
    icon: Optional[str] = None
    tag: Optional[str] = None
    link: Optional[str] = None
    audience: Audience = Field(default_factory=AllSubscribers)
    data: Dict[str, str] = Field(default_factory=dict)


class DeliveryOutcome(str, Enum):
    """Outcome of a single delivery attempt."""

    DELIVERED = "delivered"
    TRANSIENT_FAILURE = "transient_failure"
    PERMANENT_FAILURE = "permanent_failure"


class DeliveryResult(BaseModel):
    """Result of one delivery attempt to one address.

    Adapters leave ``user_id`` empty; the dispatcher fills it in.

    Attributes:
        user_id: Subscriber the address belongs to
        address: Address attempted
        outcome: DELIVERED, TRANSIENT_FAILURE or PERMANENT_FAILURE
        reason: Human readable failure reason
        error_code: Machine error code (GONE, TIMEOUT, CANCELED, ...)
        external_id: Provider message ID when delivered
    """

    user_id: Optional[str] = None
    address: DeliveryAddress
    outcome: DeliveryOutcome
    reason: Optional[str] = None
    error_code: Optional[str] = None
    external_id: Optional[str] = None

    @property
    def is_delivered(self) -> bool:
        return self.outcome == DeliveryOutcome.DELIVERED

    @property
    def is_permanent(self) -> bool:
        return self.outcome == DeliveryOutcome.PERMANENT_FAILURE

    @classmethod
    def delivered(cls, address, external_id: Optional[str] = None) -> "DeliveryResult":
        return cls(
            address=address,
            outcome=DeliveryOutcome.DELIVERED,
            external_id=external_id,
        )

    @classmethod
    def transient_failure(
        cls, address, reason: str, error_code: Optional[str] = None
    ) -> "DeliveryResult":
        return cls(
            address=address,
            outcome=DeliveryOutcome.TRANSIENT_FAILURE,
            reason=reason,
            error_code=error_code,
        )

    @classmethod
    def permanent_failure(
        cls, address, reason: str, error_code: Optional[str] = None
    ) -> "DeliveryResult":
        return cls(
            address=address,
            outcome=DeliveryOutcome.PERMANENT_FAILURE,
            reason=reason,
            error_code=error_code,
        )

    @classmethod
    def from_operation_result(
        cls,
        address,
        result: OperationResult,
        external_id: Optional[str] = None,
    ) -> "DeliveryResult":
        """Map a classified provider result onto a delivery outcome.

        NOT_FOUND and PERMANENT_ERROR are permanent failures; every other
        error status (including UNAUTHORIZED) is transient.
        """
        if result.is_success:
            return cls.delivered(address, external_id=external_id)
        if result.is_permanent:
            return cls.permanent_failure(address, result.message, result.error_code)
        return cls.transient_failure(address, result.message, result.error_code)


class DispatchReport(BaseModel):
    """Aggregate of one dispatch.

    Attributes:
        attempted: Number of delivery attempts
        delivered: Number of successful attempts
        permanent_failures: Addresses that failed permanently
        transient_failures: Number of transient failures
        results: Every DeliveryResult, in resolution order
    """

    attempted: int = 0
    delivered: int = 0
    permanent_failures: List[DeliveryAddress] = Field(default_factory=list)
    transient_failures: int = 0
    results: List[DeliveryResult] = Field(default_factory=list)

    @classmethod
    def from_results(cls, results: List[DeliveryResult]) -> "DispatchReport":
        return cls(
            attempted=len(results),
            delivered=sum(1 for r in results if r.is_delivered),
            permanent_failures=[r.address for r in results if r.is_permanent],
            transient_failures=sum(
                1
                for r in results
                if r.outcome == DeliveryOutcome.TRANSIENT_FAILURE
            ),
            results=results,
        )

    def summary(self) -> str:
        """Short human readable summary, e.g. "sent to 3 of 4"."""
        return f"sent to {self.delivered} of {self.attempted}"
