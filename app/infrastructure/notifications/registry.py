"""Subscription registry: who can be reached and how.

The registry owns subscriber/channel bookkeeping on top of a pluggable
SubscriptionStore. Subscribers are stored as immutable snapshots and replaced
on every change, so readers (resolve, listing) never observe a half-applied
mutation. Writers serialize per subscriber with a dedicated lock.

Usage:
    from infrastructure.notifications.registry import SubscriptionRegistry

    registry = SubscriptionRegistry()
    registry.upsert_channel("user-1", OneSignalAddress(player_id="abc"))
    channels = registry.resolve(AllSubscribers())
"""

import threading
from datetime import datetime, timezone
from typing import Callable, Dict, List, Optional, Protocol

from infrastructure.logging import get_module_logger
from infrastructure.notifications.errors import InvalidArgument
from infrastructure.notifications.models import (
    AllSubscribers,
    Channel,
    Provider,
    ResolvedChannel,
    SpecificUsers,
    Subscriber,
)

logger = get_module_logger()


class SubscriptionStore(Protocol):
    """Storage interface for subscribers.

    Implementations persist immutable Subscriber snapshots. ``put`` replaces
    the stored snapshot for the subscriber's user ID.

    Methods:
        get: Return the subscriber snapshot or None
        put: Store (create or replace) a subscriber snapshot
        list_all: Return every stored subscriber
    """

    def get(self, user_id: str) -> Optional[Subscriber]:
        ...

    def put(self, subscriber: Subscriber) -> None:
        ...

    def list_all(self) -> List[Subscriber]:
        ...


class InMemorySubscriptionStore:
    """In-memory implementation of SubscriptionStore.

    Thread-safe: the map lock is only held while reading or swapping a
    snapshot. Snapshots are deep-copied on the way in and out, so a caller
    holding one cannot change the stored state. Suitable for single-instance
    deployments, tests and development.
    """

    def __init__(self) -> None:
        self._subscribers: Dict[str, Subscriber] = {}
        self._lock = threading.Lock()

    def get(self, user_id: str) -> Optional[Subscriber]:
        with self._lock:
            subscriber = self._subscribers.get(user_id)
        return subscriber.model_copy(deep=True) if subscriber is not None else None

    def put(self, subscriber: Subscriber) -> None:
        with self._lock:
            self._subscribers[subscriber.user_id] = subscriber.model_copy(deep=True)

    def list_all(self) -> List[Subscriber]:
        with self._lock:
            subscribers = list(self._subscribers.values())
        return [subscriber.model_copy(deep=True) for subscriber in subscribers]


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class SubscriptionRegistry:
    """Single source of truth for subscribers and their delivery channels.

    Invariants:
    - at most one channel per (user_id, provider); registering again for the
      same provider replaces the previous address
    - a subscriber persists with zero channels after opting out
    - every mutation is visible to the next resolve call

    Attributes:
        store: Backing SubscriptionStore
    """

    def __init__(
        self,
        store: Optional[SubscriptionStore] = None,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        self.store = store if store is not None else InMemorySubscriptionStore()
        self._clock = clock
        self._locks: Dict[str, threading.Lock] = {}
        self._locks_guard = threading.Lock()

    def _lock_for(self, user_id: str) -> threading.Lock:
        with self._locks_guard:
            lock = self._locks.get(user_id)
            if lock is None:
                lock = threading.Lock()
                self._locks[user_id] = lock
            return lock

    @staticmethod
    def _validate_user_id(user_id: str) -> None:
        if not isinstance(user_id, str) or not user_id.strip():
            raise InvalidArgument("user_id cannot be empty")

    @staticmethod
    def _validate_provider(provider) -> Provider:
        try:
            return Provider(provider)
        except ValueError:
            raise InvalidArgument(f"Unknown provider: {provider}") from None

    def ensure_subscriber(self, user_id: str) -> Subscriber:
        """Return the subscriber, creating it with no channels if missing."""
        self._validate_user_id(user_id)
        with self._lock_for(user_id):
            return self._ensure_locked(user_id)

    def _ensure_locked(self, user_id: str) -> Subscriber:
        subscriber = self.store.get(user_id)
        if subscriber is None:
            subscriber = Subscriber(user_id=user_id, created_at=self._clock())
            self.store.put(subscriber)
            logger.info("subscriber_created", user_id=user_id)
        return subscriber

    def get_subscriber(self, user_id: str) -> Optional[Subscriber]:
        self._validate_user_id(user_id)
        return self.store.get(user_id)

    def list_subscribers(self) -> List[Subscriber]:
        """All subscribers, subscribed first, then by user ID."""
        return sorted(
            self.store.list_all(),
            key=lambda s: (not s.is_subscribed, s.user_id),
        )

    def upsert_channel(self, user_id: str, address) -> Channel:
        """Register an address for a subscriber.

        Replaces any existing channel for the same provider. Registering the
        same address again keeps the existing channel unchanged.

        Args:
            user_id: Subscriber ID (non-empty)
            address: DeliveryAddress to register

        Returns:
            The channel now registered for the address's provider

        Raises:
            InvalidArgument: If user_id is empty or the provider is unknown
        """
        self._validate_user_id(user_id)
        provider = self._validate_provider(getattr(address, "provider", None))

        with self._lock_for(user_id):
            subscriber = self._ensure_locked(user_id)
            existing = subscriber.channels.get(provider)
            if existing is not None and existing.address == address:
                return existing

            channel = Channel(address=address, registered_at=self._clock())
            channels = dict(subscriber.channels)
            channels[provider] = channel
            self.store.put(subscriber.model_copy(update={"channels": channels}))

        logger.info(
            "channel_registered",
            user_id=user_id,
            provider=provider.value,
            replaced=existing is not None,
        )
        return channel

    def remove_channel(self, user_id: str, provider) -> bool:
        """Opt a subscriber out of a provider.

        Idempotent: returns False when there was nothing to remove.

        Raises:
            InvalidArgument: If user_id is empty or the provider is unknown
        """
        self._validate_user_id(user_id)
        provider = self._validate_provider(provider)

        with self._lock_for(user_id):
            subscriber = self.store.get(user_id)
            if subscriber is None or provider not in subscriber.channels:
                return False
            channels = dict(subscriber.channels)
            del channels[provider]
            self.store.put(subscriber.model_copy(update={"channels": channels}))

        logger.info("channel_removed", user_id=user_id, provider=provider.value)
        return True

    def resolve(self, audience) -> List[ResolvedChannel]:
        """Expand an audience into the channels to attempt.

        Args:
            audience: AllSubscribers or SpecificUsers

        Returns:
            One ResolvedChannel per registered channel of the targeted
            subscribers. Unknown user IDs contribute nothing.
        """
        if isinstance(audience, AllSubscribers):
            subscribers = sorted(self.store.list_all(), key=lambda s: s.user_id)
        elif isinstance(audience, SpecificUsers):
            subscribers = []
            for user_id in sorted(audience.user_ids):
                subscriber = self.store.get(user_id)
                if subscriber is not None:
                    subscribers.append(subscriber)
        else:
            raise InvalidArgument(f"Unsupported audience: {audience!r}")

        resolved = []
        for subscriber in subscribers:
            for provider in Provider:
                channel = subscriber.channels.get(provider)
                if channel is not None:
                    resolved.append(
                        ResolvedChannel(
                            user_id=subscriber.user_id, address=channel.address
                        )
                    )
        return resolved

    def revoke(self, address, user_id: Optional[str] = None) -> bool:
        """Remove the channel whose (provider, key) equals the address.

        A channel that has since been replaced by a different address for the
        same provider is left untouched.

        Args:
            address: Address reported as permanently invalid
            user_id: Restrict the revocation to this subscriber

        Returns:
            True if at least one channel was removed
        """
        provider = self._validate_provider(getattr(address, "provider", None))

        if user_id is not None:
            candidates = [user_id]
        else:
            candidates = [
                s.user_id
                for s in self.store.list_all()
                if provider in s.channels
                and s.channels[provider].address.key == address.key
            ]

        removed = False
        for candidate in candidates:
            with self._lock_for(candidate):
                subscriber = self.store.get(candidate)
                if subscriber is None:
                    continue
                channel = subscriber.channels.get(provider)
                if channel is None or channel.address.key != address.key:
                    continue
                channels = dict(subscriber.channels)
                del channels[provider]
                self.store.put(subscriber.model_copy(update={"channels": channels}))
                removed = True
            logger.info(
                "channel_revoked", user_id=candidate, provider=provider.value
            )
        return removed
