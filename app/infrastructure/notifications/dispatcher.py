"""Notification dispatcher with concurrent fan-out and self-healing registry.

Turns one NotificationEvent into one delivery attempt per resolved channel:
- Resolves the event audience through the SubscriptionRegistry
- Routes each address to the adapter of its provider
- Runs attempts concurrently on a thread pool, in sequential batches
- Bounds each attempt and the whole dispatch with timeouts
- Revokes addresses reported as permanently invalid
- Aggregates everything into a DispatchReport

Usage Example:
    from infrastructure.notifications import (
        NotificationDispatcher,
        NotificationEvent,
        SpecificUsers,
    )

    dispatcher = NotificationDispatcher(
        registry=registry,
        adapters={Provider.WEBPUSH: webpush_adapter},
    )

    report = dispatcher.dispatch(
        NotificationEvent(
            title="Convocation pour le match",
            body="Répondez au sondage pour le match contre Rennes le 12/10/2024.",
            audience=SpecificUsers(user_ids=frozenset({"player-1"})),
        )
    )
    logger.info("dispatch_done", summary=report.summary())
"""

import contextvars
import time
from concurrent.futures import FIRST_COMPLETED, Future, ThreadPoolExecutor, wait
from typing import Dict, List, Mapping, Optional, Set, Tuple

import structlog

from infrastructure.notifications.adapters.base import DeliveryAdapter
from infrastructure.notifications.adapters.unconfigured import (
    PROVIDER_UNCONFIGURED,
    UnconfiguredAdapter,
)
from infrastructure.notifications.errors import InvalidEvent
from infrastructure.notifications.models import (
    DeliveryResult,
    DispatchReport,
    NotificationEvent,
    Provider,
    ResolvedChannel,
)
from infrastructure.notifications.registry import SubscriptionRegistry

logger = structlog.get_logger()

# Upper bound on how long the wait loop sleeps while attempts are queued
# behind busy workers and have not started their own timeout clock yet.
_QUEUED_POLL_SECONDS = 0.05


class _Attempt:
    """Bookkeeping for one in-flight delivery attempt."""

    __slots__ = ("index", "channel", "started_at")

    def __init__(self, index: int, channel: ResolvedChannel):
        self.index = index
        self.channel = channel
        self.started_at: Optional[float] = None


class NotificationDispatcher:
    """Concurrent, provider-agnostic notification dispatcher.

    Stateless per call: nothing is carried from one dispatch to the next and
    transient failures are not retried.

    Attributes:
        registry: SubscriptionRegistry resolving audiences to channels
        adapters: Dict mapping Provider to DeliveryAdapter
        attempt_timeout: Seconds a single attempt may run (default: 10)
        dispatch_timeout: Seconds the whole dispatch may run (default: 30)
        batch_size: Attempts per batch (default: 500)
        max_workers: Thread pool size (default: 32)

    Example:
        dispatcher = NotificationDispatcher(
            registry=registry,
            adapters={
                Provider.WEBPUSH: WebPushAdapter(...),
                Provider.ONESIGNAL: OneSignalAdapter(...),
            },
        )

        report = dispatcher.dispatch(event)
    """

    def __init__(
        self,
        registry: SubscriptionRegistry,
        adapters: Mapping[Provider, DeliveryAdapter],
        attempt_timeout: float = 10.0,
        dispatch_timeout: float = 30.0,
        batch_size: int = 500,
        max_workers: int = 32,
    ):
        """Initialize the dispatcher.

        Args:
            registry: SubscriptionRegistry used for resolution and revocation
            adapters: Dict mapping Provider to DeliveryAdapter. Providers
                without an adapter are served by UnconfiguredAdapter.
            attempt_timeout: Per-attempt timeout in seconds
            dispatch_timeout: Whole-dispatch timeout in seconds
            batch_size: Maximum attempts started per batch
            max_workers: Maximum concurrent attempts
        """
        self.registry = registry
        self.adapters: Dict[Provider, DeliveryAdapter] = {
            Provider(provider): adapter for provider, adapter in adapters.items()
        }
        for provider in Provider:
            if provider not in self.adapters:
                self.adapters[provider] = UnconfiguredAdapter(provider)
        self.attempt_timeout = attempt_timeout
        self.dispatch_timeout = dispatch_timeout
        self.batch_size = batch_size
        self.max_workers = max_workers

        logger.info(
            "initialized_notification_dispatcher",
            adapters={p.value: type(a).__name__ for p, a in self.adapters.items()},
            attempt_timeout=attempt_timeout,
            dispatch_timeout=dispatch_timeout,
            batch_size=batch_size,
        )

    def dispatch(self, event: NotificationEvent) -> DispatchReport:
        """Deliver an event to every channel of its audience.

        Process:
        1. Validate title and body (raises InvalidEvent, nothing else happens)
        2. Resolve the audience; no channels means an empty report
        3. Fan out one attempt per channel, batch by batch
        4. Revoke addresses that failed permanently (best effort)
        5. Return the aggregated DispatchReport

        Args:
            event: NotificationEvent to deliver

        Returns:
            DispatchReport with one DeliveryResult per attempt

        Raises:
            InvalidEvent: If the title or body is empty
        """
        self._validate(event)

        channels = self.registry.resolve(event.audience)
        if not channels:
            logger.info("notification_dispatch_skipped", reason="no_channels", title=event.title)
            return DispatchReport()

        started = time.monotonic()
        results = self._fan_out(channels, event, started + self.dispatch_timeout)
        self._revoke_permanent_failures(results)

        report = DispatchReport.from_results(results)
        logger.info(
            "notification_dispatched",
            title=event.title,
            tag=event.tag,
            attempted=report.attempted,
            delivered=report.delivered,
            permanent_failures=len(report.permanent_failures),
            transient_failures=report.transient_failures,
            duration_ms=round((time.monotonic() - started) * 1000),
        )
        return report

    def health_check(self) -> Dict[str, bool]:
        """Health of every provider adapter.

        Returns:
            Dict mapping provider name to True if healthy
        """
        health = {}
        for provider, adapter in self.adapters.items():
            try:
                health[provider.value] = adapter.health_check().is_success
            except Exception as e:
                logger.error(
                    "adapter_health_check_failed",
                    provider=provider.value,
                    error=str(e),
                    exc_info=True,
                )
                health[provider.value] = False
        return health

    @staticmethod
    def _validate(event: NotificationEvent) -> None:
        if not event.title or not event.title.strip():
            raise InvalidEvent("Notification title cannot be empty")
        if not event.body or not event.body.strip():
            raise InvalidEvent("Notification body cannot be empty")

    def _fan_out(
        self,
        channels: List[ResolvedChannel],
        event: NotificationEvent,
        deadline: float,
    ) -> List[DeliveryResult]:
        results: List[Optional[DeliveryResult]] = [None] * len(channels)
        executor = ThreadPoolExecutor(
            max_workers=max(1, min(self.max_workers, len(channels))),
            thread_name_prefix="notification-dispatch",
        )
        try:
            for start in range(0, len(channels), self.batch_size):
                attempts = [
                    _Attempt(start + offset, channel)
                    for offset, channel in enumerate(
                        channels[start : start + self.batch_size]
                    )
                ]
                if time.monotonic() >= deadline:
                    for attempt in attempts:
                        results[attempt.index] = self._canceled(attempt)
                    continue
                self._run_batch(executor, attempts, event, deadline, results)
        finally:
            # Late results of abandoned attempts are discarded
            executor.shutdown(wait=False, cancel_futures=True)

        return [result for result in results if result is not None]

    def _run_batch(
        self,
        executor: ThreadPoolExecutor,
        attempts: List[_Attempt],
        event: NotificationEvent,
        deadline: float,
        results: List[Optional[DeliveryResult]],
    ) -> None:
        pending: Dict[Future, _Attempt] = {}
        for attempt in attempts:
            context = contextvars.copy_context()
            future = executor.submit(context.run, self._attempt, attempt, event)
            pending[future] = attempt

        while pending:
            now = time.monotonic()
            if now >= deadline:
                break

            wake_at = deadline
            queued = False
            for attempt in pending.values():
                if attempt.started_at is None:
                    queued = True
                else:
                    wake_at = min(wake_at, attempt.started_at + self.attempt_timeout)
            timeout = max(0.0, wake_at - now)
            if queued:
                timeout = min(timeout, _QUEUED_POLL_SECONDS)

            done, _ = wait(list(pending), timeout=timeout, return_when=FIRST_COMPLETED)
            for future in done:
                attempt = pending.pop(future)
                results[attempt.index] = future.result()

            now = time.monotonic()
            for future, attempt in list(pending.items()):
                if (
                    attempt.started_at is not None
                    and now - attempt.started_at >= self.attempt_timeout
                ):
                    del pending[future]
                    future.cancel()
                    results[attempt.index] = self._timed_out(attempt)

        for future, attempt in pending.items():
            future.cancel()
            results[attempt.index] = self._canceled(attempt)

    def _attempt(self, attempt: _Attempt, event: NotificationEvent) -> DeliveryResult:
        attempt.started_at = time.monotonic()
        channel = attempt.channel
        adapter = self.adapters[Provider(channel.address.provider)]
        try:
            result = adapter.send(channel.address, event)
        except Exception as e:
            logger.error(
                "delivery_adapter_raised",
                provider=channel.address.provider,
                user_id=channel.user_id,
                error=str(e),
                exc_info=True,
            )
            result = DeliveryResult.transient_failure(
                channel.address,
                f"{type(e).__name__}: {str(e)}",
                error_code="ADAPTER_ERROR",
            )

        if not result.is_delivered:
            logger.info(
                "delivery_failed",
                provider=channel.address.provider,
                user_id=channel.user_id,
                outcome=result.outcome.value,
                error_code=result.error_code,
                reason=result.reason,
            )
        return result.model_copy(update={"user_id": channel.user_id})

    @staticmethod
    def _timed_out(attempt: _Attempt) -> DeliveryResult:
        logger.warning(
            "delivery_timed_out",
            provider=attempt.channel.address.provider,
            user_id=attempt.channel.user_id,
        )
        return DeliveryResult.transient_failure(
            attempt.channel.address, "timeout", error_code="TIMEOUT"
        ).model_copy(update={"user_id": attempt.channel.user_id})

    @staticmethod
    def _canceled(attempt: _Attempt) -> DeliveryResult:
        return DeliveryResult.transient_failure(
            attempt.channel.address, "canceled", error_code="CANCELED"
        ).model_copy(update={"user_id": attempt.channel.user_id})

    def _revoke_permanent_failures(self, results: List[DeliveryResult]) -> None:
        revoked: Set[Tuple[Optional[str], Tuple[str, str]]] = set()
        for result in results:
            if not result.is_permanent or result.error_code == PROVIDER_UNCONFIGURED:
                continue
            identity = (result.user_id, result.address.key)
            if identity in revoked:
                continue
            revoked.add(identity)
            try:
                self.registry.revoke(result.address, user_id=result.user_id)
            except Exception as e:
                logger.error(
                    "channel_revoke_failed",
                    provider=result.address.provider,
                    user_id=result.user_id,
                    error=str(e),
                    exc_info=True,
                )
