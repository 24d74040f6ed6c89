"""Adapter standing in for a provider without credentials."""

import structlog

from infrastructure.notifications.adapters.base import DeliveryAdapter
from infrastructure.notifications.models import (
    DeliveryResult,
    NotificationEvent,
    Provider,
)
from infrastructure.operations import OperationResult, OperationStatus

logger = structlog.get_logger()

PROVIDER_UNCONFIGURED = "PROVIDER_UNCONFIGURED"


class UnconfiguredAdapter(DeliveryAdapter):
    """Reports every address as a permanent "not configured" failure.

    The dispatcher recognizes the PROVIDER_UNCONFIGURED error code and does
    not revoke these addresses: the subscriber's opt-in stays intact until
    credentials are supplied.
    """

    def __init__(self, provider: Provider):
        self._provider = Provider(provider)

    @property
    def provider(self) -> Provider:
        return self._provider

    def send(self, address, event: NotificationEvent) -> DeliveryResult:
        logger.warning(
            "provider_unconfigured",
            provider=self._provider.value,
            title=event.title,
        )
        return DeliveryResult.permanent_failure(
            address,
            "not configured",
            error_code=PROVIDER_UNCONFIGURED,
        )

    def health_check(self) -> OperationResult:
        return OperationResult.error(
            OperationStatus.PERMANENT_ERROR,
            f"{self._provider.value} is not configured",
            error_code=PROVIDER_UNCONFIGURED,
        )
