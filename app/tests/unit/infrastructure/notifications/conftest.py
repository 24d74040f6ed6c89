"""Test fixtures for notification infrastructure tests."""

from typing import Callable, Dict, List, Optional
from unittest.mock import MagicMock

import pytest

from infrastructure.notifications.adapters.base import DeliveryAdapter
from infrastructure.notifications.models import DeliveryResult, Provider
from infrastructure.notifications.registry import SubscriptionRegistry


@pytest.fixture
def registry():
    """Fresh in-memory SubscriptionRegistry."""
    return SubscriptionRegistry()


@pytest.fixture
def mock_adapter_factory():
    """Factory for mock DeliveryAdapter instances.

    ``outcomes`` maps an address key (``address.key``) to the DeliveryResult
    builder used for it; other addresses are delivered.

    Example:
        adapter = mock_adapter_factory(
            Provider.WEBPUSH,
            outcomes={address.key: lambda a: DeliveryResult.permanent_failure(a, "gone", "GONE")},
        )
    """

    def _factory(
        provider: Provider = Provider.ONESIGNAL,
        outcomes: Optional[Dict[tuple, Callable]] = None,
        side_effect: Optional[Callable] = None,
    ) -> MagicMock:
        adapter = MagicMock(spec=DeliveryAdapter)
        adapter.provider = provider
        outcomes = outcomes or {}

        def _send(address, event):
            if side_effect is not None:
                return side_effect(address, event)
            builder = outcomes.get(address.key)
            if builder is not None:
                return builder(address)
            return DeliveryResult.delivered(address, external_id=f"id-{address.key[1]}")

        adapter.send.side_effect = _send
        return adapter

    return _factory


@pytest.fixture
def sent_addresses():
    """Helper extracting the addresses an adapter mock was called with."""

    def _sent(adapter: MagicMock) -> List:
        return [c.args[0] for c in adapter.send.call_args_list]

    return _sent
