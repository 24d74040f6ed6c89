"""Unit tests for NotificationDispatcher.

Tests cover:
- Fan-out to every resolved channel through the matching adapter
- Report aggregation
- Revocation of permanently failed addresses
- Per-attempt and whole-dispatch timeouts
- Batching
- Event validation
- Adapter health
"""

import threading
import time
from unittest.mock import MagicMock

import pytest

from infrastructure.notifications.dispatcher import NotificationDispatcher
from infrastructure.notifications.errors import InvalidEvent
from infrastructure.notifications.models import (
    AllSubscribers,
    DeliveryOutcome,
    DeliveryResult,
    Provider,
)
from infrastructure.operations import OperationResult
from tests.factories.notifications import (
    make_event,
    make_fcm_address,
    make_onesignal_address,
    make_webpush_address,
)


def _gone(address):
    return DeliveryResult.permanent_failure(address, "gone", "GONE")


def _server_error(address):
    return DeliveryResult.transient_failure(address, "server error", "SERVER_ERROR")


@pytest.fixture
def adapters(mock_adapter_factory):
    return {
        Provider.WEBPUSH: mock_adapter_factory(Provider.WEBPUSH),
        Provider.ONESIGNAL: mock_adapter_factory(Provider.ONESIGNAL),
        Provider.FCM: mock_adapter_factory(Provider.FCM),
    }


def _dispatcher(registry, adapters, **kwargs):
    kwargs.setdefault("attempt_timeout", 2.0)
    kwargs.setdefault("dispatch_timeout", 5.0)
    kwargs.setdefault("max_workers", 8)
    return NotificationDispatcher(registry=registry, adapters=adapters, **kwargs)


@pytest.mark.unit
class TestDispatchFanOut:
    def test_all_channels_of_all_subscribers(self, registry, adapters, sent_addresses):
        registry.upsert_channel("u1", make_onesignal_address("p1"))
        registry.upsert_channel("u1", make_fcm_address("t1"))
        registry.upsert_channel("u2", make_webpush_address())

        report = _dispatcher(registry, adapters).dispatch(make_event())

        assert report.attempted == 3
        assert report.delivered == 3
        assert report.permanent_failures == []
        assert report.transient_failures == 0
        assert sent_addresses(adapters[Provider.ONESIGNAL]) == [make_onesignal_address("p1")]
        assert sent_addresses(adapters[Provider.FCM]) == [make_fcm_address("t1")]
        assert sent_addresses(adapters[Provider.WEBPUSH]) == [make_webpush_address()]

    def test_results_carry_user_ids_in_resolution_order(self, registry, adapters):
        registry.upsert_channel("u2", make_onesignal_address("p2"))
        registry.upsert_channel("u1", make_fcm_address("t1"))
        registry.upsert_channel("u1", make_onesignal_address("p1"))

        report = _dispatcher(registry, adapters).dispatch(make_event())

        assert [(r.user_id, r.address.key) for r in report.results] == [
            ("u1", ("onesignal", "p1")),
            ("u1", ("fcm", "t1")),
            ("u2", ("onesignal", "p2")),
        ]

    def test_specific_users_only(self, registry, adapters, sent_addresses):
        registry.upsert_channel("u1", make_onesignal_address("p1"))
        registry.upsert_channel("u2", make_onesignal_address("p2"))

        report = _dispatcher(registry, adapters).dispatch(
            make_event(user_ids=["u2", "unknown"])
        )

        assert report.attempted == 1
        assert sent_addresses(adapters[Provider.ONESIGNAL]) == [make_onesignal_address("p2")]

    def test_empty_audience_sends_nothing(self, registry, adapters):
        report = _dispatcher(registry, adapters).dispatch(make_event())

        assert report.attempted == 0
        assert report.results == []
        for adapter in adapters.values():
            adapter.send.assert_not_called()

    def test_transient_failure_keeps_channel(self, registry, mock_adapter_factory):
        address = make_onesignal_address("p1")
        registry.upsert_channel("u1", address)
        adapters = {
            Provider.ONESIGNAL: mock_adapter_factory(
                Provider.ONESIGNAL, outcomes={address.key: _server_error}
            )
        }

        report = _dispatcher(registry, adapters).dispatch(make_event())

        assert report.transient_failures == 1
        assert report.delivered == 0
        assert len(registry.resolve(AllSubscribers())) == 1

    def test_adapter_exception_becomes_transient_failure(self, registry, mock_adapter_factory):
        registry.upsert_channel("u1", make_onesignal_address("p1"))
        registry.upsert_channel("u2", make_onesignal_address("p2"))

        def _explode(address, event):
            if address.player_id == "p1":
                raise RuntimeError("adapter bug")
            return DeliveryResult.delivered(address)

        adapters = {
            Provider.ONESIGNAL: mock_adapter_factory(Provider.ONESIGNAL, side_effect=_explode)
        }

        report = _dispatcher(registry, adapters).dispatch(make_event())

        assert report.delivered == 1
        assert report.transient_failures == 1
        failed = report.results[0]
        assert failed.error_code == "ADAPTER_ERROR"
        assert failed.user_id == "u1"


@pytest.mark.unit
class TestDispatchRevocation:
    def test_permanent_failure_revokes_only_that_channel(self, registry, mock_adapter_factory):
        dead = make_webpush_address(endpoint="https://push.example/dead")
        registry.upsert_channel("u1", dead)
        registry.upsert_channel("u1", make_onesignal_address("p1"))
        registry.upsert_channel("u2", make_webpush_address())
        adapters = {
            Provider.WEBPUSH: mock_adapter_factory(
                Provider.WEBPUSH, outcomes={dead.key: _gone}
            ),
            Provider.ONESIGNAL: mock_adapter_factory(Provider.ONESIGNAL),
        }

        report = _dispatcher(registry, adapters).dispatch(make_event())

        assert report.attempted == 3
        assert report.delivered == 2
        assert report.permanent_failures == [dead]
        assert report.summary() == "sent to 2 of 3"
        assert set(registry.get_subscriber("u1").channels) == {Provider.ONESIGNAL}
        assert Provider.WEBPUSH in registry.get_subscriber("u2").channels

    def test_second_dispatch_skips_revoked_address(self, registry, mock_adapter_factory, sent_addresses):
        dead = make_fcm_address("dead-token")
        registry.upsert_channel("u1", dead)
        adapter = mock_adapter_factory(Provider.FCM, outcomes={dead.key: _gone})
        dispatcher = _dispatcher(registry, {Provider.FCM: adapter})

        dispatcher.dispatch(make_event())
        report = dispatcher.dispatch(make_event())

        assert report.attempted == 0
        assert sent_addresses(adapter) == [dead]

    def test_unconfigured_provider_not_revoked(self, registry, adapters):
        """A missing provider is not the address's fault: unlike other permanent
        failures, PROVIDER_UNCONFIGURED keeps the channel for when credentials
        are supplied."""
        del adapters[Provider.FCM]
        address = make_fcm_address("t1")
        registry.upsert_channel("u1", address)

        dispatcher = _dispatcher(registry, adapters)
        report = dispatcher.dispatch(make_event())

        assert report.permanent_failures == [address]
        assert report.results[0].reason == "not configured"
        assert registry.get_subscriber("u1").channels[Provider.FCM].address == address
        assert [r.address for r in registry.resolve(AllSubscribers())] == [address]

    def test_revoke_failure_does_not_fail_dispatch(self, mock_adapter_factory):
        dead = make_onesignal_address("dead")
        registry = MagicMock()
        registry.resolve.return_value = [
            MagicMock(user_id="u1", address=dead),
        ]
        registry.revoke.side_effect = RuntimeError("store down")
        adapters = {
            Provider.ONESIGNAL: mock_adapter_factory(
                Provider.ONESIGNAL, outcomes={dead.key: _gone}
            )
        }

        report = _dispatcher(registry, adapters).dispatch(make_event())

        assert report.permanent_failures == [dead]
        registry.revoke.assert_called_once_with(dead, user_id="u1")

    def test_revocation_happens_after_fan_out(self, registry, mock_adapter_factory):
        dead = make_onesignal_address("dead")
        registry.upsert_channel("u1", dead)
        seen = []

        def _record(address, event):
            seen.append(len(registry.resolve(AllSubscribers())))
            return _gone(address)

        adapters = {
            Provider.ONESIGNAL: mock_adapter_factory(Provider.ONESIGNAL, side_effect=_record)
        }

        _dispatcher(registry, adapters).dispatch(make_event())

        assert seen == [1]
        assert registry.resolve(AllSubscribers()) == []


@pytest.mark.unit
class TestDispatchTimeouts:
    def test_slow_attempt_times_out(self, registry, mock_adapter_factory):
        release = threading.Event()
        registry.upsert_channel("slow", make_onesignal_address("slow"))
        registry.upsert_channel("fast", make_onesignal_address("fast"))

        def _send(address, event):
            if address.player_id == "slow":
                release.wait(5)
            return DeliveryResult.delivered(address)

        adapters = {
            Provider.ONESIGNAL: mock_adapter_factory(Provider.ONESIGNAL, side_effect=_send)
        }
        try:
            report = _dispatcher(
                registry, adapters, attempt_timeout=0.2, dispatch_timeout=5.0
            ).dispatch(make_event())
        finally:
            release.set()

        results = {r.user_id: r for r in report.results}
        assert results["fast"].outcome == DeliveryOutcome.DELIVERED
        assert results["slow"].outcome == DeliveryOutcome.TRANSIENT_FAILURE
        assert results["slow"].error_code == "TIMEOUT"
        assert registry.get_subscriber("slow").is_subscribed

    def test_dispatch_timeout_cancels_remaining_attempts(self, registry, mock_adapter_factory):
        release = threading.Event()
        for index in range(4):
            registry.upsert_channel(f"u{index}", make_onesignal_address(f"p{index}"))

        def _send(address, event):
            release.wait(5)
            return DeliveryResult.delivered(address)

        adapters = {
            Provider.ONESIGNAL: mock_adapter_factory(Provider.ONESIGNAL, side_effect=_send)
        }
        started = time.monotonic()
        try:
            report = _dispatcher(
                registry,
                adapters,
                attempt_timeout=5.0,
                dispatch_timeout=0.3,
                max_workers=2,
            ).dispatch(make_event())
        finally:
            release.set()

        assert time.monotonic() - started < 2.0
        assert report.attempted == 4
        assert report.delivered == 0
        assert {r.error_code for r in report.results} == {"CANCELED"}

    def test_batches_after_deadline_are_canceled(self, registry, mock_adapter_factory, sent_addresses):
        for index in range(3):
            registry.upsert_channel(f"u{index}", make_onesignal_address(f"p{index}"))

        def _send(address, event):
            time.sleep(0.3)
            return DeliveryResult.delivered(address)

        adapter = mock_adapter_factory(Provider.ONESIGNAL, side_effect=_send)
        report = _dispatcher(
            registry,
            {Provider.ONESIGNAL: adapter},
            attempt_timeout=2.0,
            dispatch_timeout=0.5,
            batch_size=1,
        ).dispatch(make_event())

        codes = [r.error_code for r in report.results]
        assert report.attempted == 3
        assert codes[0] is None
        assert codes[-1] == "CANCELED"
        assert len(sent_addresses(adapter)) < 3


@pytest.mark.unit
class TestDispatchBatching:
    def test_every_channel_attempted_across_batches(self, registry, adapters, sent_addresses):
        for index in range(7):
            registry.upsert_channel(f"u{index:02d}", make_onesignal_address(f"p{index}"))

        report = _dispatcher(registry, adapters, batch_size=3).dispatch(make_event())

        assert report.attempted == 7
        assert report.delivered == 7
        assert len(sent_addresses(adapters[Provider.ONESIGNAL])) == 7

    def test_concurrency_within_batch_is_bounded(self, registry, mock_adapter_factory):
        lock = threading.Lock()
        in_flight = {"now": 0, "max": 0}
        for index in range(6):
            registry.upsert_channel(f"u{index}", make_onesignal_address(f"p{index}"))

        def _send(address, event):
            with lock:
                in_flight["now"] += 1
                in_flight["max"] = max(in_flight["max"], in_flight["now"])
            time.sleep(0.05)
            with lock:
                in_flight["now"] -= 1
            return DeliveryResult.delivered(address)

        adapters = {
            Provider.ONESIGNAL: mock_adapter_factory(Provider.ONESIGNAL, side_effect=_send)
        }
        report = _dispatcher(registry, adapters, max_workers=2).dispatch(make_event())

        assert report.delivered == 6
        assert in_flight["max"] <= 2


@pytest.mark.unit
class TestDispatchValidation:
    @pytest.mark.parametrize(
        "title,body", [("", "body"), ("   ", "body"), ("title", ""), ("title", "  ")]
    )
    def test_empty_title_or_body_rejected(self, title, body, adapters):
        registry = MagicMock()

        with pytest.raises(InvalidEvent):
            _dispatcher(registry, adapters).dispatch(make_event(title=title, body=body))

        registry.resolve.assert_not_called()
        for adapter in adapters.values():
            adapter.send.assert_not_called()


@pytest.mark.unit
class TestDispatcherAdapters:
    def test_missing_providers_get_unconfigured_adapter(self, registry):
        dispatcher = NotificationDispatcher(registry=registry, adapters={})

        assert set(dispatcher.adapters) == set(Provider)
        assert dispatcher.health_check() == {
            "webpush": False,
            "onesignal": False,
            "fcm": False,
        }

    def test_health_check_reports_each_provider(self, registry, adapters):
        adapters[Provider.WEBPUSH].health_check.return_value = OperationResult.success()
        adapters[Provider.ONESIGNAL].health_check.return_value = (
            OperationResult.permanent_error("credentials missing")
        )
        adapters[Provider.FCM].health_check.side_effect = RuntimeError("boom")

        health = _dispatcher(registry, adapters).health_check()

        assert health == {"webpush": True, "onesignal": False, "fcm": False}


@pytest.mark.unit
class TestDispatchScenarios:
    def test_webpush_gone_and_fcm_delivered(self, registry, mock_adapter_factory, sent_addresses):
        p1_address = make_webpush_address(endpoint="https://push.example/p1")
        p2_address = make_fcm_address("p2-token")
        registry.upsert_channel("p1", p1_address)
        registry.upsert_channel("p2", p2_address)

        def _gone_410(address):
            return DeliveryResult.permanent_failure(address, "410 Gone", "GONE")

        adapters = {
            Provider.WEBPUSH: mock_adapter_factory(
                Provider.WEBPUSH, outcomes={p1_address.key: _gone_410}
            ),
            Provider.FCM: mock_adapter_factory(Provider.FCM),
        }

        report = _dispatcher(registry, adapters).dispatch(
            make_event(title="But!", body="1-0", tag=None, link=None)
        )

        assert sent_addresses(adapters[Provider.WEBPUSH]) == [p1_address]
        assert sent_addresses(adapters[Provider.FCM]) == [p2_address]
        assert report.attempted == 2
        assert report.delivered == 1
        assert report.permanent_failures == [p1_address]
        assert [(r.user_id, r.address) for r in registry.resolve(AllSubscribers())] == [
            ("p2", p2_address)
        ]

    def test_specific_user_without_channels(self, registry, adapters):
        registry.ensure_subscriber("p3")

        report = _dispatcher(registry, adapters).dispatch(make_event(user_ids=["p3"]))

        assert (report.attempted, report.delivered, report.permanent_failures) == (0, 0, [])
        for adapter in adapters.values():
            adapter.send.assert_not_called()
