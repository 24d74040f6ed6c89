"""Push provider delivery adapters."""

from infrastructure.notifications.adapters.base import (
    DeliveryAdapter,
    build_push_payload,
)
from infrastructure.notifications.adapters.fcm import FcmAdapter
from infrastructure.notifications.adapters.onesignal import OneSignalAdapter
from infrastructure.notifications.adapters.unconfigured import (
    PROVIDER_UNCONFIGURED,
    UnconfiguredAdapter,
)
from infrastructure.notifications.adapters.webpush import WebPushAdapter

__all__ = [
    "DeliveryAdapter",
    "build_push_payload",
    "WebPushAdapter",
    "OneSignalAdapter",
    "FcmAdapter",
    "UnconfiguredAdapter",
    "PROVIDER_UNCONFIGURED",
]
