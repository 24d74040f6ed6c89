"""Notification domain exceptions.

Only synchronous input errors are raised. Delivery failures are never raised
to callers: they are reported as DeliveryResult outcomes.
"""


class NotificationError(Exception):
    """Base class for notification errors."""


class InvalidArgument(NotificationError):
    """Malformed registry or dispatcher input (empty user ID, unknown provider)."""


class InvalidEvent(InvalidArgument):
    """Notification event failed validation (empty title or body)."""
