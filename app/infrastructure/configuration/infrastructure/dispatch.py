"""Notification fan-out infrastructure settings."""

from pydantic import Field, field_validator

from infrastructure.configuration.base import InfrastructureSettings


class DispatchSettings(InfrastructureSettings):
    """Notification dispatcher fan-out configuration.

    Environment Variables:
        NOTIFICATION_ATTEMPT_TIMEOUT_SECONDS: Per delivery attempt timeout (default: 10)
        NOTIFICATION_DISPATCH_TIMEOUT_SECONDS: Whole dispatch timeout (default: 30)
        NOTIFICATION_BATCH_SIZE: Attempts started together per batch (default: 500)
        NOTIFICATION_MAX_WORKERS: Thread pool size for delivery attempts (default: 32)

    Example:
        ```python
        from infrastructure.services import get_settings

        settings = get_settings()
        timeout = settings.dispatch.NOTIFICATION_ATTEMPT_TIMEOUT_SECONDS
        ```
    """

    NOTIFICATION_ATTEMPT_TIMEOUT_SECONDS: float = Field(
        default=10.0, alias="NOTIFICATION_ATTEMPT_TIMEOUT_SECONDS"
    )
    NOTIFICATION_DISPATCH_TIMEOUT_SECONDS: float = Field(
        default=30.0, alias="NOTIFICATION_DISPATCH_TIMEOUT_SECONDS"
    )
    NOTIFICATION_BATCH_SIZE: int = Field(default=500, alias="NOTIFICATION_BATCH_SIZE")
    NOTIFICATION_MAX_WORKERS: int = Field(default=32, alias="NOTIFICATION_MAX_WORKERS")

    @field_validator(
        "NOTIFICATION_ATTEMPT_TIMEOUT_SECONDS",
        "NOTIFICATION_DISPATCH_TIMEOUT_SECONDS",
        "NOTIFICATION_BATCH_SIZE",
        "NOTIFICATION_MAX_WORKERS",
    )
    @classmethod
    def validate_positive(cls, v):
        """All fan-out bounds must be strictly positive."""
        if v <= 0:
            raise ValueError("value must be greater than zero")
        return v
