"""Web Push (VAPID) integration settings."""

from pydantic import Field, field_validator

from infrastructure.configuration.base import IntegrationSettings


class WebPushSettings(IntegrationSettings):
    """Web Push configuration used to sign requests with VAPID.

    Environment Variables:
        VAPID_PUBLIC_KEY: Application server public key (base64url)
        VAPID_PRIVATE_KEY: Application server private key (base64url or PEM)
        VAPID_SUBJECT: Contact claim, must start with 'mailto:' or 'https://'
        WEBPUSH_TTL_SECONDS: How long the push service keeps an undelivered
            message (default: 3600)

    Example:
        ```python
        from infrastructure.services import get_settings

        settings = get_settings()

        if settings.webpush.is_configured:
            private_key = settings.webpush.VAPID_PRIVATE_KEY
        ```
    """

    VAPID_PUBLIC_KEY: str | None = Field(default=None, alias="VAPID_PUBLIC_KEY")
    VAPID_PRIVATE_KEY: str | None = Field(default=None, alias="VAPID_PRIVATE_KEY")
    VAPID_SUBJECT: str | None = Field(default=None, alias="VAPID_SUBJECT")
    WEBPUSH_TTL_SECONDS: int = Field(default=3600, alias="WEBPUSH_TTL_SECONDS")

    @field_validator("VAPID_SUBJECT")
    @classmethod
    def validate_subject(cls, v: str | None) -> str | None:
        """Push services reject VAPID claims without a contact URI."""
        if v is None or v == "":
            return None
        if not (v.startswith("mailto:") or v.startswith("https://")):
            raise ValueError("VAPID_SUBJECT must start with 'mailto:' or 'https://'")
        return v

    @property
    def is_configured(self) -> bool:
        return bool(
            self.VAPID_PUBLIC_KEY and self.VAPID_PRIVATE_KEY and self.VAPID_SUBJECT
        )
