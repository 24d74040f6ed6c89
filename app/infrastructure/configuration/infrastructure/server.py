"""Server infrastructure settings."""

from typing import Annotated, List

from pydantic import Field, field_validator
from pydantic_settings import NoDecode

from infrastructure.configuration.base import InfrastructureSettings


class ServerSettings(InfrastructureSettings):
    """Server and application runtime configuration.

    Environment Variables:
        CORS_ALLOW_ORIGINS: Comma separated list of allowed origins
            (default: local development origins)
        WEBHOOK_RATE_LIMIT: slowapi limit applied to the database webhook
            (default: 120/minute)

    Example:
        ```python
        from infrastructure.services import get_settings

        origins = get_settings().server.CORS_ALLOW_ORIGINS
        ```
    """

    CORS_ALLOW_ORIGINS: Annotated[List[str], NoDecode] = Field(
        default_factory=lambda: ["http://localhost:3000", "http://127.0.0.1:3000"],
        alias="CORS_ALLOW_ORIGINS",
    )
    WEBHOOK_RATE_LIMIT: str = Field(default="120/minute", alias="WEBHOOK_RATE_LIMIT")

    @field_validator("CORS_ALLOW_ORIGINS", mode="before")
    @classmethod
    def split_origins(cls, v):
        """Accept a comma separated string as well as a JSON list."""
        if isinstance(v, str):
            return [origin.strip() for origin in v.split(",") if origin.strip()]
        return v
