"""Club feature settings."""

from pydantic import Field

from infrastructure.configuration.base import FeatureSettings


class ClubSettings(FeatureSettings):
    """Club identity used when composing notifications.

    Environment Variables:
        CLUB_NAME: Display name used in goal notifications
        BASE_URL: Public URL of the club web application (deep links)
        CLUB_LOGO_URL: Default notification icon
    """

    CLUB_NAME: str = Field(default="NBFC Futsal", alias="CLUB_NAME")
    BASE_URL: str = Field(default="http://localhost:3000", alias="BASE_URL")
    CLUB_LOGO_URL: str = Field(
        default="https://futsal.noyalbrecefc.com/wp-content/uploads/2024/07/logo@2x-1.png",
        alias="CLUB_LOGO_URL",
    )

    @property
    def base_url(self) -> str:
        """Base URL without trailing slash, ready for path concatenation."""
        return self.BASE_URL.rstrip("/")
