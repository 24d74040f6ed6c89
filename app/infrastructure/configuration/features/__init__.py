"""Feature settings __init__ - exports all feature settings."""

from infrastructure.configuration.features.club import ClubSettings

__all__ = [
    "ClubSettings",
]
