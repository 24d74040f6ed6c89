"""Unit tests for configuration settings."""

import pytest
from pydantic import ValidationError

from infrastructure.configuration import (
    ClubSettings,
    DispatchSettings,
    FcmSettings,
    OneSignalSettings,
    ServerSettings,
    Settings,
    WebPushSettings,
)


@pytest.mark.unit
class TestWebPushSettings:
    def test_configured_when_all_keys_present(self):
        settings = WebPushSettings(
            VAPID_PUBLIC_KEY="pub",
            VAPID_PRIVATE_KEY="priv",
            VAPID_SUBJECT="mailto:admin@club.example",
        )
        assert settings.is_configured is True

    def test_not_configured_without_private_key(self):
        settings = WebPushSettings(
            VAPID_PUBLIC_KEY="pub",
            VAPID_PRIVATE_KEY=None,
            VAPID_SUBJECT="mailto:admin@club.example",
        )
        assert settings.is_configured is False

    def test_subject_must_be_mailto_or_https(self):
        with pytest.raises(ValidationError):
            WebPushSettings(VAPID_SUBJECT="admin@club.example")

    def test_empty_subject_is_none(self):
        assert WebPushSettings(VAPID_SUBJECT="").VAPID_SUBJECT is None

    def test_subject_from_environment(self, monkeypatch):
        monkeypatch.setenv("VAPID_SUBJECT", "https://club.example/contact")
        assert WebPushSettings().VAPID_SUBJECT == "https://club.example/contact"


@pytest.mark.unit
class TestProviderSettings:
    def test_onesignal_requires_app_id_and_key(self):
        assert OneSignalSettings(
            ONESIGNAL_APP_ID="app", ONESIGNAL_REST_API_KEY="key"
        ).is_configured
        assert not OneSignalSettings(
            ONESIGNAL_APP_ID="app", ONESIGNAL_REST_API_KEY=None
        ).is_configured

    def test_onesignal_default_api_url(self):
        settings = OneSignalSettings(ONESIGNAL_APP_ID=None, ONESIGNAL_REST_API_KEY=None)
        assert settings.ONESIGNAL_API_URL == "https://onesignal.com/api/v1/notifications"

    def test_fcm_requires_credentials_and_project(self):
        assert FcmSettings(
            FCM_CREDENTIALS_FILE="/secrets/fcm.json", FCM_PROJECT_ID="club"
        ).is_configured
        assert not FcmSettings(FCM_CREDENTIALS_FILE=None, FCM_PROJECT_ID="club").is_configured


@pytest.mark.unit
class TestDispatchSettings:
    def test_defaults(self, monkeypatch):
        for name in (
            "NOTIFICATION_ATTEMPT_TIMEOUT_SECONDS",
            "NOTIFICATION_DISPATCH_TIMEOUT_SECONDS",
            "NOTIFICATION_BATCH_SIZE",
            "NOTIFICATION_MAX_WORKERS",
        ):
            monkeypatch.delenv(name, raising=False)
        settings = DispatchSettings(_env_file=None)

        assert settings.NOTIFICATION_ATTEMPT_TIMEOUT_SECONDS == 10.0
        assert settings.NOTIFICATION_DISPATCH_TIMEOUT_SECONDS == 30.0
        assert settings.NOTIFICATION_BATCH_SIZE == 500
        assert settings.NOTIFICATION_MAX_WORKERS == 32

    def test_rejects_non_positive_values(self):
        with pytest.raises(ValidationError):
            DispatchSettings(NOTIFICATION_BATCH_SIZE=0)


@pytest.mark.unit
class TestClubAndServerSettings:
    def test_base_url_strips_trailing_slash(self):
        settings = ClubSettings(BASE_URL="https://club.example/")
        assert settings.base_url == "https://club.example"

    def test_cors_origins_from_comma_separated_env(self, monkeypatch):
        monkeypatch.setenv(
            "CORS_ALLOW_ORIGINS", "https://club.example, https://admin.club.example"
        )
        settings = ServerSettings()
        assert settings.CORS_ALLOW_ORIGINS == [
            "https://club.example",
            "https://admin.club.example",
        ]


@pytest.mark.unit
class TestSettingsAggregator:
    def test_subsettings_are_instantiated(self):
        settings = Settings()

        assert isinstance(settings.webpush, WebPushSettings)
        assert isinstance(settings.onesignal, OneSignalSettings)
        assert isinstance(settings.fcm, FcmSettings)
        assert isinstance(settings.club, ClubSettings)
        assert isinstance(settings.dispatch, DispatchSettings)
        assert isinstance(settings.server, ServerSettings)

    def test_is_production_when_prefix_empty(self):
        assert Settings(PREFIX="").is_production is True
        assert Settings(PREFIX="dev-").is_production is False

    def test_factory_settings_have_no_provider_configured(self, test_settings):
        assert not test_settings.webpush.is_configured
        assert not test_settings.onesignal.is_configured
        assert not test_settings.fcm.is_configured
