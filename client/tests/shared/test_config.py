"""Tests for shared/config.py."""

import os
from unittest.mock import patch

from shared.config import Settings, get_settings


class TestSettings:
    def test_default_values(self):
        """Settings should have sensible defaults."""
        settings = Settings(_env_file=None)
        assert settings.app_name == "Localite"
        assert settings.debug is False
        assert settings.profiles_table == "users"
        assert settings.default_language == "zh-TW"
        assert settings.resend_cooldown_ms == 60_000
        assert settings.min_password_length == 6
        assert settings.gateway_timeout_seconds == 15.0
        assert settings.resend_verification_on_sign_in is True

    def test_loads_from_env(self):
        """Settings should load from environment variables."""
        with patch.dict(os.environ, {"DEBUG": "true", "RESEND_COOLDOWN_MS": "30000"}):
            settings = Settings(_env_file=None)
            assert settings.debug is True
            assert settings.resend_cooldown_ms == 30_000

    def test_loads_supabase_config_from_env(self):
        """Settings should load Supabase configuration from environment variables."""
        with patch.dict(os.environ, {
            "SUPABASE_URL": "https://test.supabase.co",
            "SUPABASE_ANON_KEY": "test-anon-key",
        }):
            settings = Settings(_env_file=None)
            assert settings.supabase_url == "https://test.supabase.co"
            assert settings.supabase_anon_key == "test-anon-key"

    def test_env_names_are_case_insensitive(self):
        """Lower-case environment variable names should be honored."""
        with patch.dict(os.environ, {"default_language": "en"}):
            settings = Settings(_env_file=None)
            assert settings.default_language == "en"

    def test_unknown_env_values_are_ignored(self):
        """Extra settings should not fail validation."""
        settings = Settings(_env_file=None, not_a_setting="x")
        assert not hasattr(settings, "not_a_setting")


class TestGetSettings:
    def test_get_settings_returns_settings_instance(self):
        """get_settings should return a Settings instance."""
        assert isinstance(get_settings(), Settings)

    def test_get_settings_caches(self):
        """get_settings should return cached instance."""
        settings1 = get_settings()
        settings2 = get_settings()
        assert settings1 is settings2
