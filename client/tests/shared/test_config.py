"""Tests for shared/config.py."""

from shared.config import Settings, get_settings


class TestSettings:
    def test_defaults(self, monkeypatch):
        """Settings should default to local development hosts."""
        monkeypatch.delenv("RAIDWATCH_API_URL", raising=False)
        settings = Settings(_env_file=None)

        assert settings.api_url == "http://localhost:8080"
        assert settings.app_url == "http://localhost:3000"
        assert settings.csrf_token_path == "/api/csrf-token"

    def test_csrf_defaults(self):
        """CSRF tokens should live one hour with three acquisition attempts."""
        settings = Settings(_env_file=None)

        assert settings.csrf_token_lifetime == 3600
        assert settings.csrf_max_retries == 3
        assert settings.csrf_retry_delay == 1.0

    def test_route_defaults(self):
        """Redirect targets should match the web client routes."""
        settings = Settings(_env_file=None)

        assert settings.landing_route == "/dashboard"
        assert settings.login_route == "/login"
        assert settings.profile_route == "/profile"
        assert settings.home_route == "/"

    def test_pacing_defaults(self):
        """Re-link pacing should wait 1s before syncing and 2s before redirecting."""
        settings = Settings(_env_file=None)

        assert settings.relink_sync_delay == 1.0
        assert settings.relink_redirect_delay == 2.0

    def test_env_prefix(self, monkeypatch):
        """Settings should read RAIDWATCH_ prefixed variables."""
        monkeypatch.setenv("RAIDWATCH_API_URL", "https://api.example.com")
        monkeypatch.setenv("RAIDWATCH_CSRF_MAX_RETRIES", "5")

        settings = Settings(_env_file=None)

        assert settings.api_url == "https://api.example.com"
        assert settings.csrf_max_retries == 5

    def test_unprefixed_variables_ignored(self, monkeypatch):
        """Variables without the prefix should not leak into settings."""
        monkeypatch.setenv("API_URL", "https://wrong.example.com")
        monkeypatch.delenv("RAIDWATCH_API_URL", raising=False)

        settings = Settings(_env_file=None)

        assert settings.api_url == "http://localhost:8080"


class TestGetSettings:
    def test_get_settings_is_cached(self):
        """get_settings should return the same instance."""
        get_settings.cache_clear()
        try:
            assert get_settings() is get_settings()
        finally:
            get_settings.cache_clear()

    def test_unused_environment_ignored(self, monkeypatch):
        """Variables the session core does not read are ignored, not stored."""
        monkeypatch.setenv("RAIDWATCH_LOG_LEVEL", "DEBUG")
        settings = Settings(_env_file=None)

        assert not hasattr(settings, "log_level")
        assert "log_level" not in Settings.model_fields
