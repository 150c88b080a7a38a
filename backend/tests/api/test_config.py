"""Tests for API configuration."""

from api.config import APISettings


class TestAPISettings:
    """Tests for APISettings class."""

    def test_default_values(self):
        """Should have sensible defaults."""
        settings = APISettings()
        assert settings.host == "0.0.0.0"
        assert settings.port == 8000
        assert settings.debug is False
        assert settings.reload is False

    def test_env_override(self, monkeypatch):
        """Should load from TRUSTCIRCLE_-prefixed environment variables."""
        monkeypatch.setenv("TRUSTCIRCLE_PORT", "9000")
        monkeypatch.setenv("TRUSTCIRCLE_DEBUG", "true")
        monkeypatch.setenv("TRUSTCIRCLE_RELOAD", "true")
        settings = APISettings()
        assert settings.port == 9000
        assert settings.debug is True
        assert settings.reload is True

    def test_unprefixed_env_ignored(self, monkeypatch):
        monkeypatch.setenv("PORT", "9000")
        assert APISettings().port == 8000

    def test_cors_defaults(self):
        """Should have CORS defaults."""
        settings = APISettings()
        assert "http://localhost:5173" in settings.cors_origins
        assert "http://localhost:3000" in settings.cors_origins
        assert settings.cors_allow_credentials is True
        assert settings.cors_allow_methods == ["*"]
        assert settings.cors_allow_headers == ["*"]

    def test_supabase_settings_empty_by_default(self, monkeypatch):
        """Supabase secrets should be empty by default."""
        monkeypatch.delenv("TRUSTCIRCLE_SUPABASE_JWT_SECRET", raising=False)
        monkeypatch.delenv("TRUSTCIRCLE_SUPABASE_DB_URL", raising=False)
        settings = APISettings()
        assert settings.supabase_jwt_secret == ""
        assert settings.supabase_db_url == ""

    def test_sse_ping_default(self):
        assert APISettings().sse_ping_seconds == 15
