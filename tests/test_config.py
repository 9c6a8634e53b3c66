"""Tests for environment-driven settings."""

from pathlib import Path

from iljeong.config import Settings


class TestSettings:
    def test_defaults(self, monkeypatch):
        for name in ("USER_TIMEZONE", "GOOGLE_CALENDAR_ID", "GOOGLE_TOKEN_PATH", "SENTRY_DSN"):
            monkeypatch.delenv(name, raising=False)

        config = Settings(_env_file=None)
        assert config.user_timezone == "Asia/Seoul"
        assert config.google_calendar_id == "primary"
        assert config.has_sentry is False

    def test_environment_overrides(self, monkeypatch):
        monkeypatch.setenv("USER_TIMEZONE", "Asia/Tokyo")
        monkeypatch.setenv("SENTRY_DSN", "https://key@sentry.io/1")

        config = Settings(_env_file=None)
        assert config.user_timezone == "Asia/Tokyo"
        assert config.has_sentry is True

    def test_token_path_defaults_to_data_dir(self, tmp_path):
        config = Settings(_env_file=None, data_dir=str(tmp_path), google_token_path="")
        assert config.token_path == tmp_path / "google_token.json"

    def test_explicit_token_path(self, tmp_path):
        config = Settings(_env_file=None, google_token_path=str(tmp_path / "t.json"))
        assert config.token_path == tmp_path / "t.json"

    def test_has_google_requires_client_secrets(self, tmp_path):
        secrets = tmp_path / "secrets.json"
        config = Settings(_env_file=None, google_credentials_path=str(secrets))
        assert config.has_google is False

        secrets.write_text("{}")
        assert config.has_google is True
        assert config.credentials_path == Path(secrets)
