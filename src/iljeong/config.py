from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8")

    user_timezone: str = "Asia/Seoul"

    google_credentials_path: str = "google_credentials.json"
    google_token_path: str = ""
    google_calendar_id: str = "primary"

    # Sentry error tracking
    sentry_dsn: str = ""
    sentry_environment: str = "production"

    log_level: str = "INFO"
    data_dir: str = "~/.iljeong"

    @property
    def token_path(self) -> Path:
        if self.google_token_path:
            return Path(self.google_token_path).expanduser()
        return Path(self.data_dir).expanduser() / "google_token.json"

    @property
    def credentials_path(self) -> Path:
        return Path(self.google_credentials_path).expanduser()

    @property
    def has_google(self) -> bool:
        return self.credentials_path.exists()

    @property
    def has_sentry(self) -> bool:
        return bool(self.sentry_dsn)


settings = Settings()
