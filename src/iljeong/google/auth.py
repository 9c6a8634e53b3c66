import logging
from pathlib import Path

from google.auth.exceptions import GoogleAuthError
from google.auth.transport.requests import Request
from google.oauth2.credentials import Credentials
from google_auth_oauthlib.flow import InstalledAppFlow

from iljeong.config import settings

logger = logging.getLogger(__name__)

SCOPES = [
    "https://www.googleapis.com/auth/calendar.events",
]


class GoogleAuth:
    def __init__(self, token_path: Path | None = None, credentials_path: Path | None = None):
        self.token_path = token_path or settings.token_path
        self.credentials_path = credentials_path or settings.credentials_path
        self._credentials: Credentials | None = None

    @property
    def credentials(self) -> Credentials | None:
        if self._credentials and self._credentials.valid:
            return self._credentials

        if self._credentials and self._credentials.expired and self._credentials.refresh_token:
            try:
                self._credentials.refresh(Request())
                self._save_token()
                return self._credentials
            except GoogleAuthError as e:
                logger.error(f"Failed to refresh token: {e}")
                return None

        return None

    def is_authenticated(self) -> bool:
        return self.credentials is not None

    def has_client_secrets(self) -> bool:
        return self.credentials_path.exists()

    def load_saved_credentials(self) -> bool:
        if not self.token_path.exists():
            return False

        try:
            self._credentials = Credentials.from_authorized_user_file(str(self.token_path), SCOPES)
            if self._credentials and self._credentials.expired and self._credentials.refresh_token:
                self._credentials.refresh(Request())
                self._save_token()
            return self._credentials is not None and self._credentials.valid
        except (GoogleAuthError, ValueError) as e:
            logger.error(f"Failed to load saved credentials: {e}")
            return False

    def authenticate_interactive(self) -> bool:
        if not self.has_client_secrets():
            logger.error(f"Google credentials file not found at {self.credentials_path}")
            return False

        try:
            flow = InstalledAppFlow.from_client_secrets_file(str(self.credentials_path), SCOPES)
            self._credentials = flow.run_local_server(port=0)
            self._save_token()
            return True
        except Exception as e:
            logger.error(f"Authentication failed: {e}")
            return False

    def _save_token(self) -> None:
        if not self._credentials:
            return

        self.token_path.parent.mkdir(parents=True, exist_ok=True)
        with open(self.token_path, "w") as f:
            f.write(self._credentials.to_json())


google_auth = GoogleAuth()
