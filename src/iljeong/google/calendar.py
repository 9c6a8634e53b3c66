"""Google Calendar sink for parsed schedule commands.

Writes EventDrafts to a Google calendar through the Calendar v3 API.
Authorization maps onto AccessStatus:
- saved, valid token: AUTHORIZED
- client secrets present but no token yet: NOT_DETERMINED (prompt runs the
  installed-app OAuth flow)
- no client secrets: RESTRICTED
"""

import asyncio
import logging
from typing import Any

from googleapiclient.discovery import build
from googleapiclient.errors import HttpError

from iljeong.config import settings
from iljeong.google.auth import GoogleAuth, google_auth
from iljeong.services.calendar_sink import (
    AccessStatus,
    CalendarSink,
    CalendarStoreError,
    EventDraft,
)
from iljeong.services.timezone import TimezoneService

logger = logging.getLogger(__name__)


class GoogleCalendarSink(CalendarSink):
    """CalendarSink backed by Google Calendar."""

    def __init__(
        self,
        auth: GoogleAuth | None = None,
        calendar_id: str | None = None,
        timezone: str | None = None,
    ):
        self._auth = auth or google_auth
        self._calendar_id = calendar_id or settings.google_calendar_id
        self._tz_service = TimezoneService(timezone)
        self._service = None

    @property
    def service(self):
        """Get or create the Calendar API service.

        Returns:
            Calendar API service object, or None if not authenticated.
        """
        if self._service is None:
            creds = self._auth.credentials
            if creds is None:
                # Try loading saved credentials
                if self._auth.load_saved_credentials():
                    creds = self._auth.credentials

            if creds is not None:
                self._service = build("calendar", "v3", credentials=creds)

        return self._service

    def authorization_status(self) -> AccessStatus:
        if self.service is not None:
            return AccessStatus.AUTHORIZED
        if self._auth.has_client_secrets():
            return AccessStatus.NOT_DETERMINED
        return AccessStatus.RESTRICTED

    async def request_access(self) -> bool:
        loop = asyncio.get_running_loop()
        granted = await loop.run_in_executor(None, self._auth.authenticate_interactive)
        if granted:
            self._service = None
        return granted and self.service is not None

    def build_event_body(self, draft: EventDraft) -> dict[str, Any]:
        start_time = self._tz_service.localize(draft.start_time)
        end_time = self._tz_service.localize(draft.end_time)

        tz_str = self._tz_service.default_timezone

        event_body: dict[str, Any] = {
            "summary": draft.title,
            "start": {
                "dateTime": start_time.isoformat(),
                "timeZone": tz_str,
            },
            "end": {
                "dateTime": end_time.isoformat(),
                "timeZone": tz_str,
            },
        }

        if draft.location:
            event_body["location"] = draft.location

        if draft.notes:
            event_body["description"] = draft.notes

        return event_body

    async def save_event(self, draft: EventDraft) -> str:
        service = self.service
        if service is None:
            raise CalendarStoreError("Google Calendar not authenticated.")

        event_body = self.build_event_body(draft)

        try:
            loop = asyncio.get_running_loop()
            result = await loop.run_in_executor(
                None,
                lambda: service.events()
                .insert(calendarId=self._calendar_id, body=event_body)
                .execute(),
            )
        except HttpError as e:
            reason = e.reason if getattr(e, "reason", None) else str(e)
            logger.error(f"Google Calendar API error: {reason}")
            raise CalendarStoreError(reason) from e

        event_id = result.get("id", "")
        logger.info(f"Inserted Google Calendar event {event_id} ({result.get('htmlLink', '')})")
        return event_id
