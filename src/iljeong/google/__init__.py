from iljeong.google.auth import GoogleAuth, google_auth
from iljeong.google.calendar import GoogleCalendarSink

__all__ = [
    "GoogleAuth",
    "GoogleCalendarSink",
    "google_auth",
]
