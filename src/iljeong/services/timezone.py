"""The user's timezone, used as the parser's clock and for calendar writes.

An unknown timezone name falls back to UTC rather than failing, so a bad
USER_TIMEZONE setting never stops a command from being parsed.
"""

import logging
from datetime import datetime
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from iljeong.config import settings

logger = logging.getLogger(__name__)


class TimezoneService:
    """Resolves the configured timezone and builds aware datetimes in it."""

    def __init__(self, default_timezone: str | None = None):
        """Initialize timezone service.

        Args:
            default_timezone: IANA timezone name. Defaults to settings.user_timezone.
        """
        name = default_timezone or settings.user_timezone
        try:
            self._tz = ZoneInfo(name)
        except (ZoneInfoNotFoundError, ValueError):
            logger.warning(f"Unknown timezone {name!r}, using UTC")
            self._tz = ZoneInfo("UTC")

    @property
    def default_timezone(self) -> str:
        return self._tz.key

    @property
    def tzinfo(self) -> ZoneInfo:
        return self._tz

    def now(self) -> datetime:
        """Current wall-clock time in the configured timezone."""
        return datetime.now(self._tz)

    def localize(self, dt: datetime) -> datetime:
        """Pin a naive datetime to this timezone, or convert an aware one.

        Naive values are taken to already be local wall-clock times; parsed
        commands built from a naive ``now`` come out naive.
        """
        if dt.tzinfo is None:
            return dt.replace(tzinfo=self._tz)
        return dt.astimezone(self._tz)
