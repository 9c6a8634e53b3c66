"""Rule-based parser for Korean scheduling commands.

Turns a request such as "8월 8일에 우리 가족과 만나는 일정을 캘린더에 추가해줘"
into a ParsedCommand with a title, date, attendees, location and duration.

Each extraction stage reads the raw command text on its own; no stage sees
another stage's output. Dates are resolved against an explicit ``now`` so the
same text and clock always give the same command.
"""

import logging
import re
from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime, timedelta
from enum import Enum

from iljeong.services.timezone import TimezoneService

logger = logging.getLogger(__name__)

DEFAULT_TITLE = "새로운 일정"

# Explicit dates and weekdays are pinned to 10:00
DEFAULT_EVENT_HOUR = 10

DEFAULT_DURATION = timedelta(hours=1)

WEEKDAYS = ("월요일", "화요일", "수요일", "목요일", "금요일", "토요일", "일요일")


class CommandAction(str, Enum):
    ADD = "add"


@dataclass(frozen=True)
class ParsedCommand:
    """Structured result of parsing one scheduling command.

    ``date`` is None when no date expression was recognised; callers must
    branch on it before writing to a calendar. ``title`` is never empty and
    ``duration`` is always positive.
    """

    title: str
    action: CommandAction = CommandAction.ADD
    date: datetime | None = None
    description: str | None = None
    attendees: tuple[str, ...] = ()
    location: str | None = None
    duration: timedelta = DEFAULT_DURATION

    @property
    def end(self) -> datetime | None:
        if self.date is None:
            return None
        return self.date + self.duration


DateResolver = Callable[[re.Match[str], datetime], datetime | None]


@dataclass(frozen=True)
class DateRule:
    """A date expression pattern and how to turn a match into a datetime.

    A resolver may return None to decline the match, in which case the
    next rule is tried.
    """

    name: str
    pattern: re.Pattern[str]
    resolve: DateResolver

    def apply(self, text: str, now: datetime) -> datetime | None:
        match = self.pattern.search(text)
        if match is None:
            return None
        return self.resolve(match, now)


def _at_default_hour(dt: datetime) -> datetime:
    return dt.replace(hour=DEFAULT_EVENT_HOUR, minute=0, second=0, microsecond=0)


def _resolve_month_day(match: re.Match[str], now: datetime) -> datetime | None:
    numbers = [int(group) for group in re.findall(r"\d+", match.group(0))]
    numbers = [n for n in numbers if n > 0]
    if len(numbers) < 2:
        return None

    month, day = numbers[0], numbers[1]
    # Overflow rolls forward: 13월 1일 is next January, 2월 30일 lands in March
    year = now.year + (month - 1) // 12
    try:
        first = datetime(year, (month - 1) % 12 + 1, 1, DEFAULT_EVENT_HOUR, 0, tzinfo=now.tzinfo)
        return first + timedelta(days=day - 1)
    except (ValueError, OverflowError):
        logger.debug(f"Ignoring out-of-range date {month}월 {day}일")
        return None


def _resolve_today(match: re.Match[str], now: datetime) -> datetime:
    return now.replace(hour=0, minute=0, second=0, microsecond=0)


def _resolve_tomorrow(match: re.Match[str], now: datetime) -> datetime:
    # Relative offsets keep now's time of day
    return now + timedelta(days=1)


def _resolve_next_week(match: re.Match[str], now: datetime) -> datetime:
    return now + timedelta(weeks=1)


def _weekday_resolver(weekday: int) -> DateResolver:
    def resolve(match: re.Match[str], now: datetime) -> datetime:
        days_ahead = (weekday - now.weekday()) % 7 or 7
        return _at_default_hour(now + timedelta(days=days_ahead))

    return resolve


# Priority order matters: "오늘" must win over weekday names, etc.
DATE_RULES: tuple[DateRule, ...] = (
    DateRule("month_day", re.compile(r"(\d+)월\s*(\d+)일"), _resolve_month_day),
    DateRule("today", re.compile("오늘"), _resolve_today),
    DateRule("tomorrow", re.compile("내일"), _resolve_tomorrow),
    DateRule("next_week", re.compile("다음주"), _resolve_next_week),
    *(
        DateRule(name, re.compile(name), _weekday_resolver(index))
        for index, name in enumerate(WEEKDAYS)
    ),
)

ACTION_WORDS = ("추가해줘", "등록해줘", "일정", "캘린더에", "에")

ATTENDEE_WORDS = ("우리 가족", "가족", "친구", "동료", "팀")

# (label, cues): each label is added at most once, in this order
ATTENDEE_CUES: tuple[tuple[str, tuple[str, ...]], ...] = (
    ("가족", ("우리 가족", "가족")),
    ("친구", ("친구",)),
    ("동료", ("동료", "팀")),
)

# "<place>에서", "<place>에", "<place>(으)로"; 로 only counts at the end of a word
LOCATION_PATTERNS = (
    re.compile(r"([가-힣]+)에서"),
    re.compile(r"([가-힣]+)에"),
    re.compile(r"([가-힣]+?)으?로(?![가-힣])"),
)

# Hidden before the location scan so "8일에" or "2시에" is never a place
LOCATION_MASKS = (
    *(rule.pattern for rule in DATE_RULES),
    re.compile(r"\d+\s*(?:년|월|일|주)"),
    re.compile(r"(?:오전|오후|아침|점심|저녁|새벽|밤)?\s*\d+\s*시(?:\s*\d+\s*분|\s*반)?"),
    re.compile(r"(?<![가-힣])(?:오전|오후|아침|점심|저녁|새벽|밤)(?=에|[^가-힣]|$)"),
    re.compile(r"캘린더에|추가해줘|등록해줘|일정"),
)

DURATION_RULES: tuple[tuple[tuple[str, ...], timedelta], ...] = (
    (("하루", "종일"), timedelta(hours=24)),
    (("반나절",), timedelta(hours=4)),
    (("2시간",), timedelta(hours=2)),
    (("3시간",), timedelta(hours=3)),
    (("4시간",), timedelta(hours=4)),
)


class CommandParser:
    """Parses Korean natural-language scheduling commands.

    Stateless apart from the timezone used when no ``now`` is supplied,
    so a single instance can be shared freely.
    """

    def __init__(self, timezone: str | None = None):
        """Initialize the parser.

        Args:
            timezone: IANA timezone name used for the default clock.
                     Defaults to settings.user_timezone.
        """
        self._tz_service = TimezoneService(timezone)

    @property
    def timezone(self) -> str:
        return self._tz_service.default_timezone

    def parse(self, text: str, now: datetime | None = None) -> ParsedCommand:
        """Parse a command into a ParsedCommand.

        Args:
            text: The natural-language command
            now: Reference time for relative dates. Defaults to the current
                 time in the configured timezone.

        Returns:
            ParsedCommand; never raises for unrecognised input
        """
        if now is None:
            now = self._tz_service.now()

        text_lower = text.lower()

        command = ParsedCommand(
            action=CommandAction.ADD,
            date=self.extract_date(text_lower, now),
            title=self.extract_title(text),
            description=None,
            attendees=self.extract_attendees(text_lower),
            location=self.extract_location(text_lower),
            duration=self.extract_duration(text_lower),
        )

        logger.debug(f"Parsed command {text!r} -> {command}")
        return command

    def extract_date(self, text: str, now: datetime) -> datetime | None:
        """Resolve the first matching date rule, or None."""
        for rule in DATE_RULES:
            resolved = rule.apply(text, now)
            if resolved is not None:
                return resolved
        return None

    def extract_title(self, text: str) -> str:
        """Strip date expressions and filler words from the original text."""
        title = text

        for rule in DATE_RULES:
            title = rule.pattern.sub("", title)

        for word in ACTION_WORDS:
            title = title.replace(word, "")

        for word in ATTENDEE_WORDS:
            title = title.replace(word, "")

        title = title.strip()
        return title or DEFAULT_TITLE

    def extract_attendees(self, text: str) -> tuple[str, ...]:
        return tuple(
            label
            for label, cues in ATTENDEE_CUES
            if any(cue in text for cue in cues)
        )

    def extract_location(self, text: str) -> str | None:
        """Find a place phrase followed by 에서/에/로."""
        masked = text
        for mask in LOCATION_MASKS:
            masked = mask.sub(" ", masked)

        for pattern in LOCATION_PATTERNS:
            match = pattern.search(masked)
            if match:
                return match.group(1)

        return None

    def extract_duration(self, text: str) -> timedelta:
        for keywords, duration in DURATION_RULES:
            if any(keyword in text for keyword in keywords):
                return duration
        return DEFAULT_DURATION


# Module-level singleton instance
_command_parser: CommandParser | None = None


def get_command_parser() -> CommandParser:
    """Get or create the global CommandParser instance."""
    global _command_parser
    if _command_parser is None:
        _command_parser = CommandParser()
    return _command_parser


def parse_command(text: str, now: datetime | None = None) -> ParsedCommand:
    """Parse a command using the global parser."""
    return get_command_parser().parse(text, now)
