"""Calendar write path for parsed commands.

The calendar itself is an external system reached through a CalendarSink
passed in by the caller. Authorization state is read from that sink on every
write rather than kept globally.

Failures surface once as a CalendarError subclass carrying a one-line
message for the user; nothing here retries.
"""

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from itertools import count

from iljeong.sentry import add_breadcrumb, capture_exception
from iljeong.services.command_parser import DEFAULT_DURATION, ParsedCommand

logger = logging.getLogger(__name__)

ATTENDEES_LABEL = "참석자: "


class AccessStatus(str, Enum):
    AUTHORIZED = "authorized"
    NOT_DETERMINED = "not_determined"
    DENIED = "denied"
    RESTRICTED = "restricted"


class CalendarError(Exception):
    """Base class for errors reported by the calendar write path."""

    message = "캘린더 작업에 실패했습니다."

    def __str__(self) -> str:
        return self.message


class AccessDeniedError(CalendarError):
    message = "캘린더 접근 권한이 거부되었습니다."


class InvalidDateError(CalendarError):
    message = "유효하지 않은 날짜입니다."


class SaveFailedError(CalendarError):
    def __init__(self, reason: str):
        super().__init__(reason)
        self.reason = reason

    @property
    def message(self) -> str:
        return f"일정 저장에 실패했습니다: {self.reason}"


class CalendarStoreError(Exception):
    """Raised by sinks when the underlying store rejects a write."""


@dataclass
class EventDraft:
    """An event ready to be written to a calendar."""

    title: str
    start_time: datetime
    end_time: datetime
    notes: str | None = None
    location: str | None = None


def format_attendee_notes(notes: str | None, attendees: tuple[str, ...] | list[str]) -> str | None:
    """Append the attendee line to existing notes.

    Saved events depend on this exact layout: existing notes (or nothing),
    a newline, then "참석자: " and the labels joined by ", ".
    """
    if not attendees:
        return notes
    return (notes or "") + "\n" + ATTENDEES_LABEL + ", ".join(attendees)


def build_event_draft(command: ParsedCommand) -> EventDraft:
    """Turn a parsed command into an EventDraft.

    Raises:
        InvalidDateError: if the command has no date
    """
    if command.date is None:
        raise InvalidDateError()

    duration = command.duration or DEFAULT_DURATION
    return EventDraft(
        title=command.title,
        start_time=command.date,
        end_time=command.date + duration,
        notes=format_attendee_notes(command.description, command.attendees),
        location=command.location,
    )


class CalendarSink(ABC):
    """The external calendar an event is written to."""

    @abstractmethod
    def authorization_status(self) -> AccessStatus:
        """Current permission state, without prompting."""
        ...

    @abstractmethod
    async def request_access(self) -> bool:
        """Prompt for permission and wait for the answer."""
        ...

    @abstractmethod
    async def save_event(self, draft: EventDraft) -> str:
        """Write the event and return its identifier."""
        ...


async def request_calendar_access(sink: CalendarSink) -> bool:
    """Resolve calendar permission, prompting only when undecided."""
    status = sink.authorization_status()

    if status == AccessStatus.AUTHORIZED:
        return True
    if status == AccessStatus.NOT_DETERMINED:
        granted = await sink.request_access()
        logger.info(f"Calendar access prompt answered: granted={granted}")
        return granted
    return False


async def add_event_to_calendar(command: ParsedCommand, sink: CalendarSink) -> str:
    """Write a parsed command to the calendar.

    Args:
        command: The parsed command to save
        sink: Calendar to write to

    Returns:
        Identifier of the saved event

    Raises:
        AccessDeniedError: calendar permission was not granted
        InvalidDateError: the command has no date
        SaveFailedError: the calendar rejected the write
    """
    if not await request_calendar_access(sink):
        raise AccessDeniedError()

    draft = build_event_draft(command)
    add_breadcrumb(
        "Saving calendar event",
        category="calendar",
        data={"attendees": len(command.attendees), "has_location": bool(draft.location)},
    )

    try:
        event_id = await sink.save_event(draft)
    except Exception as e:
        logger.exception(f"Failed to save calendar event: {e}")
        capture_exception(e)
        raise SaveFailedError(str(e)) from e

    logger.info(f"Created calendar event: {event_id} - {draft.title}")
    return event_id


@dataclass
class InMemoryCalendarSink(CalendarSink):
    """Calendar sink that keeps events in memory, keyed by event id.

    Used for dry runs and tests. ``prompt_answer`` is what a NOT_DETERMINED
    prompt resolves to; ``save_error`` makes every save fail with that
    message.
    """

    status: AccessStatus = AccessStatus.AUTHORIZED
    prompt_answer: bool = True
    save_error: str | None = None
    events: dict[str, EventDraft] = field(default_factory=dict)
    prompts: int = 0
    _ids: count = field(default_factory=lambda: count(1), repr=False)

    def authorization_status(self) -> AccessStatus:
        return self.status

    async def request_access(self) -> bool:
        self.prompts += 1
        self.status = AccessStatus.AUTHORIZED if self.prompt_answer else AccessStatus.DENIED
        return self.prompt_answer

    async def save_event(self, draft: EventDraft) -> str:
        if self.save_error is not None:
            raise CalendarStoreError(self.save_error)

        event_id = f"local-{next(self._ids)}"
        self.events[event_id] = draft
        return event_id
