"""Tests for the calendar write path.

Tests cover:
- Access resolution (authorized / prompt / denied / restricted)
- Error ordering: access first, then date
- Attendee notes layout
- Save failures surfaced verbatim
"""

from datetime import datetime, timedelta
from unittest.mock import AsyncMock, MagicMock, patch
from zoneinfo import ZoneInfo

import pytest

from iljeong.services.calendar_sink import (
    AccessDeniedError,
    AccessStatus,
    CalendarError,
    CalendarSink,
    CalendarStoreError,
    EventDraft,
    InMemoryCalendarSink,
    InvalidDateError,
    SaveFailedError,
    add_event_to_calendar,
    build_event_draft,
    format_attendee_notes,
    request_calendar_access,
)
from iljeong.services.command_parser import CommandParser, ParsedCommand

SEOUL = ZoneInfo("Asia/Seoul")
NOW = datetime(2026, 10, 19, 15, 30, tzinfo=SEOUL)


def _command(**overrides) -> ParsedCommand:
    values = {
        "title": "가족 모임",
        "date": datetime(2026, 8, 8, 10, 0, tzinfo=SEOUL),
        "attendees": ("가족",),
    }
    values.update(overrides)
    return ParsedCommand(**values)


class TestCalendarErrors:
    """Test user-facing error messages."""

    def test_access_denied_message(self):
        assert str(AccessDeniedError()) == "캘린더 접근 권한이 거부되었습니다."

    def test_invalid_date_message(self):
        assert str(InvalidDateError()) == "유효하지 않은 날짜입니다."

    def test_save_failed_keeps_reason(self):
        error = SaveFailedError("disk full")
        assert error.reason == "disk full"
        assert str(error) == "일정 저장에 실패했습니다: disk full"

    def test_all_are_calendar_errors(self):
        for error in (AccessDeniedError(), InvalidDateError(), SaveFailedError("x")):
            assert isinstance(error, CalendarError)


class TestAttendeeNotes:
    """Test the notes layout saved events depend on."""

    def test_no_attendees_leaves_notes(self):
        assert format_attendee_notes(None, ()) is None
        assert format_attendee_notes("메모", []) == "메모"

    def test_attendees_without_notes(self):
        assert format_attendee_notes(None, ("가족",)) == "\n참석자: 가족"

    def test_attendees_after_existing_notes(self):
        result = format_attendee_notes("준비물 챙기기", ("가족", "친구"))
        assert result == "준비물 챙기기\n참석자: 가족, 친구"

    def test_duplicates_kept(self):
        assert format_attendee_notes(None, ["동료", "동료"]) == "\n참석자: 동료, 동료"


class TestBuildEventDraft:
    """Test ParsedCommand -> EventDraft conversion."""

    def test_builds_draft(self):
        command = _command(location="강남역", duration=timedelta(hours=2))
        draft = build_event_draft(command)

        assert draft.title == "가족 모임"
        assert draft.start_time == datetime(2026, 8, 8, 10, 0, tzinfo=SEOUL)
        assert draft.end_time == datetime(2026, 8, 8, 12, 0, tzinfo=SEOUL)
        assert draft.location == "강남역"
        assert draft.notes == "\n참석자: 가족"

    def test_missing_date_raises(self):
        with pytest.raises(InvalidDateError):
            build_event_draft(_command(date=None))

    def test_description_precedes_attendees(self):
        draft = build_event_draft(_command(description="생일"))
        assert draft.notes == "생일\n참석자: 가족"


class TestRequestCalendarAccess:
    """Test tri-state access resolution."""

    @pytest.mark.asyncio
    async def test_authorized(self):
        sink = InMemoryCalendarSink(status=AccessStatus.AUTHORIZED)
        assert await request_calendar_access(sink) is True
        assert sink.prompts == 0

    @pytest.mark.asyncio
    async def test_not_determined_prompts_and_grants(self):
        sink = InMemoryCalendarSink(status=AccessStatus.NOT_DETERMINED, prompt_answer=True)
        assert await request_calendar_access(sink) is True
        assert sink.prompts == 1
        assert sink.status == AccessStatus.AUTHORIZED

    @pytest.mark.asyncio
    async def test_not_determined_prompts_and_refuses(self):
        sink = InMemoryCalendarSink(status=AccessStatus.NOT_DETERMINED, prompt_answer=False)
        assert await request_calendar_access(sink) is False
        assert sink.status == AccessStatus.DENIED

    @pytest.mark.asyncio
    @pytest.mark.parametrize("status", [AccessStatus.DENIED, AccessStatus.RESTRICTED])
    async def test_denied_or_restricted_never_prompts(self, status):
        sink = InMemoryCalendarSink(status=status)
        assert await request_calendar_access(sink) is False
        assert sink.prompts == 0


class TestAddEventToCalendar:
    """Test add_event_to_calendar."""

    @pytest.mark.asyncio
    async def test_success(self):
        sink = InMemoryCalendarSink()
        event_id = await add_event_to_calendar(_command(), sink)

        assert event_id == "local-1"
        draft = sink.events[event_id]
        assert draft.title == "가족 모임"
        assert draft.end_time - draft.start_time == timedelta(hours=1)
        assert draft.notes == "\n참석자: 가족"

    @pytest.mark.asyncio
    async def test_event_ids_increment(self):
        sink = InMemoryCalendarSink()
        first = await add_event_to_calendar(_command(), sink)
        second = await add_event_to_calendar(_command(), sink)
        assert (first, second) == ("local-1", "local-2")

    @pytest.mark.asyncio
    async def test_access_denied(self):
        sink = InMemoryCalendarSink(status=AccessStatus.DENIED)
        with pytest.raises(AccessDeniedError):
            await add_event_to_calendar(_command(), sink)
        assert sink.events == {}

    @pytest.mark.asyncio
    async def test_access_checked_before_date(self):
        sink = InMemoryCalendarSink(status=AccessStatus.DENIED)
        with pytest.raises(AccessDeniedError):
            await add_event_to_calendar(_command(date=None), sink)

    @pytest.mark.asyncio
    async def test_prompt_refused(self):
        sink = InMemoryCalendarSink(status=AccessStatus.NOT_DETERMINED, prompt_answer=False)
        with pytest.raises(AccessDeniedError):
            await add_event_to_calendar(_command(), sink)

    @pytest.mark.asyncio
    async def test_invalid_date(self):
        sink = InMemoryCalendarSink()
        with pytest.raises(InvalidDateError):
            await add_event_to_calendar(_command(date=None), sink)
        assert sink.events == {}

    @pytest.mark.asyncio
    async def test_unparseable_command_fails_with_invalid_date(self):
        command = CommandParser(timezone="Asia/Seoul").parse("친구와 만나기", now=NOW)
        with pytest.raises(InvalidDateError):
            await add_event_to_calendar(command, InMemoryCalendarSink())

    @pytest.mark.asyncio
    async def test_save_failure_reason_verbatim(self):
        sink = InMemoryCalendarSink(save_error="calendar is read-only")
        with pytest.raises(SaveFailedError) as exc_info:
            await add_event_to_calendar(_command(), sink)

        assert exc_info.value.reason == "calendar is read-only"
        assert isinstance(exc_info.value.__cause__, CalendarStoreError)

    @pytest.mark.asyncio
    async def test_save_not_retried(self):
        sink = MagicMock(spec=CalendarSink)
        sink.authorization_status.return_value = AccessStatus.AUTHORIZED
        sink.save_event = AsyncMock(side_effect=OSError("network down"))

        with pytest.raises(SaveFailedError) as exc_info:
            await add_event_to_calendar(_command(), sink)

        assert exc_info.value.reason == "network down"
        sink.save_event.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_save_failure_reported_to_sentry(self):
        sink = InMemoryCalendarSink(save_error="quota exceeded")

        with patch("iljeong.services.calendar_sink.capture_exception") as mock_capture:
            with pytest.raises(SaveFailedError):
                await add_event_to_calendar(_command(), sink)

        reported = mock_capture.call_args[0][0]
        assert isinstance(reported, CalendarStoreError)
        assert str(reported) == "quota exceeded"

    @pytest.mark.asyncio
    async def test_user_errors_not_reported_to_sentry(self):
        with patch("iljeong.services.calendar_sink.capture_exception") as mock_capture:
            with pytest.raises(InvalidDateError):
                await add_event_to_calendar(ParsedCommand(title="회의"), InMemoryCalendarSink())

        mock_capture.assert_not_called()

    @pytest.mark.asyncio
    async def test_sink_receives_event_draft(self):
        sink = MagicMock(spec=CalendarSink)
        sink.authorization_status.return_value = AccessStatus.AUTHORIZED
        sink.save_event = AsyncMock(return_value="evt-9")

        event_id = await add_event_to_calendar(_command(location="카페"), sink)

        assert event_id == "evt-9"
        draft = sink.save_event.call_args[0][0]
        assert isinstance(draft, EventDraft)
        assert draft.location == "카페"
