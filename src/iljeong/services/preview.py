"""Read-only rendering of a ParsedCommand for confirmation before saving."""

from datetime import datetime, timedelta

from iljeong.services.command_parser import WEEKDAYS, ParsedCommand


def _format_time(dt: datetime) -> str:
    period = "오전" if dt.hour < 12 else "오후"
    hour = dt.hour % 12 or 12
    return f"{period} {hour}:{dt.minute:02d}"


def format_event_date(dt: datetime, full: bool = False) -> str:
    """Format a date the way Korean calendars display it.

    Examples:
        medium: "2026. 8. 8. 오전 10:00"
        full:   "2026년 8월 8일 토요일 오전 10:00"
    """
    if full:
        date_str = f"{dt.year}년 {dt.month}월 {dt.day}일 {WEEKDAYS[dt.weekday()]}"
    else:
        date_str = f"{dt.year}. {dt.month}. {dt.day}."
    return f"{date_str} {_format_time(dt)}"


def format_duration(duration: timedelta) -> str:
    """Whole days from 24h up, whole hours from 1h up, minutes below."""
    total_seconds = int(duration.total_seconds())
    hours = total_seconds // 3600
    if hours >= 24:
        return f"{hours // 24}일"
    if hours > 0:
        return f"{hours}시간"
    return f"{total_seconds // 60}분"


def preview_rows(command: ParsedCommand, full: bool = False) -> list[tuple[str, str]]:
    """Labelled rows describing the command; absent fields are skipped."""
    rows = [("제목", command.title)]

    if command.date is not None:
        rows.append(("날짜", format_event_date(command.date, full=full)))
    if command.attendees:
        rows.append(("참석자", ", ".join(command.attendees)))
    if command.location:
        rows.append(("장소", command.location))
    if command.duration:
        rows.append(("지속시간", format_duration(command.duration)))
    if command.description:
        rows.append(("설명", command.description))

    return rows


def format_preview(command: ParsedCommand, full: bool = False) -> str:
    """Render preview rows as "label: value" lines."""
    return "\n".join(f"{label}: {value}" for label, value in preview_rows(command, full=full))
