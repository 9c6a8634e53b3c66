"""Schedule command services.

Parsing, preview rendering and the calendar write path. Imports are lazy so
that importing the package does not pull in every service module.
"""

from __future__ import annotations

from importlib import import_module
from typing import Any

_EXPORTS: dict[str, tuple[str, str]] = {
    # Command parser
    "CommandAction": ("iljeong.services.command_parser", "CommandAction"),
    "CommandParser": ("iljeong.services.command_parser", "CommandParser"),
    "ParsedCommand": ("iljeong.services.command_parser", "ParsedCommand"),
    "get_command_parser": ("iljeong.services.command_parser", "get_command_parser"),
    "parse_command": ("iljeong.services.command_parser", "parse_command"),
    # Calendar sink
    "AccessDeniedError": ("iljeong.services.calendar_sink", "AccessDeniedError"),
    "AccessStatus": ("iljeong.services.calendar_sink", "AccessStatus"),
    "CalendarError": ("iljeong.services.calendar_sink", "CalendarError"),
    "CalendarSink": ("iljeong.services.calendar_sink", "CalendarSink"),
    "CalendarStoreError": ("iljeong.services.calendar_sink", "CalendarStoreError"),
    "EventDraft": ("iljeong.services.calendar_sink", "EventDraft"),
    "InMemoryCalendarSink": ("iljeong.services.calendar_sink", "InMemoryCalendarSink"),
    "InvalidDateError": ("iljeong.services.calendar_sink", "InvalidDateError"),
    "SaveFailedError": ("iljeong.services.calendar_sink", "SaveFailedError"),
    "add_event_to_calendar": ("iljeong.services.calendar_sink", "add_event_to_calendar"),
    "request_calendar_access": ("iljeong.services.calendar_sink", "request_calendar_access"),
    # Command flow
    "CommandFlow": ("iljeong.services.command_flow", "CommandFlow"),
    "FlowState": ("iljeong.services.command_flow", "FlowState"),
    "FlowStatus": ("iljeong.services.command_flow", "FlowStatus"),
    # Preview
    "format_duration": ("iljeong.services.preview", "format_duration"),
    "format_event_date": ("iljeong.services.preview", "format_event_date"),
    "preview_rows": ("iljeong.services.preview", "preview_rows"),
    # Timezone
    "TimezoneService": ("iljeong.services.timezone", "TimezoneService"),
}

__all__ = list(_EXPORTS.keys())


def __getattr__(name: str) -> Any:
    if name not in _EXPORTS:
        raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
    module_name, attr_name = _EXPORTS[name]
    module = import_module(module_name)
    value = getattr(module, attr_name)
    globals()[name] = value
    return value


def __dir__() -> list[str]:
    return sorted(list(globals().keys()) + list(_EXPORTS.keys()))
