"""Preview-then-save flow for a single scheduling command.

Holds the state a front end needs (parsed command, saving, success, error)
as explicit values returned from each step, instead of observable fields.
"""

import logging
from dataclasses import dataclass, replace
from datetime import datetime
from enum import Enum

from iljeong.services.calendar_sink import CalendarError, CalendarSink, add_event_to_calendar
from iljeong.services.command_parser import CommandParser, ParsedCommand, get_command_parser

logger = logging.getLogger(__name__)

EXAMPLE_COMMANDS = (
    "8월 8일에 우리 가족과 만나는 일정을 캘린더에 추가해줘",
    "내일 오후 2시에 친구와 만나기",
    "다음주 월요일에 팀 미팅",
    "오늘 저녁 7시에 가족과 저녁 식사",
    "토요일 오후에 영화 보기",
)

SUCCESS_MESSAGE = "캘린더에 성공적으로 추가되었습니다!"


class FlowStatus(str, Enum):
    IDLE = "idle"
    PARSED = "parsed"
    SAVING = "saving"
    SUCCESS = "success"
    ERROR = "error"


@dataclass(frozen=True)
class FlowState:
    status: FlowStatus = FlowStatus.IDLE
    command: ParsedCommand | None = None
    message: str | None = None
    event_id: str | None = None

    @property
    def can_submit(self) -> bool:
        return self.command is not None and self.status != FlowStatus.SAVING


class CommandFlow:
    """Parses a command for preview and saves it on request.

    Each submit is a single attempt; failures become an ERROR state with
    the user-facing message and are not retried.
    """

    def __init__(self, sink: CalendarSink, parser: CommandParser | None = None):
        self._sink = sink
        self._parser = parser or get_command_parser()
        self._state = FlowState()

    @property
    def state(self) -> FlowState:
        return self._state

    def preview(self, text: str, now: datetime | None = None) -> FlowState:
        if not text.strip():
            return self._state

        command = self._parser.parse(text, now)
        self._state = FlowState(status=FlowStatus.PARSED, command=command)
        return self._state

    async def submit(self) -> FlowState:
        if not self._state.can_submit:
            return self._state

        command = self._state.command
        self._state = replace(self._state, status=FlowStatus.SAVING, message=None)

        try:
            event_id = await add_event_to_calendar(command, self._sink)
        except CalendarError as e:
            logger.info(f"Calendar write rejected: {e}")
            self._state = replace(self._state, status=FlowStatus.ERROR, message=str(e))
            return self._state

        self._state = FlowState(
            status=FlowStatus.SUCCESS,
            message=SUCCESS_MESSAGE,
            event_id=event_id,
        )
        return self._state

    def reset(self) -> FlowState:
        self._state = FlowState()
        return self._state
