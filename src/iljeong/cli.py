import argparse
import asyncio
import logging
import sys
from datetime import datetime

from iljeong.config import settings
from iljeong.sentry import flush as sentry_flush
from iljeong.sentry import init_sentry, is_enabled
from iljeong.services.calendar_sink import CalendarSink, InMemoryCalendarSink
from iljeong.services.command_flow import EXAMPLE_COMMANDS, CommandFlow, FlowStatus
from iljeong.services.command_parser import CommandParser
from iljeong.services.preview import format_preview


def setup_logging() -> None:
    logging.basicConfig(
        level=getattr(logging, settings.log_level.upper(), logging.INFO),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )


def _parse_now(value: str | None) -> datetime | None:
    if value is None:
        return None
    try:
        return datetime.fromisoformat(value)
    except ValueError:
        print(f"Error: --now must be an ISO 8601 timestamp, got {value!r}")
        sys.exit(2)


def parse_text(text: str, now: datetime | None = None) -> None:
    command = CommandParser().parse(text, now)
    print(format_preview(command, full=True))
    if command.date is None:
        print("\n날짜를 찾을 수 없습니다. 날짜를 포함해 다시 입력해 주세요.")


def show_examples() -> None:
    parser = CommandParser()
    for text in EXAMPLE_COMMANDS:
        print(f"> {text}")
        print(format_preview(parser.parse(text)))
        print()


def _build_sink(dry_run: bool) -> CalendarSink:
    if dry_run:
        return InMemoryCalendarSink()

    from iljeong.google import GoogleCalendarSink

    return GoogleCalendarSink()


async def add_text(text: str, dry_run: bool = False) -> bool:
    flow = CommandFlow(_build_sink(dry_run))

    state = flow.preview(text)
    if state.command is None:
        print("Error: empty command")
        return False

    print(format_preview(state.command, full=True))
    print()

    state = await flow.submit()
    print(state.message)
    if state.status == FlowStatus.SUCCESS and dry_run:
        print(f"(dry run, event {state.event_id} not sent to Google Calendar)")
    return state.status == FlowStatus.SUCCESS


def check_config() -> None:
    print("iljeong Configuration Check\n")

    from iljeong.google.auth import google_auth

    checks = [
        ("User timezone", bool(settings.user_timezone)),
        ("Google client secrets", settings.has_google),
        ("Google token", google_auth.is_authenticated() or google_auth.load_saved_credentials()),
        ("Sentry DSN", settings.has_sentry),
    ]

    for name, configured in checks:
        status = "OK" if configured else "MISSING"
        symbol = "+" if configured else "-"
        print(f"  [{symbol}] {name}: {status}")

    print()
    print(f"Timezone: {settings.user_timezone}")
    print(f"Calendar: {settings.google_calendar_id}")
    print(f"Error tracking: {'enabled' if is_enabled() else 'disabled'}")


def main() -> None:
    parser = argparse.ArgumentParser(description="Add Korean natural-language schedules to a calendar")
    subparsers = parser.add_subparsers(dest="command", help="Commands")

    parse_parser = subparsers.add_parser("parse", help="Show how a command is understood")
    parse_parser.add_argument("text", help="Natural-language command")
    parse_parser.add_argument("--now", help="Reference time (ISO 8601)")

    add_parser = subparsers.add_parser("add", help="Parse a command and add it to the calendar")
    add_parser.add_argument("text", help="Natural-language command")
    add_parser.add_argument("--dry-run", action="store_true", help="Do not write to Google Calendar")

    subparsers.add_parser("examples", help="Show example commands")
    subparsers.add_parser("check", help="Check configuration")

    args = parser.parse_args()

    setup_logging()

    # Initialize Sentry for error tracking (disabled if no DSN configured)
    init_sentry(
        dsn=settings.sentry_dsn if settings.has_sentry else None,
        environment=settings.sentry_environment,
    )

    try:
        if args.command == "parse":
            parse_text(args.text, _parse_now(args.now))
        elif args.command == "add":
            if not asyncio.run(add_text(args.text, dry_run=args.dry_run)):
                sys.exit(1)
        elif args.command == "examples":
            show_examples()
        elif args.command == "check":
            check_config()
        else:
            parser.print_help()
    finally:
        # Flush any pending Sentry events before exit
        sentry_flush(timeout=2.0)


if __name__ == "__main__":
    main()
