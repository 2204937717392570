"""Command line entry point."""

import argparse
import asyncio
import json
import logging
import sys
from typing import Callable, List, Optional, TextIO

from .application.dto import RunTurnDTO
from .config import Container, Settings, get_settings
from .domain.exceptions import GrowCoachException
from .monitoring import HealthCheckService, setup_logging

logger = logging.getLogger(__name__)

QUIT_COMMANDS = {"/quit", "/exit"}


def build_parser() -> argparse.ArgumentParser:
    """Build the argument parser."""
    parser = argparse.ArgumentParser(prog="growcoach", description="GROW coaching sessions")
    parser.add_argument("--log-level", default=None, help="override GROWCOACH_LOG_LEVEL")
    subparsers = parser.add_subparsers(dest="command", required=True)

    chat = subparsers.add_parser("chat", help="interactive coaching session")
    chat.add_argument("--user", required=True, help="user id")
    chat.add_argument("--session", default=None, help="resume an existing session")
    chat.add_argument("--coach", default=None, help="coach type (akito, kanon, naruka)")

    face_sheet = subparsers.add_parser("face-sheet", help="import a face sheet JSON file")
    face_sheet.add_argument("--user", required=True, help="user id")
    face_sheet.add_argument("--file", required=True, help="path to the JSON file")

    health = subparsers.add_parser("health", help="print the health report")
    health.add_argument("--skip-ai", action="store_true", help="do not call the AI provider")

    return parser


async def run_chat(
    container: Container,
    user_id: str,
    session_id: Optional[str] = None,
    coach_type: Optional[str] = None,
    read_line: Optional[Callable[[str], str]] = None,
    out: TextIO = sys.stdout
) -> str:
    """Interactive loop; returns the session id."""
    read_line = read_line or input

    if session_id is None:
        created = await container.get("create_session").execute(user_id, coach_type)
        session_id = created.session_id
        print(f"Session {session_id} ({created.coach_type}, stage {created.stage})", file=out)
    else:
        history = await container.get("get_history").execute(user_id, session_id)
        print(f"Resuming {session_id} ({history.coach_type}, stage {history.stage})", file=out)
        for message in history.messages:
            print(f"{message['role']}: {message['content']}", file=out)

    run_turn = container.get("run_turn")
    while True:
        try:
            line = await asyncio.to_thread(read_line, "you> ")
        except EOFError:
            break

        text = line.strip()
        if not text:
            continue
        if text in QUIT_COMMANDS:
            break

        try:
            result = await run_turn.execute(
                RunTurnDTO(
                    user_id=user_id,
                    session_id=session_id,
                    user_text=text,
                    coach_type=coach_type
                )
            )
        except GrowCoachException as e:
            print(f"! {e.code}: {e.message}", file=out)
            continue

        print(f"coach [{result.stage}]> {result.message}", file=out)

    return session_id


async def import_face_sheet(container: Container, user_id: str, file_path: str, out: TextIO = sys.stdout) -> None:
    """Load a face sheet from a JSON file and save it."""
    with open(file_path, encoding="utf-8") as handle:
        payload = json.load(handle)

    result = await container.get("put_face_sheet").execute(user_id, payload)
    print(json.dumps(result.to_dict(), ensure_ascii=False, indent=2), file=out)


async def print_health(container: Container, include_ai: bool = True, out: TextIO = sys.stdout) -> bool:
    """Print the health report; returns True when healthy."""
    health = await HealthCheckService(container).get_health_status(include_ai=include_ai)
    print(json.dumps(health, indent=2), file=out)
    return health["status"] == "healthy"


async def _run(args: argparse.Namespace, settings: Settings) -> int:
    container = Container(settings)
    await container.initialize()

    try:
        if args.command == "chat":
            await run_chat(container, args.user, args.session, args.coach)
        elif args.command == "face-sheet":
            await import_face_sheet(container, args.user, args.file)
        elif args.command == "health":
            healthy = await print_health(container, include_ai=not args.skip_ai)
            return 0 if healthy else 1
        return 0
    except GrowCoachException as e:
        logger.error(f"{args.command} failed: {e}")
        print(f"error: {e.message}", file=sys.stderr)
        return 1
    finally:
        await container.close()


def main(argv: Optional[List[str]] = None) -> int:
    """Console script entry point."""
    args = build_parser().parse_args(argv)
    settings = get_settings()
    setup_logging(args.log_level or settings.log_level, json_format=settings.log_json)

    try:
        return asyncio.run(_run(args, settings))
    except KeyboardInterrupt:
        return 130


if __name__ == "__main__":
    sys.exit(main())
