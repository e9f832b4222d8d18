"""Lightweight CLI helpers for inspecting interview session records."""
from __future__ import annotations

import argparse
import json
from typing import Optional

from config.settings import settings
from interview_session import InterviewStatus, session_view
from storage.interviews import SessionStore
from storage.migrate import migrate


def list_sessions(limit: int = 20, status: Optional[str] = None) -> None:
    store = SessionStore()
    wanted = InterviewStatus(status) if status else None
    for session in store.list(status=wanted, limit=limit):
        score = f" score={session.score}" if session.score is not None else ""
        error = f" error={session.error_message}" if session.error_message else ""
        print(f"[{session.started_at.isoformat()}] {session.id} subject={session.subject_id} status={session.status.value}{score}{error}")


def show_session(session_id: str) -> int:
    session = SessionStore().get(session_id)
    if session is None:
        print(f"interview not found: {session_id}")
        return 1
    print(json.dumps(session_view(session), indent=2, ensure_ascii=False))
    return 0


def main(argv: Optional[list[str]] = None) -> int:
    parser = argparse.ArgumentParser(prog="interview-admin")
    parser.add_argument("--db", help=f"SQLite path (default: {settings.DB_PATH})")
    parser.add_argument("--list", type=int, metavar="N", help="Show the latest N interviews")
    parser.add_argument(
        "--status",
        choices=[status.value for status in InterviewStatus],
        help="Only list interviews in this status",
    )
    parser.add_argument("--show", metavar="ID", help="Print one interview record")
    args = parser.parse_args(argv)

    if args.db:
        settings.DB_PATH = args.db
    migrate(settings.DB_PATH)

    code = 0
    if args.list:
        list_sessions(args.list, args.status)
    if args.show:
        code = show_session(args.show)
    return code


if __name__ == "__main__":
    raise SystemExit(main())
