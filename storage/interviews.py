"""SQLite-backed store holding one record per interview session."""
from __future__ import annotations

import datetime as dt
import json
import sqlite3
from typing import Any, Dict, Iterable, List, Optional

from interview_session.models import InterviewSession, InterviewStatus

from .sqlite import get_conn

_COLUMNS = (
    "id",
    "subject_id",
    "status",
    "questions_json",
    "started_at",
    "completed_at",
    "recording_ref",
    "media_type",
    "transcript",
    "score",
    "breakdown_json",
    "score_explanation",
    "suggestions_json",
    "error_message",
)


_FIELD_COLUMNS = {
    "questions": "questions_json",
    "breakdown": "breakdown_json",
    "suggestions": "suggestions_json",
}

def _dump_json(value: Any) -> Optional[str]:
    return None if value is None else json.dumps(value)


def _load_json(value: Optional[str]) -> Any:
    return None if value is None else json.loads(value)


def _to_row(session: InterviewSession) -> Dict[str, Any]:
    data = session.model_dump(mode="json")
    return {
        "id": data["id"],
        "subject_id": data["subject_id"],
        "status": data["status"],
        "questions_json": json.dumps(data["questions"]),
        "started_at": data["started_at"],
        "completed_at": data["completed_at"],
        "recording_ref": data["recording_ref"],
        "media_type": data["media_type"],
        "transcript": data["transcript"],
        "score": data["score"],
        "breakdown_json": _dump_json(data["breakdown"]),
        "score_explanation": data["score_explanation"],
        "suggestions_json": _dump_json(data["suggestions"]),
        "error_message": data["error_message"],
    }


def _from_row(row: sqlite3.Row) -> InterviewSession:
    return InterviewSession(
        id=row["id"],
        subject_id=row["subject_id"],
        status=row["status"],
        questions=json.loads(row["questions_json"]),
        started_at=row["started_at"],
        completed_at=row["completed_at"],
        recording_ref=row["recording_ref"],
        media_type=row["media_type"],
        transcript=row["transcript"],
        score=row["score"],
        breakdown=_load_json(row["breakdown_json"]),
        score_explanation=row["score_explanation"],
        suggestions=_load_json(row["suggestions_json"]),
        error_message=row["error_message"],
    )


def _now() -> str:
    return dt.datetime.now(dt.timezone.utc).isoformat()


class SessionStore:
    """Keyed document store with last-write-wins whole-record updates.

    ``update`` optionally takes the status the caller read the record in;
    the write only lands if the stored status still matches, which turns
    concurrent transitions out of the same state into a single winner.
    """

    def __init__(self, db_path: Optional[str] = None) -> None:
        self._db_path = db_path

    def create(self, session: InterviewSession) -> None:
        row = _to_row(session)
        row["updated_at"] = _now()
        names = ", ".join(row)
        marks = ", ".join("?" for _ in row)
        with get_conn(self._db_path) as conn:
            conn.execute(f"INSERT INTO interviews ({names}) VALUES ({marks})", tuple(row.values()))

    def get(self, session_id: str) -> Optional[InterviewSession]:
        with get_conn(self._db_path) as conn:
            row = conn.execute(
                f"SELECT {', '.join(_COLUMNS)} FROM interviews WHERE id = ?",
                (session_id,),
            ).fetchone()
        return _from_row(row) if row is not None else None

    def update(
        self,
        session: InterviewSession,
        *,
        expected_status: Optional[InterviewStatus] = None,
        fields: Optional[Iterable[str]] = None,
    ) -> bool:
        """Write the record; return False when nothing was written.

        ``fields`` limits the write to those model fields, leaving columns
        written by other transitions untouched.
        """

        row = _to_row(session)
        session_id = row.pop("id")
        if fields is not None:
            wanted = {_FIELD_COLUMNS.get(name, name) for name in fields}
            unknown = wanted.difference(row)
            if unknown:
                raise ValueError(f"Unknown session fields: {sorted(unknown)}")
            row = {name: value for name, value in row.items() if name in wanted}
        row["updated_at"] = _now()
        assignments = ", ".join(f"{name} = ?" for name in row)
        params: List[Any] = list(row.values())
        sql = f"UPDATE interviews SET {assignments} WHERE id = ?"
        params.append(session_id)
        if expected_status is not None:
            sql += " AND status = ?"
            params.append(InterviewStatus(expected_status).value)
        with get_conn(self._db_path) as conn:
            cur = conn.execute(sql, tuple(params))
            return cur.rowcount == 1

    def list(
        self,
        *,
        status: Optional[InterviewStatus] = None,
        limit: Optional[int] = None,
    ) -> List[InterviewSession]:
        sql = f"SELECT {', '.join(_COLUMNS)} FROM interviews"
        params: List[Any] = []
        if status is not None:
            sql += " WHERE status = ?"
            params.append(InterviewStatus(status).value)
        sql += " ORDER BY started_at DESC, id DESC"
        if limit is not None:
            sql += " LIMIT ?"
            params.append(int(limit))
        with get_conn(self._db_path) as conn:
            rows = conn.execute(sql, tuple(params)).fetchall()
        return [_from_row(row) for row in rows]


__all__ = ["SessionStore"]
