"""Tests for the SQLite migration and the session store."""
from __future__ import annotations

import sqlite3
from datetime import datetime, timezone

import pytest

from interview_session import InterviewSession, InterviewStatus, default_questions
from storage.interviews import SessionStore
from storage.migrate import migrate
from storage.recordings import RecordingStore
from storage.sqlite import get_conn


def _session(session_id: str = "interview_t1_1", **changes) -> InterviewSession:
    data = {
        "id": session_id,
        "subject_id": "t1",
        "status": InterviewStatus.STARTED,
        "questions": default_questions(),
        "started_at": datetime(2026, 1, 5, 9, 30, tzinfo=timezone.utc),
    }
    data.update(changes)
    return InterviewSession(**data)


def test_migrate_is_idempotent(tmp_db: str):
    migrate(tmp_db)
    migrate(tmp_db)
    with sqlite3.connect(tmp_db) as conn:
        tables = {row[0] for row in conn.execute("SELECT name FROM sqlite_master WHERE type='table'")}
    assert "interviews" in tables


def test_create_and_get_round_trip():
    store = SessionStore()
    store.create(_session())

    loaded = store.get("interview_t1_1")
    assert loaded is not None
    assert loaded.status is InterviewStatus.STARTED
    assert [q.id for q in loaded.questions] == [1, 2, 3, 4, 5]
    assert loaded.started_at == datetime(2026, 1, 5, 9, 30, tzinfo=timezone.utc)
    assert store.get("unknown") is None


def test_duplicate_id_is_rejected():
    store = SessionStore()
    store.create(_session())
    with pytest.raises(sqlite3.IntegrityError):
        store.create(_session())


def test_store_with_explicit_path(tmp_path):
    db_path = str(tmp_path / "other" / "sessions.db")
    migrate(db_path)
    store = SessionStore(db_path)
    store.create(_session())

    assert store.get("interview_t1_1") is not None
    assert SessionStore().get("interview_t1_1") is None


def test_failed_statement_rolls_back(tmp_db: str):
    with pytest.raises(sqlite3.OperationalError):
        with get_conn() as conn:
            conn.execute(
                "INSERT INTO interviews (id, subject_id, status, questions_json, started_at, updated_at) "
                "VALUES ('x', 't1', 'started', '[]', 'now', 'now')"
            )
            conn.execute("SELECT * FROM missing_table")

    with sqlite3.connect(tmp_db) as conn:
        assert conn.execute("SELECT COUNT(*) FROM interviews").fetchone()[0] == 0


def test_update_with_expected_status_is_conditional():
    store = SessionStore()
    original = _session()
    store.create(original)
    processing = _session(
        status=InterviewStatus.PROCESSING,
        completed_at=datetime(2026, 1, 5, 9, 45, tzinfo=timezone.utc),
    )

    assert store.update(processing, expected_status=InterviewStatus.STARTED) is True
    # Second writer read the record as started too; its write must not land.
    assert store.update(processing, expected_status=InterviewStatus.STARTED) is False
    assert store.get(original.id).status is InterviewStatus.PROCESSING


def test_done_payload_is_persisted():
    store = SessionStore()
    store.create(_session())
    done = _session(
        status=InterviewStatus.DONE,
        completed_at=datetime(2026, 1, 5, 9, 45, tzinfo=timezone.utc),
        transcript="hello there",
        score=74,
        breakdown={"length": 14, "keywords": 20},
        score_explanation="ok",
        suggestions=["speak up"],
    )
    assert store.update(done) is True

    loaded = store.get(done.id)
    assert loaded.score == 74
    assert loaded.breakdown == {"length": 14, "keywords": 20}
    assert loaded.suggestions == ["speak up"]
    assert loaded.error_message is None


def test_list_filters_by_status():
    store = SessionStore()
    store.create(_session("a"))
    store.create(
        _session(
            "b",
            status=InterviewStatus.FAILED,
            completed_at=datetime(2026, 1, 5, 10, 0, tzinfo=timezone.utc),
            error_message="provider down",
        )
    )

    assert {s.id for s in store.list()} == {"a", "b"}
    assert [s.id for s in store.list(status=InterviewStatus.FAILED)] == ["b"]
    assert len(store.list(limit=1)) == 1


def test_recording_store_round_trip(tmp_path):
    recordings = RecordingStore(tmp_path)
    ref = recordings.save("interview_t1_1", b"\x1a\x45\xdf\xa3", "video/webm")
    assert ref == "interview_t1_1/recording.webm"
    assert recordings.load(ref) == b"\x1a\x45\xdf\xa3"

    with pytest.raises(FileNotFoundError):
        recordings.load("interview_missing/recording.webm")
    with pytest.raises(ValueError):
        recordings.save("../escape", b"x", "video/webm")


def test_update_limited_to_fields_keeps_other_columns():
    store = SessionStore()
    store.create(_session())
    store.update(_session(recording_ref="interview_t1_1/recording.webm", media_type="video/webm"))

    processing = _session(
        status=InterviewStatus.PROCESSING,
        completed_at=datetime(2026, 1, 5, 9, 45, tzinfo=timezone.utc),
    )
    assert store.update(processing, expected_status=InterviewStatus.STARTED, fields=("status", "completed_at"))

    loaded = store.get("interview_t1_1")
    assert loaded.status is InterviewStatus.PROCESSING
    assert loaded.recording_ref == "interview_t1_1/recording.webm"
    assert loaded.media_type == "video/webm"


def test_update_rejects_unknown_fields():
    store = SessionStore()
    store.create(_session())
    with pytest.raises(ValueError):
        store.update(_session(), fields=("nickname",))
