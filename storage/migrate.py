"""SQLite schema migrations."""
from __future__ import annotations

from typing import Iterable, Optional

from config.settings import settings

from .sqlite import get_conn

SCHEMA: Iterable[str] = [
    """
CREATE TABLE IF NOT EXISTS interviews (
  id TEXT PRIMARY KEY,
  subject_id TEXT NOT NULL,
  status TEXT NOT NULL,
  questions_json TEXT NOT NULL,
  started_at TEXT NOT NULL,
  completed_at TEXT,
  recording_ref TEXT,
  media_type TEXT,
  transcript TEXT,
  score INTEGER,
  breakdown_json TEXT,
  score_explanation TEXT,
  suggestions_json TEXT,
  error_message TEXT,
  updated_at TEXT NOT NULL
);
""",
    """
CREATE INDEX IF NOT EXISTS idx_interviews_status ON interviews (status);
""",
]


def migrate(db_path: Optional[str] = None) -> None:
    """Apply schema migrations to the SQLite database."""

    with get_conn(db_path or settings.DB_PATH) as conn:
        for stmt in SCHEMA:
            conn.execute(stmt)


if __name__ == "__main__":
    migrate()
