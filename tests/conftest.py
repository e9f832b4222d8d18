import os
import sys
import tempfile
from pathlib import Path

import pytest

os.environ.setdefault("ENABLE_FILE_LOGS", "0")

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from config.registry import clear_models
from config.settings import settings
from interview_evaluation import EvaluationResult
from storage.migrate import migrate


@pytest.fixture(autouse=True)
def tmp_db(monkeypatch):
    td = tempfile.TemporaryDirectory()
    db_path = os.path.join(td.name, "test.db")
    monkeypatch.setattr(settings, "DB_PATH", db_path, raising=False)
    monkeypatch.setattr(settings, "RECORDINGS_DIR", os.path.join(td.name, "recordings"), raising=False)
    monkeypatch.setattr(settings, "RESUME_PROCESSING_ON_STARTUP", False, raising=False)
    migrate(db_path)
    clear_models()
    try:
        yield db_path
    finally:
        clear_models()
        td.cleanup()


def _make_result(score: int = 82) -> EvaluationResult:
    return EvaluationResult(
        transcript="I work as a nurse and I'm moving closer to the hospital.",
        score=score,
        score_explanation="Clear and complete answers.",
        breakdown={
            "length": 16,
            "keywords": 18,
            "language": 20,
            "sentiment": 16,
            "completeness": 12,
        },
        suggestions=["Mention your move-in date explicitly."],
    )


@pytest.fixture
def result_factory():
    return _make_result


@pytest.fixture
def good_result() -> EvaluationResult:
    return _make_result()


@pytest.fixture
def fake_evaluator(good_result):
    calls = []

    def _evaluate(recording, media_type, **kwargs):
        calls.append({"recording": recording, "media_type": media_type, **kwargs})
        return good_result

    _evaluate.calls = calls
    return _evaluate
