import pytest
from fastapi.testclient import TestClient

from api_server import create_app
from config.registry import EVALUATOR_KEY, bind_model
from interview_client import InterviewApiClient, StatusPoller
from interview_evaluation import ProviderUnavailableError
from jobs import NO_RECORDING_MESSAGE
from services import build_services


def _run_interview(client, subject_id="t1", recording=b"webm-bytes"):
    start = client.post("/interviews/start", json={"subject_id": subject_id})
    assert start.status_code == 201
    sid = start.json()["interview_id"]
    assert client.get(f"/interviews/{sid}/status").json() == {"status": "started"}

    if recording is not None:
        upload = client.post(
            f"/interviews/{sid}/recording",
            files={"video": ("interview.webm", recording, "video/webm")},
        )
        assert upload.status_code == 200

    complete = client.post(f"/interviews/{sid}/complete")
    assert complete.status_code == 200
    assert complete.json() == {"status": "processing"}
    return sid


def test_full_flow_reaches_done(fake_evaluator):
    services = build_services(evaluator=fake_evaluator)
    with TestClient(create_app(services)) as client:
        sid = _run_interview(client)
        assert services.dispatcher.wait_idle(timeout=10)

        status = client.get(f"/interviews/{sid}/status").json()
        assert status["status"] == "done"
        assert 0 <= status["score"] <= 100
        assert status["breakdown"]["language"] == 20
        assert "error_message" not in status

        detail = client.get(f"/interviews/{sid}").json()
        assert detail["has_recording"] is True
        assert detail["transcript"].startswith("I work as a nurse")
        assert detail["completed_at"] is not None

    assert fake_evaluator.calls[0]["interview_id"] == sid
    assert fake_evaluator.calls[0]["recording"] == b"webm-bytes"


def test_provider_failure_reaches_failed():
    def _unavailable(*_args, **_kwargs):
        raise ProviderUnavailableError("Provider returned HTTP 503")

    services = build_services(evaluator=_unavailable)
    with TestClient(create_app(services)) as client:
        sid = _run_interview(client)
        assert services.dispatcher.wait_idle(timeout=10)

        status = client.get(f"/interviews/{sid}/status").json()
        assert status == {"status": "failed", "error_message": "Provider returned HTTP 503"}


def test_complete_without_recording_fails(fake_evaluator):
    services = build_services(evaluator=fake_evaluator)
    with TestClient(create_app(services)) as client:
        sid = _run_interview(client, recording=None)
        assert services.dispatcher.wait_idle(timeout=10)

        status = client.get(f"/interviews/{sid}/status").json()
        assert status == {"status": "failed", "error_message": NO_RECORDING_MESSAGE}

    assert fake_evaluator.calls == []


def test_registry_bound_model_and_client_poller():
    bind_model(
        EVALUATOR_KEY,
        lambda recording, media_type, **_: {
            "transcript": "Hello, I am looking for a two bedroom flat.",
            "score": 101.4,
            "score_explanation": "Strong answers.",
            "breakdown": {"length": 18, "keywords": 20, "language": 20, "sentiment": 20, "completeness": 20},
            "suggestions": [],
        },
    )

    with TestClient(create_app()) as http:
        api = InterviewApiClient(http=http)
        sid = api.start("t2")["interview_id"]
        api.attach_recording(sid, b"mp4-bytes", media_type="video/mp4", filename="interview.mp4")
        assert api.complete(sid) == {"status": "processing"}

        completed = []
        poller = StatusPoller(api, sid, interval_s=0.05, on_complete=completed.append)
        final = poller.start().wait(timeout=10)

    assert final["status"] == "done"
    assert final["score"] == 100
    assert completed == [final]


@pytest.mark.parametrize("path", ["/complete", "/recording"])
def test_terminal_interview_rejects_further_transitions(fake_evaluator, path):
    services = build_services(evaluator=fake_evaluator)
    with TestClient(create_app(services)) as client:
        sid = _run_interview(client)
        assert services.dispatcher.wait_idle(timeout=10)

        kwargs = {"files": {"video": ("a.webm", b"x", "video/webm")}} if path == "/recording" else {}
        resp = client.post(f"/interviews/{sid}{path}", **kwargs)
        assert resp.status_code == 400
        assert client.get(f"/interviews/{sid}/status").json()["status"] == "done"
