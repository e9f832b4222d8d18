"""FastAPI routes for the interview lifecycle and direct evaluation."""
from __future__ import annotations

import logging
from typing import Optional

from fastapi import APIRouter, Depends, File, Form, HTTPException, Request, UploadFile

from api.schemas import (
    CompleteResp,
    EvaluationResp,
    RecordingResp,
    SessionResp,
    StartReq,
    StartResp,
    StatusResp,
)
from interview_evaluation import EvaluationError
from interview_session import InterviewError, session_view
from services import InterviewServices


logger = logging.getLogger(__name__)

router = APIRouter(prefix="/interviews", tags=["interviews"])
upload_router = APIRouter(prefix="/interview", tags=["evaluation"])


def get_services(request: Request) -> InterviewServices:
    return request.app.state.services


def _http_error(exc: InterviewError) -> HTTPException:
    return HTTPException(status_code=exc.status_code, detail=exc.message)


def _read_upload(upload: Optional[UploadFile]) -> bytes:
    if upload is None:
        return b""
    try:
        return upload.file.read()
    finally:
        upload.file.close()


@router.post("/start", response_model=StartResp, status_code=201)
def start(req: StartReq, services: InterviewServices = Depends(get_services)) -> StartResp:
    try:
        started = services.machine.start(req.subject_id)
    except InterviewError as exc:
        raise _http_error(exc) from exc
    except Exception as exc:  # noqa: BLE001
        logger.exception("Unable to start interview")
        raise HTTPException(status_code=500, detail="Failed to start interview") from exc
    return StartResp(interview_id=started.session_id, questions=started.questions)


@router.post("/{interview_id}/recording", response_model=RecordingResp)
def attach_recording(
    interview_id: str,
    video: Optional[UploadFile] = File(default=None),
    services: InterviewServices = Depends(get_services),
) -> RecordingResp:
    data = _read_upload(video)
    media_type = video.content_type if video is not None else None
    try:
        session = services.machine.attach_recording(interview_id, data, media_type)
    except InterviewError as exc:
        raise _http_error(exc) from exc
    except Exception as exc:  # noqa: BLE001
        logger.exception("Unable to store recording for interview %s", interview_id)
        raise HTTPException(status_code=500, detail="Failed to upload recording") from exc
    return RecordingResp(
        interview_id=session.id,
        media_type=session.media_type or "",
        size_bytes=len(data),
    )


@router.post("/{interview_id}/complete", response_model=CompleteResp)
def complete(interview_id: str, services: InterviewServices = Depends(get_services)) -> CompleteResp:
    try:
        services.machine.complete(interview_id)
    except InterviewError as exc:
        raise _http_error(exc) from exc
    except Exception as exc:  # noqa: BLE001
        logger.exception("Unable to complete interview %s", interview_id)
        raise HTTPException(status_code=500, detail="Failed to complete interview") from exc
    return CompleteResp()


@router.get("/{interview_id}/status", response_model=StatusResp, response_model_exclude_none=True)
def status(interview_id: str, services: InterviewServices = Depends(get_services)) -> StatusResp:
    try:
        view = services.machine.get_status(interview_id)
    except InterviewError as exc:
        raise _http_error(exc) from exc
    except Exception as exc:  # noqa: BLE001
        logger.exception("Unable to read status for interview %s", interview_id)
        raise HTTPException(status_code=500, detail="Failed to get interview status") from exc
    return StatusResp(**view)


@router.get("/{interview_id}", response_model=SessionResp, response_model_exclude_none=True)
def detail(interview_id: str, services: InterviewServices = Depends(get_services)) -> SessionResp:
    try:
        session = services.machine.get_session(interview_id)
    except InterviewError as exc:
        raise _http_error(exc) from exc
    except Exception as exc:  # noqa: BLE001
        logger.exception("Unable to read interview %s", interview_id)
        raise HTTPException(status_code=500, detail="Failed to get interview") from exc
    return SessionResp(**session_view(session))


@upload_router.post("/upload", response_model=EvaluationResp, response_model_exclude_none=True)
def evaluate_upload(
    video: Optional[UploadFile] = File(default=None),
    tenant_id: Optional[str] = Form(default=None),
    interview_id: Optional[str] = Form(default=None),
    services: InterviewServices = Depends(get_services),
) -> EvaluationResp:
    data = _read_upload(video)
    if not data:
        raise HTTPException(status_code=400, detail="Video file is required")
    media_type = (video.content_type if video is not None else None) or "video/webm"
    logger.info(
        "Processing interview upload tenant=%s interview=%s bytes=%d type=%s",
        tenant_id,
        interview_id,
        len(data),
        media_type,
    )
    try:
        result = services.evaluator(
            data,
            media_type,
            interview_id=interview_id,
            subject_id=tenant_id,
        )
    except EvaluationError as exc:
        logger.error("Upload evaluation failed interview=%s: %s", interview_id, exc)
        raise HTTPException(status_code=500, detail=str(exc) or "Failed to process interview") from exc
    except Exception as exc:  # noqa: BLE001
        logger.exception("Unexpected error during upload evaluation")
        raise HTTPException(status_code=500, detail="Failed to process interview") from exc
    return EvaluationResp(interview_id=interview_id, **result.model_dump())
