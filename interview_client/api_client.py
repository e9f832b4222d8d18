"""HTTP client for the interview evaluation API."""
from __future__ import annotations

from typing import Any, Dict, Optional

import httpx


class ApiError(RuntimeError):
    """Non-2xx response from the API."""

    def __init__(self, status_code: int, message: str) -> None:
        super().__init__(f"{status_code}: {message}")
        self.status_code = status_code
        self.message = message


class InterviewApiClient:
    """Thin wrapper over an ``httpx.Client`` (a FastAPI ``TestClient`` also works)."""

    def __init__(
        self,
        base_url: Optional[str] = None,
        *,
        http: Optional[httpx.Client] = None,
        timeout: float = 30.0,
    ) -> None:
        if http is None and base_url is None:
            raise ValueError("base_url or http client is required")
        self._owns_http = http is None
        self._http = http or httpx.Client(base_url=base_url or "", timeout=timeout)

    def close(self) -> None:
        if self._owns_http:
            self._http.close()

    def __enter__(self) -> "InterviewApiClient":
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()

    def start(self, subject_id: str) -> Dict[str, Any]:
        return self._json(self._http.post("/interviews/start", json={"subject_id": subject_id}))

    def attach_recording(
        self,
        interview_id: str,
        data: bytes,
        media_type: str = "video/webm",
        filename: str = "interview.webm",
    ) -> Dict[str, Any]:
        files = {"video": (filename, data, media_type)}
        return self._json(self._http.post(f"/interviews/{interview_id}/recording", files=files))

    def complete(self, interview_id: str) -> Dict[str, Any]:
        return self._json(self._http.post(f"/interviews/{interview_id}/complete"))

    def get_status(self, interview_id: str) -> Dict[str, Any]:
        return self._json(self._http.get(f"/interviews/{interview_id}/status"))

    def get_session(self, interview_id: str) -> Dict[str, Any]:
        return self._json(self._http.get(f"/interviews/{interview_id}"))

    def evaluate_upload(
        self,
        data: bytes,
        media_type: str = "video/webm",
        *,
        tenant_id: Optional[str] = None,
        interview_id: Optional[str] = None,
        filename: str = "interview.webm",
    ) -> Dict[str, Any]:
        form = {key: value for key, value in (("tenant_id", tenant_id), ("interview_id", interview_id)) if value}
        files = {"video": (filename, data, media_type)}
        return self._json(self._http.post("/interview/upload", data=form, files=files))

    @staticmethod
    def _json(response: httpx.Response) -> Dict[str, Any]:
        if response.status_code >= 400:
            try:
                message = response.json().get("detail", response.text)
            except ValueError:
                message = response.text
            raise ApiError(response.status_code, str(message))
        return response.json()
