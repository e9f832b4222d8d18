from __future__ import annotations  # Multimodal provider request gateway

import base64
import logging
import os
from typing import Any, Callable, Dict, List, Optional, Protocol, Sequence, Tuple

import httpx

from config import ProviderRoute


logger = logging.getLogger(__name__)  # Module logger setup


class HttpClient(Protocol):  # Minimal HTTP client protocol
    def post(self, url: str, *, json: Dict[str, Any], headers: Dict[str, str], timeout: float) -> "HttpResponse": ...


class HttpResponse(Protocol):  # Minimal HTTP response protocol
    @property
    def status_code(self) -> int: ...

    def json(self) -> Any: ...

    @property
    def text(self) -> str: ...


class LlmGatewayError(RuntimeError):  # Base gateway error
    pass


class GatewayUnavailableError(LlmGatewayError):  # Transport failure or provider-side error status
    def __init__(self, message: str, status_code: Optional[int] = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class GatewayPayloadTooLargeError(LlmGatewayError):  # Provider rejected the request size
    pass


class GatewayResponseError(LlmGatewayError):  # Reply body was not in the provider format
    pass


def inline_part(data: bytes, media_type: str) -> Dict[str, Any]:  # Build an inline media part
    return {"inline_data": {"mime_type": media_type, "data": base64.b64encode(data).decode("ascii")}}


def text_part(text: str) -> Dict[str, Any]:  # Build a text part
    return {"text": text}


def generate(
    parts: Sequence[Dict[str, Any]],
    *,
    cfg: ProviderRoute,
    client: Optional[HttpClient] = None,
    options: Optional[Dict[str, Any]] = None,
) -> str:  # Send one multimodal request and return the reply text
    payload: Dict[str, Any] = {
        "contents": [{"role": "user", "parts": list(parts)}],
        "generationConfig": {
            "temperature": cfg.temperature,
            "responseMimeType": "application/json",
        },
    }
    if options:
        payload["generationConfig"].update(options)
    headers = {"Content-Type": "application/json"}
    if cfg.api_key_env:
        api_key = os.getenv(cfg.api_key_env)
        if api_key:
            headers[cfg.api_key_header] = api_key
    headers.update(cfg.extra_headers)

    logger.info("Provider request send route=%s model=%s parts=%d", cfg.name, cfg.model, len(parts))
    try:
        response, close_cb = _post(cfg.url(), payload, headers, cfg.timeout_s, client)
    except Exception as exc:  # noqa: BLE001
        logger.error("Provider transport failure: %s", exc)
        raise GatewayUnavailableError(f"Provider transport failed: {exc}") from exc
    try:
        return _read_response(cfg, response)
    finally:
        _close_safely(close_cb)


def _read_response(cfg: ProviderRoute, response: HttpResponse) -> str:  # Map status and extract reply text
    status = response.status_code
    if status == 413:
        logger.error("Provider rejected payload size route=%s", cfg.name)
        raise GatewayPayloadTooLargeError("Recording exceeds the provider's request size limit")
    if status >= 400:
        logger.error("Provider error status route=%s status=%s", cfg.name, status)
        raise GatewayUnavailableError(f"Provider returned status {status}", status_code=status)
    try:
        data = response.json()
    except Exception as exc:  # noqa: BLE001
        logger.error("Invalid JSON payload from provider: %s", exc)
        raise GatewayResponseError("Provider payload was not JSON") from exc
    text = _extract_text(data)
    logger.info("Provider request done route=%s model=%s chars=%d", cfg.name, cfg.model, len(text))
    return strip_code_fences(text)


def _post(url: str, payload: Dict[str, Any], headers: Dict[str, str], timeout: float, client: Optional[HttpClient]) -> Tuple[HttpResponse, Optional[Callable[[], None]]]:  # Dispatch HTTP request
    if client is not None:
        return client.post(url, json=payload, headers=headers, timeout=timeout), None
    http_client = httpx.Client(timeout=timeout)
    try:
        response = http_client.post(url, json=payload, headers=headers)
    except Exception:
        http_client.close()
        raise
    return response, http_client.close


def _close_safely(close_cb: Optional[Callable[[], None]]) -> None:  # Close HTTP client callback when provided
    if close_cb is not None:
        close_cb()


def _extract_text(data: Any) -> str:  # Join the text parts of the first candidate
    if isinstance(data, dict):
        candidates = data.get("candidates")
        if isinstance(candidates, list) and candidates and isinstance(candidates[0], dict):
            content = candidates[0].get("content")
            parts = content.get("parts") if isinstance(content, dict) else None
            if isinstance(parts, list):
                texts: List[str] = [
                    part["text"] for part in parts if isinstance(part, dict) and isinstance(part.get("text"), str)
                ]
                if texts:
                    return "".join(texts)
        feedback = data.get("promptFeedback")
        if isinstance(feedback, dict) and feedback.get("blockReason"):
            raise GatewayResponseError(f"Provider blocked the request: {feedback['blockReason']}")
    raise GatewayResponseError("Provider response missing candidate text")


def strip_code_fences(content: str) -> str:  # Remove common markdown fences from model output
    text = content.strip()
    if text.startswith("```"):
        lines = text.splitlines()
        if lines:
            lines = lines[1:]
            while lines and lines[0].strip() == "":
                lines = lines[1:]
            while lines and lines[-1].strip() == "":
                lines = lines[:-1]
            if lines and lines[-1].strip() == "```":
                lines = lines[:-1]
            text = "\n".join(lines).strip()
    return text
