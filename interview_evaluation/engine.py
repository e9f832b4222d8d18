"""Evaluation Engine: scores a recording through the multimodal provider."""
from __future__ import annotations

import json
import logging
import math
from pathlib import Path
from typing import Any, Callable, Mapping, Optional, Union

from pydantic import ValidationError

from config import ProviderRoute, load_route, settings
from llm_gateway import (
    GatewayPayloadTooLargeError,
    GatewayResponseError,
    GatewayUnavailableError,
    HttpClient,
    generate,
    inline_part,
    text_part,
)

from .errors import EvaluationParseError, PayloadTooLargeError, ProviderUnavailableError
from .prompt import build_prompt
from .result import EvaluationResult, ProviderEvaluation, clamp_score

logger = logging.getLogger(__name__)


def parse_evaluation(content: Union[str, Mapping[str, Any]]) -> EvaluationResult:
    """Validate provider output (JSON text or a decoded mapping) and normalise scores.

    Raises:
        EvaluationParseError: If any required field is missing or malformed.
    """

    try:
        if isinstance(content, str):
            data = json.loads(content)
        elif isinstance(content, Mapping):
            data = dict(content)
        else:
            data = content
        raw = ProviderEvaluation.model_validate(data)
    except json.JSONDecodeError as exc:
        raise EvaluationParseError(f"Evaluation response was not valid JSON: {exc.msg}") from exc
    except ValidationError as exc:
        fields = sorted({".".join(str(part) for part in err["loc"]) or "<root>" for err in exc.errors()})
        raise EvaluationParseError(f"Evaluation response failed validation: {', '.join(fields)}") from exc

    if not raw.transcript.strip():
        raise EvaluationParseError("Evaluation response contained an empty transcript")

    values = [raw.score, *raw.breakdown.values()]
    if not all(math.isfinite(value) for value in values):
        raise EvaluationParseError("Evaluation response contained a non-finite score")

    return EvaluationResult(
        transcript=raw.transcript.strip(),
        score=clamp_score(raw.score),
        score_explanation=raw.score_explanation.strip(),
        breakdown={name: clamp_score(value) for name, value in raw.breakdown.items()},
        suggestions=[item.strip() for item in raw.suggestions if item.strip()],
    )


def as_evaluator(model: Callable[..., Any]) -> Callable[..., EvaluationResult]:
    """Wrap a bound model so its raw output goes through the same parsing."""

    def _evaluate(recording: bytes, media_type: str, **kwargs: Any) -> EvaluationResult:
        raw = model(recording, media_type, **kwargs)
        if isinstance(raw, EvaluationResult):
            return raw
        return parse_evaluation(raw)

    return _evaluate


class EvaluationEngine:
    """Stateless adapter around one provider route."""

    def __init__(
        self,
        route: ProviderRoute,
        *,
        client: Optional[HttpClient] = None,
        max_recording_bytes: Optional[int] = None,
    ) -> None:
        self._route = route
        self._client = client
        self._max_recording_bytes = max_recording_bytes

    @classmethod
    def from_config(
        cls,
        config_path: Optional[Path] = None,
        *,
        target: Optional[str] = None,
        client: Optional[HttpClient] = None,
    ) -> "EvaluationEngine":
        path = Path(config_path or settings.APP_CONFIG_PATH)
        return cls(load_route(path, target or settings.EVALUATION_ROUTE), client=client)

    @property
    def route(self) -> ProviderRoute:
        return self._route

    def evaluate(
        self,
        recording: bytes,
        media_type: str,
        *,
        interview_id: Optional[str] = None,
        subject_id: Optional[str] = None,
    ) -> EvaluationResult:
        limit = self._max_recording_bytes or settings.MAX_RECORDING_BYTES
        if len(recording) > limit:
            raise PayloadTooLargeError(
                f"Recording is {len(recording)} bytes; the limit is {limit} bytes"
            )

        parts = [
            inline_part(recording, media_type),
            text_part(build_prompt(interview_id=interview_id, subject_id=subject_id)),
        ]
        logger.info(
            "Evaluating recording interview=%s bytes=%d media_type=%s",
            interview_id,
            len(recording),
            media_type,
        )
        try:
            content = generate(parts, cfg=self._route, client=self._client)
        except GatewayPayloadTooLargeError as exc:
            raise PayloadTooLargeError(str(exc)) from exc
        except GatewayUnavailableError as exc:
            raise ProviderUnavailableError(f"Evaluation provider unavailable: {exc}") from exc
        except GatewayResponseError as exc:
            raise EvaluationParseError(f"Malformed provider response: {exc}") from exc

        result = parse_evaluation(content)
        logger.info("Evaluation parsed interview=%s score=%d", interview_id, result.score)
        return result

    __call__ = evaluate


__all__ = ["EvaluationEngine", "as_evaluator", "parse_evaluation"]
