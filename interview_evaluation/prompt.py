"""Evaluation rubric prompt sent alongside the recording."""
from __future__ import annotations

import json
from textwrap import dedent
from typing import Optional

from .result import BREAKDOWN_CATEGORIES, ProviderEvaluation

_RUBRIC = dedent(
    """
    You are reviewing a recorded tenant interview. The applicant answers
    questions about who they are, why they are moving, their move-in date and
    budget, income or references, pets or special requests, and any past
    deposit disputes.

    1. Transcribe everything the applicant says. Mark unclear audio as [inaudible].
    2. Score the interview from 0 to 100 as the sum of five categories worth
       0-20 each: {categories}.
       - length: answers are long enough to be informative (20+ seconds each).
       - keywords: mentions work or studies, budget, income, move-in plans.
       - language: professional, no offensive language.
       - sentiment: neutral or positive tone.
       - completeness: full sentences rather than one-word answers.
    3. Explain the score in two or three sentences addressed to the applicant.
    4. List concrete suggestions to improve, most important first.

    Reply with a single JSON object matching this schema and nothing else:
    """
).strip()


def build_prompt(*, interview_id: Optional[str] = None, subject_id: Optional[str] = None) -> str:
    """Compose the rubric, the response schema and optional log references."""

    schema = json.dumps(ProviderEvaluation.model_json_schema(), indent=2)
    parts = [_RUBRIC.format(categories=", ".join(BREAKDOWN_CATEGORIES)), schema]
    if interview_id or subject_id:
        parts.append(f"Reference: interview={interview_id or '-'} subject={subject_id or '-'}")
    return "\n".join(parts)
