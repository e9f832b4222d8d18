"""Server-fixed question set handed out when an interview starts."""
from __future__ import annotations

from typing import List

from .models import Question

INTERVIEW_QUESTIONS: List[Question] = [
    Question(
        id=1,
        text="Tell us who you are and why you're looking for a new place.",
        type="open",
        duration=30,
    ),
    Question(
        id=2,
        text="When can you move in and what's your monthly budget?",
        type="factual",
        duration=20,
    ),
    Question(
        id=3,
        text="Do you have steady income or references we can check?",
        type="yes_no_brief",
        duration=20,
    ),
    Question(id=4, text="Any pets or special requests?", type="tags", duration=15),
    Question(id=5, text="Have you ever had deposit disputes?", type="yes_no", duration=15),
]


def default_questions() -> List[Question]:
    """Return a fresh copy of the fixed question set."""

    return [question.model_copy() for question in INTERVIEW_QUESTIONS]
