from __future__ import annotations

import asyncio
import logging
import math
from typing import Optional

from .grading import AnswerGrader
from .models import EvaluationResult, Question, QuestionType


logger = logging.getLogger(__name__)

# Absolute tolerance for calculation answers
CALCULATION_TOLERANCE = 0.05

GRADING_FALLBACK_FEEDBACK = (
    "My grading assistant seems to have wandered off to a faculty meeting. "
    "Give it another shot in a moment."
)


def parse_number(answer: str) -> float:
    """Read a learner's numeric answer; anything unreadable is NaN."""
    text = (answer or "").strip()
    # float() would read digit separators like "2_40"
    if not text or "_" in text:
        return math.nan
    try:
        return float(text)
    except ValueError:
        return math.nan


def _format_value(value: float) -> str:
    return str(int(value)) if float(value).is_integer() else str(value)


def evaluate_calculation(question: Question, answer: str) -> EvaluationResult:
    if question.correct_value is None:
        # Nothing to compare against; fail closed
        return EvaluationResult(
            is_correct=False,
            feedback="Not quite. I can't find my own answer key. Check your standard errors.",
        )
    value = parse_number(answer)
    # NaN compares False, so unreadable input is simply incorrect
    is_correct = abs(value - question.correct_value) < CALCULATION_TOLERANCE
    if is_correct:
        feedback = "Boom. Spot on. The numbers don't lie."
    else:
        feedback = f"Not quite. I calculated {_format_value(question.correct_value)}. Check your standard errors."
    return EvaluationResult(is_correct=is_correct, feedback=feedback)


class EvaluationEngine:
    def __init__(self, grader: AnswerGrader, *, timeout: Optional[float] = None) -> None:
        self.grader = grader
        self.timeout = timeout

    async def evaluate(self, question: Question, answer: str) -> EvaluationResult:
        if question.type == QuestionType.CALCULATION:
            return evaluate_calculation(question, answer)
        try:
            return await asyncio.wait_for(self.grader.grade(question, answer), timeout=self.timeout)
        except Exception as exc:
            logger.warning("Answer grading failed, using fallback result: %r", exc)
            return EvaluationResult(is_correct=False, feedback=GRADING_FALLBACK_FEEDBACK, degraded=True)
