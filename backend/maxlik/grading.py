from __future__ import annotations

import json
import logging
from typing import Any, Callable, Dict, Optional, Protocol

from .gemini_client import GeminiClient
from .models import EvaluationResult, Question
from .prompts import MENTOR_PERSONA, extract_json_object


logger = logging.getLogger(__name__)


class AnswerGrader(Protocol):
    async def grade(self, question: Question, answer: str) -> EvaluationResult:
        raise NotImplementedError


def rubric_or_options(question: Question) -> str:
    if question.rubric:
        return question.rubric
    options = json.dumps(question.options or [], ensure_ascii=False)
    if question.options and question.correct_option_index is not None:
        return f"{options} (correct option: {question.options[question.correct_option_index]})"
    return options


def build_grading_prompt(question: Question, answer: str) -> str:
    return (
        f"{MENTOR_PERSONA}\n"
        f"Question Context: {question.context or ''}\n"
        f"Question: {question.text}\n"
        f"Rubric/Correct Answer: {rubric_or_options(question)}\n"
        f"Student Answer: {answer}\n\n"
        "Evaluate the student's answer.\n"
        "Be strict on concepts (Data & Decisions logic) but lenient on phrasing.\n"
        "Respond in Max's voice.\n"
        "If wrong, explain why briefly (one sentence).\n\n"
        "Output JSON:\n"
        "{\n"
        '  "isCorrect": boolean,\n'
        '  "feedback": "string"\n'
        "}"
    )


def parse_grading_payload(data: Dict[str, Any]) -> EvaluationResult:
    is_correct = data.get("isCorrect")
    feedback = data.get("feedback")
    if not isinstance(is_correct, bool):
        raise ValueError("grading payload has no boolean isCorrect")
    if not isinstance(feedback, str) or not feedback.strip():
        raise ValueError("grading payload has no feedback")
    return EvaluationResult(is_correct=is_correct, feedback=feedback.strip())


class GeminiAnswerGrader:
    def __init__(self, client_factory: Optional[Callable[[], GeminiClient]] = None) -> None:
        self._client_factory = client_factory or GeminiClient

    async def grade(self, question: Question, answer: str) -> EvaluationResult:
        client = self._client_factory()
        try:
            raw = await client.generate(build_grading_prompt(question, answer), response_mime_type="application/json")
        finally:
            await client.aclose()
        return parse_grading_payload(extract_json_object(raw))
