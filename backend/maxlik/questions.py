from __future__ import annotations

import logging
import math
from typing import Any, Callable, Dict, List, Optional, Protocol

from .gemini_client import GeminiClient
from .models import CaseStudy, DifficultyTier, Question, QuestionType
from .prompts import GENERATION_RULES, MENTOR_PERSONA, extract_json_object


logger = logging.getLogger(__name__)


class QuestionProvider(Protocol):
    async def request_question(
        self,
        topic: str,
        difficulty: DifficultyTier,
        case_study: CaseStudy,
    ) -> Question:
        raise NotImplementedError


def fallback_question() -> Question:
    return Question(
        context="We seem to have lost connection to the server farm.",
        text="What is the standard error definition?",
        type=QuestionType.TEXT_INPUT,
        rubric="standard deviation divided by root n",
    )


def build_question_prompt(topic: str, difficulty: DifficultyTier, case_study: CaseStudy) -> str:
    return (
        f"{MENTOR_PERSONA}\n{GENERATION_RULES}\n"
        f"Generate a single {difficulty.value} level question about {topic} using the following case study context:\n"
        f"Case: {case_study.title}\n"
        f"Context: {case_study.description}\n"
        f"Data: {', '.join(case_study.data_points)}\n\n"
        "Rules based on Difficulty:\n"
        f"- {DifficultyTier.CONCEPT.value}: Ask for a definition or validity of a concept related to this case. Return type: MULTIPLE_CHOICE.\n"
        f"- {DifficultyTier.SETUP.value}: Ask to map the text description to a variable or hypothesis. Return type: MULTIPLE_CHOICE.\n"
        f"- {DifficultyTier.EXECUTION.value}: Ask for a specific calculation (e.g., t-stat, confidence interval). Return type: CALCULATION. Provide the correct numeric value.\n"
        f"- {DifficultyTier.INTERPRETATION.value}: Ask for a business decision or interpretation of a coefficient. Return type: TEXT_INPUT. Provide a rubric for grading.\n\n"
        "Output JSON format ONLY:\n"
        "{\n"
        '  "context": "A short paragraph (max 2 sentences) with the specific data needed for this question.",\n'
        '  "text": "The specific question to answer. Keep it direct.",\n'
        '  "type": "MULTIPLE_CHOICE" | "CALCULATION" | "TEXT_INPUT",\n'
        '  "options": ["Option A", "Option B", "Option C", "Option D"] (only for MC),\n'
        '  "correctOptionIndex": number (only for MC),\n'
        '  "correctValue": number (only for CALCULATION),\n'
        '  "rubric": "Key points required for correct answer" (only for TEXT_INPUT)\n'
        "}"
    )


_TYPE_BY_NAME: Dict[str, QuestionType] = {
    "MULTIPLE_CHOICE": QuestionType.MULTIPLE_CHOICE,
    "CALCULATION": QuestionType.CALCULATION,
    "FORMULA": QuestionType.FORMULA,
}


def _as_number(value: Any) -> Optional[float]:
    if isinstance(value, bool) or value is None:
        return None
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    return number if math.isfinite(number) else None


def parse_question_payload(data: Dict[str, Any]) -> Question:
    text = data.get("text")
    if not isinstance(text, str) or not text.strip():
        raise ValueError("question payload has no text")
    # Anything unrecognised is graded as free text
    qtype = _TYPE_BY_NAME.get(str(data.get("type", "")).upper(), QuestionType.TEXT_INPUT)

    options: Optional[List[str]] = None
    raw_options = data.get("options")
    if isinstance(raw_options, list) and raw_options:
        options = [str(o).strip() for o in raw_options]
    if qtype == QuestionType.MULTIPLE_CHOICE and not options:
        raise ValueError("multiple choice question without options")
    if qtype != QuestionType.MULTIPLE_CHOICE:
        # Options only belong to multiple choice
        options = None

    correct_option_index = data.get("correctOptionIndex")
    if not isinstance(correct_option_index, int) or isinstance(correct_option_index, bool):
        correct_option_index = None
    elif options is None or not 0 <= correct_option_index < len(options):
        correct_option_index = None

    correct_value = _as_number(data.get("correctValue"))
    if qtype == QuestionType.CALCULATION and correct_value is None:
        raise ValueError("calculation question without a numeric correctValue")

    components = data.get("correctFormulaComponents")
    if not isinstance(components, list):
        components = None

    context = data.get("context")
    rubric = data.get("rubric")
    return Question(
        context=context.strip() if isinstance(context, str) else None,
        text=text.strip(),
        type=qtype,
        options=options,
        correct_option_index=correct_option_index,
        correct_value=correct_value,
        correct_formula_components=[str(c) for c in components] if components else None,
        rubric=rubric.strip() if isinstance(rubric, str) and rubric.strip() else None,
    )


class GeminiQuestionProvider:
    def __init__(self, client_factory: Optional[Callable[[], GeminiClient]] = None) -> None:
        self._client_factory = client_factory or GeminiClient

    async def request_question(
        self,
        topic: str,
        difficulty: DifficultyTier,
        case_study: CaseStudy,
    ) -> Question:
        client = self._client_factory()
        try:
            prompt = build_question_prompt(topic, difficulty, case_study)
            raw = await client.generate(prompt, response_mime_type="application/json", thinking_budget=0)
        finally:
            await client.aclose()
        question = parse_question_payload(extract_json_object(raw))
        logger.debug("Generated %s question on %r (%s)", question.type.value, topic, difficulty.value)
        return question
