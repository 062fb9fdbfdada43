"""Shared stubs for the tutor tests: scripted gateways and a virtual clock."""

from __future__ import annotations

import asyncio
import random
from typing import List, Optional

import pytest

from maxlik.evaluation import EvaluationEngine
from maxlik.models import CaseStudy, DifficultyTier, EvaluationResult, Module, Question, QuestionType
from maxlik.progression import ProgressionController


class StubProvider:
    """Returns a canned question per tier and records every request."""

    def __init__(self, fail: bool = False, hang: bool = False) -> None:
        self.fail = fail
        self.hang = hang
        self.calls: List[tuple] = []

    async def request_question(self, topic: str, difficulty: DifficultyTier, case_study: CaseStudy) -> Question:
        self.calls.append((topic, difficulty, case_study.title))
        if self.hang:
            await asyncio.sleep(3600)
        if self.fail:
            raise ValueError("provider down")
        if difficulty == DifficultyTier.EXECUTION:
            return Question(text="Compute the mean.", type=QuestionType.CALCULATION, correct_value=240)
        if difficulty == DifficultyTier.INTERPRETATION:
            return Question(text="What should management do?", type=QuestionType.TEXT_INPUT, rubric="retool")
        return Question(
            text=f"{difficulty.value} question on {topic}",
            type=QuestionType.MULTIPLE_CHOICE,
            options=["A", "B", "C", "D"],
            correct_option_index=1,
        )


class StubGrader:
    """Grades an answer as correct iff it equals ``expected``."""

    def __init__(self, expected: str = "right", fail: bool = False) -> None:
        self.expected = expected
        self.fail = fail
        self.calls: List[tuple] = []

    async def grade(self, question: Question, answer: str) -> EvaluationResult:
        self.calls.append((question.text, answer))
        if self.fail:
            raise RuntimeError("grader down")
        ok = answer == self.expected
        return EvaluationResult(is_correct=ok, feedback="Boom. Deep Idea." if ok else "Nope.")


class VirtualClock:
    """Stands in for asyncio.sleep; records requested delays and returns at once."""

    def __init__(self) -> None:
        self.sleeps: List[float] = []

    async def sleep(self, seconds: float) -> None:
        self.sleeps.append(seconds)


TEST_MODULE = Module(
    id=42,
    title="Test Module",
    topics=["Standard Error", "T-tests", "Residuals"],
    cases=[
        CaseStudy(title="Case A", description="first", data_points=["n=100"]),
        CaseStudy(title="Case B", description="second", data_points=["SD: 60"]),
    ],
)


def catalog(module_id: int) -> Module:
    if module_id != TEST_MODULE.id:
        raise KeyError(module_id)
    return TEST_MODULE


@pytest.fixture
def provider() -> StubProvider:
    return StubProvider()


@pytest.fixture
def grader() -> StubGrader:
    return StubGrader()


@pytest.fixture
def clock() -> VirtualClock:
    return VirtualClock()


@pytest.fixture
async def make_controller(provider, grader, clock):
    created: List[ProgressionController] = []

    def _make(question_timeout: Optional[float] = None, grading_timeout: Optional[float] = None) -> ProgressionController:
        controller = ProgressionController(
            provider,
            EvaluationEngine(grader, timeout=grading_timeout),
            catalog=catalog,
            rng=random.Random(7),
            question_timeout=question_timeout,
            sleep=clock.sleep,
        )
        created.append(controller)
        return controller

    yield _make
    for controller in created:
        await controller.aclose()
