import asyncio

import pytest

from conftest import StubGrader
from maxlik.evaluation import CALCULATION_TOLERANCE, EvaluationEngine, evaluate_calculation, parse_number
from maxlik.models import Question, QuestionType


CALC = Question(text="Compute the control limit.", type=QuestionType.CALCULATION, correct_value=240)


@pytest.mark.parametrize(
    "answer, expected",
    [
        ("240.03", True),
        ("239.96", True),
        ("  240 ", True),
        ("2.4e2", True),
        ("240.06", False),
        ("239.9", False),
        ("abc", False),
        ("", False),
        ("nan", False),
        ("240 units", False),
        ("2_40", False),
        ("240_000", False),
    ],
)
def test_calculation_tolerance(answer, expected):
    assert evaluate_calculation(CALC, answer).is_correct is expected


def test_calculation_matches_pure_predicate():
    for answer in ["240", "240.049", "240.05", "-240", "1e9", "0"]:
        expected = abs(parse_number(answer) - CALC.correct_value) < CALCULATION_TOLERANCE
        assert evaluate_calculation(CALC, answer).is_correct is expected


def test_calculation_feedback():
    assert evaluate_calculation(CALC, "240").feedback == "Boom. Spot on. The numbers don't lie."
    miss = evaluate_calculation(CALC, "100").feedback
    assert miss == "Not quite. I calculated 240. Check your standard errors."
    frac = Question(text="t?", type=QuestionType.CALCULATION, correct_value=1.64)
    assert "I calculated 1.64." in evaluate_calculation(frac, "2").feedback


def test_calculation_without_key_fails_closed():
    q = Question(text="t?", type=QuestionType.CALCULATION)
    result = evaluate_calculation(q, "0")
    assert not result.is_correct
    assert result.feedback


async def test_calculation_never_calls_grader():
    grader = StubGrader()
    result = await EvaluationEngine(grader).evaluate(CALC, "240.03")
    assert result.is_correct
    assert grader.calls == []


@pytest.mark.parametrize("qtype", [QuestionType.MULTIPLE_CHOICE, QuestionType.TEXT_INPUT, QuestionType.FORMULA])
async def test_other_types_are_delegated(qtype):
    grader = StubGrader(expected="sd / root n")
    q = Question(text="Define SE", type=qtype, rubric="sd over root n", options=["a", "b"])
    engine = EvaluationEngine(grader)

    assert (await engine.evaluate(q, "sd / root n")).is_correct
    assert not (await engine.evaluate(q, "mean")).is_correct
    assert grader.calls == [("Define SE", "sd / root n"), ("Define SE", "mean")]


async def test_grader_failure_yields_degraded_result():
    q = Question(text="Interpret", type=QuestionType.TEXT_INPUT, rubric="x")
    result = await EvaluationEngine(StubGrader(fail=True)).evaluate(q, "answer")
    assert result.is_correct is False
    assert result.degraded
    assert result.feedback


async def test_grader_timeout_yields_degraded_result():
    class HangingGrader:
        async def grade(self, question, answer):
            await asyncio.sleep(3600)

    q = Question(text="Interpret", type=QuestionType.TEXT_INPUT, rubric="x")
    result = await EvaluationEngine(HangingGrader(), timeout=0.01).evaluate(q, "answer")
    assert result.degraded and not result.is_correct
