from __future__ import annotations
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


class DifficultyTier(str, Enum):
	CONCEPT = "Concept"
	SETUP = "Setup"
	EXECUTION = "Execution"
	INTERPRETATION = "Interpretation"

	def next(self) -> "DifficultyTier":
		# Cyclic: Interpretation wraps back to Concept
		order = list(DifficultyTier)
		return order[(order.index(self) + 1) % len(order)]


class QuestionType(str, Enum):
	MULTIPLE_CHOICE = "MULTIPLE_CHOICE"
	TEXT_INPUT = "TEXT_INPUT"
	FORMULA = "FORMULA"
	CALCULATION = "CALCULATION"


class Phase(str, Enum):
	IDLE = "idle"
	LOADING = "loading"
	AWAITING_ANSWER = "awaiting_answer"
	EVALUATING = "evaluating"
	# Correct answer shown, advance timer pending
	FEEDBACK = "feedback"
	# Question load timed out; retry() recovers
	ERROR = "error"


class CaseStudy(BaseModel):
	model_config = ConfigDict(frozen=True)

	title: str
	description: str
	data_points: List[str] = Field(default_factory=list)


class Module(BaseModel):
	model_config = ConfigDict(frozen=True)

	id: int
	title: str
	topics: List[str]
	cases: List[CaseStudy]

	@field_validator("topics", "cases")
	@classmethod
	def _not_empty(cls, value):
		if not value:
			raise ValueError("a module needs at least one topic and one case study")
		return value


class Question(BaseModel):
	context: Optional[str] = None
	text: str
	type: QuestionType
	options: Optional[List[str]] = None
	correct_option_index: Optional[int] = None
	correct_value: Optional[float] = None
	correct_formula_components: Optional[List[str]] = None
	rubric: Optional[str] = None


class EvaluationResult(BaseModel):
	is_correct: bool
	feedback: str
	# Set on locally produced fallbacks; progression leaves streak/score alone
	degraded: bool = False
