from __future__ import annotations

import asyncio
import logging
import random
import uuid
from datetime import datetime, timezone
from typing import Awaitable, Callable, Optional

from .curriculum import get_module
from .evaluation import EvaluationEngine
from .models import DifficultyTier, EvaluationResult, Module, Phase, Question
from .questions import QuestionProvider, fallback_question
from .selector import pick_topic_and_case


logger = logging.getLogger(__name__)

DEFAULT_ADVANCE_DELAY = 3.5
# Reward per correct answer is POINTS_PER_STEP * (streak before the answer + 1)
POINTS_PER_STEP = 10

LOADING_MESSAGE = "Reviewing the case files..."
WRAP_MESSAGE = "Excellent work. Let's tackle another case."
STUCK_MESSAGE = (
    "The server farm is taking its sweet time. Even R would have finished by now. "
    "Hit retry and let's try that again."
)


def _now() -> datetime:
    return datetime.now(timezone.utc)


class TutorSession:
    def __init__(self, session_id: str) -> None:
        self.session_id = session_id
        self.active_module: Optional[Module] = None
        self.tier: DifficultyTier = DifficultyTier.CONCEPT
        self.question: Optional[Question] = None
        self.draft_answer: str = ""
        self.streak: int = 0
        self.score: int = 0
        self.phase: Phase = Phase.IDLE
        self.mentor_message: Optional[str] = None
        self.last_result: Optional[EvaluationResult] = None
        self.error: Optional[str] = None
        self.created_at: datetime = _now()
        self.last_activity: datetime = self.created_at

    @property
    def busy(self) -> bool:
        # Only one gateway call may be in flight per session
        return self.phase in (Phase.LOADING, Phase.EVALUATING)

    def touch(self) -> None:
        self.last_activity = _now()


class ProgressionController:
    """Drives one learner through a module's difficulty tiers.

    Every public transition checks and updates ``state.phase`` before its first
    await, so overlapping requests on the same session are rejected rather than
    queued. Rejections return ``False``/``None`` and leave the state untouched.

    After a correct answer the next tier is loaded by a task that first sleeps
    for ``advance_delay`` seconds; that task is owned here and can be cancelled
    (module switch, session close) or awaited (``wait_for_advance``).
    """

    def __init__(
        self,
        provider: QuestionProvider,
        engine: EvaluationEngine,
        *,
        session_id: Optional[str] = None,
        catalog: Callable[[int], Module] = get_module,
        rng: Optional[random.Random] = None,
        advance_delay: float = DEFAULT_ADVANCE_DELAY,
        question_timeout: Optional[float] = None,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ) -> None:
        self.provider = provider
        self.engine = engine
        self.state = TutorSession(session_id or uuid.uuid4().hex)
        self.advance_delay = advance_delay
        self.question_timeout = question_timeout
        self._catalog = catalog
        self._rng = rng
        self._sleep = sleep
        self._pending_advance: Optional[asyncio.Task] = None

    @property
    def busy(self) -> bool:
        return self.state.busy

    @property
    def advance_pending(self) -> bool:
        task = self._pending_advance
        return task is not None and not task.done() and self.state.phase == Phase.FEEDBACK

    async def select_module(self, module_id: int) -> bool:
        module = self._catalog(module_id)
        s = self.state
        s.touch()
        if s.busy:
            return False
        self.cancel_pending_advance()
        s.active_module = module
        s.tier = DifficultyTier.CONCEPT
        s.question = None
        s.draft_answer = ""
        s.last_result = None
        logger.info("Session %s selected module %s (%s)", s.session_id, module.id, module.title)
        await self._load_question(f"Ah, {module.title}. A fine choice. Let's begin.")
        return True

    def question_loaded(self, question: Question) -> bool:
        s = self.state
        if s.phase != Phase.LOADING:
            return False
        s.question = question
        s.draft_answer = ""
        s.mentor_message = None
        s.error = None
        s.phase = Phase.AWAITING_ANSWER
        return True

    def set_draft(self, text: str) -> bool:
        s = self.state
        s.touch()
        if s.phase != Phase.AWAITING_ANSWER:
            return False
        s.draft_answer = text or ""
        return True

    async def submit(self, answer: Optional[str] = None) -> Optional[EvaluationResult]:
        s = self.state
        s.touch()
        if s.phase != Phase.AWAITING_ANSWER or s.question is None:
            return None
        candidate = answer if answer is not None else s.draft_answer
        if not candidate.strip():
            return None
        s.draft_answer = candidate
        s.phase = Phase.EVALUATING
        try:
            result = await self.engine.evaluate(s.question, s.draft_answer)
        except BaseException:
            s.phase = Phase.AWAITING_ANSWER
            raise
        self.evaluated(result)
        return result

    def evaluated(self, result: EvaluationResult) -> None:
        s = self.state
        if s.phase != Phase.EVALUATING:
            return
        s.last_result = result
        s.mentor_message = result.feedback
        if result.degraded:
            s.phase = Phase.AWAITING_ANSWER
            return
        if result.is_correct:
            s.score += POINTS_PER_STEP * (s.streak + 1)
            s.streak += 1
            s.phase = Phase.FEEDBACK
            self._pending_advance = asyncio.create_task(self._advance_after_delay())
        else:
            s.streak = 0
            s.phase = Phase.AWAITING_ANSWER

    async def skip(self) -> bool:
        s = self.state
        s.touch()
        if s.phase != Phase.AWAITING_ANSWER:
            return False
        s.streak = 0
        logger.info("Session %s skipped a %s question", s.session_id, s.tier.value)
        await self._load_question()
        return True

    async def retry(self) -> bool:
        s = self.state
        s.touch()
        if s.phase != Phase.ERROR or s.active_module is None:
            return False
        await self._load_question()
        return True

    def reset_progress(self) -> bool:
        s = self.state
        s.touch()
        if s.busy:
            return False
        s.streak = 0
        s.score = 0
        return True

    async def advance(self) -> bool:
        s = self.state
        if s.phase != Phase.FEEDBACK:
            return False
        wrapped = s.tier == DifficultyTier.INTERPRETATION
        s.tier = s.tier.next()
        logger.info("Session %s advanced to %s", s.session_id, s.tier.value)
        await self._load_question(WRAP_MESSAGE if wrapped else LOADING_MESSAGE)
        return True

    def cancel_pending_advance(self) -> bool:
        if not self.advance_pending:
            return False
        self._pending_advance.cancel()
        self._pending_advance = None
        return True

    async def wait_for_advance(self) -> None:
        task = self._pending_advance
        if task is None:
            return
        try:
            await task
        except asyncio.CancelledError:
            if not task.cancelled():
                raise

    async def aclose(self) -> None:
        task = self._pending_advance
        self._pending_advance = None
        if task is not None and not task.done():
            task.cancel()

    async def _advance_after_delay(self) -> None:
        await self._sleep(self.advance_delay)
        await self.advance()

    async def _load_question(self, message: str = LOADING_MESSAGE) -> None:
        s = self.state
        module = s.active_module
        s.phase = Phase.LOADING
        s.question = None
        s.error = None
        s.mentor_message = message
        topic, case_study = pick_topic_and_case(module, self._rng)
        try:
            question = await asyncio.wait_for(
                self.provider.request_question(topic, s.tier, case_study),
                timeout=self.question_timeout,
            )
        except asyncio.TimeoutError:
            logger.warning("Question load for session %s timed out after %ss", s.session_id, self.question_timeout)
            s.phase = Phase.ERROR
            s.error = STUCK_MESSAGE
            s.mentor_message = STUCK_MESSAGE
            return
        except asyncio.CancelledError:
            s.phase = Phase.ERROR
            s.error = STUCK_MESSAGE
            raise
        except Exception as exc:
            logger.warning("Question generation failed for %r (%s), using fallback: %r", topic, s.tier.value, exc)
            question = fallback_question()
        self.question_loaded(question)
