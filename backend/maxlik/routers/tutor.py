from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, Field

from ..curriculum import get_module
from ..evaluation import EvaluationEngine
from ..formula import compose_formula
from ..grading import AnswerGrader, GeminiAnswerGrader
from ..models import EvaluationResult, Question
from ..progression import ProgressionController
from ..questions import GeminiQuestionProvider, QuestionProvider
from ..settings import settings


router = APIRouter(prefix="/tutor", tags=["tutor"])

logger = logging.getLogger(__name__)


class StartRequest(BaseModel):
    module_id: Optional[int] = Field(default=None, description="Module to open right away")


class SessionRequest(BaseModel):
    session_id: str


class ModuleRequest(BaseModel):
    session_id: str
    module_id: int


class DraftRequest(BaseModel):
    session_id: str
    answer: str = ""


class SubmitRequest(BaseModel):
    session_id: str
    answer: Optional[str] = None
    # Formula questions may send palette tokens instead of text
    formula_tokens: Optional[List[str]] = None


_sessions: Dict[str, ProgressionController] = {}


def get_question_provider() -> QuestionProvider:
    return GeminiQuestionProvider()


def get_answer_grader() -> AnswerGrader:
    return GeminiAnswerGrader()


def _get_controller(session_id: str) -> ProgressionController:
    controller = _sessions.get(session_id)
    if not controller:
        raise HTTPException(status_code=404, detail="Session not found")
    return controller


def _question_payload(q: Optional[Question]) -> Optional[Dict[str, Any]]:
    # Answer keys stay server-side
    if q is None:
        return None
    return {
        "context": q.context,
        "text": q.text,
        "type": q.type.value,
        "options": q.options,
    }


def _result_payload(result: Optional[EvaluationResult]) -> Optional[Dict[str, Any]]:
    if result is None:
        return None
    return {"is_correct": result.is_correct, "feedback": result.feedback, "degraded": result.degraded}


def _state_payload(controller: ProgressionController) -> Dict[str, Any]:
    s = controller.state
    return {
        "session_id": s.session_id,
        "module": {"id": s.active_module.id, "title": s.active_module.title} if s.active_module else None,
        "tier": s.tier.value,
        "phase": s.phase.value,
        "busy": s.busy,
        "advance_pending": controller.advance_pending,
        "question": _question_payload(s.question),
        "draft_answer": s.draft_answer,
        "streak": s.streak,
        "score": s.score,
        "mentor_message": s.mentor_message,
        "last_result": _result_payload(s.last_result),
        "error": s.error,
    }


async def _select(controller: ProgressionController, module_id: int) -> None:
    try:
        accepted = await controller.select_module(module_id)
    except KeyError:
        raise HTTPException(status_code=404, detail=f"Module {module_id} not found")
    if not accepted:
        raise HTTPException(status_code=409, detail="Session is busy")


@router.post("/session/start")
async def start_session(
    req: StartRequest,
    provider: QuestionProvider = Depends(get_question_provider),
    grader: AnswerGrader = Depends(get_answer_grader),
):
    if req.module_id is not None:
        try:
            get_module(req.module_id)
        except KeyError:
            raise HTTPException(status_code=404, detail=f"Module {req.module_id} not found")
    engine = EvaluationEngine(grader, timeout=settings.grading_timeout_seconds)
    controller = ProgressionController(
        provider,
        engine,
        advance_delay=settings.advance_delay_seconds,
        question_timeout=settings.question_timeout_seconds,
    )
    _sessions[controller.state.session_id] = controller
    logger.info("Started tutor session %s", controller.state.session_id)
    if req.module_id is not None:
        await _select(controller, req.module_id)
    return _state_payload(controller)


@router.get("/session/state")
async def get_state(session_id: str):
    controller = _get_controller(session_id)
    controller.state.touch()
    return _state_payload(controller)


@router.post("/session/module")
async def select_module(req: ModuleRequest):
    controller = _get_controller(req.session_id)
    await _select(controller, req.module_id)
    return _state_payload(controller)


@router.post("/session/draft")
async def update_draft(req: DraftRequest):
    controller = _get_controller(req.session_id)
    if not controller.set_draft(req.answer):
        raise HTTPException(status_code=409, detail="No question is awaiting an answer")
    return _state_payload(controller)


@router.post("/session/submit")
async def submit_answer(req: SubmitRequest):
    controller = _get_controller(req.session_id)
    answer = req.answer
    if req.formula_tokens is not None:
        try:
            answer = compose_formula(req.formula_tokens)
        except ValueError as e:
            raise HTTPException(status_code=400, detail=str(e))
    effective = answer if answer is not None else controller.state.draft_answer
    if not effective.strip():
        raise HTTPException(status_code=400, detail="answer is required")
    result = await controller.submit(answer)
    if result is None:
        raise HTTPException(status_code=409, detail="No question is awaiting an answer")
    return {"result": _result_payload(result), "state": _state_payload(controller)}


@router.post("/session/skip")
async def skip_question(req: SessionRequest):
    controller = _get_controller(req.session_id)
    if not await controller.skip():
        raise HTTPException(status_code=409, detail="Nothing to skip right now")
    return _state_payload(controller)


@router.post("/session/retry")
async def retry_question(req: SessionRequest):
    controller = _get_controller(req.session_id)
    if not await controller.retry():
        raise HTTPException(status_code=409, detail="Session is not in an error state")
    return _state_payload(controller)


@router.post("/session/reset")
async def reset_progress(req: SessionRequest):
    controller = _get_controller(req.session_id)
    if not controller.reset_progress():
        raise HTTPException(status_code=409, detail="Session is busy")
    return _state_payload(controller)


@router.delete("/session")
async def end_session(session_id: str):
    controller = _sessions.pop(session_id, None)
    if controller is None:
        raise HTTPException(status_code=404, detail="Session not found")
    await controller.aclose()
    return {"ok": True}
