"""FastAPI routes for interview session control."""
from __future__ import annotations

import threading
from typing import Dict, NoReturn, Optional

from fastapi import APIRouter, HTTPException

from api.schemas import ApiResp, EntryResp, PasteReq, PasteResp, ResumeReq, SessionView, StartReq, TurnReq, UIMessage
from services.errors import CandidateNotFound, EntryBlocked, InterviewError, SessionNotActive, TurnInProgress
from services.lifecycle import InterviewLifecycle, TurnResult
from services.sessions import default_stores

router = APIRouter(prefix="/api/interview")

_LIFECYCLES: Dict[str, InterviewLifecycle] = {}
_LIFECYCLES_GUARD = threading.Lock()


def lifecycle_for(owner_id: str, *, fresh: bool = False) -> InterviewLifecycle:
    """Return the in-process controller for ``owner_id``, creating it when needed."""

    with _LIFECYCLES_GUARD:
        current = _LIFECYCLES.get(owner_id)
        if current is not None and not fresh:
            return current
        if current is not None:
            current.close()
        lifecycle = InterviewLifecycle(owner_id)
        _LIFECYCLES[owner_id] = lifecycle
        return lifecycle


def reset_lifecycles() -> None:
    with _LIFECYCLES_GUARD:
        for lifecycle in _LIFECYCLES.values():
            lifecycle.close()
        _LIFECYCLES.clear()


def _evict(owner_id: str, lifecycle: InterviewLifecycle) -> None:
    with _LIFECYCLES_GUARD:
        if _LIFECYCLES.get(owner_id) is lifecycle:
            del _LIFECYCLES[owner_id]
    lifecycle.close()


def _evict_if_finished(owner_id: str, lifecycle: InterviewLifecycle) -> None:
    if lifecycle.finished:
        _evict(owner_id, lifecycle)


def _raise_http(exc: InterviewError) -> NoReturn:
    if isinstance(exc, CandidateNotFound):
        raise HTTPException(status_code=404, detail="candidate not found") from exc
    if isinstance(exc, EntryBlocked):
        raise HTTPException(status_code=403, detail=f"interview closed: {exc.status}") from exc
    if isinstance(exc, (SessionNotActive, TurnInProgress)):
        raise HTTPException(status_code=409, detail=str(exc)) from exc
    raise HTTPException(status_code=500, detail="interview processing failed") from exc


def _resp_from_result(result: TurnResult) -> ApiResp:
    messages = [UIMessage(text=result.message)] if result.message else []
    return ApiResp(
        status=result.status,
        ui_messages=messages,
        session=SessionView.from_session(result.session) if result.session else None,
        evaluation=result.evaluation.model_dump() if result.evaluation else None,
    )


@router.get("/entry/{owner_id}", response_model=EntryResp)
def entry(owner_id: str) -> EntryResp:
    lifecycle = lifecycle_for(owner_id)
    try:
        decision = lifecycle.check_entry()
    except InterviewError as exc:
        _evict(owner_id, lifecycle)
        _raise_http(exc)
    if decision.status in ("completed", "banned"):
        _evict(owner_id, lifecycle)
    return EntryResp(
        status=decision.status,
        candidate_status=decision.candidate_status,
        discarded=decision.discarded,
        session=SessionView.from_session(decision.session) if decision.session else None,
    )


@router.post("/start", response_model=ApiResp)
def start(req: StartReq) -> ApiResp:
    lifecycle = lifecycle_for(req.owner_id, fresh=True)
    try:
        session = lifecycle.start()
    except InterviewError as exc:
        _evict(req.owner_id, lifecycle)
        _raise_http(exc)
    return ApiResp(
        status="active",
        ui_messages=[UIMessage(text=session.transcript[-1].text)],
        session=SessionView.from_session(session),
    )


@router.post("/resume", response_model=ApiResp)
def resume(req: ResumeReq) -> ApiResp:
    lifecycle = lifecycle_for(req.owner_id, fresh=True)
    try:
        session = lifecycle.resume()
    except InterviewError as exc:
        _evict(req.owner_id, lifecycle)
        _raise_http(exc)
    last: Optional[str] = session.interviewer_prompts()[-1] if session.interviewer_prompts() else None
    return ApiResp(
        status="wrapping_up" if session.phase == "wrapping_up" else "active",
        ui_messages=[UIMessage(text=last)] if last else [],
        session=SessionView.from_session(session),
    )


@router.post("/turn", response_model=ApiResp)
def turn(req: TurnReq) -> ApiResp:
    lifecycle = lifecycle_for(req.owner_id)
    try:
        result = lifecycle.submit_reply(req.reply)
    except InterviewError as exc:
        _raise_http(exc)
    finally:
        _evict_if_finished(req.owner_id, lifecycle)
    return _resp_from_result(result)


@router.post("/paste", response_model=PasteResp)
def paste(req: PasteReq) -> PasteResp:
    lifecycle = lifecycle_for(req.owner_id)
    try:
        result = lifecycle.handle_paste(req.text)
    except InterviewError as exc:
        _raise_http(exc)
    finally:
        _evict_if_finished(req.owner_id, lifecycle)
    return PasteResp(**result.model_dump())


@router.get("/session/{owner_id}", response_model=SessionView)
def session_view(owner_id: str) -> SessionView:
    with _LIFECYCLES_GUARD:
        lifecycle = _LIFECYCLES.get(owner_id)
    session = lifecycle.session if lifecycle is not None else None
    if session is None:
        store, _ = default_stores()
        session = store.load(owner_id)
    if session is None:
        raise HTTPException(status_code=404, detail="session not found")
    return SessionView.from_session(session)
