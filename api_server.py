from __future__ import annotations  # FastAPI server exposing the adaptive interview engine

import logging
import sqlite3
from contextlib import asynccontextmanager
from pathlib import Path
from typing import AsyncIterator, Optional

from fastapi import FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel

from agents.evaluator import llm_evaluation_model
from agents.question_generator import llm_question_model
from agents.tracks import DEFAULT_TRACK
from agents.types import InterviewEvaluation, NextUtterance
from api.routes import router as interview_router
from config.registry import EVALUATION_KEY, QUESTION_KEY, bind_model
from config.routes import load_app_registry
from config.settings import settings
from storage.candidates import CandidateRecord, CandidateStatusStore
from storage.interviews import latest_result
from storage.migrate import migrate


logger = logging.getLogger(__name__)

ROOT = Path(__file__).resolve().parent


def bind_collaborators(config_path: Optional[Path] = None) -> bool:  # Bind LLM-backed collaborators from app config
    path = config_path or ROOT / settings.APP_CONFIG
    if not path.exists():
        logger.warning("App config %s missing; collaborators left unbound", path)
        return False
    resolved = load_app_registry(path, {QUESTION_KEY: NextUtterance, EVALUATION_KEY: InterviewEvaluation})
    question_route, _ = resolved[QUESTION_KEY]
    evaluation_route, _ = resolved[EVALUATION_KEY]
    bind_model(QUESTION_KEY, llm_question_model(question_route))
    bind_model(EVALUATION_KEY, llm_evaluation_model(evaluation_route))
    logger.info("Bound collaborators question=%s evaluation=%s", question_route.name, evaluation_route.name)
    return True


@asynccontextmanager
async def lifespan(_: FastAPI) -> AsyncIterator[None]:
    migrate(settings.DB_PATH)
    bind_collaborators()
    yield


app = FastAPI(title="Adaptive Interview API", lifespan=lifespan)
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=False,
    allow_methods=["*"],
    allow_headers=["*"]
)
app.include_router(interview_router)


class CreateCandidateRequest(BaseModel):  # Candidate registration payload
    candidate_id: str
    display_name: str
    track_id: str = DEFAULT_TRACK
    email: Optional[str] = None


@app.post("/api/candidates", response_model=CandidateRecord, status_code=201)
def create_candidate(payload: CreateCandidateRequest) -> CandidateRecord:  # Register a candidate for interview
    try:
        return CandidateStatusStore().create(
            candidate_id=payload.candidate_id,
            display_name=payload.display_name,
            track_id=payload.track_id,
            email=payload.email,
        )
    except sqlite3.IntegrityError as exc:
        raise HTTPException(status_code=409, detail="Candidate already registered") from exc


@app.get("/api/candidates/{candidate_id}", response_model=CandidateRecord)
def fetch_candidate(candidate_id: str) -> CandidateRecord:  # Durable status record
    record = CandidateStatusStore().get(candidate_id)
    if record is None:
        raise HTTPException(status_code=404, detail="Candidate not found")
    return record


@app.get("/api/candidates/{candidate_id}/interview")
def fetch_interview_result(candidate_id: str) -> dict:  # Most recent stored interview result
    result = latest_result(candidate_id)
    if result is None:
        raise HTTPException(status_code=404, detail="Interview result not found")
    return result
