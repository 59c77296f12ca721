"""Evaluation collaborator producing the final interview assessment."""
from __future__ import annotations

from typing import Any, Callable, Dict, Optional

from pydantic import ValidationError

from agents.tracks import get_track
from agents.types import EvaluationRequest, InterviewEvaluation
from config.registry import EVALUATION_KEY, get_model
from config.routes import LlmRoute
from llm_gateway import HttpClient, LlmValidationError, chat
from services.errors import CollaboratorError

MAX_TOKENS = 600
TEMPERATURE = 0.3

EVALUATOR_PERSONA = (
    "You are an expert talent evaluator at a mission-driven tech company. You evaluate with both warmth "
    "and rigor and can spot genuine passion versus rehearsed answers."
)


def fallback_evaluation() -> InterviewEvaluation:
    """Neutral assessment used when the model output cannot be trusted."""

    return InterviewEvaluation(
        summary=(
            "Candidate completed the interview. Manual review of transcript recommended "
            "to assess mission alignment."
        ),
        overall_score=60,
        technical_depth="Medium",
        empathy_score="Medium",
        culture_fit="Moderate",
        key_observation="Interview completed - manual review recommended.",
        recommendation="Maybe",
        scores={"curiosity": 15, "empathy": 15, "grit": 15, "thinking": 15},
        standout_moment="Unable to parse - review transcript.",
        concern="Evaluation parsing failed - review transcript directly.",
    )


def build_evaluation_prompt(request: EvaluationRequest) -> str:
    track = get_track(request.track_id)
    name = request.candidate_display_name or "Candidate"
    transcript = "\n\n".join(
        f"{'Interviewer' if msg.role == 'assistant' else name}: {msg.content}"
        for msg in request.conversation_history
    )
    hooks = "\n- ".join(track.mission_hooks[:2])
    return (
        f"Evaluate an internship interview for {track.display_name}.\n\n"
        f"We build assistive technology for neurodiverse children, including:\n- {hooks}\n\n"
        f"TRANSCRIPT\n{transcript}\n\n"
        "Score curiosity, empathy, grit and thinking from 0 to 25 each; overall_score is their sum.\n"
        "technical_depth and empathy_score are High/Medium/Low, culture_fit is Strong/Good/Moderate/Weak, "
        "recommendation is Strong Hire/Hire/Maybe/Pass.\n"
        "key_observation quotes one memorable thing they said; summary is at most two sentences."
    )


def llm_evaluation_model(route: LlmRoute, *, client: Optional[HttpClient] = None) -> Callable[..., Dict[str, Any]]:
    def _model(*, inputs: Dict[str, Any], temperature: float = TEMPERATURE, max_tokens: int = MAX_TOKENS) -> Dict[str, Any]:
        request = EvaluationRequest.model_validate(inputs)
        messages = [
            {"role": "system", "content": EVALUATOR_PERSONA},
            {"role": "user", "content": build_evaluation_prompt(request)},
        ]
        result = chat(
            messages,
            InterviewEvaluation,
            cfg=route,
            client=client,
            options={"temperature": temperature, "max_tokens": max_tokens},
        )
        return result.model_dump()

    return _model


def evaluate_interview(request: EvaluationRequest) -> InterviewEvaluation:
    """Run the bound evaluation model once.

    Output that never matches the schema degrades to :func:`fallback_evaluation`;
    transport failures raise :class:`CollaboratorError` so the caller decides.
    """

    llm = get_model(EVALUATION_KEY)
    try:
        raw = llm(inputs=request.model_dump(mode="json"), temperature=TEMPERATURE, max_tokens=MAX_TOKENS)
    except LlmValidationError:
        return fallback_evaluation()
    except Exception as exc:  # noqa: BLE001
        raise CollaboratorError(f"evaluation failed: {type(exc).__name__}") from exc
    try:
        return InterviewEvaluation.model_validate(raw)
    except ValidationError:
        return fallback_evaluation()


__all__ = [
    "build_evaluation_prompt",
    "evaluate_interview",
    "fallback_evaluation",
    "llm_evaluation_model",
]
