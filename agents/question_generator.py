"""Question-generation collaborator: opening lines and next interviewer utterances."""
from __future__ import annotations

import random
from typing import Any, Callable, Dict, List, Optional

from pydantic import BaseModel, ValidationError

from agents.quality_analyzer import HeuristicQualityAnalyzer
from agents.tracks import TrackContext, get_track
from agents.types import NextUtterance, QualitySignals, QuestionRequest
from config.registry import QUESTION_KEY, get_model
from config.routes import LlmRoute
from llm_gateway import HttpClient, chat
from services.errors import CollaboratorError

MAX_TOKENS = 180

_WELCOME_OPENERS = [
    "Hi {name}! Welcome aboard. {welcome} I'm excited to chat with you today. So, what got you interested in {track}?",
    "Hey {name}! Great to meet you. {welcome} Tell me - what's your story? What brought you to {track}?",
    "{name}, welcome! {welcome} Before we dive into anything technical, I'd love to hear what sparked your interest in this field.",
    "Hi {name}! Thanks for applying. {welcome} Let's start simple - what made you choose {track}?",
]
_TECH_STACK_OPENERS = [
    "Hi {name}! Quick question to kick us off - what tools or technologies have you worked with in {track_lower}? "
    "Even if it's just tutorials or small projects, I'd love to hear about it!",
    "Hey {name}! Before anything else - tell me about your tech stack. What have you played with? "
    "({tools} - any of these ring a bell?)",
    "{name}, welcome! Let's start fun - if you had to pick your favorite tool in the {track_lower} space, what would it be and why?",
]
_PROJECT_OPENERS = [
    "Hey {name}! I always love hearing about what people have built. Have you worked on any projects in "
    "{track_lower}, even small ones? Tell me about them!",
    "{name}, welcome! Let's skip the formal stuff - tell me about something you've created that you're proud of. "
    "Big or small, finished or not!",
    "Hey {name}! Before we get into details - what got you into tech in the first place? "
    "Was there a specific moment or project that hooked you?",
]
OPENER_CATEGORIES = (_WELCOME_OPENERS, _TECH_STACK_OPENERS, _PROJECT_OPENERS)

_CLOSING_OPTIONS = [
    "This has been great, {name}! One last thing - any questions about the internship or what we're building?",
    "We're almost done! What excites you most about the possibility of working on these projects?",
    "Last question: If you join us, what skill would you most want to develop during the internship?",
    "Before we wrap up - is there anything else you'd like me to know about you?",
]


class _UtteranceReply(BaseModel):
    next_utterance: str


def opening_line(track_id: str, name: str, rng: Optional[random.Random] = None) -> str:
    """Pick a friendly opener from a random category; no model call involved."""

    rng = rng or random.Random()
    track = get_track(track_id)
    template = rng.choice(rng.choice(OPENER_CATEGORIES))
    return template.format(
        name=name or "there",
        welcome=track.welcome_note,
        track=track.display_name,
        track_lower=track.display_name.lower(),
        tools=", ".join(track.tech_stack[:5]),
    )


def stage_for(candidate_turns: int) -> str:
    if candidate_turns <= 1:
        return "warmup"
    if candidate_turns <= 3:
        return "tech_experience"
    if candidate_turns <= 5:
        return "projects"
    return "closing"


def _adaptation_note(signals: QualitySignals) -> str:
    if signals.is_generic:
        return "Their answer was a bit general. Help them get specific with a follow-up about a concrete example."
    if signals.shows_curiosity and signals.has_questions:
        return "They are curious and asking questions. Answer their question warmly and continue the conversation."
    if signals.is_short:
        return "Short answer, they might be nervous. Encourage them and ask an easier follow-up question."
    return ""


def _stage_context(stage: str, turn: int, track: TrackContext, name: str, rng: random.Random) -> str:
    if stage == "warmup":
        return (
            f"CURRENT STAGE: Getting to know them (turn {turn}). "
            "Ask about their tech experience or what they enjoy learning. Keep it light and friendly."
        )
    if stage == "tech_experience":
        return (
            f"CURRENT STAGE: Exploring tech experience (turn {turn}). "
            f"Ask about specific tools they've used: {', '.join(track.tech_stack[:6])}. "
            "If they haven't used something, reassure them it can be learned during the internship."
        )
    if stage == "projects":
        friendly = rng.choice(track.friendly_questions) if track.friendly_questions else ""
        return (
            f"CURRENT STAGE: Learning about their projects (turn {turn}). "
            f"Ask about anything they've built, even small. For example: \"{friendly}\""
        )
    closing = rng.choice(_CLOSING_OPTIONS).format(name=name)
    return (
        f"CURRENT STAGE: Wrapping up (turn {turn}). Close on a positive note. Use: \"{closing}\" "
        "Thank them for their time regardless of how it went."
    )


def build_system_prompt(
    request: QuestionRequest,
    signals: QualitySignals,
    rng: Optional[random.Random] = None,
) -> str:
    rng = rng or random.Random()
    track = get_track(request.track_id)
    name = request.candidate_display_name or "there"
    turn = sum(1 for msg in request.conversation_history if msg.role == "user")
    hook = rng.choice(track.mission_hooks) if track.mission_hooks else ""
    scenario = rng.choice(track.scenarios) if track.scenarios else ""
    sections: List[str] = [
        f"You are a friendly interviewer chatting with {name} about the {track.display_name} internship.",
        "Be warm and encouraging. Look for willingness to learn, curiosity and genuine interest, not expertise.",
        f"We build technology for children who learn differently, for example {hook}.",
        f"Tools worth asking about: {', '.join(track.tech_stack[:8])}.",
        f"A scenario you may use: {scenario}",
        _stage_context(stage_for(turn), turn, track, name, rng),
    ]
    note = _adaptation_note(signals)
    if note:
        sections.append("ADAPTATION: " + note)
    sections.append(
        "Keep responses under 50 words, ask one question at a time, acknowledge what they said first. "
        "When you have enough signal, say you have a good read and ask one last question."
    )
    return "\n\n".join(section for section in sections if section)


def llm_question_model(
    route: LlmRoute,
    *,
    client: Optional[HttpClient] = None,
    analyzer: Optional[HeuristicQualityAnalyzer] = None,
    rng: Optional[random.Random] = None,
) -> Callable[..., Dict[str, Any]]:
    """Build the registry callable that asks the routed model for the next utterance.

    The quality hint is computed locally from the last candidate reply so the
    model only has to produce conversational text.
    """

    analyzer = analyzer or HeuristicQualityAnalyzer()

    def _model(*, inputs: Dict[str, Any], temperature: float, max_tokens: int = MAX_TOKENS) -> Dict[str, Any]:
        request = QuestionRequest.model_validate(inputs)
        last_reply = next(
            (msg.content for msg in reversed(request.conversation_history) if msg.role == "user"),
            "",
        )
        signals = analyzer.signals(last_reply)
        messages = [{"role": "system", "content": build_system_prompt(request, signals, rng)}]
        messages.extend({"role": msg.role, "content": msg.content} for msg in request.conversation_history)
        reply = chat(
            messages,
            _UtteranceReply,
            cfg=route,
            client=client,
            options={"temperature": temperature, "max_tokens": max_tokens},
        )
        result: Dict[str, Any] = {"next_utterance": reply.next_utterance.strip()}
        if request.request_scoring and last_reply:
            result["response_quality_hint"] = analyzer.classify(last_reply, track_id=request.track_id).tier
        return result

    return _model


def request_next_utterance(request: QuestionRequest, *, temperature: float) -> NextUtterance:
    """Call the bound question model and validate its reply.

    Raises:
        CollaboratorError: the model failed or returned an unusable payload.
    """

    llm = get_model(QUESTION_KEY)
    try:
        raw = llm(inputs=request.model_dump(mode="json"), temperature=temperature, max_tokens=MAX_TOKENS)
        parsed = NextUtterance.model_validate(raw)
    except ValidationError as exc:
        raise CollaboratorError("question generator returned an invalid payload") from exc
    except Exception as exc:  # noqa: BLE001
        raise CollaboratorError(f"question generator failed: {type(exc).__name__}") from exc
    if not parsed.next_utterance.strip():
        raise CollaboratorError("question generator returned an empty utterance")
    return parsed


__all__ = [
    "OPENER_CATEGORIES",
    "build_system_prompt",
    "llm_question_model",
    "opening_line",
    "request_next_utterance",
    "stage_for",
]
