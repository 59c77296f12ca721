"""Shared type definitions for interview agents and collaborators."""
from typing import Dict, List, Literal, Optional

from pydantic import BaseModel, Field

from session.state import HistoryMessage

QualityTier = Literal["excellent", "good", "medium", "poor"]


class QualitySignals(BaseModel):
    is_generic: bool = False
    shows_curiosity: bool = False
    shows_empathy: bool = False
    is_short: bool = False
    has_questions: bool = False


class QualityReport(BaseModel):
    tier: QualityTier
    score: int  # 0..100 heuristic score behind the tier
    signals: QualitySignals = Field(default_factory=QualitySignals)
    matched: List[str] = Field(default_factory=list)


class PasteVerdict(BaseModel):
    flagged: bool
    reason_codes: List[Literal["too_long", "formal_connective", "multiline_block"]] = Field(default_factory=list)
    length: int
    line_count: int


class IntegrityOutcome(BaseModel):
    action: Literal["ALLOW", "WARN", "BAN"]
    warning_count: int
    verdict: PasteVerdict
    message: str = ""


class QuestionRequest(BaseModel):
    conversation_history: List[HistoryMessage]
    track_id: str
    candidate_display_name: str
    request_scoring: bool = True


class NextUtterance(BaseModel):
    next_utterance: str
    response_quality_hint: Optional[QualityTier] = None


class EvaluationRequest(BaseModel):
    conversation_history: List[HistoryMessage]
    track_id: str
    candidate_display_name: str


class InterviewEvaluation(BaseModel):
    summary: str
    overall_score: int = Field(ge=0, le=100)
    technical_depth: str = "Medium"
    empathy_score: str = "Medium"
    culture_fit: str = "Moderate"
    key_observation: str = ""
    recommendation: str = "Maybe"
    scores: Dict[str, int] = Field(default_factory=dict)
    standout_moment: str = ""
    concern: str = ""
