"""Heuristic response-quality analyzer for candidate replies."""
from __future__ import annotations

import re
from typing import Dict, List, Optional, Protocol, Tuple

from agents.tracks import get_track
from agents.types import QualityReport, QualitySignals, QualityTier
from config.scoring import QualityTables, scoring_tables


class QualityAnalyzer(Protocol):
    """Strategy turning a reply into one of the four quality tiers."""

    def classify(self, text: str, *, track_id: str) -> QualityReport: ...


def _word_count(text: str) -> int:
    return 0 if not text else len(text.strip().split())


def _clamp(value: int, low: int = 0, high: int = 100) -> int:
    return max(low, min(high, value))


def tier_for_score(score: int, tables: QualityTables) -> QualityTier:
    if score >= tables.tiers.excellent:
        return "excellent"
    if score >= tables.tiers.good:
        return "good"
    if score >= tables.tiers.medium:
        return "medium"
    return "poor"


def _mentions_tool(lower: str, tools: List[str]) -> Optional[str]:
    for tool in tools:
        # Word boundaries keep one-letter stacks like "R" from matching every reply.
        pattern = r"(?<!\w)" + re.escape(tool.lower()) + r"(?!\w)"
        if re.search(pattern, lower):
            return tool
    return None


class HeuristicQualityAnalyzer:
    """Keyword scoring around a neutral base, mapped onto quality tiers.

    The tables (weights, regexes, thresholds) come from ``config/scoring.yaml``
    so the heuristic can be tuned without touching the scoring function.
    """

    def __init__(self, tables: Optional[QualityTables] = None) -> None:
        self.tables = tables or scoring_tables().quality
        self._patterns: Dict[str, re.Pattern[str]] = self.tables.compiled()

    def _hit(self, name: str, text: str) -> bool:
        pattern = self._patterns.get(name)
        return bool(pattern and pattern.search(text))

    def signals(self, text: str) -> QualitySignals:
        lower = (text or "").lower()
        is_generic = any(phrase in lower for phrase in self.tables.generic_phrases) and len(text) < self.tables.generic_max_chars
        return QualitySignals(
            is_generic=is_generic,
            shows_curiosity="?" in text or self._hit("curiosity", text),
            shows_empathy=self._hit("empathy", text),
            is_short=_word_count(text) < self.tables.signal_short_words,
            has_questions="?" in text,
        )

    def score(self, text: str, *, track_id: str) -> Tuple[int, List[str], QualitySignals]:
        text = text or ""
        lower = text.lower()
        weights = self.tables.weights
        words = _word_count(text)
        signals = self.signals(text)
        matched: List[str] = []

        enthusiasm = self._hit("enthusiasm", text)
        bonuses = [
            ("relevant_tool", _mentions_tool(lower, get_track(track_id).tech_stack) is not None, weights.relevant_tool),
            ("project", self._hit("project", text), weights.project),
            ("enthusiasm", enthusiasm, weights.enthusiasm),
            ("learning", self._hit("learning", text), weights.learning),
            ("honesty", self._hit("honesty", text), weights.honesty),
            ("question", signals.has_questions, weights.question),
            ("detail", words >= self.tables.detail_words, weights.detail),
            ("reasoning", self._hit("reasoning", text), weights.reasoning),
        ]
        very_short = words < self.tables.short_words
        penalties = [
            ("very_short", very_short and not enthusiasm, weights.very_short),
            ("yes_no", self._hit("yes_no", text.strip()), weights.yes_no),
            ("disinterest", self._hit("disinterest", text), weights.disinterest),
            ("generic_short", signals.is_generic and very_short, weights.generic_short),
        ]

        total = self.tables.base_score
        for name, present, weight in bonuses:
            if present:
                total += weight
                matched.append(name)
        for name, present, weight in penalties:
            if present:
                total -= weight
                matched.append(name)
        return _clamp(total), matched, signals

    def classify(self, text: str, *, track_id: str) -> QualityReport:
        total, matched, signals = self.score(text, track_id=track_id)
        return QualityReport(
            tier=tier_for_score(total, self.tables),
            score=total,
            signals=signals,
            matched=matched,
        )


__all__ = ["HeuristicQualityAnalyzer", "QualityAnalyzer", "tier_for_score"]
