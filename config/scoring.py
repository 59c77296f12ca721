"""YAML-driven scoring tables for response quality, score deltas and paste checks."""
from __future__ import annotations

import random
import re
from typing import Dict, List, Optional

import yaml
from pydantic import BaseModel, Field, model_validator

from config.settings import settings

QUALITY_TIERS = ("excellent", "good", "medium", "poor")


def _load_yaml(path: str) -> dict:
    with open(path, "r", encoding="utf-8") as handle:
        return yaml.safe_load(handle) or {}


class QualityWeights(BaseModel):
    """Additive bonuses and subtractive penalties applied to the base score."""

    relevant_tool: int = 12
    project: int = 12
    enthusiasm: int = 10
    learning: int = 8
    honesty: int = 5
    question: int = 8
    detail: int = 8
    reasoning: int = 6
    very_short: int = 10
    yes_no: int = 15
    disinterest: int = 20
    generic_short: int = 8


class TierThresholds(BaseModel):
    excellent: int = 70
    good: int = 55
    medium: int = 35

    @model_validator(mode="after")
    def _ordered(self) -> "TierThresholds":
        if not self.excellent > self.good > self.medium:
            raise ValueError("tier thresholds must satisfy excellent > good > medium")
        return self


class QualityTables(BaseModel):
    base_score: int = 50
    detail_words: int = 25
    short_words: int = 10
    signal_short_words: int = 20
    generic_max_chars: int = 200
    weights: QualityWeights = Field(default_factory=QualityWeights)
    tiers: TierThresholds = Field(default_factory=TierThresholds)
    patterns: Dict[str, str] = Field(
        default_factory=lambda: {
            "enthusiasm": r"\b(love|enjoy|excited|interesting|cool|awesome|amazing|fascinated|curious|fun)\b",
            "project": r"\b(built|made|created|worked on|project|app|website|game|bot|tool|portfolio)\b",
            "learning": r"\b(learning|learned|studied|tutorial|course|youtube|trying|practice|experiment)\b",
            "honesty": r"\b(haven't|don't know|not sure|new to|beginner|still learning|want to learn|would love to)\b",
            "reasoning": r"\b(because|since|so|that's why|the reason|i think)\b",
            "yes_no": r"^(yes|no|yeah|nope|ok|okay|sure|maybe)\.?$",
            "disinterest": r"\b(don't care|whatever|i guess|not really|doesn't matter)\b",
            "curiosity": r"how|why|what if|wonder|curious|interesting",
            "empathy": r"child|kid|parent|family|struggle|feel|experience|understand|perspective",
        }
    )
    generic_phrases: List[str] = Field(
        default_factory=lambda: [
            "i want to make a difference",
            "i'm passionate about",
            "i love technology",
            "i want to help people",
            "it's my dream",
            "since childhood",
            "always wanted to",
            "very interested in",
        ]
    )

    def compiled(self) -> Dict[str, re.Pattern[str]]:
        return {name: re.compile(pattern, re.IGNORECASE) for name, pattern in self.patterns.items()}


class DeltaRule(BaseModel):
    """Inclusive integer range, or an explicit set of choices, for one tier."""

    low: int
    high: int
    choices: List[int] = Field(default_factory=list)

    @model_validator(mode="after")
    def _bounds(self) -> "DeltaRule":
        if self.low > self.high:
            raise ValueError("delta low must not exceed high")
        for value in self.choices:
            if not self.low <= value <= self.high:
                raise ValueError(f"delta choice {value} outside [{self.low}, {self.high}]")
        return self

    def draw(self, rng: random.Random) -> int:
        if self.choices:
            return rng.choice(self.choices)
        return rng.randint(self.low, self.high)


class DeltaTables(BaseModel):
    excellent: DeltaRule = Field(default_factory=lambda: DeltaRule(low=12, high=17))
    good: DeltaRule = Field(default_factory=lambda: DeltaRule(low=8, high=12))
    medium: DeltaRule = Field(default_factory=lambda: DeltaRule(low=-3, high=3, choices=[3, -3]))
    poor: DeltaRule = Field(default_factory=lambda: DeltaRule(low=-12, high=-8))

    @model_validator(mode="after")
    def _directions(self) -> "DeltaTables":
        if self.excellent.low <= 0 or self.good.low <= 0:
            raise ValueError("excellent and good deltas must be positive")
        if self.poor.high >= 0:
            raise ValueError("poor deltas must be negative")
        if self.excellent.high < self.good.high or self.excellent.low < self.good.low:
            raise ValueError("excellent deltas must not be smaller than good deltas")
        if self.medium.high >= self.good.low or self.medium.low <= self.poor.high:
            raise ValueError("medium deltas must sit between poor and good")
        return self

    def rule_for(self, tier: str) -> DeltaRule:
        if tier not in QUALITY_TIERS:
            raise ValueError(f"unknown quality tier: {tier}")
        return getattr(self, tier)


class ExitTables(BaseModel):
    wrapup_phrases: List[str] = Field(
        default_factory=lambda: ["wrap this up", "got a good read", "one last", "final question"]
    )


class IntegrityTables(BaseModel):
    max_length: int = 100
    min_lines: int = 4
    multiline_length: int = 50
    formal_connectives: List[str] = Field(
        default_factory=lambda: [
            "firstly",
            "secondly",
            "furthermore",
            "moreover",
            "in conclusion",
            "to summarize",
        ]
    )


class ScoringTables(BaseModel):
    """Root of the tunable scoring configuration."""

    version: int = 1
    quality: QualityTables = Field(default_factory=QualityTables)
    deltas: DeltaTables = Field(default_factory=DeltaTables)
    exit: ExitTables = Field(default_factory=ExitTables)
    integrity: IntegrityTables = Field(default_factory=IntegrityTables)


def load_tables(path: Optional[str] = None) -> ScoringTables:
    """Load scoring tables from YAML, falling back to built-in defaults."""

    target = path or settings.SCORING_CONFIG
    try:
        raw = _load_yaml(target)
    except FileNotFoundError:
        raw = {}
    return ScoringTables.model_validate(raw)


_tables: Optional[ScoringTables] = None


def scoring_tables() -> ScoringTables:
    global _tables
    if _tables is None:
        _tables = load_tables()
    return _tables


def reset_tables(tables: Optional[ScoringTables] = None) -> None:
    """Replace the cached tables; ``None`` forces a reload on next access."""

    global _tables
    _tables = tables


__all__ = [
    "DeltaRule",
    "DeltaTables",
    "ExitTables",
    "IntegrityTables",
    "QUALITY_TIERS",
    "QualityTables",
    "ScoringTables",
    "load_tables",
    "reset_tables",
    "scoring_tables",
]
