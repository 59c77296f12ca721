"""Progress-score updates driven by response quality tiers."""
from __future__ import annotations

import random
from typing import Literal, Optional

from pydantic import BaseModel

from agents.types import QualityTier
from config.scoring import DeltaTables, scoring_tables

SCORE_MIN = 0
SCORE_MAX = 100


class ScoreUpdate(BaseModel):
    progress_score: int
    consecutive_poor_count: int
    delta: int
    direction: Literal["up", "down"]


def clamp(value: int, low: int = SCORE_MIN, high: int = SCORE_MAX) -> int:
    return max(low, min(high, value))


def apply_quality(
    progress: int,
    poor_count: int,
    tier: QualityTier,
    *,
    tables: Optional[DeltaTables] = None,
    rng: Optional[random.Random] = None,
) -> ScoreUpdate:
    """Draw a delta for ``tier`` and apply it to the running score.

    Any non-poor tier resets the poor streak; poor extends it. The reported
    delta is the drawn value, the stored score is clamped to [0, 100].
    """

    tables = tables or scoring_tables().deltas
    rng = rng or random.Random()
    delta = tables.rule_for(tier).draw(rng)
    streak = poor_count + 1 if tier == "poor" else 0
    return ScoreUpdate(
        progress_score=clamp(progress + delta),
        consecutive_poor_count=streak,
        delta=delta,
        direction="up" if delta > 0 else "down",
    )


__all__ = ["SCORE_MAX", "SCORE_MIN", "ScoreUpdate", "apply_quality", "clamp"]
