import random

import pytest

from config.scoring import DeltaRule, DeltaTables, load_tables
from services.scoring import apply_quality, clamp


class MaxRng(random.Random):
    """Always draws the top of a range and the first choice."""

    def randint(self, a, b):
        return b

    def choice(self, seq):
        return seq[0]


class MinRng(random.Random):
    def randint(self, a, b):
        return a

    def choice(self, seq):
        return seq[-1]


def test_delta_ranges_per_tier():
    rng = random.Random(7)
    for _ in range(200):
        assert 12 <= apply_quality(50, 0, "excellent", rng=rng).delta <= 17
        assert 8 <= apply_quality(50, 0, "good", rng=rng).delta <= 12
        assert apply_quality(50, 0, "medium", rng=rng).delta in (3, -3)
        assert -12 <= apply_quality(50, 0, "poor", rng=rng).delta <= -8


def test_score_stays_within_bounds_for_any_sequence():
    rng = random.Random(3)
    tiers = ["excellent", "good", "medium", "poor"]
    score, streak = 50, 0
    for _ in range(500):
        update = apply_quality(score, streak, rng.choice(tiers), rng=rng)
        score, streak = update.progress_score, update.consecutive_poor_count
        assert 0 <= score <= 100


def test_poor_streak_increments_and_resets():
    update = apply_quality(50, 2, "poor", rng=random.Random(1))
    assert update.consecutive_poor_count == 3
    assert update.direction == "down"
    for tier in ("excellent", "good", "medium"):
        assert apply_quality(50, 2, tier, rng=random.Random(1)).consecutive_poor_count == 0


def test_clamping_reports_drawn_delta():
    update = apply_quality(95, 0, "excellent", rng=MaxRng())
    assert update.delta == 17
    assert update.progress_score == 100
    update = apply_quality(4, 0, "poor", rng=MinRng())
    assert update.progress_score == 0


def test_medium_direction_follows_sign():
    assert apply_quality(50, 0, "medium", rng=MaxRng()).direction == "up"
    assert apply_quality(50, 0, "medium", rng=MinRng()).direction == "down"


def test_clamp_helper():
    assert clamp(-5) == 0
    assert clamp(105) == 100
    assert clamp(42) == 42


def test_unknown_tier_rejected():
    with pytest.raises(ValueError):
        DeltaTables().rule_for("stellar")


def test_tables_reject_inverted_directions():
    with pytest.raises(ValueError):
        DeltaTables(poor=DeltaRule(low=2, high=5))
    with pytest.raises(ValueError):
        DeltaTables(good=DeltaRule(low=20, high=30))
    with pytest.raises(ValueError):
        DeltaRule(low=5, high=1)


def test_yaml_override(tmp_path):
    path = tmp_path / "scoring.yaml"
    path.write_text(
        "deltas:\n  excellent:\n    low: 20\n    high: 25\nexit:\n  wrapup_phrases: ['that is all']\n",
        encoding="utf-8",
    )
    tables = load_tables(str(path))
    assert tables.deltas.excellent.low == 20
    assert tables.deltas.good.low == 8
    assert tables.exit.wrapup_phrases == ["that is all"]


def test_missing_yaml_uses_defaults(tmp_path):
    tables = load_tables(str(tmp_path / "absent.yaml"))
    assert tables.quality.tiers.excellent == 70
    assert tables.integrity.max_length == 100


def test_invalid_tier_ordering_in_yaml(tmp_path):
    path = tmp_path / "scoring.yaml"
    path.write_text("quality:\n  tiers:\n    excellent: 50\n    good: 60\n    medium: 35\n", encoding="utf-8")
    with pytest.raises(ValueError):
        load_tables(str(path))
