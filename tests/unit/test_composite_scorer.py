"""
Project Validator — Composite Scorer Tests
Level 1: Pure function tests, no file I/O.
"""

from __future__ import annotations

import random

import pytest

from capital_agents.config.constants import SCORE_WEIGHTS, SYNERGY_SCORE_RANGE
from capital_agents.schemas.opportunity_output import InvestmentRange
from capital_agents.tools.composite_scorer import (
    compute_composite_score,
    compute_financial_score,
    compute_risk_adjustment,
    draw_synergy_score,
    recompute_composite,
    score_opportunity,
    weighted_composite,
)

from tests.fixtures.conftest import build_sample_priorities, make_opportunity


class TestComponentScores:

    @pytest.mark.schema
    def test_weights_sum_to_one(self):
        assert sum(SCORE_WEIGHTS.values()) == pytest.approx(1.0)

    @pytest.mark.schema
    @pytest.mark.parametrize("investment_min,expected", [
        (0, 0.0),
        (5_000_000, 5.0),
        (50_000_000, 50.0),
        (100_000_000, 100.0),
        (1_000_000_000, 100.0),
    ])
    def test_financial_score(self, investment_min, expected):
        """10 points per $10M of minimum commitment, capped at 100."""
        assert compute_financial_score(investment_min) == pytest.approx(expected)

    @pytest.mark.schema
    def test_financial_score_negative_min_propagates(self):
        """Degenerate input is not clamped from below."""
        assert compute_financial_score(-10_000_000) == pytest.approx(-10.0)

    @pytest.mark.schema
    def test_risk_adjustment_is_inverse(self):
        assert compute_risk_adjustment(25) == 75
        assert compute_risk_adjustment(0) == 100
        assert compute_risk_adjustment(100) == 0

    @pytest.mark.schema
    def test_weighted_composite(self):
        assert weighted_composite(90, 100, 75, 65) == pytest.approx(87.5)


class TestSynergyDraw:

    @pytest.mark.schema
    def test_draw_in_range(self):
        low, high = SYNERGY_SCORE_RANGE
        rng = random.Random(123)
        for _ in range(200):
            value = draw_synergy_score(rng)
            assert low <= value < high

    @pytest.mark.schema
    def test_same_seed_same_draw(self):
        assert draw_synergy_score(random.Random(7)) == draw_synergy_score(random.Random(7))


class TestScoreOpportunity:

    @pytest.mark.schema
    def test_reference_opportunity(self):
        """Fit 90, risk 25, min 100M, synergy 65 -> 87.5."""
        breakdown = score_opportunity(make_opportunity(), synergy_override=65)
        assert breakdown.strategic_alignment == 90
        assert breakdown.financial_score == pytest.approx(100.0)
        assert breakdown.risk_adjustment == 75
        assert breakdown.synergy_score == 65
        assert breakdown.composite_score == pytest.approx(87.5)

    @pytest.mark.schema
    def test_breakdown_is_self_consistent(self):
        """The stored composite equals the weighted sum of the stored components."""
        breakdown = score_opportunity(make_opportunity(), rng=random.Random(3))
        assert recompute_composite(breakdown) == pytest.approx(breakdown.composite_score)

    @pytest.mark.schema
    def test_seeded_rng_is_reproducible(self):
        opp = make_opportunity()
        first = compute_composite_score(opp, rng=random.Random(42))
        second = compute_composite_score(opp, rng=random.Random(42))
        assert first == second

    @pytest.mark.schema
    def test_composite_bounds_for_in_range_inputs(self):
        """With components in [0, 100] the composite stays in [5, 98]."""
        low = score_opportunity(
            make_opportunity(
                strategic_fit_score=0,
                preliminary_risk_score=100,
                investment_range=InvestmentRange(min=0, max=1),
            ),
            synergy_override=50,
        )
        high = score_opportunity(
            make_opportunity(
                strategic_fit_score=100,
                preliminary_risk_score=0,
                investment_range=InvestmentRange(min=200e6, max=300e6),
            ),
            synergy_override=80,
        )
        assert low.composite_score == pytest.approx(5.0)
        assert high.composite_score == pytest.approx(98.0)

    @pytest.mark.schema
    def test_priorities_do_not_change_score(self):
        opp = make_opportunity()
        without = compute_composite_score(opp, synergy_override=65)
        with_priorities = compute_composite_score(
            opp, build_sample_priorities(), synergy_override=65,
        )
        assert without == with_priorities
