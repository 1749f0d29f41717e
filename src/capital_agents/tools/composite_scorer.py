"""
Project Validator Tool: Composite Scorer
Capital Allocation Framework

Pure functions for the composite investment score:

    composite = 0.4*strategic + 0.3*financial + 0.2*risk_adj + 0.1*synergy

The synergy term is drawn from an injected random source (seedable) or
pinned to a fixed value. The weighted sum is NOT clamped.

No LLM, no file I/O.
"""

from __future__ import annotations

import logging
import random
from typing import Optional, Sequence

from capital_agents.config.constants import (
    FINANCIAL_SCORE_CAP,
    FINANCIAL_SCORE_PER_UNIT,
    FINANCIAL_SCORE_UNIT,
    SCORE_WEIGHTS,
    SYNERGY_SCORE_RANGE,
)
from capital_agents.schemas.opportunity_output import Opportunity
from capital_agents.schemas.priority_output import InvestmentPriority
from capital_agents.schemas.project_output import ScoringBreakdown

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Component scores
# ---------------------------------------------------------------------------

def compute_financial_score(investment_min: float) -> float:
    """Every $10M of minimum commitment is worth 10 points, capped at 100."""
    return min(
        FINANCIAL_SCORE_CAP,
        (investment_min / FINANCIAL_SCORE_UNIT) * FINANCIAL_SCORE_PER_UNIT,
    )


def compute_risk_adjustment(risk_score: float) -> float:
    return 100.0 - risk_score


def draw_synergy_score(rng: Optional[random.Random] = None) -> float:
    """Uniform draw in [50, 80). Uses the module-level random when rng is None."""
    low, high = SYNERGY_SCORE_RANGE
    source = rng if rng is not None else random
    return low + source.random() * (high - low)


def weighted_composite(
    strategic_alignment: float,
    financial_score: float,
    risk_adjustment: float,
    synergy_score: float,
) -> float:
    """Weighted blend of the four components (unclamped)."""
    return (
        strategic_alignment * SCORE_WEIGHTS["strategic_alignment"]
        + financial_score * SCORE_WEIGHTS["financial_score"]
        + risk_adjustment * SCORE_WEIGHTS["risk_adjustment"]
        + synergy_score * SCORE_WEIGHTS["synergy_score"]
    )


# ---------------------------------------------------------------------------
# Opportunity scoring
# ---------------------------------------------------------------------------

def score_opportunity(
    opportunity: Opportunity,
    priorities: Sequence[InvestmentPriority] = (),
    rng: Optional[random.Random] = None,
    synergy_override: Optional[float] = None,
) -> ScoringBreakdown:
    """
    Score an opportunity and return the full breakdown.

    Args:
        opportunity: Opportunity to score (any status).
        priorities: Accepted for alignment context; currently informational.
        rng: Random source for the synergy draw.
        synergy_override: Fixed synergy value; skips the draw when given.

    Returns:
        ScoringBreakdown whose composite_score is computed from exactly the
        components it carries.
    """
    strategic = opportunity.strategic_fit_score
    financial = compute_financial_score(opportunity.investment_range.min)
    risk_adj = compute_risk_adjustment(opportunity.preliminary_risk_score)
    synergy = (
        synergy_override if synergy_override is not None
        else draw_synergy_score(rng)
    )
    composite = weighted_composite(strategic, financial, risk_adj, synergy)

    logger.debug(
        f"[CompositeScorer] {opportunity.id}: strategic={strategic:.1f} "
        f"financial={financial:.1f} risk_adj={risk_adj:.1f} "
        f"synergy={synergy:.1f} -> {composite:.2f}"
    )

    return ScoringBreakdown(
        strategic_alignment=strategic,
        financial_score=financial,
        risk_adjustment=risk_adj,
        synergy_score=synergy,
        composite_score=composite,
    )


def compute_composite_score(
    opportunity: Opportunity,
    priorities: Sequence[InvestmentPriority] = (),
    rng: Optional[random.Random] = None,
    synergy_override: Optional[float] = None,
) -> float:
    """Composite score only; see score_opportunity."""
    return score_opportunity(
        opportunity, priorities, rng=rng, synergy_override=synergy_override,
    ).composite_score


def recompute_composite(breakdown: ScoringBreakdown) -> float:
    """Recompute the weighted composite from a stored breakdown."""
    return weighted_composite(
        breakdown.strategic_alignment,
        breakdown.financial_score,
        breakdown.risk_adjustment,
        breakdown.synergy_score,
    )
