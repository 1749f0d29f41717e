"""
Agent 01: Priority Planner
Strategic Priority Weighting — Capital Allocation Framework

Receives the investment priorities and the portfolio's total capital.
Produces PriorityOutput with:
- Weights after any requested edits (each edit redistributes the rest)
- Capital allocation per priority derived from its weight
- Whether the weights sum to 100

Weight problems are not raised here; the Data Quality Officer reports
them as CONS-001 issues.
"""

from __future__ import annotations

import logging
from datetime import date
from typing import List, Mapping, Optional, Sequence

from capital_agents.schemas.priority_output import (
    InvestmentPriority,
    PriorityOutput,
    is_weight_valid,
    total_weight,
)
from capital_agents.tools.weight_balancer import (
    auto_balance_weights,
    derive_capital_allocations,
    normalize_weights,
    set_priority_weight,
)

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Deterministic Pipeline
# ---------------------------------------------------------------------------

def run_priority_pipeline(
    priorities: Sequence[InvestmentPriority],
    total_capital: float,
    weight_edits: Optional[Mapping[str, float]] = None,
    auto_balance: bool = False,
    normalize: bool = False,
) -> PriorityOutput:
    """
    Run the deterministic priority planning pipeline.

    Args:
        priorities: Current investment priorities
        total_capital: Portfolio capital in USD
        weight_edits: priority id -> new weight, applied in order
        auto_balance: Equal split across active priorities after edits
        normalize: Proportional rescale to 100 after edits (CONS-001 fix)

    Returns:
        Validated PriorityOutput
    """
    logger.info(f"[Agent 01] Running Priority Planner pipeline for {len(priorities)} priorities ...")

    # Step 1: Apply weight edits
    working: List[InvestmentPriority] = list(priorities)
    for priority_id, weight in (weight_edits or {}).items():
        working = set_priority_weight(working, priority_id, weight)
        logger.info(f"[Agent 01] {priority_id} weight set to {weight:.2f}%")

    # Step 2: Optional whole-list fixes
    if auto_balance:
        working = auto_balance_weights(working)
    elif normalize:
        working = normalize_weights(working)

    # Step 3: Capital allocation per priority
    working = derive_capital_allocations(working, total_capital)

    weight = total_weight(working)
    valid = is_weight_valid(working)
    if not valid:
        logger.warning(f"[Agent 01] Priority weights sum to {weight:.2f}%, not 100%")

    output = PriorityOutput(
        priorities=working,
        total_capital=total_capital,
        total_weight=weight,
        total_allocated=sum(p.capital_allocation for p in working),
        is_weight_valid=valid,
        analysis_date=date.today().isoformat(),
        summary=_build_summary(working, total_capital, weight, valid),
    )

    logger.info(
        f"[Agent 01] Done — {len(working)} priorities, total weight {weight:.2f}%"
    )
    return output


# ---------------------------------------------------------------------------
# String builders
# ---------------------------------------------------------------------------

def _build_summary(
    priorities: List[InvestmentPriority],
    total_capital: float,
    weight: float,
    valid: bool,
) -> str:
    """Build summary string (>= 20 chars)."""
    if not priorities:
        return f"Priority Plan: no priorities defined for ${total_capital / 1e9:.1f}B."

    top = max(priorities, key=lambda p: p.weight)
    parts = [
        f"Priority Plan: {len(priorities)} priorities over ${total_capital / 1e9:.1f}B.",
        f"Largest is {top.name} at {top.weight:.1f}%.",
    ]
    if not valid:
        parts.append(f"Weights sum to {weight:.2f}% and need rebalancing.")
    return " ".join(parts)
