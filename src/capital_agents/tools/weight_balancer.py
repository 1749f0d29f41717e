"""
Priority Planner Tool: Weight Balancer
Capital Allocation Framework

Pure functions keeping priority weights summing to 100:
- set_priority_weight: single edit, remaining weight redistributed to the
  other priorities in proportion to their current weights
- auto_balance_weights: equal split across active (weight > 0) priorities
- normalize_weights: proportional rescale to 100 (the CONS-001 auto-fix)
- derive_capital_allocations: capital_allocation = weight / 100 * total

No LLM, no file I/O.
"""

from __future__ import annotations

import logging
from typing import List, Optional, Sequence

from capital_agents.config.constants import WEIGHT_TOTAL
from capital_agents.exceptions import PriorityNotFoundError
from capital_agents.schemas.priority_output import InvestmentPriority

logger = logging.getLogger(__name__)


def _spread(weights: List[float], total: float) -> List[float]:
    """Scale weights to sum to total; equal split when they sum to zero."""
    current = sum(weights)
    if not weights:
        return []
    if current <= 0:
        return [total / len(weights)] * len(weights)
    return [w * total / current for w in weights]


def set_priority_weight(
    priorities: Sequence[InvestmentPriority],
    priority_id: str,
    new_weight: float,
    total_capital: Optional[float] = None,
) -> List[InvestmentPriority]:
    """
    Set one weight and redistribute 100 - new_weight across the rest.

    50/30/20 with the first set to 60 gives 60/24/16. A lone priority is
    pinned to 100. capital_allocation is re-derived for every priority when
    total_capital is given; otherwise it is left as is and the caller must
    run derive_capital_allocations.

    Raises:
        PriorityNotFoundError: unknown priority id.
        ValueError: new_weight outside [0, 100].
    """
    if not 0 <= new_weight <= WEIGHT_TOTAL:
        raise ValueError(f"weight must be between 0 and 100, got {new_weight}")
    if not any(p.id == priority_id for p in priorities):
        raise PriorityNotFoundError(f"No investment priority with id '{priority_id}'")

    others = [p for p in priorities if p.id != priority_id]
    if not others:
        new_weight = WEIGHT_TOTAL
    redistributed = iter(_spread([p.weight for p in others], WEIGHT_TOTAL - new_weight))

    result = []
    for p in priorities:
        weight = new_weight if p.id == priority_id else next(redistributed)
        result.append(p.model_copy(update={"weight": weight}))

    logger.debug(
        f"[WeightBalancer] {priority_id} -> {new_weight:.2f}%, "
        f"{len(others)} priorities rebalanced"
    )
    if total_capital is not None:
        result = derive_capital_allocations(result, total_capital)
    return result


def auto_balance_weights(priorities: Sequence[InvestmentPriority]) -> List[InvestmentPriority]:
    """
    Equal weights across active priorities, rounded to 2 decimals.

    The rounding remainder goes to the last active priority so the total
    stays exactly 100. With no active priority every priority is balanced.
    """
    active_ids = [p.id for p in priorities if p.weight > 0] or [p.id for p in priorities]
    if not active_ids:
        return []
    share = round(WEIGHT_TOTAL / len(active_ids), 2)
    last = active_ids[-1]
    remainder = WEIGHT_TOTAL - share * (len(active_ids) - 1)

    result = []
    for p in priorities:
        if p.id == last:
            result.append(p.model_copy(update={"weight": remainder}))
        elif p.id in active_ids:
            result.append(p.model_copy(update={"weight": share}))
        else:
            result.append(p)
    return result


def normalize_weights(priorities: Sequence[InvestmentPriority]) -> List[InvestmentPriority]:
    """Proportionally rescale all weights to sum to 100."""
    weights = _spread([p.weight for p in priorities], WEIGHT_TOTAL)
    return [p.model_copy(update={"weight": w}) for p, w in zip(priorities, weights)]


def derive_capital_allocations(
    priorities: Sequence[InvestmentPriority],
    total_capital: float,
) -> List[InvestmentPriority]:
    return [
        p.model_copy(update={"capital_allocation": p.weight / 100 * total_capital})
        for p in priorities
    ]
