"""
Agent 02: Opportunity Desk
Deal Flow Review — Capital Allocation Framework

Receives sourced opportunities and any requested status moves.
Produces OpportunityOutput with:
- Opportunities after the moves (new -> under_review -> approved/rejected)
- Count per status and the ids ready for conversion (approved)
- Open pipeline value (range max over everything not rejected)
"""

from __future__ import annotations

import logging
from datetime import date, datetime
from typing import List, Optional, Sequence

from capital_agents.schemas.opportunity_output import (
    Opportunity,
    OpportunityOutput,
    OpportunityStatus,
)
from capital_agents.tools.opportunity_workflow import (
    approved_opportunities,
    count_by_status,
    transition_opportunity,
)

logger = logging.getLogger(__name__)

# (opportunity_id, new_status, actor)
Transition = tuple[str, OpportunityStatus, str]


# ---------------------------------------------------------------------------
# Deterministic Pipeline
# ---------------------------------------------------------------------------

def run_opportunity_pipeline(
    opportunities: Sequence[Opportunity],
    transitions: Optional[Sequence[Transition]] = None,
    now: Optional[datetime] = None,
) -> OpportunityOutput:
    """
    Apply status moves in order, then summarise the desk.

    Raises:
        OpportunityNotFoundError / InvalidTransitionError from the workflow.
    """
    logger.info(f"[Agent 02] Running Opportunity Desk pipeline for {len(opportunities)} opportunities ...")

    working: List[Opportunity] = list(opportunities)
    for opportunity_id, status, actor in transitions or ():
        working = transition_opportunity(working, opportunity_id, status, actor=actor, now=now)

    counts = count_by_status(working)
    approved = approved_opportunities(working)
    pipeline_value = sum(
        o.investment_range.max for o in working
        if o.status != OpportunityStatus.REJECTED
    )

    output = OpportunityOutput(
        opportunities=working,
        status_counts=counts,
        approved_ids=[o.id for o in approved],
        pipeline_value=pipeline_value,
        analysis_date=date.today().isoformat(),
        summary=_build_summary(counts, pipeline_value),
    )

    logger.info(
        f"[Agent 02] Done — {len(working)} opportunities, {len(approved)} approved"
    )
    return output


def _build_summary(counts: dict[str, int], pipeline_value: float) -> str:
    """Build summary string (>= 20 chars)."""
    total = sum(counts.values())
    return (
        f"Opportunity Desk: {total} opportunities "
        f"({counts.get('new', 0)} new, {counts.get('under_review', 0)} under review, "
        f"{counts.get('approved', 0)} approved, {counts.get('rejected', 0)} rejected). "
        f"Open pipeline ${pipeline_value / 1e6:,.0f}M."
    )
