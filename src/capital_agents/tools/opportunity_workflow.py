"""
Opportunity Desk Tool: Opportunity Workflow
Capital Allocation Framework

Status transitions for sourced opportunities:
new -> under_review -> {approved, rejected}. Approved and rejected are
terminal. Approving stamps approved_by; every move stamps updated_by and
updated_date.
"""

from __future__ import annotations

import logging
from datetime import datetime
from typing import List, Optional, Sequence

from capital_agents.exceptions import InvalidTransitionError, OpportunityNotFoundError
from capital_agents.schemas.opportunity_output import (
    OPPORTUNITY_TRANSITIONS,
    Opportunity,
    OpportunityStatus,
)

logger = logging.getLogger(__name__)


def transition_opportunity(
    opportunities: Sequence[Opportunity],
    opportunity_id: str,
    new_status: OpportunityStatus,
    actor: str = "System",
    now: Optional[datetime] = None,
) -> List[Opportunity]:
    """
    Return a new list with one opportunity moved to new_status.

    Raises:
        OpportunityNotFoundError: unknown opportunity id.
        InvalidTransitionError: move not allowed from the current status.
    """
    target = next((o for o in opportunities if o.id == opportunity_id), None)
    if target is None:
        raise OpportunityNotFoundError(f"No opportunity with id '{opportunity_id}'")
    if new_status not in OPPORTUNITY_TRANSITIONS[target.status]:
        raise InvalidTransitionError(
            f"Cannot move {opportunity_id} from '{target.status.value}' to '{new_status.value}'"
        )

    update = {
        "status": new_status,
        "updated_by": actor,
        "updated_date": now or datetime.now(),
    }
    if new_status == OpportunityStatus.APPROVED:
        update["approved_by"] = actor

    logger.info(
        f"[OpportunityWorkflow] {opportunity_id}: {target.status.value} -> {new_status.value}"
    )
    updated = target.model_copy(update=update)
    return [updated if o.id == opportunity_id else o for o in opportunities]


def count_by_status(opportunities: Sequence[Opportunity]) -> dict[str, int]:
    counts = {s.value: 0 for s in OpportunityStatus}
    for o in opportunities:
        counts[o.status.value] += 1
    return counts


def approved_opportunities(opportunities: Sequence[Opportunity]) -> List[Opportunity]:
    return [o for o in opportunities if o.status == OpportunityStatus.APPROVED]
