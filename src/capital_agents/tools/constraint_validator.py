"""
Sector Strategist Tool: Constraint Validator
Capital Allocation Framework

Evaluates AllocationConstraints against sector allocations.
A min constraint is violated when current < value; a max constraint when
current > value. A sector is critical if any violated constraint is hard,
warning if only soft ones are violated, ok otherwise.

No LLM, no file I/O.
"""

from __future__ import annotations

import logging
from typing import List, Sequence

from capital_agents.config.constants import DEFAULT_CONSTRAINTS
from capital_agents.schemas.allocation_output import (
    AllocationConstraint,
    AllocationStatus,
    ConstraintType,
    ConstraintViolation,
    SectorAllocation,
)

logger = logging.getLogger(__name__)


def default_constraints() -> List[AllocationConstraint]:
    return [AllocationConstraint(**c) for c in DEFAULT_CONSTRAINTS]


def is_violated(constraint: AllocationConstraint, current_allocation: float) -> bool:
    if constraint.constraint_type == ConstraintType.MIN:
        return current_allocation < constraint.value
    return current_allocation > constraint.value


def find_violations(
    allocation: SectorAllocation,
    constraints: Sequence[AllocationConstraint],
) -> List[ConstraintViolation]:
    """Violations of the constraints that apply to this sector, in input order."""
    return [
        ConstraintViolation(
            sector_id=allocation.sector_id,
            sector_name=allocation.sector.name,
            constraint=c,
            current_allocation=allocation.current_allocation,
        )
        for c in constraints
        if c.sector_id == allocation.sector_id
        and is_violated(c, allocation.current_allocation)
    ]


def sector_status(violations: Sequence[ConstraintViolation]) -> AllocationStatus:
    if any(v.constraint.is_hard for v in violations):
        return AllocationStatus.CRITICAL
    if violations:
        return AllocationStatus.WARNING
    return AllocationStatus.OK


def apply_constraint_status(
    allocations: Sequence[SectorAllocation],
    constraints: Sequence[AllocationConstraint],
) -> tuple[List[SectorAllocation], List[ConstraintViolation]]:
    """
    Stamp every allocation with its status.

    Returns:
        (updated allocations, all violations in sector order)
    """
    updated: List[SectorAllocation] = []
    all_violations: List[ConstraintViolation] = []
    for alloc in allocations:
        violations = find_violations(alloc, constraints)
        updated.append(alloc.model_copy(update={"status": sector_status(violations)}))
        all_violations.extend(violations)

    hard = sum(1 for v in all_violations if v.constraint.is_hard)
    logger.info(
        f"[ConstraintValidator] {len(all_violations)} violations "
        f"({hard} hard, {len(all_violations) - hard} soft) across {len(allocations)} sectors"
    )
    return updated, all_violations
