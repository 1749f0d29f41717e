"""
Agent 04: Sector Strategist
Sector Allocation Specialist — Capital Allocation Framework

Receives validated projects, the sector list and allocation constraints.
Produces AllocationOutput with:
- One allocation per sector built from grade A/B projects only
- Constraint violations and a per-sector status (ok / warning / critical)
- Portfolio metrics against the total capital

Allocations are recomputed from the projects on every run.
"""

from __future__ import annotations

import logging
from datetime import date
from typing import List, Mapping, Optional, Sequence

from capital_agents.config.constants import DEFAULT_TOTAL_CAPITAL
from capital_agents.schemas.allocation_output import (
    AllocationConstraint,
    AllocationOutput,
    ConstraintViolation,
    PortfolioMetrics,
    Sector,
    SectorAllocation,
)
from capital_agents.schemas.project_output import ValidatedProject
from capital_agents.tools.constraint_validator import (
    apply_constraint_status,
    default_constraints,
)
from capital_agents.tools.sector_allocator import (
    compute_portfolio_metrics,
    compute_sector_allocations,
    default_sectors,
)

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Deterministic Pipeline
# ---------------------------------------------------------------------------

def run_allocation_pipeline(
    projects: Sequence[ValidatedProject],
    sectors: Optional[Sequence[Sector]] = None,
    constraints: Optional[Sequence[AllocationConstraint]] = None,
    total_capital: float = DEFAULT_TOTAL_CAPITAL,
    keyword_table: Optional[Mapping[str, Sequence[str]]] = None,
) -> AllocationOutput:
    """
    Run the deterministic sector allocation pipeline.

    Args:
        projects: All validated projects (grades C and below are ignored)
        sectors: Sector list, defaults to the nine standard sectors
        constraints: Allocation constraints, defaults to the standard set
        total_capital: Portfolio capital for available-capital metrics
        keyword_table: Sector name -> extra business unit keywords

    Returns:
        Validated AllocationOutput
    """
    logger.info("[Agent 04] Running Sector Strategist pipeline ...")

    sectors = list(sectors) if sectors is not None else default_sectors()
    constraints = list(constraints) if constraints is not None else default_constraints()

    # Step 1: Aggregate A/B projects into sectors
    allocations, unclassified = compute_sector_allocations(projects, sectors, keyword_table)
    if unclassified:
        logger.warning(
            f"[Agent 04] {len(unclassified)} A/B projects match no sector: {unclassified}"
        )

    # Step 2: Evaluate constraints
    allocations, violations = apply_constraint_status(allocations, constraints)

    # Step 3: Portfolio metrics
    metrics = compute_portfolio_metrics(allocations, total_capital)

    output = AllocationOutput(
        allocations=allocations,
        constraints=constraints,
        violations=violations,
        unclassified_project_ids=unclassified,
        metrics=metrics,
        analysis_date=date.today().isoformat(),
        summary=_build_summary(allocations, violations, metrics),
    )

    logger.info(
        f"[Agent 04] Done — {len(allocations)} sectors, {len(violations)} violations, "
        f"largest concentration {metrics.largest_concentration:.1f}%"
    )
    return output


# ---------------------------------------------------------------------------
# String builders
# ---------------------------------------------------------------------------

def _build_summary(
    allocations: List[SectorAllocation],
    violations: List[ConstraintViolation],
    metrics: PortfolioMetrics,
) -> str:
    """Build summary string (>= 20 chars)."""
    funded = sum(1 for a in allocations if a.project_count > 0)
    hard = sum(1 for v in violations if v.constraint.is_hard)
    parts = [
        f"Sector Allocation: {funded}/{len(allocations)} sectors funded,",
        f"${metrics.total_allocated / 1e9:.2f}B allocated.",
    ]
    if violations:
        parts.append(f"{len(violations)} constraint violations ({hard} hard).")
    else:
        parts.append("All constraints satisfied.")
    if not metrics.is_balanced:
        parts.append("Portfolio is off target.")
    return " ".join(parts)
