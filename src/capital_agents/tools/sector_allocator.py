"""
Sector Strategist Tool: Allocation Computation
Capital Allocation Framework

Pure functions that aggregate grade A/B validated projects into per-sector
allocation records, plus the allocation edits: rebalance to target,
manual overwrite of one sector, and moving a project between sectors.

No LLM, no file I/O.
"""

from __future__ import annotations

import logging
from typing import List, Mapping, Optional, Sequence

from capital_agents.config.constants import (
    ALLOCATABLE_GRADES,
    BALANCE_TOLERANCE_PCT,
    DEFAULT_SECTORS,
    SECTOR_MAX_BAND,
    SECTOR_MIN_BAND,
    SECTOR_MIN_FLOOR,
)
from capital_agents.exceptions import ProjectNotFoundError, SectorNotFoundError
from capital_agents.schemas.allocation_output import (
    PortfolioMetrics,
    Sector,
    SectorAllocation,
    SectorPerformance,
)
from capital_agents.schemas.project_output import ValidatedProject
from capital_agents.tools.sector_classifier import classify_project_sectors

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def default_sectors() -> List[Sector]:
    return [Sector(**s) for s in DEFAULT_SECTORS]


def allocatable_projects(projects: Sequence[ValidatedProject]) -> List[ValidatedProject]:
    """Grade A and B only."""
    return [p for p in projects if p.investment_grade.value in ALLOCATABLE_GRADES]


def allocation_band(target: float) -> tuple[float, float]:
    """(min_allocation, max_allocation) around a target percentage."""
    return max(SECTOR_MIN_FLOOR, target - SECTOR_MIN_BAND), target + SECTOR_MAX_BAND


def compute_performance(projects: Sequence[ValidatedProject]) -> SectorPerformance:
    capital = sum(p.capex for p in projects)
    n = len(projects)
    if n == 0:
        return SectorPerformance(total_capital=capital)
    return SectorPerformance(
        avg_irr=sum(p.irr for p in projects) / n,
        avg_npv=sum(p.npv for p in projects) / n,
        avg_risk=sum(p.risk_score for p in projects) / n,
        total_capital=capital,
    )


def _share(capital: float, total: float) -> float:
    return capital / total * 100 if total > 0 else 0.0


def _with_projects(
    alloc: SectorAllocation,
    projects: List[ValidatedProject],
    total: float,
) -> SectorAllocation:
    capital = sum(p.capex for p in projects)
    return alloc.model_copy(update={
        "projects": projects,
        "project_count": len(projects),
        "allocated_capital": capital,
        "current_allocation": _share(capital, total),
        "performance": compute_performance(projects),
    })


def _find(allocations: Sequence[SectorAllocation], sector_id: str) -> SectorAllocation:
    for a in allocations:
        if a.sector_id == sector_id:
            return a
    raise SectorNotFoundError(f"No sector allocation for '{sector_id}'")


# ---------------------------------------------------------------------------
# Aggregation
# ---------------------------------------------------------------------------

def compute_sector_allocations(
    projects: Sequence[ValidatedProject],
    sectors: Sequence[Sector],
    keyword_table: Optional[Mapping[str, Sequence[str]]] = None,
) -> tuple[List[SectorAllocation], List[str]]:
    """
    Aggregate grade A/B projects into one allocation per sector.

    current_allocation is each sector's capital as a percent of the total
    grade A/B capital (0 when that total is 0). A project matching several
    sectors contributes to each, so the shares can sum past 100.

    Returns:
        (allocations in sector order, ids of A/B projects matching no sector)
    """
    eligible = allocatable_projects(projects)
    total_capital = sum(p.capex for p in eligible)

    members: dict[str, List[ValidatedProject]] = {s.id: [] for s in sectors}
    unclassified: List[str] = []
    for project in eligible:
        sector_ids = classify_project_sectors(project.business_unit, sectors, keyword_table)
        if not sector_ids:
            unclassified.append(project.id)
        for sid in sector_ids:
            members[sid].append(project)

    allocations: List[SectorAllocation] = []
    for sector in sectors:
        lo, hi = allocation_band(sector.target_allocation)
        sector_projects = members[sector.id]
        capital = sum(p.capex for p in sector_projects)
        allocations.append(SectorAllocation(
            sector_id=sector.id,
            sector=sector,
            current_allocation=_share(capital, total_capital),
            target_allocation=sector.target_allocation,
            min_allocation=lo,
            max_allocation=hi,
            allocated_capital=capital,
            project_count=len(sector_projects),
            projects=sector_projects,
            performance=compute_performance(sector_projects),
        ))

    logger.info(
        f"[SectorAllocator] {len(eligible)} A/B projects "
        f"(${total_capital / 1e9:.2f}B) across {len(sectors)} sectors, "
        f"{len(unclassified)} unclassified"
    )
    return allocations, unclassified


# ---------------------------------------------------------------------------
# Edits
# ---------------------------------------------------------------------------

def rebalance_allocations(allocations: Sequence[SectorAllocation]) -> List[SectorAllocation]:
    """Reset every sector's current_allocation to its target."""
    return [
        a.model_copy(update={"current_allocation": a.target_allocation})
        for a in allocations
    ]


def set_manual_allocation(
    allocations: Sequence[SectorAllocation],
    sector_id: str,
    value: float,
) -> List[SectorAllocation]:
    """
    Overwrite one sector's current_allocation, clamped to [0, 100].

    Other sectors are untouched, so the total may drift from 100.

    Raises:
        SectorNotFoundError: unknown sector id.
    """
    _find(allocations, sector_id)
    clamped = max(0.0, min(100.0, value))
    return [
        a.model_copy(update={"current_allocation": clamped}) if a.sector_id == sector_id else a
        for a in allocations
    ]


def distinct_capital(allocations: Sequence[SectorAllocation]) -> float:
    """Capex of every allocated project, counted once however many sectors hold it."""
    seen: dict[str, float] = {}
    for a in allocations:
        for p in a.projects:
            seen.setdefault(p.id, p.capex)
    return sum(seen.values())


def move_project(
    allocations: Sequence[SectorAllocation],
    project_id: str,
    target_sector_id: str,
    total_capital: Optional[float] = None,
) -> List[SectorAllocation]:
    """
    Move a project out of the first sector holding it into the target sector.

    Shares are recomputed against total_capital, the grade A/B total before
    the move; when omitted it is the capex of the distinct allocated
    projects. Moving into the first sector holding the project is a no-op.
    When the target already holds the project (multi-sector match) it is
    only removed from the source.

    Raises:
        SectorNotFoundError: unknown target sector.
        ProjectNotFoundError: no sector holds the project.
    """
    target = _find(allocations, target_sector_id)
    source = next(
        (a for a in allocations if any(p.id == project_id for p in a.projects)),
        None,
    )
    if source is None:
        raise ProjectNotFoundError(f"Project '{project_id}' is not allocated to any sector")
    if source.sector_id == target.sector_id:
        return list(allocations)

    project = next(p for p in source.projects if p.id == project_id)
    already_held = any(p.id == project_id for p in target.projects)
    total = total_capital if total_capital is not None else distinct_capital(allocations)

    updated: List[SectorAllocation] = []
    for a in allocations:
        if a.sector_id == source.sector_id:
            updated.append(_with_projects(
                a, [p for p in a.projects if p.id != project_id], total,
            ))
        elif a.sector_id == target.sector_id and not already_held:
            updated.append(_with_projects(a, [*a.projects, project], total))
        else:
            updated.append(a)

    logger.info(
        f"[SectorAllocator] Moved {project_id} from {source.sector_id} to {target.sector_id}"
        + (" (already held)" if already_held else "")
    )
    return updated


# ---------------------------------------------------------------------------
# Portfolio metrics
# ---------------------------------------------------------------------------

def compute_portfolio_metrics(
    allocations: Sequence[SectorAllocation],
    total_capital: float,
) -> PortfolioMetrics:
    allocated = distinct_capital(allocations)
    largest = max(allocations, key=lambda a: a.current_allocation, default=None)
    return PortfolioMetrics(
        total_capital=total_capital,
        total_allocated=allocated,
        available_capital=total_capital - allocated,
        largest_concentration=largest.current_allocation if largest else 0.0,
        largest_sector_id=largest.sector_id if largest else None,
        is_balanced=all(
            abs(a.current_allocation - a.target_allocation) <= BALANCE_TOLERANCE_PCT
            for a in allocations
        ),
    )
