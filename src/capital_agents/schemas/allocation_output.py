"""
Agent 04: Sector Strategist — Output Schema
Capital Allocation Framework

Sector allocations are derived entirely from grade A/B validated
projects; they are recomputed on every run, never owned independently.
Allocation constraints bound a sector's share from below (min) or above
(max) and are either hard (critical) or soft (warning).
"""

from __future__ import annotations

from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, Field

from capital_agents.schemas.project_output import ValidatedProject


# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------

class ConstraintType(str, Enum):
    MIN = "min"
    MAX = "max"


class AllocationStatus(str, Enum):
    OK = "ok"
    WARNING = "warning"
    CRITICAL = "critical"


# ---------------------------------------------------------------------------
# Supporting Models
# ---------------------------------------------------------------------------

class Sector(BaseModel):
    """Business vertical capital can be allocated to."""

    id: str = Field(..., min_length=1)
    name: str = Field(..., min_length=1)
    target_allocation: float = Field(..., ge=0, le=100, description="Percent")


class SectorPerformance(BaseModel):
    avg_irr: float = 0.0
    avg_npv: float = 0.0
    avg_risk: float = 0.0
    total_capital: float = 0.0


class SectorAllocation(BaseModel):
    """Current vs target share of one sector."""

    sector_id: str
    sector: Sector
    current_allocation: float = Field(..., description="Percent of grade A/B capital")
    target_allocation: float
    min_allocation: float
    max_allocation: float
    allocated_capital: float = Field(..., description="Signed sum of member capex")
    project_count: int = Field(..., ge=0)
    projects: List[ValidatedProject] = Field(default_factory=list)
    performance: SectorPerformance = Field(default_factory=SectorPerformance)
    status: AllocationStatus = AllocationStatus.OK


class AllocationConstraint(BaseModel):
    """Bound on one sector's current allocation."""

    sector_id: str
    constraint_type: ConstraintType
    value: float = Field(..., description="Percent")
    is_hard: bool
    reason: str = ""


class ConstraintViolation(BaseModel):
    """A constraint whose bound the sector currently breaks."""

    sector_id: str
    sector_name: str
    constraint: AllocationConstraint
    current_allocation: float

    @property
    def severity(self) -> AllocationStatus:
        return AllocationStatus.CRITICAL if self.constraint.is_hard else AllocationStatus.WARNING


class PortfolioMetrics(BaseModel):
    """Portfolio-level allocation summary."""

    total_capital: float
    total_allocated: float
    available_capital: float
    largest_concentration: float = Field(..., description="Max current_allocation")
    largest_sector_id: Optional[str] = None
    is_balanced: bool


# ---------------------------------------------------------------------------
# Top-level Output
# ---------------------------------------------------------------------------

class AllocationOutput(BaseModel):
    """Top-level output contract for the Sector Strategist."""

    allocations: List[SectorAllocation] = Field(default_factory=list)
    constraints: List[AllocationConstraint] = Field(default_factory=list)
    violations: List[ConstraintViolation] = Field(default_factory=list)
    unclassified_project_ids: List[str] = Field(default_factory=list)
    metrics: PortfolioMetrics
    analysis_date: str = Field(
        ..., pattern=r"^\d{4}-\d{2}-\d{2}$", description="YYYY-MM-DD"
    )
    summary: str = Field(..., min_length=20)
