"""
Agent 06: Scenario Analyst — Output Schema
Capital Allocation Framework

A scenario is a named threshold set (risk ceiling, IRR floor, duration
ceiling, synergy requirement) that re-filters ALL validated projects.
Each scenario is compared against the fixed baseline of grade A/B
projects. The what-if portfolio applies a capital budget on top of a
risk ceiling.
"""

from __future__ import annotations

from typing import Dict, List

from pydantic import BaseModel, Field, model_validator


# ---------------------------------------------------------------------------
# Supporting Models
# ---------------------------------------------------------------------------

class ScenarioParameters(BaseModel):
    """Thresholds for one what-if scenario."""

    name: str = Field(..., min_length=1)
    max_risk: float = Field(..., description="Risk score ceiling, inclusive")
    min_return: float = Field(..., description="IRR floor in percent, inclusive")
    max_duration_years: float = Field(..., description="Converted to months x12")
    require_synergies: bool = False


class ScenarioDiff(BaseModel):
    """Set comparison of a filtered project set against the baseline."""

    filtered_ids: List[str] = Field(default_factory=list)
    baseline_ids: List[str] = Field(default_factory=list)
    added: List[str] = Field(default_factory=list)
    removed: List[str] = Field(default_factory=list)
    unchanged: List[str] = Field(default_factory=list)

    @model_validator(mode="after")
    def validate_partition(self) -> "ScenarioDiff":
        """added/unchanged partition the filtered set; removed/unchanged the baseline."""
        added, removed, unchanged = set(self.added), set(self.removed), set(self.unchanged)
        if added & removed:
            raise ValueError(f"added and removed overlap: {sorted(added & removed)}")
        if added | unchanged != set(self.filtered_ids):
            raise ValueError("added + unchanged must equal the filtered set")
        if removed | unchanged != set(self.baseline_ids):
            raise ValueError("removed + unchanged must equal the baseline set")
        return self


class ScenarioAggregate(BaseModel):
    project_count: int = Field(..., ge=0)
    total_capital: float
    mean_irr: float


class AggregateDelta(BaseModel):
    """Difference other - base between two aggregates."""

    project_count: int
    total_capital: float
    mean_irr: float


class ScenarioResult(BaseModel):
    parameters: ScenarioParameters
    diff: ScenarioDiff
    aggregate: ScenarioAggregate
    delta_vs_baseline: AggregateDelta


class RiskDistribution(BaseModel):
    low: int = Field(0, ge=0)
    medium: int = Field(0, ge=0)
    high: int = Field(0, ge=0)


class QuarterlyDeployment(BaseModel):
    quarter: str = Field(..., pattern=r"^Q[1-4] \d{4}$")
    amount: float = Field(..., gt=0)


class WhatIfPortfolio(BaseModel):
    """Capital-capped, IRR-ranked selection under a risk ceiling."""

    risk_threshold: float
    capital_cap: float
    qualifying_ids: List[str] = Field(default_factory=list)
    selected_ids: List[str] = Field(default_factory=list)
    project_count: int = Field(0, ge=0)
    total_capital: float = 0.0
    weighted_irr: float = 0.0
    average_risk: float = 0.0
    deployment_months: int = Field(0, ge=0)
    risk_distribution: RiskDistribution = Field(default_factory=RiskDistribution)
    sector_breakdown: Dict[str, float] = Field(default_factory=dict)
    quarterly_deployment: List[QuarterlyDeployment] = Field(default_factory=list)

    @model_validator(mode="after")
    def validate_within_cap(self) -> "WhatIfPortfolio":
        if self.total_capital > self.capital_cap:
            raise ValueError(
                f"selected capital {self.total_capital} exceeds cap {self.capital_cap}"
            )
        return self


class RiskSweepPoint(BaseModel):
    risk_threshold: float
    project_count: int = Field(..., ge=0)
    total_capital: float
    weighted_irr: float


# ---------------------------------------------------------------------------
# Top-level Output
# ---------------------------------------------------------------------------

class ScenarioOutput(BaseModel):
    """Top-level output contract for the Scenario Analyst."""

    baseline: ScenarioAggregate
    scenarios: List[ScenarioResult] = Field(default_factory=list)
    what_if: WhatIfPortfolio
    risk_sweep: List[RiskSweepPoint] = Field(default_factory=list)
    analysis_date: str = Field(
        ..., pattern=r"^\d{4}-\d{2}-\d{2}$", description="YYYY-MM-DD"
    )
    summary: str = Field(..., min_length=20)

    @model_validator(mode="after")
    def validate_scenario_names_unique(self) -> "ScenarioOutput":
        names = [s.parameters.name for s in self.scenarios]
        if len(names) != len(set(names)):
            raise ValueError(f"Duplicate scenario names: {names}")
        return self
