"""
Application state snapshot.

The whole working set of the pipeline in one record, handed to and from
the StateStore. Datetimes survive the JSON round trip as ISO strings.
"""

from __future__ import annotations

from typing import List

from pydantic import BaseModel, Field

from capital_agents.config.constants import DEFAULT_TOTAL_CAPITAL
from capital_agents.schemas.allocation_output import (
    AllocationConstraint,
    Sector,
    SectorAllocation,
)
from capital_agents.schemas.opportunity_output import Opportunity
from capital_agents.schemas.priority_output import InvestmentPriority
from capital_agents.schemas.project_output import ValidatedProject
from capital_agents.schemas.quality_output import (
    DataQualityIssue,
    DataQualityMetrics,
    ValidationRule,
)


class AppState(BaseModel):
    total_capital: float = Field(DEFAULT_TOTAL_CAPITAL, gt=0)
    priorities: List[InvestmentPriority] = Field(default_factory=list)
    opportunities: List[Opportunity] = Field(default_factory=list)
    validated_projects: List[ValidatedProject] = Field(default_factory=list)
    sectors: List[Sector] = Field(default_factory=list)
    sector_allocations: List[SectorAllocation] = Field(default_factory=list)
    allocation_constraints: List[AllocationConstraint] = Field(default_factory=list)
    validation_rules: List[ValidationRule] = Field(default_factory=list)
    data_quality_issues: List[DataQualityIssue] = Field(default_factory=list)
    data_quality_metrics: DataQualityMetrics = Field(default_factory=DataQualityMetrics)
