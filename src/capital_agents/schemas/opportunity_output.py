"""
Agent 02: Opportunity Desk — Output Schema
Capital Allocation Framework

Opportunities are sourced investment ideas moving through a review
lifecycle: new -> under_review -> {approved, rejected}. Only approved
opportunities are converted into validated projects.

Range ordering (min <= max) and score bounds are deliberately NOT
enforced here: bad imports must survive so the Data Quality Officer can
report them as issues.
"""

from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Dict, List, Optional

from pydantic import BaseModel, Field, model_validator


# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------

class OpportunityStatus(str, Enum):
    NEW = "new"
    UNDER_REVIEW = "under_review"
    APPROVED = "approved"
    REJECTED = "rejected"


# Allowed forward moves; rejected and approved are terminal
OPPORTUNITY_TRANSITIONS: dict[OpportunityStatus, tuple[OpportunityStatus, ...]] = {
    OpportunityStatus.NEW: (OpportunityStatus.UNDER_REVIEW,),
    OpportunityStatus.UNDER_REVIEW: (
        OpportunityStatus.APPROVED,
        OpportunityStatus.REJECTED,
    ),
    OpportunityStatus.APPROVED: (),
    OpportunityStatus.REJECTED: (),
}


# ---------------------------------------------------------------------------
# Supporting Models
# ---------------------------------------------------------------------------

class InvestmentRange(BaseModel):
    """Indicative commitment band in USD."""

    min: float
    max: float


class Opportunity(BaseModel):
    """A sourced investment idea."""

    id: str = Field(..., min_length=1)
    name: str = Field(..., min_length=1)
    description: str = ""
    source: str = Field("", description="Originating business unit")
    sponsor: str = ""
    status: OpportunityStatus = OpportunityStatus.NEW
    investment_range: InvestmentRange
    estimated_start: str = ""
    duration: int = Field(..., description="Months")
    strategic_fit_score: float
    preliminary_risk_score: float
    recommendations: str = ""
    approved_by: Optional[str] = None
    updated_by: str = "System"
    updated_date: datetime = Field(default_factory=datetime.now)


# ---------------------------------------------------------------------------
# Top-level Output
# ---------------------------------------------------------------------------

class OpportunityOutput(BaseModel):
    """Top-level output contract for the Opportunity Desk."""

    opportunities: List[Opportunity] = Field(default_factory=list)
    status_counts: Dict[str, int] = Field(default_factory=dict)
    approved_ids: List[str] = Field(default_factory=list)
    pipeline_value: float = Field(
        0.0, description="Sum of investment_range.max over non-rejected opportunities"
    )
    analysis_date: str = Field(
        ..., pattern=r"^\d{4}-\d{2}-\d{2}$", description="YYYY-MM-DD"
    )
    summary: str = Field(..., min_length=20)

    @model_validator(mode="after")
    def validate_ids_unique(self) -> "OpportunityOutput":
        ids = [o.id for o in self.opportunities]
        if len(ids) != len(set(ids)):
            raise ValueError(f"Duplicate opportunity ids: {ids}")
        return self

    @model_validator(mode="after")
    def validate_approved_ids(self) -> "OpportunityOutput":
        """approved_ids must list exactly the approved opportunities."""
        expected = [
            o.id for o in self.opportunities
            if o.status == OpportunityStatus.APPROVED
        ]
        if self.approved_ids != expected:
            raise ValueError(
                f"approved_ids {self.approved_ids} != approved opportunities {expected}"
            )
        return self
