"""
Agent 03: Project Validator — Output Schema
Capital Allocation Framework

A ValidatedProject is the investment-grade record built from exactly one
approved Opportunity: derived financials, a fixed-shape business plan,
the composite score breakdown and the investment grade.
"""

from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Dict, List

from pydantic import BaseModel, Field, model_validator


# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------

class InvestmentGrade(str, Enum):
    A = "A"
    B = "B"
    C = "C"
    NON_INVESTMENT = "Non-Investment"


class ValidationStatus(str, Enum):
    PENDING = "pending"
    IN_REVIEW = "in_review"
    VALIDATED = "validated"
    REJECTED = "rejected"


VALIDATION_TRANSITIONS: dict[ValidationStatus, tuple[ValidationStatus, ...]] = {
    ValidationStatus.PENDING: (ValidationStatus.IN_REVIEW,),
    ValidationStatus.IN_REVIEW: (
        ValidationStatus.VALIDATED,
        ValidationStatus.REJECTED,
    ),
    ValidationStatus.VALIDATED: (),
    ValidationStatus.REJECTED: (),
}

VALID_RISK_CATEGORIES = ("execution", "market", "regulatory", "financial", "operational")
VALID_SYNERGY_TYPES = ("revenue", "cost", "strategic")
VALID_CONFIDENCE_LEVELS = ("low", "medium", "high")


# ---------------------------------------------------------------------------
# Supporting Models
# ---------------------------------------------------------------------------

class ScoringBreakdown(BaseModel):
    """Components of the composite score as they were computed."""

    strategic_alignment: float
    financial_score: float
    risk_adjustment: float
    synergy_score: float
    composite_score: float


class QuarterlyFinancial(BaseModel):
    """One quarter of the five-year projection."""

    year: int = Field(..., ge=1)
    quarter: int = Field(..., ge=1, le=4)
    revenue: float
    costs: float
    ebitda: float
    ebitda_margin: float
    cash_flow: float
    capex_deployment: float
    cumulative_capex: float
    roic: float


class ProjectRisk(BaseModel):
    """Risk register entry."""

    id: str
    category: str
    description: str
    probability: float = Field(..., ge=0, le=100)
    impact: float = Field(..., ge=0, le=100)
    risk_score: float
    mitigation: str
    mitigation_cost: float
    owner: str
    status: str = "identified"

    @model_validator(mode="after")
    def validate_category(self) -> "ProjectRisk":
        if self.category not in VALID_RISK_CATEGORIES:
            raise ValueError(
                f"risk category must be one of {VALID_RISK_CATEGORIES}, got '{self.category}'"
            )
        return self


class ProjectSynergy(BaseModel):
    """Synergy with an existing business unit."""

    id: str
    business_unit: str
    type: str
    description: str
    value_estimate: float
    time_to_realize: int = Field(..., description="Months")
    confidence: str
    dependencies: List[str] = Field(default_factory=list)

    @model_validator(mode="after")
    def validate_enums(self) -> "ProjectSynergy":
        if self.type not in VALID_SYNERGY_TYPES:
            raise ValueError(
                f"synergy type must be one of {VALID_SYNERGY_TYPES}, got '{self.type}'"
            )
        if self.confidence not in VALID_CONFIDENCE_LEVELS:
            raise ValueError(
                f"confidence must be one of {VALID_CONFIDENCE_LEVELS}, got '{self.confidence}'"
            )
        return self


class BusinessPlan(BaseModel):
    executive_summary: str = ""
    market_analysis: str = ""
    market_size: float = 0.0
    competitive_landscape: str = ""
    investment_thesis: str = ""
    key_success_factors: List[str] = Field(default_factory=list)
    expected_outcomes: List[str] = Field(default_factory=list)
    financials: List[QuarterlyFinancial] = Field(default_factory=list)
    risks: List[ProjectRisk] = Field(default_factory=list)
    synergies: List[ProjectSynergy] = Field(default_factory=list)


class ValidatedProject(BaseModel):
    """Investment-grade project derived from one approved opportunity."""

    id: str = Field(..., min_length=1)
    opportunity_id: str = Field(..., min_length=1)
    name: str
    description: str = ""
    sponsor: str = ""
    business_unit: str = ""
    geography: str = ""
    duration: int = Field(..., description="Months")

    # Financials
    capex: float
    opex: float
    revenue_potential: float
    npv: float
    irr: float
    mirr: float
    payback_years: float

    # Scoring
    composite_score: float
    investment_grade: InvestmentGrade
    risk_score: float
    scoring_breakdown: ScoringBreakdown
    business_plan: BusinessPlan = Field(default_factory=BusinessPlan)

    # Validation workflow
    validation_status: ValidationStatus = ValidationStatus.PENDING
    validation_date: datetime = Field(default_factory=datetime.now)
    validated_by: str = "System"
    created_at: datetime = Field(default_factory=datetime.now)
    updated_at: datetime = Field(default_factory=datetime.now)


class PipelineMetrics(BaseModel):
    """Headline numbers for the validation pipeline."""

    projects_in_validation: int = Field(..., ge=0)
    grade_a_count: int = Field(..., ge=0)
    total_pipeline_value: float
    average_composite_score: float
    validation_success_rate: float = Field(
        ..., ge=0, le=100, description="Percent of projects graded above Non-Investment"
    )


# ---------------------------------------------------------------------------
# Top-level Output
# ---------------------------------------------------------------------------

class ValidationOutput(BaseModel):
    """Top-level output contract for the Project Validator."""

    projects: List[ValidatedProject] = Field(default_factory=list)
    new_project_ids: List[str] = Field(default_factory=list)
    skipped_opportunity_ids: List[str] = Field(default_factory=list)
    grade_distribution: Dict[str, int] = Field(default_factory=dict)
    metrics: PipelineMetrics
    analysis_date: str = Field(
        ..., pattern=r"^\d{4}-\d{2}-\d{2}$", description="YYYY-MM-DD"
    )
    summary: str = Field(..., min_length=20)

    @model_validator(mode="after")
    def validate_one_project_per_opportunity(self) -> "ValidationOutput":
        """At most one validated project per opportunity id."""
        seen: set[str] = set()
        for p in self.projects:
            if p.opportunity_id in seen:
                raise ValueError(
                    f"Opportunity '{p.opportunity_id}' has more than one validated project"
                )
            seen.add(p.opportunity_id)
        return self

    @model_validator(mode="after")
    def validate_grade_distribution(self) -> "ValidationOutput":
        total = sum(self.grade_distribution.values())
        if total != len(self.projects):
            raise ValueError(
                f"grade_distribution counts {total} projects, expected {len(self.projects)}"
            )
        return self
