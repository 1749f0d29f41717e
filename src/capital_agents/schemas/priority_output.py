"""
Agent 01: Priority Planner — Output Schema
Capital Allocation Framework

Investment priorities are the strategic themes that the portfolio's
capital is split across. Each priority carries a weight (percent of the
total); the capital allocation is derived from it.
"""

from __future__ import annotations

from enum import Enum
from typing import List

from pydantic import BaseModel, Field, model_validator

from capital_agents.config.constants import WEIGHT_TOLERANCE, WEIGHT_TOTAL


# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------

STRATEGIC_IMPORTANCE_RANGE: tuple[int, int] = (1, 10)


class RiskAppetite(str, Enum):
    CONSERVATIVE = "conservative"
    MODERATE = "moderate"
    AGGRESSIVE = "aggressive"


# ---------------------------------------------------------------------------
# Supporting Models
# ---------------------------------------------------------------------------

class InvestmentPriority(BaseModel):
    """One strategic priority with its share of the portfolio."""

    id: str = Field(..., min_length=1)
    name: str = Field(..., min_length=1)
    description: str = ""
    weight: float = Field(..., ge=0, le=100, description="Percent of total capital")
    capital_allocation: float = Field(
        0.0, description="Derived: weight / 100 * total_capital"
    )
    time_horizon: float = Field(..., gt=0, description="Years")
    min_roi: float = Field(..., description="Minimum ROI in percent")
    max_payback: float = Field(..., gt=0, description="Years")
    risk_appetite: RiskAppetite = RiskAppetite.MODERATE
    strategic_importance: int = Field(
        ...,
        ge=STRATEGIC_IMPORTANCE_RANGE[0],
        le=STRATEGIC_IMPORTANCE_RANGE[1],
    )


def total_weight(priorities: List[InvestmentPriority]) -> float:
    """Sum of weights over a priority list."""
    return sum(p.weight for p in priorities)


def is_weight_valid(priorities: List[InvestmentPriority]) -> bool:
    """True when weights sum to 100 within WEIGHT_TOLERANCE."""
    return abs(total_weight(priorities) - WEIGHT_TOTAL) < WEIGHT_TOLERANCE


# ---------------------------------------------------------------------------
# Top-level Output
# ---------------------------------------------------------------------------

class PriorityOutput(BaseModel):
    """Top-level output contract for the Priority Planner."""

    priorities: List[InvestmentPriority] = Field(default_factory=list)
    total_capital: float = Field(..., gt=0)
    total_weight: float
    total_allocated: float
    is_weight_valid: bool
    analysis_date: str = Field(
        ..., pattern=r"^\d{4}-\d{2}-\d{2}$", description="YYYY-MM-DD"
    )
    summary: str = Field(..., min_length=20)

    @model_validator(mode="after")
    def validate_ids_unique(self) -> "PriorityOutput":
        ids = [p.id for p in self.priorities]
        if len(ids) != len(set(ids)):
            raise ValueError(f"Duplicate priority ids: {ids}")
        return self

    @model_validator(mode="after")
    def validate_weight_flag(self) -> "PriorityOutput":
        """is_weight_valid must agree with the priorities it describes."""
        if self.is_weight_valid != is_weight_valid(self.priorities):
            raise ValueError(
                f"is_weight_valid={self.is_weight_valid} disagrees with "
                f"total weight {total_weight(self.priorities):.2f}"
            )
        return self
