"""
Agent 05: Data Quality Officer — Output Schema
Capital Allocation Framework

Validation rules are static catalogue records; their predicates live in a
rule-id keyed dispatch table in tools/quality_rules.py. A validation run
produces DataQualityIssue records and aggregate DataQualityMetrics.
"""

from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Dict, List, Optional

from pydantic import BaseModel, Field, model_validator


# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------

class Severity(str, Enum):
    CRITICAL = "critical"
    WARNING = "warning"
    INFO = "info"


class RuleCategory(str, Enum):
    FINANCIAL = "financial"
    COMPLETENESS = "completeness"
    CONSISTENCY = "consistency"
    ACCURACY = "accuracy"
    COMPLIANCE = "compliance"


class IssueStatus(str, Enum):
    OPEN = "open"
    RESOLVED = "resolved"
    IGNORED = "ignored"


# ---------------------------------------------------------------------------
# Supporting Models
# ---------------------------------------------------------------------------

class ValidationRule(BaseModel):
    """Catalogue entry; the predicate itself is looked up by id."""

    id: str = Field(..., min_length=1)
    name: str
    category: RuleCategory
    severity: Severity
    description: str = ""
    auto_fixable: bool = False
    enabled: bool = True


class DataQualityIssue(BaseModel):
    """Failure record for one rule on one or more entities."""

    id: str
    rule_id: str
    severity: Severity
    title: str
    description: str
    affected_items: List[str] = Field(default_factory=list)
    category: RuleCategory
    status: IssueStatus = IssueStatus.OPEN
    detected_date: datetime = Field(default_factory=datetime.now)
    resolved_date: Optional[datetime] = None
    resolved_by: Optional[str] = None
    auto_fix_suggestion: Optional[str] = None

    @property
    def key(self) -> tuple[str, tuple[str, ...]]:
        """Identity across validation runs."""
        return (self.rule_id, tuple(self.affected_items))


class DataQualityMetrics(BaseModel):
    overall_score: float = Field(100.0, ge=0, le=100)
    total_issues: int = Field(0, ge=0, description="Open issues")
    critical_issues: int = Field(0, ge=0)
    warning_issues: int = Field(0, ge=0)
    info_issues: int = Field(0, ge=0)
    resolved_issues: int = Field(0, ge=0)
    category_breakdown: Dict[str, int] = Field(default_factory=dict)

    @model_validator(mode="after")
    def validate_counts(self) -> "DataQualityMetrics":
        parts = self.critical_issues + self.warning_issues + self.info_issues
        if parts != self.total_issues:
            raise ValueError(
                f"severity counts sum to {parts}, total_issues is {self.total_issues}"
            )
        return self


# ---------------------------------------------------------------------------
# Top-level Output
# ---------------------------------------------------------------------------

class QualityOutput(BaseModel):
    """Top-level output contract for the Data Quality Officer."""

    rules: List[ValidationRule] = Field(default_factory=list)
    issues: List[DataQualityIssue] = Field(default_factory=list)
    metrics: DataQualityMetrics
    analysis_date: str = Field(
        ..., pattern=r"^\d{4}-\d{2}-\d{2}$", description="YYYY-MM-DD"
    )
    summary: str = Field(..., min_length=20)

    @model_validator(mode="after")
    def validate_issue_ids_unique(self) -> "QualityOutput":
        ids = [i.id for i in self.issues]
        if len(ids) != len(set(ids)):
            raise ValueError("Duplicate issue ids in validation run")
        return self
