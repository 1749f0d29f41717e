"""
Agent 05: Data Quality Officer
Rule-Based Data Validation — Capital Allocation Framework

Receives priorities, opportunities, validated projects and sector
allocations.
Produces QualityOutput with:
- Issues from every enabled rule, in pass order
  (priorities -> opportunities -> projects -> allocations)
- Quality metrics over the open issues

Each run replaces the previous issue list. With preserve_resolutions the
resolved/ignored status of matching prior issues is carried over.
"""

from __future__ import annotations

import logging
from datetime import date, datetime
from typing import List, Optional, Sequence

from capital_agents.schemas.allocation_output import (
    AllocationConstraint,
    SectorAllocation,
)
from capital_agents.schemas.opportunity_output import Opportunity
from capital_agents.schemas.priority_output import InvestmentPriority
from capital_agents.schemas.project_output import ValidatedProject
from capital_agents.schemas.quality_output import (
    DataQualityIssue,
    DataQualityMetrics,
    QualityOutput,
    ValidationRule,
)
from capital_agents.tools.constraint_validator import default_constraints
from capital_agents.tools.quality_rules import default_validation_rules, run_validation
from capital_agents.tools.quality_scorer import (
    carry_forward_resolutions,
    compute_quality_metrics,
)

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Deterministic Pipeline
# ---------------------------------------------------------------------------

def run_quality_pipeline(
    priorities: Sequence[InvestmentPriority],
    opportunities: Sequence[Opportunity],
    projects: Sequence[ValidatedProject],
    allocations: Sequence[SectorAllocation],
    constraints: Optional[Sequence[AllocationConstraint]] = None,
    rules: Optional[Sequence[ValidationRule]] = None,
    prior_issues: Sequence[DataQualityIssue] = (),
    preserve_resolutions: bool = False,
    now: Optional[datetime] = None,
) -> QualityOutput:
    """
    Run every enabled validation rule over the current records.

    Args:
        rules: Rule list with enabled flags, defaults to the full catalogue
        prior_issues: Issues from the previous run
        preserve_resolutions: Carry resolved/ignored status forward by
            (rule_id, affected_items)

    Returns:
        Validated QualityOutput
    """
    logger.info("[Agent 05] Running Data Quality pipeline ...")

    rules = list(rules) if rules is not None else default_validation_rules()
    constraints = list(constraints) if constraints is not None else default_constraints()

    issues = run_validation(
        priorities, opportunities, projects, allocations, constraints, rules, now=now,
    )
    if preserve_resolutions and prior_issues:
        issues = carry_forward_resolutions(issues, prior_issues)

    metrics = compute_quality_metrics(issues)

    output = QualityOutput(
        rules=rules,
        issues=issues,
        metrics=metrics,
        analysis_date=date.today().isoformat(),
        summary=_build_summary(issues, metrics),
    )

    logger.info(
        f"[Agent 05] Done — {metrics.total_issues} open issues "
        f"({metrics.critical_issues} critical), score {metrics.overall_score:.0f}"
    )
    return output


def _build_summary(issues: List[DataQualityIssue], metrics: DataQualityMetrics) -> str:
    """Build summary string (>= 20 chars)."""
    if not issues:
        return "Data Quality: no issues found, overall score 100."
    parts = [
        f"Data Quality: score {metrics.overall_score:.0f}/100 with {metrics.total_issues} open issues",
        f"({metrics.critical_issues} critical, {metrics.warning_issues} warning, "
        f"{metrics.info_issues} info).",
    ]
    if metrics.category_breakdown:
        worst = max(metrics.category_breakdown, key=metrics.category_breakdown.get)
        parts.append(f"Most issues in {worst}.")
    return " ".join(parts)
