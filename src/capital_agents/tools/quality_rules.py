"""
Data Quality Officer Tool: Validation Rules
Capital Allocation Framework

The rule catalogue plus a rule-id keyed dispatch table of real predicate
functions. Each entity pass returns issue drafts (plain dicts) in a fixed
order: priorities -> opportunities -> projects -> allocations. Drafts get
ids and timestamps in build_issues().

Business-rule violations are data, never exceptions. A disabled rule
produces no drafts in any pass.

No LLM, no file I/O.
"""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Callable, Dict, List, Optional, Sequence

from capital_agents.config.constants import (
    AUTO_FIX_AVAILABLE,
    CAPEX_RANGE,
    COMPOSITE_TOLERANCE,
    IRR_RANGE,
    MAX_PAYBACK_YEARS,
    MIN_INVESTMENT_THRESHOLD,
    SCORE_BOUNDS,
    SYNERGY_REQUIRED_CAPEX,
)
from capital_agents.exceptions import RuleNotFoundError
from capital_agents.schemas.allocation_output import (
    AllocationConstraint,
    ConstraintType,
    SectorAllocation,
)
from capital_agents.schemas.opportunity_output import Opportunity
from capital_agents.schemas.priority_output import (
    InvestmentPriority,
    is_weight_valid,
    total_weight,
)
from capital_agents.schemas.project_output import InvestmentGrade, ValidatedProject
from capital_agents.schemas.quality_output import (
    DataQualityIssue,
    RuleCategory,
    Severity,
    ValidationRule,
)
from capital_agents.tools.composite_scorer import recompute_composite
from capital_agents.tools.constraint_validator import is_violated
from capital_agents.tools.grade_classifier import classify_grade

logger = logging.getLogger(__name__)

ISSUE_ID_PREFIX = "DQ"


# ---------------------------------------------------------------------------
# Rule catalogue
# ---------------------------------------------------------------------------

RULE_CATALOGUE: list[dict] = [
    {"id": "FIN-001", "name": "IRR Range Check", "category": "financial",
     "severity": "critical", "description": "IRR must be between 5% and 50%"},
    {"id": "FIN-002", "name": "NPV Positive for Grade A", "category": "financial",
     "severity": "critical", "description": "NPV must be positive for Grade A projects"},
    {"id": "FIN-003", "name": "Payback Period Check", "category": "financial",
     "severity": "warning", "description": "Payback period should be less than investment horizon"},
    {"id": "FIN-004", "name": "CAPEX Reasonableness", "category": "financial",
     "severity": "warning", "description": "CAPEX should be within reasonable bounds"},
    {"id": "COMP-001", "name": "Business Plan Completeness", "category": "completeness",
     "severity": "critical", "description": "All business plans must have executive summary"},
    {"id": "COMP-002", "name": "Risk Assessment Required", "category": "completeness",
     "severity": "warning", "description": "Risk assessments must include mitigation strategies"},
    {"id": "COMP-003", "name": "Synergy Analysis for Large Projects", "category": "completeness",
     "severity": "warning", "description": "Projects >$500M must have synergy analysis"},
    {"id": "COMP-004", "name": "Sponsor Assignment", "category": "completeness",
     "severity": "critical", "description": "All projects must have assigned sponsor"},
    {"id": "CONS-001", "name": "Priority Weights Sum", "category": "consistency",
     "severity": "critical", "description": "Priority weights must sum to 100%",
     "auto_fixable": True},
    {"id": "CONS-002", "name": "Allocation Consistency", "category": "consistency",
     "severity": "warning", "description": "Sector allocations should match project assignments"},
    {"id": "CONS-003", "name": "Investment Grade Consistency", "category": "consistency",
     "severity": "warning", "description": "Investment grade must match composite score"},
    {"id": "ACC-001", "name": "Composite Score Calculation", "category": "accuracy",
     "severity": "warning", "description": "Composite score must match component scores",
     "auto_fixable": True},
    {"id": "ACC-002", "name": "Financial Ratios", "category": "accuracy",
     "severity": "info", "description": "Financial ratios should be within industry norms"},
    {"id": "COMPL-001", "name": "Minimum Investment Threshold", "category": "compliance",
     "severity": "critical", "description": "Projects must meet minimum investment threshold"},
    {"id": "COMPL-002", "name": "Risk Score Bounds", "category": "compliance",
     "severity": "warning", "description": "Risk scores must be between 0 and 100"},
    {"id": "COMPL-003", "name": "Sector Allocation Limits", "category": "compliance",
     "severity": "critical", "description": "Sector allocations must respect constraints"},
]


def default_validation_rules() -> List[ValidationRule]:
    return [ValidationRule(**r) for r in RULE_CATALOGUE]


def toggle_rule(rules: Sequence[ValidationRule], rule_id: str) -> List[ValidationRule]:
    """
    Flip one rule's enabled flag.

    Raises:
        RuleNotFoundError: rule id not in the list.
    """
    if not any(r.id == rule_id for r in rules):
        raise RuleNotFoundError(f"No validation rule with id '{rule_id}'")
    return [
        r.model_copy(update={"enabled": not r.enabled}) if r.id == rule_id else r
        for r in rules
    ]


def _enabled(rules: Sequence[ValidationRule]) -> Dict[str, ValidationRule]:
    return {r.id: r for r in rules if r.enabled}


# ---------------------------------------------------------------------------
# Project predicates: rule id -> (passes, failure message)
# ---------------------------------------------------------------------------

def _irr_in_range(p: ValidatedProject) -> bool:
    lo, hi = IRR_RANGE
    return lo <= p.irr <= hi


def _npv_positive_for_a(p: ValidatedProject) -> bool:
    return p.investment_grade != InvestmentGrade.A or p.npv > 0


def _payback_ok(p: ValidatedProject) -> bool:
    return p.payback_years <= MAX_PAYBACK_YEARS


def _capex_reasonable(p: ValidatedProject) -> bool:
    lo, hi = CAPEX_RANGE
    return lo <= p.capex <= hi


def _has_executive_summary(p: ValidatedProject) -> bool:
    return len(p.business_plan.executive_summary) > 0


def _has_risks(p: ValidatedProject) -> bool:
    return len(p.business_plan.risks) > 0


def _large_has_synergies(p: ValidatedProject) -> bool:
    return p.capex < SYNERGY_REQUIRED_CAPEX or len(p.business_plan.synergies) > 0


def _has_sponsor(p: ValidatedProject) -> bool:
    return len(p.sponsor) > 0


def _grade_consistent(p: ValidatedProject) -> bool:
    return p.investment_grade == classify_grade(p.composite_score, p.risk_score)


def _composite_consistent(p: ValidatedProject) -> bool:
    return abs(recompute_composite(p.scoring_breakdown) - p.composite_score) < COMPOSITE_TOLERANCE


def _ratios_ok(p: ValidatedProject) -> bool:
    return p.opex <= p.capex and p.revenue_potential >= 0


def _meets_min_investment(p: ValidatedProject) -> bool:
    return p.capex >= MIN_INVESTMENT_THRESHOLD


def _risk_in_bounds(p: ValidatedProject) -> bool:
    lo, hi = SCORE_BOUNDS
    return lo <= p.risk_score <= hi


ProjectCheck = tuple[Callable[[ValidatedProject], bool], Callable[[ValidatedProject], str]]

PROJECT_CHECKS: Dict[str, ProjectCheck] = {
    "FIN-001": (
        _irr_in_range,
        lambda p: f"IRR {p.irr:.1f}% is outside acceptable range (5%-50%)",
    ),
    "FIN-002": (
        _npv_positive_for_a,
        lambda p: f"Grade A project has non-positive NPV: {p.npv:,.0f}",
    ),
    "FIN-003": (
        _payback_ok,
        lambda p: f"Payback period {p.payback_years:.1f} years exceeds 10 years",
    ),
    "FIN-004": (
        _capex_reasonable,
        lambda p: f"CAPEX {p.capex:,.0f} is outside reasonable bounds ($1M-$10B)",
    ),
    "COMP-001": (
        _has_executive_summary,
        lambda p: "Missing executive summary in business plan",
    ),
    "COMP-002": (
        _has_risks,
        lambda p: "Missing risk assessment in business plan",
    ),
    "COMP-003": (
        _large_has_synergies,
        lambda p: "Large project (>$500M) missing synergy analysis",
    ),
    "COMP-004": (
        _has_sponsor,
        lambda p: "Missing project sponsor",
    ),
    "CONS-003": (
        _grade_consistent,
        lambda p: (
            f"Investment grade {p.investment_grade.value} inconsistent with "
            f"composite {p.composite_score:.1f} and risk {p.risk_score:.0f}"
        ),
    ),
    "ACC-001": (
        _composite_consistent,
        lambda p: (
            f"Composite score {p.composite_score:.2f} does not match components "
            f"({recompute_composite(p.scoring_breakdown):.2f})"
        ),
    ),
    "ACC-002": (
        _ratios_ok,
        lambda p: "OPEX exceeds CAPEX or revenue potential is negative",
    ),
    "COMPL-001": (
        _meets_min_investment,
        lambda p: f"Project CAPEX {p.capex:,.0f} below minimum threshold ($10M)",
    ),
    "COMPL-002": (
        _risk_in_bounds,
        lambda p: f"Risk score {p.risk_score} is outside valid range (0-100)",
    ),
}


# ---------------------------------------------------------------------------
# Entity passes
# ---------------------------------------------------------------------------

def _draft(
    rule_id: str,
    severity: Severity,
    category: RuleCategory,
    title: str,
    description: str,
    affected_items: List[str],
    auto_fix_suggestion: Optional[str] = None,
) -> dict:
    return {
        "rule_id": rule_id,
        "severity": severity,
        "category": category,
        "title": title,
        "description": description,
        "affected_items": affected_items,
        "auto_fix_suggestion": auto_fix_suggestion,
    }


def check_priorities(
    priorities: Sequence[InvestmentPriority],
    rules: Sequence[ValidationRule],
) -> List[dict]:
    """Weight sum (CONS-001) then missing capital allocation per priority (COMP-001)."""
    enabled = _enabled(rules)
    drafts: List[dict] = []

    if "CONS-001" in enabled and not is_weight_valid(list(priorities)):
        drafts.append(_draft(
            "CONS-001", Severity.CRITICAL, RuleCategory.CONSISTENCY,
            "Priority weights do not sum to 100%",
            f"Total weight is {total_weight(list(priorities)):.2f}%, should be 100%",
            [p.id for p in priorities],
            "Normalize weights to sum to 100%",
        ))

    if "COMP-001" in enabled:
        for p in priorities:
            if p.capital_allocation <= 0:
                drafts.append(_draft(
                    "COMP-001", Severity.WARNING, RuleCategory.COMPLETENESS,
                    "Missing capital allocation",
                    f'Priority "{p.name}" has no capital allocation',
                    [p.id],
                ))
    return drafts


def check_opportunities(
    opportunities: Sequence[Opportunity],
    rules: Sequence[ValidationRule],
) -> List[dict]:
    """Range ordering (ACC-001), score bounds (COMPL-002), sponsor (COMP-004)."""
    enabled = _enabled(rules)
    lo, hi = SCORE_BOUNDS
    drafts: List[dict] = []

    for o in opportunities:
        if "ACC-001" in enabled and o.investment_range.min > o.investment_range.max:
            drafts.append(_draft(
                "ACC-001", Severity.CRITICAL, RuleCategory.ACCURACY,
                "Invalid investment range",
                f'Minimum investment is greater than maximum for "{o.name}"',
                [o.id],
            ))
        if "COMPL-002" in enabled:
            if not lo <= o.strategic_fit_score <= hi:
                drafts.append(_draft(
                    "COMPL-002", Severity.WARNING, RuleCategory.COMPLIANCE,
                    "Strategic fit score out of bounds",
                    f"Strategic fit score {o.strategic_fit_score} is not between 0-100",
                    [o.id],
                ))
            if not lo <= o.preliminary_risk_score <= hi:
                drafts.append(_draft(
                    "COMPL-002", Severity.WARNING, RuleCategory.COMPLIANCE,
                    "Risk score out of bounds",
                    f"Preliminary risk score {o.preliminary_risk_score} is not between 0-100",
                    [o.id],
                ))
        if "COMP-004" in enabled and not o.sponsor:
            drafts.append(_draft(
                "COMP-004", Severity.CRITICAL, RuleCategory.COMPLETENESS,
                "Missing sponsor",
                f'Opportunity "{o.name}" has no assigned sponsor',
                [o.id],
            ))
    return drafts


def check_projects(
    projects: Sequence[ValidatedProject],
    rules: Sequence[ValidationRule],
) -> List[dict]:
    """Every enabled rule with a project predicate, in rule-list order, per project."""
    active = [r for r in rules if r.enabled and r.id in PROJECT_CHECKS]
    drafts: List[dict] = []
    for project in projects:
        for rule in active:
            passes, message = PROJECT_CHECKS[rule.id]
            if passes(project):
                continue
            drafts.append(_draft(
                rule.id, rule.severity, rule.category,
                rule.name,
                message(project),
                [project.id],
                AUTO_FIX_AVAILABLE if rule.auto_fixable else None,
            ))
    return drafts


def check_allocations(
    allocations: Sequence[SectorAllocation],
    constraints: Sequence[AllocationConstraint],
    rules: Sequence[ValidationRule],
) -> List[dict]:
    """
    COMPL-003 per sector: bounds [0, 100], then explicit constraints
    (hard -> critical, soft -> warning). A constraint type with no explicit
    constraint for the sector falls back to the sector's min/max band.
    """
    if "COMPL-003" not in _enabled(rules):
        return []

    drafts: List[dict] = []
    for a in allocations:
        name = a.sector.name
        current = a.current_allocation
        if current < 0 or current > 100:
            drafts.append(_draft(
                "COMPL-003", Severity.CRITICAL, RuleCategory.COMPLIANCE,
                "Invalid sector allocation",
                f"{name} allocation {current:.1f}% is outside valid range",
                [a.sector_id],
            ))

        explicit = [c for c in constraints if c.sector_id == a.sector_id]
        for c in explicit:
            if not is_violated(c, current):
                continue
            is_min = c.constraint_type == ConstraintType.MIN
            kind = "Minimum" if is_min else "Maximum"
            relation = "below minimum" if is_min else "exceeds maximum"
            reason = f" ({c.reason})" if c.reason else ""
            drafts.append(_draft(
                "COMPL-003",
                Severity.CRITICAL if c.is_hard else Severity.WARNING,
                RuleCategory.COMPLIANCE,
                f"{kind} allocation constraint violation",
                f"{name} allocation {current:.1f}% {relation} {c.value:.1f}%{reason}",
                [a.sector_id],
            ))

        types = {c.constraint_type for c in explicit}
        if ConstraintType.MIN not in types and current < a.min_allocation:
            drafts.append(_draft(
                "COMPL-003", Severity.CRITICAL, RuleCategory.COMPLIANCE,
                "Minimum allocation constraint violation",
                f"{name} allocation {current:.1f}% below minimum {a.min_allocation:.1f}%",
                [a.sector_id],
            ))
        if ConstraintType.MAX not in types and current > a.max_allocation:
            drafts.append(_draft(
                "COMPL-003", Severity.WARNING, RuleCategory.COMPLIANCE,
                "Maximum allocation constraint violation",
                f"{name} allocation {current:.1f}% exceeds maximum {a.max_allocation:.1f}%",
                [a.sector_id],
            ))
    return drafts


# ---------------------------------------------------------------------------
# Full run
# ---------------------------------------------------------------------------

def build_issues(drafts: Sequence[dict], now: Optional[datetime] = None) -> List[DataQualityIssue]:
    """Number drafts DQ-0001.. in order; every issue starts open."""
    now = now or datetime.now()
    return [
        DataQualityIssue(id=f"{ISSUE_ID_PREFIX}-{i:04d}", detected_date=now, **d)
        for i, d in enumerate(drafts, start=1)
    ]


def run_validation(
    priorities: Sequence[InvestmentPriority],
    opportunities: Sequence[Opportunity],
    projects: Sequence[ValidatedProject],
    allocations: Sequence[SectorAllocation],
    constraints: Sequence[AllocationConstraint],
    rules: Sequence[ValidationRule],
    now: Optional[datetime] = None,
) -> List[DataQualityIssue]:
    """Fresh issue list in pass order: priorities, opportunities, projects, allocations."""
    drafts = [
        *check_priorities(priorities, rules),
        *check_opportunities(opportunities, rules),
        *check_projects(projects, rules),
        *check_allocations(allocations, constraints, rules),
    ]
    issues = build_issues(drafts, now=now)
    logger.info(
        f"[QualityRules] {len(issues)} issues from "
        f"{sum(1 for r in rules if r.enabled)}/{len(rules)} enabled rules"
    )
    return issues
