"""
Project Validator Tool: Project Builder
Capital Allocation Framework

Pure functions that convert an approved Opportunity into a
ValidatedProject: score + grade, financials derived from fixed multipliers
on investment_range.max, and a fixed-shape business plan (quarterly
projections, risk register, synergy list).

Degenerate ranges (max <= 0) propagate into the derived fields without
raising; the Data Quality Officer reports them.

No LLM, no file I/O.
"""

from __future__ import annotations

import logging
import random
from datetime import datetime
from typing import Iterable, List, Optional, Sequence

from capital_agents.config.constants import (
    CAPEX_DEPLOYMENT_QUARTERS,
    EXPECTED_OUTCOMES,
    GRADE_ORDER,
    IRR_BASE,
    IRR_SCORE_DIVISOR,
    KEY_SUCCESS_FACTORS,
    MARKET_SIZE_RATIO,
    MIRR_BASE,
    MIRR_SCORE_DIVISOR,
    NPV_RATIO,
    OPEX_RATIO,
    PAYBACK_BASE_YEARS,
    PAYBACK_SCORE_DIVISOR,
    PROJECTION_QUARTERS,
    REVENUE_POTENTIAL_RATIO,
)
from capital_agents.exceptions import (
    DuplicateProjectError,
    InvalidOpportunityStateError,
    InvalidTransitionError,
    ProjectNotFoundError,
)
from capital_agents.schemas.opportunity_output import Opportunity, OpportunityStatus
from capital_agents.schemas.priority_output import InvestmentPriority
from capital_agents.schemas.project_output import (
    VALIDATION_TRANSITIONS,
    BusinessPlan,
    InvestmentGrade,
    PipelineMetrics,
    ProjectRisk,
    ProjectSynergy,
    QuarterlyFinancial,
    ValidatedProject,
    ValidationStatus,
)
from capital_agents.tools.composite_scorer import score_opportunity
from capital_agents.tools.grade_classifier import classify_grade

logger = logging.getLogger(__name__)

PROJECT_ID_PREFIX = "VAL"
AUSTRALIA_MARKER = "Australia"


# ---------------------------------------------------------------------------
# Derived fields
# ---------------------------------------------------------------------------

def derive_project_id(opportunity_id: str) -> str:
    """'OPP-007' -> 'VAL-007'. Ids without a dash keep their full text."""
    _, sep, suffix = opportunity_id.partition("-")
    return f"{PROJECT_ID_PREFIX}-{suffix if sep else opportunity_id}"


def unique_project_id(opportunity_id: str, taken: set[str]) -> str:
    """
    derive_project_id, falling back to 'VAL-<full opportunity id>' and then
    a numeric suffix when the short id is already taken.
    """
    candidate = derive_project_id(opportunity_id)
    if candidate not in taken:
        return candidate
    base = f"{PROJECT_ID_PREFIX}-{opportunity_id}"
    candidate, n = base, 2
    while candidate in taken:
        candidate = f"{base}-{n}"
        n += 1
    return candidate


def derive_geography(source: str) -> str:
    return "Australia" if AUSTRALIA_MARKER in source else "India"


def derive_financials(investment_max: float, composite_score: float) -> dict:
    """
    Fixed-multiplier financials.

    payback_years has no floor and goes negative for composites above 200.
    """
    return {
        "capex": investment_max,
        "opex": investment_max * OPEX_RATIO,
        "revenue_potential": investment_max * REVENUE_POTENTIAL_RATIO,
        "npv": investment_max * NPV_RATIO,
        "irr": IRR_BASE + composite_score / IRR_SCORE_DIVISOR,
        "mirr": MIRR_BASE + composite_score / MIRR_SCORE_DIVISOR,
        "payback_years": PAYBACK_BASE_YEARS - composite_score / PAYBACK_SCORE_DIVISOR,
    }


def build_quarterly_financials(investment_max: float) -> List[QuarterlyFinancial]:
    """Five years of quarterly projections; capex deploys over the first 8 quarters."""
    m = investment_max
    deploy_share = 1.0 / CAPEX_DEPLOYMENT_QUARTERS
    rows = []
    for i in range(PROJECTION_QUARTERS):
        rows.append(QuarterlyFinancial(
            year=i // 4 + 1,
            quarter=i % 4 + 1,
            revenue=m * 0.2 * (1 + i * 0.05),
            costs=m * 0.15 * (1 + i * 0.03),
            ebitda=m * 0.05 * (1 + i * 0.07),
            ebitda_margin=25 + i * 0.5,
            cash_flow=m * 0.04 * (1 + i * 0.06),
            capex_deployment=m * deploy_share if i < CAPEX_DEPLOYMENT_QUARTERS else 0.0,
            cumulative_capex=m * min(1.0, (i + 1) * deploy_share),
            roic=12 + i * 0.3,
        ))
    return rows


def build_risk_register(investment_max: float, sponsor: str) -> List[ProjectRisk]:
    return [
        ProjectRisk(
            id="R001",
            category="market",
            description="Market demand volatility",
            probability=40,
            impact=60,
            risk_score=24,
            mitigation="Diversified customer base and flexible operations",
            mitigation_cost=investment_max * 0.02,
            owner=sponsor,
        ),
        ProjectRisk(
            id="R002",
            category="execution",
            description="Project delivery delays",
            probability=30,
            impact=50,
            risk_score=15,
            mitigation="Experienced project team and proven contractors",
            mitigation_cost=investment_max * 0.01,
            owner=sponsor,
        ),
    ]


def build_synergies(investment_max: float, business_unit: str) -> List[ProjectSynergy]:
    return [
        ProjectSynergy(
            id="S001",
            business_unit=business_unit,
            type="revenue",
            description="Cross-selling opportunities with existing customers",
            value_estimate=investment_max * 0.05,
            time_to_realize=18,
            confidence="medium",
            dependencies=["Customer integration", "Sales alignment"],
        ),
        ProjectSynergy(
            id="S002",
            business_unit=business_unit,
            type="cost",
            description="Shared infrastructure and operational synergies",
            value_estimate=investment_max * 0.03,
            time_to_realize=12,
            confidence="high",
            dependencies=["Operational integration"],
        ),
    ]


def build_business_plan(opportunity: Opportunity) -> BusinessPlan:
    m = opportunity.investment_range.max
    return BusinessPlan(
        executive_summary=opportunity.description,
        market_analysis=f"Market analysis for {opportunity.name}",
        market_size=m * MARKET_SIZE_RATIO,
        competitive_landscape=f"Competitive analysis for {opportunity.name}",
        investment_thesis=f"Investment thesis: {opportunity.recommendations}",
        key_success_factors=list(KEY_SUCCESS_FACTORS),
        expected_outcomes=list(EXPECTED_OUTCOMES),
        financials=build_quarterly_financials(m),
        risks=build_risk_register(m, opportunity.sponsor),
        synergies=build_synergies(m, opportunity.source),
    )


# ---------------------------------------------------------------------------
# Conversion
# ---------------------------------------------------------------------------

def build_validated_project(
    opportunity: Opportunity,
    priorities: Sequence[InvestmentPriority] = (),
    rng: Optional[random.Random] = None,
    synergy_override: Optional[float] = None,
    now: Optional[datetime] = None,
) -> ValidatedProject:
    """
    Convert one approved opportunity into a pending ValidatedProject.

    Raises:
        InvalidOpportunityStateError: opportunity is not approved.
    """
    if opportunity.status != OpportunityStatus.APPROVED:
        raise InvalidOpportunityStateError(
            f"Opportunity {opportunity.id} is '{opportunity.status.value}', expected 'approved'"
        )

    now = now or datetime.now()
    breakdown = score_opportunity(
        opportunity, priorities, rng=rng, synergy_override=synergy_override,
    )
    composite = breakdown.composite_score
    risk = opportunity.preliminary_risk_score
    grade = classify_grade(composite, risk)

    return ValidatedProject(
        id=derive_project_id(opportunity.id),
        opportunity_id=opportunity.id,
        name=opportunity.name,
        description=opportunity.description,
        sponsor=opportunity.sponsor,
        business_unit=opportunity.source,
        geography=derive_geography(opportunity.source),
        duration=opportunity.duration,
        **derive_financials(opportunity.investment_range.max, composite),
        composite_score=composite,
        investment_grade=grade,
        risk_score=risk,
        scoring_breakdown=breakdown,
        business_plan=build_business_plan(opportunity),
        validation_status=ValidationStatus.PENDING,
        validation_date=now,
        validated_by="System",
        created_at=now,
        updated_at=now,
    )


def convert_approved_opportunities(
    opportunities: Iterable[Opportunity],
    existing_projects: Sequence[ValidatedProject] = (),
    priorities: Sequence[InvestmentPriority] = (),
    rng: Optional[random.Random] = None,
    synergy_override: Optional[float] = None,
    now: Optional[datetime] = None,
) -> tuple[List[ValidatedProject], List[str]]:
    """
    Convert every approved opportunity that has no project yet.

    Returns:
        (new_projects, skipped_opportunity_ids). Skipped ids are approved
        opportunities that already had a project.

    Raises:
        DuplicateProjectError: existing_projects already reference the same
            opportunity twice. Short project id clashes between distinct
            opportunities fall back to unique_project_id instead.
    """
    converted: dict[str, str] = {}
    for p in existing_projects:
        if p.opportunity_id in converted:
            raise DuplicateProjectError(
                f"Opportunity {p.opportunity_id} already has projects "
                f"{converted[p.opportunity_id]} and {p.id}"
            )
        converted[p.opportunity_id] = p.id
    project_ids = set(converted.values())

    new_projects: List[ValidatedProject] = []
    skipped: List[str] = []
    for opp in opportunities:
        if opp.status != OpportunityStatus.APPROVED:
            continue
        if opp.id in converted:
            skipped.append(opp.id)
            continue
        project = build_validated_project(
            opp, priorities, rng=rng, synergy_override=synergy_override, now=now,
        )
        if project.id in project_ids:
            fallback = unique_project_id(opp.id, project_ids)
            logger.warning(
                f"[ProjectBuilder] {project.id} from {opp.id} is taken, using {fallback}"
            )
            project = project.model_copy(update={"id": fallback})
        converted[opp.id] = project.id
        project_ids.add(project.id)
        new_projects.append(project)

    logger.info(
        f"[ProjectBuilder] Converted {len(new_projects)} opportunities, "
        f"skipped {len(skipped)} already validated"
    )
    return new_projects, skipped


# ---------------------------------------------------------------------------
# Validation workflow
# ---------------------------------------------------------------------------

def transition_validation_status(
    projects: Sequence[ValidatedProject],
    project_id: str,
    new_status: ValidationStatus,
    validated_by: str = "System",
    now: Optional[datetime] = None,
) -> List[ValidatedProject]:
    """
    Return a new project list with one project's status moved forward.

    Raises:
        ProjectNotFoundError: unknown project id.
        InvalidTransitionError: move not allowed from the current status.
    """
    now = now or datetime.now()
    target = next((p for p in projects if p.id == project_id), None)
    if target is None:
        raise ProjectNotFoundError(f"No validated project with id '{project_id}'")

    allowed = VALIDATION_TRANSITIONS[target.validation_status]
    if new_status not in allowed:
        raise InvalidTransitionError(
            f"Cannot move {project_id} from '{target.validation_status.value}' "
            f"to '{new_status.value}'"
        )

    updated = target.model_copy(update={
        "validation_status": new_status,
        "validation_date": now,
        "validated_by": validated_by,
        "updated_at": now,
    })
    return [updated if p.id == project_id else p for p in projects]


def regrade_project(project: ValidatedProject) -> ValidatedProject:
    """Re-derive the grade from the stored composite and risk scores."""
    grade = classify_grade(project.composite_score, project.risk_score)
    if grade == project.investment_grade:
        return project
    return project.model_copy(update={"investment_grade": grade})


# ---------------------------------------------------------------------------
# Views
# ---------------------------------------------------------------------------

SORT_KEYS = {
    "score": lambda p: p.composite_score,
    "grade": lambda p: GRADE_ORDER[p.investment_grade.value],
    "investment": lambda p: p.capex,
    "risk": lambda p: p.risk_score,
}


def sort_projects(
    projects: Sequence[ValidatedProject],
    by: str = "score",
    descending: bool = True,
) -> List[ValidatedProject]:
    if by not in SORT_KEYS:
        raise ValueError(f"sort key must be one of {sorted(SORT_KEYS)}, got '{by}'")
    return sorted(projects, key=SORT_KEYS[by], reverse=descending)


def filter_by_grade(
    projects: Sequence[ValidatedProject],
    grade: Optional[InvestmentGrade] = None,
) -> List[ValidatedProject]:
    """None means all grades."""
    if grade is None:
        return list(projects)
    return [p for p in projects if p.investment_grade == grade]


def compute_grade_distribution(projects: Sequence[ValidatedProject]) -> dict[str, int]:
    dist = {g.value: 0 for g in InvestmentGrade}
    for p in projects:
        dist[p.investment_grade.value] += 1
    return dist


def compute_pipeline_metrics(projects: Sequence[ValidatedProject]) -> PipelineMetrics:
    count = len(projects)
    if count == 0:
        return PipelineMetrics(
            projects_in_validation=0,
            grade_a_count=0,
            total_pipeline_value=0.0,
            average_composite_score=0.0,
            validation_success_rate=0.0,
        )
    investable = sum(
        1 for p in projects if p.investment_grade != InvestmentGrade.NON_INVESTMENT
    )
    return PipelineMetrics(
        projects_in_validation=count,
        grade_a_count=sum(1 for p in projects if p.investment_grade == InvestmentGrade.A),
        total_pipeline_value=sum(p.capex for p in projects),
        average_composite_score=sum(p.composite_score for p in projects) / count,
        validation_success_rate=investable / count * 100,
    )
