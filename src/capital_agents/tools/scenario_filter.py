"""
Scenario Analyst Tool: Scenario Filter
Capital Allocation Framework

Pure functions for what-if analysis:
- Threshold filter over ALL validated projects (risk, IRR, duration, synergy)
- Set diff against the grade A/B baseline
- Aggregate deltas between two project sets
- Capital-capped, IRR-ranked what-if portfolio and a risk-threshold sweep

No LLM, no file I/O.
"""

from __future__ import annotations

import logging
import math
from typing import Iterable, List, Optional, Sequence

from capital_agents.config.constants import (
    DEPLOYMENT_RATE_BREAKPOINT,
    DEPLOYMENT_RATE_LARGE,
    DEPLOYMENT_RATE_SMALL,
    DEPLOYMENT_START_YEAR,
    MAX_DEPLOYMENT_QUARTERS,
    MONTHS_PER_YEAR,
    RISK_LEVEL_BANDS,
    RISK_SWEEP_THRESHOLDS,
    SCENARIO_CAPITAL_CAP,
)
from capital_agents.schemas.project_output import ValidatedProject
from capital_agents.schemas.scenario_output import (
    AggregateDelta,
    QuarterlyDeployment,
    RiskDistribution,
    RiskSweepPoint,
    ScenarioAggregate,
    ScenarioDiff,
    ScenarioParameters,
    WhatIfPortfolio,
)
from capital_agents.tools.sector_allocator import allocatable_projects

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Threshold filter
# ---------------------------------------------------------------------------

def passes_scenario(project: ValidatedProject, params: ScenarioParameters) -> bool:
    return (
        project.risk_score <= params.max_risk
        and project.irr >= params.min_return
        and project.duration <= params.max_duration_years * MONTHS_PER_YEAR
        and (not params.require_synergies or len(project.business_plan.synergies) > 0)
    )


def filter_projects(
    projects: Sequence[ValidatedProject],
    params: ScenarioParameters,
) -> List[ValidatedProject]:
    """All four predicates must hold; input order is preserved."""
    return [p for p in projects if passes_scenario(p, params)]


def baseline_projects(projects: Sequence[ValidatedProject]) -> List[ValidatedProject]:
    """The fixed comparison set: grade A/B projects."""
    return allocatable_projects(projects)


# ---------------------------------------------------------------------------
# Comparison
# ---------------------------------------------------------------------------

def diff_against_baseline(
    filtered: Sequence[ValidatedProject],
    baseline: Sequence[ValidatedProject],
) -> ScenarioDiff:
    """Set diff by project id; each list keeps the order of its source set."""
    filtered_ids = [p.id for p in filtered]
    baseline_ids = [p.id for p in baseline]
    in_filtered, in_baseline = set(filtered_ids), set(baseline_ids)
    return ScenarioDiff(
        filtered_ids=filtered_ids,
        baseline_ids=baseline_ids,
        added=[pid for pid in filtered_ids if pid not in in_baseline],
        removed=[pid for pid in baseline_ids if pid not in in_filtered],
        unchanged=[pid for pid in filtered_ids if pid in in_baseline],
    )


def aggregate(projects: Sequence[ValidatedProject]) -> ScenarioAggregate:
    count = len(projects)
    return ScenarioAggregate(
        project_count=count,
        total_capital=sum(p.capex for p in projects),
        mean_irr=sum(p.irr for p in projects) / count if count else 0.0,
    )


def aggregate_delta(base: ScenarioAggregate, other: ScenarioAggregate) -> AggregateDelta:
    """other - base for each aggregate."""
    return AggregateDelta(
        project_count=other.project_count - base.project_count,
        total_capital=other.total_capital - base.total_capital,
        mean_irr=other.mean_irr - base.mean_irr,
    )


def compare_parameterizations(
    projects: Sequence[ValidatedProject],
    base: ScenarioParameters,
    other: ScenarioParameters,
) -> AggregateDelta:
    """Aggregate deltas between two filter parameterizations."""
    return aggregate_delta(
        aggregate(filter_projects(projects, base)),
        aggregate(filter_projects(projects, other)),
    )


# ---------------------------------------------------------------------------
# What-if portfolio
# ---------------------------------------------------------------------------

def select_within_budget(
    projects: Iterable[ValidatedProject],
    capital_cap: float = SCENARIO_CAPITAL_CAP,
) -> List[ValidatedProject]:
    """
    Greedy pick by IRR descending: take each project whose capex still fits.

    A project too big for the remaining budget is skipped, not a stop; later
    smaller projects can still fit. Ties keep input order.
    """
    selected: List[ValidatedProject] = []
    running = 0.0
    for p in sorted(projects, key=lambda p: p.irr, reverse=True):
        if running + p.capex <= capital_cap:
            selected.append(p)
            running += p.capex
    return selected


def capital_weighted_irr(projects: Sequence[ValidatedProject]) -> float:
    total = sum(p.capex for p in projects)
    if total <= 0:
        return 0.0
    return sum(p.irr * p.capex for p in projects) / total


def risk_distribution(projects: Sequence[ValidatedProject]) -> RiskDistribution:
    low_max, medium_max = RISK_LEVEL_BANDS
    return RiskDistribution(
        low=sum(1 for p in projects if p.risk_score <= low_max),
        medium=sum(1 for p in projects if low_max < p.risk_score <= medium_max),
        high=sum(1 for p in projects if p.risk_score > medium_max),
    )


def deployment_rate(total_capital: float) -> float:
    """Monthly deployment: $500M below $5B, otherwise $1.5B."""
    if total_capital < DEPLOYMENT_RATE_BREAKPOINT:
        return DEPLOYMENT_RATE_SMALL
    return DEPLOYMENT_RATE_LARGE


def deployment_months(total_capital: float) -> int:
    if total_capital <= 0:
        return 0
    return math.ceil(total_capital / deployment_rate(total_capital))


def quarterly_deployment(
    total_capital: float,
    start_year: int = DEPLOYMENT_START_YEAR,
) -> List[QuarterlyDeployment]:
    """Spread capital over quarters at three months of deployment each."""
    if total_capital <= 0:
        return []
    per_quarter = deployment_rate(total_capital) * 3
    quarters = min(MAX_DEPLOYMENT_QUARTERS, math.ceil(deployment_months(total_capital) / 3))
    schedule = []
    for i in range(quarters):
        amount = min(per_quarter, total_capital - i * per_quarter)
        if amount > 0:
            schedule.append(QuarterlyDeployment(
                quarter=f"Q{i % 4 + 1} {start_year + i // 4}",
                amount=amount,
            ))
    return schedule


def sector_breakdown(projects: Sequence[ValidatedProject]) -> dict[str, float]:
    """Capital keyed by the first word of the business unit."""
    breakdown: dict[str, float] = {}
    for p in projects:
        words = p.business_unit.split()
        key = words[0] if words else "Unassigned"
        breakdown[key] = breakdown.get(key, 0.0) + p.capex
    return breakdown


def build_what_if_portfolio(
    projects: Sequence[ValidatedProject],
    risk_threshold: float,
    capital_cap: float = SCENARIO_CAPITAL_CAP,
    start_year: int = DEPLOYMENT_START_YEAR,
) -> WhatIfPortfolio:
    """Risk-ceiling filter, then capital-capped IRR-ranked selection."""
    qualifying = [p for p in projects if p.risk_score <= risk_threshold]
    selected = select_within_budget(qualifying, capital_cap)
    total = sum(p.capex for p in selected)
    count = len(selected)

    return WhatIfPortfolio(
        risk_threshold=risk_threshold,
        capital_cap=capital_cap,
        qualifying_ids=[p.id for p in qualifying],
        selected_ids=[p.id for p in selected],
        project_count=count,
        total_capital=total,
        weighted_irr=capital_weighted_irr(selected),
        average_risk=sum(p.risk_score for p in selected) / count if count else 0.0,
        deployment_months=deployment_months(total),
        risk_distribution=risk_distribution(selected),
        sector_breakdown=sector_breakdown(selected),
        quarterly_deployment=quarterly_deployment(total, start_year),
    )


def risk_sweep(
    projects: Sequence[ValidatedProject],
    thresholds: Optional[Sequence[float]] = None,
    capital_cap: float = SCENARIO_CAPITAL_CAP,
) -> List[RiskSweepPoint]:
    """What-if portfolio headline numbers at each risk threshold."""
    points = []
    for t in thresholds if thresholds is not None else RISK_SWEEP_THRESHOLDS:
        portfolio = build_what_if_portfolio(projects, t, capital_cap)
        points.append(RiskSweepPoint(
            risk_threshold=t,
            project_count=portfolio.project_count,
            total_capital=portfolio.total_capital,
            weighted_irr=portfolio.weighted_irr,
        ))
    return points
