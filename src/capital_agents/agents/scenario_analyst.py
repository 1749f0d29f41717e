"""
Agent 06: Scenario Analyst
What-If Analysis — Capital Allocation Framework

Receives all validated projects.
Produces ScenarioOutput with:
- Each named scenario's filtered set diffed against the grade A/B baseline
- Aggregate deltas (count, capital, mean IRR) vs the baseline
- A capital-capped what-if portfolio under a risk ceiling
- A risk-threshold sweep of the what-if portfolio
"""

from __future__ import annotations

import logging
from datetime import date
from typing import List, Optional, Sequence

from capital_agents.config.constants import (
    DEFAULT_RISK_THRESHOLD,
    DEFAULT_SCENARIOS,
    SCENARIO_CAPITAL_CAP,
)
from capital_agents.schemas.project_output import ValidatedProject
from capital_agents.schemas.scenario_output import (
    ScenarioAggregate,
    ScenarioOutput,
    ScenarioParameters,
    ScenarioResult,
    WhatIfPortfolio,
)
from capital_agents.tools.scenario_filter import (
    aggregate,
    aggregate_delta,
    baseline_projects,
    build_what_if_portfolio,
    diff_against_baseline,
    filter_projects,
    risk_sweep,
)

logger = logging.getLogger(__name__)


def default_scenarios() -> List[ScenarioParameters]:
    return [ScenarioParameters(**s) for s in DEFAULT_SCENARIOS]


# ---------------------------------------------------------------------------
# Deterministic Pipeline
# ---------------------------------------------------------------------------

def run_scenario_pipeline(
    projects: Sequence[ValidatedProject],
    scenarios: Optional[Sequence[ScenarioParameters]] = None,
    risk_threshold: float = DEFAULT_RISK_THRESHOLD,
    capital_cap: float = SCENARIO_CAPITAL_CAP,
    sweep_thresholds: Optional[Sequence[float]] = None,
) -> ScenarioOutput:
    """
    Run the deterministic scenario analysis pipeline.

    Args:
        projects: All validated projects (scenarios re-filter every grade)
        scenarios: Threshold sets, defaults to Conservative/Balanced/Aggressive
        risk_threshold: Risk ceiling for the what-if portfolio
        capital_cap: Budget for the what-if portfolio
        sweep_thresholds: Risk ceilings for the sweep

    Returns:
        Validated ScenarioOutput
    """
    logger.info(f"[Agent 06] Running Scenario Analyst pipeline over {len(projects)} projects ...")

    scenarios = list(scenarios) if scenarios is not None else default_scenarios()
    baseline = baseline_projects(projects)
    baseline_agg = aggregate(baseline)

    # Step 1: Named scenarios vs baseline
    results: List[ScenarioResult] = []
    for params in scenarios:
        filtered = filter_projects(projects, params)
        agg = aggregate(filtered)
        results.append(ScenarioResult(
            parameters=params,
            diff=diff_against_baseline(filtered, baseline),
            aggregate=agg,
            delta_vs_baseline=aggregate_delta(baseline_agg, agg),
        ))
        logger.info(
            f"[Agent 06] {params.name}: {agg.project_count} projects, "
            f"${agg.total_capital / 1e6:,.0f}M, mean IRR {agg.mean_irr:.1f}%"
        )

    # Step 2: What-if portfolio and sweep
    what_if = build_what_if_portfolio(projects, risk_threshold, capital_cap)
    sweep = risk_sweep(projects, sweep_thresholds, capital_cap)

    output = ScenarioOutput(
        baseline=baseline_agg,
        scenarios=results,
        what_if=what_if,
        risk_sweep=sweep,
        analysis_date=date.today().isoformat(),
        summary=_build_summary(baseline_agg, results, what_if),
    )

    logger.info(
        f"[Agent 06] Done — {len(results)} scenarios, what-if selected "
        f"{what_if.project_count} projects (${what_if.total_capital / 1e9:.2f}B)"
    )
    return output


# ---------------------------------------------------------------------------
# String builders
# ---------------------------------------------------------------------------

def _build_summary(
    baseline: ScenarioAggregate,
    results: List[ScenarioResult],
    what_if: WhatIfPortfolio,
) -> str:
    """Build summary string (>= 20 chars)."""
    parts = [f"Scenario Analysis: baseline {baseline.project_count} A/B projects."]
    for r in results:
        d = r.delta_vs_baseline
        parts.append(f"{r.parameters.name} {d.project_count:+d} projects.")
    parts.append(
        f"What-if at risk <= {what_if.risk_threshold:.0f}: {what_if.project_count} projects, "
        f"weighted IRR {what_if.weighted_irr:.1f}%."
    )
    return " ".join(parts)
