"""
Agent 03: Project Validator
Investment-Grade Conversion — Capital Allocation Framework

Receives opportunities (only approved ones are converted), the projects
already validated and the current priorities.
Produces ValidationOutput with:
- Existing projects plus one new ValidatedProject per newly approved
  opportunity (composite score, grade, derived financials, business plan)
- Grade distribution and pipeline metrics over the whole project list

The synergy component of the composite score is random. Pass a seed (or
an rng) for reproducible runs, or synergy_override to pin it.
"""

from __future__ import annotations

import logging
import random
from datetime import date, datetime
from typing import List, Optional, Sequence

from capital_agents.schemas.opportunity_output import Opportunity
from capital_agents.schemas.priority_output import InvestmentPriority
from capital_agents.schemas.project_output import (
    PipelineMetrics,
    ValidatedProject,
    ValidationOutput,
)
from capital_agents.tools.project_builder import (
    compute_grade_distribution,
    compute_pipeline_metrics,
    convert_approved_opportunities,
    sort_projects,
)

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Deterministic Pipeline
# ---------------------------------------------------------------------------

def run_validation_pipeline(
    opportunities: Sequence[Opportunity],
    existing_projects: Sequence[ValidatedProject] = (),
    priorities: Sequence[InvestmentPriority] = (),
    seed: Optional[int] = None,
    rng: Optional[random.Random] = None,
    synergy_override: Optional[float] = None,
    now: Optional[datetime] = None,
) -> ValidationOutput:
    """
    Convert newly approved opportunities and summarise the project pipeline.

    Args:
        opportunities: All opportunities; non-approved ones are ignored
        existing_projects: Projects validated in earlier runs
        priorities: Current priorities (scoring context)
        seed: Seed for a local random.Random when rng is not given
        rng: Random source for the synergy draw
        synergy_override: Fixed synergy score, bypasses the draw

    Returns:
        Validated ValidationOutput

    Raises:
        DuplicateProjectError: see convert_approved_opportunities
    """
    logger.info(
        f"[Agent 03] Running Project Validator pipeline "
        f"({len(opportunities)} opportunities, {len(existing_projects)} existing projects) ..."
    )

    if rng is None and seed is not None:
        rng = random.Random(seed)

    # Step 1: Convert approved opportunities without a project
    new_projects, skipped = convert_approved_opportunities(
        opportunities,
        existing_projects=existing_projects,
        priorities=priorities,
        rng=rng,
        synergy_override=synergy_override,
        now=now,
    )
    for p in new_projects:
        logger.info(
            f"[Agent 03] {p.id}: composite {p.composite_score:.1f}, "
            f"risk {p.risk_score:.0f} -> grade {p.investment_grade.value}"
        )

    # Step 2: Pipeline views
    projects: List[ValidatedProject] = [*existing_projects, *new_projects]
    distribution = compute_grade_distribution(projects)
    metrics = compute_pipeline_metrics(projects)

    output = ValidationOutput(
        projects=projects,
        new_project_ids=[p.id for p in new_projects],
        skipped_opportunity_ids=skipped,
        grade_distribution=distribution,
        metrics=metrics,
        analysis_date=date.today().isoformat(),
        summary=_build_summary(projects, new_projects, distribution, metrics),
    )

    logger.info(
        f"[Agent 03] Done — {len(new_projects)} new, {len(projects)} total, "
        f"{metrics.grade_a_count} grade A"
    )
    return output


# ---------------------------------------------------------------------------
# String builders
# ---------------------------------------------------------------------------

def _build_summary(
    projects: List[ValidatedProject],
    new_projects: List[ValidatedProject],
    distribution: dict[str, int],
    metrics: PipelineMetrics,
) -> str:
    """Build summary string (>= 20 chars)."""
    grades = ", ".join(f"{g}: {n}" for g, n in distribution.items() if n)
    parts = [
        f"Project Validation: {len(new_projects)} new, {len(projects)} total projects.",
    ]
    if projects:
        best = sort_projects(projects, by="score")[0]
        parts.append(f"Grades {grades}.")
        parts.append(
            f"Pipeline ${metrics.total_pipeline_value / 1e6:,.0f}M, "
            f"top score {best.composite_score:.1f} ({best.name})."
        )
    return " ".join(parts)
