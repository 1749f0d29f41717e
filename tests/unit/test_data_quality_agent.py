"""
Agent 05: Data Quality Officer — Pipeline & Schema Tests
Level 2: Full validation run over the sample portfolio.
Level 3: Resolutions carried across runs.

With derived priority capital the sample portfolio yields 10 open issues:
2 missing-sponsor (opportunity + project) and 8 sector allocation issues.
"""

from __future__ import annotations

import pytest
from pydantic import ValidationError

from capital_agents.agents.data_quality_officer import run_quality_pipeline
from capital_agents.agents.priority_planner import run_priority_pipeline
from capital_agents.agents.sector_strategist import run_allocation_pipeline
from capital_agents.schemas.quality_output import IssueStatus, QualityOutput
from capital_agents.tools.quality_rules import toggle_rule, default_validation_rules
from capital_agents.tools.quality_scorer import resolve_issue

from tests.fixtures.conftest import (
    FIXED_NOW,
    build_sample_opportunities,
    build_sample_priorities,
    build_sample_projects,
)


def _inputs():
    priorities = run_priority_pipeline(build_sample_priorities(), 90e9).priorities
    projects = build_sample_projects()
    allocations = run_allocation_pipeline(projects).allocations
    return priorities, build_sample_opportunities(), projects, allocations


def _run(**kwargs):
    kwargs.setdefault("now", FIXED_NOW)
    return run_quality_pipeline(*_inputs(), **kwargs)


class TestQualityPipeline:

    @pytest.mark.behavior
    def test_sample_run(self):
        output = _run()
        m = output.metrics
        assert m.total_issues == 10
        assert (m.critical_issues, m.warning_issues, m.info_issues) == (8, 2, 0)
        assert m.overall_score == 10.0
        assert m.category_breakdown == {"completeness": 2, "compliance": 8}
        assert len(output.rules) == 16
        assert "Most issues in compliance" in output.summary

    @pytest.mark.behavior
    def test_issue_order(self):
        issues = _run().issues
        assert [i.id for i in issues[:2]] == ["DQ-0001", "DQ-0002"]
        assert issues[0].affected_items == ["OPP-005"]
        assert issues[1].affected_items == ["VAL-005"]
        assert all(i.rule_id == "COMPL-003" for i in issues[2:])

    @pytest.mark.behavior
    def test_disabled_rule(self):
        rules = toggle_rule(default_validation_rules(), "COMPL-003")
        output = _run(rules=rules)
        assert output.metrics.total_issues == 2
        assert next(r for r in output.rules if r.id == "COMPL-003").enabled is False

    @pytest.mark.behavior
    def test_rerun_replaces_issues(self):
        first = _run()
        resolved = resolve_issue(first.issues, "DQ-0001", now=FIXED_NOW)
        second = _run(prior_issues=resolved)
        assert all(i.status == IssueStatus.OPEN for i in second.issues)
        assert second.metrics.total_issues == 10

    @pytest.mark.behavior
    def test_preserve_resolutions(self):
        first = _run()
        resolved = resolve_issue(first.issues, "DQ-0001", resolved_by="Data Steward", now=FIXED_NOW)
        second = _run(prior_issues=resolved, preserve_resolutions=True)
        assert second.issues[0].status == IssueStatus.RESOLVED
        assert second.issues[0].resolved_by == "Data Steward"
        assert second.metrics.total_issues == 9
        assert second.metrics.resolved_issues == 1
        assert second.metrics.overall_score == 20.0

    @pytest.mark.behavior
    def test_clean_portfolio(self):
        output = run_quality_pipeline(
            run_priority_pipeline(build_sample_priorities(), 90e9).priorities,
            [], [], [], now=FIXED_NOW,
        )
        assert output.issues == []
        assert output.metrics.overall_score == 100.0
        assert "no issues found" in output.summary


class TestQualityOutputSchema:

    @pytest.mark.schema
    def test_issue_ids_unique(self):
        output = _run()
        with pytest.raises(ValidationError):
            QualityOutput(
                rules=output.rules,
                issues=[output.issues[0], output.issues[0]],
                metrics=output.metrics.model_copy(),
                analysis_date="2025-01-15",
                summary="Data Quality: duplicate issue ids.",
            )
