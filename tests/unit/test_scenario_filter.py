"""
Scenario Analyst — Scenario Filter Tests
Level 1: Pure function tests against the sample project set.

Sample projects (IRR / risk / months / capex):
    VAL-001 23.75 / 25 / 36 / 150M   A
    VAL-002 22.95 / 35 / 48 / 600M   B
    VAL-003 22.15 / 45 / 60 / 1.2B   B
    VAL-004 22.65 / 40 / 30 / 300M   B
    VAL-005 19.55 / 60 / 24 / 80M    C
"""

from __future__ import annotations

import pytest
from pydantic import ValidationError

from capital_agents.schemas.scenario_output import ScenarioDiff, ScenarioParameters
from capital_agents.tools.scenario_filter import (
    aggregate,
    baseline_projects,
    build_what_if_portfolio,
    compare_parameterizations,
    deployment_months,
    diff_against_baseline,
    filter_projects,
    quarterly_deployment,
    risk_sweep,
    select_within_budget,
)

from tests.fixtures.conftest import build_sample_projects

CONSERVATIVE = ScenarioParameters(
    name="Conservative", max_risk=30, min_return=20, max_duration_years=5,
    require_synergies=True,
)
BALANCED = ScenarioParameters(
    name="Balanced", max_risk=50, min_return=18, max_duration_years=7,
)
AGGRESSIVE = ScenarioParameters(
    name="Aggressive", max_risk=70, min_return=15, max_duration_years=10,
)


def _ids(projects):
    return [p.id for p in projects]


class TestFilter:

    @pytest.mark.schema
    def test_baseline_is_grade_a_and_b(self):
        assert _ids(baseline_projects(build_sample_projects())) == [
            "VAL-001", "VAL-002", "VAL-003", "VAL-004",
        ]

    @pytest.mark.schema
    @pytest.mark.parametrize("params,expected", [
        (CONSERVATIVE, ["VAL-001"]),
        (BALANCED, ["VAL-001", "VAL-002", "VAL-003", "VAL-004"]),
        (AGGRESSIVE, ["VAL-001", "VAL-002", "VAL-003", "VAL-004", "VAL-005"]),
    ])
    def test_named_scenarios(self, params, expected):
        assert _ids(filter_projects(build_sample_projects(), params)) == expected

    @pytest.mark.schema
    def test_thresholds_are_inclusive(self):
        params = ScenarioParameters(
            name="Edge", max_risk=25, min_return=23.7, max_duration_years=3,
        )
        assert _ids(filter_projects(build_sample_projects(), params)) == ["VAL-001"]

    @pytest.mark.schema
    def test_filter_reaches_grade_c(self):
        """The filter runs over all projects, not just the baseline."""
        params = ScenarioParameters(
            name="Short", max_risk=100, min_return=0, max_duration_years=2,
        )
        assert _ids(filter_projects(build_sample_projects(), params)) == ["VAL-005"]


class TestComparison:

    @pytest.mark.schema
    def test_conservative_diff(self):
        projects = build_sample_projects()
        diff = diff_against_baseline(
            filter_projects(projects, CONSERVATIVE), baseline_projects(projects),
        )
        assert diff.added == []
        assert diff.removed == ["VAL-002", "VAL-003", "VAL-004"]
        assert diff.unchanged == ["VAL-001"]

    @pytest.mark.schema
    def test_aggressive_diff(self):
        projects = build_sample_projects()
        diff = diff_against_baseline(
            filter_projects(projects, AGGRESSIVE), baseline_projects(projects),
        )
        assert diff.added == ["VAL-005"]
        assert diff.removed == []

    @pytest.mark.schema
    def test_diff_partition_enforced(self):
        with pytest.raises(ValidationError):
            ScenarioDiff(
                filtered_ids=["VAL-001"], baseline_ids=["VAL-001"],
                added=["VAL-001"], removed=["VAL-001"], unchanged=[],
            )

    @pytest.mark.schema
    def test_baseline_aggregate(self):
        agg = aggregate(baseline_projects(build_sample_projects()))
        assert agg.project_count == 4
        assert agg.total_capital == pytest.approx(2250e6)
        assert agg.mean_irr == pytest.approx(22.875)

    @pytest.mark.schema
    def test_empty_aggregate(self):
        agg = aggregate([])
        assert agg.project_count == 0
        assert agg.mean_irr == 0.0

    @pytest.mark.schema
    def test_parameterization_delta(self):
        delta = compare_parameterizations(build_sample_projects(), BALANCED, AGGRESSIVE)
        assert delta.project_count == 1
        assert delta.total_capital == pytest.approx(80e6)
        assert delta.mean_irr == pytest.approx((91.5 + 19.55) / 5 - 22.875)


class TestWhatIf:

    @pytest.mark.schema
    def test_default_threshold(self):
        w = build_what_if_portfolio(build_sample_projects(), 25)
        assert w.selected_ids == ["VAL-001"]
        assert w.total_capital == pytest.approx(150e6)
        assert w.deployment_months == 1
        assert [(q.quarter, q.amount) for q in w.quarterly_deployment] == [("Q1 2025", 150e6)]

    @pytest.mark.schema
    def test_threshold_fifty(self):
        w = build_what_if_portfolio(build_sample_projects(), 50)
        assert w.project_count == 4
        assert w.total_capital == pytest.approx(2250e6)
        assert w.deployment_months == 5
        assert [(q.quarter, q.amount) for q in w.quarterly_deployment] == [
            ("Q1 2025", 1.5e9), ("Q2 2025", 750e6),
        ]
        assert w.sector_breakdown == {
            "Adani": pytest.approx(1950e6), "AdaniConneX": pytest.approx(300e6),
        }

    @pytest.mark.schema
    def test_budget_skips_instead_of_stopping(self):
        """VAL-004 and VAL-003 do not fit in $1B; the smaller VAL-005 still does."""
        w = build_what_if_portfolio(build_sample_projects(), 70, capital_cap=1e9)
        assert w.selected_ids == ["VAL-001", "VAL-002", "VAL-005"]
        assert w.total_capital == pytest.approx(830e6)
        assert w.total_capital <= w.capital_cap

    @pytest.mark.schema
    def test_selection_is_irr_ranked(self):
        selected = select_within_budget(build_sample_projects(), 10e9)
        assert _ids(selected) == ["VAL-001", "VAL-002", "VAL-004", "VAL-003", "VAL-005"]

    @pytest.mark.schema
    def test_risk_distribution(self):
        w = build_what_if_portfolio(build_sample_projects(), 70)
        assert (w.risk_distribution.low, w.risk_distribution.medium,
                w.risk_distribution.high) == (1, 4, 0)

    @pytest.mark.schema
    def test_weighted_irr(self):
        w = build_what_if_portfolio(build_sample_projects(), 35)
        expected = (23.75 * 150e6 + 22.95 * 600e6) / 750e6
        assert w.weighted_irr == pytest.approx(expected)

    @pytest.mark.schema
    def test_nothing_qualifies(self):
        w = build_what_if_portfolio(build_sample_projects(), 10)
        assert w.project_count == 0
        assert w.weighted_irr == 0.0
        assert w.quarterly_deployment == []

    @pytest.mark.schema
    def test_risk_sweep(self):
        points = risk_sweep(build_sample_projects())
        assert [p.risk_threshold for p in points] == [40, 50, 60, 70, 80]
        assert [p.project_count for p in points] == [3, 4, 5, 5, 5]


class TestDeployment:

    @pytest.mark.schema
    @pytest.mark.parametrize("capital,months", [
        (0, 0),
        (150e6, 1),
        (2250e6, 5),
        (5e9, 4),
        (20e9, 14),
    ])
    def test_deployment_months(self, capital, months):
        assert deployment_months(capital) == months

    @pytest.mark.schema
    def test_large_schedule_rolls_into_next_year(self):
        schedule = quarterly_deployment(20e9)
        assert [q.quarter for q in schedule] == [
            "Q1 2025", "Q2 2025", "Q3 2025", "Q4 2025", "Q1 2026",
        ]
        assert sum(q.amount for q in schedule) == pytest.approx(20e9)
        assert schedule[-1].amount == pytest.approx(2e9)
