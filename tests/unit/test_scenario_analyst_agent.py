"""
Agent 06: Scenario Analyst — Pipeline & Schema Tests
Level 2: Default scenarios, what-if portfolio and sweep over the sample projects.
"""

from __future__ import annotations

import pytest
from pydantic import ValidationError

from capital_agents.agents.scenario_analyst import default_scenarios, run_scenario_pipeline
from capital_agents.schemas.scenario_output import ScenarioOutput, ScenarioParameters

from tests.fixtures.conftest import build_sample_projects


class TestScenarioPipeline:

    @pytest.mark.behavior
    def test_default_scenarios(self):
        assert [s.name for s in default_scenarios()] == ["Conservative", "Balanced", "Aggressive"]

    @pytest.mark.behavior
    def test_sample_run(self):
        output = run_scenario_pipeline(build_sample_projects())
        assert output.baseline.project_count == 4
        assert output.baseline.total_capital == pytest.approx(2250e6)
        conservative, balanced, aggressive = output.scenarios
        assert conservative.diff.removed == ["VAL-002", "VAL-003", "VAL-004"]
        assert conservative.delta_vs_baseline.project_count == -3
        assert balanced.delta_vs_baseline.project_count == 0
        assert aggressive.diff.added == ["VAL-005"]
        assert aggressive.delta_vs_baseline.total_capital == pytest.approx(80e6)

    @pytest.mark.behavior
    def test_what_if_and_sweep(self):
        output = run_scenario_pipeline(build_sample_projects())
        assert output.what_if.selected_ids == ["VAL-001"]
        assert [p.project_count for p in output.risk_sweep] == [3, 4, 5, 5, 5]
        assert "Conservative -3 projects" in output.summary

    @pytest.mark.behavior
    def test_custom_threshold_and_cap(self):
        output = run_scenario_pipeline(
            build_sample_projects(), risk_threshold=70, capital_cap=1e9,
            sweep_thresholds=[30, 100],
        )
        assert output.what_if.selected_ids == ["VAL-001", "VAL-002", "VAL-005"]
        assert [p.project_count for p in output.risk_sweep] == [1, 3]

    @pytest.mark.behavior
    def test_no_projects(self):
        output = run_scenario_pipeline([])
        assert output.baseline.project_count == 0
        assert output.what_if.project_count == 0
        assert all(r.aggregate.project_count == 0 for r in output.scenarios)


class TestScenarioOutputSchema:

    @pytest.mark.schema
    def test_scenario_names_unique(self):
        same = ScenarioParameters(
            name="Balanced", max_risk=50, min_return=18, max_duration_years=7,
        )
        with pytest.raises(ValidationError):
            run_scenario_pipeline(build_sample_projects(), scenarios=[same, same])

    @pytest.mark.schema
    def test_what_if_within_cap(self):
        output = run_scenario_pipeline(build_sample_projects())
        data = output.model_dump()
        data["what_if"]["total_capital"] = data["what_if"]["capital_cap"] + 1
        with pytest.raises(ValidationError):
            ScenarioOutput.model_validate(data)
