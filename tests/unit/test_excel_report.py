"""
Excel Report Tests
Level 2: Workbooks written to tmp_path and read back with pandas/openpyxl.
"""

from __future__ import annotations

from datetime import date

import pandas as pd
import pytest
from openpyxl import load_workbook

from capital_agents.agents.data_quality_officer import run_quality_pipeline
from capital_agents.agents.priority_planner import run_priority_pipeline
from capital_agents.agents.project_validator import run_validation_pipeline
from capital_agents.agents.scenario_analyst import run_scenario_pipeline
from capital_agents.agents.sector_strategist import run_allocation_pipeline
from capital_agents.exceptions import OutputWriteError
from capital_agents.reports.excel_report import (
    write_allocation_excel,
    write_quality_excel,
    write_scenario_excel,
    write_validation_excel,
)

from tests.fixtures.conftest import (
    FIXED_NOW,
    SYNERGY,
    build_sample_opportunities,
    build_sample_priorities,
    build_sample_projects,
)

TODAY = date.today().isoformat()


def _sheets(path):
    return pd.read_excel(path, sheet_name=None)


class TestValidationWorkbook:

    @pytest.mark.behavior
    def test_sheets_and_rows(self, tmp_path):
        output = run_validation_pipeline(
            build_sample_opportunities(), synergy_override=SYNERGY, now=FIXED_NOW,
        )
        path = write_validation_excel(output, tmp_path)
        assert path.name == f"agent03_projects_{TODAY}.xlsx"
        sheets = _sheets(path)
        assert list(sheets) == ["Summary", "Projects", "Risks"]
        assert list(sheets["Projects"]["Grade"]) == ["A", "B", "B", "B", "C"]
        assert len(sheets["Risks"]) == 10

    @pytest.mark.behavior
    def test_grade_cells_coloured(self, tmp_path):
        output = run_validation_pipeline(
            build_sample_opportunities(), synergy_override=SYNERGY, now=FIXED_NOW,
        )
        ws = load_workbook(write_validation_excel(output, tmp_path))["Projects"]
        headers = [c.value for c in ws[1]]
        grade_col = headers.index("Grade") + 1
        assert ws.cell(row=2, column=grade_col).fill.start_color.rgb.endswith("006400")

    @pytest.mark.behavior
    def test_empty_sheets_skipped(self, tmp_path):
        output = run_validation_pipeline([])
        assert list(_sheets(write_validation_excel(output, tmp_path))) == ["Summary"]


class TestStageWorkbooks:

    @pytest.mark.behavior
    def test_allocation_workbook(self, tmp_path):
        output = run_allocation_pipeline(build_sample_projects())
        sheets = _sheets(write_allocation_excel(output, tmp_path))
        assert list(sheets) == ["Summary", "Allocations", "Violations"]
        assert len(sheets["Allocations"]) == 9
        assert list(sheets["Violations"]["Status"]) == ["critical", "warning"]

    @pytest.mark.behavior
    def test_quality_workbook(self, tmp_path):
        projects = build_sample_projects()
        output = run_quality_pipeline(
            run_priority_pipeline(build_sample_priorities(), 90e9).priorities,
            build_sample_opportunities(),
            projects,
            run_allocation_pipeline(projects).allocations,
            now=FIXED_NOW,
        )
        path = write_quality_excel(output, tmp_path)
        assert path.name == f"agent05_quality_{TODAY}.xlsx"
        sheets = _sheets(path)
        assert len(sheets["Issues"]) == 10
        assert len(sheets["Rules"]) == 16

    @pytest.mark.behavior
    def test_scenario_workbook(self, tmp_path):
        output = run_scenario_pipeline(build_sample_projects())
        sheets = _sheets(write_scenario_excel(output, tmp_path))
        assert list(sheets) == ["Summary", "Scenarios", "Deployment", "Risk Sweep"]
        assert list(sheets["Scenarios"]["Scenario"]) == [
            "Baseline (A/B)", "Conservative", "Balanced", "Aggressive",
        ]
        assert len(sheets["Risk Sweep"]) == 5

    @pytest.mark.behavior
    def test_unwritable_directory(self, tmp_path):
        blocker = tmp_path / "blocker"
        blocker.write_text("", encoding="utf-8")
        output = run_scenario_pipeline([])
        with pytest.raises(OutputWriteError):
            write_scenario_excel(output, blocker)
