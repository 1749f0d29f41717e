"""
Excel reports for stage outputs.

One workbook per stage, written with pandas + openpyxl, category columns
colour-filled by value. Filenames carry the analysis date.
"""

from __future__ import annotations

import logging
from datetime import date
from pathlib import Path

import pandas as pd
from openpyxl.styles import Font, PatternFill

from capital_agents.exceptions import OutputWriteError
from capital_agents.schemas.allocation_output import AllocationOutput
from capital_agents.schemas.project_output import ValidationOutput
from capital_agents.schemas.quality_output import QualityOutput
from capital_agents.schemas.scenario_output import ScenarioOutput

logger = logging.getLogger(__name__)


# --- Color fill definitions ---
_DARK_GREEN = PatternFill(start_color="006400", end_color="006400", fill_type="solid")
_LIGHT_GREEN = PatternFill(start_color="90EE90", end_color="90EE90", fill_type="solid")
_YELLOW = PatternFill(start_color="FFFF00", end_color="FFFF00", fill_type="solid")
_ORANGE = PatternFill(start_color="FFA500", end_color="FFA500", fill_type="solid")
_RED = PatternFill(start_color="FF0000", end_color="FF0000", fill_type="solid")
_WHITE_FONT = Font(color="FFFFFF")

# Map column header -> {cell value -> (fill, use_white_font)}
_COLOR_MAP = {
    "Grade": {
        "A": (_DARK_GREEN, True),
        "B": (_LIGHT_GREEN, False),
        "C": (_YELLOW, False),
        "Non-Investment": (_RED, True),
    },
    "Status": {
        "ok": (_LIGHT_GREEN, False),
        "warning": (_ORANGE, False),
        "critical": (_RED, True),
    },
    "Severity": {
        "critical": (_RED, True),
        "warning": (_ORANGE, False),
        "info": (_YELLOW, False),
    },
}


def _apply_color_formatting(ws) -> None:
    """Apply color fills to category columns based on cell values."""
    header_map = {}
    for col_idx in range(1, ws.max_column + 1):
        header = ws.cell(row=1, column=col_idx).value
        if header in _COLOR_MAP:
            header_map[col_idx] = _COLOR_MAP[header]

    for row_idx in range(2, ws.max_row + 1):
        for col_idx, value_map in header_map.items():
            cell = ws.cell(row=row_idx, column=col_idx)
            if cell.value in value_map:
                fill, use_white = value_map[cell.value]
                cell.fill = fill
                if use_white:
                    cell.font = _WHITE_FONT


def _write_sheets(filepath: Path, sheets: dict[str, pd.DataFrame]) -> Path:
    """Write non-empty frames (Summary always) and colour every sheet."""
    try:
        filepath.parent.mkdir(parents=True, exist_ok=True)
        with pd.ExcelWriter(filepath, engine="openpyxl") as writer:
            for name, df in sheets.items():
                if name == "Summary" or not df.empty:
                    df.to_excel(writer, sheet_name=name, index=False)
            for name in writer.book.sheetnames:
                _apply_color_formatting(writer.book[name])
    except OSError as e:
        raise OutputWriteError(f"Could not write {filepath}: {e}") from e
    logger.info(f"[ExcelReport] Wrote {filepath}")
    return filepath


def _summary_frame(rows: list[tuple[str, object]]) -> pd.DataFrame:
    return pd.DataFrame([{"Field": k, "Value": v} for k, v in rows])


# ---------------------------------------------------------------------------
# Stage workbooks
# ---------------------------------------------------------------------------

def write_validation_excel(output: ValidationOutput, out_path: Path) -> Path:
    """Agent 03 projects, grades and business plan risks."""
    filepath = Path(out_path) / f"agent03_projects_{date.today().isoformat()}.xlsx"

    project_rows = []
    risk_rows = []
    for p in output.projects:
        project_rows.append({
            "ID": p.id,
            "Opportunity": p.opportunity_id,
            "Name": p.name,
            "Business Unit": p.business_unit,
            "Geography": p.geography,
            "Sponsor": p.sponsor,
            "CAPEX": p.capex,
            "NPV": p.npv,
            "IRR %": round(p.irr, 2),
            "MIRR %": round(p.mirr, 2),
            "Payback (yrs)": round(p.payback_years, 2),
            "Composite": round(p.composite_score, 1),
            "Risk": p.risk_score,
            "Grade": p.investment_grade.value,
            "Validation": p.validation_status.value,
        })
        for r in p.business_plan.risks:
            risk_rows.append({
                "Project": p.id,
                "Risk ID": r.id,
                "Category": r.category,
                "Description": r.description,
                "Probability": r.probability,
                "Impact": r.impact,
                "Mitigation": r.mitigation,
                "Mitigation Cost": r.mitigation_cost,
                "Owner": r.owner,
            })

    m = output.metrics
    summary = _summary_frame([
        ("Analysis Date", output.analysis_date),
        ("Projects", m.projects_in_validation),
        ("New This Run", len(output.new_project_ids)),
        ("Grade A", m.grade_a_count),
        ("Pipeline Value", m.total_pipeline_value),
        ("Average Composite", round(m.average_composite_score, 1)),
        ("Success Rate %", round(m.validation_success_rate, 1)),
        ("Summary", output.summary),
    ])
    return _write_sheets(filepath, {
        "Summary": summary,
        "Projects": pd.DataFrame(project_rows),
        "Risks": pd.DataFrame(risk_rows),
    })


def write_allocation_excel(output: AllocationOutput, out_path: Path) -> Path:
    """Agent 04 sector allocations and constraint violations."""
    filepath = Path(out_path) / f"agent04_allocations_{date.today().isoformat()}.xlsx"

    alloc_rows = [{
        "Sector ID": a.sector_id,
        "Sector": a.sector.name,
        "Current %": round(a.current_allocation, 2),
        "Target %": a.target_allocation,
        "Min %": a.min_allocation,
        "Max %": a.max_allocation,
        "Capital": a.allocated_capital,
        "Projects": a.project_count,
        "Avg IRR %": round(a.performance.avg_irr, 2),
        "Avg Risk": round(a.performance.avg_risk, 1),
        "Status": a.status.value,
    } for a in output.allocations]

    violation_rows = [{
        "Sector": v.sector_name,
        "Type": v.constraint.constraint_type.value,
        "Limit %": v.constraint.value,
        "Current %": round(v.current_allocation, 2),
        "Hard": v.constraint.is_hard,
        "Reason": v.constraint.reason,
        "Status": v.severity.value,
    } for v in output.violations]

    m = output.metrics
    summary = _summary_frame([
        ("Analysis Date", output.analysis_date),
        ("Total Capital", m.total_capital),
        ("Allocated", m.total_allocated),
        ("Available", m.available_capital),
        ("Largest Concentration %", round(m.largest_concentration, 2)),
        ("Balanced", m.is_balanced),
        ("Unclassified Projects", ", ".join(output.unclassified_project_ids)),
        ("Summary", output.summary),
    ])
    return _write_sheets(filepath, {
        "Summary": summary,
        "Allocations": pd.DataFrame(alloc_rows),
        "Violations": pd.DataFrame(violation_rows),
    })


def write_quality_excel(output: QualityOutput, out_path: Path) -> Path:
    """Agent 05 issues and rule catalogue."""
    filepath = Path(out_path) / f"agent05_quality_{date.today().isoformat()}.xlsx"

    issue_rows = [{
        "ID": i.id,
        "Rule": i.rule_id,
        "Severity": i.severity.value,
        "Category": i.category.value,
        "Title": i.title,
        "Description": i.description,
        "Affected": ", ".join(i.affected_items),
        "State": i.status.value,
        "Auto-fix": i.auto_fix_suggestion or "",
    } for i in output.issues]

    rule_rows = [{
        "Rule": r.id,
        "Name": r.name,
        "Category": r.category.value,
        "Severity": r.severity.value,
        "Enabled": r.enabled,
        "Auto-fixable": r.auto_fixable,
    } for r in output.rules]

    m = output.metrics
    summary = _summary_frame([
        ("Analysis Date", output.analysis_date),
        ("Overall Score", m.overall_score),
        ("Open Issues", m.total_issues),
        ("Critical", m.critical_issues),
        ("Warning", m.warning_issues),
        ("Info", m.info_issues),
        ("Resolved", m.resolved_issues),
        ("Summary", output.summary),
    ])
    return _write_sheets(filepath, {
        "Summary": summary,
        "Issues": pd.DataFrame(issue_rows),
        "Rules": pd.DataFrame(rule_rows),
    })


def write_scenario_excel(output: ScenarioOutput, out_path: Path) -> Path:
    """Agent 06 scenario comparison, what-if selection and risk sweep."""
    filepath = Path(out_path) / f"agent06_scenarios_{date.today().isoformat()}.xlsx"

    b = output.baseline
    scenario_rows = [{
        "Scenario": "Baseline (A/B)",
        "Projects": b.project_count,
        "Capital": b.total_capital,
        "Mean IRR %": round(b.mean_irr, 2),
        "Added": "",
        "Removed": "",
    }]
    for r in output.scenarios:
        scenario_rows.append({
            "Scenario": r.parameters.name,
            "Projects": r.aggregate.project_count,
            "Capital": r.aggregate.total_capital,
            "Mean IRR %": round(r.aggregate.mean_irr, 2),
            "Added": ", ".join(r.diff.added),
            "Removed": ", ".join(r.diff.removed),
        })

    w = output.what_if
    deployment_rows = [
        {"Quarter": q.quarter, "Amount": q.amount} for q in w.quarterly_deployment
    ]
    sweep_rows = [{
        "Risk Threshold": s.risk_threshold,
        "Projects": s.project_count,
        "Capital": s.total_capital,
        "Weighted IRR %": round(s.weighted_irr, 2),
    } for s in output.risk_sweep]

    summary = _summary_frame([
        ("Analysis Date", output.analysis_date),
        ("What-if Risk Threshold", w.risk_threshold),
        ("What-if Capital Cap", w.capital_cap),
        ("Selected Projects", ", ".join(w.selected_ids)),
        ("Selected Capital", w.total_capital),
        ("Weighted IRR %", round(w.weighted_irr, 2)),
        ("Deployment Months", w.deployment_months),
        ("Summary", output.summary),
    ])
    return _write_sheets(filepath, {
        "Summary": summary,
        "Scenarios": pd.DataFrame(scenario_rows),
        "Deployment": pd.DataFrame(deployment_rows),
        "Risk Sweep": pd.DataFrame(sweep_rows),
    })
