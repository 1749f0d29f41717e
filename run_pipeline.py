"""Run the Capital Allocation Pipeline and write output to Excel.

Usage:
    python run_pipeline.py                                   # sample data or saved state
    python run_pipeline.py --state output/state.json         # explicit state file
    python run_pipeline.py --priorities p.csv --opportunities o.xlsx
    python run_pipeline.py --seed 42 --max-risk 40 --output results
"""

import argparse
import logging
import sys
from datetime import datetime
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent / "src"))

from dotenv import load_dotenv
load_dotenv()

import pandas as pd

from capital_agents.agents.data_quality_officer import run_quality_pipeline
from capital_agents.agents.opportunity_desk import run_opportunity_pipeline
from capital_agents.agents.priority_planner import run_priority_pipeline
from capital_agents.agents.project_validator import run_validation_pipeline
from capital_agents.agents.scenario_analyst import run_scenario_pipeline
from capital_agents.agents.sector_strategist import run_allocation_pipeline
from capital_agents.config.constants import DEFAULT_RISK_THRESHOLD
from capital_agents.config.settings import Settings, load_settings
from capital_agents.exceptions import CapitalAgentsException
from capital_agents.reports.excel_report import (
    write_allocation_excel,
    write_quality_excel,
    write_scenario_excel,
    write_validation_excel,
)
from capital_agents.schemas.app_state import AppState
from capital_agents.schemas.opportunity_output import (
    InvestmentRange,
    Opportunity,
    OpportunityStatus,
)
from capital_agents.schemas.priority_output import InvestmentPriority, RiskAppetite
from capital_agents.tools.row_importer import ImportResult, import_opportunities, import_priorities
from capital_agents.tools.state_store import JsonStateStore


# ---------------------------------------------------------------------------
# CLI Argument Parsing
# ---------------------------------------------------------------------------

def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Capital Allocation Framework — Scoring & Validation Pipeline",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""\
examples:
  python run_pipeline.py                                  sample data, default dirs
  python run_pipeline.py --priorities p.csv               replace priorities from CSV
  python run_pipeline.py --opportunities o.xlsx           append opportunities from XLSX
  python run_pipeline.py --seed 7 --max-risk 40           reproducible run, wider what-if
""",
    )
    parser.add_argument(
        "--state", default=None,
        help="State snapshot JSON (default: <output>/state.json)",
    )
    parser.add_argument(
        "--priorities", default=None,
        help="CSV/XLSX of investment priorities; replaces the current list",
    )
    parser.add_argument(
        "--opportunities", default=None,
        help="CSV/XLSX of opportunities; appended to the current list",
    )
    parser.add_argument(
        "--output", default=None,
        help="Output directory (default: CAPITAL_OUTPUT_DIR or 'output')",
    )
    parser.add_argument(
        "--seed", type=int, default=None,
        help="Seed for the synergy draw (default: CAPITAL_SYNERGY_SEED, else unseeded)",
    )
    parser.add_argument(
        "--max-risk", dest="max_risk", type=float, default=DEFAULT_RISK_THRESHOLD,
        help=f"Risk ceiling for the what-if portfolio (default: {DEFAULT_RISK_THRESHOLD:.0f})",
    )
    parser.add_argument(
        "--preserve-resolutions", action="store_true", default=False,
        help="Keep resolved/ignored status of matching issues from the previous run",
    )
    return parser.parse_args()


# ---------------------------------------------------------------------------
# Input helpers
# ---------------------------------------------------------------------------

def _read_rows(path: Path) -> list[list]:
    """Read a CSV or Excel sheet as raw rows, header row included."""
    if path.suffix.lower() in (".xlsx", ".xls"):
        df = pd.read_excel(path, header=None, dtype=str)
    else:
        df = pd.read_csv(path, header=None, dtype=str, keep_default_na=False)
    return df.values.tolist()


def _report_import(label: str, result: ImportResult) -> None:
    print(f"[Import] {label}: {len(result.records)} rows imported")
    for err in result.errors:
        print(f"[Import]   {err}")


def _sample_state(settings: Settings) -> AppState:
    """Small built-in portfolio used when no state file exists yet."""
    now = datetime.now()
    priorities = [
        InvestmentPriority(
            id="PRI-001", name="Energy Transition",
            description="Renewable generation and storage",
            weight=50.0, time_horizon=10, min_roi=12.0, max_payback=8,
            risk_appetite=RiskAppetite.MODERATE, strategic_importance=10,
        ),
        InvestmentPriority(
            id="PRI-002", name="Logistics Backbone",
            description="Ports, airports and freight corridors",
            weight=30.0, time_horizon=15, min_roi=10.0, max_payback=10,
            risk_appetite=RiskAppetite.CONSERVATIVE, strategic_importance=8,
        ),
        InvestmentPriority(
            id="PRI-003", name="Digital Infrastructure",
            description="Data centers and connectivity",
            weight=20.0, time_horizon=7, min_roi=15.0, max_payback=6,
            risk_appetite=RiskAppetite.AGGRESSIVE, strategic_importance=7,
        ),
    ]

    def opp(oid, name, source, sponsor, lo, hi, months, fit, risk,
            status=OpportunityStatus.APPROVED):
        return Opportunity(
            id=oid, name=name, description=f"{name} in {source}", source=source,
            sponsor=sponsor, status=status,
            investment_range=InvestmentRange(min=lo, max=hi),
            estimated_start=now.date().isoformat(), duration=months,
            strategic_fit_score=fit, preliminary_risk_score=risk,
            approved_by=sponsor if status == OpportunityStatus.APPROVED else None,
            updated_date=now,
        )

    opportunities = [
        opp("OPP-001", "Khavda Solar Park Phase 2", "Adani Green Energy", "CFO Office",
            100e6, 150e6, 36, 90, 25),
        opp("OPP-002", "Vizhinjam Transshipment Berth", "Adani Ports", "Ports CEO",
            400e6, 600e6, 48, 75, 35),
        opp("OPP-003", "Navi Mumbai Terminal 2", "Adani Airport Holdings", "Airports CEO",
            800e6, 1.2e9, 60, 60, 45),
        opp("OPP-004", "Hyderabad Hyperscale Campus", "AdaniConneX", "Digital CTO",
            200e6, 300e6, 30, 70, 40),
        opp("OPP-005", "Queensland Rail Spur", "Carmichael Australia", "",
            50e6, 80e6, 24, 40, 70),
        opp("OPP-006", "Green Hydrogen Pilot", "Adani New Industries", "Strategy Office",
            30e6, 60e6, 18, 75, 55, status=OpportunityStatus.UNDER_REVIEW),
    ]
    return AppState(
        total_capital=settings.total_capital,
        priorities=priorities,
        opportunities=opportunities,
    )


# ---------------------------------------------------------------------------
# Main
# ---------------------------------------------------------------------------

def main(args: argparse.Namespace) -> None:
    settings = load_settings()
    logging.basicConfig(
        level=settings.log_level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    out_path = Path(args.output or settings.output_dir)
    out_path.mkdir(parents=True, exist_ok=True)
    store = JsonStateStore(args.state or out_path / "state.json")
    seed = args.seed if args.seed is not None else settings.synergy_seed

    # ===== Load state =====
    if store.exists():
        state = store.load()
        print(f"[State] Loaded {store.path}")
    else:
        state = _sample_state(settings)
        print(f"[State] No saved state at {store.path} — starting from sample portfolio")

    # ===== Imports =====
    if args.priorities:
        result = import_priorities(_read_rows(Path(args.priorities)))
        _report_import("Priorities", result)
        if result.records:
            state.priorities = result.records
    if args.opportunities:
        result = import_opportunities(
            _read_rows(Path(args.opportunities)),
            start_index=len(state.opportunities) + 1,
        )
        _report_import("Opportunities", result)
        state.opportunities = [*state.opportunities, *result.records]

    # ===== PHASE 1: Priority Planner =====
    print(f"[Agent 01] Running Priority Planner pipeline ...")
    priority_output = run_priority_pipeline(state.priorities, state.total_capital)
    state.priorities = priority_output.priorities
    print(f"[Agent 01] Done — {len(priority_output.priorities)} priorities, "
          f"weight {priority_output.total_weight:.2f}%")

    # ===== PHASE 2: Opportunity Desk =====
    print(f"[Agent 02] Running Opportunity Desk pipeline ...")
    opportunity_output = run_opportunity_pipeline(state.opportunities)
    state.opportunities = opportunity_output.opportunities
    print(f"[Agent 02] Done — {len(opportunity_output.approved_ids)} approved "
          f"of {len(opportunity_output.opportunities)}")

    # ===== PHASE 3: Project Validator =====
    print(f"[Agent 03] Running Project Validator pipeline ...")
    validation_output = run_validation_pipeline(
        state.opportunities,
        existing_projects=state.validated_projects,
        priorities=state.priorities,
        seed=seed,
    )
    state.validated_projects = validation_output.projects
    validation_file = write_validation_excel(validation_output, out_path)
    print(f"[Agent 03] Done — {len(validation_output.new_project_ids)} new projects, "
          f"grades {validation_output.grade_distribution}")
    print(f"[Agent 03] Saved: {validation_file}")

    # ===== PHASE 4: Sector Strategist =====
    print(f"[Agent 04] Running Sector Strategist pipeline ...")
    allocation_output = run_allocation_pipeline(
        state.validated_projects,
        sectors=state.sectors or None,
        constraints=state.allocation_constraints or None,
        total_capital=state.total_capital,
    )
    state.sectors = [a.sector for a in allocation_output.allocations]
    state.sector_allocations = allocation_output.allocations
    state.allocation_constraints = allocation_output.constraints
    allocation_file = write_allocation_excel(allocation_output, out_path)
    print(f"[Agent 04] Done — {len(allocation_output.violations)} constraint violations")
    print(f"[Agent 04] Saved: {allocation_file}")

    # ===== PHASE 5: Data Quality Officer =====
    print(f"[Agent 05] Running Data Quality pipeline ...")
    quality_output = run_quality_pipeline(
        state.priorities,
        state.opportunities,
        state.validated_projects,
        state.sector_allocations,
        constraints=state.allocation_constraints,
        rules=state.validation_rules or None,
        prior_issues=state.data_quality_issues,
        preserve_resolutions=args.preserve_resolutions,
    )
    state.validation_rules = quality_output.rules
    state.data_quality_issues = quality_output.issues
    state.data_quality_metrics = quality_output.metrics
    quality_file = write_quality_excel(quality_output, out_path)
    print(f"[Agent 05] Done — score {quality_output.metrics.overall_score:.0f}, "
          f"{quality_output.metrics.total_issues} open issues")
    print(f"[Agent 05] Saved: {quality_file}")

    # ===== PHASE 6: Scenario Analyst =====
    print(f"[Agent 06] Running Scenario Analyst pipeline ...")
    scenario_output = run_scenario_pipeline(
        state.validated_projects, risk_threshold=args.max_risk,
    )
    scenario_file = write_scenario_excel(scenario_output, out_path)
    print(f"[Agent 06] Done — what-if selected {scenario_output.what_if.project_count} projects")
    print(f"[Agent 06] Saved: {scenario_file}")

    # ===== Save state =====
    store.save(state)
    print(f"[State] Saved: {store.path}")
    print(f"\nOutput directory: {out_path}/")


if __name__ == "__main__":
    try:
        main(parse_args())
    except CapitalAgentsException as e:
        print(f"[Error] {e.error_code}: {e.message}")
        sys.exit(1)
