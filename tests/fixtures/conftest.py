"""
Shared test fixtures for the Capital Agents tests.
Provides sample priorities, opportunities and validated projects, plus
row tables for the importer.

Sample opportunities are scored with a pinned synergy of 65, which gives:
    OPP-001 Green Energy   composite 87.5  risk 25  -> A
    OPP-002 Ports          composite 79.5  risk 35  -> B
    OPP-003 Airports       composite 71.5  risk 45  -> B
    OPP-004 ConneX         composite 76.5  risk 40  -> B
    OPP-005 Australia rail composite 45.5  risk 60  -> C
    OPP-006 under review (not converted)
"""

from __future__ import annotations

from datetime import datetime
from pathlib import Path
from typing import Any

import pandas as pd
import pytest

from capital_agents.schemas.opportunity_output import (
    InvestmentRange,
    Opportunity,
    OpportunityStatus,
)
from capital_agents.schemas.priority_output import InvestmentPriority
from capital_agents.schemas.project_output import ValidatedProject
from capital_agents.tools.project_builder import build_validated_project

FIXTURES_DIR = Path(__file__).parent

FIXED_NOW = datetime(2025, 1, 15, 9, 30, 0)
SYNERGY = 65.0


SAMPLE_PRIORITIES = [
    {"id": "PRI-001", "name": "Energy Transition", "description": "Renewables",
     "weight": 50.0, "time_horizon": 10, "min_roi": 12.0, "max_payback": 8,
     "risk_appetite": "moderate", "strategic_importance": 10},
    {"id": "PRI-002", "name": "Logistics Backbone", "description": "Ports and airports",
     "weight": 30.0, "time_horizon": 15, "min_roi": 10.0, "max_payback": 10,
     "risk_appetite": "conservative", "strategic_importance": 8},
    {"id": "PRI-003", "name": "Digital Infrastructure", "description": "Data centers",
     "weight": 20.0, "time_horizon": 7, "min_roi": 15.0, "max_payback": 6,
     "risk_appetite": "aggressive", "strategic_importance": 7},
]

SAMPLE_OPPORTUNITIES = [
    {"id": "OPP-001", "name": "Khavda Solar Park", "source": "Adani Green Energy",
     "sponsor": "CFO Office", "min": 100e6, "max": 150e6, "duration": 36,
     "fit": 90, "risk": 25},
    {"id": "OPP-002", "name": "Vizhinjam Berth", "source": "Adani Ports",
     "sponsor": "Ports CEO", "min": 400e6, "max": 600e6, "duration": 48,
     "fit": 75, "risk": 35},
    {"id": "OPP-003", "name": "Navi Mumbai Terminal", "source": "Adani Airport Holdings",
     "sponsor": "Airports CEO", "min": 800e6, "max": 1.2e9, "duration": 60,
     "fit": 60, "risk": 45},
    {"id": "OPP-004", "name": "Hyderabad Campus", "source": "AdaniConneX",
     "sponsor": "Digital CTO", "min": 200e6, "max": 300e6, "duration": 30,
     "fit": 70, "risk": 40},
    {"id": "OPP-005", "name": "Queensland Rail Spur", "source": "Carmichael Australia",
     "sponsor": "", "min": 50e6, "max": 80e6, "duration": 24,
     "fit": 40, "risk": 60},
    {"id": "OPP-006", "name": "Green Hydrogen Pilot", "source": "Adani New Industries",
     "sponsor": "Strategy Office", "min": 30e6, "max": 60e6, "duration": 18,
     "fit": 75, "risk": 55, "status": "under_review"},
]

PRIORITY_HEADER_ROW = [
    "Priority Name", "Description", "Weight (%)", "Time Horizon (years)",
    "Min ROI (%)", "Max Payback (years)", "Risk Appetite", "Strategic Importance",
]

OPPORTUNITY_HEADER_ROW = [
    "Opportunity Name", "Description", "Source", "Sponsor", "Status",
    "Investment Min (USD)", "Investment Max (USD)", "ROI (%)",
    "Timeline (months)", "Strategic Fit Score", "Risk Score", "Category",
]


# ---------------------------------------------------------------------------
# Builders
# ---------------------------------------------------------------------------

def make_priority(**overrides: Any) -> InvestmentPriority:
    data = dict(SAMPLE_PRIORITIES[0])
    data.update(overrides)
    return InvestmentPriority(**data)


def make_opportunity(**overrides: Any) -> Opportunity:
    """Approved OPP-001 (fit 90, risk 25, 100M-150M) unless overridden."""
    data: dict[str, Any] = {
        "id": "OPP-001",
        "name": "Khavda Solar Park",
        "description": "Solar park expansion",
        "source": "Adani Green Energy",
        "sponsor": "CFO Office",
        "status": OpportunityStatus.APPROVED,
        "investment_range": InvestmentRange(min=100e6, max=150e6),
        "estimated_start": "2025-04-01",
        "duration": 36,
        "strategic_fit_score": 90,
        "preliminary_risk_score": 25,
        "recommendations": "Proceed",
        "approved_by": "CFO Office",
        "updated_date": FIXED_NOW,
    }
    data.update(overrides)
    return Opportunity(**data)


def _opportunity_from_sample(s: dict) -> Opportunity:
    return make_opportunity(
        id=s["id"],
        name=s["name"],
        description=f"{s['name']} for {s['source']}",
        source=s["source"],
        sponsor=s["sponsor"],
        status=OpportunityStatus(s.get("status", "approved")),
        investment_range=InvestmentRange(min=s["min"], max=s["max"]),
        duration=s["duration"],
        strategic_fit_score=s["fit"],
        preliminary_risk_score=s["risk"],
        approved_by=s["sponsor"] or None,
    )


def build_sample_priorities() -> list[InvestmentPriority]:
    return [InvestmentPriority(**p) for p in SAMPLE_PRIORITIES]


def build_sample_opportunities() -> list[Opportunity]:
    return [_opportunity_from_sample(s) for s in SAMPLE_OPPORTUNITIES]


def make_project(synergy: float = SYNERGY, **overrides: Any) -> ValidatedProject:
    """Validated project from make_opportunity(**overrides), synergy pinned."""
    return build_validated_project(
        make_opportunity(**overrides), synergy_override=synergy, now=FIXED_NOW,
    )


def build_sample_projects() -> list[ValidatedProject]:
    return [
        build_validated_project(o, synergy_override=SYNERGY, now=FIXED_NOW)
        for o in build_sample_opportunities()
        if o.status == OpportunityStatus.APPROVED
    ]


def write_rows_csv(filepath: Path, rows: list[list]) -> None:
    """Write raw rows (header included) as a headerless CSV."""
    pd.DataFrame(rows).to_csv(filepath, index=False, header=False)


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------

@pytest.fixture
def sample_priorities() -> list[InvestmentPriority]:
    return build_sample_priorities()


@pytest.fixture
def sample_opportunities() -> list[Opportunity]:
    return build_sample_opportunities()


@pytest.fixture
def sample_projects() -> list[ValidatedProject]:
    return build_sample_projects()
