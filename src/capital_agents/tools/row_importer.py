"""
Import Tool: Row Importer
Capital Allocation Framework

Turns already-tabulated rows (first row = header) into typed records.
File reading is the caller's job (the CLI uses pandas); this module only
checks the fixed header schema and the shape of each row.

Partial success: rows that fail validation are reported as
"Row N: <reason>" strings in ImportResult.errors and skipped, valid rows
are still returned. A header mismatch rejects the whole table.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Callable, List, Optional, Sequence

from pydantic import BaseModel, Field, ValidationError

from capital_agents.exceptions import ImportRowError
from capital_agents.schemas.opportunity_output import (
    InvestmentRange,
    Opportunity,
    OpportunityStatus,
)
from capital_agents.schemas.priority_output import (
    InvestmentPriority,
    RiskAppetite,
    is_weight_valid,
    total_weight,
)

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Header schemas (positional, case-insensitive)
# ---------------------------------------------------------------------------

PRIORITY_HEADERS: list[str] = [
    "Priority Name",
    "Description",
    "Weight (%)",
    "Time Horizon (years)",
    "Min ROI (%)",
    "Max Payback (years)",
    "Risk Appetite",
    "Strategic Importance",
]

OPPORTUNITY_HEADERS: list[str] = [
    "Opportunity Name",
    "Description",
    "Source",
    "Sponsor",
    "Status",
    "Investment Min (USD)",
    "Investment Max (USD)",
    "ROI (%)",
    "Timeline (months)",
    "Strategic Fit Score",
    "Risk Score",
    "Category",
]

PROJECT_HEADERS: list[str] = [
    "Project Name",
    "Investment Amount",
    "Expected IRR (%)",
    "Risk Score",
    "NPV",
    "Payback Period (years)",
    "Strategic Alignment Score",
]

SECTOR_HEADERS: list[str] = [
    "Sector Name",
    "Allocated Amount (USD)",
    "Target Percentage (%)",
    "Min Projects",
    "Max Projects",
]

EMPTY_TABLE_ERROR = "File must contain headers and at least one data row"

_STATUS_MAP: dict[str, OpportunityStatus] = {
    "new": OpportunityStatus.NEW,
    "under review": OpportunityStatus.UNDER_REVIEW,
    "approved": OpportunityStatus.APPROVED,
    "rejected": OpportunityStatus.REJECTED,
}


# ---------------------------------------------------------------------------
# Records without a core model
# ---------------------------------------------------------------------------

class ProjectRow(BaseModel):
    """Externally validated project as imported (not a ValidatedProject)."""

    id: str
    name: str = Field(..., min_length=1)
    investment_amount: float = Field(..., gt=0)
    expected_irr: float
    risk_score: int = Field(..., ge=0, le=100)
    npv: float
    payback_period: float
    strategic_alignment_score: int = Field(..., ge=0, le=100)


class SectorRow(BaseModel):
    """Imported sector allocation line."""

    sector_id: str
    sector_name: str = Field(..., min_length=1)
    allocated_amount: float = Field(..., ge=0)
    percentage: float = Field(..., ge=0, le=100)
    min_projects: int = 0
    max_projects: int = 0


@dataclass
class ImportResult:
    """Parsed records plus one message per rejected row or header column."""

    records: list = field(default_factory=list)
    header_errors: List[str] = field(default_factory=list)
    row_errors: List[ImportRowError] = field(default_factory=list)
    table_errors: List[str] = field(default_factory=list)

    @property
    def errors(self) -> List[str]:
        # header problems first, whole-table checks (total weight) last
        return [
            *self.header_errors,
            *(e.to_message() for e in self.row_errors),
            *self.table_errors,
        ]

    @property
    def ok(self) -> bool:
        return not self.errors


# ---------------------------------------------------------------------------
# Cell coercion
# ---------------------------------------------------------------------------

def _is_blank(value: Any) -> bool:
    if value is None:
        return True
    if isinstance(value, float) and math.isnan(value):
        return True
    return str(value).strip() == ""


def _to_text(value: Any) -> str:
    return "" if _is_blank(value) else str(value).strip()


def _to_float(value: Any) -> float:
    """Unparseable, blank or non-finite (nan, inf, 1e400) cells read as 0."""
    if _is_blank(value):
        return 0.0
    try:
        number = float(str(value).strip().replace(",", ""))
    except ValueError:
        return 0.0
    return number if math.isfinite(number) else 0.0


def _to_int(value: Any) -> int:
    return int(_to_float(value))


def _clamp(value: int, lo: int, hi: int) -> int:
    return max(lo, min(hi, value))


def parse_risk_appetite(value: Any) -> RiskAppetite:
    """Unknown values default to moderate."""
    try:
        return RiskAppetite(_to_text(value).lower())
    except ValueError:
        return RiskAppetite.MODERATE


def parse_opportunity_status(value: Any) -> OpportunityStatus:
    """Accepts 'Under Review' or 'under_review'; unknown values default to new."""
    normalized = _to_text(value).lower().replace("_", " ")
    return _STATUS_MAP.get(normalized, OpportunityStatus.NEW)


# ---------------------------------------------------------------------------
# Table checks
# ---------------------------------------------------------------------------

def validate_headers(actual: Sequence[Any], required: Sequence[str]) -> List[str]:
    """One message per required column whose header does not match."""
    normalized = [_to_text(h) for h in actual]
    errors = []
    for i, header in enumerate(required):
        if i >= len(normalized) or normalized[i].lower() != header.lower():
            errors.append(f'Column {i + 1} should be "{header}"')
    return errors


def _import_table(
    rows: Sequence[Sequence[Any]],
    headers: Sequence[str],
    entity_type: str,
    parse_row: Callable[[Sequence[Any], int], tuple[Optional[BaseModel], List[str]]],
) -> ImportResult:
    result = ImportResult()
    if len(rows) < 2:
        result.header_errors = [EMPTY_TABLE_ERROR]
        return result

    result.header_errors = validate_headers(rows[0], headers)
    if result.header_errors:
        return result

    for index, row in enumerate(rows[1:]):
        row_number = index + 2
        if len(row) < len(headers):
            result.row_errors.append(ImportRowError(
                row_number, "Missing required fields", entity_type,
                {"cells": len(row)},
            ))
            continue
        try:
            record, problems = parse_row(row, index)
        except ValidationError as e:
            record, problems = None, ["Invalid data format"]
            logger.debug(f"[RowImporter] {entity_type} row {row_number}: {e}")
        for problem in problems:
            result.row_errors.append(ImportRowError(row_number, problem, entity_type))
        if record is not None and not problems:
            result.records.append(record)

    logger.info(
        f"[RowImporter] {entity_type}: {len(result.records)} rows imported, "
        f"{len(result.row_errors)} rejected"
    )
    return result


# ---------------------------------------------------------------------------
# Entity importers
# ---------------------------------------------------------------------------

def import_priorities(
    rows: Sequence[Sequence[Any]],
    id_prefix: str = "PRI",
    start_index: int = 1,
) -> ImportResult:
    """
    Import investment priorities. After the rows, the total weight of the
    accepted priorities must be 100 (reported as a table-level error).
    """
    def parse(row: Sequence[Any], index: int):
        name = _to_text(row[0])
        weight = _to_float(row[2])
        horizon = _to_int(row[3])
        min_roi = _to_float(row[4])
        max_payback = _to_int(row[5])

        problems = []
        if not name:
            problems.append("Priority name is required")
        if weight < 0 or weight > 100:
            problems.append("Weight must be between 0 and 100")
        if horizon <= 0:
            problems.append("Time horizon must be positive")
        if min_roi < 0:
            problems.append("Min ROI cannot be negative")
        if max_payback <= 0:
            problems.append("Max payback must be positive")
        if problems:
            return None, problems

        return InvestmentPriority(
            id=f"{id_prefix}-{start_index + index:03d}",
            name=name,
            description=_to_text(row[1]),
            weight=weight,
            time_horizon=horizon,
            min_roi=min_roi,
            max_payback=max_payback,
            risk_appetite=parse_risk_appetite(row[6]),
            strategic_importance=_clamp(_to_int(row[7]) or 1, 1, 10),
        ), []

    result = _import_table(rows, PRIORITY_HEADERS, "priority", parse)
    if result.records and not is_weight_valid(result.records):
        result.table_errors.append(
            f"Total weight must equal 100%. Current total: {total_weight(result.records):.2f}%"
        )
    return result


def import_opportunities(
    rows: Sequence[Sequence[Any]],
    id_prefix: str = "OPP",
    start_index: int = 1,
    now: Optional[datetime] = None,
) -> ImportResult:
    now = now or datetime.now()

    def parse(row: Sequence[Any], index: int):
        name = _to_text(row[0])
        inv_min = _to_float(row[5])
        inv_max = _to_float(row[6])
        duration = _to_int(row[8])

        problems = []
        if not name:
            problems.append("Opportunity name is required")
        if inv_min < 0:
            problems.append("Investment min cannot be negative")
        if inv_max < inv_min:
            problems.append("Investment max must be greater than or equal to min")
        if duration <= 0:
            problems.append("Duration must be positive")
        if problems:
            return None, problems

        return Opportunity(
            id=f"{id_prefix}-{start_index + index:03d}",
            name=name,
            description=_to_text(row[1]),
            source=_to_text(row[2]),
            sponsor=_to_text(row[3]),
            status=parse_opportunity_status(row[4]),
            investment_range=InvestmentRange(min=inv_min, max=inv_max),
            estimated_start=now.isoformat(),
            duration=duration,
            strategic_fit_score=_clamp(_to_int(row[9]), 0, 100),
            preliminary_risk_score=_clamp(_to_int(row[10]), 0, 100),
            recommendations=f"Imported opportunity: {_to_text(row[11])}",
            approved_by=None,
            updated_by="System Import",
            updated_date=now,
        ), []

    return _import_table(rows, OPPORTUNITY_HEADERS, "opportunity", parse)


def import_project_rows(
    rows: Sequence[Sequence[Any]],
    id_prefix: str = "PRJ",
    start_index: int = 1,
) -> ImportResult:
    def parse(row: Sequence[Any], index: int):
        name = _to_text(row[0])
        amount = _to_float(row[1])
        if not name:
            return None, ["Project name is required"]
        if amount <= 0:
            return None, ["Investment amount must be positive"]
        return ProjectRow(
            id=f"{id_prefix}-{start_index + index:03d}",
            name=name,
            investment_amount=amount,
            expected_irr=_to_float(row[2]),
            risk_score=_clamp(_to_int(row[3]), 0, 100),
            npv=_to_float(row[4]),
            payback_period=_to_float(row[5]),
            strategic_alignment_score=_clamp(_to_int(row[6]), 0, 100),
        ), []

    return _import_table(rows, PROJECT_HEADERS, "project", parse)


def import_sector_rows(
    rows: Sequence[Sequence[Any]],
    id_prefix: str = "SEC-IMP",
    start_index: int = 1,
) -> ImportResult:
    def parse(row: Sequence[Any], index: int):
        name = _to_text(row[0])
        amount = _to_float(row[1])
        pct = _to_float(row[2])
        if not name:
            return None, ["Sector name is required"]
        if amount < 0:
            return None, ["Allocated amount cannot be negative"]
        if pct < 0 or pct > 100:
            return None, ["Percentage must be between 0 and 100"]
        return SectorRow(
            sector_id=f"{id_prefix}-{start_index + index:03d}",
            sector_name=name,
            allocated_amount=amount,
            percentage=pct,
            min_projects=_to_int(row[3]),
            max_projects=_to_int(row[4]),
        ), []

    return _import_table(rows, SECTOR_HEADERS, "sector", parse)
