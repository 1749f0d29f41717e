"""
Centralized configuration for the Capital Agents pipeline.

This module defines all magic numbers, thresholds, and configuration values
used by the scoring, grading, allocation, data quality and scenario stages.
Centralizing these values makes the decision boundaries easy to find and
tune.
"""

# ============================================================================
# PORTFOLIO
# ============================================================================

DEFAULT_TOTAL_CAPITAL = 90_000_000_000
"""Total deployable capital in USD ($90B)"""

# ============================================================================
# COMPOSITE SCORE
# ============================================================================
# composite = 0.4*strategic + 0.3*financial + 0.2*risk_adj + 0.1*synergy

SCORE_WEIGHTS: dict[str, float] = {
    "strategic_alignment": 0.4,
    "financial_score": 0.3,
    "risk_adjustment": 0.2,
    "synergy_score": 0.1,
}

FINANCIAL_SCORE_UNIT = 10_000_000
"""Every $10M of minimum commitment adds FINANCIAL_SCORE_PER_UNIT points"""

FINANCIAL_SCORE_PER_UNIT = 10.0

FINANCIAL_SCORE_CAP = 100.0
"""Financial component is capped; the weighted sum is not"""

SYNERGY_SCORE_RANGE: tuple[float, float] = (50.0, 80.0)
"""Synergy draw is uniform in [low, high)"""

# ============================================================================
# INVESTMENT GRADES
# ============================================================================

GRADE_A = "A"
GRADE_B = "B"
GRADE_C = "C"
GRADE_NON_INVESTMENT = "Non-Investment"

INVESTMENT_GRADES = (GRADE_A, GRADE_B, GRADE_C, GRADE_NON_INVESTMENT)

GRADE_ORDER: dict[str, int] = {
    GRADE_A: 4,
    GRADE_B: 3,
    GRADE_C: 2,
    GRADE_NON_INVESTMENT: 1,
}
"""Sort key for ranking projects by grade"""

ALLOCATABLE_GRADES = frozenset({GRADE_A, GRADE_B})
"""Only these grades are counted in sector allocation and the scenario baseline"""

# ============================================================================
# DERIVED PROJECT FINANCIALS
# ============================================================================
# Multipliers on opportunity.investment_range.max

OPEX_RATIO = 0.10
REVENUE_POTENTIAL_RATIO = 1.5
NPV_RATIO = 0.30
MARKET_SIZE_RATIO = 5.0

IRR_BASE = 15.0
IRR_SCORE_DIVISOR = 10.0
MIRR_BASE = 12.0
MIRR_SCORE_DIVISOR = 15.0
PAYBACK_BASE_YEARS = 8.0
PAYBACK_SCORE_DIVISOR = 25.0

PROJECTION_QUARTERS = 20
"""Five years of quarterly projections"""

CAPEX_DEPLOYMENT_QUARTERS = 8
"""Capex is deployed evenly over the first two years"""

KEY_SUCCESS_FACTORS: list[str] = [
    "Strong market demand",
    "Operational excellence",
    "Cost competitive position",
    "Regulatory support",
]

EXPECTED_OUTCOMES: list[str] = [
    "Market leadership position",
    "Sustainable competitive advantage",
    "Strong financial returns",
    "Synergies with existing businesses",
]

RISK_LEVEL_BANDS: tuple[float, float] = (30.0, 60.0)
"""risk <= 30 is Low, <= 60 is Medium, otherwise High"""

# ============================================================================
# SECTORS
# ============================================================================

DEFAULT_SECTORS: list[dict] = [
    {"id": "SEC-001", "name": "Renewable Energy", "target_allocation": 35.0},
    {"id": "SEC-002", "name": "Ports & Logistics", "target_allocation": 20.0},
    {"id": "SEC-003", "name": "Airports", "target_allocation": 10.0},
    {"id": "SEC-004", "name": "Data Centers", "target_allocation": 10.0},
    {"id": "SEC-005", "name": "Transmission", "target_allocation": 10.0},
    {"id": "SEC-006", "name": "City Gas", "target_allocation": 5.0},
    {"id": "SEC-007", "name": "Roads", "target_allocation": 5.0},
    {"id": "SEC-008", "name": "Water", "target_allocation": 3.0},
    {"id": "SEC-009", "name": "New Ventures", "target_allocation": 2.0},
]

SECTOR_KEYWORDS: dict[str, list[str]] = {
    "Renewable Energy": ["Green", "Solar", "Wind"],
    "Ports & Logistics": ["Ports"],
    "Airports": ["Airport"],
    "Data Centers": ["Connex"],
}
"""Extra business-unit keywords per sector name, on top of the name itself"""

SECTOR_MIN_BAND = 10.0
"""min_allocation = max(SECTOR_MIN_FLOOR, target - SECTOR_MIN_BAND)"""

SECTOR_MIN_FLOOR = 1.0

SECTOR_MAX_BAND = 15.0
"""max_allocation = target + SECTOR_MAX_BAND"""

BALANCE_TOLERANCE_PCT = 5.0
"""Portfolio counts as balanced when every sector is within this of target"""

DEFAULT_CONSTRAINTS: list[dict] = [
    {"sector_id": "SEC-001", "constraint_type": "min", "value": 25.0, "is_hard": True,
     "reason": "Strategic priority mandate"},
    {"sector_id": "SEC-001", "constraint_type": "max", "value": 40.0, "is_hard": False,
     "reason": "Diversification requirement"},
    {"sector_id": "SEC-002", "constraint_type": "min", "value": 15.0, "is_hard": True,
     "reason": "Core business maintenance"},
    {"sector_id": "SEC-002", "constraint_type": "max", "value": 25.0, "is_hard": False,
     "reason": "Concentration risk"},
    {"sector_id": "SEC-009", "constraint_type": "max", "value": 5.0, "is_hard": True,
     "reason": "Risk management policy"},
    {"sector_id": "SEC-004", "constraint_type": "min", "value": 5.0, "is_hard": False,
     "reason": "Growth opportunity"},
    {"sector_id": "SEC-004", "constraint_type": "max", "value": 15.0, "is_hard": False,
     "reason": "Market maturity"},
]

# ============================================================================
# PRIORITY WEIGHTS
# ============================================================================

WEIGHT_TOTAL = 100.0
WEIGHT_TOLERANCE = 0.01
"""|sum(weights) - 100| must stay below this"""

# ============================================================================
# DATA QUALITY
# ============================================================================

ISSUE_PENALTIES: dict[str, float] = {
    "critical": 10.0,
    "warning": 5.0,
    "info": 1.0,
}
"""overall_score = max(0, 100 - sum(penalty * open issue count))"""

IRR_RANGE: tuple[float, float] = (5.0, 50.0)
MAX_PAYBACK_YEARS = 10.0
CAPEX_RANGE: tuple[float, float] = (1_000_000.0, 10_000_000_000.0)
SYNERGY_REQUIRED_CAPEX = 500_000_000.0
MIN_INVESTMENT_THRESHOLD = 10_000_000.0
SCORE_BOUNDS: tuple[float, float] = (0.0, 100.0)
COMPOSITE_TOLERANCE = 1.0
"""Stored vs recomputed composite may differ by less than one point"""

AUTO_FIX_AVAILABLE = "Auto-fix available"

# ============================================================================
# SCENARIOS
# ============================================================================

SCENARIO_CAPITAL_CAP = 10_000_000_000.0
"""Budget used for the IRR-ranked what-if selection ($10B)"""

DEPLOYMENT_RATE_SMALL = 500_000_000.0
"""Monthly deployment below DEPLOYMENT_RATE_BREAKPOINT"""

DEPLOYMENT_RATE_LARGE = 1_500_000_000.0
DEPLOYMENT_RATE_BREAKPOINT = 5_000_000_000.0

RISK_SWEEP_THRESHOLDS: list[float] = [40.0, 50.0, 60.0, 70.0, 80.0]

DEFAULT_RISK_THRESHOLD = 25.0
"""Risk ceiling for the what-if portfolio when none is given"""

DEPLOYMENT_START_YEAR = 2025
MAX_DEPLOYMENT_QUARTERS = 20

MONTHS_PER_YEAR = 12

DEFAULT_SCENARIOS: list[dict] = [
    {"name": "Conservative", "max_risk": 30.0, "min_return": 20.0,
     "max_duration_years": 5.0, "require_synergies": True},
    {"name": "Balanced", "max_risk": 50.0, "min_return": 18.0,
     "max_duration_years": 7.0, "require_synergies": False},
    {"name": "Aggressive", "max_risk": 70.0, "min_return": 15.0,
     "max_duration_years": 10.0, "require_synergies": False},
]
