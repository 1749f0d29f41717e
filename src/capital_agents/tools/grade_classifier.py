"""
Project Validator Tool: Grade Classifier
Capital Allocation Framework

Maps (composite_score, risk_score) to an investment grade using an
ordered rule table; the first matching band wins, anything else is
Non-Investment. Bounds are exact: A needs composite strictly above 80
and risk strictly below 30; B and C bands are inclusive on both ends.
"""

from __future__ import annotations

from typing import Callable

from capital_agents.schemas.project_output import InvestmentGrade


# ---------------------------------------------------------------------------
# Rule table
# ---------------------------------------------------------------------------

GRADE_RULES: list[tuple[InvestmentGrade, Callable[[float, float], bool]]] = [
    (InvestmentGrade.A, lambda score, risk: score > 80 and risk < 30),
    (InvestmentGrade.B, lambda score, risk: 60 <= score <= 80 and 30 <= risk <= 50),
    (InvestmentGrade.C, lambda score, risk: 40 <= score <= 60 and 50 <= risk <= 70),
]


def classify_grade(composite_score: float, risk_score: float) -> InvestmentGrade:
    """Total function over all float pairs; never raises."""
    for grade, matches in GRADE_RULES:
        if matches(composite_score, risk_score):
            return grade
    return InvestmentGrade.NON_INVESTMENT
