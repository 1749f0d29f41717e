"""
Data Quality Officer Tool: Quality Scorer
Capital Allocation Framework

Aggregate metrics over a data quality issue list and the issue lifecycle
(resolve / ignore, carrying resolutions into a fresh run).

    overall_score = max(0, 100 - 10*critical - 5*warning - 1*info)

Counts are over OPEN issues only; resolved_issues counts status resolved.
"""

from __future__ import annotations

import logging
from datetime import datetime
from typing import List, Optional, Sequence

from capital_agents.config.constants import ISSUE_PENALTIES
from capital_agents.exceptions import IssueNotFoundError
from capital_agents.schemas.quality_output import (
    DataQualityIssue,
    DataQualityMetrics,
    IssueStatus,
    Severity,
)

logger = logging.getLogger(__name__)


def compute_overall_score(critical: int, warning: int, info: int) -> float:
    penalty = (
        critical * ISSUE_PENALTIES["critical"]
        + warning * ISSUE_PENALTIES["warning"]
        + info * ISSUE_PENALTIES["info"]
    )
    return max(0.0, 100.0 - penalty)


def compute_quality_metrics(issues: Sequence[DataQualityIssue]) -> DataQualityMetrics:
    open_issues = [i for i in issues if i.status == IssueStatus.OPEN]
    critical = sum(1 for i in open_issues if i.severity == Severity.CRITICAL)
    warning = sum(1 for i in open_issues if i.severity == Severity.WARNING)
    info = sum(1 for i in open_issues if i.severity == Severity.INFO)

    breakdown: dict[str, int] = {}
    for i in open_issues:
        breakdown[i.category.value] = breakdown.get(i.category.value, 0) + 1

    return DataQualityMetrics(
        overall_score=compute_overall_score(critical, warning, info),
        total_issues=len(open_issues),
        critical_issues=critical,
        warning_issues=warning,
        info_issues=info,
        resolved_issues=sum(1 for i in issues if i.status == IssueStatus.RESOLVED),
        category_breakdown=breakdown,
    )


def resolve_issue(
    issues: Sequence[DataQualityIssue],
    issue_id: str,
    status: IssueStatus = IssueStatus.RESOLVED,
    resolved_by: str = "System",
    now: Optional[datetime] = None,
) -> List[DataQualityIssue]:
    """
    Close one issue as resolved or ignored.

    Raises:
        IssueNotFoundError: unknown issue id.
        ValueError: status is OPEN.
    """
    if status == IssueStatus.OPEN:
        raise ValueError("resolve_issue needs a terminal status (resolved or ignored)")
    if not any(i.id == issue_id for i in issues):
        raise IssueNotFoundError(f"No data quality issue with id '{issue_id}'")

    now = now or datetime.now()
    return [
        i.model_copy(update={
            "status": status,
            "resolved_date": now,
            "resolved_by": resolved_by,
        }) if i.id == issue_id else i
        for i in issues
    ]


def carry_forward_resolutions(
    fresh: Sequence[DataQualityIssue],
    prior: Sequence[DataQualityIssue],
) -> List[DataQualityIssue]:
    """
    Copy resolved/ignored status from prior issues onto fresh ones with the
    same (rule_id, affected_items) key. Fresh ids and dates are kept.
    """
    closed = {i.key: i for i in prior if i.status != IssueStatus.OPEN}
    carried = 0
    result: List[DataQualityIssue] = []
    for issue in fresh:
        previous = closed.get(issue.key)
        if previous is None:
            result.append(issue)
            continue
        carried += 1
        result.append(issue.model_copy(update={
            "status": previous.status,
            "resolved_date": previous.resolved_date,
            "resolved_by": previous.resolved_by,
        }))
    if carried:
        logger.info(f"[QualityScorer] Carried {carried} resolutions into the new run")
    return result
