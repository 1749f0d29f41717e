"""
Data Quality Officer — Validation Rule Tests
Level 1: Pure function tests for each entity pass and the full run.
"""

from __future__ import annotations

import pytest

from capital_agents.config.constants import AUTO_FIX_AVAILABLE
from capital_agents.exceptions import RuleNotFoundError
from capital_agents.schemas.opportunity_output import InvestmentRange
from capital_agents.schemas.project_output import InvestmentGrade
from capital_agents.schemas.quality_output import IssueStatus, RuleCategory, Severity
from capital_agents.tools.constraint_validator import default_constraints
from capital_agents.tools.quality_rules import (
    RULE_CATALOGUE,
    check_allocations,
    check_opportunities,
    check_priorities,
    check_projects,
    default_validation_rules,
    run_validation,
    toggle_rule,
)
from capital_agents.tools.sector_allocator import compute_sector_allocations, default_sectors
from capital_agents.tools.weight_balancer import derive_capital_allocations

from tests.fixtures.conftest import (
    FIXED_NOW,
    build_sample_opportunities,
    build_sample_priorities,
    build_sample_projects,
    make_opportunity,
    make_project,
)

RULES = default_validation_rules()


def _rule_ids(drafts):
    return [d["rule_id"] for d in drafts]


def _sample_allocations():
    allocations, _ = compute_sector_allocations(build_sample_projects(), default_sectors())
    return allocations


# ---------------------------------------------------------------------------
# Catalogue
# ---------------------------------------------------------------------------

class TestRuleCatalogue:

    @pytest.mark.schema
    def test_sixteen_rules_enabled(self):
        assert len(RULES) == 16
        assert all(r.enabled for r in RULES)
        assert len({r.id for r in RULES}) == len(RULE_CATALOGUE)

    @pytest.mark.schema
    def test_auto_fixable_rules(self):
        assert {r.id for r in RULES if r.auto_fixable} == {"CONS-001", "ACC-001"}

    @pytest.mark.behavior
    def test_toggle_rule(self):
        toggled = toggle_rule(RULES, "FIN-001")
        assert next(r for r in toggled if r.id == "FIN-001").enabled is False
        assert next(r for r in RULES if r.id == "FIN-001").enabled is True
        back = toggle_rule(toggled, "FIN-001")
        assert next(r for r in back if r.id == "FIN-001").enabled is True

    @pytest.mark.behavior
    def test_toggle_unknown_rule(self):
        with pytest.raises(RuleNotFoundError):
            toggle_rule(RULES, "FIN-999")


# ---------------------------------------------------------------------------
# Priorities
# ---------------------------------------------------------------------------

class TestPriorityChecks:

    @pytest.mark.schema
    def test_weight_sum_violation(self):
        priorities = derive_capital_allocations(build_sample_priorities(), 90e9)
        priorities[2] = priorities[2].model_copy(update={"weight": 10.0})
        drafts = check_priorities(priorities, RULES)
        assert _rule_ids(drafts) == ["CONS-001"]
        assert drafts[0]["severity"] == Severity.CRITICAL
        assert drafts[0]["description"] == "Total weight is 90.00%, should be 100%"
        assert drafts[0]["affected_items"] == ["PRI-001", "PRI-002", "PRI-003"]
        assert drafts[0]["auto_fix_suggestion"] == "Normalize weights to sum to 100%"

    @pytest.mark.schema
    def test_missing_capital_allocation(self):
        """Priorities that never went through derivation carry zero capital."""
        drafts = check_priorities(build_sample_priorities(), RULES)
        assert _rule_ids(drafts) == ["COMP-001", "COMP-001", "COMP-001"]
        assert all(d["severity"] == Severity.WARNING for d in drafts)

    @pytest.mark.schema
    def test_clean_priorities(self):
        priorities = derive_capital_allocations(build_sample_priorities(), 90e9)
        assert check_priorities(priorities, RULES) == []

    @pytest.mark.schema
    def test_disabled_rule_is_silent(self):
        priorities = build_sample_priorities()
        priorities[0] = priorities[0].model_copy(update={"weight": 0.0})
        rules = toggle_rule(toggle_rule(RULES, "CONS-001"), "COMP-001")
        assert check_priorities(priorities, rules) == []


# ---------------------------------------------------------------------------
# Opportunities
# ---------------------------------------------------------------------------

class TestOpportunityChecks:

    @pytest.mark.schema
    def test_sample_missing_sponsor(self):
        drafts = check_opportunities(build_sample_opportunities(), RULES)
        assert _rule_ids(drafts) == ["COMP-004"]
        assert drafts[0]["affected_items"] == ["OPP-005"]
        assert drafts[0]["severity"] == Severity.CRITICAL

    @pytest.mark.schema
    def test_inverted_range(self):
        opp = make_opportunity(investment_range=InvestmentRange(min=200e6, max=100e6))
        drafts = check_opportunities([opp], RULES)
        assert _rule_ids(drafts) == ["ACC-001"]
        assert drafts[0]["category"] == RuleCategory.ACCURACY

    @pytest.mark.schema
    def test_scores_out_of_bounds(self):
        opp = make_opportunity(strategic_fit_score=120, preliminary_risk_score=-5)
        drafts = check_opportunities([opp], RULES)
        assert _rule_ids(drafts) == ["COMPL-002", "COMPL-002"]
        assert drafts[0]["title"] == "Strategic fit score out of bounds"
        assert drafts[1]["title"] == "Risk score out of bounds"


# ---------------------------------------------------------------------------
# Projects
# ---------------------------------------------------------------------------

class TestProjectChecks:

    @pytest.mark.schema
    def test_sample_projects(self):
        drafts = check_projects(build_sample_projects(), RULES)
        assert _rule_ids(drafts) == ["COMP-004"]
        assert drafts[0]["affected_items"] == ["VAL-005"]

    @pytest.mark.schema
    def test_irr_out_of_range(self):
        project = make_project().model_copy(update={"irr": 60.0})
        drafts = check_projects([project], RULES)
        assert _rule_ids(drafts) == ["FIN-001"]
        assert drafts[0]["description"] == "IRR 60.0% is outside acceptable range (5%-50%)"

    @pytest.mark.schema
    def test_stored_composite_drift(self):
        """Grade stays consistent at 95, only the composite check fires."""
        project = make_project().model_copy(update={"composite_score": 95.0})
        drafts = check_projects([project], RULES)
        assert _rule_ids(drafts) == ["ACC-001"]
        assert drafts[0]["auto_fix_suggestion"] == AUTO_FIX_AVAILABLE

    @pytest.mark.schema
    def test_grade_inconsistency(self):
        project = make_project().model_copy(update={"investment_grade": InvestmentGrade.C})
        assert _rule_ids(check_projects([project], RULES)) == ["CONS-003"]

    @pytest.mark.schema
    def test_large_project_without_synergies(self):
        project = make_project(investment_range=InvestmentRange(min=400e6, max=600e6))
        stripped = project.model_copy(update={
            "business_plan": project.business_plan.model_copy(update={"synergies": []}),
        })
        drafts = check_projects([stripped], RULES)
        assert _rule_ids(drafts) == ["COMP-003"]
        assert drafts[0]["severity"] == Severity.WARNING

    @pytest.mark.schema
    def test_small_project_without_synergies_passes(self):
        project = make_project()
        stripped = project.model_copy(update={
            "business_plan": project.business_plan.model_copy(update={"synergies": []}),
        })
        assert check_projects([stripped], RULES) == []

    @pytest.mark.schema
    def test_below_minimum_investment(self):
        project = make_project().model_copy(update={"capex": 5e6})
        assert "COMPL-001" in _rule_ids(check_projects([project], RULES))

    @pytest.mark.schema
    def test_disabled_rule_is_silent(self):
        project = make_project().model_copy(update={"irr": 60.0})
        assert check_projects([project], toggle_rule(RULES, "FIN-001")) == []


# ---------------------------------------------------------------------------
# Allocations
# ---------------------------------------------------------------------------

class TestAllocationChecks:

    @pytest.mark.schema
    def test_sample_allocations(self):
        drafts = check_allocations(_sample_allocations(), default_constraints(), RULES)
        flagged = [(d["affected_items"][0], d["severity"]) for d in drafts]
        assert flagged == [
            ("SEC-001", Severity.CRITICAL),
            ("SEC-002", Severity.WARNING),
            ("SEC-003", Severity.WARNING),
            ("SEC-005", Severity.CRITICAL),
            ("SEC-006", Severity.CRITICAL),
            ("SEC-007", Severity.CRITICAL),
            ("SEC-008", Severity.CRITICAL),
            ("SEC-009", Severity.CRITICAL),
        ]
        assert all(d["rule_id"] == "COMPL-003" for d in drafts)

    @pytest.mark.schema
    def test_explicit_constraint_message(self):
        drafts = check_allocations(_sample_allocations(), default_constraints(), RULES)
        assert drafts[0]["title"] == "Minimum allocation constraint violation"
        assert drafts[0]["description"] == (
            "Renewable Energy allocation 6.7% below minimum 25.0% (Strategic priority mandate)"
        )

    @pytest.mark.schema
    def test_out_of_range_allocation(self):
        allocations = _sample_allocations()
        allocations[2] = allocations[2].model_copy(update={"current_allocation": 120.0})
        drafts = check_allocations(allocations, default_constraints(), RULES)
        sec3 = [d for d in drafts if d["affected_items"] == ["SEC-003"]]
        assert sec3[0]["title"] == "Invalid sector allocation"
        assert sec3[0]["severity"] == Severity.CRITICAL

    @pytest.mark.schema
    def test_disabled(self):
        rules = toggle_rule(RULES, "COMPL-003")
        assert check_allocations(_sample_allocations(), default_constraints(), rules) == []


# ---------------------------------------------------------------------------
# Full run
# ---------------------------------------------------------------------------

class TestRunValidation:

    @pytest.mark.behavior
    def test_pass_order_and_ids(self):
        priorities = build_sample_priorities()
        issues = run_validation(
            priorities,
            build_sample_opportunities(),
            build_sample_projects(),
            _sample_allocations(),
            default_constraints(),
            RULES,
            now=FIXED_NOW,
        )
        # 3 priority + 1 opportunity + 1 project + 8 allocation
        assert len(issues) == 13
        assert [i.id for i in issues[:3]] == ["DQ-0001", "DQ-0002", "DQ-0003"]
        assert issues[-1].id == "DQ-0013"
        assert [i.rule_id for i in issues[:5]] == [
            "COMP-001", "COMP-001", "COMP-001", "COMP-004", "COMP-004",
        ]
        assert issues[3].affected_items == ["OPP-005"]
        assert issues[4].affected_items == ["VAL-005"]
        assert all(i.status == IssueStatus.OPEN for i in issues)
        assert all(i.detected_date == FIXED_NOW for i in issues)

    @pytest.mark.behavior
    def test_all_rules_disabled(self):
        rules = list(RULES)
        for r in RULES:
            rules = toggle_rule(rules, r.id)
        issues = run_validation(
            build_sample_priorities(), build_sample_opportunities(),
            build_sample_projects(), _sample_allocations(), default_constraints(), rules,
        )
        assert issues == []
