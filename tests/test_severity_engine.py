"""Tests for the severity rule engine and document roll-ups."""
from __future__ import annotations

import pytest

from models.findings import HAZARD_FLAGS, BuildingContext, Finding
from models.shared import (
    ExecutiveOutcome,
    FindingCategory,
    OccupancyRisk,
    Priority,
    SeverityTier,
)
from severity.engine import (
    SEVERITY_RULES,
    derive_severity,
    derive_severity_tier,
    list_rules,
    map_tier_to_priority,
    normalize_context,
)
from severity.outcome import check_material_deficiency, derive_executive_outcome
from utils.error_handler import UnknownCategoryError

from factories import make_action


SLEEPING = BuildingContext(occupancy_risk=OccupancyRisk.SLEEPING, storeys=3)
VULNERABLE = BuildingContext(occupancy_risk=OccupancyRisk.VULNERABLE, storeys=1)
OFFICE = BuildingContext(occupancy_risk=OccupancyRisk.NON_SLEEPING, storeys=1)
TALL_OFFICE = BuildingContext(occupancy_risk=OccupancyRisk.NON_SLEEPING, storeys=5)


class TestTierPriorityMap:
    """Tests for the fixed tier -> priority mapping."""

    @pytest.mark.parametrize("tier,priority", [
        (SeverityTier.T4, Priority.P1),
        (SeverityTier.T3, Priority.P2),
        (SeverityTier.T2, Priority.P3),
        (SeverityTier.T1, Priority.P4),
    ])
    def test_mapping(self, tier, priority):
        assert map_tier_to_priority(tier) == priority

    def test_accepts_string_tier(self):
        assert map_tier_to_priority("T4") == Priority.P1

    def test_every_rule_priority_matches_tier(self):
        for rule in SEVERITY_RULES:
            assert rule.priority == map_tier_to_priority(rule.tier)


class TestRulePrecedence:
    """First matching rule wins, evaluated top to bottom."""

    @pytest.mark.parametrize("other_flag", [f for f in HAZARD_FLAGS if f != "final_exit_locked"])
    @pytest.mark.parametrize("category", list(FindingCategory))
    @pytest.mark.parametrize("context", [None, SLEEPING, VULNERABLE, OFFICE, TALL_OFFICE])
    def test_locked_exit_beats_everything(self, other_flag, category, context):
        result = derive_severity(
            {"category": category.value, "final_exit_locked": True, other_flag: True},
            context,
        )
        assert result.trigger_id == "MOE-P1-01"
        assert result.tier == SeverityTier.T4
        assert result.priority == Priority.P1

    @pytest.mark.parametrize("context", [None, SLEEPING, TALL_OFFICE])
    def test_locked_exit_with_every_flag_set(self, context):
        finding = {flag: True for flag in HAZARD_FLAGS}
        finding["category"] = "DetectionAlarm"
        assert derive_severity(finding, context).trigger_id == "MOE-P1-01"

    def test_obstructed_exit(self):
        result = derive_severity({"category": "MeansOfEscape", "final_exit_obstructed": True})
        assert result.trigger_id == "MOE-P1-02"

    def test_no_detection_sleeping_is_p1(self):
        result = derive_severity({"category": "DetectionAlarm", "no_fire_detection": True}, SLEEPING)
        assert result.trigger_id == "DA-P1-01"
        assert result.priority == Priority.P1

    def test_no_detection_non_sleeping_is_p2(self):
        result = derive_severity({"category": "DetectionAlarm", "no_fire_detection": True}, OFFICE)
        assert result.trigger_id == "DA-P2-01"
        assert result.tier == SeverityTier.T3

    def test_no_emergency_lighting_depends_on_storeys(self):
        finding = {"category": "EmergencyLighting", "no_emergency_lighting": True}
        assert derive_severity(finding, {"storeys": 2}).trigger_id == "EL-P1-01"
        # Single storey: no P1/P2 rule applies to lighting alone
        assert derive_severity(finding, {"storeys": 1}).trigger_id == "GEN-P4-01"

    def test_single_stair_depends_on_storeys(self):
        finding = {"category": "MeansOfEscape", "single_stair_compromised": True}
        assert derive_severity(finding, {"storeys": 4}).trigger_id == "MOE-P1-03"
        assert derive_severity(finding, {"storeys": 3}).trigger_id == "MOE-P2-01"

    def test_compartmentation_depends_on_occupancy(self):
        finding = {"category": "Compartmentation", "serious_compartmentation_failure": True}
        assert derive_severity(finding, VULNERABLE).trigger_id == "COMP-P1-01"
        assert derive_severity(finding, OFFICE).trigger_id == "COMP-P2-01"

    def test_high_risk_room(self):
        result = derive_severity({"category": "FireDoors", "high_risk_room_to_escape_route": True})
        assert result.trigger_id == "COMP-P1-03"

    def test_inadequate_coverage(self):
        result = derive_severity({"category": "DetectionAlarm", "detection_inadequate_coverage": True})
        assert result.trigger_id == "DA-P2-02"

    def test_no_fra_evidence(self):
        result = derive_severity({"category": "Management", "no_fra_evidence_or_review": True})
        assert result.trigger_id == "MGMT-P2-01"

    @pytest.mark.parametrize("category", ["Management", "Housekeeping", "FireFighting"])
    def test_management_categories_are_p3(self, category):
        result = derive_severity({"category": category})
        assert result.trigger_id == "GEN-P3-01"
        assert result.tier == SeverityTier.T2
        assert result.priority == Priority.P3

    def test_default_is_good_practice(self):
        result = derive_severity({"category": "Other"})
        assert result.trigger_id == "GEN-P4-01"
        assert result.trigger_text == "Good practice recommendation."
        assert result.priority == Priority.P4

    def test_harder_trigger_beats_category(self):
        result = derive_severity({"category": "Housekeeping", "final_exit_obstructed": True})
        assert result.trigger_id == "MOE-P1-02"


class TestInputHandling:
    """Tests for defaults and validation at the boundary."""

    def test_unset_context_defaults(self):
        ctx = normalize_context(None)
        assert ctx.occupancy_risk == OccupancyRisk.NON_SLEEPING
        assert ctx.storeys == 0

    def test_null_flags_default_false(self):
        result = derive_severity({"category": "DetectionAlarm", "no_fire_detection": None})
        assert result.trigger_id == "GEN-P4-01"

    @pytest.mark.parametrize("value", ["unknown", "", [True], {"x": 1}, 0, "no"])
    def test_malformed_flag_defaults_false(self, value):
        result = derive_severity({"category": "MeansOfEscape", "final_exit_locked": value})
        assert result.trigger_id == "GEN-P4-01"

    @pytest.mark.parametrize("value", [True, "true", "Yes", 1])
    def test_truthy_flag_values(self, value):
        result = derive_severity({"category": "MeansOfEscape", "final_exit_locked": value})
        assert result.trigger_id == "MOE-P1-01"

    def test_malformed_context_defaults(self):
        ctx = normalize_context({"storeys": "three", "occupancy_risk": "Office"})
        assert ctx.occupancy_risk == OccupancyRisk.NON_SLEEPING
        assert ctx.storeys == 0

    def test_malformed_context_does_not_raise(self):
        finding = {"category": "DetectionAlarm", "no_fire_detection": True}
        result = derive_severity(finding, {"storeys": [3], "occupancy_risk": 42})
        assert result.trigger_id == "DA-P2-01"

    def test_numeric_string_storeys(self):
        finding = {"category": "EmergencyLighting", "no_emergency_lighting": True}
        assert derive_severity(finding, {"storeys": "2"}).trigger_id == "EL-P1-01"
        assert derive_severity(finding, {"storeys": -4}).trigger_id == "GEN-P4-01"

    def test_accepts_finding_model(self):
        finding = Finding(category=FindingCategory.DETECTION_ALARM, no_fire_detection=True)
        assert derive_severity_tier(finding, SLEEPING) == SeverityTier.T4

    def test_unknown_category_raises(self):
        with pytest.raises(UnknownCategoryError) as exc_info:
            derive_severity({"category": "Plumbing"})
        assert exc_info.value.error_type == "UNKNOWN_CATEGORY"

    def test_deterministic(self, sleeping_context):
        finding = {"category": "Compartmentation", "serious_compartmentation_failure": True}
        assert derive_severity(finding, sleeping_context) == derive_severity(finding, sleeping_context)

    def test_list_rules_in_order(self):
        rules = list_rules()
        assert rules[0]["trigger_id"] == "MOE-P1-01"
        assert rules[-1]["trigger_id"] == "GEN-P4-01"
        assert len(rules) == len(SEVERITY_RULES)


class TestMaterialDeficiency:
    """Tests for material deficiency detection."""

    def test_no_p1(self):
        result = check_material_deficiency([make_action(priority=Priority.P2)], OFFICE)
        assert result.is_material_deficiency is False
        assert result.triggers == []

    def test_p1_present(self):
        result = check_material_deficiency([make_action(priority=Priority.P1)], OFFICE)
        assert result.is_material_deficiency is True
        assert len(result.triggers) == 1

    def test_vulnerable_escalates(self):
        result = check_material_deficiency([{"severity_tier": "T4"}], VULNERABLE)
        assert result.is_material_deficiency is True
        assert any("Vulnerable" in t for t in result.triggers)


class TestExecutiveOutcome:
    """Tests for the qualitative document roll-up."""

    def test_empty(self):
        assert derive_executive_outcome([]) == ExecutiveOutcome.SATISFACTORY_WITH_IMPROVEMENTS

    def test_one_p1(self):
        actions = [make_action(priority=Priority.P1)] + [make_action(priority=Priority.P2)] * 5
        assert derive_executive_outcome(actions) == ExecutiveOutcome.MATERIAL_LIFE_SAFETY_RISK_PRESENT

    def test_three_p2_is_inclusive(self):
        actions = [make_action(priority=Priority.P2)] * 3
        assert derive_executive_outcome(actions) == ExecutiveOutcome.SIGNIFICANT_DEFICIENCIES

    def test_two_p2(self):
        actions = [make_action(priority=Priority.P2)] * 2
        assert derive_executive_outcome(actions) == ExecutiveOutcome.IMPROVEMENTS_REQUIRED

    def test_only_p3_p4(self):
        actions = [make_action(priority=Priority.P3), {"priority": "P4"}]
        assert derive_executive_outcome(actions) == ExecutiveOutcome.SATISFACTORY_WITH_IMPROVEMENTS
