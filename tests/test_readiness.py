"""Tests for the issue-readiness validator."""
from __future__ import annotations

import pytest

from models.readiness import Blocker, IssueContext, ValidationResult
from models.shared import ActionStatus, BlockerType, SurveyType
from readiness import (
    compute_readiness_progress,
    get_combined_required_modules,
    get_required_modules,
    get_requirement_description,
    get_validation_summary,
    group_blockers_by_module,
    is_field_required,
    safe_validate_eligibility,
    validate_eligibility,
)
from readiness.requirements import ModuleRule

from factories import complete_progress, make_action


FRA = SurveyType.FRA
FSD = SurveyType.FSD
DSEAR = SurveyType.DSEAR


def _messages(result: ValidationResult) -> list[str]:
    return [b.message for b in result.blockers]


class TestRequiredModules:
    """Tests for the requirements matrix."""

    def test_fra_modules(self):
        keys = [m.key for m in get_required_modules(FRA)]
        assert keys[0] == "survey_info"
        assert "recommendations" in keys
        assert len(keys) == 9

    def test_fsd_conditional_modules_hidden_by_default(self):
        keys = [m.key for m in get_required_modules(FSD)]
        assert "limitations_reliance" not in keys
        assert "suppression" not in keys
        assert len(keys) == 7

    def test_fsd_conditional_modules_follow_context(self):
        ctx = IssueContext(engineered_solutions_used=True, requires_suppression=True, has_smoke_control=True)
        keys = [m.key for m in get_required_modules(FSD, ctx)]
        assert {"management_assumptions", "limitations_reliance", "suppression", "smoke_control"} <= set(keys)

    def test_combined_dedupes_by_key(self):
        combined = get_combined_required_modules([FRA, FSD])
        keys = [m.key for m in combined]

        assert len(keys) == len(set(keys))
        assert keys.count("survey_info") == 1
        assert len(keys) == 9 + 7 - 1

    def test_combined_keeps_first_seen_order(self):
        keys = [m.key for m in get_combined_required_modules([DSEAR, FRA])]
        assert keys[0] == "survey_info"
        assert keys.index("risk_evaluation") < keys.index("property_details")

    def test_substituted_matrix(self):
        matrix = {
            FRA: (ModuleRule("shared", "Shared"), ModuleRule("fra_only", "FRA only")),
            FSD: (ModuleRule("shared", "Shared"), ModuleRule("fsd_only", "FSD only")),
        }
        keys = [m.key for m in get_combined_required_modules([FRA, FSD], matrix=matrix)]
        assert keys == ["shared", "fra_only", "fsd_only"]

    def test_is_field_required(self):
        assert is_field_required(FRA, "survey_info", "scope_type") is True
        assert is_field_required(FRA, "survey_info", "client_logo") is False
        ctx = IssueContext(engineered_solutions_used=True)
        assert is_field_required(FSD, "limitations_reliance", "limitations_text", ctx) is True
        assert is_field_required(FSD, "limitations_reliance", "limitations_text") is False

    def test_requirement_description(self):
        assert get_requirement_description(FRA) == "9 required modules must be completed"
        ctx = IssueContext(has_smoke_control=True)
        assert get_requirement_description(FSD, ctx) == (
            "7 required modules must be completed, 1 conditional modules based on your selections"
        )


class TestModuleCompleteness:
    """Tests for module_incomplete blockers."""

    def test_incomplete_module_blocks(self):
        progress = complete_progress(FRA)
        progress["hazards"] = "in_progress"
        result = validate_eligibility([FRA], {}, {"no_significant_findings": True}, progress, [])

        assert result.eligible is False
        assert len(result.blockers) == 1
        blocker = result.blockers[0]
        assert blocker.type == BlockerType.MODULE_INCOMPLETE
        assert blocker.module_key == "hazards"
        assert blocker.message == "Fire Hazards must be completed"

    def test_shared_module_reported_once(self):
        result = validate_eligibility([FRA, FSD], {}, {"no_significant_findings": True}, {}, [])
        survey_info = [b for b in result.blockers if b.module_key == "survey_info"]
        assert len(survey_info) == 1


class TestFraRules:
    """Tests for FRA conditional rules."""

    def test_complete_fra_is_eligible(self):
        result = validate_eligibility(
            [FRA], {"scope_type": "full"}, {}, complete_progress(FRA), [make_action()],
        )
        assert result.eligible is True
        assert result.blockers == []

    @pytest.mark.parametrize("scope", ["limited", "desktop"])
    def test_limited_scope_needs_limitations_text(self, scope):
        result = validate_eligibility(
            [FRA], {"scope_type": scope}, {"scope_limitations": "  "}, complete_progress(FRA), [make_action()],
        )
        assert result.eligible is False
        blocker = result.blockers[0]
        assert blocker.type == BlockerType.CONDITIONAL_MISSING
        assert "Scope & Limitations" in blocker.message
        assert blocker.field_key == "scope_limitations"

    def test_limited_scope_with_text(self):
        result = validate_eligibility(
            [FRA], {"scope_type": "desktop"}, {"scope_limitations": "Roof void not accessed."},
            complete_progress(FRA), [make_action()],
        )
        assert result.eligible is True

    def test_no_recommendations(self):
        closed = make_action(status=ActionStatus.CLOSED)
        result = validate_eligibility([FRA], {}, {}, complete_progress(FRA), [closed])
        assert [b.type for b in result.blockers] == [BlockerType.NO_RECOMMENDATIONS]

    def test_superseded_action_is_not_open(self):
        result = validate_eligibility(
            [FRA], {}, {}, complete_progress(FRA), [{"status": "superseded"}],
        )
        assert result.eligible is False

    def test_no_significant_findings_confirmed(self):
        result = validate_eligibility(
            [FRA], {}, {"no_significant_findings": True}, complete_progress(FRA), [],
        )
        assert result.eligible is True


class TestFsdRules:
    """Tests for FSD conditional rules."""

    def test_engineered_solutions_need_text(self):
        ctx = {"engineered_solutions_used": True}
        progress = complete_progress(FSD)
        progress.update({"management_assumptions": "complete", "limitations_reliance": "complete"})
        result = validate_eligibility([FSD], ctx, {}, progress, [])

        assert [b.type for b in result.blockers] == [BlockerType.CONDITIONAL_MISSING] * 2
        assert result.blockers[0].message == "Limitations must be documented when using engineered solutions"

    def test_without_engineered_solutions(self):
        result = validate_eligibility([FSD], {}, {}, complete_progress(FSD), [])
        assert result.eligible is True


class TestDsearRules:
    """Tests for DSEAR conditional rules."""

    def _answers(self, **overrides):
        answers = {
            "substances": [{"name": "Acetone"}],
            "zones": [{"zone": "2"}],
            "controls_adequate_confirmed": True,
        }
        answers.update(overrides)
        return answers

    def test_complete_dsear_is_eligible(self):
        result = validate_eligibility([DSEAR], {}, self._answers(), complete_progress(DSEAR), [])
        assert result.eligible is True

    def test_missing_substances_blocks(self):
        result = validate_eligibility(
            [DSEAR], {}, self._answers(substances=[]), complete_progress(DSEAR), [],
        )
        assert [b.type for b in result.blockers] == [BlockerType.MISSING_FIELD]
        assert "dangerous substance" in result.blockers[0].message

    def test_no_dangerous_substances_confirmation_clears(self):
        answers = self._answers(substances=[], no_dangerous_substances=True)
        result = validate_eligibility([DSEAR], {}, answers, complete_progress(DSEAR), [])
        assert result.eligible is True

    def test_zones_or_confirmation(self):
        blocked = validate_eligibility([DSEAR], {}, self._answers(zones=None), complete_progress(DSEAR), [])
        assert "Zone classification must be documented OR confirm no zoned areas" in _messages(blocked)

        cleared = validate_eligibility(
            [DSEAR], {}, self._answers(zones=None, no_zoned_areas=True), complete_progress(DSEAR), [],
        )
        assert cleared.eligible is True

    def test_open_action_satisfies_controls_rule(self):
        answers = self._answers(controls_adequate_confirmed=False)
        result = validate_eligibility([DSEAR], {}, answers, complete_progress(DSEAR), [make_action()])
        assert result.eligible is True


class TestCombinedTypes:
    """Tests for multi-type validation."""

    def test_messages_prefixed_when_combined(self):
        progress = complete_progress(FRA, DSEAR)
        result = validate_eligibility([FRA, DSEAR], {}, {}, progress, [])
        messages = _messages(result)

        assert any(m.startswith("[FRA] ") for m in messages)
        assert any(m.startswith("[DSEAR] ") for m in messages)
        assert all(b.survey_type is not None for b in result.blockers)

    def test_single_type_not_prefixed(self):
        result = validate_eligibility([DSEAR], {}, {}, complete_progress(DSEAR), [])
        assert not any(m.startswith("[") for m in _messages(result))

    def test_duplicate_types_collapse(self):
        result = validate_eligibility([FRA, FRA], {}, {}, complete_progress(FRA), [])
        assert len(result.blockers) == 1
        assert not result.blockers[0].message.startswith("[FRA]")

    def test_module_blockers_come_first(self):
        result = validate_eligibility([FRA, DSEAR], {}, {}, {}, [])
        types = [b.type for b in result.blockers]
        first_conditional = next(i for i, t in enumerate(types) if t != BlockerType.MODULE_INCOMPLETE)
        assert all(t == BlockerType.MODULE_INCOMPLETE for t in types[:first_conditional])
        assert BlockerType.MODULE_INCOMPLETE not in types[first_conditional:]

    def test_string_types_accepted(self):
        result = validate_eligibility(["FRA"], {}, {"no_significant_findings": True}, complete_progress(FRA), [])
        assert result.eligible is True


class TestProgress:
    """Tests for the deduplicated readiness ratio."""

    def test_combined_ratio_uses_deduplicated_total(self):
        progress = complete_progress(FRA)
        ratio = compute_readiness_progress([FRA, FSD], {}, progress)

        assert ratio.total == 15
        assert ratio.completed == 9
        assert ratio.label == "9 / 15 complete"

    def test_empty_progress(self):
        assert compute_readiness_progress([DSEAR], None, None).label == "0 / 11 complete"


class TestSafeValidation:
    """Tests for the fail-closed wrapper."""

    def test_passes_through_result(self):
        result = safe_validate_eligibility([FRA], {}, {"no_significant_findings": True}, complete_progress(FRA), [])
        assert result.eligible is True

    def test_fails_closed(self):
        result = safe_validate_eligibility(["NOT_A_TYPE"], {}, {}, {}, [])

        assert result.eligible is False
        assert len(result.blockers) == 1
        assert result.blockers[0].type == BlockerType.MODULE_INCOMPLETE
        assert result.blockers[0].message == "Validation error occurred"

    def test_no_survey_types_raises(self):
        with pytest.raises(ValueError):
            validate_eligibility([], {}, {"no_significant_findings": True}, complete_progress(FRA), [])

    def test_no_survey_types_fails_closed(self):
        result = safe_validate_eligibility([], {}, {}, complete_progress(FRA), [])

        assert result.eligible is False
        assert _messages(result) == ["Validation error occurred"]


class TestPresentation:
    """Tests for grouping, summary and JSON shape."""

    def test_group_by_module(self):
        blockers = [
            Blocker(type=BlockerType.MODULE_INCOMPLETE, message="a", module_key="hazards"),
            Blocker(type=BlockerType.NO_RECOMMENDATIONS, message="b"),
            Blocker(type=BlockerType.MISSING_FIELD, message="c", module_key="hazards"),
        ]
        grouped = group_blockers_by_module(blockers)

        assert list(grouped) == ["hazards", "general"]
        assert [b.message for b in grouped["hazards"]] == ["a", "c"]

    def test_summary(self):
        assert get_validation_summary(ValidationResult(eligible=True)) == "All requirements met - ready to issue"
        one = ValidationResult(eligible=False, blockers=[Blocker(type=BlockerType.MISSING_FIELD, message="x")])
        assert get_validation_summary(one) == "1 issue must be resolved before issuing"
        two = ValidationResult(eligible=False, blockers=one.blockers * 2)
        assert get_validation_summary(two) == "2 issues must be resolved before issuing"

    def test_blocker_json_shape(self):
        blocker = Blocker(
            type=BlockerType.CONDITIONAL_MISSING,
            message="m",
            module_key="survey_info",
            field_key="scope_limitations",
            survey_type=FRA,
        )
        assert blocker.to_json() == {
            "type": "conditional_missing",
            "message": "m",
            "moduleKey": "survey_info",
            "fieldKey": "scope_limitations",
        }
        assert Blocker(type=BlockerType.NO_RECOMMENDATIONS, message="m").to_json() == {
            "type": "no_recommendations",
            "message": "m",
        }
