"""
Tests for OutcomeThresholds and SuccessTestResult.
"""

import pytest
from pydantic import ValidationError

from src.sohl.exceptions import FrozenStateError, NotEvaluatedError
from src.sohl.models import (
    ModifierStack,
    OutcomeDegree,
    OutcomeThresholds,
    SimpleRoll,
    SuccessLevel,
    SuccessTestResult,
)


def d100(value: int) -> SimpleRoll:
    return SimpleRoll(num_dice=1, die=100).set_rolls([value])


class TestClassification:
    """Tests for the tiered roll-vs-target comparison."""

    @pytest.mark.parametrize(
        "roll, expected",
        [
            (1, OutcomeDegree.CRITICAL_SUCCESS),
            (2, OutcomeDegree.CRITICAL_SUCCESS),
            (3, OutcomeDegree.MARGINAL_SUCCESS),
            (6, OutcomeDegree.MARGINAL_SUCCESS),
            (12, OutcomeDegree.MARGINAL_SUCCESS),
            (13, OutcomeDegree.MARGINAL_FAILURE),
            (31, OutcomeDegree.MARGINAL_FAILURE),
            (32, OutcomeDegree.CRITICAL_FAILURE),
            (100, OutcomeDegree.CRITICAL_FAILURE),
        ],
    )
    def test_target_twelve(self, thresholds, roll, expected):
        assert thresholds.classify(roll, 12) == expected

    def test_ties_favor_success_with_zero_band(self):
        thresholds = OutcomeThresholds(failure_band=0)

        assert thresholds.classify(12, 12) == OutcomeDegree.MARGINAL_SUCCESS
        assert thresholds.classify(13, 12) == OutcomeDegree.CRITICAL_FAILURE

    def test_critical_threshold_never_below_one(self, thresholds):
        assert thresholds.critical_success_threshold(3) == 1
        assert thresholds.classify(1, 3) == OutcomeDegree.CRITICAL_SUCCESS

    def test_misty_isle_numbers(self):
        thresholds = OutcomeThresholds(critical_success_divisor=10, failure_band=10)

        assert thresholds.classify(5, 50) == OutcomeDegree.CRITICAL_SUCCESS
        assert thresholds.classify(59, 50) == OutcomeDegree.MARGINAL_FAILURE
        assert thresholds.classify(60, 50) == OutcomeDegree.CRITICAL_FAILURE

    def test_thresholds_are_immutable(self, thresholds):
        with pytest.raises(ValidationError):
            thresholds.failure_band = 5


class TestTargetValue:
    """Tests for target computation and clamping."""

    def test_target_includes_enabled_modifiers(self, thresholds):
        stack = ModifierStack().add("SitMod", 10).add("Wounds", -5)
        stack.disable("Wounds")
        test = SuccessTestResult(base_value=50, modifiers=stack, thresholds=thresholds)

        assert test.target_value == 60
        assert not test.is_capped

    def test_target_floor(self, thresholds):
        stack = ModifierStack().add("Darkness", -30)
        test = SuccessTestResult(base_value=10, modifiers=stack, thresholds=thresholds)

        assert test.raw_target == -20
        assert test.target_value == 1
        assert test.is_capped

    def test_target_ceiling(self):
        test = SuccessTestResult(
            base_value=120,
            thresholds=OutcomeThresholds(target_ceiling=95),
        )

        assert test.target_value == 95
        assert test.is_capped


class TestSuccessTestResult:
    """Tests for evaluating a success test."""

    def test_marginal_success(self, thresholds, fixed_rng):
        fixed_rng.queue(6)
        test = SuccessTestResult(base_value=12, thresholds=thresholds)

        degree = test.evaluate(fixed_rng)

        assert degree == OutcomeDegree.MARGINAL_SUCCESS
        assert test.success_level == SuccessLevel.MARGINAL_SUCCESS
        assert test.is_success
        assert not test.is_critical
        assert test.result_text == "Marginal Success"

    def test_critical_failure(self, thresholds, fixed_rng):
        fixed_rng.queue(95)
        test = SuccessTestResult(base_value=40, thresholds=thresholds)
        test.evaluate(fixed_rng)

        assert test.outcome_degree == OutcomeDegree.CRITICAL_FAILURE
        assert test.success_level == SuccessLevel.CRITICAL_FAILURE
        assert test.is_critical
        assert not test.is_success

    def test_outcome_before_evaluation_raises(self, thresholds):
        test = SuccessTestResult(base_value=50, thresholds=thresholds)

        assert not test.is_evaluated
        with pytest.raises(NotEvaluatedError):
            _ = test.outcome_degree

    def test_evaluate_freezes_modifiers(self, thresholds, fixed_rng):
        fixed_rng.queue(40)
        test = SuccessTestResult(base_value=50, thresholds=thresholds)
        test.evaluate(fixed_rng)

        with pytest.raises(FrozenStateError):
            test.modifiers.add("Late", 20)

    def test_evaluate_twice_keeps_first_roll(self, thresholds, fixed_rng):
        fixed_rng.queue(40)
        test = SuccessTestResult(base_value=50, thresholds=thresholds)

        assert test.evaluate(fixed_rng) == test.evaluate(fixed_rng)
        assert test.roll.total == 40

    def test_classify_is_pure(self, thresholds):
        test = SuccessTestResult(base_value=12, thresholds=thresholds)

        assert test.classify(d100(2)) == OutcomeDegree.CRITICAL_SUCCESS
        assert test.classify(d100(2)) == OutcomeDegree.CRITICAL_SUCCESS
        assert not test.is_evaluated

    def test_prior_result_cannot_be_self(self, thresholds):
        test = SuccessTestResult(base_value=12, thresholds=thresholds)

        with pytest.raises(ValueError):
            test.with_prior_result(test)

    def test_prior_result_records_id(self, thresholds):
        first = SuccessTestResult(base_value=12, thresholds=thresholds)
        second = SuccessTestResult(base_value=12, thresholds=thresholds).with_prior_result(first)

        assert second.prior_test_id == first.id


class TestSnapshot:
    """Tests for the plain-data view."""

    def test_unevaluated_snapshot(self, thresholds):
        snapshot = SuccessTestResult(base_value=30, thresholds=thresholds).snapshot()

        assert snapshot["kind"] == "SuccessTestResult"
        assert snapshot["target_value"] == 30
        assert snapshot["outcome_degree"] is None

    def test_evaluated_snapshot(self, thresholds, fixed_rng):
        fixed_rng.queue(6)
        test = SuccessTestResult(base_value=12, thresholds=thresholds, title="Climb")
        test.evaluate(fixed_rng)

        snapshot = test.snapshot()

        assert snapshot["outcome_degree"] == "marginal_success"
        assert snapshot["roll"]["rolls"] == [6]
        assert snapshot["title"] == "Climb"


class TestScenarios:
    """Worked examples from the rules."""

    def test_disabled_modifier_ignored_in_target(self, thresholds, fixed_rng):
        stack = ModifierStack().add("Bonus", 2).add("Penalty", -1)
        stack.disable("Penalty")
        test = SuccessTestResult(base_value=10, modifiers=stack, thresholds=thresholds)
        fixed_rng.queue(6)

        assert test.target_value == 12
        assert test.evaluate(fixed_rng) == OutcomeDegree.MARGINAL_SUCCESS

    def test_toggling_modifier_round_trips(self):
        stack = ModifierStack().add("SitMod", 7)
        before = stack.effective

        stack.disable("SitMod")
        assert stack.effective == before - 7
        stack.enable("SitMod")
        assert stack.effective == before

    @pytest.mark.parametrize("bonus", range(-40, 41, 10))
    def test_target_monotonic_in_modifiers(self, thresholds, bonus):
        lower = SuccessTestResult(base_value=20, modifiers=ModifierStack().add("M", bonus), thresholds=thresholds)
        higher = SuccessTestResult(base_value=20, modifiers=ModifierStack().add("M", bonus + 1), thresholds=thresholds)

        assert lower.target_value <= higher.target_value
        assert lower.target_value >= 1


class TestSuccessLevelShift:
    """Tests for shifting the classified outcome along the success scale."""

    @pytest.mark.parametrize(
        "roll, mod, expected",
        [
            (6, 1, OutcomeDegree.CRITICAL_SUCCESS),
            (13, 1, OutcomeDegree.MARGINAL_SUCCESS),
            (6, -1, OutcomeDegree.MARGINAL_FAILURE),
            (6, -2, OutcomeDegree.CRITICAL_FAILURE),
            (1, 3, OutcomeDegree.CRITICAL_SUCCESS),
            (40, -1, OutcomeDegree.CRITICAL_FAILURE),
        ],
    )
    def test_shift_is_clamped_to_scale(self, thresholds, roll, mod, expected):
        assert thresholds.classify(roll, 12, success_level_mod=mod) == expected

    def test_shift_applies_to_evaluated_test(self, thresholds, fixed_rng):
        fixed_rng.queue(6)
        test = SuccessTestResult(base_value=12, thresholds=thresholds, success_level_mod=1)

        assert test.evaluate(fixed_rng) == OutcomeDegree.CRITICAL_SUCCESS
        assert test.success_level == SuccessLevel.CRITICAL_SUCCESS


class TestCriticalSwitch:
    """Tests for tests that only succeed or fail."""

    @pytest.mark.parametrize(
        "roll, mod, expected",
        [
            (1, 0, OutcomeDegree.MARGINAL_SUCCESS),
            (12, 0, OutcomeDegree.MARGINAL_SUCCESS),
            (100, 0, OutcomeDegree.MARGINAL_FAILURE),
            (6, 1, OutcomeDegree.MARGINAL_SUCCESS),
            (13, 1, OutcomeDegree.MARGINAL_SUCCESS),
            (6, -3, OutcomeDegree.MARGINAL_FAILURE),
        ],
    )
    def test_no_criticals(self, thresholds, roll, mod, expected):
        assert thresholds.classify(roll, 12, success_level_mod=mod, crit_allowed=False) == expected

    def test_plain_result_text(self, thresholds, fixed_rng):
        fixed_rng.queue(1, 99)
        win = SuccessTestResult(base_value=50, thresholds=thresholds, crit_allowed=False)
        loss = SuccessTestResult(base_value=50, thresholds=thresholds, crit_allowed=False)
        win.evaluate(fixed_rng)
        loss.evaluate(fixed_rng)

        assert win.result_text == "Success"
        assert not win.is_critical
        assert loss.result_text == "Failure"
        assert not loss.is_critical


class TestOwnedInputs:
    """Tests that a result owns its inputs and keeps them once rolled."""

    def test_evaluate_leaves_caller_stack_editable(self, thresholds, fixed_rng):
        stack = ModifierStack().add("SitMod", 10)
        fixed_rng.queue(30)
        test = SuccessTestResult(base_value=40, modifiers=stack, thresholds=thresholds)
        test.evaluate(fixed_rng)

        assert test.modifiers is not stack
        assert not stack.frozen
        stack.add("Late", 20)
        assert test.target_value == 50

    def test_later_edits_do_not_reach_result(self, thresholds):
        stack = ModifierStack().add("SitMod", 10)
        test = SuccessTestResult(base_value=40, modifiers=stack, thresholds=thresholds)
        stack.add("Late", 20)

        assert test.target_value == 50

    @pytest.mark.parametrize(
        "field, value",
        [
            ("base_value", 99),
            ("roll", SimpleRoll(num_dice=1, die=100).set_rolls([1])),
            ("modifiers", ModifierStack().add("Sneak", 50)),
            ("success_level_mod", 1),
            ("crit_allowed", False),
        ],
    )
    def test_inputs_locked_after_evaluation(self, thresholds, fixed_rng, field, value):
        fixed_rng.queue(40)
        test = SuccessTestResult(base_value=50, thresholds=thresholds)
        test.evaluate(fixed_rng)

        with pytest.raises(FrozenStateError):
            setattr(test, field, value)
        assert test.outcome_degree == OutcomeDegree.MARGINAL_SUCCESS

    def test_inputs_editable_before_evaluation(self, thresholds):
        test = SuccessTestResult(base_value=50, thresholds=thresholds)
        test.base_value = 60

        assert test.target_value == 60
