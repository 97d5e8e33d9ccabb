"""
Success test, impact and opposed test results.

A SuccessTestResult compares a roll against a target built from a base
value and a modifier stack. An ImpactResult layers an impact roll on top
of a prior success test: the impact is always rolled, but only delivered
when the source test's outcome allows it. An OpposedTestResult pits two
success tests against each other.
"""

import logging
from typing import Any, Literal
from uuid import uuid4

from pydantic import BaseModel, ConfigDict, Field, PrivateAttr, field_validator

from src.sohl.exceptions import FrozenStateError
from src.sohl.models.modifiers import ImpactModifier, ModifierStack
from src.sohl.models.rolls import RandomSource, SimpleRoll
from src.sohl.models.schemas import Aspect, DEFAULT_DELIVERING_DEGREES, OutcomeDegree, SuccessLevel
from src.sohl.models.speaker import SohlSpeaker

logger = logging.getLogger(__name__)


def new_result_id() -> str:
    return f"result_{uuid4().hex[:8]}"


# ============================================================
# THRESHOLDS
# ============================================================

class OutcomeThresholds(BaseModel):
    """Variant-tunable numbers that drive outcome classification."""
    model_config = ConfigDict(frozen=True)

    critical_success_divisor: int = Field(default=5, gt=0)
    failure_band: int = Field(default=20, ge=0)     # Rolls this far over target are critical failures
    target_floor: int = 1
    target_ceiling: int | None = None

    def clamp(self, raw_target: int) -> int:
        target = max(self.target_floor, raw_target)
        if self.target_ceiling is not None:
            target = min(self.target_ceiling, target)
        return target

    def critical_success_threshold(self, target: int) -> int:
        return max(1, target // self.critical_success_divisor)

    def classify(
        self,
        roll_total: int,
        target: int,
        success_level_mod: int = 0,
        crit_allowed: bool = True,
    ) -> OutcomeDegree:
        """
        Tiered comparison of a roll total against a target:
        - at or under target / divisor (minimum 1): critical success
        - at or under target: marginal success (ties favor success)
        - at or over target + failure band: critical failure
        - otherwise: marginal failure

        success_level_mod then shifts the result along the success scale.
        Without criticals the result stays marginal, before and after the shift.
        """
        if crit_allowed and roll_total <= self.critical_success_threshold(target):
            degree = OutcomeDegree.CRITICAL_SUCCESS
        elif roll_total <= target:
            degree = OutcomeDegree.MARGINAL_SUCCESS
        elif crit_allowed and roll_total >= target + self.failure_band:
            degree = OutcomeDegree.CRITICAL_FAILURE
        else:
            degree = OutcomeDegree.MARGINAL_FAILURE

        if not success_level_mod:
            return degree
        if crit_allowed:
            low, high = SuccessLevel.CRITICAL_FAILURE, SuccessLevel.CRITICAL_SUCCESS
        else:
            low, high = SuccessLevel.MARGINAL_FAILURE, SuccessLevel.MARGINAL_SUCCESS
        return OutcomeDegree.from_level(min(max(degree.level + success_level_mod, low), high))


# ============================================================
# SUCCESS TEST
# ============================================================

# Inputs to the outcome; fixed once the roll is evaluated
_LOCKED_FIELDS = frozenset({
    "base_value", "modifiers", "thresholds", "roll", "success_level_mod", "crit_allowed",
    "impact_modifier", "delivering_degrees",
})


def _test_roll() -> SimpleRoll:
    return SimpleRoll(num_dice=1, die=100)


class SuccessTestResult(BaseModel):
    """A capability check: base value + modifiers vs. a roll."""
    kind: Literal["SuccessTestResult"] = "SuccessTestResult"
    id: str = Field(default_factory=new_result_id)

    name: str = ""
    title: str = ""
    description: str = ""
    speaker: SohlSpeaker | None = None

    base_value: int
    modifiers: ModifierStack = Field(default_factory=ModifierStack)
    thresholds: OutcomeThresholds = Field(default_factory=OutcomeThresholds)
    roll: SimpleRoll = Field(default_factory=_test_roll)
    success_level_mod: int = 0              # Shifts the classified outcome up or down the scale
    crit_allowed: bool = True               # False limits outcomes to plain success/failure

    # Audit link to the test that spawned this one, looked up through a ResultRegistry
    prior_test_id: str | None = None

    @field_validator("modifiers")
    @classmethod
    def _own_modifiers(cls, value: ModifierStack) -> ModifierStack:
        # Evaluation freezes the stack; the caller's copy must stay editable
        return value.model_copy(deep=True)

    @property
    def raw_target(self) -> int:
        return self.base_value + self.modifiers.effective

    @property
    def target_value(self) -> int:
        return self.thresholds.clamp(self.raw_target)

    @property
    def is_capped(self) -> bool:
        return self.target_value != self.raw_target

    @property
    def is_evaluated(self) -> bool:
        return self.roll is not None and self.roll.is_evaluated

    def classify(self, roll: SimpleRoll) -> OutcomeDegree:
        """Outcome degree of a roll against this test's target. Pure."""
        return self.thresholds.classify(
            roll.total, self.target_value, self.success_level_mod, self.crit_allowed
        )

    @property
    def outcome_degree(self) -> OutcomeDegree:
        return self.classify(self.roll)

    @property
    def success_level(self) -> SuccessLevel:
        return self.outcome_degree.level

    @property
    def is_success(self) -> bool:
        return self.outcome_degree.is_success

    @property
    def is_critical(self) -> bool:
        return self.outcome_degree.is_critical

    @property
    def result_text(self) -> str:
        if not self.crit_allowed:
            return "Success" if self.is_success else "Failure"
        return self.outcome_degree.text

    def evaluate(self, rng: RandomSource | None = None) -> OutcomeDegree:
        """Freeze the modifiers, roll, and classify."""
        self.modifiers.freeze()
        self.roll.evaluate(rng)
        degree = self.outcome_degree
        logger.info(
            "%s: rolled %d vs target %d -> %s",
            self.title or self.kind, self.roll.total, self.target_value, degree.value,
        )
        return degree

    def with_prior_result(self, test: "SuccessTestResult") -> "SuccessTestResult":
        """Record which test spawned this one. Touches nothing else."""
        if test.id == self.id:
            raise ValueError(f"Result {self.id} cannot be its own prior result")
        self.prior_test_id = test.id
        return self

    def snapshot(self) -> dict[str, Any]:
        """Plain-data view of the result, including derived values."""
        data = self.model_dump(mode="json")
        data["target_value"] = self.target_value
        data["outcome_degree"] = self.outcome_degree.value if self.is_evaluated else None
        return data

    def __setattr__(self, name, value):
        if name in _LOCKED_FIELDS and self.is_evaluated:
            raise FrozenStateError(f"'{name}' of {self.id} is fixed once its roll is evaluated")
        super().__setattr__(name, value)


# ============================================================
# IMPACT
# ============================================================

class ImpactResult(SuccessTestResult):
    """
    Impact (damage/effect) of a successful test. The impact roll is always
    made for display; ``delivers_impact`` alone decides whether it counts,
    and only ``resolve`` sets it.
    """
    kind: Literal["ImpactResult"] = "ImpactResult"
    base_value: int = 0
    impact_modifier: ImpactModifier = Field(default_factory=ImpactModifier)
    delivering_degrees: frozenset[OutcomeDegree] = DEFAULT_DELIVERING_DEGREES
    roll: SimpleRoll | None = None

    _delivers_impact: bool = PrivateAttr(default=False)

    @field_validator("impact_modifier")
    @classmethod
    def _own_impact_modifier(cls, value: ImpactModifier) -> ImpactModifier:
        return value.model_copy(deep=True)

    def model_post_init(self, __context) -> None:
        if self.roll is None:
            self.roll = self.impact_modifier.roll_spec()

    @property
    def delivers_impact(self) -> bool:
        return self._delivers_impact

    @property
    def aspect(self) -> Aspect:
        return self.impact_modifier.aspect

    def resolve(self, source: SuccessTestResult, rng: RandomSource | None = None) -> bool:
        """
        Decide whether the impact lands, based on the source test's outcome.
        The source must already be evaluated.
        """
        degree = source.outcome_degree
        self.with_prior_result(source)
        self.impact_modifier.freeze()
        self.roll.evaluate(rng)
        self._delivers_impact = degree in self.delivering_degrees
        logger.info(
            "Impact %s from %s (%s): %s",
            self.impact_modifier.label, source.id, degree.value,
            "delivered" if self._delivers_impact else "negated",
        )
        return self._delivers_impact

    def effective_impact(self) -> int:
        if not self._delivers_impact:
            return 0
        return max(0, self.roll.total + self.impact_modifier.effective)

    def snapshot(self) -> dict[str, Any]:
        data = super().snapshot()
        data["delivers_impact"] = self._delivers_impact
        data["effective_impact"] = self.effective_impact()
        return data


# ============================================================
# OPPOSED TEST
# ============================================================

class OpposedTestResult(BaseModel):
    """
    Two success tests compared by success level, e.g. attack vs. defense.
    When both fail nobody wins and it is not a tie.
    """
    kind: Literal["OpposedTestResult"] = "OpposedTestResult"
    id: str = Field(default_factory=new_result_id)
    title: str = ""

    source: SuccessTestResult
    target: SuccessTestResult
    tie_break: int = Field(default=0, ge=-1, le=1)  # 1 favors source, -1 favors target

    def evaluate(self, rng: RandomSource | None = None) -> "OpposedTestResult":
        self.source.evaluate(rng)
        self.target.evaluate(rng)
        return self

    @property
    def both_fail(self) -> bool:
        return not self.source.is_success and not self.target.is_success

    @property
    def is_tied(self) -> bool:
        return not self.both_fail and self.source.success_level == self.target.success_level

    @property
    def source_wins(self) -> bool:
        return not self.both_fail and self.source.success_level > self.target.success_level

    @property
    def target_wins(self) -> bool:
        return not self.both_fail and self.source.success_level < self.target.success_level

    @property
    def tie_break_offset(self) -> int:
        return 0 if self.both_fail else self.tie_break
