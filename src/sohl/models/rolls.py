"""Dice expressions that evaluate exactly once.

A SimpleRoll holds a single ``NdF+M`` expression. Once evaluated, the die
results are frozen; rolling again means building a new SimpleRoll through
:meth:`SimpleRoll.reroll`.
"""

import logging
import random
import re
from typing import Protocol

from pydantic import BaseModel, Field, PrivateAttr

from src.sohl.exceptions import FrozenStateError, InvalidRollSpecError, NotEvaluatedError

logger = logging.getLogger(__name__)

# Optional dice term (e.g. 2d6, d100) followed by an optional signed modifier (e.g. +10, - 2)
FORMULA_PATTERN = re.compile(r"^(?:(\d*)d(\d+))?(?:\s*([+-]\s*\d+))?$", re.IGNORECASE)


class RandomSource(Protocol):
    """Anything able to draw uniform integers; random.Random satisfies this."""

    def randint(self, a: int, b: int) -> int: ...


def check_dice_spec(num_dice: int, die: int) -> None:
    if num_dice < 0:
        raise InvalidRollSpecError(f"Number of dice must be non-negative, got {num_dice}")
    if die <= 0:
        raise InvalidRollSpecError(f"Die size must be positive, got {die}")


class SimpleRoll(BaseModel):
    """A dice roll such as ``2d6+3``.

    Example:
        >>> roll = SimpleRoll.from_formula("2d6+3")
        >>> first = roll.evaluate(random.Random(7))
        >>> roll.evaluate() == first == roll.total
        True
    """
    num_dice: int = Field(default=1, ge=0)
    die: int = Field(default=100, gt=0)
    static_modifier: int = 0
    rolls: list[int] | None = None             # None until evaluated

    _frozen: bool = PrivateAttr(default=False)

    def __init__(self, **data):
        check_dice_spec(data.get("num_dice", 1), data.get("die", 100))
        super().__init__(**data)
        if self.rolls is not None:
            self._validate_values(self.rolls)

    def model_post_init(self, __context) -> None:
        # Rolls restored from a snapshot are already final
        self._frozen = self.rolls is not None

    @classmethod
    def from_formula(cls, formula: str) -> "SimpleRoll":
        """
        Parses formulas like '2d6+10', 'd100', '+4' or '3d6 - 1'.
        Both the dice term and the modifier are optional, but not both.
        """
        text = formula.strip()
        match = FORMULA_PATTERN.fullmatch(text)
        if not text or not match:
            raise InvalidRollSpecError(f"Invalid dice formula format: {formula}")

        num_dice_str, die_str, modifier_str = match.groups()
        if die_str:
            num_dice = int(num_dice_str) if num_dice_str else 1
            die = int(die_str)
        else:
            # Modifier only: no dice to roll
            num_dice, die = 0, 1
        modifier = int(re.sub(r"\s+", "", modifier_str)) if modifier_str else 0

        return cls(num_dice=num_dice, die=die, static_modifier=modifier)

    @property
    def is_evaluated(self) -> bool:
        return self.rolls is not None

    @property
    def total(self) -> int:
        """Frozen total of the dice plus the static modifier."""
        if self.rolls is None:
            raise NotEvaluatedError(f"Roll {self.formula} has not been evaluated")
        return sum(self.rolls) + self.static_modifier

    @property
    def formula(self) -> str:
        dice = f"{self.num_dice}d{self.die}" if self.num_dice else ""
        if not self.static_modifier:
            return dice or "0"
        sign = "+" if self.static_modifier > 0 else "-"
        return f"{dice}{sign}{abs(self.static_modifier)}"

    @property
    def median(self) -> int:
        """Statistical median of the roll, rounded to an integer."""
        dice_median = self.num_dice * (self.die + 1) / 2 if self.num_dice else 0
        return int(dice_median + 0.5) + self.static_modifier

    @property
    def minimum(self) -> int:
        return self.num_dice + self.static_modifier

    @property
    def maximum(self) -> int:
        return self.num_dice * self.die + self.static_modifier

    def evaluate(self, rng: RandomSource | None = None) -> int:
        """
        Roll the dice. If already rolled, returns the frozen total
        without drawing again.
        """
        if self.rolls is None:
            source = rng if rng is not None else random
            self.rolls = [source.randint(1, self.die) for _ in range(self.num_dice)]
            self._frozen = True
            logger.debug("Rolled %s -> %s (total %d)", self.formula, self.rolls, self.total)
        return self.total

    def set_rolls(self, values: list[int]) -> "SimpleRoll":
        """Fix the die results instead of drawing them (replays, tests)."""
        if self._frozen:
            raise FrozenStateError(f"Roll {self.formula} is already evaluated")
        self._validate_values(values)
        self.rolls = list(values)
        self._frozen = True
        return self

    def reroll(self) -> "SimpleRoll":
        """A fresh, unevaluated roll with the same expression."""
        return SimpleRoll(num_dice=self.num_dice, die=self.die, static_modifier=self.static_modifier)

    def _validate_values(self, values: list[int]) -> None:
        if len(values) != self.num_dice:
            raise InvalidRollSpecError(f"Expected {self.num_dice} roll values, got {len(values)}")
        for value in values:
            if not 1 <= value <= self.die:
                raise InvalidRollSpecError(f"Roll value {value} is outside 1..{self.die}")

    def __setattr__(self, name, value):
        if name in ("num_dice", "die", "static_modifier", "rolls") and self._frozen:
            raise FrozenStateError(f"Roll {self.formula} is already evaluated")
        super().__setattr__(name, value)
