import logging
import random
from src.sohl.models import SimpleRoll, RandomSource

logger = logging.getLogger(__name__)

# ============================================================
# RULES ENGINE
# ============================================================

class RulesEngine:
    """
    Owns the random source used to evaluate rolls. Seed it (or hand it a
    scripted source) for reproducible play.
    """

    def __init__(self, rng: RandomSource | None = None, seed: int | None = None):
        if rng is not None and seed is not None:
            raise ValueError("Pass either rng or seed, not both")
        self.rng: RandomSource = rng if rng is not None else random.Random(seed)
        logger.debug("RulesEngine ready (seed=%s, custom rng=%s)", seed, rng is not None)

    def roll_dice(self, formula: str) -> SimpleRoll:
        """
        Parses a dice string (e.g., '1d100', '2d6+3', 'd8-1', '+4') and rolls it.
        Returns the evaluated roll.
        """
        roll = SimpleRoll.from_formula(formula)
        self.evaluate(roll)
        return roll

    def evaluate(self, roll: SimpleRoll) -> int:
        """Evaluate a roll with this engine's random source. Idempotent."""
        return roll.evaluate(self.rng)
