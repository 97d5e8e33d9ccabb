from enum import Enum, IntEnum

# Enum Classes
class Aspect(str, Enum):            # Impact aspects. Decides which protection an impact is compared against.
    BLUNT = "blunt"
    EDGED = "edged"
    PIERCING = "piercing"
    FIRE = "fire"

ASPECT_CHAR: dict[Aspect, str] = {  # Short suffix used in impact labels, e.g. 2d6+3e
    Aspect.BLUNT: "b",
    Aspect.EDGED: "e",
    Aspect.PIERCING: "p",
    Aspect.FIRE: "f",
}

class SuccessLevel(IntEnum):        # Numeric scale of test outcomes.
    CRITICAL_FAILURE = -1
    MARGINAL_FAILURE = 0
    MARGINAL_SUCCESS = 1
    CRITICAL_SUCCESS = 2

class OutcomeDegree(str, Enum):     # Classified degree of a success test.
    CRITICAL_SUCCESS = "critical_success"
    MARGINAL_SUCCESS = "marginal_success"
    MARGINAL_FAILURE = "marginal_failure"
    CRITICAL_FAILURE = "critical_failure"

    @property
    def level(self) -> SuccessLevel:
        return SuccessLevel[self.name]

    @property
    def is_success(self) -> bool:
        return self.level >= SuccessLevel.MARGINAL_SUCCESS

    @property
    def is_critical(self) -> bool:
        return self in (OutcomeDegree.CRITICAL_SUCCESS, OutcomeDegree.CRITICAL_FAILURE)

    @property
    def text(self) -> str:
        return self.value.replace("_", " ").title()

    @classmethod
    def from_level(cls, level: int) -> "OutcomeDegree":
        return cls[SuccessLevel(level).name]

# Outcomes of the source test that let an impact land.
DEFAULT_DELIVERING_DEGREES = frozenset({
    OutcomeDegree.MARGINAL_SUCCESS,
    OutcomeDegree.CRITICAL_SUCCESS,
})

class RollMode(str, Enum):          # Visibility of a roll in the host chat log.
    SYSTEM = "roll"
    PUBLIC = "publicroll"
    SELF = "selfroll"
    BLIND = "blindroll"
    PRIVATE = "gmroll"

class SohlVariant(str, Enum):       # Rule variants shipped with the engine.
    LEGENDARY = "legendary"
    MISTY_ISLE = "mistyisle"
