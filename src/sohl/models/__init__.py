from .schemas import (
    Aspect,
    ASPECT_CHAR,
    SuccessLevel,
    OutcomeDegree,
    DEFAULT_DELIVERING_DEGREES,
    RollMode,
    SohlVariant,
)

from .rolls import (
    RandomSource,
    SimpleRoll,
)

from .modifiers import (
    Modifier,
    ModifierStack,
    ImpactModifier,
)

from .speaker import SohlSpeaker

from .results import (
    OutcomeThresholds,
    SuccessTestResult,
    ImpactResult,
    OpposedTestResult,
)

from .plans import (
    PlanStatus,
    PlannedActionType,
    AIPlannedAction,
    AIExecutionResult,
    AIPlanProposal,
)

__all__ = [
    # Schemas
    "Aspect",
    "ASPECT_CHAR",
    "SuccessLevel",
    "OutcomeDegree",
    "DEFAULT_DELIVERING_DEGREES",
    "RollMode",
    "SohlVariant",

    # Rolls & modifiers
    "RandomSource",
    "SimpleRoll",
    "Modifier",
    "ModifierStack",
    "ImpactModifier",

    # Results
    "SohlSpeaker",
    "OutcomeThresholds",
    "SuccessTestResult",
    "ImpactResult",
    "OpposedTestResult",

    # Plans
    "PlanStatus",
    "PlannedActionType",
    "AIPlannedAction",
    "AIExecutionResult",
    "AIPlanProposal",
]
