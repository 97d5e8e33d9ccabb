"""
Rule variant descriptors.

A SohlSystem is the strategy object a variant hands to the resolution
engine: its thresholds, which outcomes let an impact land, and factories
that stamp variant defaults onto speakers and results. Variants are data,
built by the functions registered in SOHL_VARIANTS.
"""

import logging
from typing import Any, Callable

from pydantic import BaseModel, ConfigDict, Field

from src.sohl.models import (
    DEFAULT_DELIVERING_DEGREES,
    ImpactModifier,
    ImpactResult,
    ModifierStack,
    OutcomeDegree,
    OutcomeThresholds,
    RollMode,
    SimpleRoll,
    SohlSpeaker,
    SohlVariant,
    SuccessTestResult,
)

logger = logging.getLogger(__name__)


class SohlSystem(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: SohlVariant
    title: str
    init_message: str = ""
    thresholds: OutcomeThresholds = Field(default_factory=OutcomeThresholds)
    delivering_degrees: frozenset[OutcomeDegree] = DEFAULT_DELIVERING_DEGREES
    test_formula: str = "1d100"

    def chat_speaker_factory(
        self,
        parent: SohlSpeaker | str | None,
        roll_mode: RollMode | str = RollMode.SYSTEM,
    ) -> SohlSpeaker:
        """Speaker for a result, derived from a parent speaker or a plain name."""
        mode = RollMode(roll_mode)
        if isinstance(parent, SohlSpeaker):
            return parent.model_copy(update={"roll_mode": mode})
        return SohlSpeaker(name=parent or self.title, roll_mode=mode)

    def success_test_factory(
        self,
        base_value: int,
        modifiers: ModifierStack | None = None,
        title: str = "",
        speaker: SohlSpeaker | None = None,
        name: str = "",
        description: str = "",
        success_level_mod: int = 0,
        crit_allowed: bool = True,
    ) -> SuccessTestResult:
        return SuccessTestResult(
            name=name,
            title=title or f"{self.title} Success Test",
            description=description,
            speaker=speaker,
            base_value=base_value,
            modifiers=modifiers if modifiers is not None else ModifierStack(),
            thresholds=self.thresholds,
            roll=SimpleRoll.from_formula(self.test_formula),
            success_level_mod=success_level_mod,
            crit_allowed=crit_allowed,
        )

    def impact_result_factory(
        self,
        impact_modifier: ImpactModifier,
        title: str = "",
        speaker: SohlSpeaker | None = None,
    ) -> ImpactResult:
        return ImpactResult(
            title=title or f"{self.title} Impact",
            speaker=speaker,
            impact_modifier=impact_modifier,
            thresholds=self.thresholds,
            delivering_degrees=self.delivering_degrees,
        )


# ============================================================
# VARIANTS
# ============================================================

def legendary_system(thresholds: OutcomeThresholds | None = None) -> SohlSystem:
    return SohlSystem(
        id=SohlVariant.LEGENDARY,
        title="Legendary",
        init_message="SoHL | Legendary rules loaded",
        thresholds=thresholds or OutcomeThresholds(critical_success_divisor=5, failure_band=20),
    )


def misty_isle_system(thresholds: OutcomeThresholds | None = None) -> SohlSystem:
    return SohlSystem(
        id=SohlVariant.MISTY_ISLE,
        title="Misty Isle",
        init_message="SoHL | Misty Isle rules loaded",
        thresholds=thresholds or OutcomeThresholds(critical_success_divisor=10, failure_band=10),
    )


SOHL_VARIANTS: dict[SohlVariant, Callable[[OutcomeThresholds | None], SohlSystem]] = {
    SohlVariant.LEGENDARY: legendary_system,
    SohlVariant.MISTY_ISLE: misty_isle_system,
}


def get_system(
    variant_id: SohlVariant | str,
    thresholds: OutcomeThresholds | None = None,
    overrides: dict[str, Any] | None = None,
) -> SohlSystem:
    """
    Build the system for a variant id. Unknown ids raise KeyError.
    overrides replace individual threshold values and keep the rest.
    """
    try:
        variant = SohlVariant(variant_id)
    except ValueError:
        raise KeyError(f"Unknown SoHL variant: {variant_id}") from None
    system = SOHL_VARIANTS[variant](thresholds)
    if overrides:
        merged = OutcomeThresholds(**{**system.thresholds.model_dump(), **overrides})
        system = system.model_copy(update={"thresholds": merged})
    logger.info(system.init_message)
    return system
