import logging
from typing import List

from pydantic import BaseModel, Field

from src.sohl.core.result_registry import ResultRegistry
from src.sohl.core.rules_engine import RulesEngine
from src.sohl.core.systems import SohlSystem
from src.sohl.exceptions import NotEvaluatedError
from src.sohl.models import (
    ImpactModifier,
    ImpactResult,
    Modifier,
    ModifierStack,
    OpposedTestResult,
    SohlSpeaker,
    SuccessTestResult,
)

logger = logging.getLogger(__name__)


class AttackRequest(BaseModel):
    """Everything needed to resolve an attack and its impact"""
    base_value: int                                 # Attacker's skill
    modifiers: List[Modifier] = []                  # Situational modifiers on the attack
    impact_modifier: ImpactModifier                 # Weapon impact, e.g. 2d6 edged
    title: str = ""
    speaker: SohlSpeaker | None = None


class AttackResolution(BaseModel):
    """The attack test, its impact, and mechanical narration"""
    attack: SuccessTestResult
    impact: ImpactResult
    narration_fragments: List[str] = Field(default_factory=list)

    @property
    def effective_impact(self) -> int:
        return self.impact.effective_impact()


class ResolutionEngine:
    """
    Runs success tests and chains impacts onto them. No LLM calls here,
    this is pure game logic. Variant behavior comes from the injected system.
    """

    def __init__(self, system: SohlSystem, rules_engine: RulesEngine, registry: ResultRegistry | None = None):
        self.system = system
        self.rules = rules_engine
        self.registry = registry if registry is not None else ResultRegistry()

    def run_success_test(
        self,
        base_value: int,
        modifiers: ModifierStack | None = None,
        title: str = "",
        speaker: SohlSpeaker | None = None,
        success_level_mod: int = 0,
        crit_allowed: bool = True,
    ) -> SuccessTestResult:
        """Build, roll, classify and register a success test."""
        test = self.system.success_test_factory(
            base_value,
            modifiers=modifiers,
            title=title,
            speaker=speaker,
            success_level_mod=success_level_mod,
            crit_allowed=crit_allowed,
        )
        test.evaluate(self.rules.rng)
        return self.registry.register(test)

    def run_impact_test(
        self,
        source: SuccessTestResult,
        impact_modifier: ImpactModifier,
        title: str = "",
        speaker: SohlSpeaker | None = None,
    ) -> ImpactResult:
        """
        Roll the impact of a finished test. The source's classification must
        be final before the impact is built.
        """
        if not source.is_evaluated:
            raise NotEvaluatedError(f"Source test {source.id} must be evaluated before its impact")
        if source.id not in self.registry:
            self.registry.register(source)

        impact = self.system.impact_result_factory(
            impact_modifier, title=title, speaker=speaker or source.speaker
        )
        impact.resolve(source, self.rules.rng)
        return self.registry.register(impact)

    def run_opposed_test(
        self,
        source_base: int,
        target_base: int,
        source_modifiers: ModifierStack | None = None,
        target_modifiers: ModifierStack | None = None,
        title: str = "",
        tie_break: int = 0,
    ) -> OpposedTestResult:
        """Roll both sides; the target's test is linked back to the source's."""
        title = title or "Opposed Test"
        source = self.run_success_test(source_base, modifiers=source_modifiers, title=title)
        target = self.system.success_test_factory(
            target_base, modifiers=target_modifiers, title=f"{title} (target)"
        )
        target.with_prior_result(source)
        target.evaluate(self.rules.rng)
        self.registry.register(target)

        opposed = OpposedTestResult(title=title, source=source, target=target, tie_break=tie_break)
        logger.info(
            "%s: source %s, target %s",
            title, source.outcome_degree.value, target.outcome_degree.value,
        )
        return opposed

    def resolve_attack(self, request: AttackRequest) -> AttackResolution:
        """Attack test first, then the impact chained onto it."""
        stack = ModifierStack(modifiers=[m.model_copy() for m in request.modifiers])
        attack = self.run_success_test(
            request.base_value, modifiers=stack, title=request.title or "Attack", speaker=request.speaker
        )
        impact = self.run_impact_test(
            attack, request.impact_modifier.model_copy(deep=True), speaker=request.speaker
        )

        resolution = AttackResolution(attack=attack, impact=impact)
        resolution.narration_fragments.append(self._narrate_test(attack))
        resolution.narration_fragments.append(self._narrate_impact(impact))
        return resolution

    def _narrate_test(self, result: SuccessTestResult) -> str:
        """Generate a simple narration fragment for a test"""
        # Mechanical narration; the narrator embellishes later
        label = result.result_text.upper()
        return f"[{label}] {result.title}: rolled {result.roll.total} vs {result.target_value}"

    def _narrate_impact(self, impact: ImpactResult) -> str:
        if impact.delivers_impact:
            return f"[IMPACT] {impact.impact_modifier.label}: {impact.effective_impact()} {impact.aspect.value}"
        return f"[NO IMPACT] {impact.impact_modifier.label}: rolled {impact.roll.total}, negated"
