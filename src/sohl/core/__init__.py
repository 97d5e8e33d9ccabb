from typing import Any

from src.sohl.core.rules_engine import RulesEngine
from src.sohl.core.result_registry import ResultRegistry
from src.sohl.core.systems import SohlSystem, SOHL_VARIANTS, get_system, legendary_system, misty_isle_system
from src.sohl.core.resolution_engine import AttackRequest, AttackResolution, ResolutionEngine
from src.sohl.core.plan_workflow import PlanWorkflow
from src.sohl.core.plan_executor import CommandDefinition, PlanExecutor
from src.sohl.models import OutcomeThresholds, SohlVariant


def initialize_resolution_engine(
    variant: SohlVariant | str = SohlVariant.LEGENDARY,
    thresholds: OutcomeThresholds | None = None,
    seed: int | None = None,
    threshold_overrides: dict[str, Any] | None = None,
) -> ResolutionEngine:
    """Instantiate the rule components for a variant and return the ResolutionEngine."""
    system = get_system(variant, thresholds, overrides=threshold_overrides)
    rules_engine = RulesEngine(seed=seed)
    return ResolutionEngine(system=system, rules_engine=rules_engine, registry=ResultRegistry())


__all__ = [
    'RulesEngine',
    'ResultRegistry',
    'SohlSystem',
    'SOHL_VARIANTS',
    'get_system',
    'legendary_system',
    'misty_isle_system',
    'AttackRequest',
    'AttackResolution',
    'ResolutionEngine',
    'PlanWorkflow',
    'CommandDefinition',
    'PlanExecutor',
    'initialize_resolution_engine',
]
