"""
Pytest fixtures for the SoHL resolution test suite.

Provides a scripted random source, thresholds, systems and engines, and a
mocked LLM client for the planner.
"""

import pytest
from unittest.mock import MagicMock

from src.sohl.core import (
    PlanWorkflow,
    ResolutionEngine,
    ResultRegistry,
    RulesEngine,
    legendary_system,
    misty_isle_system,
)
from src.sohl.llm import OllamaClient, PlannerOracle
from src.sohl.models import AIPlannedAction, AIPlanProposal, OutcomeThresholds, PlannedActionType


class FixedRandom:
    """Random source that hands out scripted values in order."""

    def __init__(self, *values: int):
        self.values = list(values)
        self.calls: list[tuple[int, int]] = []

    def queue(self, *values: int) -> "FixedRandom":
        self.values.extend(values)
        return self

    def randint(self, a: int, b: int) -> int:
        self.calls.append((a, b))
        if not self.values:
            raise AssertionError("FixedRandom ran out of scripted values")
        value = self.values.pop(0)
        assert a <= value <= b, f"scripted value {value} outside {a}..{b}"
        return value


# =============================================================================
# DICE FIXTURES
# =============================================================================


@pytest.fixture
def fixed_rng():
    """Provide an empty scripted random source; queue values per test."""
    return FixedRandom()


@pytest.fixture
def thresholds():
    """Legendary thresholds: divisor 5, failure band 20."""
    return OutcomeThresholds(critical_success_divisor=5, failure_band=20)


# =============================================================================
# ENGINE FIXTURES
# =============================================================================


@pytest.fixture
def system():
    return legendary_system()


@pytest.fixture
def misty_system():
    return misty_isle_system()


@pytest.fixture
def registry():
    return ResultRegistry()


@pytest.fixture
def engine(system, fixed_rng, registry):
    """ResolutionEngine driven by the scripted random source."""
    return ResolutionEngine(system=system, rules_engine=RulesEngine(rng=fixed_rng), registry=registry)


# =============================================================================
# PLAN FIXTURES
# =============================================================================


@pytest.fixture
def sample_actions():
    return [
        AIPlannedAction(
            type=PlannedActionType.CREATE_DOCUMENT,
            description="Create a Longsword item",
            payload={"documentType": "Item", "name": "Longsword"},
        ),
        AIPlannedAction(
            type=PlannedActionType.START_COMBAT,
            description="Start combat with the bandits",
        ),
    ]


@pytest.fixture
def proposal(sample_actions):
    return AIPlanProposal(
        summary="Arm Aldric and start the ambush",
        actions=sample_actions,
        assumptions=frozenset({"Aldric is the player character"}),
    )


@pytest.fixture
def workflow():
    return PlanWorkflow()


@pytest.fixture
def mock_llm():
    """Mocked Ollama client; set mock_llm.generate.return_value per test."""
    return MagicMock(spec=OllamaClient)


@pytest.fixture
def planner(mock_llm):
    return PlannerOracle(mock_llm)
