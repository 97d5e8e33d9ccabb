from src.sohl.llm.client import OllamaClient
from src.sohl.llm.planner_oracle import PlannerOracle
from src.sohl.llm.prompts import PlannerPrompts
from src.sohl.llm.exceptions import PlanParseError, JSONExtractionError, ValidationFailedError

__all__ = [
    'OllamaClient',
    'PlannerOracle',
    'PlannerPrompts',
    'PlanParseError',
    'JSONExtractionError',
    'ValidationFailedError',
]
