import logging
from typing import Any, Callable, List

from pydantic import BaseModel

from src.sohl.exceptions import PlanNotApprovedError, UnsupportedActionError
from src.sohl.models import AIExecutionResult, AIPlanProposal, PlannedActionType, PlanStatus

logger = logging.getLogger(__name__)


class CommandDefinition(BaseModel):
    """Binds a planned action type to the code that carries it out"""
    type: PlannedActionType
    description: str
    execute: Callable[[dict[str, Any]], AIExecutionResult]
    example_payload: dict[str, Any] | None = None


class PlanExecutor:
    """
    Carries out approved plans, one action at a time, in plan order.
    Validating each action's payload is the job of its command.
    """

    def __init__(self, commands: List[CommandDefinition] | None = None):
        self._commands: dict[PlannedActionType, CommandDefinition] = {}
        for command in commands or []:
            self.register(command)

    def register(self, command: CommandDefinition) -> None:
        self._commands[command.type] = command

    def supports(self, action_type: PlannedActionType) -> bool:
        return action_type in self._commands

    def describe(self) -> List[dict[str, Any]]:
        """Catalog of registered commands, for prompting the planner."""
        return [
            {"type": c.type.value, "description": c.description, "example_payload": c.example_payload}
            for c in self._commands.values()
        ]

    def execute(self, proposal: AIPlanProposal) -> List[AIExecutionResult]:
        if proposal.status != PlanStatus.APPROVED:
            raise PlanNotApprovedError(
                f"Plan {proposal.plan_id} is {proposal.status.value}; only approved plans run"
            )

        # Check the whole plan up front so nothing runs if any step is unsupported
        missing = [a.type.value for a in proposal.actions if not self.supports(a.type)]
        if missing:
            raise UnsupportedActionError(f"No command registered for: {', '.join(missing)}")

        results = []
        for index, action in enumerate(proposal.actions):
            logger.info("Plan %s step %d: %s", proposal.plan_id, index, action.description)
            result = self._commands[action.type].execute(action.payload)
            results.append(result)
        return results
