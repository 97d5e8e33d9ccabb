import logging
from typing import Any
from uuid import uuid4
from enum import Enum
from pydantic import BaseModel, ConfigDict, Field, ValidationInfo, field_validator

from src.sohl.exceptions import FrozenStateError, InvalidTransitionError

logger = logging.getLogger(__name__)

# ========================================================================================
# PLANS: An agent's proposed sequence of actions. Nothing in a plan takes effect until a
# human approves the whole plan.
# ========================================================================================
class PlanStatus(str, Enum):
    PENDING = "pending"                     # Awaiting the approver
    APPROVED = "approved"                   # May be executed
    REJECTED = "rejected"                   # Dropped (also used for cancellation)
    REVISED = "revised"                     # Superseded by a new proposal
class PlannedActionType(str, Enum):
    CREATE_DOCUMENT = "createDocument"
    MODIFY_DOCUMENT = "modifyDocument"
    DELETE_DOCUMENT = "deleteDocument"
    CREATE_SCRIPT_ACTION = "createScriptAction"
    MODIFY_SCRIPT_ACTION = "modifyScriptAction"
    DELETE_SCRIPT_ACTION = "deleteScriptAction"
    CREATE_EVENT = "createEvent"
    MODIFY_EVENT = "modifyEvent"
    DELETE_EVENT = "deleteEvent"
    CREATE_TOKEN = "createToken"
    MODIFY_TOKEN = "modifyToken"
    DELETE_TOKEN = "deleteToken"
    START_COMBAT = "startCombat"
    END_COMBAT = "endCombat"
    ACTIVATE_ACTION = "activateAction"
    ADVANCE_GAME_TIME = "advanceGameTime"
    PAUSE_GAME = "pauseGame"
    RESUME_GAME = "resumeGame"
class AIPlannedAction(BaseModel):
    """One step of a plan. Opaque to the approval workflow."""
    model_config = ConfigDict(frozen=True)

    type: PlannedActionType
    description: str                        # Natural language summary of the step
    payload: dict[str, Any] = {}            # Parameters handed to the command
    preview: str | None = None              # Generated code or data, for the approver to inspect
class AIExecutionResult(BaseModel):
    """Outcome of executing one planned action"""
    message: str                            # Human-readable summary
    result: Any = None                      # Created or modified object, if any
    ref_id: str | None = None               # Handle for later plans, e.g. "item:fireball_scroll"
    preview: str | None = None

def new_plan_id() -> str:
    return f"plan_{uuid4().hex[:8]}"

# ============================================================
# PROPOSAL
# ============================================================
_IMMUTABLE_FIELDS = frozenset({"plan_id", "summary", "actions", "assumptions", "revision_of", "status"})

class AIPlanProposal(BaseModel):
    """
    A proposed, ordered list of actions awaiting approval.

    Lifecycle: PENDING -> APPROVED | REJECTED | REVISED. All three targets are
    terminal; a revision continues as a brand new proposal with its own plan_id.
    Approval covers the whole list; there is no partial approval.
    """
    plan_id: str = Field(default_factory=new_plan_id)
    summary: str
    actions: tuple[AIPlannedAction, ...] = ()
    assumptions: frozenset[str] = frozenset()
    status: PlanStatus = PlanStatus.PENDING
    revision_of: str | None = None          # plan_id of the proposal this one supersedes

    @field_validator("actions", mode="before")
    @classmethod
    def _freeze_actions(cls, value):
        return tuple(value) if isinstance(value, list) else value

    @field_validator("status")
    @classmethod
    def _starts_pending(cls, value: PlanStatus, info: ValidationInfo) -> PlanStatus:
        # Only restore() may bring back a plan that was already decided
        if value != PlanStatus.PENDING and not (info.context or {}).get("restore"):
            raise ValueError(f"New plans start pending, got {value.value}")
        return value

    @classmethod
    def restore(cls, data: dict[str, Any]) -> "AIPlanProposal":
        """Rebuild a saved proposal, keeping whatever status it was saved with."""
        return cls.model_validate(data, context={"restore": True})

    @property
    def is_pending(self) -> bool:
        return self.status == PlanStatus.PENDING

    def approve(self) -> "AIPlanProposal":
        return self._transition(PlanStatus.APPROVED)

    def reject(self) -> "AIPlanProposal":
        return self._transition(PlanStatus.REJECTED)

    def cancel(self) -> "AIPlanProposal":
        """Withdraw a pending plan. Same as rejecting it."""
        return self._transition(PlanStatus.REJECTED)

    def revise(self) -> "AIPlanProposal":
        return self._transition(PlanStatus.REVISED)

    def _transition(self, target: PlanStatus) -> "AIPlanProposal":
        if self.status != PlanStatus.PENDING:
            raise InvalidTransitionError(
                f"Plan {self.plan_id} is {self.status.value}; cannot move to {target.value}"
            )
        super().__setattr__("status", target)
        logger.info("Plan %s: pending -> %s", self.plan_id, target.value)
        return self

    def __setattr__(self, name, value):
        if name in _IMMUTABLE_FIELDS:
            raise FrozenStateError(f"'{name}' of plan {self.plan_id} cannot be reassigned")
        super().__setattr__(name, value)
