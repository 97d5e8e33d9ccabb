import logging
from typing import Iterable, List

from src.sohl.exceptions import InvalidTransitionError, UnknownPlanError
from src.sohl.models import AIPlannedAction, AIPlanProposal, PlanStatus

logger = logging.getLogger(__name__)


class PlanWorkflow:
    """
    Central holder for plan proposals. Approver decisions arrive as calls
    on this object; nothing here waits or polls.
    """

    def __init__(self):
        self._plans: dict[str, AIPlanProposal] = {}

    def submit(self, proposal: AIPlanProposal) -> AIPlanProposal:
        """Register a new proposal for review."""
        self._check_submittable(proposal)
        self._plans[proposal.plan_id] = proposal
        logger.info("Plan %s submitted with %d action(s): %s",
                    proposal.plan_id, len(proposal.actions), proposal.summary)
        return proposal

    def get(self, plan_id: str) -> AIPlanProposal:
        try:
            return self._plans[plan_id]
        except KeyError:
            raise UnknownPlanError(f"No plan registered with id {plan_id}") from None

    def pending(self) -> List[AIPlanProposal]:
        return [p for p in self._plans.values() if p.status == PlanStatus.PENDING]

    def approve(self, plan_id: str) -> AIPlanProposal:
        return self.get(plan_id).approve()

    def reject(self, plan_id: str, reason: str = "") -> AIPlanProposal:
        proposal = self.get(plan_id).reject()
        if reason:
            logger.info("Plan %s rejected: %s", plan_id, reason)
        return proposal

    def cancel(self, plan_id: str) -> AIPlanProposal:
        return self.get(plan_id).cancel()

    def revise(
        self,
        plan_id: str,
        actions: Iterable[AIPlannedAction] | None = None,
        summary: str | None = None,
        assumptions: Iterable[str] | None = None,
    ) -> AIPlanProposal:
        """
        Mark a pending plan as revised and submit its successor. Anything
        not given carries over from the old plan, so approving a subset of
        actions means revising with the trimmed list.
        """
        original = self.get(plan_id)
        successor = AIPlanProposal(
            summary=summary if summary is not None else original.summary,
            actions=tuple(actions) if actions is not None else original.actions,
            assumptions=frozenset(assumptions) if assumptions is not None else original.assumptions,
            revision_of=original.plan_id,
        )
        return self._replace(original, successor)

    def adopt_revision(self, revision: AIPlanProposal) -> AIPlanProposal:
        """Submit a revision built elsewhere (e.g. by the planner) and retire its predecessor."""
        if revision.revision_of is None:
            raise ValueError(f"Plan {revision.plan_id} is not a revision")
        return self._replace(self.get(revision.revision_of), revision)

    def history(self, plan_id: str) -> List[AIPlanProposal]:
        """Revision lineage ending at plan_id, oldest first."""
        lineage = [self.get(plan_id)]
        while lineage[-1].revision_of is not None:
            lineage.append(self.get(lineage[-1].revision_of))
        lineage.reverse()
        return lineage

    def _check_submittable(self, proposal: AIPlanProposal) -> None:
        if not proposal.is_pending:
            raise InvalidTransitionError(
                f"Only pending proposals can be submitted; {proposal.plan_id} is {proposal.status.value}"
            )
        if proposal.plan_id in self._plans:
            raise ValueError(f"Plan {proposal.plan_id} was already submitted")

    def _replace(self, original: AIPlanProposal, successor: AIPlanProposal) -> AIPlanProposal:
        # Successor is validated before the original is retired
        self._check_submittable(successor)
        original.revise()
        return self.submit(successor)
