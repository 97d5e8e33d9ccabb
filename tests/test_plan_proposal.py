"""
Tests for AIPlanProposal status transitions and immutability.
"""

import pytest
from pydantic import ValidationError

from src.sohl.exceptions import FrozenStateError, InvalidTransitionError
from src.sohl.models import AIPlannedAction, AIPlanProposal, PlannedActionType, PlanStatus


class TestTransitions:
    """Tests for the pending -> terminal lifecycle."""

    def test_new_proposal_is_pending(self, proposal):
        assert proposal.status == PlanStatus.PENDING
        assert proposal.is_pending
        assert proposal.plan_id.startswith("plan_")

    @pytest.mark.parametrize(
        "method, expected",
        [
            ("approve", PlanStatus.APPROVED),
            ("reject", PlanStatus.REJECTED),
            ("cancel", PlanStatus.REJECTED),
            ("revise", PlanStatus.REVISED),
        ],
    )
    def test_pending_transitions(self, proposal, method, expected):
        getattr(proposal, method)()

        assert proposal.status == expected

    def test_revised_cannot_be_approved(self, proposal):
        proposal.revise()

        with pytest.raises(InvalidTransitionError):
            proposal.approve()

    @pytest.mark.parametrize("first", ["approve", "reject", "revise"])
    def test_terminal_states_are_final(self, proposal, first):
        getattr(proposal, first)()

        for method in ("approve", "reject", "cancel", "revise"):
            with pytest.raises(InvalidTransitionError):
                getattr(proposal, method)()


class TestImmutability:
    """Tests for the fields a proposal never changes."""

    @pytest.mark.parametrize(
        "field, value",
        [
            ("summary", "Something else"),
            ("actions", ()),
            ("assumptions", frozenset()),
            ("plan_id", "plan_other"),
            ("status", PlanStatus.APPROVED),
        ],
    )
    def test_fields_cannot_be_reassigned(self, proposal, field, value):
        with pytest.raises(FrozenStateError):
            setattr(proposal, field, value)

    def test_actions_stored_as_tuple(self, proposal):
        assert isinstance(proposal.actions, tuple)
        assert [a.type for a in proposal.actions] == [
            PlannedActionType.CREATE_DOCUMENT,
            PlannedActionType.START_COMBAT,
        ]

    def test_actions_are_frozen(self, proposal):
        with pytest.raises(ValidationError):
            proposal.actions[0].description = "Changed"

    def test_unknown_action_type_rejected(self):
        with pytest.raises(ValidationError):
            AIPlannedAction(type="summonDragon", description="Nope")


class TestConstruction:
    """Tests that new proposals always start pending."""

    @pytest.mark.parametrize("status", ["approved", "rejected", "revised"])
    def test_decided_status_rejected(self, status):
        with pytest.raises(ValidationError):
            AIPlanProposal(summary="Skip the approver", status=status)

    def test_explicit_pending_allowed(self):
        assert AIPlanProposal(summary="Fine", status="pending").is_pending

    def test_restore_keeps_saved_status(self, proposal):
        proposal.approve()

        restored = AIPlanProposal.restore(proposal.model_dump())

        assert restored.status == PlanStatus.APPROVED
        assert restored.plan_id == proposal.plan_id
        assert restored.actions == proposal.actions

    def test_restored_plan_stays_terminal(self):
        restored = AIPlanProposal.restore({"summary": "Old", "status": "rejected"})

        with pytest.raises(InvalidTransitionError):
            restored.approve()
