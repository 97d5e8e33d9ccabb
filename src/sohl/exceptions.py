# ============================================================
# RESOLUTION EXCEPTIONS
# ============================================================

class SohlError(Exception):
    """Base exception for all resolution and plan workflow errors"""
    pass


class InvalidRollSpecError(SohlError, ValueError):
    """Malformed dice parameters (non-positive die, negative count, bad formula)"""
    pass


class NotEvaluatedError(SohlError):
    """A derived value was read before its roll was evaluated"""
    pass


class FrozenStateError(SohlError):
    """Mutation of an evaluated roll, a frozen modifier stack, or an immutable plan field"""
    pass


class InvalidTransitionError(SohlError):
    """Illegal AIPlanProposal status change"""
    pass


# ============================================================
# WORKFLOW EXCEPTIONS
# ============================================================

class PlanNotApprovedError(SohlError):
    """A plan was handed to the executor before being approved"""
    pass


class UnsupportedActionError(SohlError):
    """No command is registered for a planned action type"""
    pass


class UnknownResultError(SohlError, KeyError):
    """No test result is registered under the requested id"""
    pass


class UnknownPlanError(SohlError, KeyError):
    """No plan proposal is registered under the requested id"""
    pass
