# ============================================================
# PLAN PARSING EXCEPTIONS
# ============================================================

class PlanParseError(Exception):
    """Base exception for plan proposal parsing errors"""
    pass


class JSONExtractionError(PlanParseError):
    """Could not extract JSON from LLM response"""
    pass


class ValidationFailedError(PlanParseError):
    """JSON was extracted but failed Pydantic validation"""
    pass
