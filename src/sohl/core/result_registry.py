import logging
from typing import List

from src.sohl.exceptions import UnknownResultError
from src.sohl.models import SuccessTestResult

logger = logging.getLogger(__name__)


class ResultRegistry:
    """
    Lookup table for test results by id. Results refer to the test that
    spawned them by id only; the registry resolves those links.
    """

    def __init__(self):
        self._results: dict[str, SuccessTestResult] = {}

    def __len__(self) -> int:
        return len(self._results)

    def __contains__(self, result_id: str) -> bool:
        return result_id in self._results

    def register(self, result: SuccessTestResult) -> SuccessTestResult:
        self._results[result.id] = result
        logger.debug("Registered %s %s", result.kind, result.id)
        return result

    def get(self, result_id: str) -> SuccessTestResult:
        try:
            return self._results[result_id]
        except KeyError:
            raise UnknownResultError(f"No result registered with id {result_id}") from None

    def prior_of(self, result: SuccessTestResult) -> SuccessTestResult | None:
        """The test that spawned this result, or None for a chain origin."""
        if result.prior_test_id is None:
            return None
        return self.get(result.prior_test_id)

    def chain(self, result: SuccessTestResult) -> List[SuccessTestResult]:
        """Walk back to the origin. Returns [origin, ..., result]."""
        chain = [result]
        seen = {result.id}
        current = result
        while (prior := self.prior_of(current)) is not None:
            if prior.id in seen:
                raise ValueError(f"Result chain through {prior.id} is cyclic")
            seen.add(prior.id)
            chain.append(prior)
            current = prior
        chain.reverse()
        return chain
