"""Session token budget tracking."""

import logging

logger = logging.getLogger(__name__)


def estimate_tokens(text: str, chars_per_token: int = 4) -> int:
    """Rough token count for text."""
    if chars_per_token <= 0:
        raise ValueError("chars_per_token must be positive")
    return round(len(text) / chars_per_token)


class SessionBudgetTracker:
    """Accumulate consumed tokens across turns of one session."""

    def __init__(self, total_limit: int = 990000):
        """Initialize tracker.

        Args:
            total_limit: Token budget for the session.
        """
        if total_limit <= 0:
            raise ValueError("total_limit must be positive")
        self._total_limit = total_limit
        self._consumed = 0
        self._turns_completed = 0

    @property
    def total_limit(self) -> int:
        return self._total_limit

    @property
    def consumed(self) -> int:
        return self._consumed

    @property
    def turns_completed(self) -> int:
        return self._turns_completed

    @property
    def is_over_limit(self) -> bool:
        return self._consumed >= self._total_limit

    @property
    def usage_percentage(self) -> float:
        return min(100.0, self._consumed / self._total_limit * 100)

    def record_usage(self, tokens: int) -> None:
        """Record the token count of one completed turn."""
        if tokens < 0:
            raise ValueError(f"token count cannot be negative: {tokens}")
        self._consumed += tokens
        self._turns_completed += 1
        logger.info(
            f"Budget: +{tokens} tokens, {self._consumed}/{self._total_limit} used"
        )

    def remaining(self) -> int:
        return max(0, self._total_limit - self._consumed)

    def average_cost_per_turn(self) -> int | None:
        """Observed average, or None before the first completed turn."""
        if self._turns_completed == 0 or self._consumed == 0:
            return None
        return round(self._consumed / self._turns_completed)

    def estimate_remaining_turns(self, avg_cost_per_turn: int) -> int:
        """Estimate how many more turns fit in the budget.

        Args:
            avg_cost_per_turn: Static per-turn estimate, used only until
                a turn has completed; afterwards the observed average wins.

        Returns:
            Number of turns, 0 when over the limit.
        """
        cost = self.average_cost_per_turn() or avg_cost_per_turn
        if self.is_over_limit or cost <= 0:
            return 0
        return self.remaining() // cost

    def reset(self) -> None:
        """Clear consumption (explicit "clear session" only)."""
        self._consumed = 0
        self._turns_completed = 0
        logger.info("Budget reset")
