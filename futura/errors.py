"""Error types raised as rejection reasons by futures."""
from typing import Any, Iterable, List


class ChainingCycleError(TypeError):
    """A future was resolved with itself, directly or through a thenable."""

    def __init__(self, message: str = "Chaining cycle detected for future"):
        super().__init__(message)


class AggregateError(Exception):
    """Rejection reason of ``Future.any`` when every input rejected."""

    def __init__(self, errors: Iterable[Any], message: str = "All futures were rejected"):
        super().__init__(message)
        self.errors: List[Any] = list(errors)

    def __repr__(self) -> str:
        return f"AggregateError({self.errors!r})"


class RejectedError(Exception):
    """Raised when awaiting a future rejected with a non-exception reason."""

    def __init__(self, reason: Any):
        super().__init__(repr(reason))
        self.reason = reason
