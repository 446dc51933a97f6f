"""
Exception classes raised by the backoff engine.

Every engine-produced failure derives from `BackoffError` and carries the
`TerminationReason` that ended the retry loop. `PermanentError` is the
marker an operation raises to stop retrying immediately.
"""

from enum import Enum


class TerminationReason(str, Enum):
    """Why a retry loop stopped."""

    SUCCESS = "success"
    RETRY_BUDGET_EXHAUSTED = "retry_budget_exhausted"
    TIME_BUDGET_EXHAUSTED = "time_budget_exhausted"
    CANCELLED = "cancelled"
    TERMINAL_ERROR = "terminal_error"


class BackoffError(Exception):
    """Base exception for all errors produced by the engine itself."""

    reason: TerminationReason

    def __init__(
        self,
        message: str,
        *,
        attempts: int = 0,
        elapsed: float | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.attempts = attempts
        self.elapsed = elapsed

    def __str__(self) -> str:
        parts = [self.message]
        if self.attempts:
            parts.append(f"(attempts: {self.attempts})")
        if self.elapsed is not None:
            parts.append(f"(elapsed: {self.elapsed:.2f}s)")
        return " ".join(parts)


class MaxRetriesExceeded(BackoffError):
    """Raised when the attempt counter reaches `max_retries`."""

    reason = TerminationReason.RETRY_BUDGET_EXHAUSTED

    def __init__(self, message: str = "Maximum retries exceeded", **kwargs):
        super().__init__(message, **kwargs)


class MaxElapsedTimeExceeded(BackoffError):
    """Raised when elapsed time since the first attempt passes `max_elapsed_time`."""

    reason = TerminationReason.TIME_BUDGET_EXHAUSTED

    def __init__(self, message: str = "Maximum elapsed time exceeded", **kwargs):
        super().__init__(message, **kwargs)


class BackoffCancelled(BackoffError):
    """Raised when the cancellation event fires before or between attempts."""

    reason = TerminationReason.CANCELLED

    def __init__(self, message: str = "Backoff cancelled", **kwargs):
        super().__init__(message, **kwargs)


class PermanentError(Exception):
    """
    Marks an error as non-retryable.

    The engine never surfaces this wrapper: it re-raises `cause` exactly as
    the operation produced it.
    """

    reason = TerminationReason.TERMINAL_ERROR

    def __init__(self, cause: BaseException):
        super().__init__(str(cause))
        self.cause = cause

    def unwrap(self) -> BaseException:
        """Return the original exception."""
        return self.cause

    def __repr__(self) -> str:
        return f"PermanentError({self.cause!r})"


def permanent(cause: BaseException) -> PermanentError:
    """Wrap `cause` so the engine stops retrying and raises it as-is."""
    return PermanentError(cause)


def find_permanent(exc: BaseException | None) -> PermanentError | None:
    """
    Find a `PermanentError` anywhere in an exception's chain.

    Follows `__cause__` first, then `__context__`, so a marker stays visible
    after other code re-raises it wrapped (`raise X from permanent(err)`).

    Args:
        exc: Exception to inspect (may be None)

    Returns:
        The first marker found, or None
    """
    seen: set[int] = set()
    while exc is not None and id(exc) not in seen:
        if isinstance(exc, PermanentError):
            return exc
        seen.add(id(exc))
        exc = exc.__cause__ if exc.__cause__ is not None else exc.__context__
    return None
