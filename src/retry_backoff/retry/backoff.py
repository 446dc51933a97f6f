"""
Backoff engine: interval growth, jitter and the retry loop.
"""

import asyncio
import functools
import logging
import random
import threading
import time
from dataclasses import dataclass, field
from enum import Enum
from typing import Awaitable, Callable, ParamSpec, TypeVar

from .config import BackoffConfig, Option
from ..exceptions import (
    BackoffCancelled,
    MaxElapsedTimeExceeded,
    MaxRetriesExceeded,
    find_permanent,
)

logger = logging.getLogger(__name__)

P = ParamSpec("P")
T = TypeVar("T")

Operation = Callable[[threading.Event | None], T]
AsyncOperation = Callable[[asyncio.Event | None], Awaitable[T]]


class Outcome(str, Enum):
    """Classification of a single operation call."""

    SUCCESS = "success"
    RETRYABLE = "retryable"
    TERMINAL = "terminal"


def classify(error: BaseException | None) -> tuple[Outcome, BaseException | None]:
    """
    Classify the result of one operation call.

    Returns:
        The outcome and the exception to surface; for TERMINAL this is the
        unwrapped original cause
    """
    if error is None:
        return Outcome.SUCCESS, None
    marker = find_permanent(error)
    if marker is not None:
        return Outcome.TERMINAL, marker.unwrap()
    return Outcome.RETRYABLE, error


def next_interval(current: float, config: BackoffConfig) -> float:
    """
    Calculate the next pre-jitter interval.

    Args:
        current: Current pre-jitter interval in seconds
        config: Backoff configuration

    Returns:
        Next interval, never above `config.max_interval`
    """
    # Same as current >= max_interval / multiplier
    if current * config.multiplier >= config.max_interval:
        return config.max_interval
    if config.exponential:
        return current * config.multiplier
    return config.interval


def apply_jitter(
    base: float, factor: float, rng: random.Random | None = None
) -> float:
    """
    Draw a delay uniformly from [base - factor*base, base + factor*base].

    Args:
        base: Pre-jitter interval in seconds
        factor: Randomization factor in [0, 1]
        rng: Generator to draw from (default: a fresh OS-seeded one)

    Returns:
        Delay in seconds
    """
    if factor <= 0:
        return base
    rng = rng or random.Random()
    delta = factor * base
    return max(0.0, rng.uniform(base - delta, base + delta))


@dataclass
class RetryState:
    """Mutable state of one `execute` call."""

    interval: float
    rng: random.Random | None
    started: float = field(default_factory=time.monotonic)
    attempt: int = 0

    def elapsed(self) -> float:
        return time.monotonic() - self.started


class Backoff:
    """
    Retries an operation with a growing, jittered wait between attempts.

    The engine holds only immutable configuration; every `execute` call
    gets its own `RetryState`, so one instance can serve concurrent callers.

    Example:
        boff = Backoff(exponential(), max_retries(5))
        body = boff.execute(lambda cancel: fetch(url), cancel=stop_event)
    """

    def __init__(
        self,
        *options: Option,
        config: BackoffConfig | None = None,
        rng: random.Random | None = None,
    ):
        """
        Initialize the engine.

        Args:
            *options: Named options applied over `config`
            config: Base configuration (default: BackoffConfig())
            rng: Shared generator for reproducible jitter; guarded by a lock.
                When omitted each call draws from its own generator.
        """
        self._config = (config or BackoffConfig()).with_options(*options)
        self._rng = rng
        self._rng_lock = threading.Lock()

    @property
    def config(self) -> BackoffConfig:
        return self._config

    def _new_state(self) -> RetryState:
        rng = random.Random() if self._rng is None else None
        return RetryState(interval=self._config.interval, rng=rng)

    def _jitter(self, state: RetryState, base: float) -> float:
        factor = self._config.randomization_factor
        if state.rng is not None:
            return apply_jitter(base, factor, state.rng)
        with self._rng_lock:
            return apply_jitter(base, factor, self._rng)

    def _on_failure(self, state: RetryState, error: Exception) -> float:
        """
        Advance the state after a failed call.

        Returns:
            Delay in seconds before the next attempt

        Raises:
            The unwrapped cause for terminal errors, or a budget error
        """
        outcome, surfaced = classify(error)
        if outcome is Outcome.TERMINAL:
            logger.debug(f"Terminal error on attempt {state.attempt + 1}: {surfaced!r}")
            raise surfaced

        config = self._config
        state.attempt += 1

        if config.max_retries and state.attempt >= config.max_retries:
            logger.error(f"All {config.max_retries} attempts failed, last error: {error}")
            raise MaxRetriesExceeded(
                attempts=state.attempt, elapsed=state.elapsed()
            ) from error

        elapsed = state.elapsed()
        if config.max_elapsed_time and elapsed > config.max_elapsed_time:
            logger.error(
                f"Gave up after {elapsed:.1f}s "
                f"(limit {config.max_elapsed_time:.1f}s), last error: {error}"
            )
            raise MaxElapsedTimeExceeded(
                attempts=state.attempt, elapsed=elapsed
            ) from error

        state.interval = next_interval(state.interval, config)
        delay = self._jitter(state, state.interval)

        if config.on_retry:
            config.on_retry(error, delay, state.attempt)
        else:
            limit = f"/{config.max_retries}" if config.max_retries else ""
            logger.warning(f"Retry {state.attempt}{limit}: {error}, waiting {delay:.1f}s")
        return delay

    def _cancelled(self, state: RetryState) -> BackoffCancelled:
        logger.info(f"Cancelled after {state.attempt} failed attempt(s)")
        return BackoffCancelled(attempts=state.attempt, elapsed=state.elapsed())

    def execute(
        self,
        operation: Operation[T],
        cancel: threading.Event | None = None,
    ) -> T:
        """
        Call `operation(cancel)` until it returns.

        Args:
            operation: Callable taking the cancellation event; raising means failure
            cancel: Event that aborts the loop, also mid-wait

        Returns:
            Whatever the operation returned

        Raises:
            The original cause of a `PermanentError`, `MaxRetriesExceeded`,
            `MaxElapsedTimeExceeded` or `BackoffCancelled`
        """
        state = self._new_state()
        while True:
            if cancel is not None and cancel.is_set():
                raise self._cancelled(state)
            try:
                return operation(cancel)
            except Exception as e:
                error = e
            # Outside the except block: a terminal cause must not gain a __context__.
            delay = self._on_failure(state, error)
            if cancel is None:
                time.sleep(delay)
            elif cancel.wait(delay):
                raise self._cancelled(state)

    async def execute_async(
        self,
        operation: AsyncOperation[T],
        cancel: asyncio.Event | None = None,
    ) -> T:
        """
        Async variant of `execute` for coroutine operations.

        The wait suspends the task; setting `cancel` ends it early.
        Cancelling the task itself propagates `asyncio.CancelledError`.
        """
        state = self._new_state()
        while True:
            if cancel is not None and cancel.is_set():
                raise self._cancelled(state)
            try:
                return await operation(cancel)
            except Exception as e:
                error = e
            delay = self._on_failure(state, error)
            if cancel is None:
                await asyncio.sleep(delay)
                continue
            try:
                await asyncio.wait_for(cancel.wait(), timeout=delay)
            except asyncio.TimeoutError:
                continue
            raise self._cancelled(state)

    def retry(self, func: Callable[P, T]) -> Callable[P, T]:
        """Decorate a synchronous function so every call runs through `execute`."""

        @functools.wraps(func)
        def wrapper(*args: P.args, **kwargs: P.kwargs) -> T:
            return self.execute(lambda _cancel: func(*args, **kwargs))

        return wrapper

    def aretry(
        self, func: Callable[P, Awaitable[T]]
    ) -> Callable[P, Awaitable[T]]:
        """Decorate a coroutine function so every call runs through `execute_async`."""

        @functools.wraps(func)
        async def wrapper(*args: P.args, **kwargs: P.kwargs) -> T:
            return await self.execute_async(lambda _cancel: func(*args, **kwargs))

        return wrapper


def with_retry(
    *options: Option,
    config: BackoffConfig | None = None,
) -> Callable[[Callable[P, T]], Callable[P, T]]:
    """
    Decorator for synchronous functions with retry logic.

    Args:
        *options: Named backoff options
        config: Base configuration (default: BackoffConfig())

    Returns:
        Decorator applying `Backoff.retry`
    """
    return Backoff(*options, config=config).retry


def async_with_retry(
    *options: Option,
    config: BackoffConfig | None = None,
) -> Callable[[Callable[P, Awaitable[T]]], Callable[P, Awaitable[T]]]:
    """
    Decorator for async functions with retry logic.

    Args:
        *options: Named backoff options
        config: Base configuration (default: BackoffConfig())

    Returns:
        Decorator applying `Backoff.aretry`
    """
    return Backoff(*options, config=config).aretry
