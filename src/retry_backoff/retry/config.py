"""
Backoff configuration and the named options that build it.
"""

from dataclasses import dataclass, replace
from typing import Callable

RetryCallback = Callable[[Exception, float, int], None]


@dataclass(frozen=True)
class BackoffConfig:
    """
    Configuration for backoff behavior.

    Immutable once constructed; one instance can back any number of
    concurrent `execute` calls.

    Attributes:
        max_retries: Attempt ceiling, 0 means unlimited (default: 0)
        exponential: Grow the interval between attempts (default: False)
        multiplier: Growth rate when exponential (default: 1.5)
        interval: Initial interval in seconds (default: 0.5)
        max_interval: Cap on the pre-jitter interval in seconds (default: 60.0)
        randomization_factor: Jitter as fraction of interval (default: 0.5 = ±50%)
        max_elapsed_time: Elapsed-time ceiling in seconds, 0 means unlimited (default: 0)
        on_retry: Optional callback(error, delay, attempt) called before each wait
    """

    max_retries: int = 0
    exponential: bool = False
    multiplier: float = 1.5
    interval: float = 0.5
    max_interval: float = 60.0
    randomization_factor: float = 0.5
    max_elapsed_time: float = 0.0
    on_retry: RetryCallback | None = None

    @classmethod
    def from_options(cls, *options: "Option") -> "BackoffConfig":
        """Apply options over the defaults."""
        return cls().with_options(*options)

    def with_options(self, *options: "Option") -> "BackoffConfig":
        """Return a copy with the given options applied in order."""
        config = self
        for option in options:
            config = option(config)
        return config

    @classmethod
    def aggressive(cls) -> "BackoffConfig":
        """Preset for aggressive retry (more attempts, longer delays)."""
        return cls(
            max_retries=10,
            exponential=True,
            multiplier=2.0,
            interval=1.0,
            max_interval=120.0,
        )

    @classmethod
    def conservative(cls) -> "BackoffConfig":
        """Preset for conservative retry (fewer attempts, shorter delays)."""
        return cls(
            max_retries=3,
            exponential=True,
            interval=0.5,
            max_interval=10.0,
        )

    @classmethod
    def no_retry(cls) -> "BackoffConfig":
        """Preset for no retry (single attempt only)."""
        return cls(max_retries=1)


Option = Callable[[BackoffConfig], BackoffConfig]


def max_retries(count: int) -> Option:
    """Stop after `count` failed attempts (0 = unlimited)."""
    return lambda config: replace(config, max_retries=count)


def exponential() -> Option:
    """Grow the interval by `multiplier` after each failure."""
    return lambda config: replace(config, exponential=True)


def multiplier(factor: float) -> Option:
    return lambda config: replace(config, multiplier=factor)


def interval(seconds: float) -> Option:
    """Initial (and, without `exponential()`, constant) interval."""
    return lambda config: replace(config, interval=seconds)


def max_interval(seconds: float) -> Option:
    return lambda config: replace(config, max_interval=seconds)


def randomization_factor(fraction: float) -> Option:
    """Jitter magnitude; 0 disables jitter."""
    return lambda config: replace(config, randomization_factor=fraction)


def max_elapsed_time(seconds: float) -> Option:
    """Give up once this many seconds have passed since the first attempt (0 = unlimited)."""
    return lambda config: replace(config, max_elapsed_time=seconds)


def on_retry(callback: RetryCallback) -> Option:
    """Call `callback(error, delay, attempt)` before every wait."""
    return lambda config: replace(config, on_retry=callback)
