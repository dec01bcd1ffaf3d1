"""
Delay calculation between request attempts.
"""
import random
from dataclasses import dataclass
from enum import Enum


class BackoffStrategy(str, Enum):
    """Backoff strategy type"""
    CONSTANT = "constant"
    LINEAR = "linear"
    EXPONENTIAL = "exponential"


@dataclass(frozen=True)
class RetryPolicy:
    """Delay applied before each retry."""

    delay_ms: int = 0
    """Base delay (milliseconds). Default: 0, retry immediately"""

    max_delay_ms: int = 30_000
    """Upper bound for any single delay (milliseconds)"""

    strategy: BackoffStrategy = BackoffStrategy.CONSTANT
    """How the delay grows with the attempt number"""

    jitter_factor: float = 0.0
    """Jitter factor (0-1). Default: 0, no jitter"""


def calculate_delay(attempt: int, policy: RetryPolicy) -> float:
    """
    Calculate the delay before retrying after ``attempt`` failed.

    Args:
        attempt: The failed attempt number (0-indexed)
        policy: Retry policy

    Returns:
        Delay in seconds
    """
    base = policy.delay_ms
    if base <= 0:
        return 0.0

    if policy.strategy == BackoffStrategy.LINEAR:
        base_delay = base * (attempt + 1)
    elif policy.strategy == BackoffStrategy.EXPONENTIAL:
        base_delay = base * (2 ** attempt)
    else:
        base_delay = base
    base_delay = min(policy.max_delay_ms, base_delay)

    jitter = policy.jitter_factor
    jitter_amount = random.random() * jitter * base_delay
    delay = base_delay * (1 - jitter / 2) + jitter_amount

    return min(delay, policy.max_delay_ms) / 1000.0
