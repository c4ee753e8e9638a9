"""Fixed-delay retry loop built on tenacity.

One logical request moves through these states:

    Attempting -> Succeeded        (an attempt returned)
    Attempting -> RetryExhausted   (the last allowed attempt failed)
    Attempting -> Aborted          (the predicate rejected a failure)

The predicate is only consulted for failures that still have an attempt left,
so the final failure is always surfaced and never logged as a retry.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from typing import Any, Callable, Optional, TypeVar

from tenacity import (
    RetryCallState,
    Retrying,
    before_sleep_log,
    retry_base,
    stop_after_attempt,
    wait_fixed,
)

from http_timeout_retry.domain.models.retry_policy import RetryContext, RetryPolicy
from http_timeout_retry.domain.retry.predicates import FailurePredicate

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass(frozen=True)
class AttemptOutcome:
    """Result of one execution: either a value or the failure it raised"""

    attempt: int
    value: Any = None
    failure: Optional[BaseException] = None

    @property
    def succeeded(self) -> bool:
        return self.failure is None

    @classmethod
    def from_retry_state(cls, retry_state: RetryCallState) -> "AttemptOutcome":
        outcome = retry_state.outcome
        if outcome is None:
            raise ValueError("Attempt has not completed yet")
        if outcome.failed:
            return cls(attempt=retry_state.attempt_number, failure=outcome.exception())
        return cls(attempt=retry_state.attempt_number, value=outcome.result())


class retry_if_predicate_accepts(retry_base):
    """Tenacity retry strategy delegating to a composed ``FailurePredicate``"""

    def __init__(self, predicate: FailurePredicate, context: RetryContext, max_attempts: int):
        self.predicate = predicate
        self.context = context
        self.max_attempts = max_attempts

    def __call__(self, retry_state: RetryCallState) -> bool:
        outcome = AttemptOutcome.from_retry_state(retry_state)
        if outcome.succeeded:
            return False
        if outcome.attempt >= self.max_attempts:
            return False
        return self.predicate.decide(outcome.failure, self.context)


def _sleep(seconds: float) -> None:
    time.sleep(seconds)


def max_executions(policy: RetryPolicy) -> int:
    """Total executions allowed by a policy (attempts=0 still runs once)"""
    return max(policy.attempts, 1)


def execute_with_retry(
    operation: Callable[[], T],
    policy: RetryPolicy,
    predicate: FailurePredicate,
    context: Optional[RetryContext] = None,
    sleep: Optional[Callable[[float], None]] = None,
) -> T:
    """Run ``operation`` until it succeeds, the predicate declines, or attempts run out.

    Args:
        operation: Zero-argument callable performing one attempt
        policy: Resolved retry policy (attempts and fixed delay)
        predicate: Composed retry decision
        context: Per-request retry context (fresh one if None)
        sleep: Sleep function taking seconds (default: time.sleep)

    Returns:
        The result of the first successful attempt

    Raises:
        The failure of the last attempt, unchanged
    """
    if context is None:
        context = RetryContext()
    attempts = max_executions(policy)

    retrying = Retrying(
        stop=stop_after_attempt(attempts),
        wait=wait_fixed(policy.delay_seconds),
        retry=retry_if_predicate_accepts(predicate, context, attempts),
        reraise=True,
        sleep=sleep or _sleep,
        before_sleep=before_sleep_log(logger, logging.DEBUG),
    )
    return retrying(operation)
