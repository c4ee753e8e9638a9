"""Retry decision predicates.

The decision passed to the retry loop is built from small layers, always in
this order:

    base classifier -> method filter -> attempt logger

Each layer holds only immutable configuration. Per-request state (attempt
counter, captured method and URL) lives on the ``RetryContext`` that is passed
in explicitly, so one composed predicate can never leak state between
requests.
"""

from __future__ import annotations

from typing import Callable, FrozenSet, Iterable, Optional, Protocol

import requests

from http_timeout_retry.domain.models.retry_policy import (
    RetryContext,
    RetryPolicy,
    normalize_methods,
)

FailureClassifier = Callable[[BaseException], bool]

# Below the HTTP layer: refused/reset connections, DNS, TLS, proxy, timeouts.
TRANSPORT_FAILURES = (requests.exceptions.ConnectionError, requests.exceptions.Timeout)


class FailurePredicate(Protocol):
    def decide(self, failure: BaseException, context: RetryContext) -> bool:
        ...


class RetryEmitter(Protocol):
    def emit(
        self,
        failure: BaseException,
        attempt: int,
        total_attempts: int,
        url: str,
        method: str,
    ) -> None:
        ...


class TransportFailureClassifier:
    """Retry only transport/connectivity failures.

    An HTTP response with an error status is not a failure here; neither is
    ``requests.HTTPError`` raised by ``raise_for_status``.
    """

    def decide(self, failure: BaseException, context: RetryContext) -> bool:
        return isinstance(failure, TRANSPORT_FAILURES)


class CallableClassifier:
    """Adapt a caller-supplied ``failure -> bool`` function"""

    def __init__(self, classifier: FailureClassifier):
        self._classifier = classifier

    def decide(self, failure: BaseException, context: RetryContext) -> bool:
        return bool(self._classifier(failure))


class MethodFilter:
    """Veto retries for HTTP methods outside the allow-list"""

    def __init__(self, inner: FailurePredicate, allowed_methods: Iterable[str]):
        self._inner = inner
        self.allowed_methods: FrozenSet[str] = normalize_methods(allowed_methods)

    def decide(self, failure: BaseException, context: RetryContext) -> bool:
        if not self._inner.decide(failure, context):
            return False
        return context.captured_method.upper() in self.allowed_methods


class RetryAttemptLogger:
    """Observe positive retry decisions and report them.

    Never changes the decision of the wrapped predicate.
    """

    def __init__(self, inner: FailurePredicate, total_attempts: int, emitter: RetryEmitter):
        self._inner = inner
        self._total_attempts = total_attempts
        self._emitter = emitter

    def decide(self, failure: BaseException, context: RetryContext) -> bool:
        should_retry = self._inner.decide(failure, context)
        if should_retry:
            context.attempt_counter += 1
            self._emitter.emit(
                failure,
                attempt=context.attempt_counter,
                total_attempts=self._total_attempts,
                url=context.captured_url,
                method=context.captured_method,
            )
        return should_retry


def compose_predicate(
    policy: RetryPolicy,
    classifier: Optional[FailureClassifier] = None,
    emitter: Optional[RetryEmitter] = None,
) -> FailurePredicate:
    """Build the retry decision for one decorated call.

    Args:
        policy: Resolved retry policy
        classifier: Custom base classifier (default: transport failures only)
        emitter: Retry log sink, used when the policy enables logging
            (default: ``RetryLogEmitter`` configured from the policy)

    Returns:
        Composed predicate
    """
    predicate: FailurePredicate
    if classifier is not None:
        predicate = CallableClassifier(classifier)
    else:
        predicate = TransportFailureClassifier()

    if not policy.allows_all_methods:
        predicate = MethodFilter(predicate, policy.allowed_methods)

    if policy.logging_enabled:
        if emitter is None:
            from http_timeout_retry.infrastructure.log_channels import RetryLogEmitter

            emitter = RetryLogEmitter(level=policy.log_level, channel=policy.log_channel)
        predicate = RetryAttemptLogger(predicate, policy.attempts, emitter)

    return predicate
