"""Tests for the fixed-delay retry loop"""

from __future__ import annotations

import pytest
import requests

from http_timeout_retry.domain.models.retry_policy import RetryContext, RetryPolicy
from http_timeout_retry.domain.retry.predicates import TransportFailureClassifier
from http_timeout_retry.infrastructure.retry import AttemptOutcome, execute_with_retry, max_executions


class _Recorder:
    """Predicate with scripted answers that records every consultation"""

    def __init__(self, *answers: bool, default: bool = True):
        self.answers = list(answers)
        self.default = default
        self.seen = []

    def decide(self, failure, context):
        self.seen.append(failure)
        if self.answers:
            return self.answers.pop(0)
        return self.default


def _failing(failures):
    calls = {"n": 0}

    def operation():
        calls["n"] += 1
        raise failures(calls["n"])

    return operation, calls


class TestExecuteWithRetry:
    """Tests for execute_with_retry state machine"""

    def test_success_on_first_attempt(self, sleeps):
        predicate = _Recorder()
        result = execute_with_retry(lambda: "ok", RetryPolicy(attempts=3), predicate, sleep=sleeps.append)

        assert result == "ok"
        assert predicate.seen == []
        assert sleeps == []

    def test_exhausts_attempts_and_reraises_last_failure(self, sleeps):
        operation, calls = _failing(lambda n: requests.ConnectionError(f"attempt {n}"))
        predicate = _Recorder()

        with pytest.raises(requests.ConnectionError, match="attempt 3"):
            execute_with_retry(operation, RetryPolicy(attempts=3, delay=10), predicate, sleep=sleeps.append)

        assert calls["n"] == 3
        # The final failure is never offered to the predicate
        assert len(predicate.seen) == 2
        assert sleeps == [pytest.approx(0.01), pytest.approx(0.01)]

    def test_predicate_false_aborts_without_delay(self, sleeps):
        operation, calls = _failing(lambda n: requests.ConnectionError(f"attempt {n}"))
        predicate = _Recorder(True, False)

        with pytest.raises(requests.ConnectionError, match="attempt 2"):
            execute_with_retry(operation, RetryPolicy(attempts=5, delay=50), predicate, sleep=sleeps.append)

        assert calls["n"] == 2
        assert sleeps == [pytest.approx(0.05)]

    def test_success_after_retries(self, sleeps):
        calls = {"n": 0}

        def operation():
            calls["n"] += 1
            if calls["n"] < 3:
                raise requests.ConnectTimeout("timed out")
            return "done"

        result = execute_with_retry(
            operation, RetryPolicy(attempts=5, delay=20), TransportFailureClassifier(), sleep=sleeps.append
        )

        assert result == "done"
        assert calls["n"] == 3
        assert len(sleeps) == 2

    def test_delay_is_constant(self, sleeps):
        operation, _ = _failing(lambda n: requests.ConnectionError("down"))

        with pytest.raises(requests.ConnectionError):
            execute_with_retry(operation, RetryPolicy(attempts=5, delay=30), _Recorder(), sleep=sleeps.append)

        assert sleeps == [pytest.approx(0.03)] * 4

    @pytest.mark.parametrize("attempts", [0, 1])
    def test_zero_or_one_attempt_runs_once(self, attempts, sleeps):
        operation, calls = _failing(lambda n: requests.ConnectionError("down"))
        predicate = _Recorder()

        with pytest.raises(requests.ConnectionError):
            execute_with_retry(operation, RetryPolicy(attempts=attempts), predicate, sleep=sleeps.append)

        assert calls["n"] == 1
        assert predicate.seen == []
        assert sleeps == []

    def test_failure_is_not_wrapped(self, sleeps):
        error = ValueError("application failure")

        def operation():
            raise error

        with pytest.raises(ValueError) as exc_info:
            execute_with_retry(operation, RetryPolicy(attempts=3), TransportFailureClassifier(), sleep=sleeps.append)

        assert exc_info.value is error
        assert sleeps == []

    def test_context_is_passed_to_predicate(self, sleeps):
        context = RetryContext(captured_method="GET")
        seen_contexts = []

        class _Predicate:
            def decide(self, failure, ctx):
                seen_contexts.append(ctx)
                return True

        operation, _ = _failing(lambda n: requests.ConnectionError("down"))
        with pytest.raises(requests.ConnectionError):
            execute_with_retry(operation, RetryPolicy(attempts=2), _Predicate(), context, sleep=sleeps.append)

        assert seen_contexts == [context]


class TestHelpers:
    def test_max_executions(self):
        assert max_executions(RetryPolicy(attempts=0)) == 1
        assert max_executions(RetryPolicy(attempts=4)) == 4

    def test_attempt_outcome_succeeded(self):
        assert AttemptOutcome(attempt=1, value="x").succeeded
        assert not AttemptOutcome(attempt=1, failure=ValueError()).succeeded
