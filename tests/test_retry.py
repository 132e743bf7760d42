"""
Unit tests for the retry wrapper.
"""

import logging

import pytest

from home_migrator.retry import execute_with_retry


class FlakyOperation:
    """Callable that fails a set number of times before succeeding."""

    def __init__(self, failures: int):
        self.failures = failures
        self.calls = 0

    def __call__(self):
        self.calls += 1
        if self.calls <= self.failures:
            raise OSError(f"failure {self.calls}")


def retry_records(caplog, level):
    return [
        r for r in caplog.records
        if r.name == "home_migrator.retry" and r.levelno == level
    ]


class TestExecuteWithRetry:
    """Tests for execute_with_retry function."""

    def test_success_first_attempt(self, caplog):
        """Succeeds immediately without logging."""
        caplog.set_level(logging.WARNING)
        op = FlakyOperation(failures=0)

        outcome = execute_with_retry(op, "op", 3)

        assert op.calls == 1
        assert outcome.succeeded
        assert outcome.attempts == 1
        assert outcome.error is None
        assert not retry_records(caplog, logging.WARNING)

    def test_fails_twice_then_succeeds(self, caplog):
        """Two failures then success with three allowed attempts."""
        caplog.set_level(logging.WARNING)
        op = FlakyOperation(failures=2)

        outcome = execute_with_retry(op, "CopyDirectory:Home:x", 3)

        assert op.calls == 3
        assert outcome.succeeded
        assert outcome.attempts == 3
        assert len(retry_records(caplog, logging.WARNING)) == 2
        assert not retry_records(caplog, logging.ERROR)

    def test_always_fails_gives_up(self, caplog):
        """Exhausted retries log once at ERROR and return without raising."""
        caplog.set_level(logging.WARNING)
        op = FlakyOperation(failures=100)

        outcome = execute_with_retry(op, "CreateDirectory:x", 2)

        assert op.calls == 2
        assert not outcome.succeeded
        assert outcome.attempts == 2
        assert isinstance(outcome.error, OSError)
        assert str(outcome.error) == "failure 2"

        warnings = retry_records(caplog, logging.WARNING)
        errors = retry_records(caplog, logging.ERROR)
        assert len(warnings) == 1
        assert len(errors) == 1
        assert "CreateDirectory:x" in errors[0].getMessage()
        assert "2 attempts" in errors[0].getMessage()

    @pytest.mark.parametrize("max_retries", [0, -1, 1])
    def test_single_attempt_when_limit_low(self, max_retries):
        """At least one attempt is made even with a zero or negative limit."""
        op = FlakyOperation(failures=100)

        outcome = execute_with_retry(op, "op", max_retries)

        assert op.calls == 1
        assert outcome.attempts == 1
        assert not outcome.succeeded

    def test_zero_limit_success(self):
        """A zero limit still lets a working operation succeed."""
        op = FlakyOperation(failures=0)

        outcome = execute_with_retry(op, "op", 0)

        assert outcome.succeeded

    def test_label_kept_on_outcome(self):
        op = FlakyOperation(failures=0)
        assert execute_with_retry(op, "my-label", 3).label == "my-label"

    def test_keyboard_interrupt_not_retried(self):
        """Only Exception subclasses are retried."""
        calls = []

        def op():
            calls.append(1)
            raise KeyboardInterrupt

        with pytest.raises(KeyboardInterrupt):
            execute_with_retry(op, "op", 3)
        assert len(calls) == 1
