"""Unit tests for the deadline retry policy."""

import pytest

from order_sync_service.exceptions import DeadlineExceededError, StoreError
from order_sync_service.services.retry import RetryPolicy, run_with_retry


class FlakyOperation:
    """Raises the queued errors in order, then returns ``result``."""

    def __init__(self, *errors: Exception, result: str = "ok"):
        self.errors = list(errors)
        self.result = result
        self.attempts = 0

    async def __call__(self) -> str:
        self.attempts += 1
        if self.errors:
            raise self.errors.pop(0)
        return self.result


class TestRunWithRetry:
    """Tests for constant-delay retry on deadline errors."""

    @pytest.mark.asyncio
    async def test_success_first_try(self) -> None:
        op = FlakyOperation()
        assert await run_with_retry(op, initial_delay=0) == "ok"
        assert op.attempts == 1

    @pytest.mark.asyncio
    async def test_two_timeouts_then_success(self) -> None:
        op = FlakyOperation(DeadlineExceededError("slow"), DeadlineExceededError("slow"))
        assert await run_with_retry(op, max_attempts=3, initial_delay=0) == "ok"
        assert op.attempts == 3

    @pytest.mark.asyncio
    async def test_exhausted_attempts_raise_last_error(self) -> None:
        errors = [DeadlineExceededError(f"timeout {i}") for i in range(3)]
        op = FlakyOperation(*errors)
        with pytest.raises(DeadlineExceededError, match="timeout 2"):
            await run_with_retry(op, max_attempts=3, initial_delay=0)
        assert op.attempts == 3

    @pytest.mark.asyncio
    async def test_other_errors_are_not_retried(self) -> None:
        op = FlakyOperation(StoreError("constraint violated"))
        with pytest.raises(StoreError, match="constraint violated"):
            await run_with_retry(op, max_attempts=3, initial_delay=0)
        assert op.attempts == 1

    @pytest.mark.asyncio
    async def test_other_error_after_timeout_stops_retrying(self) -> None:
        op = FlakyOperation(DeadlineExceededError("slow"), StoreError("rejected"))
        with pytest.raises(StoreError, match="rejected"):
            await run_with_retry(op, max_attempts=5, initial_delay=0)
        assert op.attempts == 2

    @pytest.mark.asyncio
    async def test_delay_is_constant(self, monkeypatch: pytest.MonkeyPatch) -> None:
        delays: list[float] = []

        async def fake_sleep(seconds: float) -> None:
            delays.append(seconds)

        monkeypatch.setattr("order_sync_service.services.retry.asyncio.sleep", fake_sleep)
        op = FlakyOperation(DeadlineExceededError("a"), DeadlineExceededError("b"))
        await run_with_retry(op, max_attempts=3, initial_delay=1.0)
        assert delays == [1.0, 1.0]

    @pytest.mark.asyncio
    async def test_no_sleep_after_final_attempt(self, monkeypatch: pytest.MonkeyPatch) -> None:
        delays: list[float] = []

        async def fake_sleep(seconds: float) -> None:
            delays.append(seconds)

        monkeypatch.setattr("order_sync_service.services.retry.asyncio.sleep", fake_sleep)
        op = FlakyOperation(DeadlineExceededError("a"), DeadlineExceededError("b"))
        with pytest.raises(DeadlineExceededError):
            await run_with_retry(op, max_attempts=2, initial_delay=0.5)
        assert delays == [0.5]

    @pytest.mark.asyncio
    async def test_rejects_zero_attempts(self) -> None:
        with pytest.raises(ValueError):
            await run_with_retry(FlakyOperation(), max_attempts=0)


class TestRetryPolicy:
    def test_from_settings(self, test_settings) -> None:
        policy = RetryPolicy.from_settings(test_settings)
        assert policy.max_attempts == test_settings.store_retry_attempts
        assert policy.initial_delay == 0.0

    @pytest.mark.asyncio
    async def test_run_delegates(self, retry: RetryPolicy) -> None:
        op = FlakyOperation(DeadlineExceededError("slow"))
        assert await retry.run(op) == "ok"
        assert op.attempts == 2
