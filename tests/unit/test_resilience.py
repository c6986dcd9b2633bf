"""Unit tests for retry and circuit breaker utilities."""

import time

import pytest
from unittest.mock import AsyncMock, patch

from ai_editor.utils.resilience import (
    CircuitBreaker,
    CircuitBreakerOpenError,
    CircuitState,
    retry_with_backoff,
)


class TransientError(Exception):
    pass


class TestRetryWithBackoff:
    """Test the retry decorator."""

    @pytest.mark.asyncio
    async def test_succeeds_after_transient_failures(self):
        calls = []

        @retry_with_backoff(max_retries=3, base_delay=0.5, exceptions=(TransientError,))
        async def flaky():
            calls.append(1)
            if len(calls) < 3:
                raise TransientError("try again")
            return "done"

        with patch('ai_editor.utils.resilience.asyncio.sleep', new=AsyncMock()) as sleep:
            assert await flaky() == "done"

        assert len(calls) == 3
        assert [c.args[0] for c in sleep.call_args_list] == [0.5, 1.0]

    @pytest.mark.asyncio
    async def test_raises_after_max_retries(self):
        @retry_with_backoff(max_retries=2, exceptions=(TransientError,))
        async def always_fails():
            raise TransientError("nope")

        with patch('ai_editor.utils.resilience.asyncio.sleep', new=AsyncMock()):
            with pytest.raises(TransientError):
                await always_fails()

    @pytest.mark.asyncio
    async def test_other_exceptions_not_retried(self):
        func = AsyncMock(side_effect=ValueError("bad input"))
        wrapped = retry_with_backoff(max_retries=3, exceptions=(TransientError,))(func)

        with pytest.raises(ValueError):
            await wrapped()

        assert func.call_count == 1


class TestCircuitBreaker:
    """Test circuit breaker state transitions."""

    @pytest.mark.asyncio
    async def test_opens_after_threshold(self):
        breaker = CircuitBreaker(failure_threshold=2, timeout=60)
        failing = AsyncMock(side_effect=TransientError("down"))

        for _ in range(2):
            with pytest.raises(TransientError):
                await breaker.call(failing)

        assert breaker.state == CircuitState.OPEN
        with pytest.raises(CircuitBreakerOpenError):
            await breaker.call(failing)
        assert failing.call_count == 2

    @pytest.mark.asyncio
    async def test_ignored_errors_do_not_open(self):
        breaker = CircuitBreaker(failure_threshold=1)
        not_found = AsyncMock(side_effect=KeyError("missing"))

        with pytest.raises(KeyError):
            await breaker.call(not_found, is_failure=lambda e: not isinstance(e, KeyError))

        assert breaker.state == CircuitState.CLOSED

    @pytest.mark.asyncio
    async def test_half_open_recovers(self):
        breaker = CircuitBreaker(failure_threshold=1, timeout=10, half_open_max_calls=2)
        breaker.state = CircuitState.OPEN
        breaker.last_failure_time = time.time() - 11
        healthy = AsyncMock(return_value="ok")

        assert await breaker.call(healthy) == "ok"
        assert breaker.state == CircuitState.HALF_OPEN

        await breaker.call(healthy)
        assert breaker.state == CircuitState.CLOSED

    @pytest.mark.asyncio
    async def test_half_open_failure_reopens(self):
        breaker = CircuitBreaker(failure_threshold=1, timeout=10)
        breaker.state = CircuitState.OPEN
        breaker.last_failure_time = time.time() - 11

        with pytest.raises(TransientError):
            await breaker.call(AsyncMock(side_effect=TransientError("still down")))

        assert breaker.state == CircuitState.OPEN
