# backend/tests/unit/test_circuit_breaker.py
import pytest
from unittest.mock import AsyncMock

from brandflow.utils.circuit_breaker import CircuitBreaker, CircuitOpenError, CircuitState


@pytest.mark.asyncio
async def test_opens_after_threshold_and_blocks_calls():
    breaker = CircuitBreaker(name="gemini", failure_threshold=2, timeout=60)
    failing = AsyncMock(side_effect=RuntimeError("boom"))

    for _ in range(2):
        with pytest.raises(RuntimeError):
            await breaker.call(failing)

    assert breaker.state == CircuitState.OPEN
    with pytest.raises(CircuitOpenError):
        await breaker.call(failing)
    assert failing.await_count == 2


@pytest.mark.asyncio
async def test_success_resets_failure_count():
    breaker = CircuitBreaker(failure_threshold=2)
    flaky = AsyncMock(side_effect=[RuntimeError("boom"), "ok", RuntimeError("boom")])

    with pytest.raises(RuntimeError):
        await breaker.call(flaky)
    assert await breaker.call(flaky) == "ok"
    with pytest.raises(RuntimeError):
        await breaker.call(flaky)

    assert breaker.state == CircuitState.CLOSED


@pytest.mark.asyncio
async def test_half_open_closes_after_successes_and_reopens_on_failure(mocker):
    now = mocker.patch("brandflow.utils.circuit_breaker.time.monotonic", return_value=1000.0)
    breaker = CircuitBreaker(failure_threshold=1, timeout=60, success_threshold=2)

    with pytest.raises(RuntimeError):
        await breaker.call(AsyncMock(side_effect=RuntimeError("boom")))

    now.return_value = 1061.0
    with pytest.raises(RuntimeError):
        await breaker.call(AsyncMock(side_effect=RuntimeError("still down")))
    assert breaker.state == CircuitState.OPEN

    now.return_value = 1122.0
    healthy = AsyncMock(return_value="ok")
    await breaker.call(healthy)
    assert breaker.state == CircuitState.HALF_OPEN
    await breaker.call(healthy)
    assert breaker.state == CircuitState.CLOSED
