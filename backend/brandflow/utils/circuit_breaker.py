# /brandflow/utils/circuit_breaker.py

import asyncio
import time
import logging
from enum import Enum
from typing import Any, Callable

logger = logging.getLogger(__name__)


class CircuitState(Enum):
    CLOSED = "closed"
    OPEN = "open"
    HALF_OPEN = "half_open"


class CircuitOpenError(Exception):
    """Raised instead of calling the wrapped function while the circuit is open."""


class CircuitBreaker:
    """
    Process-local breaker for a single upstream. It never retries; it only
    refuses calls for `timeout` seconds once `failure_threshold` consecutive
    calls have failed.
    """

    def __init__(self, name: str = "upstream", failure_threshold: int = 5, timeout: int = 60, success_threshold: int = 3):
        self.name = name
        self.failure_threshold = failure_threshold
        self.timeout = timeout
        self.success_threshold = success_threshold
        self.failure_count = 0
        self.success_count = 0
        self.last_failure_time: float | None = None
        self.state = CircuitState.CLOSED
        self._lock = asyncio.Lock()

    async def call(self, func: Callable, *args: Any, **kwargs: Any) -> Any:
        async with self._lock:
            if self.state == CircuitState.OPEN:
                if self.last_failure_time and (time.monotonic() - self.last_failure_time > self.timeout):
                    self.state = CircuitState.HALF_OPEN
                    self.success_count = 0
                    logger.info(f"Circuit breaker is now HALF_OPEN for {self.name}")
                else:
                    logger.warning(f"Circuit breaker is OPEN. Call to {self.name} is blocked.")
                    raise CircuitOpenError(f"Circuit breaker is OPEN for {self.name}")
        try:
            result = await func(*args, **kwargs)
        except Exception:
            await self._on_failure()
            raise
        await self._on_success()
        return result

    async def _on_success(self):
        async with self._lock:
            if self.state == CircuitState.HALF_OPEN:
                self.success_count += 1
                if self.success_count >= self.success_threshold:
                    self.state = CircuitState.CLOSED
                    self.failure_count = 0
                    logger.info(f"Circuit breaker for {self.name} has been reset to CLOSED.")
            else:
                self.failure_count = 0

    async def _on_failure(self):
        async with self._lock:
            self.failure_count += 1
            self.last_failure_time = time.monotonic()
            if self.state == CircuitState.HALF_OPEN or self.failure_count >= self.failure_threshold:
                self.state = CircuitState.OPEN
                logger.error(f"Circuit breaker for {self.name} has OPENED due to {self.failure_count} failures.")
