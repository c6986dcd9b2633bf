"""
Resilience utilities for calls to the repository store and the LLM.

This module provides:
- retry_with_backoff decorator for transient errors
- CircuitBreaker class guarding external service calls
- ErrorRecoveryManager for summarising partially failed batches
"""

import asyncio
import time
import logging
from typing import Callable, Optional, TypeVar, ParamSpec
from functools import wraps
from enum import Enum

logger = logging.getLogger(__name__)

P = ParamSpec('P')
T = TypeVar('T')


class CircuitState(str, Enum):
    """Circuit breaker states."""
    CLOSED = "closed"  # Normal operation
    OPEN = "open"  # Failing, reject requests
    HALF_OPEN = "half_open"  # Probing whether the service recovered


class CircuitBreakerOpenError(Exception):
    """Raised when circuit breaker is open."""
    pass


def retry_with_backoff(
    max_retries: int = 3,
    base_delay: float = 1.0,
    max_delay: float = 60.0,
    exponential_base: float = 2.0,
    exceptions: tuple = (Exception,)
):
    """
    Decorator for retrying async functions with exponential backoff.

    Only exceptions listed in ``exceptions`` are retried; anything else
    propagates on the first failure.

    Args:
        max_retries: Maximum number of attempts (default: 3)
        base_delay: Initial delay in seconds between retries (default: 1.0)
        max_delay: Maximum delay in seconds between retries (default: 60.0)
        exponential_base: Base for exponential backoff calculation (default: 2.0)
        exceptions: Tuple of exception types to retry

    Example:
        @retry_with_backoff(max_retries=3, exceptions=(APIConnectionError,))
        async def request_completion():
            return await client.chat.completions.create(...)
    """
    def decorator(func: Callable[P, T]) -> Callable[P, T]:
        @wraps(func)
        async def wrapper(*args: P.args, **kwargs: P.kwargs) -> T:
            for attempt in range(max_retries):
                try:
                    result = await func(*args, **kwargs)

                    if attempt > 0:
                        logger.info(
                            f"{func.__name__} succeeded on attempt {attempt + 1}/{max_retries}"
                        )

                    return result

                except exceptions as e:
                    if attempt == max_retries - 1:
                        logger.error(
                            f"{func.__name__} failed after {max_retries} attempts: {e}"
                        )
                        raise

                    delay = min(base_delay * (exponential_base ** attempt), max_delay)

                    logger.warning(
                        f"{func.__name__} failed on attempt {attempt + 1}/{max_retries}: {e}. "
                        f"Retrying in {delay:.1f}s..."
                    )

                    await asyncio.sleep(delay)

            raise RuntimeError(f"{func.__name__} called with max_retries={max_retries}")

        return wrapper

    return decorator


class CircuitBreaker:
    """
    Circuit breaker for external service calls.

    States:
    - CLOSED: Normal operation, requests pass through
    - OPEN: Service is failing, requests are rejected immediately
    - HALF_OPEN: Timeout elapsed, a limited number of trial calls are allowed

    Args:
        failure_threshold: Consecutive failures before opening the circuit (default: 5)
        timeout: Seconds to wait before probing again (default: 60)
        half_open_max_calls: Probe calls allowed while half-open (default: 3)

    Example:
        circuit_breaker = CircuitBreaker(failure_threshold=5, timeout=60)
        result = await circuit_breaker.call(fetch_item)
    """

    def __init__(
        self,
        failure_threshold: int = 5,
        timeout: int = 60,
        half_open_max_calls: int = 3
    ):
        self.failure_threshold = failure_threshold
        self.timeout = timeout
        self.half_open_max_calls = half_open_max_calls

        self.failure_count = 0
        self.success_count = 0
        self.last_failure_time: Optional[float] = None
        self.state = CircuitState.CLOSED
        self.half_open_calls = 0

        logger.debug(
            f"CircuitBreaker initialized: failure_threshold={failure_threshold}, "
            f"timeout={timeout}s"
        )

    async def call(self, func: Callable[[], T], is_failure: Callable[[Exception], bool] = None) -> T:
        """
        Execute function with circuit breaker protection.

        Args:
            func: Zero-argument async function to execute
            is_failure: Optional predicate deciding whether an exception counts
                against the circuit. Errors such as "not found" are answers
                from a healthy service and should not open it.

        Returns:
            Function result

        Raises:
            CircuitBreakerOpenError: If circuit is open
            Exception: Any exception raised by the function
        """
        if self.state == CircuitState.OPEN:
            if self.last_failure_time and (time.time() - self.last_failure_time) > self.timeout:
                logger.info("Circuit breaker transitioning to HALF_OPEN state")
                self.state = CircuitState.HALF_OPEN
                self.half_open_calls = 0
                self.success_count = 0
            else:
                raise CircuitBreakerOpenError(
                    f"Circuit breaker is OPEN. Service unavailable. "
                    f"Will retry after {self.timeout}s timeout."
                )

        if self.state == CircuitState.HALF_OPEN:
            if self.half_open_calls >= self.half_open_max_calls:
                raise CircuitBreakerOpenError(
                    "Circuit breaker is HALF_OPEN and max test calls reached"
                )
            self.half_open_calls += 1

        try:
            result = await func()
        except Exception as e:
            if is_failure is None or is_failure(e):
                self._record_failure()
            else:
                self._record_success()
            raise

        self._record_success()
        return result

    def _record_success(self) -> None:
        self.success_count += 1

        if self.state == CircuitState.HALF_OPEN:
            if self.success_count >= self.half_open_max_calls:
                logger.info("Circuit breaker transitioning to CLOSED state (service recovered)")
                self.state = CircuitState.CLOSED
                self.failure_count = 0
                self.success_count = 0
                self.half_open_calls = 0
        elif self.state == CircuitState.CLOSED and self.failure_count > 0:
            self.failure_count = 0

    def _record_failure(self) -> None:
        self.failure_count += 1
        self.last_failure_time = time.time()

        if self.state == CircuitState.HALF_OPEN:
            logger.warning("Circuit breaker transitioning to OPEN state (service still failing)")
            self.state = CircuitState.OPEN
            self.success_count = 0
            self.half_open_calls = 0
        elif self.state == CircuitState.CLOSED and self.failure_count >= self.failure_threshold:
            logger.warning(
                f"Circuit breaker transitioning to OPEN state "
                f"(failure threshold {self.failure_threshold} exceeded)"
            )
            self.state = CircuitState.OPEN
            self.success_count = 0


class ErrorRecoveryManager:
    """Helpers for reporting batches where some items failed."""

    @staticmethod
    def handle_partial_failure(
        operation_name: str,
        total_items: int,
        successful_items: int,
        errors: list,
        context: dict
    ) -> None:
        """
        Log partial failure with context.

        Args:
            operation_name: Name of the operation
            total_items: Total number of items processed
            successful_items: Number of successful items
            errors: List of error messages
            context: Additional context information
        """
        failed_items = total_items - successful_items

        if failed_items > 0:
            logger.warning(
                f"Partial failure in {operation_name}: "
                f"{successful_items}/{total_items} succeeded, {failed_items} failed",
                extra={
                    "operation": operation_name,
                    "total_items": total_items,
                    "successful_items": successful_items,
                    "failed_items": failed_items,
                    "errors": errors[:10],
                    "context": context
                }
            )
        else:
            logger.info(
                f"{operation_name} completed successfully: {successful_items}/{total_items}",
                extra={
                    "operation": operation_name,
                    "total_items": total_items,
                    "context": context
                }
            )


def create_azure_devops_circuit_breaker() -> CircuitBreaker:
    """Create circuit breaker configured for Azure DevOps API calls."""
    return CircuitBreaker(
        failure_threshold=5,
        timeout=60,
        half_open_max_calls=3
    )


def create_llm_circuit_breaker() -> CircuitBreaker:
    """Create circuit breaker configured for LLM API calls."""
    return CircuitBreaker(
        failure_threshold=3,
        timeout=30,
        half_open_max_calls=2
    )
