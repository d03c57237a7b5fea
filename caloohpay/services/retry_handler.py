"""
Retry handler with exponential backoff and jitter for PagerDuty API calls.
"""

import logging
import random
import threading
import time
from typing import Any, Callable, Optional

import requests

logger = logging.getLogger(__name__)


class RetryExhaustedException(Exception):
    """Raised when all retry attempts have been exhausted."""

    def __init__(self, message: str, last_exception: Optional[Exception] = None):
        self.last_exception = last_exception
        super().__init__(message)


def is_retryable_error(exception: Exception) -> bool:
    """
    Default retry condition - retry on transient errors only.

    Args:
        exception: The exception that occurred

    Returns:
        True for HTTP 429/5xx responses, connection errors and timeouts
    """
    if isinstance(exception, requests.HTTPError):
        response = exception.response
        return response is not None and (
            response.status_code == 429 or 500 <= response.status_code < 600
        )

    return isinstance(exception, (requests.ConnectionError, requests.Timeout))


class RetryHandler:
    """
    Handles retries with exponential backoff and jitter.

    Features:
    - Exponential backoff with configurable base, cap and jitter
    - Configurable retry conditions
    - Thread-safe statistics tracking
    """

    def __init__(
        self,
        max_retries: int = 3,
        base_delay: float = 1.0,
        max_delay: float = 30.0,
        exponential_base: float = 2,
        jitter_factor: float = 0.1,
        retry_condition: Optional[Callable[[Exception], bool]] = None,
    ):
        """
        Initialize retry handler.

        Args:
            max_retries: Maximum number of retry attempts
            base_delay: Base delay for exponential backoff (seconds)
            max_delay: Maximum delay between retries (seconds)
            exponential_base: Base for exponential backoff calculation
            jitter_factor: Factor for random jitter (0.0 to 1.0)
            retry_condition: Custom function to determine if retry should occur
        """
        self.max_retries = max_retries
        self.base_delay = base_delay
        self.max_delay = max_delay
        self.exponential_base = exponential_base
        self.jitter_factor = jitter_factor
        self.retry_condition = retry_condition or is_retryable_error

        self._total_calls = 0
        self._total_retries = 0
        self._total_failures = 0
        self._lock = threading.Lock()

    def _calculate_delay(self, attempt: int) -> float:
        """
        Calculate delay for exponential backoff with jitter.

        Args:
            attempt: Current attempt number (0-based)

        Returns:
            Delay in seconds
        """
        delay = min(self.base_delay * (self.exponential_base**attempt), self.max_delay)
        jitter = random.uniform(-self.jitter_factor, self.jitter_factor) * delay
        return max(0.0, delay + jitter)

    def execute_with_retry(self, func: Callable, *args, **kwargs) -> Any:
        """
        Execute function with retry logic.

        Args:
            func: Function to execute
            *args: Positional arguments for function
            **kwargs: Keyword arguments for function

        Returns:
            Result of function execution

        Raises:
            RetryExhaustedException: If all retries are exhausted
            Exception: Original exception if not retryable
        """
        func_name = getattr(func, "__name__", repr(func))

        with self._lock:
            self._total_calls += 1

        for attempt in range(self.max_retries + 1):
            try:
                result = func(*args, **kwargs)
            except Exception as e:
                if not self.retry_condition(e):
                    logger.debug(f"Not retrying {func_name}: {type(e).__name__}")
                    raise

                if attempt >= self.max_retries:
                    logger.warning(
                        f"Max retries ({self.max_retries}) exceeded for {func_name}"
                    )
                    with self._lock:
                        self._total_retries += attempt
                        self._total_failures += 1
                    raise RetryExhaustedException(
                        f"Max retries ({self.max_retries}) exceeded. "
                        f"Last error: {type(e).__name__}: {e}",
                        last_exception=e,
                    ) from e

                delay = self._calculate_delay(attempt)
                logger.info(
                    f"Retrying {func_name} in {delay:.2f}s "
                    f"(attempt {attempt + 1}/{self.max_retries + 1}). "
                    f"Error: {type(e).__name__}: {e}"
                )
                time.sleep(delay)
                continue

            if attempt > 0:
                logger.info(f"{func_name} succeeded after {attempt} retries")
                with self._lock:
                    self._total_retries += attempt
            return result

        # Every iteration above returns or raises
        raise RuntimeError("unreachable")

    def get_retry_statistics(self) -> dict:
        """
        Get retry statistics.

        Returns:
            Dictionary with retry statistics
        """
        with self._lock:
            return {
                "total_calls": self._total_calls,
                "total_retries": self._total_retries,
                "total_failures": self._total_failures,
            }
