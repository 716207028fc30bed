"""
Retry Helpers

Bounded retry with linear backoff for calls to external services.
"""
from typing import Callable, Optional, Tuple, Type, TypeVar

from src.tenement_sync.sync.cancellation import CancellationToken, pause
from src.tenement_sync.utils.logger import get_logger

logger = get_logger(__name__)

T = TypeVar("T")


class RetryExhaustedError(Exception):
    """All attempts failed; ``last_exception`` holds the final failure."""

    def __init__(self, attempts: int, last_exception: BaseException):
        self.attempts = attempts
        self.last_exception = last_exception
        super().__init__(f"Failed after {attempts} attempts: {last_exception}")


def call_with_retry(
    func: Callable[[], T],
    *,
    max_attempts: int = 3,
    backoff_seconds: float = 1.0,
    retry_on: Tuple[Type[BaseException], ...] = (Exception,),
    cancel_token: Optional[CancellationToken] = None,
    operation: str = "external_call",
    sleep: Optional[Callable[[float], None]] = None,
) -> T:
    """
    Call ``func`` until it succeeds or ``max_attempts`` is reached.

    Waits ``backoff_seconds * attempt`` between attempts. Pauses honour the
    cancellation token, so a cancelled run stops retrying immediately.

    Args:
        func: Zero-argument callable
        max_attempts: Total attempts including the first
        backoff_seconds: Base delay between attempts
        retry_on: Exception types that trigger a retry
        cancel_token: Optional token checked before every attempt
        operation: Name used in log events
        sleep: Sleep function (injected in tests)

    Returns:
        The callable's result

    Raises:
        RetryExhaustedError: when every attempt failed with a retryable error
    """
    attempts = max(1, max_attempts)
    last_exception: Optional[BaseException] = None

    for attempt in range(1, attempts + 1):
        if cancel_token is not None:
            cancel_token.raise_if_cancelled()
        try:
            return func()
        except retry_on as e:
            last_exception = e
            if attempt < attempts:
                logger.warning(
                    "operation_retry",
                    operation=operation,
                    attempt=attempt,
                    max_attempts=attempts,
                    error=str(e),
                    error_type=type(e).__name__,
                )
                pause(backoff_seconds * attempt, cancel_token, sleep)
            else:
                logger.error(
                    "operation_failed_after_retries",
                    operation=operation,
                    max_attempts=attempts,
                    error=str(e),
                    error_type=type(e).__name__,
                )

    raise RetryExhaustedError(attempts, last_exception)
