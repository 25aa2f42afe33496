"""
Bounded retry for optimistic-concurrency writes.

Attempts run back to back without delay: callers re-read the resource at the
start of every attempt, so a retry only needs a fresh version token.
"""

from dataclasses import dataclass
from typing import Any, Callable, Generic, Optional, Tuple, Type, TypeVar

from tenacity import (
    RetryCallState,
    RetryError,
    Retrying,
    retry_if_exception_type,
    stop_after_attempt,
    wait_none,
)

from ..constants import DEFAULT_RECONCILE_ATTEMPTS
from ..exceptions import ConflictExhaustedError, ResourceVersionConflictError
from .logger import ContextAwareLogger, get_logger

T = TypeVar("T")


@dataclass(frozen=True)
class RetryOutcome(Generic[T]):
    """Result of the attempt that succeeded and how many attempts it took."""

    value: T
    attempts: int


def retry_on_conflict(
    attempt: Callable[[int], T],
    max_attempts: int = DEFAULT_RECONCILE_ATTEMPTS,
    retry_on: Tuple[Type[Exception], ...] = (ResourceVersionConflictError,),
    operation: str = "write",
    logger: Optional[ContextAwareLogger] = None,
    **context: Any,
) -> RetryOutcome[T]:
    """
    Call `attempt` until it returns without a conflict.

    Args:
        attempt: Callable receiving the 1-based attempt number
        max_attempts: Total number of calls allowed
        retry_on: Exception types that trigger another attempt
        operation: Name used in logs and in the final error
        logger: Optional logger instance
        **context: Extra context attached to logs and the final error

    Returns:
        RetryOutcome with the attempt's return value

    Raises:
        ConflictExhaustedError: If every attempt raised one of `retry_on`
        ValueError: If max_attempts is less than 1
    """
    if max_attempts < 1:
        raise ValueError("max_attempts must be at least 1")

    logger = logger or get_logger()

    def log_conflict(retry_state: RetryCallState) -> None:
        logger.warning(
            f"{operation} conflicted, attempt {retry_state.attempt_number}/{max_attempts}",
            extra={"operation": operation, "attempt": retry_state.attempt_number, **context},
        )

    retrying = Retrying(
        stop=stop_after_attempt(max_attempts),
        wait=wait_none(),
        retry=retry_if_exception_type(retry_on),
        after=log_conflict,
        reraise=False,
    )

    try:
        for attempt_state in retrying:
            with attempt_state:
                attempt_number = attempt_state.retry_state.attempt_number
                value = attempt(attempt_number)
    except RetryError as e:
        raise ConflictExhaustedError(
            f"{operation} still conflicting after {max_attempts} attempts",
            cause=e.last_attempt.exception(),
            operation=operation,
            attempts=e.last_attempt.attempt_number,
            **context,
        ) from e

    return RetryOutcome(value=value, attempts=attempt_number)
