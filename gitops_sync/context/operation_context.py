"""
Operation logging for service entry points.

Each operation logs ENTER and EXIT lines with its duration, shares one
correlation ID with any nested operations, and stamps its name and id onto
service errors that escape it.
"""

import time
import uuid
from contextlib import contextmanager
from functools import wraps
from typing import Any, Callable, Dict, Optional, TypeVar, Union, cast

from ..exceptions import BaseError, get_correlation_id, set_correlation_id
from ..utils.logger import ContextAwareLogger, get_logger


class OperationContext:
    """Identity and timing of one running operation."""

    def __init__(self, operation_name: str, correlation_id: Optional[str] = None, **context):
        self.operation_name = operation_name
        self.operation_id = str(uuid.uuid4())

        # Reuse the caller's correlation ID so nested operations share it
        self.correlation_id = correlation_id or get_correlation_id() or str(uuid.uuid4())
        set_correlation_id(self.correlation_id)

        self.context = context
        self.start_time = time.time()

    @property
    def duration_ms(self) -> float:
        return (time.time() - self.start_time) * 1000

    def log_extra(self, **fields: Any) -> Dict[str, Any]:
        """Context for a log line, plus the operation id and any `fields`."""
        return {**self.context, "operation_id": self.operation_id, **fields}


class OperationHandler:
    """Logs operation boundaries and enriches the errors that cross them."""

    def __init__(self, logger: Optional[ContextAwareLogger] = None):
        self.logger = logger if logger is not None else get_logger()

    @contextmanager
    def operation(self, name: str, **context):
        op_ctx = OperationContext(name, **context)
        self.logger.info(f"ENTER: {name}", extra=op_ctx.log_extra())

        try:
            yield op_ctx
        except BaseError as e:
            e.add_context(
                operation_name=name,
                operation_id=op_ctx.operation_id,
                operation_duration_ms=op_ctx.duration_ms,
            )
            # BaseError already logged itself on construction
            self.logger.error(
                f"ERROR: {name} -> {e.error_code.value}: {e.message}",
                extra=op_ctx.log_extra(
                    duration_ms=op_ctx.duration_ms,
                    error_id=e.error_id,
                    error_code=e.error_code.value,
                    status="error",
                ),
            )
            raise
        except Exception as e:
            self.logger.exception(
                f"ERROR: {name} -> {type(e).__name__}: {e}",
                extra=op_ctx.log_extra(
                    duration_ms=op_ctx.duration_ms,
                    error_type=type(e).__name__,
                    status="error",
                ),
            )
            raise

        self.logger.info(
            f"EXIT: {name}",
            extra=op_ctx.log_extra(duration_ms=op_ctx.duration_ms, status="success"),
        )


F = TypeVar("F", bound=Callable[..., Any])


def _sanitize_param(param):
    """Reduce a call argument to something safe to log."""
    if param is None or isinstance(param, (bool, int, float)):
        return param
    if isinstance(param, str):
        # Short identifiers only; anything longer may be a token
        return param if len(param) <= 64 else f"<str len={len(param)}>"
    if isinstance(param, (list, tuple)) and len(param) < 10:
        return [_sanitize_param(x) for x in param]
    # Request models carry tokens, so only the type is logged
    return type(param).__name__


def _operation_name(func: Callable, args: tuple) -> str:
    op_name = func.__name__
    if args:
        op_name = f"{type(args[0]).__name__}.{op_name}"
    return f"{func.__module__.split('.')[-1]}.{op_name}"


def operation(name: Union[Optional[str], Callable] = None):
    """
    Wrap a service method in an operation.

    Usable bare (`@operation`) or with an explicit name
    (`@operation(name="create_gitops_config")`). Without a name the operation
    is called `<module>.<Class>.<method>`.
    """

    def decorator(func: F) -> F:
        @wraps(func)
        def wrapper(*args, **kwargs) -> Any:
            logger = get_logger()
            op_name = name if name is not None else _operation_name(func, args)

            context = {"source_module": func.__module__}
            if args:
                context["class"] = type(args[0]).__name__

            sanitized_args = [_sanitize_param(arg) for arg in args[1:]]
            sanitized_kwargs = {k: _sanitize_param(v) for k, v in kwargs.items()}
            logger.debug(f"{op_name} args: {sanitized_args}, kwargs: {sanitized_kwargs}")

            with OperationHandler(logger=logger).operation(op_name, **context):
                return func(*args, **kwargs)

        return cast(F, wrapper)

    if callable(name):
        func, name = name, None
        return decorator(func)

    return decorator
