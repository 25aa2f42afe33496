"""
Shared session handling for repositories.

Repositories work inside a session the service owns: they flush writes so
constraint violations surface early, never commit, and translate SQLAlchemy
failures into RepositoryError.
"""

from contextlib import contextmanager
from typing import Any, Dict, Generic, Optional, Type, TypeVar

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from ..exceptions import BaseError, ErrorCode, RepositoryError, duplicate
from ..utils.logger import ContextAwareLogger, get_logger

T = TypeVar("T")


class BaseRepository(Generic[T]):
    """Session and error handling for one model class."""

    def __init__(
        self,
        session: Session,
        entity_class: Type[T],
        logger: Optional[ContextAwareLogger] = None,
    ):
        self.session = session
        self.entity_class = entity_class
        self.logger = logger or get_logger()
        self.entity_name = entity_class.__name__

    def _translate_db_error(self, e: Exception, context: Dict[str, Any]) -> BaseError:
        """Map a failure raised inside a session operation onto RepositoryError."""
        if isinstance(e, BaseError):
            return e

        if isinstance(e, IntegrityError):
            reason = str(getattr(e, "orig", e)).lower()
            if "unique constraint" in reason or "duplicate" in reason:
                self.logger.warning(f"Duplicate {self.entity_name}", extra=context)
                return duplicate(self.entity_name, cause=e, **context)
            return RepositoryError(
                f"Constraint violated while writing {self.entity_name}: {e}",
                error_code=ErrorCode.CONSTRAINT_VIOLATION,
                cause=e,
                **context,
            )

        if isinstance(e, SQLAlchemyError):
            return RepositoryError(
                f"Database error for {self.entity_name}: {e}", cause=e, **context
            )
        return RepositoryError(
            f"Unexpected error for {self.entity_name}: {e}",
            error_code=ErrorCode.INTERNAL_ERROR,
            cause=e,
            **context,
        )

    @contextmanager
    def _session_operation(
        self, operation_name: str, entity_id: Optional[Any] = None, is_read_only: bool = False
    ):
        """
        Run a block against the repository's session.

        Writes are flushed on success. Any failure is re-raised as a
        RepositoryError carrying the operation name, model name and id.

        Yields:
            The repository's session
        """
        try:
            yield self.session
            if not is_read_only:
                self.session.flush()
        except Exception as e:
            context: Dict[str, Any] = {
                "operation_name": operation_name,
                "entity_type": self.entity_name,
            }
            if entity_id is not None:
                context["entity_id"] = entity_id
            error = self._translate_db_error(e, context)
            if error is e:
                raise
            raise error from e
