"""
Engine and session management for the GitOps config store.

The connection comes from `AppConfig.database`, so `DATABASE_URL` decides
whether the store is a SQLite file or a Postgres database reached through
psycopg.
"""

from typing import Any, Optional

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, declarative_base, scoped_session, sessionmaker

from ..config import DatabaseConfig, get_config
from ..utils.logger import get_logger

# Base class for all SQLAlchemy models
Base: Any = declarative_base()


class DatabaseManager:
    """Owns the engine and a thread-scoped session registry for one database."""

    def __init__(self, config: DatabaseConfig):
        self.config = config
        self.engine = self._create_engine()
        self.session_factory = sessionmaker(bind=self.engine)
        self.scoped_session = scoped_session(self.session_factory)

    def _create_engine(self) -> Engine:
        if self.config.is_sqlite:
            return create_engine(
                self.config.connection_string,
                echo=self.config.echo,
                connect_args={"check_same_thread": False},
            )
        return create_engine(
            self.config.connection_string,
            echo=self.config.echo,
            pool_size=self.config.pool_size,
            max_overflow=self.config.max_overflow,
            pool_timeout=self.config.pool_timeout,
        )

    def create_tables(self) -> None:
        Base.metadata.create_all(self.engine)

    def get_session(self) -> Session:
        return self.scoped_session()

    def close_session(self, session: Optional[Session] = None) -> None:
        if session:
            session.close()
        else:
            self.scoped_session.remove()


def import_all_models():
    """Import all models to ensure they're registered with SQLAlchemy metadata."""
    from sqlalchemy.orm import configure_mappers

    from .db_gitops_config_models import GitOpsConfigRecord  # noqa

    configure_mappers()


def initialize_db(config: Optional[DatabaseConfig] = None) -> DatabaseManager:
    """
    Build a DatabaseManager and create any missing tables.

    Args:
        config: Database section to use; defaults to `get_config().database`
    """
    if config is None:
        config = get_config().database

    manager = DatabaseManager(config)
    get_logger().info(
        "Initializing database", extra={"db_backend": manager.engine.url.get_backend_name()}
    )

    import_all_models()
    manager.create_tables()
    return manager
