"""
Test fixtures for gitops_sync unit tests.

This module provides shared test fixtures including database setup,
an in-memory cluster API, and common test data.
"""

import pytest
from sqlalchemy.orm import Session

from gitops_sync.cluster import ClusterClient
from gitops_sync.config import DatabaseConfig, GitOpsSettings, ReconcileConfig, reset_config
from gitops_sync.constants import (
    DEFAULT_CLUSTER_NAME,
    DEFAULT_GITOPS_CONFIG_MAP,
    DEFAULT_GITOPS_NAMESPACE,
    GITOPS_SECRET_NAME,
)
from gitops_sync.db import Base, DatabaseManager, initialize_db
from gitops_sync.exceptions import clear_correlation_id
from tests.fakes import FakeConnectionResolver, FakeCoreV1Api
from tests.fixtures.factories import GitLabConfigRecordFactory, GitOpsConfigRecordFactory


@pytest.fixture(autouse=True)
def clean_global_state():
    """Reset cached configuration and correlation ids around each test."""
    reset_config()
    clear_correlation_id()
    yield
    reset_config()
    clear_correlation_id()


@pytest.fixture(scope="session")
def db_config() -> DatabaseConfig:
    """Create SQLite in-memory database configuration for testing."""
    return DatabaseConfig(connection_string="sqlite:///:memory:", echo=False)


@pytest.fixture(scope="session")
def db_manager(db_config: DatabaseConfig) -> DatabaseManager:
    """Create and initialize database manager with all models."""
    return initialize_db(db_config)


@pytest.fixture(scope="function")
def db_session(db_manager: DatabaseManager) -> Session:
    """
    Create a database session for each test.

    Tables are created before and dropped after every test so each test
    starts from an empty database.
    """
    session = db_manager.get_session()
    Base.metadata.create_all(db_manager.engine)
    for factory_class in (GitOpsConfigRecordFactory, GitLabConfigRecordFactory):
        factory_class._meta.sqlalchemy_session = session

    yield session

    session.rollback()
    db_manager.close_session()
    Base.metadata.drop_all(db_manager.engine)


@pytest.fixture
def core_v1() -> FakeCoreV1Api:
    """In-memory CoreV1 API holding an empty GitOps controller ConfigMap."""
    api = FakeCoreV1Api()
    api.add_config_map(DEFAULT_GITOPS_NAMESPACE, DEFAULT_GITOPS_CONFIG_MAP, {})
    return api


@pytest.fixture
def cluster_client(core_v1: FakeCoreV1Api) -> ClusterClient:
    return ClusterClient(core_v1, cluster_name=DEFAULT_CLUSTER_NAME)


@pytest.fixture
def connection_resolver(core_v1: FakeCoreV1Api) -> FakeConnectionResolver:
    return FakeConnectionResolver(core_v1)


@pytest.fixture
def gitops_settings() -> GitOpsSettings:
    """Settings pointing at the well-known namespace, ConfigMap and secret."""
    return GitOpsSettings(
        namespace=DEFAULT_GITOPS_NAMESPACE,
        config_map_name=DEFAULT_GITOPS_CONFIG_MAP,
        secret_name=GITOPS_SECRET_NAME,
        cluster_name=DEFAULT_CLUSTER_NAME,
    )


@pytest.fixture
def reconcile_config() -> ReconcileConfig:
    return ReconcileConfig(max_attempts=3)
