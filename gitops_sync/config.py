"""
Centralized configuration management for the GitOps credential sync service.

This module provides a unified configuration system with support for:
- Environment variables
- Cluster connection settings
- Reconciliation behavior
- Validation using Pydantic
"""

import os
from typing import Dict, Optional

from pydantic import BaseModel, Field, field_validator
from sqlalchemy.engine import make_url

from .constants import (
    DEFAULT_CLUSTER_NAME,
    DEFAULT_GITOPS_CONFIG_MAP,
    DEFAULT_GITOPS_NAMESPACE,
    DEFAULT_RECONCILE_ATTEMPTS,
    GITOPS_SECRET_NAME,
    EnvironmentVariable,
    LogLevel,
)


def _env_flag(name: str, default: str = "false") -> bool:
    return os.getenv(name, default).strip().lower() in {"1", "true", "yes"}


class DatabaseConfig(BaseModel):
    """Database connection configuration."""

    connection_string: str = Field(
        default_factory=lambda: os.getenv(
            EnvironmentVariable.DATABASE_URL.value, "sqlite:///./gitops_sync.db"
        ),
        validate_default=True,
        description="Database connection string",
    )
    pool_size: int = Field(default=5, description="Connection pool size")
    max_overflow: int = Field(default=10, description="Maximum overflow connections")
    pool_timeout: int = Field(default=30, description="Pool timeout in seconds")
    echo: bool = Field(default=False, description="Echo SQL statements")

    @field_validator("connection_string")
    def use_psycopg_driver(cls, v: str) -> str:
        """Point bare Postgres URLs at the psycopg driver."""
        for scheme in ("postgres://", "postgresql://"):
            if v.startswith(scheme):
                return "postgresql+psycopg://" + v[len(scheme):]
        return v

    @property
    def is_sqlite(self) -> bool:
        return make_url(self.connection_string).get_backend_name() == "sqlite"


class LoggingConfig(BaseModel):
    """Logging configuration."""

    level: str = Field(
        default_factory=lambda: os.getenv(EnvironmentVariable.LOG_LEVEL.value, LogLevel.INFO.value),
        description="Logging level",
    )
    format: str = Field(
        default="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        description="Log format string",
    )
    enable_queue: bool = Field(
        default_factory=lambda: _env_flag(EnvironmentVariable.ENABLE_QUEUE_LOGGING.value),
        description="Ship structured logs to an Azure Storage Queue",
    )
    queue_name: str = Field(default="logs-queue", description="Log queue name")
    queue_connection_string: str = Field(
        default_factory=lambda: os.getenv(EnvironmentVariable.AZURE_STORAGE_CONNECTION.value, ""),
        description="Azure Storage connection string for the log queue",
    )

    @field_validator("level")
    def validate_log_level(cls, v: str) -> str:
        """Validate log level is valid."""
        valid_levels = {level.value for level in LogLevel}
        if v.upper() not in valid_levels:
            raise ValueError(f"Invalid log level: {v}. Must be one of {valid_levels}")
        return v.upper()


class GitOpsSettings(BaseModel):
    """Where the GitOps controller keeps its repository credentials."""

    namespace: str = Field(
        default_factory=lambda: os.getenv(
            EnvironmentVariable.GITOPS_NAMESPACE.value, DEFAULT_GITOPS_NAMESPACE
        ),
        description="Namespace of the GitOps controller ConfigMap and secret",
    )
    config_map_name: str = Field(
        default_factory=lambda: os.getenv(
            EnvironmentVariable.GITOPS_CONFIG_MAP.value, DEFAULT_GITOPS_CONFIG_MAP
        ),
        description="Name of the GitOps controller ConfigMap",
    )
    secret_name: str = Field(
        default=GITOPS_SECRET_NAME,
        description="Name of the secret holding the git username/token pair",
    )
    cluster_name: str = Field(
        default_factory=lambda: os.getenv(
            EnvironmentVariable.CLUSTER_NAME.value, DEFAULT_CLUSTER_NAME
        ),
        description="Cluster the GitOps controller runs in",
    )


class ClusterSettings(BaseModel):
    """How to reach the Kubernetes API server."""

    in_cluster: bool = Field(
        default_factory=lambda: _env_flag(EnvironmentVariable.KUBERNETES_IN_CLUSTER.value),
        description="Use the pod service account instead of a kubeconfig",
    )
    kubeconfig_path: Optional[str] = Field(
        default_factory=lambda: os.getenv(EnvironmentVariable.KUBECONFIG.value),
        description="Path to a kubeconfig file",
    )
    context: Optional[str] = Field(
        default_factory=lambda: os.getenv(EnvironmentVariable.KUBERNETES_CONTEXT.value),
        description="Default kubeconfig context",
    )
    cluster_contexts: Dict[str, str] = Field(
        default_factory=dict, description="Kubeconfig context per cluster name"
    )

    def context_for(self, cluster_name: str) -> Optional[str]:
        """Kubeconfig context to use for a cluster, falling back to the default context."""
        return self.cluster_contexts.get(cluster_name, self.context)


class ReconcileConfig(BaseModel):
    """Configuration for ConfigMap reconciliation."""

    max_attempts: int = Field(
        default_factory=lambda: int(
            os.getenv(
                EnvironmentVariable.RECONCILE_MAX_ATTEMPTS.value, str(DEFAULT_RECONCILE_ATTEMPTS)
            )
        ),
        ge=1,
        description="Fetch/write attempts before giving up on version conflicts",
    )


class AppConfig(BaseModel):
    """Main application configuration."""

    environment: str = Field(
        default_factory=lambda: os.getenv(EnvironmentVariable.APP_ENV.value, "development"),
        description="Application environment",
    )
    debug: bool = Field(
        default_factory=lambda: os.getenv("DEBUG", "false").lower() == "true",
        description="Debug mode",
    )

    # Sub-configurations
    database: DatabaseConfig = Field(
        default_factory=DatabaseConfig, description="Database configuration"
    )
    logging: LoggingConfig = Field(
        default_factory=LoggingConfig, description="Logging configuration"
    )
    gitops: GitOpsSettings = Field(
        default_factory=GitOpsSettings, description="GitOps controller settings"
    )
    cluster: ClusterSettings = Field(
        default_factory=ClusterSettings, description="Kubernetes connection settings"
    )
    reconcile: ReconcileConfig = Field(
        default_factory=ReconcileConfig, description="Reconciliation settings"
    )

    @classmethod
    def from_env(cls) -> "AppConfig":
        """Create configuration from environment variables."""
        return cls()


# Global configuration instance
_config: Optional[AppConfig] = None


def get_config() -> AppConfig:
    """Get the global configuration instance."""
    global _config
    if _config is None:
        _config = AppConfig.from_env()
    return _config


def set_config(config: AppConfig) -> None:
    """Set the global configuration instance."""
    global _config
    _config = config


def reset_config() -> None:
    """Reset the global configuration instance."""
    global _config
    _config = None
