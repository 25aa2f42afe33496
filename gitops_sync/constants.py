"""
Constants and enums for the GitOps credential sync service.

This module centralizes all magic strings and constants used throughout
the service to ensure consistency and maintainability.
"""

from enum import Enum

# Name of the secret holding the GitOps username/token pair
GITOPS_SECRET_NAME = "devtron-gitops-secret"

# ConfigMap field holding the YAML-encoded repository credential list
REPOSITORY_CREDENTIALS_KEY = "repository.credentials"

# Cluster the GitOps controller runs in
DEFAULT_CLUSTER_NAME = "default_cluster"

DEFAULT_GITOPS_NAMESPACE = "devtroncd"
DEFAULT_GITOPS_CONFIG_MAP = "argocd-cm"

DEFAULT_RECONCILE_ATTEMPTS = 3


class SecretKey(str, Enum):
    """Field names inside the GitOps secret."""

    USERNAME = "username"
    PASSWORD = "password"


class LogLevel(str, Enum):
    """Standard logging levels."""

    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"


class EnvironmentVariable(str, Enum):
    """Standard environment variable names."""

    AZURE_STORAGE_CONNECTION = "AzureWebJobsStorage"
    DATABASE_URL = "DATABASE_URL"
    APP_ENV = "APP_ENV"
    LOG_LEVEL = "LOG_LEVEL"
    ENABLE_QUEUE_LOGGING = "ENABLE_QUEUE_LOGGING"
    GITOPS_NAMESPACE = "ACD_CONFIGMAP_NAMESPACE"
    GITOPS_CONFIG_MAP = "ACD_CONFIGMAP_NAME"
    CLUSTER_NAME = "GITOPS_CLUSTER_NAME"
    KUBECONFIG = "KUBECONFIG"
    KUBERNETES_CONTEXT = "KUBERNETES_CONTEXT"
    KUBERNETES_IN_CLUSTER = "KUBERNETES_IN_CLUSTER"
    RECONCILE_MAX_ATTEMPTS = "RECONCILE_MAX_ATTEMPTS"
