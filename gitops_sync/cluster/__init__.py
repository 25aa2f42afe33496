"""Kubernetes cluster access."""

from .connection import ClusterConnectionResolver
from .k8s_client import CONFIG_MAP_KIND, SECRET_KIND, ClusterClient

__all__ = [
    "CONFIG_MAP_KIND",
    "SECRET_KIND",
    "ClusterClient",
    "ClusterConnectionResolver",
]
