"""Repository layer for data access."""

from .base_repository import BaseRepository
from .gitops_config_repository import GitOpsConfigRepository

__all__ = [
    "BaseRepository",
    "GitOpsConfigRepository",
]
