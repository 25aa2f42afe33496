"""Pydantic schemas."""

from .gitops_config_schema import (
    GitOpsConfigBase,
    GitOpsConfigCreate,
    GitOpsConfigRead,
    GitOpsConfigRequest,
    GitOpsConfigUpdate,
)
from .repository_credentials_schema import (
    RepositoryCredentialEntry,
    SecretKeyReference,
    SecretObjectReference,
)

__all__ = [
    "GitOpsConfigBase",
    "GitOpsConfigCreate",
    "GitOpsConfigRead",
    "GitOpsConfigRequest",
    "GitOpsConfigUpdate",
    "RepositoryCredentialEntry",
    "SecretKeyReference",
    "SecretObjectReference",
]
