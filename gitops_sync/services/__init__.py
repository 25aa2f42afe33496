"""Service layer."""

from .configmap_reconciler import ConfigMapReconciler, ReconcileResult
from .gitops_config_service import GitOpsConfigService
from .secret_provisioner import SecretProvisioner

__all__ = [
    "ConfigMapReconciler",
    "GitOpsConfigService",
    "ReconcileResult",
    "SecretProvisioner",
]
