"""
gitops_sync: keeps GitOps provider credentials and mirrors them into the
GitOps controller's cluster configuration.
"""

__version__ = "0.1.0"
