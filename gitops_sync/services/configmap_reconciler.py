"""
Mirrors one provider credential into the GitOps controller ConfigMap.

Each attempt reads the ConfigMap, merges the credential into its
`repository.credentials` list and, when the list changed, writes it back with
the resource version it was read at. A concurrent writer makes the write fail
with a version conflict and the whole read/merge/write cycle runs again.
"""

from dataclasses import dataclass
from typing import Any, Optional

from ..cluster.k8s_client import ClusterClient
from ..constants import DEFAULT_RECONCILE_ATTEMPTS, REPOSITORY_CREDENTIALS_KEY
from ..utils.logger import ContextAwareLogger, get_logger
from ..utils.repository_credentials import (
    decode_repository_credentials,
    encode_repository_credentials,
    merge_repository_credential,
)
from ..utils.retry import retry_on_conflict


@dataclass(frozen=True)
class ReconcileResult:
    """Outcome of a reconcile call."""

    found: bool
    attempts: int
    written: bool


class ConfigMapReconciler:
    """Merges credentials into `repository.credentials` under optimistic concurrency."""

    def __init__(
        self,
        cluster_client: ClusterClient,
        max_attempts: int = DEFAULT_RECONCILE_ATTEMPTS,
        logger: Optional[ContextAwareLogger] = None,
    ):
        if max_attempts < 1:
            raise ValueError("max_attempts must be at least 1")
        self.cluster_client = cluster_client
        self.max_attempts = max_attempts
        self.logger = logger or get_logger()

    def reconcile(
        self, namespace: str, config_map_name: str, credential: Any, secret_name: str
    ) -> ReconcileResult:
        """
        Make the ConfigMap carry an entry for `credential.host`.

        Args:
            namespace: Namespace of the ConfigMap
            config_map_name: Name of the ConfigMap
            credential: Object with `host`, `username` and `token` attributes
            secret_name: Secret existing entries for the host are pointed at

        Returns:
            ReconcileResult; `written` is False when an entry for the host existed

        Raises:
            ConflictExhaustedError: If every attempt hit a version conflict
            SerializationError: If the stored list cannot be decoded
            InfraError: On any other cluster failure, without retrying
        """

        def attempt(attempt_number: int) -> ReconcileResult:
            config_map = self.cluster_client.get_config_map(namespace, config_map_name)
            data = dict(config_map.data or {})

            entries = decode_repository_credentials(data.get(REPOSITORY_CREDENTIALS_KEY))
            found = merge_repository_credential(
                entries,
                host=credential.host,
                username=credential.username or "",
                token=credential.token or "",
                secret_name=secret_name,
            )
            if found:
                return ReconcileResult(found=True, attempts=attempt_number, written=False)

            data[REPOSITORY_CREDENTIALS_KEY] = encode_repository_credentials(entries)
            config_map.data = data
            self.cluster_client.update_config_map(namespace, config_map)
            return ReconcileResult(found=False, attempts=attempt_number, written=True)

        outcome = retry_on_conflict(
            attempt,
            max_attempts=self.max_attempts,
            operation="reconcile_repository_credentials",
            logger=self.logger,
            namespace=namespace,
            config_map=config_map_name,
            host=credential.host,
        )
        result = outcome.value

        self.logger.info(
            "Repository credentials reconciled",
            extra={
                "namespace": namespace,
                "config_map": config_map_name,
                "host": credential.host,
                "found": result.found,
                "written": result.written,
                "attempts": result.attempts,
            },
        )
        return result
