"""
Thin wrapper around the Kubernetes CoreV1 API for secrets and ConfigMaps.

API failures are translated into the service's exception hierarchy: a missing
object becomes ClusterResourceNotFoundError. A 409 becomes
ClusterResourceExistsError on create and ResourceVersionConflictError on
update. Anything else becomes InfraError.
"""

import base64
from typing import Any, Dict, Optional

from kubernetes import client
from kubernetes.client.rest import ApiException

from ..constants import DEFAULT_CLUSTER_NAME
from ..exceptions import (
    ClusterResourceExistsError,
    ClusterResourceNotFoundError,
    InfraError,
    ResourceVersionConflictError,
)
from ..utils.logger import ContextAwareLogger, get_logger

SECRET_KIND = "Secret"
CONFIG_MAP_KIND = "ConfigMap"


def _encode_secret_data(data: Dict[str, str]) -> Dict[str, str]:
    return {
        key: base64.b64encode(value.encode("utf-8")).decode("ascii")
        for key, value in data.items()
    }


class ClusterClient:
    """Secret and ConfigMap access for one cluster."""

    def __init__(
        self,
        core_v1: Any,
        cluster_name: str = DEFAULT_CLUSTER_NAME,
        logger: Optional[ContextAwareLogger] = None,
    ):
        """
        Args:
            core_v1: A `kubernetes.client.CoreV1Api` or an object with the same methods
            cluster_name: Name used in logs and error context
            logger: Optional logger instance
        """
        self.core_v1 = core_v1
        self.cluster_name = cluster_name
        self.logger = logger or get_logger()

    def _translate(
        self, e: Exception, action: str, kind: str, namespace: str, name: str
    ) -> InfraError:
        if isinstance(e, ApiException):
            if e.status == 404:
                return ClusterResourceNotFoundError(
                    kind, namespace, name, cluster=self.cluster_name, cause=e
                )
            if e.status == 409 and action == "create":
                return ClusterResourceExistsError(
                    kind, namespace, name, cluster=self.cluster_name, cause=e
                )
            if e.status == 409:
                return ResourceVersionConflictError(
                    kind, namespace, name, cluster=self.cluster_name, cause=e
                )
            return InfraError(
                f"Failed to {action} {kind} {namespace}/{name}: {e.status} {e.reason}",
                cause=e,
                cluster=self.cluster_name,
                kind=kind,
                namespace=namespace,
                name=name,
                api_status=e.status,
            )
        return InfraError(
            f"Failed to {action} {kind} {namespace}/{name}: {e}",
            cause=e,
            cluster=self.cluster_name,
            kind=kind,
            namespace=namespace,
            name=name,
        )

    def get_secret(self, namespace: str, name: str) -> client.V1Secret:
        """
        Raises:
            ClusterResourceNotFoundError: If the secret does not exist
            InfraError: On any other API failure
        """
        try:
            return self.core_v1.read_namespaced_secret(name=name, namespace=namespace)
        except Exception as e:
            raise self._translate(e, "read", SECRET_KIND, namespace, name) from e

    def create_secret(
        self, namespace: str, name: str, data: Dict[str, str]
    ) -> client.V1Secret:
        """
        Create an Opaque secret; values in `data` are base64-encoded here.

        Raises:
            ClusterResourceExistsError: If a secret with this name already exists
            InfraError: If the API rejects the create
        """
        body = client.V1Secret(
            api_version="v1",
            kind=SECRET_KIND,
            metadata=client.V1ObjectMeta(name=name, namespace=namespace),
            type="Opaque",
            data=_encode_secret_data(data),
        )
        try:
            created = self.core_v1.create_namespaced_secret(namespace=namespace, body=body)
        except Exception as e:
            raise self._translate(e, "create", SECRET_KIND, namespace, name) from e

        self.logger.info(
            "Secret created",
            extra={"cluster": self.cluster_name, "namespace": namespace, "secret_name": name},
        )
        return created

    def get_config_map(self, namespace: str, name: str) -> client.V1ConfigMap:
        """
        Raises:
            ClusterResourceNotFoundError: If the ConfigMap does not exist
            InfraError: On any other API failure
        """
        try:
            return self.core_v1.read_namespaced_config_map(name=name, namespace=namespace)
        except Exception as e:
            raise self._translate(e, "read", CONFIG_MAP_KIND, namespace, name) from e

    def update_config_map(
        self, namespace: str, config_map: client.V1ConfigMap
    ) -> client.V1ConfigMap:
        """
        Replace a ConfigMap; the write only succeeds if its resource version is current.

        Raises:
            ResourceVersionConflictError: If the ConfigMap changed since it was read
            InfraError: On any other API failure
        """
        name = config_map.metadata.name
        try:
            return self.core_v1.replace_namespaced_config_map(
                name=name, namespace=namespace, body=config_map
            )
        except Exception as e:
            raise self._translate(e, "update", CONFIG_MAP_KIND, namespace, name) from e
