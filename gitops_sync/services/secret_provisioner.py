"""
Provisioning of the secret the GitOps controller reads git credentials from.
"""

from typing import Optional

from ..cluster.k8s_client import ClusterClient
from ..constants import SecretKey
from ..exceptions import ClusterResourceExistsError, ClusterResourceNotFoundError
from ..schemas.repository_credentials_schema import SecretObjectReference
from ..utils.logger import ContextAwareLogger, get_logger


class SecretProvisioner:
    """Creates the credential secret once and reuses it afterwards."""

    def __init__(self, cluster_client: ClusterClient, logger: Optional[ContextAwareLogger] = None):
        self.cluster_client = cluster_client
        self.logger = logger or get_logger()

    def ensure_secret(
        self, namespace: str, name: str, username: str, token: str
    ) -> SecretObjectReference:
        """
        Make sure secret `namespace/name` exists.

        An existing secret is left as it is, even if it holds different
        credentials. A missing one is created with `username` and `password` keys.
        Losing a create race to another writer counts as success.

        Raises:
            InfraError: If the secret cannot be read or created
        """
        try:
            self.cluster_client.get_secret(namespace, name)
            self.logger.debug(
                "Secret already present",
                extra={"namespace": namespace, "secret_name": name},
            )
        except ClusterResourceNotFoundError:
            try:
                self.cluster_client.create_secret(
                    namespace,
                    name,
                    {SecretKey.USERNAME.value: username, SecretKey.PASSWORD.value: token},
                )
            except ClusterResourceExistsError:
                # Another writer created it between our read and create
                self.logger.info(
                    "Secret created concurrently, reusing it",
                    extra={"namespace": namespace, "secret_name": name},
                )

        return SecretObjectReference(namespace=namespace, name=name)
