"""
Resolution of cluster names to API clients.
"""

from typing import Any, Callable, Optional

from kubernetes import client, config
from kubernetes.config.config_exception import ConfigException

from ..config import ClusterSettings, get_config
from ..exceptions import ErrorCode, InfraError
from ..utils.logger import ContextAwareLogger, get_logger
from .k8s_client import ClusterClient


class ClusterConnectionResolver:
    """
    Builds a ClusterClient for a named cluster.

    In-cluster mode uses the pod's service account; otherwise the kubeconfig
    context mapped to the cluster name (or the default context) is loaded.
    """

    def __init__(
        self,
        settings: Optional[ClusterSettings] = None,
        core_v1_factory: Optional[Callable[[client.ApiClient], Any]] = None,
        logger: Optional[ContextAwareLogger] = None,
    ):
        self.settings = settings or get_config().cluster
        self.core_v1_factory = core_v1_factory or client.CoreV1Api
        self.logger = logger or get_logger()

    def _api_client(self, cluster_name: str) -> client.ApiClient:
        if self.settings.in_cluster:
            configuration = client.Configuration()
            config.load_incluster_config(client_configuration=configuration)
            return client.ApiClient(configuration)

        return config.new_client_from_config(
            config_file=self.settings.kubeconfig_path,
            context=self.settings.context_for(cluster_name),
        )

    def resolve(self, cluster_name: str) -> ClusterClient:
        """
        Raises:
            InfraError: If no usable connection configuration exists for the cluster
        """
        try:
            api_client = self._api_client(cluster_name)
        except (ConfigException, OSError) as e:
            raise InfraError(
                f"Cannot connect to cluster {cluster_name}: {e}",
                error_code=ErrorCode.CONFIGURATION_ERROR,
                cause=e,
                cluster=cluster_name,
                in_cluster=self.settings.in_cluster,
            ) from e

        self.logger.debug(
            "Cluster connection resolved",
            extra={"cluster": cluster_name, "in_cluster": self.settings.in_cluster},
        )
        return ClusterClient(self.core_v1_factory(api_client), cluster_name=cluster_name)
