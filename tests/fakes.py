"""
In-memory stand-in for the parts of `kubernetes.client.CoreV1Api` the service uses.

Failures are raised as real `ApiException`s so the cluster client's error
translation runs exactly as it does against an API server.
"""

import base64
from typing import Callable, Dict, List, Optional, Tuple

from kubernetes import client
from kubernetes.client.rest import ApiException

from gitops_sync.cluster import ClusterClient

Key = Tuple[str, str]


class FakeCoreV1Api:
    """Secrets and ConfigMaps with resource-version checks on replace."""

    def __init__(self):
        self.secrets: Dict[Key, Dict[str, str]] = {}
        self.config_maps: Dict[Key, Dict] = {}
        self.secret_creates: List[Key] = []
        self.config_map_reads = 0
        self.config_map_replaces = 0
        self.successful_replaces = 0
        # Number of upcoming replace calls rejected with 409 regardless of version
        self.forced_conflicts = 0
        # Called with (namespace, name) before each replace is checked
        self.on_replace: Optional[Callable[[str, str], None]] = None
        # Status returned by every read/replace/create when set
        self.fail_with_status: Optional[int] = None

    # ---- setup helpers ----

    def add_config_map(
        self, namespace: str, name: str, data: Optional[Dict[str, str]], version: int = 1
    ) -> None:
        self.config_maps[(namespace, name)] = {
            "data": dict(data) if data is not None else None,
            "resource_version": str(version),
        }

    def add_secret(self, namespace: str, name: str, data: Dict[str, str]) -> None:
        self.secrets[(namespace, name)] = dict(data)

    def config_map_data(self, namespace: str, name: str) -> Optional[Dict[str, str]]:
        stored = self.config_maps[(namespace, name)]["data"]
        return dict(stored) if stored is not None else None

    def config_map_version(self, namespace: str, name: str) -> str:
        return self.config_maps[(namespace, name)]["resource_version"]

    def concurrent_write(self, namespace: str, name: str, data: Dict[str, str]) -> None:
        """Simulate another writer replacing the ConfigMap."""
        stored = self.config_maps[(namespace, name)]
        stored["data"] = dict(data)
        stored["resource_version"] = str(int(stored["resource_version"]) + 1)

    def decoded_secret(self, namespace: str, name: str) -> Dict[str, str]:
        return {
            key: base64.b64decode(value).decode("utf-8")
            for key, value in self.secrets[(namespace, name)].items()
        }

    # ---- CoreV1Api surface ----

    def _maybe_fail(self) -> None:
        if self.fail_with_status is not None:
            raise ApiException(status=self.fail_with_status, reason="Injected failure")

    def read_namespaced_secret(self, name: str, namespace: str) -> client.V1Secret:
        self._maybe_fail()
        if (namespace, name) not in self.secrets:
            raise ApiException(status=404, reason="Not Found")
        return client.V1Secret(
            metadata=client.V1ObjectMeta(name=name, namespace=namespace),
            type="Opaque",
            data=dict(self.secrets[(namespace, name)]),
        )

    def create_namespaced_secret(self, namespace: str, body: client.V1Secret) -> client.V1Secret:
        self._maybe_fail()
        name = body.metadata.name
        if (namespace, name) in self.secrets:
            raise ApiException(status=409, reason="AlreadyExists")
        self.secrets[(namespace, name)] = dict(body.data or {})
        self.secret_creates.append((namespace, name))
        return body

    def read_namespaced_config_map(self, name: str, namespace: str) -> client.V1ConfigMap:
        self.config_map_reads += 1
        self._maybe_fail()
        if (namespace, name) not in self.config_maps:
            raise ApiException(status=404, reason="Not Found")
        stored = self.config_maps[(namespace, name)]
        return client.V1ConfigMap(
            metadata=client.V1ObjectMeta(
                name=name, namespace=namespace, resource_version=stored["resource_version"]
            ),
            data=dict(stored["data"]) if stored["data"] is not None else None,
        )

    def replace_namespaced_config_map(
        self, name: str, namespace: str, body: client.V1ConfigMap
    ) -> client.V1ConfigMap:
        self.config_map_replaces += 1
        self._maybe_fail()
        if self.on_replace is not None:
            self.on_replace(namespace, name)
        if (namespace, name) not in self.config_maps:
            raise ApiException(status=404, reason="Not Found")
        if self.forced_conflicts > 0:
            self.forced_conflicts -= 1
            raise ApiException(status=409, reason="Conflict")

        stored = self.config_maps[(namespace, name)]
        if body.metadata.resource_version != stored["resource_version"]:
            raise ApiException(status=409, reason="Conflict")

        stored["data"] = dict(body.data or {})
        stored["resource_version"] = str(int(stored["resource_version"]) + 1)
        self.successful_replaces += 1
        body.metadata.resource_version = stored["resource_version"]
        return body


class FakeConnectionResolver:
    """Hands out clients bound to one FakeCoreV1Api and records requested clusters."""

    def __init__(self, core_v1: FakeCoreV1Api):
        self.core_v1 = core_v1
        self.resolved: List[str] = []

    def resolve(self, cluster_name: str) -> ClusterClient:
        self.resolved.append(cluster_name)
        return ClusterClient(self.core_v1, cluster_name=cluster_name)
