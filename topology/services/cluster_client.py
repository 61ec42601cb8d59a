"""
Cluster Volume Client

Thin wrapper around the Kubernetes CoreV1 API that lists every persistent
volume in the cluster. The control-plane connection is owned by a
ClusterConnection object: it is established lazily on first use and then
reused by every caller.

Usage:
    connection = ClusterConnection()               # in-cluster service account
    connection = ClusterConnection("~/.kube/config")  # explicit kubeconfig

    volumes = VolumeClient(connection).fetch_all()
"""

import threading
import logging
from typing import Any, Callable, List, Optional

from kubernetes import client, config

from topology.errors import VolumeDiscoveryError

logger = logging.getLogger(__name__)


class ClusterConnection:
    """
    Connect-once handle to the cluster control plane.

    The lock only spans connection setup, so concurrent discovery calls are
    single-flight while connecting and run in parallel once connected.
    """

    def __init__(self, kubeconfig: Optional[str] = None, api_factory: Optional[Callable[[], Any]] = None):
        """
        Initialize the connection handle (does not connect).

        Args:
            kubeconfig: Path to a kubeconfig file; in-cluster config when omitted
            api_factory: Callable returning a CoreV1Api-like object (tests)
        """
        self.kubeconfig = kubeconfig
        self._api_factory = api_factory or self._build_core_api
        self._api = None
        self._lock = threading.Lock()

    @property
    def connected(self) -> bool:
        return self._api is not None

    def _build_core_api(self):
        if self.kubeconfig:
            api_client = config.new_client_from_config(config_file=self.kubeconfig)
        else:
            configuration = client.Configuration()
            config.load_incluster_config(client_configuration=configuration)
            api_client = client.ApiClient(configuration)
        return client.CoreV1Api(api_client)

    def connect(self):
        """Return the CoreV1 API, connecting first if needed. No retry on failure."""
        with self._lock:
            if self._api is None:
                source = self.kubeconfig or "in-cluster config"
                logger.info(f"Connecting to cluster control plane using {source}")
                self._api = self._api_factory()
            return self._api


class VolumeClient:
    """Lists all persistent volumes through a shared ClusterConnection."""

    def __init__(self, connection: ClusterConnection):
        self.connection = connection

    def fetch_all(self) -> List[Any]:
        """
        Fetch the complete, unfiltered persistent volume list.

        Returns:
            List of V1PersistentVolume objects

        Raises:
            VolumeDiscoveryError: On connection or transport failure
        """
        try:
            api = self.connection.connect()
            response = api.list_persistent_volume()
        except Exception as e:
            raise VolumeDiscoveryError(f"listing persistent volumes failed: {e}") from e

        return list(response.items or [])
