"""
Topology Service Entrypoint

FastAPI application factory for the topology service. Collaborators
(volume finder, JSON codec, config watcher, tracing) are passed in and kept on
app.state; nothing is held in module globals.
"""

import threading
import logging
from contextlib import asynccontextmanager
from typing import Dict, Optional

from fastapi import FastAPI, Request, Response

from topology.api import debug, grafana
from topology.config import DriverNameSet, Settings
from topology.config_watcher import ConfigWatcher
from topology.errors import TopologyError, VolumeDiscoveryError
from topology.services.cluster_client import ClusterConnection, VolumeClient
from topology.services.codec import JsonCodec
from topology.services.volume_finder import VolumeFinder
from topology.tracing import Tracing

logger = logging.getLogger(__name__)


class ServiceStats:
    """Thread-safe request counters exposed on /debug/vars"""

    def __init__(self):
        self._counters: Dict[str, int] = {"requests": 0, "discovery_errors": 0, "request_errors": 0}
        self._lock = threading.Lock()

    def increment(self, name: str) -> None:
        with self._lock:
            self._counters[name] = self._counters.get(name, 0) + 1

    def snapshot(self) -> Dict[str, int]:
        with self._lock:
            return dict(self._counters)


def create_app(
    volume_finder,
    codec: Optional[JsonCodec] = None,
    enable_debug: bool = False,
    config_watcher=None,
    tracing: Optional[Tracing] = None,
) -> FastAPI:
    """
    Build the topology FastAPI app.

    Args:
        volume_finder: Object with get_persistent_volumes() -> List[VolumeInfo]
        codec: JSON codec for request decoding and response encoding
        enable_debug: Mount /debug routes
        config_watcher: Optional ConfigWatcher started/stopped with the app
        tracing: Tracer provider holder for request spans; shut down with the app
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        if config_watcher is not None:
            config_watcher.start()
        logger.info("Topology service startup complete")
        yield
        if config_watcher is not None:
            logger.info("Stopping config watcher...")
            config_watcher.stop()
        app.state.tracing.shutdown()
        logger.info("Topology service shutdown complete")

    app = FastAPI(title="Karavi Topology Service", lifespan=lifespan)
    app.state.volume_finder = volume_finder
    app.state.codec = codec or JsonCodec()
    app.state.stats = ServiceStats()
    app.state.tracing = tracing or Tracing()

    app.include_router(grafana.router)
    if enable_debug:
        app.include_router(debug.router)

    @app.exception_handler(TopologyError)
    async def topology_error_handler(request: Request, exc: TopologyError) -> Response:
        if isinstance(exc, VolumeDiscoveryError):
            request.app.state.stats.increment("discovery_errors")
        else:
            request.app.state.stats.increment("request_errors")
        logger.error(f"{request.method} {request.url.path} failed: {exc}")
        return Response(status_code=500)

    @app.middleware("http")
    async def log_requests(request: Request, call_next):
        response = await call_next(request)
        request.app.state.stats.increment("requests")
        client = request.client.host if request.client else "-"
        logger.debug(f"handling request uri={request.url} method={request.method} remote_addr={client}")
        return response

    return app


def build_service(settings: Settings) -> FastAPI:
    """
    Wire the production collaborators for `settings` into an app.

    The cluster connection is created here but only opened on the first
    discovery call.
    """
    driver_names = DriverNameSet(settings.driver_names)
    tracing = Tracing()
    tracing.configure(settings)
    connection = ClusterConnection(kubeconfig=settings.kubeconfig)
    finder = VolumeFinder(VolumeClient(connection), driver_names, settings.storage_system_keys, tracing)
    watcher = ConfigWatcher(settings, driver_names, tracing=tracing)

    logger.info(f"Tracking CSI drivers: {list(settings.driver_names)}")
    return create_app(finder, enable_debug=settings.debug, config_watcher=watcher, tracing=tracing)
