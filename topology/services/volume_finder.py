"""
Volume Finder - discovery and field normalization.

Fetches raw persistent volumes from the cluster, keeps the ones created by a
tracked CSI driver and maps each into a uniform VolumeInfo record. Per-record
gaps never fail the call; they resolve to fallback values instead.
"""

import time
import logging
from typing import Any, Dict, Iterable, List, Optional, Sequence

from topology.config import DriverNameSet, DEFAULT_STORAGE_SYSTEM_KEYS
from topology.models import VolumeInfo, NOT_AVAILABLE
from topology.services.cluster_client import VolumeClient
from topology.services.drivers import apply_driver_overrides
from topology.tracing import Tracing

logger = logging.getLogger(__name__)


def _text(value: Any) -> str:
    if value is None:
        return ""
    return str(value)


def _resolve_storage_system(attributes: Dict[str, str], keys: Sequence[str]) -> str:
    """First non-empty attribute among `keys`, in order."""
    for key in keys:
        value = attributes.get(key)
        if value:
            return value
    return ""


def normalize_volume(volume: Any, storage_system_keys: Sequence[str] = DEFAULT_STORAGE_SYSTEM_KEYS) -> VolumeInfo:
    """
    Map one CSI-backed V1PersistentVolume into a VolumeInfo.

    Args:
        volume: Raw persistent volume (kubernetes client model)
        storage_system_keys: Attribute keys tried in order for the storage system id

    Returns:
        VolumeInfo with every field populated
    """
    spec = volume.spec
    csi = spec.csi
    metadata = volume.metadata
    claim = spec.claim_ref
    attributes = dict(csi.volume_attributes or {})
    capacity = spec.capacity or {}
    status = volume.status

    logger.debug(f"volumefinder volume attributes: {attributes}")

    volume_name = _text(metadata.name)
    fields = {
        "namespace": _text(claim.namespace) if claim else "",
        "persistent_volume_claim": _text(claim.uid) if claim else "",
        "volume_claim_name": _text(claim.name) if claim else "",
        "volume_status": _text(status.phase) if status else "",
        "persistent_volume": volume_name,
        "storage_class": _text(spec.storage_class_name),
        "driver": _text(csi.driver),
        "provisioned_size": _text(capacity.get("storage")),
        "storage_system_volume_name": attributes.get("Name") or volume_name,
        "storage_pool_name": attributes.get("StoragePoolName", ""),
        "storage_system": _resolve_storage_system(attributes, storage_system_keys),
        "protocol": attributes.get("Protocol", ""),
        "created_time": _text(metadata.creation_timestamp),
    }

    apply_driver_overrides(fields["driver"], fields, attributes, _text(csi.volume_handle))

    for key, value in fields.items():
        if not value:
            fields[key] = NOT_AVAILABLE

    return VolumeInfo(**fields)


def normalize(
    volumes: Iterable[Any],
    driver_names: Iterable[str],
    storage_system_keys: Sequence[str] = DEFAULT_STORAGE_SYSTEM_KEYS,
) -> List[VolumeInfo]:
    """
    Keep CSI volumes whose driver is in `driver_names` and normalize them.

    Non-CSI volumes and untracked drivers are skipped silently. The driver
    names are materialized once, before iteration starts.
    """
    tracked = tuple(driver_names)
    infos: List[VolumeInfo] = []
    for volume in volumes:
        csi = getattr(volume.spec, "csi", None) if volume.spec else None
        if csi is None:
            continue
        if csi.driver not in tracked:
            continue
        infos.append(normalize_volume(volume, storage_system_keys))
    return infos


class VolumeFinder:
    """
    Queries the cluster for persistent volumes created by a tracked driver.

    Usage:
        finder = VolumeFinder(VolumeClient(connection), DriverNameSet(["csi-vxflexos.dellemc.com"]))
        volumes = finder.get_persistent_volumes()
    """

    def __init__(
        self,
        volume_client: VolumeClient,
        driver_names: DriverNameSet,
        storage_system_keys: Optional[Sequence[str]] = None,
        tracing: Optional[Tracing] = None,
    ):
        self.volume_client = volume_client
        self.driver_names = driver_names
        self.storage_system_keys = tuple(storage_system_keys or DEFAULT_STORAGE_SYSTEM_KEYS)
        self.tracing = tracing or Tracing()

    def get_persistent_volumes(self) -> List[VolumeInfo]:
        """
        Run one discovery pass.

        Raises:
            VolumeDiscoveryError: When the cluster listing fails
        """
        start = time.perf_counter()
        try:
            with self.tracing.start_span("GetPersistentVolumes"):
                drivers = self.driver_names.snapshot()
                raw_volumes = self.volume_client.fetch_all()
                volumes = normalize(raw_volumes, drivers, self.storage_system_keys)
        finally:
            duration_ms = (time.perf_counter() - start) * 1000
            logger.debug(f"get_persistent_volumes took {duration_ms:.1f}ms")

        logger.debug(f"volumefinder returned {len(volumes)} of {len(raw_volumes)} persistent volumes")
        return volumes
