"""Shared fixtures: persistent volume builders and normalized records."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any

import pytest
from kubernetes.client import (
    V1CSIPersistentVolumeSource,
    V1NFSVolumeSource,
    V1ObjectMeta,
    V1ObjectReference,
    V1PersistentVolume,
    V1PersistentVolumeSpec,
    V1PersistentVolumeStatus,
)
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import SimpleSpanProcessor
from opentelemetry.sdk.trace.export.in_memory_span_exporter import InMemorySpanExporter

from topology.models import VolumeInfo
from topology.tracing import Tracing

CREATED_AT = datetime(2020, 7, 28, 20, 0, 0, tzinfo=timezone.utc)


def make_pv(
    name: str = "persistent-volume-name",
    driver: str | None = "csi-vxflexos.dellemc.com",
    attributes: dict[str, str] | None = None,
    volume_handle: str | None = None,
    namespace: str = "namespace-1",
    claim_name: str = "pvc-name",
    claim_uid: str = "pvc-uid",
    storage: str = "16Gi",
    storage_class: str = "storage-class-name",
    phase: str = "Bound",
    claim: bool = True,
) -> V1PersistentVolume:
    """Build a V1PersistentVolume; driver=None builds a non-CSI (NFS) volume."""
    csi = None
    nfs = None
    if driver is None:
        nfs = V1NFSVolumeSource(server="nas-server", path="file-path")
    else:
        csi = V1CSIPersistentVolumeSource(
            driver=driver,
            volume_handle=volume_handle or name,
            volume_attributes=attributes or {},
        )
    claim_ref = V1ObjectReference(name=claim_name, namespace=namespace, uid=claim_uid) if claim else None
    return V1PersistentVolume(
        metadata=V1ObjectMeta(name=name, creation_timestamp=CREATED_AT),
        spec=V1PersistentVolumeSpec(
            capacity={"storage": storage},
            csi=csi,
            nfs=nfs,
            claim_ref=claim_ref,
            storage_class_name=storage_class,
        ),
        status=V1PersistentVolumeStatus(phase=phase),
    )


def make_volume_info(**overrides: Any) -> VolumeInfo:
    fields = {
        "namespace": "ns-1",
        "persistent_volume_claim": "pvc-uid",
        "volume_status": "Bound",
        "volume_claim_name": "pvc-name",
        "persistent_volume": "pv-1",
        "storage_class": "powerflex",
        "driver": "csi-vxflexos.dellemc.com",
        "provisioned_size": "16Gi",
        "storage_system_volume_name": "k8s-0a1b2c",
        "storage_pool_name": "pool1",
        "storage_system": "4d4a2e5a36080e0f",
        "protocol": "scsi",
        "created_time": str(CREATED_AT),
    }
    fields.update(overrides)
    return VolumeInfo(**fields)


@pytest.fixture
def pv_factory():
    return make_pv


@pytest.fixture
def volume_info_factory():
    return make_volume_info


@pytest.fixture
def mixed_volumes() -> list[VolumeInfo]:
    """Records across three namespaces and two drivers."""
    return [
        make_volume_info(persistent_volume="pv-1", namespace="ns-1"),
        make_volume_info(persistent_volume="pv-2", namespace="ns-1", storage_pool_name="pool2"),
        make_volume_info(
            persistent_volume="pv-3",
            namespace="ns-2",
            driver="csi-isilon.dellemc.com",
            storage_pool_name="N/A",
            storage_system="pieisi93x:System",
            protocol="nfs",
        ),
    ]


@pytest.fixture
def span_exporter() -> InMemorySpanExporter:
    return InMemorySpanExporter()


@pytest.fixture
def recording_tracing(span_exporter) -> Tracing:
    """Tracing that records every span synchronously into span_exporter."""
    provider = TracerProvider()
    provider.add_span_processor(SimpleSpanProcessor(span_exporter))
    return Tracing(provider)
