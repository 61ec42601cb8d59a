"""
Driver family dispatch.

Each CSI driver family stores its identity data under its own attribute
keys. The overrides here run after the common field mapping and patch the
working field set in place. GENERIC covers drivers whose attributes already
follow the common layout (PowerFlex, PowerStore).
"""

from typing import Callable, Dict, Mapping, MutableMapping

from topology.models import DriverFamily, NOT_AVAILABLE, PROTOCOL_NFS

POWERMAX_HANDLE_PARTS = 7

# Families are checked in this order; the first substring hit wins.
_FAMILY_MATCH_ORDER = (DriverFamily.ISILON, DriverFamily.POWERMAX)


def driver_family(driver_name: str) -> DriverFamily:
    """
    Classify a CSI driver name, e.g. 'csi-isilon.dellemc.com' -> ISILON.

    Only the first matching family is returned, so a name containing both
    "isilon" and "powermax" gets the Isilon overrides alone.
    """
    for family in _FAMILY_MATCH_ORDER:
        if family.value in driver_name:
            return family
    return DriverFamily.GENERIC


def parse_powermax_volume_name(volume_handle: str) -> str:
    """
    Derive the array-side volume name from a PowerMax volume handle.

    'csi-ZYA-pmax-4723028a00-powermax-000120000606-0012D'
        -> '0012D:csi-ZYA-pmax-4723028a00-powermax'

    Handles that do not have exactly seven hyphen-separated parts are
    returned unchanged.
    """
    parts = volume_handle.split("-")
    if len(parts) == POWERMAX_HANDLE_PARTS:
        return f"{parts[6]}:{'-'.join(parts[0:5])}"
    return volume_handle


def _apply_isilon(fields: MutableMapping[str, str], attributes: Mapping[str, str], volume_handle: str) -> None:
    cluster_name = attributes.get("ClusterName", "")
    access_zone = attributes.get("AccessZone", "")
    fields["storage_system"] = f"{cluster_name}:{access_zone}"
    fields["protocol"] = PROTOCOL_NFS


def _apply_powermax(fields: MutableMapping[str, str], attributes: Mapping[str, str], volume_handle: str) -> None:
    fields["storage_system_volume_name"] = parse_powermax_volume_name(volume_handle)
    fields["storage_system"] = attributes.get("powermax/SYMID", "")
    fields["storage_pool_name"] = attributes.get("SRP", "")
    if not fields.get("protocol"):
        fields["protocol"] = NOT_AVAILABLE


def _apply_generic(fields: MutableMapping[str, str], attributes: Mapping[str, str], volume_handle: str) -> None:
    return None


DriverOverride = Callable[[MutableMapping[str, str], Mapping[str, str], str], None]

DRIVER_OVERRIDES: Dict[DriverFamily, DriverOverride] = {
    DriverFamily.ISILON: _apply_isilon,
    DriverFamily.POWERMAX: _apply_powermax,
    DriverFamily.GENERIC: _apply_generic,
}


def apply_driver_overrides(
    driver_name: str,
    fields: MutableMapping[str, str],
    attributes: Mapping[str, str],
    volume_handle: str,
) -> DriverFamily:
    """Apply the override rule for the driver's family and return the family used."""
    family = driver_family(driver_name)
    DRIVER_OVERRIDES[family](fields, attributes, volume_handle)
    return family
