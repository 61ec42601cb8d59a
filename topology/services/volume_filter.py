"""
Record filter for dashboard query narrowing.

A request carries zero or more predicate maps ({display field: substring}).
A record passes only when every key of every map names a supported field
and that field's value contains the substring (case-sensitive).
"""

from typing import Dict, Iterable, List, Mapping, Sequence

from topology.models import DisplayField, VolumeInfo


def supported_column_pair(volume: VolumeInfo) -> Dict[str, str]:
    """Display field name -> record value, for filterable/searchable fields."""
    return {
        DisplayField.NAMESPACE.value: volume.namespace,
        DisplayField.PROTOCOL.value: volume.protocol,
        DisplayField.STATUS.value: volume.volume_status,
        DisplayField.CSI_DRIVER.value: volume.driver,
        DisplayField.STORAGE_POOL.value: volume.storage_pool_name,
        DisplayField.STORAGE_SYSTEM.value: volume.storage_system,
        DisplayField.STORAGE_CLASS.value: volume.storage_class,
    }


def matches(volume: VolumeInfo, predicates: Sequence[Mapping[str, str]]) -> bool:
    """True when the record satisfies every predicate; unknown fields fail closed."""
    columns = supported_column_pair(volume)
    for predicate in predicates:
        for field, substring in predicate.items():
            value = columns.get(field)
            if value is None or substring not in value:
                return False
    return True


def filter_volumes(volumes: Iterable[VolumeInfo], predicates: Sequence[Mapping[str, str]]) -> List[VolumeInfo]:
    return [volume for volume in volumes if matches(volume, predicates)]
