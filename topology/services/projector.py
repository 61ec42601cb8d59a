"""
Response projections for the dashboard data source.

Both projections are pure transforms over an already-filtered record list.
"""

from typing import Iterable, List

from topology.models import TableColumn, TableResponse, VolumeInfo
from topology.services.volume_filter import supported_column_pair

# (column header, VolumeInfo attribute) in display order
TABLE_COLUMNS = (
    ("Namespace", "namespace"),
    ("Persistent Volume", "persistent_volume"),
    ("Status", "volume_status"),
    ("Persistent Volume Claim", "volume_claim_name"),
    ("CSI Driver", "driver"),
    ("Created", "created_time"),
    ("Provisioned Size", "provisioned_size"),
    ("Storage Class", "storage_class"),
    ("Storage System Volume Name", "storage_system_volume_name"),
    ("Storage Pool", "storage_pool_name"),
    ("Storage System", "storage_system"),
    ("Protocol", "protocol"),
)


def table_columns() -> List[TableColumn]:
    return [TableColumn(text=header) for header, _ in TABLE_COLUMNS]


def build_table(volumes: Iterable[VolumeInfo]) -> TableResponse:
    """One row per record, values in TABLE_COLUMNS order."""
    rows = [
        [str(getattr(volume, attribute)) for _, attribute in TABLE_COLUMNS]
        for volume in volumes
    ]
    return TableResponse(columns=table_columns(), rows=rows)


def distinct_values(volumes: Iterable[VolumeInfo], field: str) -> List[str]:
    """
    Distinct values of a display field across the records, sorted.

    An unsupported field name yields an empty list.
    """
    values = set()
    for volume in volumes:
        value = supported_column_pair(volume).get(field)
        if value is None:
            return []
        values.add(value)
    return sorted(values)
