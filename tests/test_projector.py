"""Tests for table and distinct-value projections."""

from topology.services.projector import TABLE_COLUMNS, build_table, distinct_values


def test_table_has_twelve_columns_with_no_rows():
    table = build_table([])
    assert len(table.columns) == 12
    assert table.rows == []
    dumped = table.model_dump()
    assert dumped["type"] == "table"
    assert dumped["rows"] == []
    assert dumped["columns"][0] == {"text": "Namespace", "type": "string"}


def test_table_row_order_follows_columns(volume_info_factory):
    volume = volume_info_factory()
    table = build_table([volume])

    assert [c.text for c in table.columns] == [header for header, _ in TABLE_COLUMNS]
    assert table.rows == [[
        "ns-1",
        "pv-1",
        "Bound",
        "pvc-name",
        "csi-vxflexos.dellemc.com",
        volume.created_time,
        "16Gi",
        "powerflex",
        "k8s-0a1b2c",
        "pool1",
        "4d4a2e5a36080e0f",
        "scsi",
    ]]


def test_table_one_row_per_record(mixed_volumes):
    table = build_table(mixed_volumes)
    assert len(table.columns) == 12
    assert len(table.rows) == 3
    assert all(len(row) == 12 for row in table.rows)


def test_distinct_values_collapses_duplicates(mixed_volumes):
    assert set(distinct_values(mixed_volumes, "Namespace")) == {"ns-1", "ns-2"}
    assert len(distinct_values(mixed_volumes, "Namespace")) == 2


def test_distinct_values_unknown_field_is_empty(mixed_volumes):
    assert distinct_values(mixed_volumes, "Persistent Volume") == []
    assert distinct_values(mixed_volumes, "") == []


def test_distinct_values_no_records():
    assert distinct_values([], "Namespace") == []
