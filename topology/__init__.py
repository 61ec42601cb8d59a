"""
Topology Service: Volume Discovery for Dashboards

Discovers persistent volumes provisioned by tracked CSI drivers and
re-exposes them as a tabular dataset for a JSON dashboard data source.
Responsibilities:
- Cluster volume listing (lazy, single connection)
- Per-driver attribute normalization
- Dashboard query filtering
- Table and distinct-value projections
"""
