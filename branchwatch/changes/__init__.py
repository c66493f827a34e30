"""Change-log categorization, aggregation and snapshot diffing."""
from branchwatch.changes.categorizer import categorize_change
from branchwatch.changes.aggregator import aggregate_changes
from branchwatch.changes.snapshot_differ import create_snapshot, diff_snapshots

__all__ = ["categorize_change", "aggregate_changes", "create_snapshot", "diff_snapshots"]
