from typing import List, Sequence
from loguru import logger

from branchwatch.models import BranchRecord, BranchSnapshot, SnapshotDiff

# Statuses that count as "published" (case-insensitive substring match)
PUBLISHED_STATUSES = ("Опубликовано", "published", "active")


def is_published(branch: BranchRecord) -> bool:
    """A branch without a status is treated as published."""
    if not branch.status:
        return True
    status = branch.status.lower()
    return any(s.lower() in status for s in PUBLISHED_STATUSES)


def _eligible(current: Sequence[BranchRecord]) -> List[BranchRecord]:
    return [b for b in current if b.id and is_published(b)]


def diff_snapshots(previous: Sequence[BranchSnapshot], current: Sequence[BranchRecord]) -> SnapshotDiff:
    """
    Compute which published branches appeared or disappeared since the previous run.

    Args:
        previous (Sequence[BranchSnapshot]): Snapshot written by the previous run.
        current (Sequence[BranchRecord]): Branches scraped on this run.

    Returns:
        SnapshotDiff: `added` holds current records, `removed` holds snapshot entries.
    """
    previous_ids = {b.id for b in previous}
    eligible = _eligible(current)
    current_ids = {b.id for b in eligible}

    added = [b for b in eligible if b.id not in previous_ids]
    removed = [b for b in previous if b.id not in current_ids]

    if added or removed:
        logger.debug(f"Snapshot diff: +{len(added)} / -{len(removed)}")
    return SnapshotDiff(added=added, removed=removed)


def create_snapshot(current: Sequence[BranchRecord]) -> List[BranchSnapshot]:
    return [BranchSnapshot(id=b.id, name=b.name, address=b.address) for b in _eligible(current)]
