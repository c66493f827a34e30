import re
from datetime import datetime, timedelta
from typing import Dict, List, Optional, Sequence, Set, Tuple
from loguru import logger

from branchwatch.changes.categorizer import category_name
from branchwatch.models import CATEGORY_KEYS, BranchRecord, CategoryStats, ChangeEntry, ChangeStats

WINDOW_24H = timedelta(hours=24)
WINDOW_7D = timedelta(days=7)
WINDOW_30D = timedelta(days=30)

_TIMESTAMP = re.compile(r"(\d{2})-(\d{2})-(\d{4})\s*·\s*(\d{2}):(\d{2})")


def parse_change_timestamp(timestamp: Optional[str]) -> Optional[datetime]:
    """
    Parse a change-log timestamp like "11-11-2025 · 07:52".

    Returns None instead of raising for anything unparseable, including
    impossible dates such as "31-02-2025 · 10:00".
    """
    if not timestamp:
        return None
    m = _TIMESTAMP.fullmatch(timestamp.strip())
    if not m:
        return None
    day, month, year, hour, minute = (int(part) for part in m.groups())
    try:
        return datetime(year, month, day, hour, minute)
    except ValueError:
        return None


def _bump(counter: Dict[str, int], key: str) -> None:
    counter[key] = counter.get(key, 0) + 1


def _branch_key(branch: BranchRecord) -> str:
    return branch.id or branch.name or "unknown"


def aggregate_changes(branches: Sequence[BranchRecord], now: Optional[datetime] = None) -> ChangeStats:
    """
    Fold per-branch change histories into global, per-type and per-category counts.

    Every entry counts toward the totals. Entries whose timestamp cannot be
    parsed never count toward the 24h/7d/30d windows. The cutoffs are taken
    once from `now` so the whole run sees the same windows.

    Args:
        branches (Sequence[BranchRecord]): Branches with their `changes`.
        now (Optional[datetime]): Reference time; defaults to the current time.

    Returns:
        ChangeStats: Aggregated counters.
    """
    if not isinstance(branches, (list, tuple)):
        raise TypeError(f"branches must be a list or tuple, got {type(branches).__name__}")

    now = now or datetime.now()
    cutoff_24h = now - WINDOW_24H
    cutoff_7d = now - WINDOW_7D
    cutoff_30d = now - WINDOW_30D

    category_stats = {key: CategoryStats(name=category_name(key)) for key in CATEGORY_KEYS}
    affected_by_category: Dict[str, Set[str]] = {key: set() for key in CATEGORY_KEYS}

    stats = ChangeStats(total_branches=len(branches), changes_by_category=category_stats)

    for branch in branches:
        changes = branch.changes or []
        branch_key = _branch_key(branch)

        if changes:
            stats.branches_with_changes += 1
        else:
            stats.branches_without_changes += 1
        stats.total_changes += len(changes)

        recent_24h = recent_7d = recent_30d = False

        for change in changes:
            category = change.category if change.category in category_stats else "other"
            cat = category_stats[category]

            _bump(stats.changes_by_type, change.title)
            cat.total_changes += 1
            _bump(cat.change_types, change.title)
            affected_by_category[category].add(branch_key)

            changed_at = parse_change_timestamp(change.timestamp)
            if changed_at is None:
                stats.unparseable_timestamps += 1
                continue

            if changed_at >= cutoff_24h:
                stats.changes_last_24h += 1
                cat.recent_changes_24h += 1
                _bump(stats.recent_changes_by_type_24h, change.title)
                recent_24h = True
            if changed_at >= cutoff_7d:
                stats.changes_last_7d += 1
                cat.recent_changes_7d += 1
                _bump(stats.recent_changes_by_type_7d, change.title)
                recent_7d = True
            if changed_at >= cutoff_30d:
                stats.changes_last_30d += 1
                recent_30d = True

        stats.branches_with_recent_changes_24h += recent_24h
        stats.branches_with_recent_changes_7d += recent_7d
        stats.branches_with_recent_changes_30d += recent_30d

    for key in CATEGORY_KEYS:
        category_stats[key].branches_affected = len(affected_by_category[key])
        stats.branches_affected_by_category[key] = len(affected_by_category[key])

    stats.unique_change_types = len(stats.changes_by_type)
    if stats.branches_with_changes:
        stats.average_changes_per_branch = round(stats.total_changes / stats.branches_with_changes, 2)

    if stats.unparseable_timestamps:
        logger.debug(f"{stats.unparseable_timestamps} change entries have unparseable timestamps")

    return stats


def keep_recent_changes(
    changes: Sequence[ChangeEntry],
    window: timedelta = WINDOW_24H,
    now: Optional[datetime] = None,
) -> List[ChangeEntry]:
    """Prune a change history to the rolling window; unparseable entries are dropped."""
    cutoff = (now or datetime.now()) - window
    recent = []
    for change in changes:
        changed_at = parse_change_timestamp(change.timestamp)
        if changed_at is not None and changed_at >= cutoff:
            recent.append(change)
    return recent


def branches_with_recent_changes(
    branches: Sequence[BranchRecord],
    hours: int = 24,
    now: Optional[datetime] = None,
) -> List[Tuple[BranchRecord, List[ChangeEntry]]]:
    """
    Branches with at least one change in the last `hours`, paired with those changes.

    Args:
        branches (Sequence[BranchRecord]): Branches with change histories.
        hours (int): Look-back window in hours.
        now (Optional[datetime]): Reference time; defaults to the current time.

    Returns:
        List[Tuple[BranchRecord, List[ChangeEntry]]]: Input order is preserved.
    """
    now = now or datetime.now()
    result = []
    for branch in branches:
        recent = keep_recent_changes(branch.changes or [], timedelta(hours=hours), now)
        if recent:
            result.append((branch, recent))
    return result


def branches_by_change_type(branches: Sequence[BranchRecord], change_type: str) -> List[BranchRecord]:
    needle = change_type.lower()
    return [b for b in branches if any(needle in c.title.lower() for c in b.changes or [])]


def branches_by_category(branches: Sequence[BranchRecord], category: str) -> List[BranchRecord]:
    return [b for b in branches if any(c.category == category for c in b.changes or [])]
