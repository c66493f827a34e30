import os
import csv
import json
import sys
from dataclasses import asdict
from typing import Dict, List

import pandas as pd
from loguru import logger

from branchwatch.models import BranchRecord, BranchSnapshot, ChangeEntry, CompanyRecord, Discrepancy
from branchwatch.matchers.reconcile_orchestrator import reconcile, status_discrepancies
from branchwatch.changes.aggregator import aggregate_changes, branches_with_recent_changes
from branchwatch.changes.snapshot_differ import create_snapshot, diff_snapshots
from branchwatch.changes.categorizer import category_name
from branchwatch.changes.formatting import format_change_time
from branchwatch.config import (
    BRANCHES_JSON,
    COMPANIES_CSV,
    DISCREPANCIES_CSV,
    LOG_LEVEL,
    MAPPING_JSON,
    RECENT_WINDOW_HOURS,
    SNAPSHOT_JSON,
)


def load_companies_from_csv(file_path: str, nrows: int = None) -> List[CompanyRecord]:
    """Load canonical feed records from CSV and convert them to CompanyRecord objects."""
    df = pd.read_csv(file_path, nrows=nrows, dtype={"companyId": str})
    records = []
    for _, row in df.iterrows():
        # NaN cells become empty strings / None
        def safe_text(col):
            if col not in row.index or pd.isna(row[col]):
                return ""
            return str(row[col])

        def safe_float(col):
            if col not in row.index or pd.isna(row[col]):
                return None
            try:
                return float(row[col])
            except (ValueError, TypeError):
                return None

        records.append(
            CompanyRecord(
                company_id=safe_text("companyId"),
                name=safe_text("name"),
                address=safe_text("address"),
                lat=safe_float("lat"),
                lon=safe_float("lon"),
                working_time=safe_text("workingTime"),
            )
        )
    return records


def _change_from_dict(raw: dict) -> ChangeEntry:
    return ChangeEntry.from_raw(
        title=raw.get("title", ""),
        timestamp=raw.get("timestamp") or raw.get("date", ""),
        old_value=raw.get("oldValue"),
        new_value=raw.get("newValue"),
        author=raw.get("author"),
    )


def load_branches_from_json(file_path: str) -> List[BranchRecord]:
    """Load scraped branches (with their change histories) from JSON."""
    with open(file_path, encoding="utf-8") as f:
        data = json.load(f)
    branches = []
    for raw in data:
        branches.append(
            BranchRecord(
                id=raw.get("id"),
                name=raw.get("name"),
                address=raw.get("address"),
                hours_text=raw.get("hoursText") or raw.get("hours"),
                status=raw.get("status"),
                url=raw.get("url"),
                changes=[_change_from_dict(c) for c in raw.get("changesHistory") or []],
            )
        )
    return branches


def load_snapshot(file_path: str) -> List[BranchSnapshot]:
    try:
        with open(file_path, encoding="utf-8") as f:
            data = json.load(f)
    except (OSError, ValueError) as e:
        logger.warning(f"No previous snapshot at {file_path}: {e}")
        return []
    return [BranchSnapshot(id=s["id"], name=s.get("name"), address=s.get("address")) for s in data if s.get("id")]


def load_mapping(file_path: str) -> Dict[str, str]:
    try:
        with open(file_path, encoding="utf-8") as f:
            return json.load(f)
    except (OSError, ValueError) as e:
        logger.warning(f"No id mapping at {file_path}: {e}")
        return {}


def save_json(file_path: str, data) -> None:
    directory = os.path.dirname(file_path)
    if directory:
        os.makedirs(directory, exist_ok=True)
    with open(file_path, "w", encoding="utf-8") as f:
        json.dump(data, f, ensure_ascii=False, indent=2)


def write_discrepancies_csv(file_path: str, discrepancies: List[Discrepancy]) -> None:
    with open(file_path, "w", newline="", encoding="utf-8") as f:
        writer = csv.writer(f)
        writer.writerow(["companyId", "name", "address", "expected", "actual", "url"])
        for d in discrepancies:
            writer.writerow([d.company_id, d.name, d.address, d.expected, d.actual or "", d.url or ""])


def main():
    """
    Run one reconciliation pass over the persisted feeds.

    - Matches canonical records against scraped branches and checks opening hours;
      with an empty canonical feed only unpublished branches are reported.
    - Diffs the published branch set against the previous run's snapshot.
    - Aggregates change-log statistics and lists recently changed branches.
    - Writes discrepancies, the new snapshot and the id mapping.
    """
    logger.remove()  # Remove default handler
    logger.add(sys.stderr, level=LOG_LEVEL, format="<green>{time:HH:mm:ss}</green> | <level>{message}</level>")

    companies = load_companies_from_csv(COMPANIES_CSV)
    branches = load_branches_from_json(BRANCHES_JSON)
    logger.info(f"📦 Loaded {len(companies)} canonical records and {len(branches)} branches")

    # 1) Address matching + schedule comparison; status check only without a canonical feed
    if companies:
        result = reconcile(companies, branches, load_mapping(MAPPING_JSON))
        discrepancies = result.discrepancies
        save_json(MAPPING_JSON, result.mapping)
        matched = sum(m.is_match for m in result.matches)
        logger.info(
            f"🔍 Matched {matched}/{len(companies)}, discrepancies: {len(discrepancies)}, "
            f"unverified: {len(result.unverified)}"
        )
    else:
        discrepancies = status_discrepancies(branches)
        logger.info(f"📭 No canonical records, status check only: {len(discrepancies)} unpublished branches")
    write_discrepancies_csv(DISCREPANCIES_CSV, discrepancies)

    # 2) Added / removed branches since the previous run
    diff = diff_snapshots(load_snapshot(SNAPSHOT_JSON), branches)
    for b in diff.added:
        logger.info(f"🆕 + {b.name or b.id}")
    for b in diff.removed:
        logger.info(f"🗑 - {b.name or b.id}")
    save_json(SNAPSHOT_JSON, [asdict(s) for s in create_snapshot(branches)])

    # 3) Change-log statistics
    stats = aggregate_changes(branches)
    logger.info(
        f"📊 Changes: {stats.total_changes} total, {stats.changes_last_24h} in 24h, "
        f"{stats.changes_last_7d} in 7d, {stats.changes_last_30d} in 30d "
        f"(avg {stats.average_changes_per_branch} per branch with changes)"
    )
    for branch, changes in branches_with_recent_changes(branches, RECENT_WINDOW_HOURS):
        logger.info(f"🔥 {branch.name or branch.id}: {len(changes)} changes")
        for change in changes:
            logger.info(f"    {category_name(change.category)} {change.title} ({format_change_time(change.timestamp)})")


if __name__ == "__main__":
    main()
