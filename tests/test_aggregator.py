from datetime import datetime

import pytest

from branchwatch.models import BranchRecord, ChangeEntry
from branchwatch.changes.aggregator import (
    WINDOW_7D,
    aggregate_changes,
    branches_by_category,
    branches_by_change_type,
    branches_with_recent_changes,
    keep_recent_changes,
    parse_change_timestamp,
)
from branchwatch.changes.categorizer import category_name

NOW = datetime(2026, 1, 28, 18, 0)


@pytest.fixture
def branches():
    return [
        BranchRecord(
            id="b1",
            name="Первый",
            changes=[
                ChangeEntry.from_raw("Изменение графика работы", "28-01-2026 · 17:47"),
                ChangeEntry.from_raw("Изменение телефона", "25-01-2026 · 10:00"),
                ChangeEntry.from_raw("Добавлено фото", "10-01-2026 · 09:00"),
                ChangeEntry.from_raw("Добавлено фото", "01-11-2025 · 09:00"),
                ChangeEntry.from_raw("Изменение названия", "вчера"),
            ],
        ),
        BranchRecord(id="b2", name="Второй"),
        BranchRecord(
            id="b3",
            name="Третий",
            changes=[ChangeEntry.from_raw("Изменение телефона", "28-01-2026 · 12:00")],
        ),
    ]


def test_totals(branches):
    stats = aggregate_changes(branches, now=NOW)

    assert stats.total_branches == 3
    assert stats.branches_with_changes == 2
    assert stats.branches_without_changes == 1
    assert stats.total_changes == 6
    assert stats.unique_change_types == 4
    assert stats.average_changes_per_branch == 3.0
    assert stats.changes_by_type["Добавлено фото"] == 2


def test_recency_windows(branches):
    stats = aggregate_changes(branches, now=NOW)

    assert stats.unparseable_timestamps == 1
    assert (stats.changes_last_24h, stats.changes_last_7d, stats.changes_last_30d) == (2, 3, 4)
    assert stats.changes_last_24h <= stats.changes_last_7d <= stats.changes_last_30d <= stats.total_changes
    assert stats.branches_with_recent_changes_24h == 2
    assert stats.branches_with_recent_changes_7d == 2
    assert stats.branches_with_recent_changes_30d == 2
    assert stats.recent_changes_by_type_24h == {"Изменение графика работы": 1, "Изменение телефона": 1}


def test_window_boundary_is_inclusive():
    branch = BranchRecord(id="b1", changes=[ChangeEntry.from_raw("Изменение цен", "27-01-2026 · 18:00")])

    assert aggregate_changes([branch], now=NOW).changes_last_24h == 1


def test_category_statistics(branches):
    stats = aggregate_changes(branches, now=NOW)
    contacts = stats.changes_by_category["contacts"]

    assert contacts.name == category_name("contacts")
    assert contacts.total_changes == 2
    assert contacts.branches_affected == 2
    assert contacts.recent_changes_24h == 1
    assert contacts.recent_changes_7d == 2
    assert contacts.change_types == {"Изменение телефона": 2}

    assert stats.changes_by_category["media"].total_changes == 2
    assert stats.changes_by_category["media"].recent_changes_7d == 0
    assert stats.branches_affected_by_category["media"] == 1
    assert stats.changes_by_category["naming"].recent_changes_24h == 0
    assert stats.changes_by_category["other"].total_changes == 0


def test_no_changes_at_all():
    stats = aggregate_changes([BranchRecord(id="b1"), BranchRecord(id="b2")], now=NOW)

    assert stats.total_changes == 0
    assert stats.average_changes_per_branch == 0.0
    assert stats.branches_without_changes == 2


def test_branches_must_be_a_list():
    with pytest.raises(TypeError):
        aggregate_changes(b for b in [BranchRecord(id="b1")])


def test_parse_change_timestamp():
    assert parse_change_timestamp("11-11-2025 · 07:52") == datetime(2025, 11, 11, 7, 52)
    assert parse_change_timestamp("31-02-2025 · 10:00") is None
    assert parse_change_timestamp("вчера") is None
    assert parse_change_timestamp("111-11-2025 · 07:52") is None
    assert parse_change_timestamp("  11-11-2025 · 07:52 ") == datetime(2025, 11, 11, 7, 52)
    assert parse_change_timestamp(None) is None


def test_keep_recent_changes(branches):
    recent = keep_recent_changes(branches[0].changes, WINDOW_7D, now=NOW)

    assert [c.title for c in recent] == ["Изменение графика работы", "Изменение телефона"]


def test_branches_with_recent_changes(branches):
    recent = branches_with_recent_changes(branches, hours=24, now=NOW)

    assert [b.id for b, _ in recent] == ["b1", "b3"]
    assert [c.title for c in recent[0][1]] == ["Изменение графика работы"]


def test_branch_filters(branches):
    assert [b.id for b in branches_by_category(branches, "contacts")] == ["b1", "b3"]
    assert [b.id for b in branches_by_change_type(branches, "ФОТО")] == ["b1"]
    assert branches_by_category(branches, "prices") == []
