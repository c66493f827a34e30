"""
Text helpers for presenting change-log entries in reports.
"""
import re
from typing import List, Optional

from branchwatch.changes.categorizer import categorize_change

_TIME_RANGE = re.compile(
    r"(?<![\d:])(\d{1,2})(?:[:.,](\d{2}))?\s*[-–—]\s*(\d{1,2})(?:[:.,](\d{2}))?(?![\d:]|-\d)"
)


def format_change_time(timestamp: Optional[str]) -> str:
    """'28-01-2026 · 17:47' -> '28-01-2026 - 17:47'"""
    if not timestamp:
        return ""
    return re.sub(r"\s*·\s*", " - ", timestamp)


def _time_range(m: re.Match) -> str:
    start_h, start_m, end_h, end_m = m.groups()
    if int(start_h) > 24 or int(end_h) > 24:
        return m.group(0)
    return f"{start_h}:{start_m or '00'}–{end_h}:{end_m or '00'}"


def normalize_diff_time_value(value: str) -> str:
    """
    Rewrite loose time ranges inside a change value.

    "8-21,55" becomes "8:00–21:55"; surrounding text such as "пн-вс" is kept.
    """
    return _TIME_RANGE.sub(_time_range, value)


def is_work_schedule_title(title: str) -> bool:
    return categorize_change(title) == "schedule"


def format_work_schedule_diff_lines(old_value: Optional[str] = None, new_value: Optional[str] = None) -> List[str]:
    lines = []
    if old_value:
        lines.append(f"Было: {normalize_diff_time_value(old_value)}")
    if new_value:
        lines.append(f"Стало: {normalize_diff_time_value(new_value)}")
    return lines
