import re
from typing import List, Optional
from loguru import logger

from branchwatch.config import SCHEDULE_MATCH_MODE, SCHEDULE_TOLERANCE_MINUTES
from branchwatch.models import NormalizedSchedule, ScheduleDiscrepancy, ScheduleInterval
from branchwatch.normalizers.schedule_normalizer import ALWAYS_OPEN_MARKER, normalize_hours_text, pad_time

MATCH_MODES = ("exact", "tolerant")

REASON_ALWAYS_OPEN = "Ожидалось: круглосуточно"
REASON_UNRECOGNIZED = "Не распознан формат часов в XML"

_TWENTY_FOUR_SEVEN = re.compile(r"24\s*/\s*7")
_INTERVAL = re.compile(r"(\d{1,2}:\d{2})-(\d{1,2}:\d{2})")


def _first_interval(schedule: NormalizedSchedule) -> Optional[ScheduleInterval]:
    for intervals in schedule.by_day.values():
        if intervals:
            return intervals[0]
    return None


def summarize_schedule(schedule: NormalizedSchedule) -> str:
    """Human-readable expected value for reports."""
    if schedule.is_24x7:
        return ALWAYS_OPEN_MARKER
    interval = _first_interval(schedule)
    if interval is None:
        return "(не распознано)"
    return f"ежедневно {interval}"


def _minutes(hhmm: str) -> int:
    hours, minutes = hhmm.split(":")
    return int(hours) * 60 + int(minutes)


def _within_tolerance(expected: ScheduleInterval, text: str, tolerance: int) -> bool:
    for start, end in _INTERVAL.findall(text):
        if (
            abs(_minutes(pad_time(start)) - _minutes(expected.start)) <= tolerance
            and abs(_minutes(pad_time(end)) - _minutes(expected.end)) <= tolerance
        ):
            return True
    return False


def compare_schedules(
    xml: NormalizedSchedule,
    hours_text: Optional[str],
    mode: str = SCHEDULE_MATCH_MODE,
    tolerance_minutes: int = SCHEDULE_TOLERANCE_MINUTES,
) -> ScheduleDiscrepancy:
    """
    Compare a canonical schedule with the external listing's hours text.

    In "exact" mode the external text must contain the literal "HH:MM-HH:MM"
    of the canonical interval and `tolerance_minutes` is not applied. In
    "tolerant" mode any interval in the text whose endpoints are each within
    `tolerance_minutes` of the canonical ones passes.

    Args:
        xml (NormalizedSchedule): Schedule parsed from the canonical feed.
        hours_text (Optional[str]): External free-text opening hours.
        mode (str): "exact" or "tolerant".
        tolerance_minutes (int): Allowed deviation per endpoint in "tolerant" mode.

    Returns:
        ScheduleDiscrepancy: Verdict, reasons and the expected summary.
    """
    if mode not in MATCH_MODES:
        raise ValueError(f"Unknown schedule match mode: {mode!r}")
    if tolerance_minutes < 0:
        raise ValueError("tolerance_minutes must be non-negative")

    reasons: List[str] = []
    t = normalize_hours_text(hours_text)

    if xml.is_24x7:
        if ALWAYS_OPEN_MARKER not in t and not _TWENTY_FOUR_SEVEN.search(t):
            reasons.append(REASON_ALWAYS_OPEN)
    else:
        interval = _first_interval(xml)
        if interval is None:
            reasons.append(REASON_UNRECOGNIZED)
        else:
            expected = str(interval)
            if mode == "tolerant":
                ok = _within_tolerance(interval, t, tolerance_minutes)
            else:
                ok = expected in t
            if not ok:
                reasons.append(f"Ожидалось: {expected} ежедневно")

    if reasons:
        logger.debug(f"Schedule mismatch: {reasons} (actual: {hours_text!r})")

    return ScheduleDiscrepancy(
        ok=not reasons,
        reasons=reasons,
        expected_text=summarize_schedule(xml),
        actual_text=hours_text,
    )
