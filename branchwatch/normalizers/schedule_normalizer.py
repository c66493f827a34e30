import re

from branchwatch.models import WEEKDAYS, NormalizedSchedule, ScheduleInterval

ALWAYS_OPEN_MARKER = "круглосуточно"

_DASHES = re.compile(r"[‐‑‒–—―−]")
_TIGHT_RANGE = re.compile(r"(\d{1,2}:\d{2})\s*-\s*(\d{1,2}:\d{2})")
_DAILY_INTERVAL = re.compile(r"(?:ежедневно|ежедн)\D*(\d{1,2}:\d{2})-(\d{1,2}:\d{2})")


def normalize_hours_text(text: str) -> str:
    """
    Lower-case, collapse whitespace and unify dash variants to "-".

    Spaces around the dash of a time range are dropped too, so "09:00 – 21:00"
    and "09:00-21:00" read the same.
    """
    t = (text or "").lower()
    t = re.sub(r"\s+", " ", t).strip()
    t = _DASHES.sub("-", t)
    return _TIGHT_RANGE.sub(r"\1-\2", t)


def pad_time(hhmm: str) -> str:
    hours, minutes = hhmm.split(":")
    return f"{hours.zfill(2)}:{minutes}"


def daily_schedule(start: str, end: str) -> NormalizedSchedule:
    """Build a schedule with the same single interval on every weekday."""
    interval = ScheduleInterval(start=pad_time(start), end=pad_time(end))
    return NormalizedSchedule(is_24x7=False, by_day={day: [interval] for day in WEEKDAYS})


def normalize_xml_working_time(text: str) -> NormalizedSchedule:
    """
    Parse canonical-feed opening hours into a weekly schedule.

    Handles "ежедневно. 09:00 - 22:00", "ежедн. 09:00-22:00" and
    "круглосуточно". The feed only ever states one interval for every day.

    Args:
        text (str): Free-text working time from the canonical feed.

    Returns:
        NormalizedSchedule: 24x7, a daily interval, or the empty "unknown"
                            schedule when nothing is recognizable.
    """
    t = normalize_hours_text(text)
    if not t:
        return NormalizedSchedule()
    if ALWAYS_OPEN_MARKER in t:
        return NormalizedSchedule(is_24x7=True)

    m = _DAILY_INTERVAL.search(t)
    if m:
        return daily_schedule(m.group(1), m.group(2))

    return NormalizedSchedule()
