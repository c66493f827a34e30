import pytest

from branchwatch.models import WEEKDAYS, NormalizedSchedule, ScheduleInterval
from branchwatch.normalizers.schedule_normalizer import (
    daily_schedule,
    normalize_hours_text,
    normalize_xml_working_time,
    pad_time,
)
from branchwatch.matchers.schedule_comparator import (
    REASON_ALWAYS_OPEN,
    REASON_UNRECOGNIZED,
    compare_schedules,
    summarize_schedule,
)


# --- normalizer ---

@pytest.mark.parametrize(
    "raw",
    ["ежедн. 09:00-21:00", "Ежедневно. 9:00 – 21:00", "ЕЖЕДНЕВНО 09:00 - 21:00", "ежедн.09:00-21:00"],
)
def test_daily_interval_spellings(raw):
    schedule = normalize_xml_working_time(raw)

    assert not schedule.is_24x7
    assert set(schedule.by_day) == set(WEEKDAYS)
    assert all(v == [ScheduleInterval("09:00", "21:00")] for v in schedule.by_day.values())


def test_always_open():
    schedule = normalize_xml_working_time("Круглосуточно")

    assert schedule.is_24x7
    assert schedule.by_day == {}
    assert schedule.is_recognized


@pytest.mark.parametrize("raw", ["", None, "по записи", "пн-пт 09:00-18:00"])
def test_unrecognized_working_time_is_unknown(raw):
    schedule = normalize_xml_working_time(raw)

    assert schedule == NormalizedSchedule()
    assert not schedule.is_recognized


def test_hours_text_normalization():
    assert normalize_hours_text("  09:00 – 21:00   Пн-Вс ") == "09:00-21:00 пн-вс"
    assert normalize_hours_text("10:00—22:00") == "10:00-22:00"
    assert normalize_hours_text(None) == ""


def test_pad_time():
    assert pad_time("9:05") == "09:05"
    assert pad_time("21:00") == "21:00"


# --- comparator ---

def test_exact_mode_accepts_interval_inside_longer_text():
    verdict = compare_schedules(daily_schedule("09:00", "21:00"), "09:00–21:00 пн-вс")

    assert verdict.ok
    assert verdict.reasons == []
    assert verdict.expected_text == "ежедневно 09:00-21:00"


def test_exact_mode_accepts_spaces_around_the_range_dash():
    """ "09:00 - 21:00" is the same range as "09:00-21:00"; other spacing still matters."""
    expected = daily_schedule("09:00", "21:00")

    assert compare_schedules(expected, "09:00 - 21:00").ok
    assert compare_schedules(expected, "Пн-Вс 09:00 — 21:00").ok
    assert not compare_schedules(expected, "09 : 00-21:00").ok


def test_exact_mode_reports_different_interval():
    verdict = compare_schedules(daily_schedule("09:00", "21:00"), "10:00-20:00")

    assert not verdict.ok
    assert verdict.reasons == ["Ожидалось: 09:00-21:00 ежедневно"]
    assert verdict.actual_text == "10:00-20:00"


def test_exact_mode_missing_hours_text():
    verdict = compare_schedules(daily_schedule("09:00", "21:00"), None)

    assert not verdict.ok


def test_exact_mode_ignores_tolerance():
    verdict = compare_schedules(daily_schedule("09:00", "22:00"), "09:00-21:55", mode="exact", tolerance_minutes=10)

    assert not verdict.ok


def test_tolerant_mode_accepts_small_deviation():
    expected = daily_schedule("09:00", "22:00")

    assert compare_schedules(expected, "пн-вс 9:00-21:55", mode="tolerant", tolerance_minutes=10).ok
    assert compare_schedules(expected, "09:05-22:05", mode="tolerant", tolerance_minutes=5).ok
    assert not compare_schedules(expected, "09:00-21:55", mode="tolerant", tolerance_minutes=0).ok
    assert not compare_schedules(expected, "08:00-22:00", mode="tolerant", tolerance_minutes=30).ok


@pytest.mark.parametrize("hours_text", ["Круглосуточно", "работаем 24/7", "24 / 7"])
def test_always_open_accepted(hours_text):
    assert compare_schedules(NormalizedSchedule(is_24x7=True), hours_text).ok


def test_always_open_expected_but_interval_given():
    verdict = compare_schedules(NormalizedSchedule(is_24x7=True), "09:00-21:00")

    assert not verdict.ok
    assert verdict.reasons == [REASON_ALWAYS_OPEN]
    assert verdict.expected_text == "круглосуточно"


def test_unknown_schedule_is_reported_as_unrecognized():
    verdict = compare_schedules(NormalizedSchedule(), "09:00-21:00")

    assert not verdict.ok
    assert verdict.reasons == [REASON_UNRECOGNIZED]
    assert summarize_schedule(NormalizedSchedule()) == "(не распознано)"


def test_invalid_arguments():
    with pytest.raises(ValueError):
        compare_schedules(daily_schedule("09:00", "21:00"), "09:00-21:00", mode="fuzzy")
    with pytest.raises(ValueError):
        compare_schedules(daily_schedule("09:00", "21:00"), "09:00-21:00", mode="tolerant", tolerance_minutes=-1)
