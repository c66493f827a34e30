import pytest

from branchwatch.models import CATEGORY_KEYS, ChangeEntry
from branchwatch.changes.categorizer import CATEGORY_NAMES, CATEGORY_RULES, categorize_change, category_name


@pytest.mark.parametrize(
    "title, category",
    [
        ("Изменение координат", "coordinates"),
        ("Добавлен вход", "entrances"),
        ("Изменение графика работы", "schedule"),
        ("Режим работы", "schedule"),
        ("Изменение телефона", "contacts"),
        ("Изменение email", "contacts"),
        ("Изменение названия", "naming"),
        ("Виды деятельности", "activities"),
        ("Изменение рубрики", "activities"),
        ("Изменение услуг", "services"),
        ("Добавлено фото", "media"),
        ("Изменение статуса публикации", "status"),
        ("Изменение сайта", "links"),
        ("Изменение адреса", "address"),
        ("Изменение описания", "description"),
        ("Обновлён прайс", "prices"),
        ("Изменение цен", "prices"),
    ],
)
def test_titles_map_to_categories(title, category):
    assert categorize_change(title) == category


def test_earlier_rule_wins():
    """A title with both schedule and activity words is a schedule change."""
    assert categorize_change("График работы и виды деятельности") == "schedule"
    assert categorize_change("Изменение координат входа") == "coordinates"


def test_matching_is_case_insensitive():
    assert categorize_change("ИЗМЕНЕНИЕ ГРАФИКА") == "schedule"


@pytest.mark.parametrize("title", ["Что-то непонятное", "", None])
def test_unmatched_titles_fall_into_other(title):
    assert categorize_change(title) == "other"


def test_every_rule_targets_a_known_category():
    assert {rule.category for rule in CATEGORY_RULES} <= set(CATEGORY_KEYS)
    assert set(CATEGORY_NAMES) == set(CATEGORY_KEYS)


def test_category_name_falls_back_to_other():
    assert category_name("schedule") == "📅 График работы"
    assert category_name("nonsense") == category_name("other")


def test_change_entry_is_categorized_on_creation():
    entry = ChangeEntry.from_raw("Изменение телефона", "28-01-2026 · 17:47", old_value="1", new_value="2")

    assert entry.category == "contacts"
    assert entry.old_value == "1"


def test_work_word_with_activity_word_is_not_a_schedule_change():
    assert categorize_change("Изменение видов деятельности и работы") == "activities"
    assert categorize_change("Изменение работы филиала") == "schedule"
