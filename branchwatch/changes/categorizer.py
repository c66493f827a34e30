from dataclasses import dataclass
from typing import Dict, Tuple

from branchwatch.models import CATEGORY_KEYS

CATEGORY_NAMES: Dict[str, str] = {
    "coordinates": "📍 Координаты/Местоположение",
    "entrances": "🚪 Входы",
    "schedule": "📅 График работы",
    "contacts": "📞 Контакты",
    "naming": "🏷️ Название",
    "activities": "📋 Виды деятельности",
    "services": "🛠️ Услуги/Особенности",
    "media": "📸 Медиа (фото/видео)",
    "status": "✅ Статус",
    "links": "🔗 Ссылки/Соцсети",
    "address": "🏠 Адрес",
    "description": "📝 Описание",
    "prices": "💰 Цены",
    "other": "❓ Прочее",
}


@dataclass(frozen=True)
class CategoryRule:
    """Matches a lower-cased title containing any keyword and none of `unless`."""
    category: str
    keywords: Tuple[str, ...]
    unless: Tuple[str, ...] = ()

    def matches(self, title: str) -> bool:
        if any(word in title for word in self.unless):
            return False
        return any(word in title for word in self.keywords)


# First match wins. "работы" also appears in activity titles, so it only
# counts as a schedule keyword without "деятельност".
CATEGORY_RULES: Tuple[CategoryRule, ...] = (
    CategoryRule("coordinates", ("координат",)),
    CategoryRule("entrances", ("вход",)),
    CategoryRule("schedule", ("график",)),
    CategoryRule("schedule", ("работы",), unless=("деятельност",)),
    CategoryRule("contacts", ("телефон", "email", "почт")),
    CategoryRule("naming", ("назван",)),
    CategoryRule("activities", ("деятельност", "категор", "рубрик")),
    CategoryRule("services", ("услуг", "особенност", "feature")),
    CategoryRule("media", ("фото", "видео", "лого", "обложк", "медиа")),
    CategoryRule("status", ("статус", "публикац", "верифик")),
    CategoryRule("links", ("сайт", "ссылк", "соцсет", "instagram", "vk", "telegram")),
    CategoryRule("address", ("адрес",)),
    CategoryRule("description", ("описан", "текст")),
    CategoryRule("prices", ("цен", "прайс", "стоимост")),
)


def categorize_change(title: str) -> str:
    """
    Map a change-log title to its category key.

    Args:
        title (str): Free-text change title, e.g. "Изменение графика работы".

    Returns:
        str: One of CATEGORY_KEYS; "other" when no rule matches.
    """
    lower = (title or "").lower()
    for rule in CATEGORY_RULES:
        if rule.matches(lower):
            return rule.category
    return "other"


def category_name(category: str) -> str:
    if category not in CATEGORY_KEYS:
        category = "other"
    return CATEGORY_NAMES[category]
