import re
from typing import List, Tuple

from branchwatch.models import NormalizedAddress

# Ordered (abbreviation, full form) pairs. Longer forms come first so that
# "пр-кт" is never half-consumed by "пр." and "ул." is tested before "ул".
ABBREVIATIONS: List[Tuple[str, str]] = [
    ("просп.", "проспект"),
    ("пр-кт", "проспект"),
    ("пр-т", "проспект"),
    ("пр-д", "проезд"),
    ("пр.", "проспект"),
    ("бул.", "бульвар"),
    ("б-р", "бульвар"),
    ("наб.", "набережная"),
    ("пер.", "переулок"),
    ("обл.", "область"),
    ("ул.", "улица"),
    ("ул", "улица"),
    ("ш.", "шоссе"),
    ("пл.", "площадь"),
    ("д.", "дом"),
]

CITY_NAMES = ("санкт-петербург", "санкт петербург", "москва", "спб")
REGION_NAMES = ("ленинградская область", "московская область")

# Administrative prefixes, only ever stripped from the start of the string
LEADING_ADMIN_PATTERNS = [
    r"\d{6}",  # postal index
    r"российская федерация",
    r"россия",
    r"[\w-]+ федеральный округ",
    r"(?:" + "|".join(REGION_NAMES) + r")",
    r"(?:г\.?\s*|город\s+)?(?:" + "|".join(CITY_NAMES) + r")(?!\w)(?:\s+г(?!\w)\.?)?",
]

# Standalone administrative/zoning words removed anywhere in the string
ADMIN_WORDS = (
    "внутригородская территория",
    "муниципальный округ",
    "городской округ",
    "городское поселение",
    "сельское поселение",
    "поселок городского типа",
    "городской поселок",
    "микрорайон",
    "территория",
    "район",
    "дом",
)

# Qualifier spellings mapped to one abbreviation each; longest first
QUALIFIER_WORDS: List[Tuple[str, str]] = [
    ("корпус", "корп"),
    ("корп.", "корп"),
    ("строение", "стр"),
    ("стр.", "стр"),
    ("литера", "лит"),
    ("литер", "лит"),
    ("лит.", "лит"),
    ("помещение", "пом"),
    ("пом.", "пом"),
    ("офис", "оф"),
    ("оф.", "оф"),
]

STREET_KEYWORDS = (
    "улица",
    "проспект",
    "бульвар",
    "шоссе",
    "переулок",
    "площадь",
    "набережная",
    "проезд",
    "дорога",
    "аллея",
    "линия",
)


def _token_pattern(token: str) -> re.Pattern:
    # Tokens must start at a word edge; tokens ending in a letter must also end at one
    tail = r"(?![а-яa-z])" if token[-1].isalpha() else ""
    return re.compile(r"(?<![\w-])" + re.escape(token) + tail)


_ABBREVIATION_RULES = [(_token_pattern(abbr), full + " ") for abbr, full in ABBREVIATIONS]
_LEADING_ADMIN_RULES = [re.compile(r"^" + p + r"(?:\s*,)?\s*") for p in LEADING_ADMIN_PATTERNS]
_ADMIN_WORD_RULES = [re.compile(r"(?<!\w)" + re.escape(w) + r"(?!\w)") for w in ADMIN_WORDS]
_QUALIFIER_RULES = [(_token_pattern(word), short) for word, short in QUALIFIER_WORDS]

_CORPUS_INLINE = re.compile(r"(\d+)\s*к\s*(\d+)")
_CORPUS_TRAILING = re.compile(r",\s*(\d+),\s*(\d+)(?:\s*,\s*\d+)*\s*$")
_QUALIFIER_CLAUSE = re.compile(r",?\s*(?<!\w)(?:корп|стр|лит|пом|оф)(?![а-яa-z])\.?\s*[\w/-]*")
_STREET_PATTERN = re.compile(r"(?:" + "|".join(STREET_KEYWORDS) + r")\s+[^,]+")
_HOUSE_PATTERN = re.compile(r"(?<!\w)(\d+[а-яa-z]?)(?!\w)")


def fold_case(text: str) -> str:
    return text.lower().replace("ё", "е").strip()


def expand_abbreviations(text: str) -> str:
    """Replace street-type abbreviations with their full words, in table order."""
    for pattern, full in _ABBREVIATION_RULES:
        text = pattern.sub(full, text)
    return text


def strip_leading_admin(text: str) -> str:
    """
    Strip administrative prefixes (postal index, country, district, region, city)
    anchored at the start of the string. Repeats until no prefix is left, since
    feeds stack them in arbitrary order.
    """
    changed = True
    while changed:
        changed = False
        for pattern in _LEADING_ADMIN_RULES:
            stripped = pattern.sub("", text, count=1)
            if stripped != text:
                text = stripped
                changed = True
    return text


def remove_admin_words(text: str) -> str:
    for pattern in _ADMIN_WORD_RULES:
        text = pattern.sub("", text)
    return text


def unify_building_qualifiers(text: str) -> str:
    """
    Bring corpus notations to one shape.

    "35к1" and "35 к 1" become "35 корп 1"; a trailing ", 23, 2" is read as
    ", 23, корп 2". A longer trailing run such as ", 1, 2, 3" keeps only the
    first number, so the whole run is gone after one pass.
    """
    text = _CORPUS_INLINE.sub(r"\1 корп \2", text)
    return _CORPUS_TRAILING.sub(r", \1, корп \2", text)


def drop_qualifier_clause(text: str) -> str:
    """Canonicalize corpus/building/litera/office words, then remove those clauses entirely."""
    for pattern, short in _QUALIFIER_RULES:
        text = pattern.sub(short, text)
    return _QUALIFIER_CLAUSE.sub("", text)


def collapse_separators(text: str) -> str:
    text = re.sub(r"\s*(?:,\s*)+", ", ", text)
    text = re.sub(r"\s+", " ", text)
    return text.strip(" ,")


def _normalize_once(text: str) -> str:
    text = fold_case(text)
    text = expand_abbreviations(text)
    text = strip_leading_admin(text)
    text = remove_admin_words(text)
    text = unify_building_qualifiers(text)
    text = drop_qualifier_clause(text)
    return collapse_separators(text)


def normalize_text(raw: str) -> str:
    """
    Canonicalize a raw address string into its comparable form.

    The pipeline is re-run until it reaches a fixed point, which makes the
    result idempotent even when one pass exposes a new trailing number pair.
    Later passes only strip what the previous pass exposed, so it settles quickly.

    Args:
        raw (str): Address from either source; may be empty or None.

    Returns:
        str: Lower-cased, abbreviation-expanded address with administrative
             terms and building qualifiers removed.
    """
    if not raw:
        return ""
    text = str(raw)
    while True:
        normalized = _normalize_once(text)
        if normalized == text:
            return text
        text = normalized


def extract_street(normalized: str) -> str:
    """Return the first thoroughfare phrase, or the text before the first comma."""
    match = _STREET_PATTERN.search(normalized)
    if match:
        return match.group(0).strip()
    return normalized.split(",")[0].strip()


def extract_house(normalized: str) -> str:
    match = _HOUSE_PATTERN.search(normalized)
    return match.group(1).lower() if match else ""


def normalize_address(raw: str) -> NormalizedAddress:
    """
    Normalize a raw address and extract its street and house tokens.

    Args:
        raw (str): Address text from the canonical feed or the external listing.

    Returns:
        NormalizedAddress: Normalized string plus street and house; all fields
                           are empty strings when nothing is recognizable.
    """
    normalized = normalize_text(raw)
    return NormalizedAddress(
        normalized=normalized,
        street=extract_street(normalized),
        house=extract_house(normalized),
    )
