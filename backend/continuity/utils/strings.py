"""Fuzzy string utilities for comparing place names and addresses."""

import re
from collections.abc import Iterable

# Words that carry no identity when comparing place names
STOP_WORDS = frozenset(
    {
        "the", "at", "in", "on", "of", "and", "a", "an", "to", "for",
        "de", "del", "la", "le", "les", "el", "los", "das", "der", "di",
        "resort", "hotel", "hotels", "inn", "suites", "lodge", "hostel",
        "airport", "international", "terminal",
        "st", "ave", "blvd", "rd", "street", "avenue", "boulevard", "road",
        "drive", "lane", "way", "place", "collection", "luxury",
        "calle", "rue", "via", "avenida",
    }
)

_STREET_SUFFIXES = (
    "st", "street", "ave", "avenue", "rd", "road", "blvd", "boulevard",
    "dr", "drive", "ln", "lane", "way", "pl", "place", "ct", "court",
    "hwy", "highway", "pkwy", "parkway", "sq", "square", "ter", "terrace",
)
_STREET_PREFIXES = (
    "calle", "rue", "via", "avenida", "av", "jr", "jiron", "paseo",
    "carrer", "rua", "strasse", "piazza",
)
# Venue parts that are followed by a number but are not streets
_NON_STREET_WORDS = frozenset(
    {"terminal", "gate", "hall", "room", "floor", "pier", "platform", "suite", "level", "hotel"}
)

_SUFFIX_GROUP = "|".join(_STREET_SUFFIXES)
_PREFIX_GROUP = "|".join(_STREET_PREFIXES)

# "350 Fifth Ave", "3 Vasileos Georgiou A' St"
_LEADING_NUMBER_RE = re.compile(
    rf"^\d+[a-z]?(?:\s*-\s*\d+)?\s+(?:[\w'.]+\s+){{0,5}}(?:{_SUFFIX_GROUP})\b\.?"
)
# "Juan Fanning 515-525", "Friedrichstrasse 43"
_TRAILING_NUMBER_RE = re.compile(
    r"^(?P<street>[^\d,]*[a-z][^\d,]*?)\s+\d{1,5}[a-z]?(?:\s*[-/]\s*\d{1,5}[a-z]?)?(?:\s*,.*)?$"
)
# "Calle Alcala", "12 Rue de Rivoli"
_PREFIX_RE = re.compile(rf"^(?:\d+[a-z]?,?\s+)?(?:{_PREFIX_GROUP})\.?\s+\w+")

_PARENTHETICAL_RE = re.compile(r"\s*\([^)]*\)")
_CITY_SUFFIX_RE = re.compile(r"\s+(?:airport|international|city|municipal)$")
_WORD_SPLIT_RE = re.compile(r"[\s,]+")


def normalize_name(name: str) -> str:
    """Lower-case, collapse whitespace and drop punctuation."""
    collapsed = re.sub(r"\s+", " ", name.lower().strip())
    return re.sub(r"[^\w\s]", "", collapsed)


def normalize_city_name(city: str) -> str:
    """Normalize a city name for comparison.

    Strips parenthetical codes ("New York (JFK)"), a trailing two-letter
    state or country suffix ("Austin, TX") and generic suffixes such as
    "airport" or "city".
    """
    text = _PARENTHETICAL_RE.sub("", city.lower()).strip()
    parts = [part.strip() for part in text.split(",") if part.strip()]
    while len(parts) > 1 and len(parts[-1]) == 2:
        parts.pop()
    text = parts[0] if parts else ""
    text = re.sub(r"\s+", " ", text)
    text = _CITY_SUFFIX_RE.sub("", text)
    return re.sub(r"[^\w\s]", "", text).strip()


def significant_words(*texts: str | None) -> list[str]:
    """Words longer than two characters that are not stop words."""
    words: list[str] = []
    for text in texts:
        if not text:
            continue
        for word in _WORD_SPLIT_RE.split(normalize_name(text)):
            if len(word) > 2 and word not in STOP_WORDS and word not in words:
                words.append(word)
    return words


def levenshtein(s1: str, s2: str) -> int:
    """Edit distance between two strings."""
    if len(s1) < len(s2):
        return levenshtein(s2, s1)

    if len(s2) == 0:
        return len(s1)

    previous_row = list(range(len(s2) + 1))
    for i, c1 in enumerate(s1):
        current_row = [i + 1]
        for j, c2 in enumerate(s2):
            insertions = previous_row[j + 1] + 1
            deletions = current_row[j] + 1
            substitutions = previous_row[j] + (c1 != c2)
            current_row.append(min(insertions, deletions, substitutions))
        previous_row = current_row

    return previous_row[-1]


def words_similar(word1: str, word2: str) -> bool:
    """Whether two words are the same modulo small typos.

    Words match when equal, when one contains the other, or when their edit
    distance is at most 2 (either word longer than 5 characters) or 1.
    """
    if word1 == word2:
        return True
    if word1 in word2 or word2 in word1:
        return True
    distance = levenshtein(word1, word2)
    if len(word1) > 5 or len(word2) > 5:
        return distance <= 2
    return distance <= 1


def word_overlap_ratio(words1: Iterable[str], words2: Iterable[str]) -> float:
    """Share of the smaller word set that has a similar word in the other."""
    first, second = list(words1), list(words2)
    if not first or not second:
        return 0.0
    matched = sum(1 for w1 in first if any(words_similar(w1, w2) for w2 in second))
    return min(1.0, matched / min(len(first), len(second)))


def share_significant_word(words1: Iterable[str], words2: Iterable[str]) -> bool:
    """Whether any word in one set is similar to a word in the other."""
    second = list(words2)
    return any(words_similar(w1, w2) for w1 in words1 for w2 in second)


def looks_like_street_address(text: str | None) -> bool:
    """Heuristic check for a street address rather than a venue name."""
    if not text:
        return False
    cleaned = re.sub(r"\s+", " ", text.lower().strip())
    if _LEADING_NUMBER_RE.match(cleaned) or _PREFIX_RE.match(cleaned):
        return True
    trailing = _TRAILING_NUMBER_RE.match(cleaned)
    if trailing:
        last_word = trailing.group("street").split()[-1]
        return last_word.strip(".'") not in _NON_STREET_WORDS
    return False
