"""Unit tests for fuzzy string utilities."""

import pytest

from backend.continuity.utils.strings import (
    levenshtein,
    looks_like_street_address,
    normalize_city_name,
    normalize_name,
    share_significant_word,
    significant_words,
    word_overlap_ratio,
    words_similar,
)


def test_normalize_name_strips_punctuation_and_case() -> None:
    """Names compare without case, punctuation or extra whitespace."""
    assert normalize_name("  L'Esplanade   Hotel ") == "lesplanade hotel"
    assert normalize_name("HOTEL RITZ!") == "hotel ritz"


@pytest.mark.parametrize(
    ("raw", "expected"),
    [
        ("New York (JFK)", "new york"),
        ("Austin, TX", "austin"),
        ("Paris", "paris"),
        ("  Lima  ", "lima"),
        ("Mexico City", "mexico"),
    ],
)
def test_normalize_city_name(raw: str, expected: str) -> None:
    """City names drop codes, state suffixes and generic words."""
    assert normalize_city_name(raw) == expected


def test_significant_words_drops_stop_words_and_short_words() -> None:
    """Stop words and words of two letters or fewer carry no identity."""
    assert significant_words("The Four Seasons Resort") == ["four", "seasons"]
    assert significant_words("Hotel de la Paz", None) == ["paz"]


def test_significant_words_merges_texts_without_duplicates() -> None:
    """Several texts form one word pool."""
    assert significant_words("Hotel L'Esplanade", "Juan Fanning 515-525") == [
        "lesplanade",
        "juan",
        "fanning",
        "515525",
    ]


def test_levenshtein() -> None:
    """Edit distance counts insertions, deletions and substitutions."""
    assert levenshtein("kitten", "sitting") == 3
    assert levenshtein("", "abc") == 3
    assert levenshtein("same", "same") == 0


def test_words_similar_allows_small_typos() -> None:
    """Long words tolerate two edits, short words one."""
    assert words_similar("georgiou", "georgios")
    assert words_similar("seasons", "season")
    assert words_similar("cat", "cats")
    assert not words_similar("cat", "dog")
    assert not words_similar("eiffel", "louvre")


def test_word_overlap_ratio_uses_smaller_set() -> None:
    """Overlap is measured against the smaller word set."""
    assert word_overlap_ratio(["four", "seasons"], ["four", "seasons", "oahu"]) == 1.0
    assert word_overlap_ratio(["louvre", "museum"], ["musee", "confluences"]) == 0.5
    assert word_overlap_ratio([], ["anything"]) == 0.0


def test_share_significant_word() -> None:
    """A single similar word is enough."""
    assert share_significant_word(["rivoli"], ["grand", "rivoli"])
    assert not share_significant_word(["fifth"], ["central", "park", "zoo"])


@pytest.mark.parametrize(
    "text",
    [
        "350 Fifth Ave",
        "3 Vasileos Georgiou A' St",
        "Juan Fanning 515-525",
        "Friedrichstrasse 43",
        "Rue de Rivoli",
        "12 Rue de Rivoli",
        "Calle Alcala 20",
    ],
)
def test_looks_like_street_address(text: str) -> None:
    """Common address shapes are recognized."""
    assert looks_like_street_address(text)


@pytest.mark.parametrize(
    "text",
    ["Hotel Ritz", "Terminal 5", "Louvre Museum", "", None],
)
def test_not_street_address(text: str | None) -> None:
    """Venue names and venue parts are not addresses."""
    assert not looks_like_street_address(text)
