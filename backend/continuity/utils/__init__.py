"""String helpers shared by the matching and planning components."""

from .strings import (
    STOP_WORDS,
    levenshtein,
    looks_like_street_address,
    normalize_city_name,
    normalize_name,
    share_significant_word,
    significant_words,
    word_overlap_ratio,
    words_similar,
)

__all__ = [
    "STOP_WORDS",
    "levenshtein",
    "looks_like_street_address",
    "normalize_city_name",
    "normalize_name",
    "share_significant_word",
    "significant_words",
    "word_overlap_ratio",
    "words_similar",
]
