"""Tests for nihongo_flow.application.utils.text."""

import pytest

from nihongo_flow.application.utils.text import (
    fuzzy_search,
    normalize_text,
    romaji_to_hiragana,
    to_hiragana,
)


# ---------- Kana Conversion Tests ----------


def test_to_hiragana_converts_katakana():
    assert to_hiragana("カタカナ") == "かたかな"


def test_to_hiragana_leaves_other_text():
    assert to_hiragana("漢字 and ひらがな") == "漢字 and ひらがな"


@pytest.mark.parametrize(
    "romaji, expected",
    [
        ("neko", "ねこ"),
        ("sushi", "すし"),
        ("kyou", "きょう"),
        ("gakkou", "がっこう"),
        ("zasshi", "ざっし"),
        ("tsukue", "つくえ"),
        ("NIHON", "にほん"),
    ],
)
def test_romaji_to_hiragana(romaji, expected):
    assert romaji_to_hiragana(romaji) == expected


def test_romaji_unknown_characters_pass_through():
    assert romaji_to_hiragana("x") == "x"


# ---------- Search Tests ----------


def test_normalize_text():
    assert normalize_text("  ネコ ") == "ねこ"
    assert normalize_text("CAT") == "cat"
    assert normalize_text(None) == ""


def test_fuzzy_search_empty_query_matches():
    assert fuzzy_search("", "anything")
    assert fuzzy_search(None)


def test_fuzzy_search_raw_and_kana():
    assert fuzzy_search("cat", None, "Cat")
    assert fuzzy_search("ねこ", "ネコ")
    assert fuzzy_search("ネコ", "ねこ")
    assert not fuzzy_search("inu", "ねこ", "Cat")


def test_fuzzy_search_romaji_against_reading():
    assert fuzzy_search("taberu", "食べる", "たべる")
