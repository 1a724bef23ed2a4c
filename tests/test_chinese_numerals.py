import pytest

from novelsaver.chinese_numerals import (
    convert_numeral,
    last_number_in,
    looks_like_chapter_text,
    parse_localized_chapter_number,
)


@pytest.mark.parametrize("text, expected", [
    ("第12章 初入江湖", 12),
    ("第一百二十三章 风起", 123),
    ("第 十 回", 10),
    ("第两百章", 200),
    ("Chapter 45: The Gate", 45),
    ("chapter-7", 7),
])
def test_localized_chapter_numbers(text, expected):
    assert parse_localized_chapter_number(text) == expected


def test_text_without_chapter_pattern():
    assert parse_localized_chapter_number("Author's note") is None
    assert parse_localized_chapter_number("") is None


def test_arabic_numerals_pass_through():
    assert convert_numeral("0042") == 42


def test_looks_like_chapter_text():
    assert looks_like_chapter_text("第三章")
    assert not looks_like_chapter_text("目录")


def test_last_number_in():
    assert last_number_in("/book/42/1337.html") == 1337
    assert last_number_in("no digits") is None
