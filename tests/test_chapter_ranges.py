import pytest

from novelsaver.chapter_ranges import format_chapter_range, parse_chapter_range
from novelsaver.exceptions import ChapterRangeError, ErrorCode


class TestParseChapterRange:
    def test_mixed_ranges_and_singles(self):
        assert parse_chapter_range("1-3, 7,10-12") == [1, 2, 3, 7, 10, 11, 12]

    def test_overlaps_are_merged_and_sorted(self):
        assert parse_chapter_range("5,2-4,3") == [2, 3, 4, 5]

    def test_trailing_comma_is_ignored(self):
        assert parse_chapter_range("8,") == [8]

    @pytest.mark.parametrize("bad", ["", "   ", "abc", "5-2", "0", "1-x", ","])
    def test_invalid_input(self, bad):
        with pytest.raises(ChapterRangeError) as excinfo:
            parse_chapter_range(bad)
        assert excinfo.value.code is ErrorCode.INVALID_CHAPTER_RANGE

    def test_range_error_is_a_value_error(self):
        with pytest.raises(ValueError):
            parse_chapter_range("-3")


class TestFormatChapterRange:
    def test_collapses_consecutive_runs(self):
        assert format_chapter_range([1, 2, 3, 7, 9, 10]) == "1-3,7,9-10"

    def test_unsorted_with_duplicates(self):
        assert format_chapter_range([5, 3, 3, 4]) == "3-5"

    def test_empty(self):
        assert format_chapter_range([]) == ""
