"""
Chapter selection strings such as "1-3,7,10-12".
"""
from .exceptions import ChapterRangeError


def parse_chapter_range(range_str):
    """Parse "2-5,9" into a sorted list of unique chapter numbers.

    Raises:
        ChapterRangeError: on empty input, non-numbers, numbers < 1 or
            reversed ranges.
    """
    if not range_str or not range_str.strip():
        raise ChapterRangeError("Please enter a chapter range")

    chapters = set()
    for part in (p.strip() for p in range_str.split(",")):
        if not part:
            continue
        if "-" in part:
            start_str, _, end_str = part.partition("-")
            try:
                start, end = int(start_str.strip()), int(end_str.strip())
            except ValueError:
                raise ChapterRangeError(f"Invalid chapter range: {part}") from None
            if start < 1 or end < start:
                raise ChapterRangeError(f"Invalid chapter range: {part}")
            chapters.update(range(start, end + 1))
        else:
            try:
                chapter = int(part)
            except ValueError:
                raise ChapterRangeError(f"Invalid chapter number: {part}") from None
            if chapter < 1:
                raise ChapterRangeError(f"Invalid chapter number: {part}")
            chapters.add(chapter)

    if not chapters:
        raise ChapterRangeError("Please enter a chapter range")
    return sorted(chapters)


def format_chapter_range(chapters):
    """Collapse chapter numbers into "1-3,7" form (input order is normalized)."""
    numbers = sorted(set(chapters))
    if not numbers:
        return ""

    ranges = []
    start = end = numbers[0]
    for number in numbers[1:]:
        if number == end + 1:
            end = number
            continue
        ranges.append(str(start) if start == end else f"{start}-{end}")
        start = end = number
    ranges.append(str(start) if start == end else f"{start}-{end}")
    return ",".join(ranges)
