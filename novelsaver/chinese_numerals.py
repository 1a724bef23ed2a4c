"""
Utility for reading chapter ordinals out of link text and hrefs.
"""
import re
import cn2an
from .logging import logger

# "第123章", "第 一百二十三 章", "第十回"
CHAPTER_TEXT_PATTERN = re.compile(r'第\s*([零〇一二两三四五六七八九十百千万\d]+)\s*[章回节話话]')
ENGLISH_CHAPTER_PATTERN = re.compile(r'\bchapter\s*[-.:#]?\s*(\d+)', re.IGNORECASE)
LAST_DIGITS_PATTERN = re.compile(r'(\d+)(?=\D*$)')


def convert_numeral(numeral):
    """Convert an Arabic or Chinese numeral string to an int, or None.

    Handles the "一千一十" style that omits 零, which cn2an rejects
    in strict mode.
    """
    if numeral.isdigit():
        return int(numeral)
    numeral = numeral.replace('〇', '零').replace('两', '二')
    try:
        return int(cn2an.cn2an(numeral, "smart"))
    except (ValueError, TypeError, KeyError):
        if re.fullmatch(r'[一二三四五六七八九]千[一二三四五六七八九]十[一二三四五六七八九]?', numeral):
            logger.debug(f"Normalizing numeral '{numeral}' by adding '零'.")
            return convert_numeral(numeral[:2] + '零' + numeral[2:])
        logger.warning(f"Failed to convert chapter numeral '{numeral}'.")
        return None


def parse_localized_chapter_number(text):
    """Number from a "第N章" or "Chapter N" pattern in text, or None."""
    if not text:
        return None
    match = CHAPTER_TEXT_PATTERN.search(text)
    if match:
        return convert_numeral(match.group(1))
    match = ENGLISH_CHAPTER_PATTERN.search(text)
    if match:
        return int(match.group(1))
    return None


def looks_like_chapter_text(text):
    return bool(text) and (CHAPTER_TEXT_PATTERN.search(text) is not None
                           or ENGLISH_CHAPTER_PATTERN.search(text) is not None)


def last_number_in(text):
    """The last run of digits in text, or None."""
    if not text:
        return None
    match = LAST_DIGITS_PATTERN.search(text)
    return int(match.group(1)) if match else None
