"""
Chapter index discovery for a book's directory (table of contents) page.

Ordering is heuristic: when enough links carry a parseable chapter number
they are sorted by it, otherwise newest-first listings are detected by
comparing adjacent numbers and reversed. Pathological tables of contents
can still come out in the wrong order.
"""
import re
from urllib.parse import urljoin, urlparse

from bs4 import BeautifulSoup

from .chinese_numerals import last_number_in, looks_like_chapter_text, parse_localized_chapter_number
from .exceptions import EmptyIndexError
from .logging import logger
from .models import ChapterIndex, ChapterLink

# Tried in order; the first container holding any usable anchor wins
TOC_CONTAINER_SELECTORS = [
    "#list",
    ".chapter-list",
    ".chapters",
    ".read-list",
    ".box_list",
    ".chapter_list",
    ".box",
]

CHAPTER_HREF_PATTERN = re.compile(r'chapter|/\d+/.+|/\d+(?:\.s?html?)?/?$', re.IGNORECASE)
IGNORED_HREF_PREFIXES = ('#', 'javascript:', 'mailto:', 'tel:')

MIN_NUMBERED_LINKS = 3
NUMBERED_SHARE = 0.3
DEFAULT_BOOK_TITLE = "book"


def _anchor_pairs(element, page_url):
    """(absolute href, raw href, visible text) for every usable anchor under element."""
    pairs = []
    for anchor in element.find_all('a', href=True):
        raw_href = anchor['href'].strip()
        if not raw_href or raw_href.lower().startswith(IGNORED_HREF_PREFIXES):
            continue
        href = urljoin(page_url, raw_href) if page_url else raw_href
        pairs.append((href, raw_href, anchor.get_text(" ", strip=True)))
    return pairs


def is_chapter_like(raw_href, text):
    return bool(CHAPTER_HREF_PATTERN.search(raw_href or "")) or looks_like_chapter_text(text)


def select_candidates(soup, page_url=None):
    """Anchors from the first recognized TOC container, else chapter-like page anchors."""
    for selector in TOC_CONTAINER_SELECTORS:
        container = soup.select_one(selector)
        if container is None:
            continue
        pairs = _anchor_pairs(container, page_url)
        if pairs:
            logger.debug(f"[RESOLVER] Using TOC container '{selector}' with {len(pairs)} anchors")
            return [(href, text) for href, _raw, text in pairs]

    pairs = [
        (href, text) for href, raw_href, text in _anchor_pairs(soup, page_url)
        if is_chapter_like(raw_href, text)
    ]
    logger.debug(f"[RESOLVER] No TOC container matched, {len(pairs)} chapter-like anchors on page")
    return pairs


def infer_chapter_number(text, href):
    """Chapter text pattern, then last digits of the href path, then last digits of the text."""
    number = parse_localized_chapter_number(text)
    if number is not None:
        return number
    if href:
        number = last_number_in(urlparse(href).path)
        if number is not None:
            return number
    return last_number_in(text)


def deduplicate(candidates):
    """Drop repeated hrefs, keeping the first occurrence."""
    seen = set()
    unique = []
    for href, text in candidates:
        if href in seen:
            logger.trace(f"[RESOLVER] Dropping duplicate link {href} ('{text}')")
            continue
        seen.add(href)
        unique.append((href, text))
    return unique


def is_descending_listing(numbers):
    """True when adjacent numbered pairs mostly decrease (newest-first TOC)."""
    ascending = descending = 0
    for a, b in zip(numbers, numbers[1:]):
        if a is None or b is None:
            continue
        if a > b:
            descending += 1
        elif a < b:
            ascending += 1
    return descending > ascending


def order_candidates(enriched):
    """Order (href, text, number) triples into reading order."""
    numbered = sum(1 for _href, _text, number in enriched if number is not None)
    threshold = max(MIN_NUMBERED_LINKS, int(len(enriched) * NUMBERED_SHARE))

    if numbered >= threshold:
        logger.debug(f"[RESOLVER] {numbered}/{len(enriched)} links numbered, sorting by chapter number")
        return sorted(enriched, key=lambda item: item[2] if item[2] is not None else 0)

    if is_descending_listing([number for _href, _text, number in enriched]):
        logger.info("[RESOLVER] Listing looks newest-first, reversing")
        return list(reversed(enriched))
    return list(enriched)


def build_chapter_index(candidates, book_title=DEFAULT_BOOK_TITLE):
    """Turn raw (href, text) candidates into an ordered ChapterIndex."""
    candidates = deduplicate(candidates)
    if not candidates:
        raise EmptyIndexError("No chapter links found on the directory page")

    enriched = [(href, text, infer_chapter_number(text, href)) for href, text in candidates]
    ordered = order_candidates(enriched)

    links = tuple(
        ChapterLink(href=href, display_text=text, inferred_number=number, sequence_index=position)
        for position, (href, text, number) in enumerate(ordered, start=1)
    )
    logger.info(f"[RESOLVER] Resolved {len(links)} chapters for '{book_title}'")
    return ChapterIndex(book_title=book_title, links=links)


def extract_book_title(soup):
    h1 = soup.find('h1')
    if h1 and h1.get_text(strip=True):
        return h1.get_text(" ", strip=True)
    og_title = soup.find('meta', attrs={'property': 'og:title'})
    if og_title and og_title.get('content', '').strip():
        return og_title['content'].strip()
    if soup.title and soup.title.get_text(strip=True):
        return soup.title.get_text(strip=True)
    return DEFAULT_BOOK_TITLE


def resolve_chapter_index(html, page_url=None):
    """Parse a directory page and return its ChapterIndex.

    Raises:
        EmptyIndexError: when no candidate chapter links exist.
    """
    soup = BeautifulSoup(html, 'html.parser')
    return build_chapter_index(select_candidates(soup, page_url), extract_book_title(soup))
