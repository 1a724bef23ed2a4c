"""
Chapter content extraction from unknown page structures.

Bodies are found by an ordered chain of strategies; each one is tried only
when the previous ones produced nothing usable. Site-specific strategies
are prepended per URL without touching the generic chain.
"""
from __future__ import annotations

import copy
import html as html_lib
import re
from dataclasses import dataclass

from bs4 import BeautifulSoup

from .logging import logger

CONTENT_UNAVAILABLE = "[Content unavailable]"
DEFAULT_TITLE = "Untitled chapter"

MAX_TITLE_LENGTH = 200
MIN_CONTENT_LENGTH = 100
MIN_PARAGRAPH_LENGTH = 20
MIN_PARAGRAPHS = 4

BOILERPLATE_PATTERN = re.compile(
    r'copyright|©|版权|all rights reserved|网站地址|https?://|www\.',
    re.IGNORECASE,
)

TITLE_SELECTORS = ["h1", "h2", "h3", '[class*="title"]', '[class*="chapter"]', "title"]

CONTAINER_SELECTORS = [
    "#content",
    "#chapter-content",
    '[class*="chapter-content"]',
    "#novel-content",
    '[class*="novel-content"]',
    "#text-content",
    '[class*="text-content"]',
    ".read-content",
    '[class*="content"]',
    "#chapter",
    '[class*="chapter"]',
    "main",
    "article",
    "section",
    "#txt",
    '[class*="txt"]',
    "#read",
    '[class*="read"]',
    '[class*="book"]',
    '[class*="story"]',
]

BLOCK_TAGS = ["div", "article", "section", "main", "td"]
STRIPPED_TAGS = ["script", "style", "noscript", "template"]


def decode_text(text):
    """Decode any entities that survived parsing and flatten non-breaking spaces."""
    return html_lib.unescape(text).replace('\xa0', ' ').strip()


def element_text(element):
    return decode_text(element.get_text(separator='\n', strip=True))


def is_boilerplate(text):
    return BOILERPLATE_PATTERN.search(text) is not None


def is_usable(text):
    return bool(text) and len(text) > MIN_CONTENT_LENGTH and not is_boilerplate(text)


class ExtractionStrategy:
    """One way of finding the chapter body in a parsed page."""

    name = "base"

    def attempt(self, soup):
        """Return the body text, or None when this strategy finds nothing usable."""
        raise NotImplementedError

    def __repr__(self):
        return f"<{self.__class__.__name__} {self.name}>"


class SelectorStrategy(ExtractionStrategy):
    """First usable element among CSS selectors tried in priority order."""

    def __init__(self, selectors, name="selectors", remove_selectors=None):
        self.selectors = list(selectors)
        self.name = name
        self.remove_selectors = remove_selectors

    def attempt(self, soup):
        for selector in self.selectors:
            for element in soup.select(selector):
                if self.remove_selectors:
                    # Strategies share one tree, so prune a copy
                    element = copy.copy(element)
                    for junk in element.select(self.remove_selectors):
                        junk.decompose()
                text = element_text(element)
                if is_usable(text):
                    logger.trace(f"[EXTRACT] {self.name}: matched '{selector}' ({len(text)} chars)")
                    return text
                logger.trace(f"[EXTRACT] {self.name}: '{selector}' candidate rejected ({len(text)} chars)")
        return None


class ContainerStrategy(SelectorStrategy):
    """Known content-container id/class names."""

    def __init__(self):
        super().__init__(CONTAINER_SELECTORS, name="container")


class ParagraphStrategy(ExtractionStrategy):
    """Aggregate every qualifying <p> when no container matched."""

    name = "paragraphs"

    def attempt(self, soup):
        paragraphs = []
        for p in soup.find_all('p'):
            text = element_text(p)
            if len(text) > MIN_PARAGRAPH_LENGTH and not is_boilerplate(text):
                paragraphs.append(text)
        if len(paragraphs) < MIN_PARAGRAPHS:
            logger.trace(f"[EXTRACT] paragraphs: only {len(paragraphs)} qualifying paragraphs")
            return None
        body = "\n\n".join(paragraphs)
        return body if is_usable(body) else None


class LongestBlockStrategy(ExtractionStrategy):
    """Longest usable text among all block containers."""

    name = "longest-block"

    def attempt(self, soup):
        longest = ""
        for element in soup.find_all(BLOCK_TAGS):
            text = element_text(element)
            if len(text) > len(longest) and is_usable(text):
                longest = text
        return longest or None


DEFAULT_STRATEGIES = (ContainerStrategy(), ParagraphStrategy(), LongestBlockStrategy())


@dataclass(frozen=True)
class ExtractionResult:
    title: str
    body: str
    strategy: str | None = None

    @property
    def succeeded(self):
        return self.body != CONTENT_UNAVAILABLE


def parse_page(page_html):
    soup = BeautifulSoup(page_html, 'html.parser')
    for tag in soup(STRIPPED_TAGS):
        tag.decompose()
    return soup


def extract_title(soup, fallback_title=DEFAULT_TITLE, selectors=TITLE_SELECTORS):
    for selector in selectors:
        element = soup.select_one(selector)
        if element is None:
            continue
        title = decode_text(element.get_text(" ", strip=True))
        if title and len(title) < MAX_TITLE_LENGTH:
            return title
    return fallback_title


class ContentExtractor:
    """Runs title extraction and the body strategy chain over raw HTML."""

    def __init__(self, strategies=DEFAULT_STRATEGIES, site_strategy_lookup=None):
        self.strategies = tuple(strategies)
        self.site_strategy_lookup = site_strategy_lookup

    def strategies_for(self, url):
        if url and self.site_strategy_lookup:
            return tuple(self.site_strategy_lookup(url)) + self.strategies
        return self.strategies

    def extract(self, page_html, fallback_title=DEFAULT_TITLE, url=None):
        soup = parse_page(page_html)
        title = extract_title(soup, fallback_title)

        for strategy in self.strategies_for(url):
            body = strategy.attempt(soup)
            if body:
                logger.debug(f"[EXTRACT] '{title}': body from {strategy.name} ({len(body)} chars)")
                return ExtractionResult(title=title, body=body, strategy=strategy.name)

        logger.warning(f"[EXTRACT] '{title}': no strategy produced usable content ({url or 'no url'})")
        return ExtractionResult(title=title, body=CONTENT_UNAVAILABLE)


_default_extractor = ContentExtractor()


def extract_content(page_html, fallback_title=DEFAULT_TITLE):
    """Title and body from raw HTML using the generic strategy chain."""
    return _default_extractor.extract(page_html, fallback_title)
