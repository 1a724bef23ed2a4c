"""
Site-specific extraction strategies.

Each known site gets a SelectorStrategy aimed at its real content container,
tried before the generic chain. Add new sites to SITE_STRATEGIES.
"""
from .content_extractor import SelectorStrategy
from .logging import logger


class DxmwxStrategy(SelectorStrategy):
    """dxmwx.org keeps the chapter in #Lab_Contents with inline ad links."""

    def __init__(self):
        super().__init__(["#Lab_Contents"], name="dxmwx", remove_selectors="script, a")


class KanunuStrategy(SelectorStrategy):
    """kanunu8.com chapter bodies live in div#neirong."""

    def __init__(self):
        super().__init__(["div#neirong"], name="kanunu8", remove_selectors="script")


class NovelcoolStrategy(SelectorStrategy):
    def __init__(self):
        super().__init__(
            [
                "div.chapter-reading-section.position-relative",
                "div.chapter-reading-section-list",
                'div[class*="reading-section"]',
            ],
            name="novelcool",
            remove_selectors="div.mangaread-ad-box, script",
        )


class KakuyomuStrategy(SelectorStrategy):
    def __init__(self):
        super().__init__(["#contentMain"], name="kakuyomu", remove_selectors='a[href*="episodes"]')


# (hostname fragment, strategy class)
SITE_STRATEGIES = [
    ("dxmwx.org", DxmwxStrategy),
    ("kanunu8.com", KanunuStrategy),
    ("kanunu.net", KanunuStrategy),
    ("novelcool.com", NovelcoolStrategy),
    ("kakuyomu.jp", KakuyomuStrategy),
]


def get_site_strategies(url):
    """Return the site-specific strategies that apply to url (possibly none)."""
    strategies = [strategy_class() for fragment, strategy_class in SITE_STRATEGIES if fragment in url]
    if strategies:
        logger.debug(f"[EXTRACT] Site strategies for {url}: {[s.name for s in strategies]}")
    return strategies
