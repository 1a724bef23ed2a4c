"""Tests for title extraction and the body strategy chain."""

from novelsaver.content_extractor import (
    CONTENT_UNAVAILABLE,
    ContentExtractor,
    ExtractionStrategy,
    extract_content,
    is_boilerplate,
)
from novelsaver.site_strategies import get_site_strategies

from conftest import STORY_SENTENCES

CONTAINER_TEXT = ("The lanterns along the canal were lit one by one as the ferryman pushed away from the pier, "
                  "and the city behind him sank slowly into its evening quiet.")
PARAGRAPHS = "".join(f"<p>{s}</p>" for s in STORY_SENTENCES)


def page(body, head="<title>Chapter page</title>"):
    return f"<html><head>{head}</head><body>{body}</body></html>"


def test_content_container_wins_over_paragraphs():
    html = page(f"<h1>第5章 Canal</h1><div id='content'>{CONTAINER_TEXT}</div><div class='comments'>{PARAGRAPHS}</div>")
    result = extract_content(html)
    assert result.title == "第5章 Canal"
    assert result.body == CONTAINER_TEXT
    assert result.strategy == "container"
    assert result.succeeded


def test_container_with_copyright_falls_through_to_paragraphs():
    html = page(f"<h1>Ch 2</h1><div id='content'>{PARAGRAPHS}<p>Copyright 2024 Example Novels. All rights reserved.</p></div>")
    result = extract_content(html)
    assert result.strategy == "paragraphs"
    assert result.body == "\n\n".join(STORY_SENTENCES)
    assert "Copyright" not in result.body


def test_paragraph_tier_needs_four_paragraphs():
    three = "".join(f"<p>{s}</p>" for s in STORY_SENTENCES[:3])
    html = page(f"<h1>Short</h1><span>{three}</span>")
    result = extract_content(html, "Fallback")
    assert result.strategy != "paragraphs"


def test_longest_block_used_when_nothing_else_matches():
    short_block = "<div>A short navigation block with little text.</div>"
    long_block = f"<div>{' '.join(STORY_SENTENCES)}</div>"
    result = extract_content(page(short_block + long_block))
    assert result.strategy == "longest-block"
    assert result.body == " ".join(STORY_SENTENCES)


def test_sentinel_when_no_tier_succeeds():
    result = extract_content(page("<div>Too short.</div><p>Visit www.example.com for more</p>"), "Fallback title")
    assert result.body == CONTENT_UNAVAILABLE
    assert not result.succeeded


def test_entities_are_decoded_before_filtering():
    html = page("<h1>Tom &amp; Jerry&#8217;s &quot;War&quot;</h1>"
                f"<div id='content'>{CONTAINER_TEXT} &copy; Example Novels</div>")
    result = extract_content(html)
    assert result.title == "Tom & Jerry’s \"War\""
    # © only appears once the entity is decoded, so the container must be rejected
    assert result.strategy != "container"


def test_double_escaped_entities_are_decoded():
    html = page(f"<h1>Rain&amp;nbsp;Song</h1><div id='content'>{CONTAINER_TEXT}&amp;#33;</div>")
    result = extract_content(html)
    assert result.title == "Rain Song"
    assert result.body.endswith("quiet.!")


def test_title_priority_and_fallback():
    assert extract_content(page("<h2>Second level</h2><h3>Third</h3>")).title == "Second level"
    assert extract_content(page("<div class='chapter-title'>Styled title</div>")).title == "Styled title"
    assert extract_content(page("<p>nothing</p>", head="<title>Doc title</title>")).title == "Doc title"
    assert extract_content(page(f"<h1>{'x' * 250}</h1>", head=""), "Fallback").title == "Fallback"
    assert extract_content("<html><body></body></html>", "Fallback").title == "Fallback"


def test_scripts_and_styles_are_ignored():
    html = page(f"<h1>T</h1><div id='content'><script>var ad = 'http://ads';</script>{CONTAINER_TEXT}</div>")
    assert extract_content(html).body == CONTAINER_TEXT


def test_boilerplate_markers():
    assert is_boilerplate("Copyright 2020")
    assert is_boilerplate("本站版权所有")
    assert is_boilerplate("read more at https://site")
    assert is_boilerplate("ALL RIGHTS RESERVED")
    assert not is_boilerplate("A quiet story about rivers.")


class AlwaysStrategy(ExtractionStrategy):
    name = "always"

    def attempt(self, soup):
        return "custom body"


def test_site_strategies_run_before_generic_chain():
    extractor = ContentExtractor(site_strategy_lookup=lambda url: [AlwaysStrategy()] if "special" in url else [])
    html = page(f"<h1>T</h1><div id='content'>{CONTAINER_TEXT}</div>")
    assert extractor.extract(html, url="https://special.example/1").body == "custom body"
    assert extractor.extract(html, url="https://plain.example/1").body == CONTAINER_TEXT


def test_dxmwx_strategy_strips_inline_links():
    extractor = ContentExtractor(site_strategy_lookup=get_site_strategies)
    html = page(f"<h1 id='ChapterTitle'>第3章</h1><div id='Lab_Contents'>{CONTAINER_TEXT}<a href='/x'>Ad link</a></div>")
    result = extractor.extract(html, url="https://www.dxmwx.org/read/1_2.html")
    assert result.strategy == "dxmwx"
    assert "Ad link" not in result.body


def test_unknown_site_has_no_site_strategies():
    assert get_site_strategies("https://unknown.example/") == []
