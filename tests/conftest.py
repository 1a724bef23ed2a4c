"""
Pytest configuration and fixtures for the scraping core tests.
"""

import os
import sys
import tempfile
import threading
import time
from pathlib import Path

import pytest

# Add project root to path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from novelsaver.config import ScrapeConfig
from novelsaver.fetcher import FetchResult
from novelsaver.orchestrator import BatchScrapeOrchestrator

BASE_URL = "https://novels.example/book/42/"

STORY_SENTENCES = [
    "The rain had not stopped for three days when Lin Feng finally reached the mountain gate.",
    "He counted the stone steps as he climbed, each one slick with moss and older than the sect itself.",
    "At the top an old man waited beneath a crooked pine, sweeping leaves that refused to stay swept.",
    "Neither of them spoke until the last step, and even then the silence felt like a conversation.",
    "Somewhere below, a bell rang twice, and the clouds parted just long enough to show the valley.",
]


class FakeFetcher:
    """In-memory fetch capability: url -> html string, int status, or exception."""

    def __init__(self, pages=None):
        self.pages = dict(pages or {})
        self.calls = []
        self.gate = None
        self._lock = threading.Lock()

    def fetch(self, url, timeout=None):
        with self._lock:
            self.calls.append(url)
        if self.gate is not None:
            self.gate.wait(5)
        page = self.pages.get(url, 404)
        if isinstance(page, Exception):
            raise page
        if isinstance(page, int):
            return FetchResult(status=page, html="")
        return FetchResult(status=200, html=page)


class MemoryWriter:
    def __init__(self, error=None):
        self.files = {}
        self.error = error
        self.calls = 0

    def write(self, relative_path, text):
        self.calls += 1
        if self.error:
            return {"success": False, "error": self.error}
        self.files[relative_path] = text
        return {"success": True}


class MemoryDownloader:
    def __init__(self):
        self.files = {}

    def download(self, data, filename):
        self.files[filename] = data
        return len(self.files)


def chapter_html(title, paragraphs=STORY_SENTENCES, container='<div id="content">{}</div>'):
    body = "".join(f"<p>{p}</p>" for p in paragraphs)
    return f"<html><head><title>{title} - Example Novels</title></head><body><h1>{title}</h1>{container.format(body)}</body></html>"


def toc_html(book_title, links):
    items = "".join(f'<dd><a href="{href}">{text}</a></dd>' for href, text in links)
    return f"<html><head><title>{book_title}</title></head><body><h1>{book_title}</h1><div id=\"list\"><dl>{items}</dl></div></body></html>"


def book_pages(chapter_count, book_title="Book"):
    """TOC plus chapter pages for chapters 1..chapter_count."""
    links = [(f"{BASE_URL}{n}.html", f"第{n}章 Chapter title {n}") for n in range(1, chapter_count + 1)]
    pages = {BASE_URL: toc_html(book_title, links)}
    for href, text in links:
        pages[href] = chapter_html(text)
    return pages


def wait_for(predicate, timeout=5.0, interval=0.01):
    deadline = time.monotonic() + timeout
    while time.monotonic() < deadline:
        if predicate():
            return True
        time.sleep(interval)
    return predicate()


@pytest.fixture
def temp_test_dir():
    """Create a temporary directory for test files."""
    with tempfile.TemporaryDirectory() as temp_dir:
        yield Path(temp_dir)


@pytest.fixture
def fast_config():
    return ScrapeConfig(volume_size=3, batch_size=2, request_delay=50, concurrency=2,
                        retry_times=0, jitter_min=0, jitter_max=0)


@pytest.fixture
def writer():
    return MemoryWriter()


@pytest.fixture
def downloader():
    return MemoryDownloader()


@pytest.fixture
def make_orchestrator(fast_config, writer, downloader):
    def factory(pages, config=None, writer=writer):
        fetcher = pages if isinstance(pages, FakeFetcher) else FakeFetcher(pages)
        orchestrator = BatchScrapeOrchestrator(fetcher=fetcher, writer=writer, downloader=downloader,
                                               config=config or fast_config)
        orchestrator.retry_backoff_ms = 0
        return orchestrator
    return factory


# Pytest configuration
def pytest_configure(config):
    """Configure pytest."""
    config.addinivalue_line("markers", "unit: Unit tests")
    config.addinivalue_line("markers", "integration: Integration tests")
    config.addinivalue_line("markers", "slow: Slow tests that take a long time")


def pytest_collection_modifyitems(config, items):
    """Add markers based on test names."""
    for item in items:
        if "integration" in item.name or "orchestrator" in item.nodeid:
            item.add_marker(pytest.mark.integration)
        else:
            item.add_marker(pytest.mark.unit)

        if "pause" in item.name or "stop" in item.name:
            item.add_marker(pytest.mark.slow)
