"""
Page fetching transport.

The orchestrator only needs something with fetch(url, timeout) returning a
FetchResult; PageFetcher is the default requests-based implementation.
"""
from dataclasses import dataclass

import requests

from .exceptions import ChapterFetchError, ErrorCode
from .logging import logger

DEFAULT_HEADERS = {
    'User-Agent': 'Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 '
                  '(KHTML, like Gecko) Chrome/124.0.0.0 Safari/537.36'
}


@dataclass(frozen=True)
class FetchResult:
    status: int
    html: str

    @property
    def ok(self):
        return 200 <= self.status < 300


class PageFetcher:
    """Single-attempt GET; retry policy belongs to the caller."""

    def __init__(self, headers=None, session=None):
        self.headers = dict(DEFAULT_HEADERS, **(headers or {}))
        self.http = session or requests.Session()

    def fetch(self, url, timeout=None):
        """GET url.

        Raises:
            ChapterFetchError: code TIMEOUT or NETWORK_ERROR on transport failure.
        """
        logger.trace(f"[FETCH] GET {url} (timeout={timeout})")
        try:
            response = self.http.get(url, headers=self.headers, timeout=timeout)
        except requests.exceptions.Timeout as e:
            raise ChapterFetchError(f"Timed out fetching {url}: {e}", ErrorCode.TIMEOUT) from e
        except requests.exceptions.RequestException as e:
            raise ChapterFetchError(f"Request failed for {url}: {e}", ErrorCode.NETWORK_ERROR) from e

        # Many novel sites serve GBK without declaring it
        if 'charset' not in response.headers.get('Content-Type', '').lower():
            response.encoding = response.apparent_encoding
        return FetchResult(status=response.status_code, html=response.text)

    def close(self):
        self.http.close()
