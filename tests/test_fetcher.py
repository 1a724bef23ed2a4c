"""
Tests for the requests-based page fetcher, using a stand-in HTTP session.
"""

import pytest
import requests

from novelsaver.exceptions import ChapterFetchError, ErrorCode
from novelsaver.fetcher import FetchResult, PageFetcher


class FakeResponse:
    def __init__(self, status_code=200, text="<html></html>", content_type="text/html"):
        self.status_code = status_code
        self.headers = {"Content-Type": content_type}
        self.encoding = "ISO-8859-1"
        self.apparent_encoding = "GB2312"
        self._text = text

    @property
    def text(self):
        return f"{self._text}|{self.encoding}"


class FakeHttp:
    def __init__(self, response=None, error=None):
        self.response = response
        self.error = error
        self.requests = []

    def get(self, url, headers=None, timeout=None):
        self.requests.append((url, headers, timeout))
        if self.error:
            raise self.error
        return self.response


def test_undeclared_charset_uses_apparent_encoding():
    fetcher = PageFetcher(session=FakeHttp(FakeResponse()))
    result = fetcher.fetch("https://novels.example/1.html", timeout=5)
    assert result == FetchResult(status=200, html="<html></html>|GB2312")


def test_declared_charset_is_kept():
    http = FakeHttp(FakeResponse(content_type="text/html; charset=utf-8"))
    assert PageFetcher(session=http).fetch("https://novels.example/1.html").html.endswith("|ISO-8859-1")


def test_status_is_reported_not_raised():
    result = PageFetcher(session=FakeHttp(FakeResponse(status_code=503))).fetch("https://novels.example/")
    assert result.status == 503
    assert not result.ok


def test_headers_and_timeout_are_sent():
    http = FakeHttp(FakeResponse())
    PageFetcher(headers={"Referer": "https://novels.example/"}, session=http).fetch("https://novels.example/", 2.5)
    _url, headers, timeout = http.requests[0]
    assert "Mozilla" in headers["User-Agent"]
    assert headers["Referer"] == "https://novels.example/"
    assert timeout == 2.5


@pytest.mark.parametrize("error, code", [
    (requests.exceptions.ReadTimeout("slow"), ErrorCode.TIMEOUT),
    (requests.exceptions.ConnectionError("refused"), ErrorCode.NETWORK_ERROR),
])
def test_transport_errors_are_classified(error, code):
    with pytest.raises(ChapterFetchError) as excinfo:
        PageFetcher(session=FakeHttp(error=error)).fetch("https://novels.example/")
    assert excinfo.value.code is code
