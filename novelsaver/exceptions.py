"""
Error taxonomy for scrape sessions.

Session-level errors terminate the session; chapter-level errors are
recorded as placeholder chapters and the batch carries on.
"""
from enum import Enum


class ErrorCode(str, Enum):
    EMPTY_INDEX = "EMPTY_INDEX"
    CHAPTER_FETCH_FAILED = "CHAPTER_FETCH_FAILED"
    NETWORK_ERROR = "NETWORK_ERROR"
    TIMEOUT = "TIMEOUT"
    WRITE_UNAUTHORIZED = "WRITE_UNAUTHORIZED"
    WRITE_OTHER_FAILURE = "WRITE_OTHER_FAILURE"
    STOPPED = "STOPPED"
    CONCURRENT_SESSION_REJECTED = "CONCURRENT_SESSION_REJECTED"
    NO_MATCHING_CHAPTERS = "NO_MATCHING_CHAPTERS"
    INVALID_CHAPTER_RANGE = "INVALID_CHAPTER_RANGE"
    CONTENT_UNAVAILABLE = "CONTENT_UNAVAILABLE"


class ScrapeError(Exception):
    """Base class for all errors raised by the scraping core."""

    code = ErrorCode.WRITE_OTHER_FAILURE

    def __init__(self, message, code=None):
        super().__init__(message)
        self.message = message
        if code is not None:
            self.code = code

    def __str__(self):
        return self.message


class EmptyIndexError(ScrapeError):
    """No chapter links could be discovered on the directory page."""
    code = ErrorCode.EMPTY_INDEX


class NoMatchingChaptersError(ScrapeError):
    code = ErrorCode.NO_MATCHING_CHAPTERS


class ChapterRangeError(ScrapeError, ValueError):
    code = ErrorCode.INVALID_CHAPTER_RANGE


class ChapterFetchError(ScrapeError):
    """A single chapter page could not be fetched.

    ``code`` is NETWORK_ERROR or TIMEOUT for transport failures and
    CHAPTER_FETCH_FAILED for non-success responses.
    """
    code = ErrorCode.CHAPTER_FETCH_FAILED


class PageExtractionError(ScrapeError):
    """No usable chapter body could be found on a single saved page."""
    code = ErrorCode.CONTENT_UNAVAILABLE


class WriteUnauthorizedError(ScrapeError):
    """The output directory is missing or no longer writable.

    Requires the user to choose/authorize the directory again; never retried.
    """
    code = ErrorCode.WRITE_UNAUTHORIZED


class WriteFailedError(ScrapeError):
    code = ErrorCode.WRITE_OTHER_FAILURE


class ScrapeStopped(ScrapeError):
    """Raised at a checkpoint once the user has asked the session to stop."""
    code = ErrorCode.STOPPED

    def __init__(self, message="Scrape stopped by user"):
        super().__init__(message)


class ConcurrentSessionError(ScrapeError):
    """A scrape request arrived while another session was running."""
    code = ErrorCode.CONCURRENT_SESSION_REJECTED
