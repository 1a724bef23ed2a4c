"""
Novel Saver - chapter scraping core

Discovers a book's chapter index from its directory page, extracts chapter
text from arbitrary page layouts and writes size-bounded text volumes.

Modules:
    text_normalizer: line-break and blank-line canonicalization
    content_extractor: title/body extraction strategy chain
    site_strategies: per-site content containers
    index_resolver: chapter index discovery and ordering
    volume_assembler: volume accumulation and flush policy
    progress_channel: observer telemetry and pause/stop commands
    session: scrape session flags and state machine
    orchestrator: batched fetch pipeline
    fetcher / writers: default transport and persistence collaborators
    config / logging: configuration and logging

Usage:
    from novelsaver import BatchScrapeOrchestrator, QueueObserver
"""

from .chapter_ranges import format_chapter_range, parse_chapter_range
from .config import ScrapeConfig, load_scrape_config, get_output_dir, get_downloads_dir, show_config_status
from .content_extractor import (
    CONTENT_UNAVAILABLE,
    ContentExtractor,
    ExtractionResult,
    ExtractionStrategy,
    extract_content,
)
from .exceptions import (
    ErrorCode,
    ScrapeError,
    EmptyIndexError,
    ChapterFetchError,
    ChapterRangeError,
    ConcurrentSessionError,
    NoMatchingChaptersError,
    PageExtractionError,
    WriteUnauthorizedError,
    WriteFailedError,
    ScrapeStopped,
)
from .fetcher import FetchResult, PageFetcher
from .index_resolver import build_chapter_index, resolve_chapter_index
from .logging import logger, set_debug_level
from .models import (
    ChapterIndex,
    ChapterLink,
    ExtractedChapter,
    ProgressSnapshot,
    ScrapeSummary,
    SnapshotKind,
    Volume,
)
from .orchestrator import BatchScrapeOrchestrator
from .progress_channel import ProgressChannel, QueueObserver
from .session import ScrapeSession, ScrapeState
from .site_strategies import get_site_strategies
from .text_normalizer import clean_text, normalize_text
from .volume_assembler import VolumeAssembler, generate_filename
from .writers import DirectoryWriter, FallbackDownloader

__all__ = [
    # Text and extraction
    'normalize_text', 'clean_text', 'ContentExtractor', 'ExtractionResult', 'ExtractionStrategy',
    'extract_content', 'CONTENT_UNAVAILABLE', 'get_site_strategies',

    # Chapter index
    'resolve_chapter_index', 'build_chapter_index', 'parse_chapter_range', 'format_chapter_range',

    # Assembly and orchestration
    'VolumeAssembler', 'generate_filename', 'BatchScrapeOrchestrator', 'ProgressChannel',
    'QueueObserver', 'ScrapeSession', 'ScrapeState',

    # Collaborators
    'PageFetcher', 'FetchResult', 'DirectoryWriter', 'FallbackDownloader',

    # Data model
    'ChapterLink', 'ChapterIndex', 'ExtractedChapter', 'Volume', 'ProgressSnapshot',
    'SnapshotKind', 'ScrapeSummary',

    # Errors
    'ErrorCode', 'ScrapeError', 'EmptyIndexError', 'ChapterFetchError', 'ChapterRangeError',
    'ConcurrentSessionError', 'NoMatchingChaptersError', 'PageExtractionError', 'WriteUnauthorizedError',
    'WriteFailedError', 'ScrapeStopped',

    # Configuration and logging
    'ScrapeConfig', 'load_scrape_config', 'get_output_dir', 'get_downloads_dir',
    'show_config_status', 'logger', 'set_debug_level',
]
