"""
Batch scrape orchestration.

One session at a time: a request is accepted only while the session is idle,
runs on a background worker thread, and reports every step through the
ProgressChannel. Chapters are fetched in batches on a thread pool; results
are consumed in index order so volumes always hold consecutive chapters.

State machine:
    IDLE -> RESOLVING -> FETCHING <-> PAUSED -> COMPLETING -> COMPLETED
    any active state -> STOPPED | FAILED
    every terminal state resets to IDLE.

save_page() is the single-page flow: one chapter page extracted and saved
as its own file, outside the session state machine.
"""
import random
import threading
from concurrent.futures import ThreadPoolExecutor

from .config import get_downloads_dir, load_scrape_config
from .chapter_ranges import format_chapter_range
from .content_extractor import DEFAULT_TITLE, ContentExtractor
from .debug_helpers import save_failed_html
from .exceptions import (
    ChapterFetchError,
    ConcurrentSessionError,
    NoMatchingChaptersError,
    PageExtractionError,
    ScrapeError,
    ScrapeStopped,
    WriteUnauthorizedError,
)
from .fetcher import PageFetcher
from .index_resolver import resolve_chapter_index
from .logging import logger
from .models import ExtractedChapter, ProgressSnapshot, ScrapeSummary, SnapshotKind
from .progress_channel import ProgressChannel
from .session import ScrapeSession, ScrapeState
from .site_strategies import get_site_strategies
from .text_normalizer import clean_text
from .volume_assembler import VolumeAssembler, generate_filename
from .writers import AUTHORIZATION_ERRORS, FallbackDownloader

SCRAPE_BOOK = "scrapeBook"
SCRAPE_RANGE = "scrapeRange"
RETRY_BACKOFF_MS = 1000
UNAUTHORIZED_MESSAGE = ("The output directory is missing or no longer authorized. "
                        "Choose the output directory again, then restart the scrape.")


class BatchScrapeOrchestrator:
    """Drives a scrape session from directory page to written volumes.

    Args:
        fetcher: object with fetch(url, timeout) -> FetchResult.
        writer: DirectoryWriter-like object, or None when no output
            directory is configured (volumes then go to the downloader).
        downloader: FallbackDownloader-like object.
        config: ScrapeConfig; clamped to its documented bounds.
    """

    def __init__(self, fetcher=None, writer=None, downloader=None, config=None,
                 extractor=None, session=None):
        self.session = session or ScrapeSession()
        self.channel = ProgressChannel(self.session)
        self.config = (config or load_scrape_config()).clamped()
        self.fetcher = fetcher or PageFetcher()
        self.writer = writer
        self.downloader = downloader or FallbackDownloader(get_downloads_dir())
        self.extractor = extractor or ContentExtractor(site_strategy_lookup=get_site_strategies)
        self.retry_backoff_ms = RETRY_BACKOFF_MS
        self.last_summary = None
        self._worker = None
        self._directory_disabled = False

    # --- entry points ----------------------------------------------------

    def scrape_book(self, page_url, page_html=None):
        """Start scraping every chapter listed on page_url; returns immediately."""
        return self._start(SCRAPE_BOOK, self._scrape_book, page_url, page_html)

    def scrape_chapters(self, page_url, chapter_numbers, page_html=None):
        """Start scraping only the given chapter numbers into one merged file."""
        return self._start(SCRAPE_RANGE, self._scrape_range, page_url, list(chapter_numbers), page_html)

    def run_book(self, page_url, page_html=None):
        """Synchronous scrape_book; returns the ScrapeSummary.

        Raises:
            ConcurrentSessionError: when another session is running.
        """
        self._claim(SCRAPE_BOOK)
        return self._execute(self._scrape_book, page_url, page_html)

    def run_chapters(self, page_url, chapter_numbers, page_html=None):
        self._claim(SCRAPE_RANGE)
        return self._execute(self._scrape_range, page_url, list(chapter_numbers), page_html)

    def save_page(self, page_url, page_html=None):
        """Extract a single chapter page and save it as "{title}.txt".

        Runs synchronously and independently of any scrape session. The file
        holds the title, the page URL and the body. Unlike volume writes, an
        unusable output directory falls back to the downloader.

        Returns:
            The filename the page was saved under.

        Raises:
            ChapterFetchError: the page could not be fetched.
            PageExtractionError: no usable body was found.
            WriteFailedError: the downloader could not save the file.
        """
        if page_html is None:
            result = self.fetcher.fetch(page_url, timeout=self.config.timeout_ms / 1000.0)
            if not result.ok:
                raise ChapterFetchError(f"HTTP {result.status} for {page_url}")
            page_html = result.html

        extraction = self.extractor.extract(page_html, DEFAULT_TITLE, url=page_url)
        if not extraction.succeeded:
            raise PageExtractionError(f"No chapter content found on {page_url}")

        should_clean = self.config.clean_empty_lines
        title = clean_text(extraction.title, should_clean) or DEFAULT_TITLE
        text = clean_text(f"{title}\n\n{page_url}\n\n{extraction.body}", should_clean)
        filename = generate_filename(f"{title}.txt", self.config.download_path)

        logger.info(f"[ORCHESTRATOR] Saving single page '{title}' from {page_url} ({extraction.strategy})")
        self._persist(filename, text, fallback_when_unauthorized=True)
        return filename

    def wait(self, timeout=None):
        """Block until the background session finishes. True if it has."""
        worker = self._worker
        if worker is None:
            return True
        worker.join(timeout)
        return not worker.is_alive()

    @property
    def is_running(self):
        return self.session.running

    def toggle_pause(self):
        self.channel.receive({"action": "togglePause"})

    def request_stop(self):
        self.channel.receive({"action": "stop"})

    # --- session plumbing ------------------------------------------------

    def _claim(self, task):
        if not self.session.try_begin(task):
            logger.warning(f"[ORCHESTRATOR] Rejected '{task}': a scrape is already running")
            raise ConcurrentSessionError("A scrape task is already running")
        self._directory_disabled = False

    def _start(self, task, body, *args):
        try:
            self._claim(task)
        except ConcurrentSessionError as e:
            return {"success": False, "started": False, "error": e.code.value, "message": e.message}

        self._worker = threading.Thread(target=self._execute, args=(body, *args),
                                        name=f"novel-saver-{task}", daemon=True)
        self._worker.start()
        return {"success": True, "started": True}

    def _execute(self, body, *args):
        summary = ScrapeSummary(book_title="", outcome=SnapshotKind.PROGRESS)
        try:
            body(summary, *args)
            summary.outcome = SnapshotKind.COMPLETE
            self.session.transition(ScrapeState.COMPLETED)
            self.channel.publish(ProgressSnapshot(
                SnapshotKind.COMPLETE, summary.chapters_processed, summary.chapters_total,
                "Complete", summary.message, summary.book_title))
        except ScrapeStopped:
            logger.info("[ORCHESTRATOR] Scrape stopped by user")
            summary.outcome = SnapshotKind.STOPPED
            summary.message = (f"Stopped after {summary.chapters_processed}/{summary.chapters_total} chapters; "
                               f"the unfinished volume was discarded")
            self.session.transition(ScrapeState.STOPPED)
            self.channel.publish(ProgressSnapshot(
                SnapshotKind.STOPPED, summary.chapters_processed, summary.chapters_total,
                "Stopped", summary.message, summary.book_title))
        except ScrapeError as e:
            logger.error(f"[ORCHESTRATOR] Scrape failed ({e.code.value}): {e}")
            self._fail(summary, str(e))
        except Exception as e:
            logger.exception(f"[ORCHESTRATOR] Unexpected failure: {e}")
            self._fail(summary, f"Scrape failed: {e}")
        finally:
            self.session.reset()
            self.last_summary = summary
        return summary

    def _fail(self, summary, message):
        summary.outcome = SnapshotKind.ERROR
        summary.message = message
        self.session.transition(ScrapeState.FAILED)
        self.channel.publish(ProgressSnapshot(
            SnapshotKind.ERROR, summary.chapters_processed, summary.chapters_total,
            "Error", message, summary.book_title))

    def _report(self, current, total, status, detail="", book_title=""):
        self.channel.publish(ProgressSnapshot(
            SnapshotKind.PROGRESS, current, total, status, detail, book_title, self.session.paused))

    # --- session bodies --------------------------------------------------

    def _resolve(self, page_url, page_html):
        self._report(0, 0, "Reading chapter list", page_url)
        if page_html is None:
            result = self._fetch_with_retry(page_url)
            page_html = result.html
        self.session.check_stop()
        index = resolve_chapter_index(page_html, page_url)
        self.session.transition(ScrapeState.PAUSED if self.session.paused else ScrapeState.FETCHING)
        return index

    def _scrape_book(self, summary, page_url, page_html=None):
        index = self._resolve(page_url, page_html)
        summary.book_title = index.book_title
        assembler = VolumeAssembler(index.book_title, self.config.volume_size, self._persist,
                                    clean_empty_lines=self.config.clean_empty_lines,
                                    download_path=self.config.download_path)
        self._scrape_links(summary, list(index.links), assembler)
        summary.message = (f"《{index.book_title}》 finished: {summary.chapters_processed} chapters in "
                           f"{len(summary.files_written)} volume(s), {len(summary.failed_chapters)} failed")

    def _scrape_range(self, summary, page_url, chapter_numbers, page_html=None):
        index = self._resolve(page_url, page_html)
        summary.book_title = index.book_title
        wanted = set(chapter_numbers)
        selected = [
            link for link in index.links
            if (link.inferred_number in wanted if link.inferred_number is not None
                else link.sequence_index in wanted)
        ]
        if not selected:
            raise NoMatchingChaptersError(self._no_match_message(index))

        range_label = format_chapter_range(chapter_numbers)
        assembler = VolumeAssembler(index.book_title, len(selected), self._persist,
                                    clean_empty_lines=self.config.clean_empty_lines,
                                    download_path=self.config.download_path,
                                    name_volume=lambda book, _start, _end: f"{book}_第{range_label}章.txt")
        self._scrape_links(summary, selected, assembler)
        summary.message = (f"《{index.book_title}》 chapters {range_label} finished: "
                           f"{summary.chapters_processed} chapters merged, {len(summary.failed_chapters)} failed")

    @staticmethod
    def _no_match_message(index):
        numbers = sorted(link.inferred_number for link in index.links if link.inferred_number is not None)
        if numbers:
            shown = ", ".join(str(n) for n in numbers[:10])
            more = "..." if len(numbers) > 10 else ""
            return f"None of the requested chapters were found. Available chapter numbers: {shown}{more} ({len(numbers)} chapters)"
        return f"None of the requested chapters were found. The book has {len(index.links)} chapters."

    def _scrape_links(self, summary, links, assembler):
        total = len(links)
        book_title = assembler.book_title
        summary.chapters_total = total
        batch_size = self.config.batch_size
        total_batches = (total + batch_size - 1) // batch_size
        logger.info(f"[ORCHESTRATOR] '{book_title}': {total} chapters, {total_batches} batches, "
                    f"batch_size={batch_size} volume_size={assembler.volume_size} "
                    f"concurrency={self.config.concurrency}")
        self._report(0, total, "Starting scrape", f"Found {total} chapters", book_title)

        try:
            for batch_number, start in enumerate(range(0, total, batch_size), start=1):
                self.session.check_stop()
                batch = links[start:start + batch_size]
                logger.component(f"[ORCHESTRATOR] Batch {batch_number}/{total_batches} ({len(batch)} chapters)")
                self._report(start, total, f"Batch {batch_number}/{total_batches}",
                             f"Fetching chapters {start + 1}-{start + len(batch)}", book_title)
                self._run_batch(summary, batch, start, assembler)

            self.session.check_stop()
            self.session.transition(ScrapeState.COMPLETING)
            self._report(total, total, "Writing last volume", "", book_title)
            filename = assembler.finish()
            if filename:
                summary.files_written.append(filename)
        except ScrapeStopped:
            assembler.discard()
            raise

    def _run_batch(self, summary, batch, start, assembler):
        total = summary.chapters_total
        workers = max(1, min(self.config.concurrency, len(batch)))
        generation = self.session.generation
        pool = ThreadPoolExecutor(max_workers=workers, thread_name_prefix="novel-fetch")
        try:
            futures = [pool.submit(self._scrape_chapter, link, start + offset + 1, generation)
                       for offset, link in enumerate(batch)]
            for offset, future in enumerate(futures):
                chapter = future.result()
                self.session.check_stop()
                position = start + offset + 1
                if not chapter.extraction_succeeded:
                    summary.failed_chapters.append(position)

                filename = assembler.append(chapter, position)
                if filename:
                    summary.files_written.append(filename)
                summary.chapters_processed = position
                self._report(position, total, f"Chapter {position}/{total}",
                             f"Processed: {chapter.title}", assembler.book_title)
        finally:
            # Queued chapters are dropped; in-flight fetches finish on their own
            pool.shutdown(wait=False, cancel_futures=True)

    # --- per-chapter work (runs on pool threads) -------------------------

    def _scrape_chapter(self, link, position, generation=None):
        self.session.check_stop(generation)
        self.session.wait_if_paused(generation)
        fallback_title = link.display_text or f"Chapter {position}"

        try:
            result = self._fetch_with_retry(link.href, generation)
            extraction = self.extractor.extract(result.html, fallback_title, url=link.href)
            if not extraction.succeeded and self.config.save_failed_pages:
                save_failed_html(result.html, link.href)
            chapter = ExtractedChapter(link, extraction.title, extraction.body, extraction.succeeded)
        except ChapterFetchError as e:
            logger.error(f"[ORCHESTRATOR] Chapter {position} failed ({e.code.value}): {e}")
            chapter = ExtractedChapter(link, fallback_title, f"[Scrape failed: {e}]", False)

        self._pace(generation)
        return chapter

    def _fetch_with_retry(self, url, generation=None):
        attempts = self.config.retry_times + 1
        timeout = self.config.timeout_ms / 1000.0
        last_error = None
        for attempt in range(1, attempts + 1):
            self.session.check_stop(generation)
            try:
                result = self.fetcher.fetch(url, timeout=timeout)
                if result.ok:
                    return result
                last_error = ChapterFetchError(f"HTTP {result.status} for {url}")
            except ChapterFetchError as e:
                last_error = e
            logger.warning(f"[FETCH] Attempt {attempt}/{attempts} failed for {url}: {last_error}")
            if attempt < attempts:
                self.session.wait_with_control(self.retry_backoff_ms * attempt, generation)
        raise last_error

    def _pace(self, generation=None):
        delay = self.config.request_delay
        if self.config.jitter_max > 0:
            delay += random.uniform(self.config.jitter_min, self.config.jitter_max)
        self.session.wait_with_control(delay, generation)

    # --- persistence -----------------------------------------------------

    def _persist(self, filename, text, fallback_when_unauthorized=False):
        """Write a finished volume or saved page; runs without holding session or channel locks."""
        if self.writer is not None and not self._directory_disabled:
            result = self.writer.write(filename, text)
            if result.get("success"):
                return
            if result.get("error") in AUTHORIZATION_ERRORS and not fallback_when_unauthorized:
                self._directory_disabled = True
                raise WriteUnauthorizedError(UNAUTHORIZED_MESSAGE)
            logger.warning(f"[ORCHESTRATOR] Directory write failed ({result.get('error')}), "
                           f"falling back to downloads for {filename}")
        download_id = self.downloader.download(text, filename)
        logger.debug(f"[ORCHESTRATOR] {filename} saved through downloader (id={download_id})")
