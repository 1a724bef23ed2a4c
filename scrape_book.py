#!/usr/bin/env python3
"""
Scrape a serialized novel from its chapter list page into text volumes.

Examples:
  # Whole book, volumes of 100 chapters into ./output:
  python scrape_book.py "https://example.com/book/123/" --output-dir output

  # Only chapters 1-3 and 7, merged into one file:
  python scrape_book.py "https://example.com/book/123/" --chapters 1-3,7

  # Just the chapter page at this URL, saved as "<title>.txt":
  python scrape_book.py "https://example.com/book/123/45.html" --single

Press Ctrl+C once to stop; the unfinished volume is discarded.
"""

import argparse
import sys

from novelsaver import (
    BatchScrapeOrchestrator,
    ChapterRangeError,
    ScrapeError,
    DirectoryWriter,
    FallbackDownloader,
    QueueObserver,
    get_downloads_dir,
    get_output_dir,
    load_scrape_config,
    parse_chapter_range,
    set_debug_level,
    show_config_status,
)

TERMINAL_TYPES = {"complete", "error", "stopped"}


def parse_args(argv=None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Scrape novel chapters from a directory page into text volumes",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=__doc__,
    )
    parser.add_argument("url", help="URL of the book's chapter list (table of contents) page")
    parser.add_argument("--chapters", metavar="RANGE", default=None,
                        help="Only scrape these chapter numbers, e.g. '1-3,7'")
    parser.add_argument("--single", action="store_true",
                        help="Treat the URL as one chapter page and save just that page")
    parser.add_argument("--output-dir", metavar="DIR", default=None,
                        help="Directory to write volumes into (default: NOVEL_SAVER_OUTPUT_DIR / config.json)")
    parser.add_argument("--downloads-dir", metavar="DIR", default=None,
                        help="Fallback folder when the output directory cannot be used")
    parser.add_argument("--volume-size", type=int, default=None, help="Chapters per volume (1-1000)")
    parser.add_argument("--batch-size", type=int, default=None, help="Chapters per fetch batch (1-100)")
    parser.add_argument("--request-delay", type=int, default=None, help="Delay after each chapter in ms (50-5000)")
    parser.add_argument("--concurrency", type=int, default=None, help="Parallel fetches per batch")
    parser.add_argument("--subfolder", dest="download_path", default=None,
                        help="Subfolder name for the written volumes")
    parser.add_argument("--no-clean", dest="clean_empty_lines", action="store_false", default=None,
                        help="Keep the text's original blank lines")
    parser.add_argument("--debug-level", default=None,
                        choices=["ERROR", "WARNING", "INFO", "COMPONENT", "DEBUG", "TRACE"])
    return parser.parse_args(argv)


def format_message(message):
    kind = message.get("type")
    if kind == "progress":
        total = message.get("total") or 0
        counter = f"[{message.get('current', 0)}/{total}] " if total else ""
        paused = " (paused)" if message.get("paused") else ""
        return f"{counter}{message.get('status', '')}{paused} {message.get('details', '')}".rstrip()
    return f"[{kind.upper()}] {message.get('details', '')}"


def build_orchestrator(args):
    overrides = {
        key: value for key, value in vars(args).items()
        if key in ("volume_size", "batch_size", "request_delay", "concurrency",
                   "download_path", "clean_empty_lines") and value is not None
    }
    config = load_scrape_config(overrides)
    output_dir = args.output_dir or get_output_dir()
    writer = DirectoryWriter(output_dir) if output_dir else None
    downloader = FallbackDownloader(args.downloads_dir or get_downloads_dir())
    print(show_config_status(config))
    return BatchScrapeOrchestrator(writer=writer, downloader=downloader, config=config)


def save_single_page(orchestrator, url):
    try:
        filename = orchestrator.save_page(url)
    except ScrapeError as e:
        print(f"ERROR: {e}")
        return 1
    print(f"Saved {filename}")
    return 0


def main(argv=None):
    args = parse_args(argv)
    if args.debug_level:
        set_debug_level(args.debug_level)

    chapters = None
    if args.chapters:
        try:
            chapters = parse_chapter_range(args.chapters)
        except ChapterRangeError as e:
            print(f"ERROR: {e}")
            return 2

    orchestrator = build_orchestrator(args)
    if args.single:
        return save_single_page(orchestrator, args.url)

    observer = QueueObserver()
    orchestrator.channel.connect(observer)

    if chapters:
        response = orchestrator.scrape_chapters(args.url, chapters)
    else:
        response = orchestrator.scrape_book(args.url)
    if not response["success"]:
        print(f"ERROR: {response.get('message')}")
        return 1

    final = None
    while final is None:
        try:
            message = observer.get(timeout=0.5)
            if message is None:
                if not orchestrator.is_running and orchestrator.wait(0):
                    break
                continue
            print(format_message(message))
            if message.get("type") in TERMINAL_TYPES:
                final = message
        except KeyboardInterrupt:
            print("\nStopping...")
            orchestrator.request_stop()

    orchestrator.wait()
    if final is None or final["type"] != "complete":
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
