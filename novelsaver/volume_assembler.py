"""
Accumulates extracted chapters into bounded-size text volumes.

A volume is handed to the flush callable as soon as it holds volume_size
chapters, so a crash mid-book loses at most one volume of work.
"""
import re

from .logging import logger
from .models import Volume
from .text_normalizer import clean_text

UNSAFE_FILENAME_CHARS = re.compile(r'[\\/:*?"<>|]+')


def sanitize_filename(name):
    return UNSAFE_FILENAME_CHARS.sub("_", name)


def generate_filename(base_name, download_path=""):
    """Sanitized filename, placed under the download_path subfolder when one is set."""
    safe_name = sanitize_filename(base_name)
    if download_path and download_path.strip():
        return f"{sanitize_filename(download_path.strip())}/{safe_name}"
    return safe_name


def default_volume_name(book_title, start, end):
    return f"{book_title}{start}-{end}.txt"


class VolumeAssembler:
    """Owns the active Volume and decides when it is flushed.

    Args:
        book_title: written once at the top of every volume.
        volume_size: chapters per volume; a volume flushes when it reaches it.
        flush: callable(filename, text) that persists a finished volume.
        name_volume: callable(book_title, start, end) -> base filename.
    """

    def __init__(self, book_title, volume_size, flush, clean_empty_lines=True,
                 download_path="", name_volume=default_volume_name):
        if volume_size < 1:
            raise ValueError(f"volume_size must be at least 1, got {volume_size}")
        self.book_title = book_title or "book"
        self.volume_size = volume_size
        self.flush = flush
        self.clean_empty_lines = clean_empty_lines
        self.download_path = download_path
        self.name_volume = name_volume
        self.volume = None
        self.flushed_files = []

    def append(self, chapter, position):
        """Add a chapter at 1-based position; returns the flushed filename, if any."""
        if self.volume is None or self.volume.chapter_count == 0:
            self.volume = Volume(start_chapter_index=position,
                                 accumulated_text=f"{self.book_title}\n\n")

        title = clean_text(chapter.title, self.clean_empty_lines)
        body = clean_text(chapter.body, self.clean_empty_lines)
        self.volume.accumulated_text += f"{title}\n\n{body}\n\n"
        self.volume.chapter_count += 1

        if self.volume.chapter_count >= self.volume_size:
            return self._flush_volume()
        return None

    def finish(self):
        """Flush the trailing partial volume, if it holds any chapter."""
        if self.volume is None or self.volume.chapter_count == 0:
            return None
        return self._flush_volume()

    def discard(self):
        """Drop the partial volume without writing it."""
        if self.volume is not None and self.volume.chapter_count:
            logger.info(f"[VOLUME] Discarding partial volume of {self.volume.chapter_count} chapters "
                        f"starting at {self.volume.start_chapter_index}")
        self.volume = None

    @property
    def pending_chapters(self):
        return self.volume.chapter_count if self.volume else 0

    def _flush_volume(self):
        volume = self.volume
        start, end = volume.start_chapter_index, volume.end_chapter_index
        filename = generate_filename(self.name_volume(self.book_title, start, end), self.download_path)
        text = clean_text(volume.accumulated_text, self.clean_empty_lines)

        logger.info(f"[VOLUME] Flushing chapters {start}-{end} to {filename} ({len(text)} chars)")
        self.flush(filename, text)

        # Reset only after the writer accepted the volume
        self.volume = None
        self.flushed_files.append(filename)
        return filename
