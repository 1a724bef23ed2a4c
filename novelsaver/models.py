"""Shared data types for novelsaver."""
from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum


@dataclass(frozen=True)
class ChapterLink:
    href: str
    display_text: str
    inferred_number: int | None   # best-effort parsed chapter ordinal
    sequence_index: int           # 1-based position in reading order


@dataclass(frozen=True)
class ChapterIndex:
    book_title: str
    links: tuple[ChapterLink, ...]

    def __len__(self):
        return len(self.links)


@dataclass(frozen=True)
class ExtractedChapter:
    source_link: ChapterLink
    title: str
    body: str
    extraction_succeeded: bool


@dataclass
class Volume:
    start_chapter_index: int
    accumulated_text: str = ""
    chapter_count: int = 0

    @property
    def end_chapter_index(self):
        return self.start_chapter_index + self.chapter_count - 1


class SnapshotKind(str, Enum):
    PROGRESS = "progress"
    COMPLETE = "complete"
    ERROR = "error"
    STOPPED = "stopped"


@dataclass(frozen=True)
class ProgressSnapshot:
    kind: SnapshotKind
    current: int = 0
    total: int = 0
    status_text: str = ""
    detail_text: str = ""
    book_title: str = ""
    paused: bool = False

    @property
    def is_terminal(self):
        return self.kind is not SnapshotKind.PROGRESS

    def to_message(self):
        """Observer wire format."""
        return {
            "type": self.kind.value,
            "current": self.current,
            "total": self.total,
            "status": self.status_text,
            "details": self.detail_text,
            "bookTitle": self.book_title,
            "paused": self.paused,
        }


@dataclass
class ScrapeSummary:
    """What a finished session produced; returned by the synchronous runners."""
    book_title: str
    outcome: SnapshotKind
    chapters_total: int = 0
    chapters_processed: int = 0
    failed_chapters: list[int] = field(default_factory=list)
    files_written: list[str] = field(default_factory=list)
    message: str = ""
