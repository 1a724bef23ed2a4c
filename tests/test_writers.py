"""
Tests for the directory writer and the fallback downloader.
"""

import os

import pytest

from novelsaver.exceptions import ErrorCode, WriteFailedError
from novelsaver.writers import NO_DIR, DirectoryWriter, FallbackDownloader


class TestDirectoryWriter:
    def test_missing_directory_reports_no_dir(self, temp_test_dir):
        writer = DirectoryWriter(str(temp_test_dir / "gone"))
        assert writer.write("Book1-3.txt", "text") == {"success": False, "error": NO_DIR}

    def test_unconfigured_directory_reports_no_dir(self):
        assert DirectoryWriter(None).write("Book1-3.txt", "text")["error"] == NO_DIR

    def test_writes_into_subfolder(self, temp_test_dir):
        writer = DirectoryWriter(str(temp_test_dir))
        result = writer.write("novels/Book1-3.txt", "第1章\n\n正文")
        assert result["success"] is True
        written = temp_test_dir / "novels" / "Book1-3.txt"
        assert written.read_text(encoding="utf-8") == "第1章\n\n正文"

    def test_parent_references_stay_inside_base(self, temp_test_dir):
        base = temp_test_dir / "out"
        base.mkdir()
        DirectoryWriter(str(base)).write("../escape.txt", "x")
        assert (base / "escape.txt").exists()
        assert not (temp_test_dir / "escape.txt").exists()


class TestFallbackDownloader:
    def test_existing_names_are_not_overwritten(self, temp_test_dir):
        downloader = FallbackDownloader(str(temp_test_dir))
        first = downloader.download("one", "Book1-3.txt")
        second = downloader.download("two", "Book1-3.txt")

        assert first != second
        assert (temp_test_dir / "Book1-3.txt").read_text(encoding="utf-8") == "one"
        assert (temp_test_dir / "Book1-3 (1).txt").read_text(encoding="utf-8") == "two"
        assert downloader.downloads[second].endswith("Book1-3 (1).txt")

    def test_creates_missing_folders(self, temp_test_dir):
        downloader = FallbackDownloader(str(temp_test_dir / "downloads"))
        downloader.download("text", "novels/Book1-1.txt")
        assert os.path.isfile(temp_test_dir / "downloads" / "novels" / "Book1-1.txt")

    def test_unwritable_target_raises(self, temp_test_dir):
        blocker = temp_test_dir / "blocker"
        blocker.write_text("not a directory", encoding="utf-8")
        downloader = FallbackDownloader(str(blocker))
        with pytest.raises(WriteFailedError) as excinfo:
            downloader.download("text", "Book1-1.txt")
        assert excinfo.value.code is ErrorCode.WRITE_OTHER_FAILURE
