"""
Durable output for finished volumes.

DirectoryWriter writes into a user-chosen directory and reports NO_DIR /
NO_PERMISSION when that directory is unusable. FallbackDownloader saves into
a downloads folder and is used for every other write failure.
"""
import itertools
import os
import threading

from .exceptions import WriteFailedError
from .logging import logger

NO_DIR = "NO_DIR"
NO_PERMISSION = "NO_PERMISSION"
AUTHORIZATION_ERRORS = (NO_DIR, NO_PERMISSION)


def _resolve_inside(base_dir, relative_path):
    parts = [part for part in relative_path.replace("\\", "/").split("/") if part not in ("", ".", "..")]
    return os.path.join(base_dir, *parts)


class DirectoryWriter:
    """Writes text files under base_dir, creating subfolders as needed."""

    def __init__(self, base_dir):
        self.base_dir = base_dir

    def write(self, relative_path, text):
        """Returns {"success": True} or {"success": False, "error": <reason>}."""
        if not self.base_dir or not os.path.isdir(self.base_dir):
            logger.warning(f"[WRITER] Output directory missing: {self.base_dir!r}")
            return {"success": False, "error": NO_DIR}
        if not os.access(self.base_dir, os.W_OK):
            logger.warning(f"[WRITER] No write permission for {self.base_dir}")
            return {"success": False, "error": NO_PERMISSION}

        target = _resolve_inside(self.base_dir, relative_path)
        try:
            os.makedirs(os.path.dirname(target), exist_ok=True)
            with open(target, 'w', encoding='utf-8') as f:
                f.write(text)
        except PermissionError as e:
            logger.error(f"[WRITER] Permission denied writing {target}: {e}")
            return {"success": False, "error": NO_PERMISSION}
        except OSError as e:
            logger.error(f"[WRITER] Failed to write {target}: {e}")
            return {"success": False, "error": str(e)}

        logger.info(f"[WRITER] Wrote {target}")
        return {"success": True, "path": target}


class FallbackDownloader:
    """Saves data into downloads_dir, never overwriting an existing file."""

    def __init__(self, downloads_dir):
        self.downloads_dir = downloads_dir
        self._ids = itertools.count(1)
        self._lock = threading.Lock()
        self.downloads = {}

    def _uniquify(self, path):
        if not os.path.exists(path):
            return path
        stem, ext = os.path.splitext(path)
        for n in itertools.count(1):
            candidate = f"{stem} ({n}){ext}"
            if not os.path.exists(candidate):
                return candidate

    def download(self, data, filename):
        """Save data under filename and return a download id.

        Raises:
            WriteFailedError: when the file cannot be written.
        """
        with self._lock:
            target = self._uniquify(_resolve_inside(self.downloads_dir, filename))
            try:
                os.makedirs(os.path.dirname(target), exist_ok=True)
                with open(target, 'w', encoding='utf-8') as f:
                    f.write(data)
            except OSError as e:
                raise WriteFailedError(f"Download failed for {filename}: {e}") from e
            download_id = next(self._ids)
            self.downloads[download_id] = target

        logger.info(f"[DOWNLOAD] Saved {target} (id={download_id})")
        return download_id
