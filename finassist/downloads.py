"""Export artifacts, download sinks and user-facing notices."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional, Tuple

from .config import DOWNLOAD_DIR

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Download:
    filename: str
    content: bytes
    mime: str

    def text(self, encoding: str = "utf-8") -> str:
        return self.content.decode(encoding)


class MemoryDownloader:
    """Keeps delivered artifacts in memory."""

    def __init__(self) -> None:
        self.downloads: List[Download] = []

    def deliver(self, download: Download) -> None:
        self.downloads.append(download)


class DirectoryDownloader:
    """Writes artifacts into a directory, like a browser's download folder."""

    def __init__(self, directory: Optional[Path] = None) -> None:
        self.directory = Path(directory) if directory is not None else DOWNLOAD_DIR
        self.written: List[Path] = []

    def deliver(self, download: Download) -> None:
        self.directory.mkdir(parents=True, exist_ok=True)
        # Only the base name is honoured.
        target = self.directory / Path(download.filename).name
        target.write_bytes(download.content)
        self.written.append(target)
        logger.info("Saved %s (%d bytes)", target, len(download.content))


class LoggingNotifier:
    """Records notices and mirrors them to the log."""

    _LEVELS = {
        "info": logging.INFO,
        "warning": logging.WARNING,
        "error": logging.ERROR,
    }

    def __init__(self) -> None:
        self.notices: List[Tuple[str, str]] = []

    def notify(self, message: str, level: str = "info") -> None:
        self.notices.append((level, message))
        logger.log(self._LEVELS.get(level, logging.INFO), "Notice: %s", message)

    @property
    def messages(self) -> List[str]:
        return [message for _, message in self.notices]


def swap_extension(filename: str, extension: str) -> str:
    """Replace a trailing ``.pdf`` with ``extension``, or append it."""
    if filename.lower().endswith(".pdf"):
        return filename[:-4] + extension
    return filename + extension
