"""Shared fixtures: in-memory stores, page runtimes and a recording PDF backend."""

from __future__ import annotations

import io
import sys
from pathlib import Path

import pytest

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from finassist.downloads import LoggingNotifier, MemoryDownloader
from finassist.pdf_table import PdfCapability
from finassist.runtime import PageRuntime
from finassist.storage import KeyValueStore


class RecordingCanvas:
    """Stands in for a reportlab canvas and records what gets drawn."""

    def __init__(self, buffer: io.BytesIO) -> None:
        self.buffer = buffer
        self.page = 1
        self.fonts = []
        self.strings = []  # (page, x, y, text)

    def setFont(self, name, size):
        self.fonts.append((name, size))

    def drawString(self, x, y, text):
        self.strings.append((self.page, x, y, text))

    def showPage(self):
        self.page += 1

    def save(self):
        self.buffer.write(b"%PDF-recorded")


class RecordingBackend:
    pagesize = (595.0, 842.0)

    def __init__(self) -> None:
        self.canvases = []

    def new_canvas(self, buffer):
        canvas = RecordingCanvas(buffer)
        self.canvases.append(canvas)
        return canvas


class BrokenBackend:
    pagesize = (595.0, 842.0)

    def new_canvas(self, buffer):
        raise RuntimeError("renderer crashed")


class FailingDownloader:
    def deliver(self, download):
        raise OSError("disk full")


@pytest.fixture
def store():
    return KeyValueStore()


@pytest.fixture
def recording_backend():
    return RecordingBackend()


@pytest.fixture
def broken_backend():
    return BrokenBackend()


@pytest.fixture
def failing_downloader():
    return FailingDownloader()


@pytest.fixture
def make_runtime(store):
    """Factory for page runtimes sharing the ``store`` fixture."""

    def factory(**overrides):
        options = {
            "store": store,
            "notifier": LoggingNotifier(),
            "downloader": MemoryDownloader(),
            "capability": PdfCapability.unavailable(),
            "pdf_wait_timeout": 0.01,
            "pdf_wait_interval": 0.001,
        }
        options.update(overrides)
        return PageRuntime(**options)

    return factory
