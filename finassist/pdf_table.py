"""Tabular PDF rendering and the lazily loaded PDF capability.

The renderer backend (reportlab) is imported on a background thread when a
page boots, so an export may start before it is ready.  The export pipeline
polls :meth:`PdfCapability.available` for a bounded time and falls back to a
text artifact when the backend never shows up.
"""

from __future__ import annotations

import io
import json
import logging
import threading
from typing import Any, Callable, Iterable, List, Mapping, Optional, Sequence, Tuple

logger = logging.getLogger(__name__)

LEFT_MARGIN = 40
TOP_MARGIN = 40
BOTTOM_RESERVE = 60
TITLE_FONT_SIZE = 14
BODY_FONT_SIZE = 10
TITLE_STEP = 20
HEADER_STEP = 16
ROW_STEP = 14
MIN_COLUMN_WIDTH = 60
MAX_COLUMNS = 6
HEADER_CHARS = 18
CELL_CHARS = 30
CELL_KEEP_CHARS = 27


class ReportlabBackend:
    """Canvas factory and page size taken from reportlab."""

    def __init__(self) -> None:
        from reportlab.lib.pagesizes import A4
        from reportlab.pdfgen import canvas

        self.pagesize: Tuple[float, float] = A4
        self._canvas = canvas

    def new_canvas(self, buffer: io.BytesIO) -> Any:
        return self._canvas.Canvas(buffer, pagesize=self.pagesize)


class PdfCapability:
    """Holds the PDF backend once it has been loaded."""

    def __init__(self, loader: Optional[Callable[[], Any]] = ReportlabBackend) -> None:
        self._loader = loader
        self._thread: Optional[threading.Thread] = None
        self.backend: Any = None

    @classmethod
    def ready(cls, backend: Any) -> "PdfCapability":
        capability = cls(loader=None)
        capability.backend = backend
        return capability

    @classmethod
    def unavailable(cls) -> "PdfCapability":
        return cls(loader=None)

    def available(self) -> bool:
        return self.backend is not None

    def load_in_background(self) -> None:
        """Start loading the backend unless it is loaded or already loading."""
        if self.backend is not None or self._loader is None or self._thread is not None:
            return
        self._thread = threading.Thread(target=self._load, name="pdf-capability", daemon=True)
        self._thread.start()

    def load(self) -> bool:
        """Load the backend on the calling thread."""
        if self.backend is None and self._loader is not None:
            self._load()
        return self.available()

    def _load(self) -> None:
        try:
            self.backend = self._loader()
        except Exception as exc:
            logger.warning("PDF backend failed to load: %s", exc)


def cell_text(value: Any) -> str:
    """Coerce a record value to display text."""
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (list, dict)):
        return json.dumps(value, separators=(",", ":"), ensure_ascii=False)
    return str(value)


def clip(text: str) -> str:
    if len(text) > CELL_CHARS:
        return text[:CELL_KEEP_CHARS] + "..."
    return text


def table_columns(records: Sequence[Mapping[str, Any]]) -> List[str]:
    return list(records[0].keys())[:MAX_COLUMNS]


def render_table_pdf(records: Sequence[Mapping[str, Any]], title: str, backend: Any) -> bytes:
    """Draw ``records`` as a paginated table and return the PDF bytes.

    ``backend`` needs ``pagesize`` and ``new_canvas(buffer)``; the canvas is
    driven through the reportlab canvas API (``setFont``, ``drawString``,
    ``showPage``, ``save``).  The cursor ``y`` is measured from the top of the
    page and flipped when drawing.
    """
    page_width, page_height = backend.pagesize
    buffer = io.BytesIO()
    pdf = backend.new_canvas(buffer)

    def draw(text: str, x: float, y: float) -> None:
        pdf.drawString(x, page_height - y, text)

    y = TOP_MARGIN
    pdf.setFont("Helvetica", TITLE_FONT_SIZE)
    draw(title, LEFT_MARGIN, y)
    y += TITLE_STEP

    keys = table_columns(records)
    usable_width = page_width - LEFT_MARGIN * 2
    col_width = max(MIN_COLUMN_WIDTH, usable_width / max(len(keys), 1))
    bottom = page_height - BOTTOM_RESERVE

    pdf.setFont("Helvetica-Bold", BODY_FONT_SIZE)
    for idx, key in enumerate(keys):
        draw(str(key)[:HEADER_CHARS], LEFT_MARGIN + idx * col_width, y)
    pdf.setFont("Helvetica", BODY_FONT_SIZE)
    y += HEADER_STEP

    for row in records:
        if y > bottom:
            pdf.showPage()
            pdf.setFont("Helvetica", BODY_FONT_SIZE)
            y = TOP_MARGIN
        for idx, key in enumerate(keys):
            draw(clip(cell_text(_get(row, key))), LEFT_MARGIN + idx * col_width, y)
        y += ROW_STEP

    pdf.save()
    return buffer.getvalue()


def _get(row: Any, key: str) -> Any:
    if isinstance(row, Mapping):
        return row.get(key)
    return None


def page_count(rows: Iterable[Any], page_height: float) -> int:
    """Number of pages the table layout needs for ``rows``."""
    pages = 1
    y = TOP_MARGIN + TITLE_STEP + HEADER_STEP
    bottom = page_height - BOTTOM_RESERVE
    for _ in rows:
        if y > bottom:
            pages += 1
            y = TOP_MARGIN
        y += ROW_STEP
    return pages
