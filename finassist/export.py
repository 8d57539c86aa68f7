"""Export stored record collections to PDF, JSON text or CSV.

``export_list_as_pdf`` always tries to leave the user with some artifact:
a PDF when the renderer is loaded in time, the raw JSON as text when it is
not, and a CSV when rendering itself fails.  Problems are reported through
the page's notifier; nothing is raised to the caller.
"""

from __future__ import annotations

import asyncio
import json
import logging
import time
from typing import TYPE_CHECKING, Any, Awaitable, Callable, Mapping, Sequence

from .config import PDF_WAIT_INTERVAL, PDF_WAIT_TIMEOUT
from .downloads import Download, swap_extension
from .pdf_table import cell_text, page_count, render_table_pdf
from .storage import read_collection

if TYPE_CHECKING:  # pragma: no cover
    from .runtime import PageRuntime

logger = logging.getLogger(__name__)

TEXT_MIME = "text/plain;charset=utf-8"
CSV_MIME = "text/csv;charset=utf-8"
PDF_MIME = "application/pdf"


async def wait_for(
    condition: Callable[[], bool],
    timeout: float = PDF_WAIT_TIMEOUT,
    interval: float = PDF_WAIT_INTERVAL,
    clock: Callable[[], float] = time.monotonic,
    sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
) -> bool:
    """Poll ``condition`` until it holds or ``timeout`` seconds pass.

    Returns ``False`` on timeout and when the condition raises.
    """
    start = clock()
    while True:
        try:
            if condition():
                return True
        except Exception:
            logger.debug("Readiness check raised", exc_info=True)
            return False
        if clock() - start > timeout:
            return False
        await sleep(interval)


def build_csv(records: Sequence[Mapping[str, Any]], header: Sequence[str]) -> str:
    lines = [",".join(str(h) for h in header)]
    for record in records:
        cells = []
        for key in header:
            value = record.get(key) if isinstance(record, Mapping) else None
            cells.append('"' + cell_text(value).replace('"', '""') + '"')
        lines.append(",".join(cells))
    return "\n".join(lines)


def download_array_as_csv(
    records: Sequence[Mapping[str, Any]],
    filename: str,
    header: Sequence[str],
    runtime: "PageRuntime",
) -> None:
    if not records:
        runtime.notifier.notify("No data", level="warning")
        return
    payload = build_csv(records, header).encode("utf-8")
    runtime.downloader.deliver(Download(filename, payload, CSV_MIME))


def _deliver_text_fallback(records: Sequence[Any], filename: str, runtime: "PageRuntime") -> None:
    try:
        text = json.dumps(records, indent=2, ensure_ascii=False)
        runtime.downloader.deliver(
            Download(swap_extension(filename, ".txt"), text.encode("utf-8"), TEXT_MIME)
        )
    except Exception as exc:
        logger.exception("Text fallback export failed")
        runtime.notifier.notify(f"Export failed: {exc}", level="error")
        return
    runtime.notifier.notify(
        "PDF rendering is not available, downloaded the data as JSON text instead.",
        level="info",
    )


def _deliver_csv_fallback(records: Sequence[Any], filename: str, runtime: "PageRuntime") -> None:
    try:
        header = list(records[0].keys())
        download_array_as_csv(records, swap_extension(filename, ".csv"), header, runtime)
    except Exception as exc:
        logger.exception("CSV fallback export failed")
        runtime.notifier.notify(f"Export failed: {exc}", level="error")


async def export_list_as_pdf(storage_key: str, filename: str, runtime: "PageRuntime") -> None:
    records = read_collection(runtime.store, storage_key)
    if not records:
        runtime.notifier.notify(f"No data to export for {storage_key}", level="warning")
        return

    ready = await wait_for(
        runtime.capability.available,
        timeout=runtime.pdf_wait_timeout,
        interval=runtime.pdf_wait_interval,
    )
    if not ready:
        logger.info("PDF capability unavailable, exporting %s as text", storage_key)
        _deliver_text_fallback(records, filename, runtime)
        return

    try:
        backend = runtime.capability.backend
        title = filename[:-4] if filename.lower().endswith(".pdf") else filename
        content = render_table_pdf(records, title, backend)
        runtime.downloader.deliver(Download(filename, content, PDF_MIME))
        logger.info(
            "Exported %d records from %s to %s (%d pages)",
            len(records), storage_key, filename, page_count(records, backend.pagesize[1]),
        )
    except Exception:
        logger.exception("PDF export error")
        runtime.notifier.notify("PDF export problem, trying CSV instead.", level="warning")
        _deliver_csv_fallback(records, filename, runtime)
