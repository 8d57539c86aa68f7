"""Per-page runtime exposing the shared operations to host pages.

A :class:`PageRuntime` is what a single page (browser tab, Streamlit
session) owns: its document, its event bus, its notifier and downloader, and
its handle on the PDF capability.  All pages of one process share a
:class:`KeyValueStore`, which is how they stay in sync.
"""

from __future__ import annotations

import logging
import uuid
from typing import Any, Callable, Dict, List, Mapping, Optional, Sequence

from . import export
from .config import PDF_WAIT_INTERVAL, PDF_WAIT_TIMEOUT, STORE_PATH
from .datalist import refresh_names_datalist
from .document import Document
from .downloads import DirectoryDownloader, LoggingNotifier
from .events import PROFILE_CHANGED, EventBus
from .pdf_table import PdfCapability
from .profile import get_profile, listen_for_profile_change, save_profile
from .settings import get_preferences
from .storage import KeyValueStore
from .sync import CrossTabSync
from .theme import apply_preferences

logger = logging.getLogger(__name__)


class PageRuntime:
    """Collaborators and operations of one page."""

    def __init__(
        self,
        store: Optional[KeyValueStore] = None,
        document: Optional[Document] = None,
        notifier: Any = None,
        downloader: Any = None,
        capability: Optional[PdfCapability] = None,
        context_id: Optional[str] = None,
        pdf_wait_timeout: float = PDF_WAIT_TIMEOUT,
        pdf_wait_interval: float = PDF_WAIT_INTERVAL,
    ) -> None:
        self.store = store if store is not None else shared_store()
        self.document = document if document is not None else Document()
        self.notifier = notifier if notifier is not None else LoggingNotifier()
        self.downloader = downloader if downloader is not None else DirectoryDownloader()
        self.capability = capability if capability is not None else PdfCapability()
        self.context_id = context_id or uuid.uuid4().hex
        self.pdf_wait_timeout = pdf_wait_timeout
        self.pdf_wait_interval = pdf_wait_interval
        self.bus = EventBus()
        self.sync = CrossTabSync(self)
        self.booted = False

    def boot(self) -> "PageRuntime":
        """Page-load sequence; calling it again has no further effect."""
        if self.booted:
            return self
        self.apply_preferences()
        self.capability.load_in_background()
        self.sync.attach()
        self.bus.publish(PROFILE_CHANGED, self.get_profile())
        self.booted = True
        logger.debug("Page %s booted", self.context_id)
        return self

    def close(self) -> None:
        self.sync.detach()

    # Preferences -------------------------------------------------------------

    def get_preferences(self) -> Dict[str, Any]:
        return get_preferences(self.store)

    def apply_preferences(self) -> None:
        apply_preferences(self.document, self.store, self.bus)

    # Older host pages call it by this name.
    apply_fin_settings = apply_preferences

    # Profile -----------------------------------------------------------------

    def get_profile(self) -> Any:
        return get_profile(self.store)

    def save_profile(self, profile: Any) -> None:
        save_profile(profile, self.store, self.bus, origin=self.context_id)

    def listen_for_profile_change(self, callback: Callable[[Any], None]) -> Callable[[], None]:
        return listen_for_profile_change(callback, self.store, self.bus)

    # Export ------------------------------------------------------------------

    async def export_list_as_pdf(self, storage_key: str, filename: str) -> None:
        try:
            await export.export_list_as_pdf(storage_key, filename, self)
        except Exception as exc:
            logger.exception("Export of %s failed", storage_key)
            self.notifier.notify(f"Export failed: {exc}", level="error")

    def download_array_as_csv(
        self,
        records: Sequence[Mapping[str, Any]],
        filename: str,
        header: Sequence[str],
    ) -> None:
        try:
            export.download_array_as_csv(records, filename, header, self)
        except Exception as exc:
            logger.exception("CSV download of %s failed", filename)
            self.notifier.notify(f"Export failed: {exc}", level="error")

    # Datalist ----------------------------------------------------------------

    def refresh_names_datalist(self) -> List[str]:
        return refresh_names_datalist(self.document, self.store)


_shared_store: Optional[KeyValueStore] = None
_runtime: Optional[PageRuntime] = None


def shared_store() -> KeyValueStore:
    """Process-wide store, persisted to ``config.STORE_PATH``."""
    global _shared_store
    if _shared_store is None:
        _shared_store = KeyValueStore(path=STORE_PATH)
    return _shared_store


def get_runtime() -> PageRuntime:
    """Default page runtime, booted on first use."""
    global _runtime
    if _runtime is None:
        _runtime = PageRuntime().boot()
    return _runtime


def set_runtime(runtime: Optional[PageRuntime]) -> None:
    """Replace the default runtime (``None`` resets it)."""
    global _runtime
    if _runtime is not None and _runtime is not runtime:
        _runtime.close()
    _runtime = runtime
