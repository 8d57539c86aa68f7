"""Apply display preferences to a page document.

Dark mode is a class on the root element plus one runtime style block that
overrides the static utility classes used by the pages.  Re-applying always
replaces that block, so calling :func:`apply_preferences` repeatedly leaves
the document in the same state.
"""

from __future__ import annotations

import logging
from typing import Any, Optional

from .config import DEFAULT_FONT_FAMILY, FONT_SIZES
from .document import Document
from .events import PREFERENCES_CHANGED, EventBus
from .settings import get_preferences
from .storage import KeyValueStore

logger = logging.getLogger(__name__)

DARK_CLASS = "tfm-dark"
DARK_STYLE_ID = "tfm-dark-runtime-styles"

DARK_CSS = """
html.tfm-dark, html.tfm-dark body {
  background-color: #071129 !important;
  color: #e6eef8 !important;
}
html.tfm-dark .bg-white { background-color: #07122a !important; color: #e6eef8 !important; }
html.tfm-dark .bg-slate-50 { background-color: #0b1724 !important; color: #cfe6ff !important; }
html.tfm-dark .text-slate-900 { color: #e6eef8 !important; }
html.tfm-dark .text-slate-500 { color: #93a3b6 !important; }
html.tfm-dark .text-slate-400 { color: #7d95aa !important; }
html.tfm-dark .border { border-color: rgba(255,255,255,0.06) !important; }
html.tfm-dark input, html.tfm-dark textarea, html.tfm-dark select {
  background-color: #061226 !important;
  color: #e6eef8 !important;
  border-color: rgba(255,255,255,0.06) !important;
}
html.tfm-dark input::placeholder, html.tfm-dark textarea::placeholder { color: rgba(230,238,248,0.5) !important; }
html.tfm-dark .bg-amber-500 { background-color: #f59e0b !important; color: #081020 !important; }
html.tfm-dark footer, html.tfm-dark nav, html.tfm-dark .fixed { background-color: rgba(10,15,25,0.7) !important; color: #cfe6ff !important; }
html.tfm-dark .shadow-lg { box-shadow: 0 6px 20px rgba(2,6,23,0.6) !important; }
"""


def font_size_for(value: Any) -> str:
    return FONT_SIZES.get(value, FONT_SIZES["medium"]) if isinstance(value, str) else FONT_SIZES["medium"]


def apply_runtime_dark_styles(document: Document, enable: bool) -> None:
    """Drop any previous dark style block and install a fresh one if enabled."""
    existing = document.get_element_by_id(DARK_STYLE_ID)
    if existing is not None:
        existing.remove()
    if not enable:
        return
    style = document.create_element("style", id=DARK_STYLE_ID)
    style.text_content = DARK_CSS
    document.head.append_child(style)


def apply_preferences(
    document: Document,
    store: KeyValueStore,
    bus: Optional[EventBus] = None,
) -> None:
    """Render the stored preferences onto ``document``."""
    prefs = get_preferences(store)
    root = document.root

    dark = prefs.get("theme") == "dark"
    if dark:
        root.add_class(DARK_CLASS)
    else:
        root.remove_class(DARK_CLASS)
    apply_runtime_dark_styles(document, dark)

    root.style["font-size"] = font_size_for(prefs.get("fontSize"))
    root.style["font-family"] = prefs.get("fontFamily") or DEFAULT_FONT_FAMILY

    logger.debug("Applied preferences %s", prefs)
    if bus is not None:
        bus.publish(PREFERENCES_CHANGED, prefs)
