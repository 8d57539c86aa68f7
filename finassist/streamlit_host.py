"""Streamlit host adapter.

Each Streamlit session plays the part of a browser tab: it gets its own
:class:`PageRuntime` (kept in ``st.session_state``) while all sessions of the
server process share one store, so a preference or profile saved in one
session reaches the others through the cross-tab sync listener.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Coroutine

import streamlit as st

from .document import Document
from .downloads import Download
from .runtime import PageRuntime
from .theme import DARK_CLASS, DARK_STYLE_ID

logger = logging.getLogger(__name__)

SESSION_KEY = "_finassist_runtime"


class StreamlitNotifier:
    """Shows notices in the page body."""

    def notify(self, message: str, level: str = "info") -> None:
        if level == "error":
            st.error(message)
        elif level == "warning":
            st.warning(message)
        else:
            st.info(message)


class StreamlitDownloader:
    """Offers each artifact through a download button."""

    def __init__(self) -> None:
        self._count = 0

    def deliver(self, download: Download) -> None:
        self._count += 1
        st.download_button(
            label=f"⬇️ Download {download.filename}",
            data=download.content,
            file_name=download.filename,
            mime=download.mime,
            key=f"finassist_download_{self._count}_{download.filename}",
        )


def get_page_runtime() -> PageRuntime:
    """Return this session's runtime, creating and booting it on first use.

    The shared store holds the runtime's sync listener weakly, so a session
    that ends stops receiving storage events once its state is collected.
    """
    runtime = st.session_state.get(SESSION_KEY)
    if runtime is None:
        runtime = PageRuntime(
            notifier=StreamlitNotifier(),
            downloader=StreamlitDownloader(),
        ).boot()
        st.session_state[SESSION_KEY] = runtime
    return runtime


def theme_css(document: Document) -> str:
    """CSS equivalent of the document's root style and dark style block."""
    root = document.root
    rules = [
        "html {{ font-size: {}; font-family: {}; }}".format(
            root.style.get("font-size", "16px"),
            root.style.get("font-family", "Inter"),
        )
    ]
    style = document.get_element_by_id(DARK_STYLE_ID)
    if root.has_class(DARK_CLASS) and style is not None:
        # Streamlit owns the <html> element, so target it without the class.
        rules.append(style.text_content.replace(f"html.{DARK_CLASS}", "html"))
        rules.append(".stApp { background-color: #071129; color: #e6eef8; }")
    return "\n".join(rules)


def render_theme(document: Document) -> None:
    st.markdown(f"<style>{theme_css(document)}</style>", unsafe_allow_html=True)


def run_export(coro: Coroutine[Any, Any, None]) -> None:
    """Drive an export coroutine from a Streamlit script run."""
    asyncio.run(coro)
