"""Shared runtime for the FinAssist personal finance pages.

Every page of the tracker loads this package.  It keeps pages in sync on
display preferences and on the user profile, and exports stored record
collections.  The primary modules are:

* ``settings`` / ``theme`` – read preferences and render them on a page
* ``profile`` / ``sync`` – profile persistence and cross-page notifications
* ``export`` / ``pdf_table`` – PDF, JSON text and CSV exports
* ``datalist`` – name suggestions for lookup widgets
* ``runtime`` – the per-page object tying these together

The functions below operate on the default page runtime; host pages that
manage several pages (for example one per Streamlit session) create their
own :class:`PageRuntime` instances instead.  A demo host page can be started
with:

```bash
python run_finassist.py
```
"""

from __future__ import annotations

from typing import Any, Callable, Dict, List, Mapping, Sequence

from .runtime import PageRuntime, get_runtime, set_runtime, shared_store
from .storage import KeyValueStore, StorageError, StorageQuotaError


def apply_preferences() -> None:
    get_runtime().apply_preferences()


apply_fin_settings = apply_preferences


def get_preferences() -> Dict[str, Any]:
    return get_runtime().get_preferences()


def get_profile() -> Any:
    return get_runtime().get_profile()


def save_profile(profile: Any) -> None:
    get_runtime().save_profile(profile)


def listen_for_profile_change(callback: Callable[[Any], None]) -> Callable[[], None]:
    return get_runtime().listen_for_profile_change(callback)


async def export_list_as_pdf(storage_key: str, filename: str) -> None:
    await get_runtime().export_list_as_pdf(storage_key, filename)


def download_array_as_csv(records: Sequence[Mapping[str, Any]], filename: str, header: Sequence[str]) -> None:
    get_runtime().download_array_as_csv(records, filename, header)


def refresh_names_datalist() -> List[str]:
    return get_runtime().refresh_names_datalist()


__all__ = [
    "KeyValueStore",
    "PageRuntime",
    "StorageError",
    "StorageQuotaError",
    "apply_fin_settings",
    "apply_preferences",
    "download_array_as_csv",
    "export_list_as_pdf",
    "get_preferences",
    "get_profile",
    "get_runtime",
    "listen_for_profile_change",
    "refresh_names_datalist",
    "save_profile",
    "set_runtime",
    "shared_store",
]
