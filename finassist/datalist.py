"""Name suggestions for the income/expense pages.

Collects the ``name`` of every contact, income and expense record and pushes
the deduplicated list into the page's lookup widgets: ``datalist`` elements
used for autocompletion, and ``select`` elements acting as name filters.
"""

from __future__ import annotations

import logging
from typing import List, Sequence

import pandas as pd

from .config import NAME_COLLECTION_KEYS
from .document import Document, Element
from .storage import KeyValueStore, read_collection

logger = logging.getLogger(__name__)

DATALIST_ID = "namesList"
DATALIST_MARKER = "data-tfm-names"
FILTER_ID_FRAGMENT = "namefilter"
BLANK_OPTION_LABEL = "All"


def collect_names(store: KeyValueStore, keys: Sequence[str] = NAME_COLLECTION_KEYS) -> List[str]:
    """Distinct non-empty names across ``keys``, in first-seen order."""
    raw = [
        record.get("name")
        for key in keys
        for record in read_collection(store, key)
        if isinstance(record, dict)
    ]
    names = pd.Series(raw, dtype=object)
    keep = names.map(lambda value: bool(value) and not isinstance(value, bool)).astype(bool)
    names = names[keep]
    return names.astype(str).drop_duplicates().tolist()


def _is_names_datalist(element: Element) -> bool:
    return element.tag == "datalist" and (
        element.id == DATALIST_ID or DATALIST_MARKER in element.attributes
    )


def _is_name_filter(element: Element) -> bool:
    return element.tag == "select" and FILTER_ID_FRAGMENT in (element.id or "").lower()


def _option(document: Document, value: str, label: str = "") -> Element:
    option = document.create_element("option")
    option.value = value
    option.text_content = label or value
    return option


def refresh_names_datalist(document: Document, store: KeyValueStore) -> List[str]:
    names = collect_names(store)

    datalists = document.query_all(_is_names_datalist)
    for datalist in datalists:
        datalist.clear_children()
        for name in names:
            datalist.append_child(_option(document, name))

    filters = document.query_all(_is_name_filter)
    for select in filters:
        previous = select.value
        select.clear_children()
        select.append_child(_option(document, "", BLANK_OPTION_LABEL))
        for name in names:
            select.append_child(_option(document, name))
        select.value = previous if previous in names else ""

    logger.debug(
        "Refreshed %d names into %d datalist(s) and %d filter(s)",
        len(names), len(datalists), len(filters),
    )
    return names
