"""Read-only access to the stored display preferences."""

from __future__ import annotations

from typing import Any, Dict

from .config import DEFAULT_PREFERENCES, SETTINGS_KEY
from .storage import KeyValueStore, read_json


def get_preferences(store: KeyValueStore) -> Dict[str, Any]:
    """Return the stored preferences, completed from the defaults.

    Missing keys, malformed JSON and non-object values all fall back to
    ``DEFAULT_PREFERENCES``; nothing is raised.
    """
    data = read_json(store, SETTINGS_KEY, None)
    if not isinstance(data, dict):
        return DEFAULT_PREFERENCES.copy()
    merged = DEFAULT_PREFERENCES.copy()
    merged.update(data)
    return merged
