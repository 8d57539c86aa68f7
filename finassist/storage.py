"""Shared key-value store with change notifications between pages.

Pages (browser tabs, Streamlit sessions) share one :class:`KeyValueStore`.
Values are JSON text, like the browser's local storage.  Every page
subscribes with its own context id and only hears about mutations made by
*other* pages, which is what drives the cross-tab sync listener.

Streamlit runs each session's script on its own thread, so mutations are
serialized with a lock.  Listeners run after the lock is released.
"""

from __future__ import annotations

import json
import logging
import threading
import weakref
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional

logger = logging.getLogger(__name__)


class StorageError(Exception):
    """Raised when a write to the store cannot be completed."""


class StorageQuotaError(StorageError):
    """Raised when a write would exceed the configured quota."""


@dataclass(frozen=True)
class StorageEvent:
    key: Optional[str]  # None when the whole store was cleared
    old_value: Optional[str]
    new_value: Optional[str]
    origin: Optional[str]


StorageListener = Callable[[StorageEvent], None]
ListenerRef = Callable[[], Optional[StorageListener]]


class KeyValueStore:
    """String-keyed store of string values with optional file persistence."""

    def __init__(self, path: Optional[Path] = None, quota_chars: Optional[int] = None) -> None:
        self.path = Path(path) if path is not None else None
        self.quota_chars = quota_chars
        self._lock = threading.RLock()
        self._items: Dict[str, str] = self._load()
        self._listeners: Dict[str, List[ListenerRef]] = {}

    # Public API -------------------------------------------------------------

    def get_item(self, key: str) -> Optional[str]:
        return self._items.get(key)

    def set_item(self, key: str, value: Any, origin: Optional[str] = None) -> None:
        text = str(value)
        with self._lock:
            old = self._items.get(key)
            if old == text:
                return
            candidate = dict(self._items)
            candidate[key] = text
            if self.quota_chars is not None and _size_of(candidate) > self.quota_chars:
                raise StorageQuotaError(
                    f"Setting '{key}' exceeds the storage quota of {self.quota_chars} characters"
                )
            self._commit(candidate)
        self._dispatch(StorageEvent(key, old, text, origin))

    def remove_item(self, key: str, origin: Optional[str] = None) -> None:
        with self._lock:
            if key not in self._items:
                return
            candidate = dict(self._items)
            old = candidate.pop(key)
            self._commit(candidate)
        self._dispatch(StorageEvent(key, old, None, origin))

    def clear(self, origin: Optional[str] = None) -> None:
        with self._lock:
            if not self._items:
                return
            self._commit({})
        self._dispatch(StorageEvent(None, None, None, origin))

    def keys(self) -> List[str]:
        return list(self._items)

    def __contains__(self, key: object) -> bool:
        return key in self._items

    def __len__(self) -> int:
        return len(self._items)

    def subscribe(
        self,
        context_id: str,
        listener: StorageListener,
        weak: bool = False,
    ) -> Callable[[], None]:
        """Register ``listener`` for mutations made outside ``context_id``.

        With ``weak=True`` the listener must be a bound method and the store
        only keeps a weak reference to it: once its owner is garbage
        collected the subscription disappears on its own.
        """
        ref: ListenerRef = weakref.WeakMethod(listener) if weak else _strong_ref(listener)
        with self._lock:
            self._listeners.setdefault(context_id, []).append(ref)

        def unsubscribe() -> None:
            with self._lock:
                refs = self._listeners.get(context_id, [])
                if ref in refs:
                    refs.remove(ref)
                if not refs:
                    self._listeners.pop(context_id, None)

        return unsubscribe

    def subscriber_count(self) -> int:
        """Number of live listeners across all contexts."""
        return sum(len(listeners) for _, listeners in self._live_listeners())

    # Internal ----------------------------------------------------------------

    def _load(self) -> Dict[str, str]:
        if self.path is None or not self.path.exists():
            return {}
        try:
            with self.path.open("r", encoding="utf-8") as handle:
                data = json.load(handle)
        except (json.JSONDecodeError, OSError):
            logger.warning("Ignoring unreadable store file %s", self.path)
            return {}
        if not isinstance(data, dict):
            return {}
        # Hand-written store files may hold plain JSON values instead of JSON text.
        return {
            str(k): v if isinstance(v, str) else json.dumps(v, ensure_ascii=False)
            for k, v in data.items()
        }

    def _commit(self, items: Dict[str, str]) -> None:
        if self.path is not None:
            try:
                self.path.parent.mkdir(parents=True, exist_ok=True)
                with self.path.open("w", encoding="utf-8") as handle:
                    json.dump(items, handle, indent=2, sort_keys=True)
            except OSError as exc:
                raise StorageError(f"Could not write store file {self.path}: {exc}") from exc
        self._items = items

    def _live_listeners(self) -> List[tuple]:
        """Snapshot of ``(context_id, listeners)``, dropping collected ones."""
        snapshot = []
        with self._lock:
            for context_id, refs in list(self._listeners.items()):
                alive = [ref for ref in refs if ref() is not None]
                if alive:
                    self._listeners[context_id] = alive
                    snapshot.append((context_id, [ref() for ref in alive]))
                else:
                    del self._listeners[context_id]
        return snapshot

    def _dispatch(self, event: StorageEvent) -> None:
        for context_id, listeners in self._live_listeners():
            if event.origin is not None and context_id == event.origin:
                continue
            for listener in listeners:
                if listener is None:
                    continue
                try:
                    listener(event)
                except Exception:
                    logger.exception("Storage listener failed for key %r", event.key)


def _strong_ref(listener: StorageListener) -> ListenerRef:
    return lambda: listener


def _size_of(items: Dict[str, str]) -> int:
    return sum(len(k) + len(v) for k, v in items.items())


def read_json(store: KeyValueStore, key: str, default: Any) -> Any:
    """Parse the JSON stored under ``key``; ``default`` when missing or malformed."""
    raw = store.get_item(key)
    if raw is None:
        return default
    try:
        return json.loads(raw)
    except (TypeError, ValueError):
        logger.debug("Malformed JSON under %s", key)
        return default


def read_collection(store: KeyValueStore, key: str) -> List[Any]:
    """Read a record collection, treating anything but a JSON array as empty."""
    data = read_json(store, key, [])
    if not isinstance(data, list):
        return []
    return data
