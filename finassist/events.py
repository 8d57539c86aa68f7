"""In-process publish/subscribe channel used by a page runtime."""

from __future__ import annotations

import logging
from typing import Any, Callable, Dict, List

logger = logging.getLogger(__name__)

PREFERENCES_CHANGED = "finassist:preferencesChanged"
PROFILE_CHANGED = "finassist:profileChanged"

Subscriber = Callable[[Any], None]


class EventBus:
    """Topic based dispatcher; a failing subscriber never blocks the others."""

    def __init__(self) -> None:
        self._subscribers: Dict[str, List[Subscriber]] = {}

    def subscribe(self, topic: str, callback: Subscriber) -> Callable[[], None]:
        self._subscribers.setdefault(topic, []).append(callback)

        def unsubscribe() -> None:
            callbacks = self._subscribers.get(topic, [])
            if callback in callbacks:
                callbacks.remove(callback)

        return unsubscribe

    def publish(self, topic: str, payload: Any = None) -> None:
        for callback in list(self._subscribers.get(topic, [])):
            try:
                callback(payload)
            except Exception:
                logger.exception("Subscriber for %s failed", topic)

    def subscriber_count(self, topic: str) -> int:
        return len(self._subscribers.get(topic, []))
