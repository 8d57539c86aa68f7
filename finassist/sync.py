"""Bridge storage mutations made by other pages into this page.

Preference changes re-run the theme applier.  Profile changes are detected
through ``tfm_profile_last_update``, which every save writes after the
profile itself, and are re-published on the page's ``PROFILE_CHANGED``
topic so subscribers see same-page and cross-page saves the same way.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Callable, Optional

from .config import PROFILE_LAST_UPDATE_KEY, SETTINGS_KEY
from .events import PROFILE_CHANGED
from .profile import get_profile
from .storage import StorageEvent

if TYPE_CHECKING:  # pragma: no cover
    from .runtime import PageRuntime

logger = logging.getLogger(__name__)


class CrossTabSync:
    def __init__(self, runtime: "PageRuntime") -> None:
        self.runtime = runtime
        self._unsubscribe: Optional[Callable[[], None]] = None

    @property
    def attached(self) -> bool:
        return self._unsubscribe is not None

    def attach(self) -> None:
        if self._unsubscribe is None:
            # Weak so a page that goes away without close() stops listening.
            self._unsubscribe = self.runtime.store.subscribe(
                self.runtime.context_id, self.handle, weak=True
            )

    def detach(self) -> None:
        if self._unsubscribe is not None:
            self._unsubscribe()
            self._unsubscribe = None

    def handle(self, event: StorageEvent) -> None:
        cleared = event.key is None
        if cleared or event.key == SETTINGS_KEY:
            try:
                self.runtime.apply_preferences()
            except Exception:
                logger.exception("Could not re-apply preferences after storage change")
        if cleared or event.key == PROFILE_LAST_UPDATE_KEY:
            try:
                self.runtime.bus.publish(PROFILE_CHANGED, get_profile(self.runtime.store))
            except Exception:
                logger.exception("Could not broadcast profile after storage change")
