"""User profile persistence and change notifications.

The profile is stored as JSON under ``tfm_profile``.  Its expected shape is::

    {firstName, lastName, phone, whatsapp, sameAsPhone, email,
     addresses: [{line1, line2, country, state, city, pincode}],
     aadhaar, pan, avatarDataUrl}

but nothing here validates it.  Saving publishes ``PROFILE_CHANGED`` in the
current page and writes ``tfm_profile_last_update`` so other pages notice.
"""

from __future__ import annotations

import json
import logging
import uuid
from datetime import datetime, timezone
from typing import Any, Callable, Optional

from .config import PROFILE_KEY, PROFILE_LAST_UPDATE_KEY
from .events import PROFILE_CHANGED, EventBus
from .storage import KeyValueStore, StorageError, read_json

logger = logging.getLogger(__name__)


def iso_timestamp(moment: Optional[datetime] = None) -> str:
    """UTC timestamp with millisecond precision and a ``Z`` suffix."""
    moment = moment or datetime.now(timezone.utc)
    return moment.astimezone(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def update_marker(moment: Optional[datetime] = None) -> str:
    """Value written to the last-update key: the timestamp plus a per-save suffix.

    Two saves within one millisecond still write different values, so other
    pages get an event for each of them.
    """
    return f"{iso_timestamp(moment)}#{uuid.uuid4().hex[:12]}"


def get_profile(store: KeyValueStore) -> Any:
    profile = read_json(store, PROFILE_KEY, {})
    return {} if profile is None else profile


def save_profile(
    profile: Any,
    store: KeyValueStore,
    bus: EventBus,
    origin: Optional[str] = None,
    now: Optional[datetime] = None,
) -> None:
    """Persist ``profile`` and announce it.

    A failure of the profile write itself propagates to the caller; a failure
    of the follow-up timestamp write is ignored.
    """
    value = {} if profile is None else profile
    store.set_item(PROFILE_KEY, json.dumps(value), origin=origin)
    bus.publish(PROFILE_CHANGED, value)
    try:
        store.set_item(PROFILE_LAST_UPDATE_KEY, update_marker(now), origin=origin)
    except StorageError:
        logger.debug("Could not record profile update timestamp", exc_info=True)


def listen_for_profile_change(
    callback: Callable[[Any], None],
    store: KeyValueStore,
    bus: EventBus,
) -> Callable[[], None]:
    """Subscribe ``callback`` and call it right away with the current profile.

    Returns an unsubscribe function.  A non-callable ``callback`` is ignored.
    """
    if not callable(callback):
        return lambda: None

    def on_change(payload: Any) -> None:
        callback(get_profile(store) if payload is None else payload)

    unsubscribe = bus.subscribe(PROFILE_CHANGED, on_change)
    try:
        callback(get_profile(store))
    except Exception:
        logger.exception("Profile listener failed on initial call")
    return unsubscribe
