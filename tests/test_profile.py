from __future__ import annotations

import json
from datetime import datetime, timezone

import pytest

from finassist.config import PROFILE_KEY, PROFILE_LAST_UPDATE_KEY
from finassist.events import PROFILE_CHANGED, EventBus
from finassist.profile import get_profile, iso_timestamp, listen_for_profile_change, save_profile
from finassist.storage import KeyValueStore, StorageQuotaError

FULL_PROFILE = {
    "firstName": "Asha",
    "lastName": "Rao",
    "phone": "+91 98765 43210",
    "whatsapp": "+91 98765 43210",
    "sameAsPhone": True,
    "email": "asha@example.com",
    "addresses": [
        {"line1": "12 MG Road", "line2": "", "country": "India", "state": "KA", "city": "Bengaluru", "pincode": "560001"},
    ],
    "aadhaar": "1234 5678 9012",
    "pan": "ABCDE1234F",
    "avatarDataUrl": "data:image/png;base64,AAAA",
}


@pytest.mark.parametrize("raw", [None, "garbage", '{"a": ', "null"])
def test_get_profile_degrades_to_empty(store, raw) -> None:
    if raw is not None:
        store.set_item(PROFILE_KEY, raw)
    assert get_profile(store) == {}


@pytest.mark.parametrize("profile", [FULL_PROFILE, {}, {"firstName": 'Ünïcode "quoted"'}, {"nested": {"a": [1, 2.5, None]}}])
def test_save_then_get_round_trips(store, profile) -> None:
    save_profile(profile, store, EventBus())
    assert get_profile(store) == profile


def test_saving_none_stores_empty_object(store) -> None:
    bus = EventBus()
    received = []
    bus.subscribe(PROFILE_CHANGED, received.append)
    save_profile(None, store, bus)
    assert get_profile(store) == {}
    assert received == [{}]


def test_save_publishes_and_writes_timestamp(store) -> None:
    bus = EventBus()
    received = []
    bus.subscribe(PROFILE_CHANGED, received.append)
    moment = datetime(2024, 1, 2, 3, 4, 5, 678000, tzinfo=timezone.utc)

    save_profile(FULL_PROFILE, store, bus, now=moment)

    assert received == [FULL_PROFILE]
    marker = store.get_item(PROFILE_LAST_UPDATE_KEY)
    assert marker.startswith("2024-01-02T03:04:05.678Z#")


def test_saves_in_the_same_millisecond_write_distinct_markers(store) -> None:
    moment = datetime(2024, 1, 2, 3, 4, 5, 678000, tzinfo=timezone.utc)
    markers = []
    for name in ("First", "Second"):
        save_profile({"firstName": name}, store, EventBus(), now=moment)
        markers.append(store.get_item(PROFILE_LAST_UPDATE_KEY))
    assert markers[0] != markers[1]


def test_iso_timestamp_format() -> None:
    stamp = iso_timestamp()
    assert stamp.endswith("Z")
    assert len(stamp) == len("2024-01-02T03:04:05.678Z")


def test_primary_write_failure_propagates() -> None:
    store = KeyValueStore(quota_chars=20)
    bus = EventBus()
    received = []
    bus.subscribe(PROFILE_CHANGED, received.append)
    with pytest.raises(StorageQuotaError):
        save_profile(FULL_PROFILE, store, bus)
    assert received == []
    assert store.get_item(PROFILE_KEY) is None


def test_timestamp_write_failure_is_swallowed() -> None:
    # Room for the profile, not for the timestamp.
    store = KeyValueStore(quota_chars=30)
    save_profile({"a": 1}, store, EventBus())
    assert json.loads(store.get_item(PROFILE_KEY)) == {"a": 1}
    assert store.get_item(PROFILE_LAST_UPDATE_KEY) is None


def test_listener_called_immediately_with_current_profile(store) -> None:
    bus = EventBus()
    save_profile({"firstName": "Asha"}, store, bus)
    calls = []
    listen_for_profile_change(calls.append, store, bus)
    assert calls == [{"firstName": "Asha"}]


def test_listener_called_immediately_without_profile(store) -> None:
    calls = []
    listen_for_profile_change(calls.append, store, EventBus())
    assert calls == [{}]


def test_listener_receives_later_saves_until_unsubscribed(store) -> None:
    bus = EventBus()
    calls = []
    unsubscribe = listen_for_profile_change(calls.append, store, bus)
    save_profile({"firstName": "Ravi"}, store, bus)
    unsubscribe()
    save_profile({"firstName": "Meera"}, store, bus)
    assert calls == [{}, {"firstName": "Ravi"}]


def test_listener_errors_do_not_propagate(store) -> None:
    bus = EventBus()

    def broken(profile):
        raise RuntimeError("page bug")

    listen_for_profile_change(broken, store, bus)
    save_profile({"firstName": "Asha"}, store, bus)


def test_non_callable_listener_is_ignored(store) -> None:
    bus = EventBus()
    unsubscribe = listen_for_profile_change("not callable", store, bus)
    unsubscribe()
    assert bus.subscriber_count(PROFILE_CHANGED) == 0
