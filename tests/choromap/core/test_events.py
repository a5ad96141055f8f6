from __future__ import annotations

import pytest

from choromap.core.events import EventBus, filter_did_change


def test_publish_calls_subscribers_in_order_with_sender_and_payload():
    bus = EventBus()
    calls = []

    bus.subscribe("ping", "a", lambda sender, *payload: calls.append(("a", sender, payload)))
    bus.subscribe("ping", "b", lambda sender, *payload: calls.append(("b", sender, payload)))

    sender = object()
    bus.publish("ping", sender, 1, "two")

    assert calls == [("a", sender, (1, "two")), ("b", sender, (1, "two"))]


def test_resubscribe_same_pair_replaces_callback():
    bus = EventBus()
    calls = []

    bus.subscribe("ping", "a", lambda sender: calls.append("first"))
    bus.subscribe("ping", "b", lambda sender: calls.append("b"))
    bus.subscribe("ping", "a", lambda sender: calls.append("second"))

    bus.publish("ping", None)

    assert calls == ["b", "second"]
    assert bus.namespaces("ping") == ["b", "a"]


def test_unsubscribe_namespace_removes_all_its_events():
    bus = EventBus()
    calls = []

    bus.subscribe("one", "chart", lambda sender: calls.append("one"))
    bus.subscribe("two", "chart", lambda sender: calls.append("two"))
    bus.subscribe("two", "other", lambda sender: calls.append("other"))

    assert bus.unsubscribe("chart") == 2

    bus.publish("one", None)
    bus.publish("two", None)

    assert calls == ["other"]
    assert not bus.has_subscribers("one")


def test_unsubscribe_single_event():
    bus = EventBus()
    bus.subscribe("one", "chart", lambda sender: None)
    bus.subscribe("two", "chart", lambda sender: None)

    assert bus.unsubscribe("chart", event_name="one") == 1
    assert not bus.has_subscribers("one")
    assert bus.namespaces("two") == ["chart"]


def test_subscribe_none_removes_pair():
    bus = EventBus()
    bus.subscribe("one", "chart", lambda sender: None)
    bus.subscribe("one", "chart", None)

    assert not bus.has_subscribers("one")


def test_bus_does_not_filter_sender():
    bus = EventBus()
    me = object()
    received = []

    bus.subscribe("ping", "me", lambda sender: received.append(sender))
    bus.publish("ping", me)

    assert received == [me]


def test_callback_errors_propagate_to_publisher():
    bus = EventBus()

    def boom(sender):
        raise RuntimeError("boom")

    bus.subscribe("ping", "a", boom)

    with pytest.raises(RuntimeError, match="boom"):
        bus.publish("ping", None)


def test_unsubscribe_during_dispatch_still_runs_snapshot():
    bus = EventBus()
    calls = []

    def first(sender):
        calls.append("first")
        bus.unsubscribe("second")

    bus.subscribe("ping", "first", first)
    bus.subscribe("ping", "second", lambda sender: calls.append("second"))

    bus.publish("ping", None)
    bus.publish("ping", None)

    assert calls == ["first", "second", "first"]


def test_non_callable_rejected():
    bus = EventBus()
    with pytest.raises(TypeError):
        bus.subscribe("ping", "a", "not callable")


def test_rejected_resubscription_keeps_existing_callback():
    bus = EventBus()
    seen = []
    bus.subscribe("ping", "a", lambda sender: seen.append(sender))

    with pytest.raises(TypeError):
        bus.subscribe("ping", "a", 42)
    bus.publish("ping", "x")

    assert seen == ["x"]
    assert bus.namespaces("ping") == ["a"]


def test_filter_event_name():
    assert filter_did_change("locations") == "locations-filter-did-change"
