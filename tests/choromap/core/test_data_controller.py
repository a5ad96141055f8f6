from __future__ import annotations

import pytest

from choromap.core.data_controller import DataController
from choromap.core.events import DATA_DID_CHANGE, EventBus, filter_did_change
from choromap.core.filter_state import FilterState


def _make_records():
    return [
        {"location": "A", "label": "x", "group": "g1", "value": 5},
        {"location": "A", "label": "y", "group": "g1", "value": 3},
        {"location": "B", "label": "x", "group": "g2", "value": 2},
        {"location": "C", "label": "y", "group": "g2", "value": 0},
    ]


def _make_controller():
    bus = EventBus()
    return DataController(_make_records(), bus=bus), bus


def test_toggle_filter_is_self_inverse():
    dc, _ = _make_controller()

    assert not dc.is_filter("locations", "A")
    dc.toggle_filter("locations", "A", sender=None)
    assert dc.is_filter("locations", "A")
    dc.toggle_filter("locations", "A", sender=None)
    assert not dc.is_filter("locations", "A")


def test_toggle_publishes_sender_and_new_filters():
    dc, bus = _make_controller()
    received = []
    sender = object()

    bus.subscribe(filter_did_change("locations"), "spy", lambda s, keys: received.append((s, keys)))

    dc.toggle_filter("locations", "A", sender)
    dc.toggle_filter("locations", "B", sender)

    assert received == [(sender, ["A"]), (sender, ["A", "B"])]


def test_clear_always_empties_and_notifies():
    dc, bus = _make_controller()
    received = []
    bus.subscribe(filter_did_change("labels"), "spy", lambda s, keys: received.append(keys))

    dc.clear("labels", sender=None)
    assert dc.filters("labels") == []

    dc.toggle_filter("labels", "x", sender=None)
    dc.toggle_filter("labels", "y", sender=None)
    dc.clear("labels", sender=None)

    assert dc.filters("labels") == []
    assert received == [[], ["x"], ["x", "y"], []]


def test_filters_returns_a_copy():
    dc, _ = _make_controller()
    dc.toggle_filter("groups", "g1", sender=None)

    keys = dc.filters("groups")
    keys.append("g2")

    assert dc.filters("groups") == ["g1"]


def test_dimensions_are_independent():
    dc, _ = _make_controller()
    dc.toggle_filter("locations", "x", sender=None)

    assert dc.is_filter("locations", "x")
    assert not dc.is_filter("labels", "x")


def test_unknown_dimension_raises():
    dc, _ = _make_controller()
    with pytest.raises(ValueError):
        dc.toggle_filter("dates", "2020", sender=None)


def test_snapshot_is_unfiltered_and_filtered_snapshot_applies_filters():
    dc, _ = _make_controller()
    dc.toggle_filter("locations", "A", sender=None)

    assert len(dc.snapshot()) == 4

    filtered = dc.filtered_snapshot()
    assert {r.location for r in filtered} == {"A"}

    dc.toggle_filter("labels", "y", sender=None)
    assert [(r.location, r.label) for r in dc.filtered_snapshot()] == [("A", "y")]

    ignoring_locations = dc.filtered_snapshot(ignore=["locations"])
    assert {r.location for r in ignoring_locations} == {"A", "C"}


def test_set_data_publishes_data_change():
    dc, bus = _make_controller()
    received = []
    bus.subscribe(DATA_DID_CHANGE, "spy", lambda s, ds: received.append(len(ds)))

    dc.set_data([{"location": "Z", "label": "x", "value": 1}], sender="me")

    assert received == [1]
    assert dc.data().locations == ("Z",)


def test_initial_filter_state_is_copied():
    state = FilterState(locations=["A"])
    dc = DataController(_make_records(), bus=EventBus(), filter_state=state)

    state.locations.append("B")

    assert dc.filters("locations") == ["A"]


def test_clear_all():
    dc, _ = _make_controller()
    dc.toggle_filter("locations", "A", sender=None)
    dc.toggle_filter("groups", "g1", sender=None)

    dc.clear_all(sender=None)

    assert dc.filter_state().is_empty()
