from __future__ import annotations

import pytest

from choromap.core.filter_state import FilterState


def test_filter_state_to_from_dict_roundtrip():
    st = FilterState(
        locations=["A", "B"],
        labels=["x"],
        groups=["g1"],
    )

    raw = st.to_dict()
    rebuilt = FilterState.from_dict(raw)

    assert rebuilt == st


def test_toggle_keeps_insertion_order():
    st = FilterState()

    assert st.toggle("locations", "B") is True
    assert st.toggle("locations", "A") is True
    assert st.get("locations") == ["B", "A"]

    assert st.toggle("locations", "B") is False
    assert st.get("locations") == ["A"]


def test_copy_is_independent():
    st = FilterState(locations=["A"])
    other = st.copy()
    other.toggle("locations", "B")

    assert st.locations == ["A"]


def test_unknown_dimension():
    with pytest.raises(ValueError):
        FilterState().toggle("dates", "x")
