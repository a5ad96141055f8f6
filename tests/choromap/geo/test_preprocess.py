from __future__ import annotations

import copy

import pytest

from choromap.core.exceptions import DataShapeError
from choromap.geo.accessors import property_accessor
from choromap.geo.preprocess import prepare


def _square(x0, y0, size=1.0):
    return {
        "type": "Polygon",
        "coordinates": [[[x0, y0], [x0 + size, y0], [x0 + size, y0 + size], [x0, y0 + size], [x0, y0]]],
    }


def _make_geojson(ids=("A", "B", "C")):
    """Unit squares side by side along the x axis."""
    return {
        "type": "FeatureCollection",
        "features": [
            {
                "type": "Feature",
                "properties": {"code": fid, "name": f"Area {fid}"},
                "geometry": _square(float(i), 0.0),
            }
            for i, fid in enumerate(ids)
        ],
    }


def test_ids_names_and_centers():
    wg = prepare(_make_geojson())

    assert wg.ids == ["A", "B", "C"]
    assert [f.name for f in wg] == ["Area A", "Area B", "Area C"]
    assert wg.get("B").center == pytest.approx((1.5, 0.5))


def test_input_is_not_mutated():
    raw = _make_geojson()
    before = copy.deepcopy(raw)

    wg = prepare(raw, exclude_ids=["A"])
    wg.features[0].properties["mutated"] = True

    assert raw == before


def test_exclude_then_include():
    wg = prepare(_make_geojson(), exclude_ids=["A"], include_ids=["A", "B"])

    assert wg.ids == ["B"]


@pytest.mark.parametrize(
    "exclude, include, expected",
    [
        (None, None, ["A", "B", "C"]),
        ([], [], ["A", "B", "C"]),
        (["B"], None, ["A", "C"]),
        (None, ["C", "A"], ["A", "C"]),
        (["A", "B"], ["B", "C"], ["C"]),
    ],
)
def test_remaining_ids(exclude, include, expected):
    assert prepare(_make_geojson(), exclude, include).ids == expected


def test_nothing_left_skips_borders():
    wg = prepare(_make_geojson(), exclude_ids=["A", "B", "C"])

    assert wg.is_empty
    assert wg.borders is None


def test_borders_merge_adjacent_features():
    wg = prepare(_make_geojson())

    borders = wg.borders
    assert borders["type"] == "FeatureCollection"
    assert len(borders["features"]) == 1

    geometry = borders["features"][0]["geometry"]
    # three adjacent squares dissolve into one rectangle
    assert geometry["type"] == "Polygon"


def test_prepare_is_idempotent():
    raw = _make_geojson()

    assert prepare(raw, ["C"], None) == prepare(raw, ["C"], None)


def test_numeric_ids_are_normalised_to_str():
    raw = _make_geojson()
    for i, feature in enumerate(raw["features"]):
        feature["id"] = 100 + i

    wg = prepare(raw, exclude_ids=[100])

    assert wg.ids == ["101", "102"]
    assert wg.get(101).raw_id == 101


def test_custom_accessors():
    raw = _make_geojson()
    wg = prepare(raw, id_accessor=property_accessor("name"), name_accessor=property_accessor("code"))

    assert wg.ids == ["Area A", "Area B", "Area C"]
    assert wg.get("Area A").name == "A"


def test_accessor_raising_is_a_data_shape_error():
    def broken(feature):
        raise KeyError("nope")

    with pytest.raises(DataShapeError):
        prepare(_make_geojson(), id_accessor=broken)


def test_accessor_returning_non_primitive_is_a_data_shape_error():
    with pytest.raises(DataShapeError):
        prepare(_make_geojson(), name_accessor=lambda f: {"not": "primitive"})

    with pytest.raises(DataShapeError):
        prepare(_make_geojson(), id_accessor=property_accessor("missing"))


def test_null_geometry_is_kept_but_not_drawn():
    raw = _make_geojson(("A", "B"))
    raw["features"].append({"type": "Feature", "id": "C", "properties": {}, "geometry": None})

    wg = prepare(raw)

    assert wg.ids == ["A", "B", "C"]
    assert wg.get("C").center is None
    assert wg.get("C").shape.is_empty
    assert [f["id"] for f in wg.to_geojson()["features"]] == ["A", "B"]
    assert wg.borders["features"][0]["properties"]["featureIds"] == ["A", "B", "C"]
    assert wg.borders["features"][0]["geometry"]["type"] == "Polygon"


def test_malformed_geometry():
    raw = _make_geojson()
    raw["features"][1]["geometry"] = "nowhere"

    with pytest.raises(DataShapeError):
        prepare(raw)


def test_not_a_feature_collection():
    with pytest.raises(DataShapeError):
        prepare({"type": "Feature"})


def test_to_geojson_carries_feature_id():
    wg = prepare(_make_geojson(), include_ids=["A"])
    out = wg.to_geojson()

    assert out["features"][0]["properties"]["featureId"] == "A"
    assert out["features"][0]["id"] == "A"
