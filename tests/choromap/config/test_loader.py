import json
from pathlib import Path

import pandas as pd
import pytest

from choromap.config.loader import load_geojson, load_global_config, load_records
from choromap.core.exceptions import ConfigurationError, DataShapeError
from choromap.geo.features import generate_feature_collection


def _make_config_dir(tmp_path: Path, global_json: dict) -> Path:
    # Arrange: build config dir:
    # root/
    #   global.json
    #   data/
    #     records.csv
    #     areas.geojson
    root = tmp_path / "config"
    data_dir = root / "data"
    data_dir.mkdir(parents=True)

    pd.DataFrame(
        {
            "location": ["01", "02", "02"],
            "label": ["x", "x", "y"],
            "group": ["g1", "g1", "g2"],
            "value": [1, 2, 3],
        }
    ).to_csv(data_dir / "records.csv", index=False)

    (data_dir / "areas.geojson").write_text(json.dumps(generate_feature_collection(["01", "02"])))
    (root / "global.json").write_text(json.dumps(global_json))
    return root


def test_load_global_config(tmp_path):
    root = _make_config_dir(
        tmp_path,
        {
            "ui_title": "Test Map",
            "data_file": "data/records.csv",
            "geojson_file": "data/areas.geojson",
            "n_charts": 3,
            "map": {"labels": True, "exclude": ["02"]},
            "initial_filters": {"locations": ["01"]},
        },
    )

    cfg = load_global_config(root)

    assert cfg.ui_title == "Test Map"
    assert cfg.data_path == (root / "data/records.csv").resolve()
    assert cfg.geojson_path == (root / "data/areas.geojson").resolve()
    assert cfg.n_charts == 3
    assert cfg.map_config.labels
    assert cfg.map_config.exclude == ("02",)
    assert cfg.initial_filters.locations == ["01"]


def test_defaults_and_missing_data_file(tmp_path):
    root = _make_config_dir(tmp_path, {"data_file": "data/records.csv"})
    cfg = load_global_config(root)

    assert cfg.ui_title == "Choropleth Browser"
    assert cfg.geojson_path is None
    assert cfg.n_charts == 2

    (root / "global.json").write_text(json.dumps({}))
    with pytest.raises(ConfigurationError):
        load_global_config(root)


def test_missing_global_json(tmp_path):
    with pytest.raises(FileNotFoundError):
        load_global_config(tmp_path)


def test_load_records_csv_keeps_string_keys(tmp_path):
    root = _make_config_dir(tmp_path, {"data_file": "data/records.csv"})

    ds = load_records(root / "data/records.csv")

    assert len(ds) == 3
    assert ds.locations == ("01", "02")
    assert ds.groups == ("g1", "g2")


def test_load_records_json(tmp_path):
    path = tmp_path / "records.json"
    path.write_text(json.dumps([{"location": "A", "label": "x", "value": 4}]))

    ds = load_records(path)

    assert ds[0].location == "A"
    assert ds[0].group == "x"


def test_load_records_unsupported(tmp_path):
    path = tmp_path / "records.txt"
    path.write_text("nope")

    with pytest.raises(DataShapeError):
        load_records(path)


def test_load_geojson(tmp_path):
    root = _make_config_dir(tmp_path, {"data_file": "data/records.csv"})

    raw = load_geojson(root / "data/areas.geojson")
    assert len(raw["features"]) == 2

    bad = tmp_path / "bad.geojson"
    bad.write_text(json.dumps({"type": "Feature"}))
    with pytest.raises(DataShapeError):
        load_geojson(bad)
