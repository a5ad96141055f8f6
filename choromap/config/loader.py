from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Dict, Optional

import pandas as pd

from choromap.config.model import GlobalConfig, MapConfig
from choromap.core.dataset import Dataset
from choromap.core.exceptions import ConfigurationError, DataShapeError
from choromap.core.filter_state import FilterState

logger = logging.getLogger(__name__)


def _resolve(root: Path, raw: Optional[str]) -> Optional[Path]:
    # Absolute paths are used as-is, relative ones resolve against the config root
    if raw is None:
        return None
    path = Path(raw)
    return path if path.is_absolute() else (root / path).resolve()


def load_global_config(root: Path) -> GlobalConfig:
    """
    Load configuration from a config directory.

    Expected structure:

        root/
            global.json
            data/
                <records>.csv | <records>.json
                <features>.geojson

    global.json keys:

    - ui_title: title for the UI, defaults to 'Choropleth Browser'
    - data_file: records file (required)
    - geojson_file: feature collection; without it placeholder geometry is generated
    - n_charts: number of synchronised map charts, defaults to 2
    - map: options for MapConfig.from_dict
    - initial_filters: {"locations": [...], "labels": [...], "groups": [...]}

    :raises FileNotFoundError: if global.json does not exist
    :raises ConfigurationError: if 'data_file' is missing or an option is invalid
    """
    root = Path(root)
    logger.info("Loading global config", extra={"config_root": str(root)})

    global_path = root / "global.json"
    if not global_path.is_file():
        raise FileNotFoundError(f"File not found at {global_path}")

    with global_path.open() as f:
        raw_global: Dict[str, Any] = json.load(f)

    data_path = _resolve(root, raw_global.get("data_file"))
    if data_path is None:
        raise ConfigurationError(f"'data_file' missing in {global_path}")

    n_charts = int(raw_global.get("n_charts", 2))
    if n_charts < 1:
        raise ConfigurationError("'n_charts' must be at least 1")

    return GlobalConfig(
        ui_title=raw_global.get("ui_title", "Choropleth Browser"),
        data_path=data_path,
        geojson_path=_resolve(root, raw_global.get("geojson_file")),
        n_charts=n_charts,
        map_config=MapConfig.from_dict(raw_global.get("map", {})),
        initial_filters=FilterState.from_dict(raw_global.get("initial_filters", {})),
    )


def load_records(path: Path) -> Dataset:
    """
    Read a records file into a Dataset.

    Supported formats:
    - .csv: columns location, label and/or group, value
    - .json: a list of record objects
    """
    path = Path(path)
    if not path.is_file():
        raise FileNotFoundError(f"File not found at {path}")

    suffix = path.suffix.lower()
    if suffix == ".csv":
        # Keys stay strings ("01001" must not become 1001)
        df = pd.read_csv(path, dtype={"location": str, "label": str, "group": str})
    elif suffix == ".json":
        df = pd.read_json(path, orient="records", dtype={"location": str, "label": str, "group": str})
    else:
        raise DataShapeError(f"Unsupported records format '{suffix}' for {path}")

    dataset = Dataset.from_frame(df)
    logger.info(
        "Records loaded",
        extra={
            "path": str(path),
            "n_records": len(dataset),
            "n_locations": len(dataset.locations),
            "n_groups": len(dataset.groups),
        },
    )
    return dataset


def load_geojson(path: Path) -> Dict[str, Any]:
    path = Path(path)
    if not path.is_file():
        raise FileNotFoundError(f"File not found at {path}")

    with path.open() as f:
        raw = json.load(f)

    if raw.get("type") != "FeatureCollection":
        raise DataShapeError(f"{path} is not a GeoJSON FeatureCollection")

    logger.info(
        "GeoJSON loaded",
        extra={"path": str(path), "n_features": len(raw.get("features", []))},
    )
    return raw
