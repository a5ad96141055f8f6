from __future__ import annotations

import copy
import logging
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, Iterator, List, Mapping, Optional, Sequence, Tuple

from shapely.geometry import GeometryCollection
from shapely.geometry.base import BaseGeometry

from choromap.core.exceptions import DataShapeError
from choromap.geo.accessors import FeatureAccessor, auto_feature_id, auto_feature_name, is_primitive
from choromap.geo.features import features_filter, features_join, features_remove, to_shape

logger = logging.getLogger(__name__)

FEATURE_ID_PROPERTY = "featureId"


@dataclass(frozen=True)
class Feature:
    """
    One preprocessed GeoJSON feature.

    Fields:

    - feature_id: stable identity (accessor result, normalised to str). Data locations,
      exclude/include lists and the 'locations' filter all refer to this
    - name: display name
    - center: (lon, lat) centroid, None for empty or null geometry
    - geometry: GeoJSON geometry mapping (a private copy), None for an unlocated feature
    - properties: the feature's property bag (a private copy)
    - raw_id: the value the id accessor returned
    """

    feature_id: str
    name: str
    center: Optional[Tuple[float, float]]
    geometry: Optional[Dict[str, Any]]
    properties: Dict[str, Any] = field(default_factory=dict)
    raw_id: Any = None

    @property
    def shape(self) -> BaseGeometry:
        if self.geometry is None:
            return GeometryCollection()
        return to_shape(self.geometry)

    def to_geojson(self) -> Dict[str, Any]:
        props = dict(self.properties)
        props[FEATURE_ID_PROPERTY] = self.feature_id
        return {
            "type": "Feature",
            "id": self.feature_id,
            "properties": props,
            "geometry": self.geometry,
        }


@dataclass(frozen=True)
class WorkingGeometry:
    """
    Render-ready copy of a feature collection: ids assigned, centroids computed,
    exclude/include applied and the exterior border merged.

    `borders` is None when no features remain.
    """

    features: Tuple[Feature, ...] = ()
    borders: Optional[Dict[str, Any]] = None

    @property
    def ids(self) -> List[str]:
        return [f.feature_id for f in self.features]

    @property
    def is_empty(self) -> bool:
        return not self.features

    def get(self, feature_id: Any) -> Optional[Feature]:
        key = str(feature_id)
        for feature in self.features:
            if feature.feature_id == key:
                return feature
        return None

    def select(self, feature_ids: Iterable[Any]) -> List[Feature]:
        """Features whose id is in `feature_ids`, in geometry order."""
        return features_filter(self.features, feature_ids)

    def to_geojson(self) -> Dict[str, Any]:
        return {
            "type": "FeatureCollection",
            "features": [f.to_geojson() for f in self.features if f.geometry is not None],
        }

    def __iter__(self) -> Iterator[Feature]:
        return iter(self.features)

    def __len__(self) -> int:
        return len(self.features)


def _access(accessor: FeatureAccessor, feature: Mapping[str, Any], what: str, index: int) -> Any:
    try:
        value = accessor(feature)
    except Exception as exc:
        raise DataShapeError(f"Feature {what} accessor failed for feature #{index}: {exc}") from exc

    if not is_primitive(value):
        raise DataShapeError(
            f"Feature {what} accessor must return a str or number for feature #{index}, got {value!r}"
        )
    return value


def _center(geom: BaseGeometry) -> Optional[Tuple[float, float]]:
    if geom.is_empty:
        return None
    centroid = geom.centroid
    return (float(centroid.x), float(centroid.y))


def _build_feature(
    raw: Mapping[str, Any],
    index: int,
    id_accessor: FeatureAccessor,
    name_accessor: FeatureAccessor,
) -> Feature:
    if not isinstance(raw, Mapping):
        raise DataShapeError(f"Feature #{index} is not a mapping: {raw!r}")

    raw_id = _access(id_accessor, raw, "id", index)
    name = _access(name_accessor, raw, "name", index)

    geometry = raw.get("geometry")
    if geometry is None:
        # Unlocated feature: kept for ids and names, never drawn
        logger.debug("Feature has null geometry", extra={"feature_index": index, "feature_id": str(raw_id)})
        geom: BaseGeometry = GeometryCollection()
    elif not isinstance(geometry, Mapping):
        raise DataShapeError(f"Feature #{index} ({raw_id}) has malformed geometry: {geometry!r}")
    else:
        try:
            geom = to_shape(geometry)
        except Exception as exc:
            raise DataShapeError(f"Feature #{index} ({raw_id}) has invalid geometry: {exc}") from exc

    return Feature(
        feature_id=str(raw_id),
        name=str(name),
        center=_center(geom),
        geometry=dict(geometry) if geometry is not None else None,
        properties=dict(raw.get("properties") or {}),
        raw_id=raw_id,
    )


def prepare(
    raw_geojson: Mapping[str, Any],
    exclude_ids: Optional[Sequence[Any]] = None,
    include_ids: Optional[Sequence[Any]] = None,
    id_accessor: FeatureAccessor = auto_feature_id,
    name_accessor: FeatureAccessor = auto_feature_name,
) -> WorkingGeometry:
    """
    Build the WorkingGeometry for a GeoJSON FeatureCollection.

    Steps:
    1. deep-copy the input (the caller's object is never touched)
    2. assign ids / names through the accessors and precompute centroids
    3. drop features listed in `exclude_ids` (if non-empty)
    4. keep only features listed in `include_ids` (if non-empty), after the exclude step,
       so an id present in both lists ends up absent
    5. merge the remaining features into one exterior border

    :raises DataShapeError: if the input is not a FeatureCollection, an accessor raises or
        returns a non-primitive, or a feature has malformed geometry (null geometry is allowed)
    """
    if not isinstance(raw_geojson, Mapping) or not isinstance(raw_geojson.get("features"), list):
        raise DataShapeError("Expected a GeoJSON FeatureCollection with a 'features' list")

    work = copy.deepcopy(raw_geojson)

    features: List[Feature] = [
        _build_feature(raw, index, id_accessor, name_accessor)
        for index, raw in enumerate(work["features"])
    ]
    n_input = len(features)

    if exclude_ids:
        features = features_remove(features, exclude_ids)

    if include_ids:
        features = features_filter(features, include_ids)

    if not features:
        logger.info(
            "No features left after exclude/include; skipping border merge",
            extra={"n_input_features": n_input},
        )
        return WorkingGeometry(features=(), borders=None)

    borders = features_join(features)

    logger.debug(
        "Prepared working geometry",
        extra={"n_input_features": n_input, "n_features": len(features)},
    )
    return WorkingGeometry(features=tuple(features), borders=borders)
