from __future__ import annotations

import logging
import math
from typing import TYPE_CHECKING, Any, Dict, Iterable, List, Optional, Sequence

from shapely.geometry import box, mapping, shape
from shapely.geometry.base import BaseGeometry
from shapely.ops import unary_union
from shapely.validation import make_valid

if TYPE_CHECKING:
    from choromap.geo.preprocess import Feature

logger = logging.getLogger(__name__)


def to_shape(geometry: Dict[str, Any]) -> BaseGeometry:
    """Shapely geometry for a GeoJSON geometry mapping, repaired if invalid."""
    geom = shape(geometry)
    if not geom.is_empty and not geom.is_valid:
        geom = make_valid(geom)
    return geom


def features_remove(features: Sequence[Feature], ids: Iterable[Any]) -> List[Feature]:
    """Features whose id is NOT in `ids`."""
    drop = {str(i) for i in ids}
    return [f for f in features if f.feature_id not in drop]


def features_filter(features: Sequence[Feature], ids: Iterable[Any]) -> List[Feature]:
    """Features whose id is in `ids`."""
    keep = {str(i) for i in ids}
    return [f for f in features if f.feature_id in keep]


def features_join(features: Optional[Sequence[Feature]]) -> Optional[Dict[str, Any]]:
    """
    Merge the features into a single outline.

    Shared inner edges dissolve, so drawing the result strokes only the exterior border
    of the whole set.

    :return: a FeatureCollection with one feature, or None for no (non-empty) features
    """
    if not features:
        return None

    shapes = [f.shape for f in features]
    shapes = [s for s in shapes if not s.is_empty]
    if not shapes:
        return None

    merged = unary_union(shapes)
    return {
        "type": "FeatureCollection",
        "features": [
            {
                "type": "Feature",
                "properties": {"featureIds": [f.feature_id for f in features]},
                "geometry": mapping(merged),
            }
        ],
    }


def generate_feature_collection(
    locations: Sequence[Any],
    columns: Optional[int] = None,
    size: float = 1.0,
) -> Dict[str, Any]:
    """
    Placeholder geometry for data without a map: one square per location laid out
    row by row in a grid.

    :param locations: location keys; each becomes the feature's id and name
    :param columns: squares per row, defaults to ceil(sqrt(n))
    :param size: edge length of each square in degrees
    """
    if columns is None:
        columns = max(1, math.ceil(math.sqrt(len(locations))))

    features = []
    for index, location in enumerate(locations):
        row, col = divmod(index, columns)
        x0 = col * size
        y0 = -row * size
        features.append(
            {
                "type": "Feature",
                "id": location,
                "properties": {"id": location, "name": str(location)},
                "geometry": mapping(box(x0, y0 - size, x0 + size, y0)),
            }
        )

    logger.debug("Generated placeholder geometry", extra={"n_features": len(features)})
    return {"type": "FeatureCollection", "features": features}
