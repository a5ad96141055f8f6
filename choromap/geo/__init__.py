"""
Geometry layer: feature accessors, feature-collection helpers and the
preprocessing step that turns raw GeoJSON into a WorkingGeometry
"""

from .accessors import auto_feature_id, auto_feature_name, property_accessor
from .features import features_filter, features_join, features_remove, generate_feature_collection
from .preprocess import Feature, WorkingGeometry, prepare

__all__ = [
    "auto_feature_id",
    "auto_feature_name",
    "property_accessor",
    "features_filter",
    "features_join",
    "features_remove",
    "generate_feature_collection",
    "Feature",
    "WorkingGeometry",
    "prepare",
]
