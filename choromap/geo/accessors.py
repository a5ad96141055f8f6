from __future__ import annotations

from typing import Any, Callable, Dict, Mapping, Union

Primitive = Union[str, int, float]
FeatureAccessor = Callable[[Mapping[str, Any]], Any]

# Property keys probed, in order, by the automatic accessors
ID_PROPERTIES = ("id", "ID", "code", "CODE", "key", "GEOID", "iso_a3", "ISO_A3")
NAME_PROPERTIES = ("name", "NAME", "Name", "nom", "label", "title")


def is_primitive(value: Any) -> bool:
    return isinstance(value, (str, int, float)) and not isinstance(value, bool)


def _properties(feature: Mapping[str, Any]) -> Dict[str, Any]:
    return feature.get("properties") or {}


def auto_feature_id(feature: Mapping[str, Any]) -> Any:
    """
    Identity of a GeoJSON feature: the feature's own 'id' member,
    else the first of {@link ID_PROPERTIES} found in its properties.
    Returns None if nothing matches.
    """
    if is_primitive(feature.get("id")):
        return feature["id"]

    props = _properties(feature)
    for key in ID_PROPERTIES:
        if is_primitive(props.get(key)):
            return props[key]
    return None


def auto_feature_name(feature: Mapping[str, Any]) -> Any:
    """Display name of a feature, falling back to its identity."""
    props = _properties(feature)
    for key in NAME_PROPERTIES:
        if is_primitive(props.get(key)):
            return props[key]
    return auto_feature_id(feature)


def property_accessor(key: str) -> FeatureAccessor:
    """Accessor reading `properties[key]`, used for `id_property` / `name_property` config entries."""

    def accessor(feature: Mapping[str, Any]) -> Any:
        return _properties(feature).get(key)

    accessor.__name__ = f"property_accessor_{key}"
    return accessor
