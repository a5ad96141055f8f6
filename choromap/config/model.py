from __future__ import annotations

from dataclasses import dataclass, field, fields, replace
from pathlib import Path
from typing import Any, Callable, Dict, Optional, Tuple

from choromap.core.colors import scheme_colors
from choromap.core.exceptions import ConfigurationError
from choromap.core.filter_state import FilterState
from choromap.core.formats import format_number
from choromap.geo.accessors import FeatureAccessor, auto_feature_id, auto_feature_name, property_accessor


def _as_tuple(values: Any, name: str) -> Optional[Tuple[str, ...]]:
    if values is None:
        return None
    if isinstance(values, (str, bytes)) or not hasattr(values, "__iter__"):
        raise ConfigurationError(f"'{name}' must be a list of feature ids, got {values!r}")
    return tuple(str(v) for v in values)


@dataclass(frozen=True)
class MapConfig:
    """
    Immutable options of one map chart.

    Fields:

    - width / height / margin_*: figure size in px
    - enabled: whether clicks toggle the location selection
    - labels: draw the per-feature sum at each centroid
    - labels_exclude: feature ids never labelled
    - legend: show the colour bar
    - legend_panel: show the group selector pills
    - tooltip: show hover details
    - exclude: feature ids removed from the geometry
    - include: feature ids kept in the geometry (applied after exclude)
    - color_scale: Plotly colorscale of the areas with data
    - color_scheme: qualitative scheme (plotly.colors.qualitative name or colour list) for labels and groups
    - number_format: number -> str, applied to every displayed aggregate
    - id_accessor / name_accessor: feature -> identity / display name
    """

    width: int = 1000
    height: int = 1000
    margin_left: int = 0
    margin_top: int = 0
    margin_right: int = 0
    margin_bottom: int = 0

    enabled: bool = True
    labels: bool = False
    labels_exclude: Optional[Tuple[str, ...]] = None
    legend: bool = True
    legend_panel: bool = True
    tooltip: bool = True

    exclude: Optional[Tuple[str, ...]] = None
    include: Optional[Tuple[str, ...]] = None

    color_scale: Any = "Blues"
    color_scheme: Any = "Plotly"

    number_format: Callable[[Any], str] = format_number
    id_accessor: FeatureAccessor = auto_feature_id
    name_accessor: FeatureAccessor = auto_feature_name

    def __post_init__(self) -> None:
        # frozen: normalise through object.__setattr__
        for name in ("exclude", "include", "labels_exclude"):
            object.__setattr__(self, name, _as_tuple(getattr(self, name), name))

        for name in ("number_format", "id_accessor", "name_accessor"):
            if not callable(getattr(self, name)):
                raise ConfigurationError(f"'{name}' must be callable")

        try:
            sample = self.number_format(0)
        except Exception as exc:
            raise ConfigurationError(f"'number_format' failed on 0: {exc}") from exc
        if not isinstance(sample, str):
            raise ConfigurationError(
                f"'number_format' must return a str, got {type(sample).__name__}"
            )

        if self.width <= 0 or self.height <= 0:
            raise ConfigurationError("'width' and 'height' must be positive")

        if not isinstance(self.color_scheme, str):
            object.__setattr__(self, "color_scheme", tuple(scheme_colors(self.color_scheme)))
        else:
            scheme_colors(self.color_scheme)

    def with_changes(self, **changes: Any) -> MapConfig:
        known = {f.name for f in fields(self)}
        unknown = set(changes) - known
        if unknown:
            raise ConfigurationError(f"Unknown map option(s): {sorted(unknown)}")
        return replace(self, **changes)

    @classmethod
    def from_dict(cls, raw: Dict[str, Any]) -> MapConfig:
        """
        Build a MapConfig from JSON-style options.

        Function-valued options can't be expressed in JSON, so 'id_property' and
        'name_property' select a property key for the feature accessors instead.
        """
        raw = dict(raw)
        kwargs: Dict[str, Any] = {}

        id_property = raw.pop("id_property", None)
        if id_property:
            kwargs["id_accessor"] = property_accessor(id_property)

        name_property = raw.pop("name_property", None)
        if name_property:
            kwargs["name_accessor"] = property_accessor(name_property)

        known = {f.name for f in fields(cls)} - {"number_format", "id_accessor", "name_accessor"}
        unknown = set(raw) - known
        if unknown:
            raise ConfigurationError(f"Unknown map option(s): {sorted(unknown)}")

        kwargs.update(raw)
        return cls(**kwargs)


@dataclass
class GlobalConfig:
    ui_title: str
    data_path: Path
    geojson_path: Optional[Path]
    n_charts: int = 2
    map_config: MapConfig = field(default_factory=MapConfig)
    initial_filters: FilterState = field(default_factory=FilterState)
