from __future__ import annotations

import itertools
import logging
from typing import Any, Dict, List, Optional, Sequence, Tuple

import plotly.graph_objects as go
from shapely.geometry import MultiPolygon, Polygon
from shapely.geometry.base import BaseGeometry

from choromap.config.model import MapConfig
from choromap.core.aggregation import DataView, compute_data_view
from choromap.core.colors import key_colors
from choromap.core.data_controller import DataController
from choromap.core.events import (
    DATA_DID_CHANGE,
    MAP_SELECTION_DID_CHANGE,
    MAP_SELECTION_WILL_CHANGE,
    EventBus,
    events,
    filter_did_change,
)
from choromap.core.exceptions import ConfigurationError
from choromap.core.formats import truncate
from choromap.geo.features import features_join, generate_feature_collection, to_shape
from choromap.geo.preprocess import FEATURE_ID_PROPERTY, Feature, WorkingGeometry, prepare
from choromap.views.map_text import colorbar_ticks, feature_label, tooltip_html

logger = logging.getLogger(__name__)

LOCATIONS = "locations"

# Options whose change invalidates the working geometry
GEOMETRY_OPTIONS = {"exclude", "include", "id_accessor", "name_accessor"}

NO_DATA_COLOR = "white"
ZERO_COLOR = "whitesmoke"
BORDER_COLOR = "#555555"
SELECTION_COLOR = "#222222"


def _constant_scale(color: str) -> List[List[Any]]:
    return [[0, color], [1, color]]


def _polygons(geom: BaseGeometry) -> List[Polygon]:
    if isinstance(geom, Polygon):
        return [geom]
    if isinstance(geom, MultiPolygon):
        return list(geom.geoms)
    # GeometryCollection from make_valid; lines and points have no rings
    parts = getattr(geom, "geoms", [])
    return [p for part in parts for p in _polygons(part)]


def _outline(collection: Optional[Dict[str, Any]]) -> Tuple[List[Optional[float]], List[Optional[float]]]:
    """lon / lat sequences tracing every ring of a FeatureCollection, rings separated by None."""
    lons: List[Optional[float]] = []
    lats: List[Optional[float]] = []
    if not collection:
        return lons, lats

    for feature in collection["features"]:
        for polygon in _polygons(to_shape(feature["geometry"])):
            for ring in [polygon.exterior, *polygon.interiors]:
                xs, ys = ring.xy
                lons.extend(float(x) for x in xs)
                lats.extend(float(y) for y in ys)
                lons.append(None)
                lats.append(None)
    return lons, lats


class MapChart:
    """
    One choropleth chart instance and the selection coordinator behind it.

    Holds an immutable MapConfig, a shared DataController, the caller's GeoJSON and the
    WorkingGeometry derived from it, plus the group currently displayed.

    Event protocol (namespace = chart id):
    - feature click      -> DataController.toggle_filter("locations", id, self)
    - background click   -> DataController.clear("locations", self)
    - legend pill change -> "map-selection-will-change", set group, "map-selection-did-change"

    Every handler drops events whose sender is this chart; otherwise it adopts the change
    and re-renders. The bus itself never filters, so this check is what keeps a broadcast
    from looping back into its origin.
    """

    _ids = itertools.count(1)

    def __init__(
        self,
        config: Optional[MapConfig] = None,
        data_controller: Optional[DataController] = None,
        geojson: Optional[Dict[str, Any]] = None,
        bus: Optional[EventBus] = None,
        chart_id: Optional[str] = None,
    ) -> None:
        self.config = config if config is not None else MapConfig()
        self.data_controller = data_controller

        if bus is None:
            bus = data_controller.bus if data_controller is not None else events
        self.bus = bus

        self.id = chart_id or f"map-{next(MapChart._ids)}"
        self.geojson: Optional[Dict[str, Any]] = None
        self.working: Optional[WorkingGeometry] = None
        self.selected_group: Optional[str] = None
        self.figure: Optional[go.Figure] = None
        self.render_count = 0
        self._placeholder_geometry = False
        # Locations the placeholder grid was generated from, before exclude/include
        self._placeholder_locations: Optional[Tuple[str, ...]] = None

        self.bus.subscribe(MAP_SELECTION_DID_CHANGE, self.id, self._selection_did_change)
        self.bus.subscribe(filter_did_change(LOCATIONS), self.id, self._locations_did_change)
        self.bus.subscribe(DATA_DID_CHANGE, self.id, self._data_did_change)

        if geojson is not None:
            self.set_geojson(geojson)

    def destroy(self) -> None:
        """Drop every bus subscription of this chart."""
        self.bus.unsubscribe(self.id)

    # ------------------------------------------------------------------
    # Geometry / configuration
    # ------------------------------------------------------------------
    def set_geojson(self, geojson: Optional[Dict[str, Any]]) -> None:
        self.geojson = geojson
        self._placeholder_geometry = False
        self._placeholder_locations = None
        self._geometry_did_change()

    def configure(self, **changes: Any) -> None:
        """Replace config options; the working geometry is rebuilt when a geometry option changed."""
        self.config = self.config.with_changes(**changes)
        if GEOMETRY_OPTIONS & set(changes):
            self._geometry_did_change()

    def _geometry_did_change(self) -> None:
        if self.geojson is None:
            self.working = None
            return

        self.working = prepare(
            self.geojson,
            exclude_ids=self.config.exclude,
            include_ids=self.config.include,
            id_accessor=self.config.id_accessor,
            name_accessor=self.config.name_accessor,
        )

        if self.data_controller is None:
            self.data_controller = DataController(bus=self.bus)

    def _ensure_geometry(self, view: DataView) -> None:
        if self.geojson is not None and not self._placeholder_geometry:
            return
        locations = tuple(view.locations)
        if self.working is not None and self._placeholder_locations == locations:
            return
        self.geojson = generate_feature_collection(locations)
        self._placeholder_geometry = True
        self._placeholder_locations = locations
        self._geometry_did_change()

    # ------------------------------------------------------------------
    # Data
    # ------------------------------------------------------------------
    def data_view(self) -> DataView:
        """
        Aggregate the controller's data for the displayed group.

        The resolved group is kept, so a stale selection is corrected once.

        :raises ConfigurationError: if no DataController is attached
        """
        dc = self.data_controller
        if dc is None:
            raise ConfigurationError(f"No data controller attached to chart '{self.id}'")

        view = compute_data_view(dc.data(), self.selected_group)
        self.selected_group = view.selected_group
        return view

    def is_selected(self, feature_id: Any) -> bool:
        dc = self.data_controller
        return dc is not None and dc.is_filter(LOCATIONS, feature_id)

    def selected_features(self) -> Optional[List[Feature]]:
        """None without geometry, [] when nothing is selected."""
        if self.working is None:
            return None

        selected = self.data_controller.filters(LOCATIONS) if self.data_controller else []
        if not selected:
            return []
        return self.working.select(selected)

    def selection_border(self) -> Optional[Dict[str, Any]]:
        border = features_join(self.selected_features())
        if border is None:
            logger.debug("No features selected", extra={"chart_id": self.id})
        return border

    # ------------------------------------------------------------------
    # Interaction (called from the rendering surface)
    # ------------------------------------------------------------------
    def on_feature_click(self, feature_id: Any) -> None:
        if not self.config.enabled:
            return
        if self.working is None or self.working.get(feature_id) is None:
            logger.debug(
                "Click on unknown feature ignored",
                extra={"chart_id": self.id, "feature_id": str(feature_id)},
            )
            return

        self._controller().toggle_filter(LOCATIONS, feature_id, self)
        self.run()

    def on_background_click(self) -> None:
        self._controller().clear(LOCATIONS, self)
        self.run()

    def select_group(self, group: str) -> None:
        if group == self.selected_group:
            return

        self.bus.publish(MAP_SELECTION_WILL_CHANGE, self, group)
        self.selected_group = group
        self.bus.publish(MAP_SELECTION_DID_CHANGE, self, group)
        self.run()

    def _controller(self) -> DataController:
        if self.data_controller is None:
            raise ConfigurationError(f"No data controller attached to chart '{self.id}'")
        return self.data_controller

    # ------------------------------------------------------------------
    # Bus handlers
    # ------------------------------------------------------------------
    def _selection_did_change(self, sender: Any, group: str) -> None:
        if sender is self:
            logger.debug("Map is sender, ignoring selection change", extra={"chart_id": self.id})
            return
        self.selected_group = group
        self._rerun()

    def _locations_did_change(self, sender: Any, filters: Sequence[str]) -> None:
        if sender is self:
            logger.debug("Map is sender, ignoring filter change", extra={"chart_id": self.id})
            return
        self._rerun()

    def _data_did_change(self, sender: Any, dataset: Any) -> None:
        if sender is self:
            return
        self._rerun()

    def _rerun(self) -> None:
        if self.data_controller is None:
            logger.debug("No data controller, skipping re-render", extra={"chart_id": self.id})
            return
        self.run()

    # ------------------------------------------------------------------
    # Rendering
    # ------------------------------------------------------------------
    def run(self) -> go.Figure:
        """Recompute the data view and rebuild the figure."""
        view = self.data_view()
        self._ensure_geometry(view)
        self.figure = self.render_figure(view)
        self.render_count += 1
        return self.figure

    def render_figure(self, view: DataView) -> go.Figure:
        if self.working is None or self.working.is_empty:
            logger.info("No features to render", extra={"chart_id": self.id})
            return self.empty_figure("No features to display")

        cfg = self.config
        selected = self.selected_features() or []
        geojson = self.working.to_geojson()
        label_colors = key_colors(view.labels, cfg.color_scheme)

        no_data: List[Feature] = []
        zero: List[Feature] = []
        with_data: List[Feature] = []
        for feature in self.working:
            value = view.location_to_sum.get(feature.feature_id)
            if value is None:
                no_data.append(feature)
            elif value == 0:
                zero.append(feature)
            else:
                with_data.append(feature)

        def hover_text(features: List[Feature]) -> List[str]:
            texts = []
            for f in features:
                shown = selected if self.is_selected(f.feature_id) else [f]
                texts.append(tooltip_html(shown, view, cfg.number_format, label_colors))
            return texts

        def areas(features: List[Feature], **kwargs: Any) -> go.Choropleth:
            return go.Choropleth(
                geojson=geojson,
                featureidkey=f"properties.{FEATURE_ID_PROPERTY}",
                locations=[f.feature_id for f in features],
                text=hover_text(features) if cfg.tooltip else None,
                hoverinfo="text" if cfg.tooltip else "skip",
                marker_line_color="lightgray",
                marker_line_width=0.5,
                **kwargs,
            )

        fig = go.Figure()

        if no_data:
            fig.add_trace(
                areas(
                    no_data,
                    z=[0] * len(no_data),
                    colorscale=_constant_scale(NO_DATA_COLOR),
                    showscale=False,
                    name="No Data",
                )
            )
        if zero:
            fig.add_trace(
                areas(
                    zero,
                    z=[0] * len(zero),
                    colorscale=_constant_scale(ZERO_COLOR),
                    showscale=False,
                    name="0",
                )
            )
        if with_data:
            tickvals, ticktext = colorbar_ticks(view, cfg.number_format)
            group_color = key_colors(view.groups, cfg.color_scheme).get(view.selected_group)
            fig.add_trace(
                areas(
                    with_data,
                    z=[view.location_to_sum[f.feature_id] for f in with_data],
                    zmin=0,
                    zmax=view.max_location or 1,
                    colorscale=cfg.color_scale,
                    showscale=cfg.legend,
                    colorbar={
                        "title": {"text": truncate(view.selected_group, 20), "font": {"color": group_color}},
                        "tickvals": tickvals,
                        "ticktext": ticktext,
                    },
                    name=str(view.selected_group),
                )
            )

        if self.working.borders is not None:
            fig.add_trace(self._outline_trace(self.working.borders, BORDER_COLOR, 1, "borders"))

        selection = self.selection_border()
        if selection is not None:
            fig.add_trace(self._outline_trace(selection, SELECTION_COLOR, 3, "selection"))

        if cfg.labels:
            self._add_labels(fig, view)

        fig.update_geos(fitbounds="locations", visible=False)
        fig.update_layout(
            width=cfg.width,
            height=cfg.height,
            margin=dict(l=cfg.margin_left, r=cfg.margin_right, t=cfg.margin_top, b=cfg.margin_bottom),
            showlegend=False,
            clickmode="event",
        )
        return fig

    @staticmethod
    def _outline_trace(collection: Dict[str, Any], color: str, width: int, name: str) -> go.Scattergeo:
        lons, lats = _outline(collection)
        return go.Scattergeo(
            lon=lons,
            lat=lats,
            mode="lines",
            line={"color": color, "width": width},
            hoverinfo="skip",
            name=name,
        )

    def _add_labels(self, fig: go.Figure, view: DataView) -> None:
        labelled = [f for f in self.working if f.center is not None]
        texts = [feature_label(f, view, self.config.number_format, self.config.labels_exclude) for f in labelled]
        fig.add_trace(
            go.Scattergeo(
                lon=[f.center[0] for f in labelled],
                lat=[f.center[1] for f in labelled],
                text=texts,
                mode="text",
                hoverinfo="skip",
                name="labels",
            )
        )

    @staticmethod
    def empty_figure(message: str) -> go.Figure:
        """
        Standardised 'no data' figure.
        """
        fig = go.Figure()
        fig.update_layout(
            title=message,
            xaxis={"visible": False},
            yaxis={"visible": False},
        )
        return fig

    def __repr__(self) -> str:
        return f"MapChart(id={self.id!r}, selected_group={self.selected_group!r})"
