from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any, List, Optional

import dash
from dash import ALL, Input, Output, exceptions

from choromap.ui.ids import IDs
from choromap.ui.layout import selection_summary

if TYPE_CHECKING:
    from choromap.ui.config import AppConfig

logger = logging.getLogger(__name__)


def clicked_feature(click_data: Optional[dict[str, Any]]) -> Optional[str]:
    """Feature id of a Plotly choropleth click, None for clicks on outlines or labels."""
    if not click_data:
        return None
    points = click_data.get("points") or []
    if not points:
        return None
    location = points[0].get("location")
    return None if location is None else str(location)


def register_map_callbacks(app: dash.Dash, ctx: AppConfig) -> None:
    # ---------------------------------------------------------
    # Route every interaction to the chart it came from. Sibling charts
    # re-render through the event bus, so all figures are returned.
    # ---------------------------------------------------------
    @app.callback(
        Output({"type": IDs.Chart.GRAPH, "index": ALL}, "figure"),
        Output({"type": IDs.Chart.GROUP_SELECT, "index": ALL}, "value"),
        Output(IDs.Control.SELECTION_SUMMARY, "children"),
        Input({"type": IDs.Chart.GRAPH, "index": ALL}, "clickData"),
        Input({"type": IDs.Chart.GROUP_SELECT, "index": ALL}, "value"),
        Input({"type": IDs.Chart.CLEAR_BTN, "index": ALL}, "n_clicks"),
        prevent_initial_call=True,
    )
    def on_map_interaction(
        click_data: List[Optional[dict[str, Any]]],
        groups: List[Optional[str]],
        clear_clicks: List[Optional[int]],
    ):
        triggered = dash.ctx.triggered_id
        if triggered is None:
            raise exceptions.PreventUpdate

        index = triggered["index"]
        kind = triggered["type"]
        chart = ctx.charts[index]

        if kind == IDs.Chart.GRAPH:
            feature_id = clicked_feature(click_data[index])
            if feature_id is None:
                raise exceptions.PreventUpdate
            chart.on_feature_click(feature_id)
        elif kind == IDs.Chart.GROUP_SELECT:
            group = groups[index]
            if group is None:
                raise exceptions.PreventUpdate
            chart.select_group(group)
        elif kind == IDs.Chart.CLEAR_BTN:
            chart.on_background_click()
        else:
            logger.warning("Unexpected trigger %r", triggered)
            raise exceptions.PreventUpdate

        return (
            [c.figure for c in ctx.charts],
            [c.selected_group for c in ctx.charts],
            selection_summary(ctx.data_controller.filters("locations")),
        )
