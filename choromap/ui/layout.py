from __future__ import annotations

from typing import TYPE_CHECKING, List

import dash_bootstrap_components as dbc
from dash import dcc, html

from choromap.core.colors import key_colors
from choromap.core.formats import truncate
from choromap.ui.ids import IDs, chart_id
from choromap.views.map_view import MapChart

if TYPE_CHECKING:
    from choromap.ui.config import AppConfig


def selection_summary(selected: List[str]) -> str:
    if not selected:
        return "No locations selected - click a map area to select it."
    return f"Selected locations: {', '.join(selected)}"


def build_chart_panel(chart: MapChart, index: int) -> dbc.Card:
    groups = chart.data_view().groups if chart.data_controller is not None else ()
    cfg = chart.config
    group_colors = key_colors(groups, cfg.color_scheme)

    body = [
        dcc.Graph(
            id=chart_id(IDs.Chart.GRAPH, index),
            figure=chart.figure if chart.figure is not None else MapChart.empty_figure("Loading..."),
            config={"responsive": True, "displayModeBar": False},
        ),
    ]

    if cfg.legend_panel:
        body.append(
            dcc.RadioItems(
                id=chart_id(IDs.Chart.GROUP_SELECT, index),
                options=[
                    {"label": html.Span(truncate(g, 20), style={"color": group_colors[g]}), "value": g}
                    for g in groups
                ],
                value=chart.selected_group,
                inline=True,
                className="mt-2",
                inputClassName="me-1",
                labelClassName="me-3",
            )
        )
    else:
        # Keep the pattern-matching outputs aligned across charts
        body.append(
            dcc.RadioItems(
                id=chart_id(IDs.Chart.GROUP_SELECT, index),
                options=[],
                value=chart.selected_group,
                style={"display": "none"},
            )
        )

    body.append(
        html.Div(
            dbc.Button(
                "Clear selection",
                id=chart_id(IDs.Chart.CLEAR_BTN, index),
                color="secondary",
                size="sm",
                className="mt-2 ms-auto",
            ),
            className="d-flex justify-content-end",
        )
    )

    return dbc.Card(
        [
            dbc.CardHeader(html.Strong(chart.id), className="p-2"),
            dbc.CardBody(body),
        ],
        className="mt-3",
    )


def build_layout(ctx: AppConfig) -> dbc.Container:
    n = len(ctx.charts)
    width = max(1, 12 // n)

    return dbc.Container(
        fluid=True,
        children=[
            dbc.NavbarSimple(
                brand=ctx.global_config.ui_title,
                color="primary",
                dark=True,
                fluid=True,
            ),
            html.Div(
                selection_summary(ctx.data_controller.filters("locations")),
                id=IDs.Control.SELECTION_SUMMARY,
                className="mt-3 text-muted",
            ),
            dbc.Row(
                [
                    dbc.Col(build_chart_panel(chart, index), md=width)
                    for index, chart in enumerate(ctx.charts)
                ]
            ),
        ],
    )
