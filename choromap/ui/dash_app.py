from __future__ import annotations

import logging
from pathlib import Path

import dash_bootstrap_components as dbc
from dash import Dash

from .config import AppConfig
from choromap.config.loader import load_geojson, load_global_config, load_records
from choromap.core.data_controller import DataController
from choromap.core.events import EventBus, events
from choromap.ui.callbacks import register_map_callbacks
from choromap.ui.layout import build_layout
from choromap.views.map_view import MapChart

logger = logging.getLogger(__name__)


def build_app_config(config_root: Path | str = Path("config"), bus: EventBus = events) -> AppConfig:
    config_root = Path(config_root)

    # 1) Load Config
    global_config = load_global_config(config_root)

    # 2) Shared data controller
    dataset = load_records(global_config.data_path)
    controller = DataController(dataset, bus=bus, filter_state=global_config.initial_filters)

    # 3) Charts sharing the controller; without a geojson each chart generates placeholder geometry
    geojson = load_geojson(global_config.geojson_path) if global_config.geojson_path else None

    charts = []
    for _ in range(global_config.n_charts):
        chart = MapChart(config=global_config.map_config, data_controller=controller, geojson=geojson, bus=bus)
        chart.run()
        charts.append(chart)

    ctx = AppConfig(
        config_root=config_root,
        global_config=global_config,
        data_controller=controller,
        charts=charts,
    )
    ctx.validate()

    logger.info(
        "App context built",
        extra={
            "config_root": str(config_root),
            "n_charts": len(charts),
            "n_records": len(dataset),
        },
    )
    return ctx


def create_dash_app(config_root: Path | str = Path("config")) -> Dash:
    ctx = build_app_config(config_root)

    app = Dash(
        __name__,
        external_stylesheets=[dbc.themes.FLATLY],
    )
    app.title = ctx.global_config.ui_title
    app.layout = build_layout(ctx)

    register_map_callbacks(app, ctx)

    return app
