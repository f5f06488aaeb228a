from __future__ import annotations

import logging
from typing import Optional

import dash_bootstrap_components as dbc
from dash import Dash

from student_browser.config import AppConfig, load_config
from student_browser.core.coordinator import Coordinator
from student_browser.core.dataset import Dataset
from student_browser.core.dataset_loader import load_student_dataset
from student_browser.core.view_registry import ViewRegistry
from student_browser.ui.callbacks import register_callbacks
from student_browser.ui.context import AppContext
from student_browser.ui.layout import build_layout
from student_browser.ui.stats_panel import StatsPanel

logger = logging.getLogger(__name__)


def build_view_registry() -> ViewRegistry:
    """Registration order is broadcast order."""
    from student_browser.views import (
        ScatterView,
        ParallelCoordinatesView,
        PCAView,
        BarChartView,
        BoxPlotView,
        HistogramView,
    )

    registry = ViewRegistry()
    registry.register(ScatterView)
    registry.register(ParallelCoordinatesView)
    registry.register(PCAView)
    registry.register(BarChartView, "bar_internet", attribute="internet", label="Internet Access")
    registry.register(BarChartView, "bar_romantic", attribute="romantic", label="Romantic Relationship")
    registry.register(HistogramView)
    registry.register(BoxPlotView, "box_age", attribute="age", label="Age Dist.")
    registry.register(BoxPlotView, "box_absences", attribute="absences", label="Absences Dist.")
    return registry


def build_context(config: AppConfig, dataset: Optional[Dataset] = None) -> AppContext:
    """
    Load the dataset (unless given), create every view and initialise the
    Coordinator with them. Independent of Dash so it can be tested directly.
    """
    if dataset is None:
        dataset = load_student_dataset(config.data_path, policy=config.cleaning_policy)

    registry = build_view_registry()
    views = {view_id: registry.create(view_id, dataset) for view_id in registry.ids()}

    coordinator = Coordinator(
        config.stats_config,
        flip_pc1=config.flip_pc1,
        strict_pca=config.strict_pca,
    )
    stats_panel = StatsPanel()
    coordinator.initialize(dataset, views=views.values(), stats_sinks=[stats_panel])

    return AppContext(
        config=config,
        coordinator=coordinator,
        registry=registry,
        views=views,
        stats_panel=stats_panel,
    )


def create_dash_app(config: Optional[AppConfig] = None, dataset: Optional[Dataset] = None) -> Dash:
    config = config or load_config()
    ctx = build_context(config, dataset)

    app = Dash(__name__, external_stylesheets=[dbc.themes.FLATLY])
    app.title = config.ui_title
    app.layout = build_layout(ctx)

    register_callbacks(app, ctx)

    logger.info(
        "Dash app created",
        extra={"dataset": ctx.coordinator.dataset.name, "views": list(ctx.views.keys())},
    )
    return app
