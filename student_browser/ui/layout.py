from __future__ import annotations

from typing import TYPE_CHECKING

import dash_bootstrap_components as dbc
from dash import dcc, html

from student_browser.ui.ids import IDs, graph_id

if TYPE_CHECKING:
    from student_browser.ui.context import AppContext

# Which panel each view goes into
LEFT_PANEL_VIEWS = ("bar_internet", "bar_romantic", "box_age", "box_absences", "histogram")
CENTER_PANEL_VIEWS = ("parallel", "scatter")
RIGHT_PANEL_VIEWS = ("pca",)


def _graph(ctx: AppContext, view_id: str, height: int) -> dcc.Graph:
    view = ctx.view(view_id)
    return dcc.Graph(
        id=graph_id(view_id),
        figure=view.figure(),
        style={"height": f"{height}px"},
        config={"displayModeBar": False},
    )


def build_layout(ctx: AppContext) -> dbc.Container:
    dataset = ctx.coordinator.dataset

    left = [
        html.Div(id=IDs.Control.STATS_PANEL, children=ctx.stats_panel.render() if ctx.stats_panel else []),
        dbc.Button("↺ Reset Filters", id=IDs.Control.RESET_BTN, color="secondary", className="w-100 mb-3"),
    ]
    left += [_graph(ctx, v, 220) for v in LEFT_PANEL_VIEWS if v in ctx.views]

    center = [_graph(ctx, v, 420) for v in CENTER_PANEL_VIEWS if v in ctx.views]
    right = [_graph(ctx, v, 600) for v in RIGHT_PANEL_VIEWS if v in ctx.views]

    return dbc.Container(
        fluid=True,
        children=[
            dbc.NavbarSimple(
                brand=ctx.config.ui_title,
                color="primary",
                dark=True,
                children=[
                    html.Span(
                        f"{dataset.name}: {len(dataset)} students",
                        id=IDs.Control.DATASET_META,
                        className="navbar-text",
                    )
                ],
            ),
            dbc.Row(
                [
                    dbc.Col(left, md=3, className="mt-3"),
                    dbc.Col(center, md=6, className="mt-3"),
                    dbc.Col(right, md=3, className="mt-3"),
                ],
                className="gx-3",
            ),
            html.Div(id=IDs.Control.STATUS_BAR, className="text-muted small mt-2"),
        ],
    )
