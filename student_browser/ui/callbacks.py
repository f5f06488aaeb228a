from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any, Dict, List, Optional

import dash
from dash import Input, Output

from student_browser.ui.ids import IDs, graph_id
from student_browser.views.bar_view import BarChartView
from student_browser.views.parallel_view import ParallelCoordinatesView
from student_browser.views.scatter_view import ScatterView

if TYPE_CHECKING:
    from student_browser.ui.context import AppContext

logger = logging.getLogger(__name__)


def _first_point(click_data: Optional[Dict[str, Any]]) -> Optional[Dict[str, Any]]:
    if not click_data:
        return None
    points = click_data.get("points") or []
    return points[0] if points else None


def handle_interaction(ctx: AppContext, trigger_id: Optional[str], payload: Any) -> bool:
    """
    Route one Dash interaction to the view that owns it.

    The view publishes the matching event; the Coordinator applies it and
    broadcasts before this returns. Returns False when the payload carried
    nothing actionable.
    """
    if trigger_id is None:
        return False

    if trigger_id == IDs.Control.RESET_BTN:
        ctx.coordinator.reset()
        return True

    for view_id, view in ctx.views.items():
        if trigger_id != graph_id(view_id):
            continue

        if isinstance(view, ParallelCoordinatesView):
            return view.apply_restyle(payload)

        point = _first_point(payload)
        if point is None:
            return False

        if isinstance(view, ScatterView):
            record_id = point.get("customdata")
            if isinstance(record_id, list):
                record_id = record_id[0]
            if record_id is None:
                return False
            view.on_point_click(int(record_id))
            return True

        if isinstance(view, BarChartView):
            view.on_bar_click(point.get("x"))
            return True

        return False

    logger.warning("Interaction from unknown component", extra={"trigger_id": trigger_id})
    return False


def render_outputs(ctx: AppContext) -> List[Any]:
    """Figures for every view (registration order), then the stats panel."""
    figures = [view.figure() for view in ctx.views.values()]
    stats_children = ctx.stats_panel.render() if ctx.stats_panel is not None else []
    return figures + [stats_children]


def register_callbacks(app: dash.Dash, ctx: AppContext) -> None:
    view_ids = list(ctx.views.keys())

    interactive: List[tuple[str, str]] = []
    for view_id, view in ctx.views.items():
        if isinstance(view, ParallelCoordinatesView):
            interactive.append((graph_id(view_id), "restyleData"))
        elif isinstance(view, (ScatterView, BarChartView)):
            interactive.append((graph_id(view_id), "clickData"))
    interactive.append((IDs.Control.RESET_BTN, "n_clicks"))

    outputs = [Output(graph_id(v), "figure") for v in view_ids]
    outputs += [Output(IDs.Control.STATS_PANEL, "children"), Output(IDs.Control.STATUS_BAR, "children")]

    @app.callback(
        *outputs,
        *[Input(component, prop) for component, prop in interactive],
        prevent_initial_call=True,
    )
    def on_interaction(*values):
        trigger_id = dash.ctx.triggered_id
        payloads = {component: value for (component, _), value in zip(interactive, values)}

        with ctx.lock:
            try:
                changed = handle_interaction(ctx, trigger_id, payloads.get(trigger_id))
            except Exception:
                logger.exception("Interaction failed", extra={"trigger_id": trigger_id})
                if ctx.config.debug:
                    raise
                return [dash.no_update] * (len(view_ids) + 1) + ["Something went wrong; see the logs."]

            if not changed:
                return [dash.no_update] * (len(outputs))

            selection = ctx.coordinator.selection
            status = f"{len(selection)} of {selection.total} students selected"
            return render_outputs(ctx) + [status]
