from __future__ import annotations

import re
from typing import Any, Dict, Optional, Sequence, Tuple

import pandas as pd
import plotly.graph_objects as go

from student_browser.core.base_view import BaseView
from student_browser.core.dataset import Dataset
from student_browser.core.events import RangeFilterChanged
from student_browser.core.filter_evaluator import Selection
from student_browser.views.theme import COLOR_INACTIVE, COLOR_PRIMARY, FIGURE_MARGIN

DEFAULT_DIMENSIONS = ("age", "studytime", "failures", "Dalc", "Walc", "health")

_CONSTRAINT_KEY = re.compile(r"^dimensions\[(\d+)\]\.constraintrange$")


def _unwrap_interval(value: Any) -> Optional[Tuple[float, float]]:
    """
    Plotly reports a constraint as [lo, hi] or [[lo, hi]]; cleared brushes come
    through as None or [None]. Axes are drawn with multiselect off, so only one
    interval exists per axis; if a payload still lists several, the last
    (most recently drawn) one wins.
    """
    while isinstance(value, (list, tuple)) and len(value) == 1:
        value = value[0]
    if value is None:
        return None
    if isinstance(value, (list, tuple)) and value and isinstance(value[-1], (list, tuple)):
        value = value[-1]
    if isinstance(value, (list, tuple)) and len(value) == 2:
        lo, hi = float(value[0]), float(value[1])
        return (min(lo, hi), max(lo, hi))
    return None


class ParallelCoordinatesView(BaseView):
    """
    Lifestyle profile across six ordinal axes, one brush per axis.

    The view owns its per-axis brush intervals and reports the whole map on
    every brush change (cleared axes are omitted), which the Coordinator
    installs as the new range-filter set.
    """

    id = "parallel"
    label = "Lifestyle Profile"

    def __init__(self, dataset: Dataset, dimensions: Sequence[str] = DEFAULT_DIMENSIONS):
        super().__init__(dataset)
        self.dimensions = tuple(d for d in dimensions if dataset.has_field(d))
        self.brushes: Dict[str, Tuple[float, float]] = {}

    def compute_data(self, selection: Selection) -> pd.DataFrame:
        frame = self.dataset.frame
        data = frame.loc[:, list(self.dimensions)].copy()
        data["active"] = frame.index.isin(selection.ids)
        return data

    # ------------------------------------------------------------------
    # Brushing
    # ------------------------------------------------------------------
    def on_brush(self, dimension: str, interval: Optional[Sequence[float]]) -> None:
        if dimension not in self.dimensions:
            raise KeyError(f"'{dimension}' is not an axis of {self.id}")
        if interval is None:
            self.brushes.pop(dimension, None)
        else:
            lo, hi = float(interval[0]), float(interval[1])
            self.brushes[dimension] = (min(lo, hi), max(lo, hi))
        self.publish(RangeFilterChanged(ranges=dict(self.brushes)))

    def apply_restyle(self, restyle_data: Optional[Sequence[Any]]) -> bool:
        """
        Translate a Dash `restyleData` payload into brush updates.
        Returns True if any brush changed (and an event was published).
        """
        if not restyle_data:
            return False
        changes = restyle_data[0] or {}

        updated = dict(self.brushes)
        touched = False
        for key, value in changes.items():
            match = _CONSTRAINT_KEY.match(key)
            if not match:
                continue
            index = int(match.group(1))
            if index >= len(self.dimensions):
                continue
            dimension = self.dimensions[index]
            interval = _unwrap_interval(value)
            if interval is None:
                updated.pop(dimension, None)
            else:
                updated[dimension] = interval
            touched = True

        if not touched:
            return False
        self.brushes = updated
        self.publish(RangeFilterChanged(ranges=dict(self.brushes)))
        return True

    def update_selection(self, selection: Selection) -> None:
        # Mirror the filters actually in force (a reset clears our brushes too)
        self.brushes = {
            name: tuple(bounds) for name, bounds in selection.range_filters.items() if name in self.dimensions
        }
        super().update_selection(selection)

    # ------------------------------------------------------------------
    # Rendering
    # ------------------------------------------------------------------
    def render_figure(self, data: pd.DataFrame) -> go.Figure:
        if data.empty:
            return self.empty_figure(f"{self.label} (no students)")

        dims = []
        for name in self.dimensions:
            dim = dict(label=self.dataset.schema.label(name), values=data[name], multiselect=False)
            lo, hi = float(data[name].min()), float(data[name].max())
            if lo == hi:
                dim["range"] = [lo - 1, hi + 1]
            if name in self.brushes:
                dim["constraintrange"] = list(self.brushes[name])
            dims.append(dim)

        fig = go.Figure(
            go.Parcoords(
                line=dict(
                    color=data["active"].astype(int),
                    colorscale=[[0, COLOR_INACTIVE], [1, COLOR_PRIMARY]],
                    cmin=0,
                    cmax=1,
                ),
                dimensions=dims,
            )
        )
        fig.update_layout(title=self.label, margin=FIGURE_MARGIN)
        return fig
