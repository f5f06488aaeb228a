from __future__ import annotations

from dataclasses import dataclass, asdict
from typing import Dict

import numpy as np
import plotly.graph_objects as go

from student_browser.core.base_view import BaseView
from student_browser.core.dataset import Dataset
from student_browser.core.filter_evaluator import Selection
from student_browser.views.theme import COLOR_INACTIVE, COLOR_PRIMARY, FIGURE_MARGIN


@dataclass(frozen=True)
class BoxStats:
    min: float
    q1: float
    median: float
    q3: float
    max: float

    @classmethod
    def of(cls, values: np.ndarray) -> "BoxStats":
        if values.size == 0:
            return cls(0.0, 0.0, 0.0, 0.0, 0.0)
        q1, median, q3 = np.quantile(values, [0.25, 0.5, 0.75])
        return cls(float(values.min()), float(q1), float(median), float(q3), float(values.max()))


class BoxPlotView(BaseView):
    """Five-number summary of one numeric field: full dataset vs selection."""

    id = "box"
    label = "Distribution"

    def __init__(self, dataset: Dataset, attribute: str = "age", label: str | None = None):
        super().__init__(dataset)
        self.attribute = attribute
        self.label = label or f"{dataset.schema.label(attribute)} Dist."

    def compute_data(self, selection: Selection) -> Dict[str, BoxStats]:
        return {
            "All": BoxStats.of(self.dataset.values(self.attribute).astype("float64")),
            "Selection": BoxStats.of(selection.records[self.attribute].to_numpy(dtype="float64")),
        }

    def render_figure(self, data: Dict[str, BoxStats]) -> go.Figure:
        fig = go.Figure()
        for name, color in (("All", COLOR_INACTIVE), ("Selection", COLOR_PRIMARY)):
            s = asdict(data[name])
            fig.add_trace(
                go.Box(
                    name=name,
                    q1=[s["q1"]],
                    median=[s["median"]],
                    q3=[s["q3"]],
                    lowerfence=[s["min"]],
                    upperfence=[s["max"]],
                    marker_color=color,
                    fillcolor=color,
                    line=dict(color="#333"),
                )
            )
        fig.update_layout(title=self.label, showlegend=False, margin=FIGURE_MARGIN)
        return fig
