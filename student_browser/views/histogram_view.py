from __future__ import annotations

import numpy as np
import pandas as pd
import plotly.graph_objects as go

from student_browser.core.base_view import BaseView
from student_browser.core.dataset import Dataset
from student_browser.core.filter_evaluator import Selection
from student_browser.views.theme import COLOR_INACTIVE, COLOR_PRIMARY, FIGURE_MARGIN, GRADE_RANGE


class HistogramView(BaseView):
    """
    Final grade distribution, one bin per grade point (the last bin includes 20).
    The y scale stays fixed to the full dataset so the selection reads as a share.
    """

    id = "histogram"
    label = "Grade Distribution (G3)"

    def __init__(self, dataset: Dataset, attribute: str | None = None):
        super().__init__(dataset)
        self.attribute = attribute or dataset.schema.target
        self.edges = np.arange(GRADE_RANGE[0], GRADE_RANGE[1] + 1)

    def compute_data(self, selection: Selection) -> pd.DataFrame:
        total, _ = np.histogram(self.dataset.values(self.attribute), bins=self.edges)
        selected, _ = np.histogram(selection.records[self.attribute].to_numpy(dtype="float64"), bins=self.edges)
        return pd.DataFrame(
            {
                "x0": self.edges[:-1],
                "x1": self.edges[1:],
                "total": total,
                "selected": selected,
            }
        )

    def render_figure(self, data: pd.DataFrame) -> go.Figure:
        centers = (data["x0"] + data["x1"]) / 2
        fig = go.Figure()
        fig.add_bar(x=centers, y=data["total"], width=0.95, marker_color=COLOR_INACTIVE, hoverinfo="skip")
        fig.add_bar(x=centers, y=data["selected"], width=0.95, marker_color=COLOR_PRIMARY, opacity=0.8)
        fig.update_xaxes(range=list(GRADE_RANGE), title_text="Final Grade")
        fig.update_yaxes(range=[0, max(int(data["total"].max()), 1)])
        fig.update_layout(title=self.label, barmode="overlay", showlegend=False, margin=FIGURE_MARGIN)
        return fig
