from __future__ import annotations

import numpy as np
import pandas as pd
import plotly.graph_objects as go

from student_browser.core.base_view import BaseView
from student_browser.core.dataset import Dataset
from student_browser.core.events import PointSelected
from student_browser.core.filter_evaluator import Selection
from student_browser.views.theme import COLOR_INACTIVE, FIGURE_MARGIN, GRADE_COLORSCALE, GRADE_RANGE

STUDY_TIME_LABELS = ["<2h", "2-5h", "5-10h", ">10h"]

# High study time, low grade: (x0, x1, y0, y1) in data units
STRUGGLING_REGION = (3.5, 4.5, 0, 9)
STRUGGLING_FILL = "#ffebee"
STRUGGLING_TEXT = "#d32f2f"


class ScatterView(BaseView):
    """
    Study efficiency: weekly study time vs final grade.

    Study time is ordinal (1-4), so points get a wide horizontal jitter and a
    small vertical one. Jitter is seeded per dataset so points stay put across
    broadcasts. Clicking a point toggles the single-record selection.
    """

    id = "scatter"
    label = "Study Efficiency: Time vs. Final Grade"

    def __init__(self, dataset: Dataset, x: str = "studytime", y: str = "G3", seed: int = 0):
        super().__init__(dataset)
        self.x = x
        self.y = y
        rng = np.random.default_rng(seed)
        n = len(dataset)
        self._jitter_x = (rng.random(n) - 0.5) * 0.6
        self._jitter_y = (rng.random(n) - 0.5) * 0.5

    def compute_data(self, selection: Selection) -> pd.DataFrame:
        frame = self.dataset.frame
        data = pd.DataFrame(
            {
                "x": frame[self.x].to_numpy() + self._jitter_x,
                "y": frame[self.y].to_numpy() + self._jitter_y,
                "grade": frame[self.dataset.schema.target].to_numpy(),
                "active": frame.index.isin(selection.ids),
            },
            index=frame.index,
        )
        return data

    def on_point_click(self, record_id: int) -> None:
        self.publish(PointSelected(record_id=int(record_id)))

    def render_figure(self, data: pd.DataFrame) -> go.Figure:
        if data.empty:
            return self.empty_figure(f"{self.label} (no students)")

        active = data[data["active"]]
        inactive = data[~data["active"]]

        fig = go.Figure()
        x0, x1, y0, y1 = STRUGGLING_REGION
        fig.add_shape(
            type="rect",
            x0=x0,
            x1=x1,
            y0=y0,
            y1=y1,
            fillcolor=STRUGGLING_FILL,
            opacity=0.5,
            line_width=0,
            layer="below",
        )
        fig.add_annotation(
            x=(x0 + x1) / 2,
            y=2,
            text="Struggling?",
            showarrow=False,
            font=dict(color=STRUGGLING_TEXT),
        )
        fig.add_trace(
            go.Scatter(
                x=inactive["x"],
                y=inactive["y"],
                mode="markers",
                customdata=inactive.index,
                marker=dict(color=COLOR_INACTIVE, size=4, opacity=0.3),
                hoverinfo="skip",
                name="Filtered out",
            )
        )
        fig.add_trace(
            go.Scatter(
                x=active["x"],
                y=active["y"],
                mode="markers",
                customdata=active.index,
                marker=dict(
                    color=active["grade"],
                    colorscale=GRADE_COLORSCALE,
                    cmin=GRADE_RANGE[0],
                    cmax=GRADE_RANGE[1],
                    size=7,
                    line=dict(width=0.5, color="#333"),
                ),
                hovertemplate="Student %{customdata}<br>Grade: %{marker.color}<extra></extra>",
                name="Selected",
            )
        )
        fig.update_xaxes(
            title_text="Weekly Study Time",
            tickvals=[1, 2, 3, 4],
            ticktext=STUDY_TIME_LABELS,
            range=[0.5, 4.5],
        )
        fig.update_yaxes(title_text="Final Grade (G3)", range=[-1, 21])
        fig.update_layout(title=self.label, showlegend=False, margin=FIGURE_MARGIN)
        return fig

