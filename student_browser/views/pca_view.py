from __future__ import annotations

from typing import List

import pandas as pd
import plotly.graph_objects as go

from student_browser.core.base_view import BaseView
from student_browser.core.filter_evaluator import Selection
from student_browser.views.theme import COLOR_INACTIVE, FIGURE_MARGIN, GRADE_COLORSCALE, GRADE_RANGE


class PCAView(BaseView):
    """
    Standardized PCA projection of the 16 numeric fields.

    Coordinates come from the Coordinator's cached projection; this view only
    marks which points belong to the current selection.
    """

    id = "pca"
    label = "PCA Projection (Standardized)"

    def compute_data(self, selection: Selection) -> pd.DataFrame:
        if self.projection is None:
            raise RuntimeError(f"View '{self.id}' needs a PCA projection; register it with a Coordinator")

        data = self.projection.to_frame()
        frame = self.dataset.frame
        data["grade"] = frame.loc[data.index, self.dataset.schema.target].to_numpy()
        data["active"] = data.index.isin(selection.ids)

        interpretation = self.projection.axis_interpretation()
        data.attrs["x_label"] = self._axis_label("PC 1", interpretation[0])
        data.attrs["y_label"] = self._axis_label("PC 2", interpretation[1])
        return data

    @staticmethod
    def _axis_label(name: str, weights: List[tuple]) -> str:
        if not weights:
            return name
        top = ", ".join(f"{field} ({weight:.2f})" for field, weight in weights[:3])
        return f"{name}: {top}"

    def render_figure(self, data: pd.DataFrame) -> go.Figure:
        if data.empty:
            return self.empty_figure(f"{self.label} (no students)")

        active = data[data["active"]]
        inactive = data[~data["active"]]

        fig = go.Figure()
        fig.add_trace(
            go.Scatter(
                x=inactive["x"],
                y=inactive["y"],
                mode="markers",
                marker=dict(color=COLOR_INACTIVE, size=3, opacity=0.2),
                hoverinfo="skip",
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
                    size=6,
                    opacity=0.9,
                    line=dict(width=0.5, color="#333"),
                ),
                hovertemplate="Grade: %{marker.color}<extra></extra>",
            )
        )
        fig.update_xaxes(title_text=data.attrs.get("x_label", "PC 1"))
        fig.update_yaxes(title_text=data.attrs.get("y_label", "PC 2"))
        fig.update_layout(title=self.label, showlegend=False, margin=FIGURE_MARGIN)
        return fig
