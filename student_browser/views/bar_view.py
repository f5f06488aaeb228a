from __future__ import annotations

from typing import Any

import pandas as pd
import plotly.graph_objects as go

from student_browser.core.base_view import BaseView
from student_browser.core.dataset import Dataset
from student_browser.core.events import CategoricalToggled
from student_browser.core.filter_evaluator import Selection
from student_browser.views.theme import COLOR_INACTIVE, COLOR_PRIMARY, FIGURE_MARGIN


class BarChartView(BaseView):
    """
    Category counts for one categorical field: full dataset in the
    background, current selection in the foreground. Clicking a bar toggles
    the categorical filter for that value.
    """

    id = "bar"
    label = "Category Counts"

    def __init__(self, dataset: Dataset, attribute: str = "internet", label: str | None = None):
        super().__init__(dataset)
        self.attribute = attribute
        self.label = label or dataset.schema.label(attribute)

    def compute_data(self, selection: Selection) -> pd.DataFrame:
        if not self.dataset.has_field(self.attribute):
            return pd.DataFrame(columns=["value", "total", "selected", "active"])

        totals = self.dataset.frame[self.attribute].value_counts(sort=False)
        selected = selection.records[self.attribute].value_counts(sort=False)

        values = sorted(totals.index.tolist(), key=str)
        data = pd.DataFrame(
            {
                "value": values,
                "total": [int(totals.get(v, 0)) for v in values],
                "selected": [int(selected.get(v, 0)) for v in values],
            }
        )
        chosen = selection.categorical_filters.get(self.attribute)
        data["active"] = [v == chosen for v in values]
        return data

    def on_bar_click(self, value: Any) -> None:
        self.publish(CategoricalToggled(field=self.attribute, value=value))

    def render_figure(self, data: pd.DataFrame) -> go.Figure:
        if data.empty:
            return self.empty_figure(f"{self.label} (no values)")

        fig = go.Figure()
        fig.add_bar(
            x=data["value"],
            y=data["total"],
            marker_color=COLOR_INACTIVE,
            name="All",
            hoverinfo="skip",
        )
        fig.add_bar(
            x=data["value"],
            y=data["selected"],
            marker_color=COLOR_PRIMARY,
            marker_line=dict(width=[2 if a else 0 for a in data["active"]], color="#333"),
            text=data["selected"],
            textposition="outside",
            name="Selected",
        )
        fig.update_layout(
            title=self.label,
            barmode="overlay",
            showlegend=False,
            margin=FIGURE_MARGIN,
        )
        return fig
