from __future__ import annotations

import logging
from typing import List, Optional

import dash_bootstrap_components as dbc
from dash import html

from student_browser.core.stats import SelectionStats
from student_browser.views.theme import COLOR_BAD, COLOR_PRIMARY

logger = logging.getLogger(__name__)

# Fail rates above this share are shown in the warning colour
FAIL_RATE_WARNING = 0.33


class StatsPanel:
    """
    Stats sink for the Coordinator: keeps the latest SelectionStats and renders
    the "Real-time Analytics" cards.
    """

    def __init__(self) -> None:
        self.latest: Optional[SelectionStats] = None

    def __call__(self, stats: SelectionStats) -> None:
        self.latest = stats

    @staticmethod
    def _card(label: str, value: str, sub: str, color: Optional[str] = None) -> dbc.Col:
        return dbc.Col(
            dbc.Card(
                dbc.CardBody(
                    [
                        html.Div(label, className="text-muted small"),
                        html.Div(value, className="fs-4 fw-bold", style={"color": color} if color else {}),
                        html.Div(sub, className="text-muted small"),
                    ]
                ),
                className="text-center mb-2",
            ),
            width=6,
        )

    def render(self) -> List:
        stats = self.latest
        if stats is None:
            return [html.H5("Real-time Analytics"), html.Div("No data yet.", className="text-muted")]

        grade_color = COLOR_PRIMARY if stats.mean_grade.selected >= stats.mean_grade.overall else COLOR_BAD
        fail_color = COLOR_BAD if stats.fail_rate.selected > FAIL_RATE_WARNING else COLOR_PRIMARY

        children: List = [html.H5("Real-time Analytics")]
        if stats.selection_active:
            children.append(dbc.Badge("Selection Active", color="warning", className="mb-2 w-100"))

        children.extend(
            [
                dbc.Row(
                    [
                        self._card("Count", str(stats.count), f"/ {stats.total}"),
                        self._card(
                            "Avg Grade",
                            f"{stats.mean_grade.selected:.1f}",
                            f"Global: {stats.mean_grade.overall:.1f}",
                            grade_color,
                        ),
                    ],
                    className="g-2",
                ),
                dbc.Row(
                    [
                        self._card(
                            "Avg Abs.",
                            f"{stats.mean_absences.selected:.1f}",
                            f"Global: {stats.mean_absences.overall:.1f}",
                        ),
                        self._card(
                            "Fail Rate",
                            f"{stats.fail_rate.selected * 100:.1f}%",
                            f"Global: {stats.fail_rate.overall * 100:.1f}%",
                            fail_color,
                        ),
                    ],
                    className="g-2",
                ),
                dbc.Row(
                    [
                        self._card(
                            "Study/Grade r",
                            f"{stats.correlation.selected:.2f}",
                            f"Global: {stats.correlation.overall:.2f}",
                        ),
                    ],
                    className="g-2",
                ),
            ]
        )
        return children
