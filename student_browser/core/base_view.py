from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import Any, Optional

import plotly.graph_objs as go

from student_browser.core.dataset import Dataset
from student_browser.core.events import FilterEvent, Publish
from student_browser.core.filter_evaluator import Selection
from student_browser.core.pca import PCAProjection

logger = logging.getLogger(__name__)


class BaseView(ABC):
    """
    Abstract base class for all chart views.

    Defines the contract that every view in the app must follow
    - expose an 'id' - used internally
    - expose a 'label' - used for UI/human-readable applications
    - implement 'compute_data' - chart data for the current Selection
    - implement 'render_figure' - render that data using Plotly

    The Coordinator calls {@link update_selection()} after every filter change.
    Views only hold a publish callable back to the Coordinator, never its state.
    """

    id: str = None
    label: str = None

    def __init__(self, dataset: Dataset):
        self.dataset = dataset
        self.data: Any = None
        self.selection: Optional[Selection] = None
        self.projection: Optional[PCAProjection] = None
        self._publish: Optional[Publish] = None

    def bind(self, publish: Publish, projection: Optional[PCAProjection] = None) -> None:
        """
        Attach the event channel and the read-only PCA projection.
        Called once by the Coordinator on registration.
        """
        self._publish = publish
        self.projection = projection

    def publish(self, event: FilterEvent) -> None:
        if self._publish is None:
            raise RuntimeError(f"View '{self.id}' is not registered with a coordinator")
        self._publish(event)

    def update_selection(self, selection: Selection) -> None:
        """
        Receive a fresh filtered snapshot. Must tolerate any id set, including
        one disjoint from the previous call.
        """
        self.selection = selection
        self.data = self.compute_data(selection)

    @abstractmethod
    def compute_data(self, selection: Selection) -> Any:
        """
        Compute the chart data for the given snapshot
        :param selection: the current {@link Selection} broadcast by the Coordinator
        :return: data: usually a DataFrame, consumed by {@link render_figure()}
        """
        raise NotImplementedError()

    @abstractmethod
    def render_figure(self, data: Any) -> go.Figure:
        """
        Render the figure given the computed data
        :param data: the data provided by {@link compute_data()}
        :return: the Plotly figure
        """
        raise NotImplementedError()

    def figure(self) -> go.Figure:
        """Render the most recent broadcast, or a placeholder before the first one."""
        if self.data is None:
            return self.empty_figure(f"{self.label}: waiting for data")
        return self.render_figure(self.data)

    # ------------------------------------------------------------------
    # Common helpers for all views
    # ------------------------------------------------------------------
    @staticmethod
    def empty_figure(message: str) -> go.Figure:
        """
        Standardised 'no data' figure used by all views.
        """
        fig = go.Figure()
        fig.update_layout(
            title=message,
            xaxis={"visible": False},
            yaxis={"visible": False},
        )
        return fig
