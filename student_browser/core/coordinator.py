from __future__ import annotations

import logging
import threading
from collections import deque
from typing import Any, Callable, Deque, Iterable, List, Mapping, Optional, Sequence, Tuple

from student_browser.core.base_view import BaseView
from student_browser.core.dataset import Dataset
from student_browser.core.events import (
    CategoricalToggled,
    FilterEvent,
    PointSelected,
    RangeFilterChanged,
    ResetRequested,
)
from student_browser.core.filter_evaluator import Selection, evaluate
from student_browser.core.filter_state import FilterState
from student_browser.core.pca import PCAProjection, compute_projection, EigenSolver, get_principal_components
from student_browser.core.stats import SelectionStats, StatsConfig, compute_stats

logger = logging.getLogger(__name__)

StatsSink = Callable[[SelectionStats], None]


class Coordinator:
    """
    Sole owner of the Dataset, the FilterState and the cached PCA projection.

    Every view-originated event goes through {@link dispatch()}: the FilterState
    is mutated, the filtered Selection recomputed in full, then pushed to each
    registered view (registration order) and finally to the stats sinks.

    Events published while a broadcast is running (e.g. from inside a view's
    update_selection) are queued and handled one at a time afterwards, so no
    view ever observes a half-applied state. A re-entrant lock serialises
    callers from different threads.
    """

    def __init__(
        self,
        stats_config: StatsConfig = StatsConfig(),
        *,
        flip_pc1: bool = True,
        strict_pca: bool = False,
        solver: EigenSolver = get_principal_components,
    ) -> None:
        self.stats_config = stats_config
        self.flip_pc1 = flip_pc1
        self.strict_pca = strict_pca
        self.solver = solver

        self._dataset: Optional[Dataset] = None
        self._projection: Optional[PCAProjection] = None
        self._state = FilterState()
        self._views: List[BaseView] = []
        self._stats_sinks: List[StatsSink] = []

        self._selection: Optional[Selection] = None
        self._stats: Optional[SelectionStats] = None

        self._queue: Deque[FilterEvent] = deque()
        self._processing = False
        self._lock = threading.RLock()

    # ------------------------------------------------------------------
    # Setup
    # ------------------------------------------------------------------
    def initialize(
        self,
        dataset: Dataset,
        views: Iterable[BaseView] = (),
        stats_sinks: Iterable[StatsSink] = (),
    ) -> Selection:
        """
        Build the PCA projection, register views and sinks, and broadcast the
        unfiltered dataset.
        """
        with self._lock:
            self._dataset = dataset
            self._projection = compute_projection(
                dataset,
                flip_pc1=self.flip_pc1,
                strict=self.strict_pca,
                solver=self.solver,
            )
            self._state = FilterState()
            self._views = []
            self._stats_sinks = []

            for view in views:
                self._attach(view)
            self._stats_sinks.extend(stats_sinks)

            logger.info(
                "Coordinator initialised",
                extra={"dataset": dataset.name, "n_records": len(dataset), "n_views": len(self._views)},
            )
            self._run(self._broadcast_then_drain)
            return self._selection

    def register_view(self, view: BaseView) -> None:
        """
        Register a view after initialisation. It immediately receives the
        current Selection so it never renders stale data.
        """
        with self._lock:
            self._require_initialised()
            self._attach(view)
            if self._selection is not None:
                view.update_selection(self._selection)

    def add_stats_sink(self, sink: StatsSink) -> None:
        with self._lock:
            self._stats_sinks.append(sink)
            if self._stats is not None:
                sink(self._stats)

    def _attach(self, view: BaseView) -> None:
        if any(existing is view for existing in self._views):
            raise ValueError(f"View '{view.id}' is already registered")
        view.bind(self.dispatch, self._projection)
        self._views.append(view)

    # ------------------------------------------------------------------
    # Event intake
    # ------------------------------------------------------------------
    def on_range_filter_change(self, mapping: Mapping[str, Sequence[float]]) -> None:
        self.dispatch(RangeFilterChanged(ranges=dict(mapping)))

    def on_categorical_toggle(self, field: str, value: Any) -> None:
        self.dispatch(CategoricalToggled(field=field, value=value))

    def on_point_select(self, record_id: int) -> None:
        self.dispatch(PointSelected(record_id=record_id))

    def on_reset(self) -> None:
        self.dispatch(ResetRequested())

    def reset(self) -> None:
        """External trigger (e.g. a reset button) clearing every filter."""
        self.on_reset()

    def dispatch(self, event: FilterEvent) -> None:
        """
        Queue an event and, unless a broadcast is already running on this
        thread, process the queue to completion.
        """
        with self._lock:
            self._require_initialised()
            self._queue.append(event)
            if self._processing:
                logger.debug("Event queued during broadcast", extra={"event": type(event).__name__})
                return
            self._run(self._drain)

    def _run(self, step: Callable[[], None]) -> None:
        self._processing = True
        try:
            step()
        except Exception:
            self._queue.clear()
            logger.exception(
                "Filter coordination failed",
                extra={"filter_state": self._state.to_dict()},
            )
            raise
        finally:
            self._processing = False

    def _drain(self) -> None:
        while self._queue:
            event = self._queue.popleft()
            self._apply(event)
            self._broadcast()

    def _broadcast_then_drain(self) -> None:
        self._broadcast()
        self._drain()

    def _apply(self, event: FilterEvent) -> None:
        logger.debug("Applying event", extra={"event": type(event).__name__})

        if isinstance(event, RangeFilterChanged):
            self._state.set_range_filters(event.ranges)
        elif isinstance(event, CategoricalToggled):
            self._state.toggle_categorical_filter(event.field, event.value)
        elif isinstance(event, PointSelected):
            n = len(self._dataset)
            if not 0 <= int(event.record_id) < n:
                raise ValueError(f"Record id {event.record_id} out of range (0..{n - 1})")
            self._state.toggle_single_selection(event.record_id)
        elif isinstance(event, ResetRequested):
            self._state.reset()
        else:
            raise TypeError(f"Unknown filter event: {event!r}")

    def _broadcast(self) -> None:
        selection = evaluate(self._dataset, self._state)
        self._selection = selection

        for view in self._views:
            view.update_selection(selection)

        stats = compute_stats(selection, self._dataset, self.stats_config)
        self._stats = stats
        for sink in self._stats_sinks:
            sink(stats)

        logger.info(
            "Broadcast",
            extra={
                "n_selected": len(selection),
                "n_total": selection.total,
                "single_selection": selection.single_selection,
            },
        )

    def _require_initialised(self) -> None:
        if self._dataset is None:
            raise RuntimeError("Coordinator.initialize(dataset) must be called first")

    # ------------------------------------------------------------------
    # Read-only accessors
    # ------------------------------------------------------------------
    @property
    def dataset(self) -> Optional[Dataset]:
        return self._dataset

    @property
    def projection(self) -> Optional[PCAProjection]:
        return self._projection

    @property
    def filter_state(self) -> FilterState:
        """A copy; mutating it has no effect on the Coordinator."""
        with self._lock:
            return self._state.copy()

    @property
    def selection(self) -> Optional[Selection]:
        return self._selection

    @property
    def stats(self) -> Optional[SelectionStats]:
        return self._stats

    @property
    def views(self) -> Tuple[BaseView, ...]:
        return tuple(self._views)

    def filtered_ids(self) -> Tuple[int, ...]:
        return self._selection.ids if self._selection is not None else ()
