from __future__ import annotations

import logging
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Mapping, Tuple

import numpy as np
import pandas as pd

from student_browser.core.dataset import Dataset
from student_browser.core.filter_state import FilterState

logger = logging.getLogger(__name__)


@dataclass(frozen=True, eq=False)
class Selection:
    """
    Read-only filtered snapshot handed to views.

    - records: frame of the passing records (index = id, original order);
      every access returns a fresh copy
    - ids: passing ids in original order
    - total: size of the full dataset, for "n / N" style displays
    - single_selection: True when a single-record pick produced this snapshot
    - range_filters / categorical_filters: read-only copies of the filters
      in force, so views can mirror them (brush extents, highlighted bars)
    """
    _records: pd.DataFrame = field(repr=False)
    ids: Tuple[int, ...] = ()
    total: int = 0
    single_selection: bool = False
    range_filters: Mapping[str, Tuple[float, float]] = field(default_factory=dict)
    categorical_filters: Mapping[str, Any] = field(default_factory=dict)

    @property
    def records(self) -> pd.DataFrame:
        return self._records.copy()

    def __len__(self) -> int:
        return len(self.ids)

    def __contains__(self, record_id: object) -> bool:
        return record_id in self.id_set

    @property
    def id_set(self) -> frozenset[int]:
        return frozenset(self.ids)

    @property
    def is_empty(self) -> bool:
        return len(self.ids) == 0


def filter_mask(dataset: Dataset, state: FilterState) -> np.ndarray:
    """
    Boolean mask (id order) of records passing the combined predicate.

    Precedence:
      1. an active single selection matches exactly that id; everything else
         is ignored
      2. otherwise AND over every range filter and every categorical filter

    Range bounds are inclusive. Missing values and unknown fields fail.
    Categorical matching is exact equality.
    """
    n = len(dataset)

    if state.selection is not None:
        mask = np.zeros(n, dtype=bool)
        if 0 <= state.selection < n:
            mask[state.selection] = True
        else:
            logger.warning("Selected id out of range", extra={"selection": state.selection, "n_records": n})
        return mask

    mask = np.ones(n, dtype=bool)

    for name, (low, high) in state.range_filters.items():
        if not dataset.has_field(name):
            mask[:] = False
            continue
        values = pd.to_numeric(pd.Series(dataset.values(name)), errors="coerce").to_numpy(dtype="float64")
        # NaN comparisons are False, so missing values fail closed
        mask &= (values >= low) & (values <= high)

    for name, accepted in state.categorical_filters.items():
        if not dataset.has_field(name):
            mask[:] = False
            continue
        values = dataset.values(name)
        mask &= np.array([bool(v == accepted) for v in values], dtype=bool)

    return mask


def evaluate(dataset: Dataset, state: FilterState) -> Selection:
    """Return the order-preserving filtered snapshot for `state`."""
    mask = filter_mask(dataset, state)
    frame = dataset.subset(mask)
    return Selection(
        _records=frame,
        ids=tuple(int(i) for i in frame.index),
        total=len(dataset),
        single_selection=state.selection is not None,
        range_filters=MappingProxyType(dict(state.range_filters)),
        categorical_filters=MappingProxyType(dict(state.categorical_filters)),
    )
