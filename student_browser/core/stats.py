from __future__ import annotations

from dataclasses import dataclass, asdict
from typing import Any, Dict

import numpy as np
import pandas as pd

from student_browser.core.dataset import Dataset
from student_browser.core.filter_evaluator import Selection

PASS_THRESHOLD = 10.0


@dataclass(frozen=True)
class StatsConfig:
    """Which fields feed the aggregate panel."""
    grade_field: str = "G3"
    absences_field: str = "absences"
    correlation_x: str = "studytime"
    correlation_y: str = "G3"
    pass_threshold: float = PASS_THRESHOLD


@dataclass(frozen=True)
class MetricPair:
    selected: float
    overall: float


@dataclass(frozen=True)
class SelectionStats:
    """
    Aggregates over the filtered subset, each paired with the full dataset.

    fail_rate is a fraction in [0, 1] of records strictly below the pass threshold.
    """
    count: int
    total: int
    mean_grade: MetricPair
    mean_absences: MetricPair
    fail_rate: MetricPair
    correlation: MetricPair
    selection_active: bool = False

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


def pearson_correlation(x: np.ndarray, y: np.ndarray) -> float:
    """
    Pearson r of two equal-length vectors. Fewer than two points or a zero
    variance on either side gives 0.
    """
    x = np.asarray(x, dtype="float64")
    y = np.asarray(y, dtype="float64")
    if x.shape != y.shape:
        raise ValueError(f"Vectors differ in shape: {x.shape} vs {y.shape}")
    if x.size < 2:
        return 0.0
    dx = x - x.mean()
    dy = y - y.mean()
    den = np.sqrt(np.sum(dx * dx) * np.sum(dy * dy))
    if den == 0:
        return 0.0
    return float(np.sum(dx * dy) / den)


def _mean(values: np.ndarray) -> float:
    return float(values.mean()) if values.size else 0.0


def _fail_rate(grades: np.ndarray, threshold: float) -> float:
    return float((grades < threshold).sum() / grades.size) if grades.size else 0.0


def _column(frame: pd.DataFrame, name: str) -> np.ndarray:
    return frame[name].to_numpy(dtype="float64")


def compute_stats(
    filtered: Selection,
    full: Dataset,
    config: StatsConfig = StatsConfig(),
) -> SelectionStats:
    """Pure aggregate over (filtered subset, full dataset)."""
    sel = filtered.records
    every = full.frame

    def pair(fn, *fields: str) -> MetricPair:
        return MetricPair(
            selected=fn(*(_column(sel, f) for f in fields)),
            overall=fn(*(_column(every, f) for f in fields)),
        )

    return SelectionStats(
        count=len(filtered),
        total=len(full),
        mean_grade=pair(_mean, config.grade_field),
        mean_absences=pair(_mean, config.absences_field),
        fail_rate=pair(lambda g: _fail_rate(g, config.pass_threshold), config.grade_field),
        correlation=pair(pearson_correlation, config.correlation_x, config.correlation_y),
        selection_active=filtered.single_selection,
    )
