from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Dict, Sequence, Tuple

import numpy as np

from student_browser.core.dataset import Dataset, Record
from student_browser.core.exceptions import EmptyDatasetError, ValidationError, ValidationIssue

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class FieldStats:
    mean: float
    sd: float
    constant: bool = False


@dataclass(frozen=True)
class Standardizer:
    """
    Per-field z-score transform fitted on a whole Dataset.

    Uses the sample standard deviation (n - 1). A field that is constant
    across all records (or a single-record dataset) gets deviation 1 and
    standardizes to exactly 0.
    """

    fields: Tuple[str, ...]
    stats: Tuple[FieldStats, ...]

    @classmethod
    def fit(cls, dataset: Dataset, fields: Sequence[str]) -> "Standardizer":
        if dataset.is_empty:
            raise EmptyDatasetError(f"Cannot standardize empty dataset '{dataset.name}'")

        matrix = dataset.numeric_matrix(fields)
        n = matrix.shape[0]

        stats = []
        for j, name in enumerate(fields):
            column = matrix[:, j]
            mean = float(column.mean())
            constant = n < 2 or column.max() == column.min()
            if constant:
                logger.debug("Constant field, substituting deviation 1", extra={"field": name})
                stats.append(FieldStats(mean=mean, sd=1.0, constant=True))
            else:
                stats.append(FieldStats(mean=mean, sd=float(column.std(ddof=1))))

        return cls(fields=tuple(fields), stats=tuple(stats))

    @property
    def means(self) -> np.ndarray:
        return np.array([s.mean for s in self.stats], dtype="float64")

    @property
    def sds(self) -> np.ndarray:
        return np.array([s.sd for s in self.stats], dtype="float64")

    @property
    def constant_mask(self) -> np.ndarray:
        return np.array([s.constant for s in self.stats], dtype=bool)

    def as_dict(self) -> Dict[str, FieldStats]:
        return dict(zip(self.fields, self.stats))

    def _scale(self, raw: np.ndarray) -> np.ndarray:
        z = (raw - self.means) / self.sds
        z[..., self.constant_mask] = 0.0
        return z

    def transform(self, record: Record) -> np.ndarray:
        """Return the record's z-score vector in `self.fields` order."""
        missing = [f for f in self.fields if f not in record.numeric]
        if missing:
            raise ValidationError(
                [
                    ValidationIssue("RECORD_MISSING_FIELD", f"record {record.id} is missing numeric field '{f}'.")
                    for f in missing
                ]
            )
        raw = np.array([record.numeric[f] for f in self.fields], dtype="float64")
        return self._scale(raw)

    def transform_dataset(self, dataset: Dataset) -> np.ndarray:
        """Return the (n x m) standardized matrix, rows in id order."""
        if dataset.is_empty:
            raise EmptyDatasetError(f"Cannot standardize empty dataset '{dataset.name}'")
        return self._scale(dataset.numeric_matrix(self.fields))
