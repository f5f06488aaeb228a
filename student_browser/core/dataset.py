from __future__ import annotations

import logging
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Iterable, Iterator, List, Mapping, Optional, Sequence, Tuple

import numpy as np
import pandas as pd

from student_browser.core.exceptions import ValidationError, ValidationIssue
from student_browser.core.schema import DatasetSchema, STUDENT_SCHEMA

logger = logging.getLogger(__name__)

ID_COLUMN = "id"


@dataclass(frozen=True)
class Record:
    """
    One dataset row, keyed by a stable integer id.

    Values are held in read-only mappings split by field kind, so
    `record["age"]` and `record.numeric["age"]` are equivalent.
    """
    id: int
    numeric: Mapping[str, float] = field(default_factory=dict)
    categorical: Mapping[str, Any] = field(default_factory=dict)

    def __getitem__(self, name: str) -> Any:
        if name == ID_COLUMN:
            return self.id
        if name in self.numeric:
            return self.numeric[name]
        return self.categorical[name]

    def get(self, name: str, default: Any = None) -> Any:
        try:
            return self[name]
        except KeyError:
            return default


class Dataset:
    """
    Immutable, ordered collection of student records.

    Includes:
    - Dense integer ids (0..n-1) assigned in load order
    - Schema validation once at construction (fail fast, no coercion)
    - Read-only access: every accessor hands out copies

    The backing DataFrame is private; views never receive a reference to it.
    """

    # -------------------------------------------------------------------------
    # Constructor
    # -------------------------------------------------------------------------
    def __init__(
        self,
        frame: pd.DataFrame,
        schema: DatasetSchema = STUDENT_SCHEMA,
        name: str = "students",
    ) -> None:
        self.name = name
        self.schema = schema

        frame = self._assign_ids(frame)
        self._validate(frame)

        # Keep schema columns only, in schema order
        columns = [c for c in schema.fields if c in frame.columns]
        data = frame[columns].copy()
        for col in schema.numeric:
            data[col] = data[col].astype("float64")
        data.index.name = ID_COLUMN

        self._frame: pd.DataFrame = data
        self._ids: Tuple[int, ...] = tuple(int(i) for i in data.index)

        logger.debug(
            "Dataset constructed",
            extra={"dataset": name, "n_records": len(self._ids), "n_fields": len(columns)},
        )

    @classmethod
    def from_records(
        cls,
        rows: Iterable[Mapping[str, Any]],
        schema: DatasetSchema = STUDENT_SCHEMA,
        name: str = "students",
    ) -> "Dataset":
        """Build a Dataset from plain dict-like rows (load order = id order)."""
        rows = list(rows)
        frame = pd.DataFrame.from_records(rows) if rows else pd.DataFrame(columns=list(schema.fields))
        return cls(frame, schema=schema, name=name)

    # -------------------------------------------------------------------------
    # Internal: id assignment + validation
    # -------------------------------------------------------------------------
    @staticmethod
    def _assign_ids(frame: pd.DataFrame) -> pd.DataFrame:
        """
        Ids follow load order. An explicit 'id' column is accepted only if it
        already matches 0..n-1.
        """
        n = len(frame)
        if ID_COLUMN in frame.columns:
            given = frame[ID_COLUMN].to_numpy()
            if not np.array_equal(given, np.arange(n)):
                raise ValidationError(
                    [ValidationIssue("DATASET_IDS", "Record ids must be dense 0..n-1 in load order.")]
                )
            frame = frame.drop(columns=[ID_COLUMN])
        return frame.reset_index(drop=True)

    def _validate(self, frame: pd.DataFrame) -> None:
        issues: list[ValidationIssue] = []

        for col in self.schema.numeric:
            if col not in frame.columns:
                issues.append(ValidationIssue("DATASET_MISSING_FIELD", f"required numeric field '{col}' is missing."))
                continue

            series = frame[col]
            if series.empty:
                continue
            if not pd.api.types.is_numeric_dtype(series) or pd.api.types.is_bool_dtype(series):
                issues.append(ValidationIssue("DATASET_NON_NUMERIC", f"field '{col}' must hold numbers, got {series.dtype}."))
                continue

            bad = ~np.isfinite(series.to_numpy(dtype="float64"))
            if bad.any():
                bad_ids = np.flatnonzero(bad)[:5].tolist()
                issues.append(
                    ValidationIssue(
                        "DATASET_NON_FINITE",
                        f"field '{col}' has {int(bad.sum())} missing/non-finite values (ids {bad_ids}...).",
                    )
                )

        if issues:
            raise ValidationError(issues)

    # -------------------------------------------------------------------------
    # Properties & getters
    # -------------------------------------------------------------------------
    def __len__(self) -> int:
        return len(self._ids)

    def __iter__(self) -> Iterator[Record]:
        return self.records()

    @property
    def ids(self) -> Tuple[int, ...]:
        return self._ids

    @property
    def frame(self) -> pd.DataFrame:
        """Return a copy of the backing frame (index = id)."""
        return self._frame.copy()

    @property
    def is_empty(self) -> bool:
        return len(self._ids) == 0

    def has_field(self, name: str) -> bool:
        return name in self._frame.columns

    def values(self, name: str) -> np.ndarray:
        """
        Return the column for `name` as a fresh numpy array in id order.

        Raises:
            KeyError: if the field is not present in this dataset
        """
        if name not in self._frame.columns:
            raise KeyError(f"Field '{name}' not found in dataset '{self.name}'")
        return self._frame[name].to_numpy(copy=True)

    def numeric_matrix(self, fields: Sequence[str]) -> np.ndarray:
        """Return an (n x len(fields)) float matrix for the given numeric fields."""
        missing = [f for f in fields if f not in self._frame.columns]
        if missing:
            raise ValidationError(
                [ValidationIssue("DATASET_MISSING_FIELD", f"required numeric field '{f}' is missing.") for f in missing]
            )
        return self._frame.loc[:, list(fields)].to_numpy(dtype="float64", copy=True)

    def subset(self, mask: np.ndarray) -> pd.DataFrame:
        """Return a copied, order-preserving slice of the frame for a boolean mask."""
        mask = np.asarray(mask, dtype=bool)
        if mask.shape != (len(self._ids),):
            raise ValueError(f"Mask shape {mask.shape} does not match dataset length {len(self._ids)}")
        return self._frame.loc[mask].copy()

    def record(self, record_id: int) -> Record:
        if record_id < 0 or record_id >= len(self._ids):
            raise KeyError(f"Record id {record_id} out of range for dataset '{self.name}'")
        row = self._frame.iloc[record_id]
        return self._row_to_record(record_id, row)

    def records(self, ids: Optional[Iterable[int]] = None) -> Iterator[Record]:
        wanted = self._ids if ids is None else ids
        for record_id in wanted:
            yield self.record(int(record_id))

    def _row_to_record(self, record_id: int, row: pd.Series) -> Record:
        numeric = {c: float(row[c]) for c in self.schema.numeric if c in row.index}
        categorical = {c: row[c] for c in self.schema.categorical if c in row.index}
        return Record(
            id=record_id,
            numeric=MappingProxyType(numeric),
            categorical=MappingProxyType(categorical),
        )

    def categories(self, name: str) -> List[Any]:
        """Distinct values of a categorical field, sorted for stable UI ordering."""
        if name not in self._frame.columns:
            return []
        return sorted(self._frame[name].dropna().unique().tolist(), key=str)
