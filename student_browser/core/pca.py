from __future__ import annotations

import logging
from dataclasses import dataclass
from types import MappingProxyType
from typing import Callable, Dict, List, Mapping, Optional, Sequence, Tuple

import numpy as np
import pandas as pd

from student_browser.core.dataset import Dataset, ID_COLUMN
from student_browser.core.exceptions import SingularInputError
from student_browser.core.standardizer import Standardizer

logger = logging.getLogger(__name__)

# Eigenvalues at or below this fraction of the largest one count as zero
EIGEN_RTOL = 1e-10

EigenSolver = Callable[[np.ndarray, int], Tuple[np.ndarray, np.ndarray]]


def get_principal_components(matrix: np.ndarray, k: int) -> Tuple[np.ndarray, np.ndarray]:
    """
    Return the top-k principal directions of `matrix` (n x m).

    :param matrix: observations in rows, features in columns
    :param k: number of components to return
    :return: (vectors, values): vectors is (m x k) with orthonormal columns,
        values is (k,) sorted by descending eigenvalue. Ties keep the
        decomposition order, so identical input gives identical output.
        When k > m the missing components are zero vectors with value 0.
    """
    matrix = np.asarray(matrix, dtype="float64")
    if matrix.ndim != 2:
        raise ValueError(f"Expected a 2D matrix, got shape {matrix.shape}")

    n, m = matrix.shape
    centered = matrix - matrix.mean(axis=0)
    cov = centered.T @ centered / max(n - 1, 1)

    values, vectors = np.linalg.eigh(cov)
    order = np.argsort(-values, kind="stable")
    values = values[order]
    vectors = vectors[:, order]

    take = min(k, m)
    out_vectors = np.zeros((m, k))
    out_values = np.zeros(k)
    out_vectors[:, :take] = vectors[:, :take]
    out_values[:take] = np.clip(values[:take], 0.0, None)
    return out_vectors, out_values


@dataclass(frozen=True, eq=False)
class PCAProjection:
    """
    2-D PCA coordinates for every record of a Dataset.

    Fields:

    - coordinates: read-only mapping id -> (x, y)
    - fields: standardized fields, in weight order
    - components: read-only (m x 2) eigenvector weights, before any display sign flip
    - eigenvalues: eigenvalues of PC1, PC2
    - explained_variance_ratio: share of total variance per component
    - degenerate: True when fewer than two usable eigen-pairs exist
    - flip_pc1: whether the PC1 coordinate was negated
    """
    coordinates: Mapping[int, Tuple[float, float]]
    fields: Tuple[str, ...]
    components: np.ndarray
    eigenvalues: Tuple[float, float]
    explained_variance_ratio: Tuple[float, float]
    degenerate: bool = False
    flip_pc1: bool = True

    def __len__(self) -> int:
        return len(self.coordinates)

    def __getitem__(self, record_id: int) -> Tuple[float, float]:
        return self.coordinates[record_id]

    def to_frame(self) -> pd.DataFrame:
        """Return an id-indexed frame with x/y columns."""
        ids = list(self.coordinates.keys())
        xy = np.array([self.coordinates[i] for i in ids], dtype="float64").reshape(-1, 2)
        df = pd.DataFrame(xy, index=pd.Index(ids, name=ID_COLUMN), columns=["x", "y"])
        return df

    def axis_interpretation(self, top_n: int = 4) -> List[List[Tuple[str, float]]]:
        """
        Top-weighted fields per component, by absolute raw eigenvector weight.
        Display only; the weights carry no sign convention.
        """
        result: List[List[Tuple[str, float]]] = []
        for j in range(self.components.shape[1]):
            weights = self.components[:, j]
            order = np.argsort(-np.abs(weights), kind="stable")[:top_n]
            result.append([(self.fields[i], float(abs(weights[i]))) for i in order])
        return result


def compute_projection(
    dataset: Dataset,
    fields: Optional[Sequence[str]] = None,
    *,
    flip_pc1: bool = True,
    strict: bool = False,
    solver: EigenSolver = get_principal_components,
) -> PCAProjection:
    """
    Standardize `fields` over the whole dataset and project onto PC1/PC2.

    The PC1 coordinate is negated when flip_pc1 is set (display orientation);
    PC2 keeps the sign the solver produced.

    Raises:
        EmptyDatasetError: the dataset has no records
        SingularInputError: strict mode and fewer than two usable eigen-pairs
    """
    fields = tuple(fields) if fields is not None else dataset.schema.pca_fields

    standardizer = Standardizer.fit(dataset, fields)
    z = standardizer.transform_dataset(dataset)

    vectors, values = solver(z, 2)

    top = float(values.max()) if values.size else 0.0
    usable = values > EIGEN_RTOL * max(top, 1.0)
    degenerate = int(usable.sum()) < 2

    if degenerate:
        msg = (
            f"Only {int(usable.sum())} usable eigen-pair(s) for dataset '{dataset.name}'; "
            "degenerate axes are projected as 0."
        )
        if strict:
            raise SingularInputError(msg)
        logger.warning(msg, extra={"dataset": dataset.name, "eigenvalues": values.tolist()})

    centered = z - z.mean(axis=0)
    projected = centered @ vectors
    projected[:, ~usable] = 0.0
    if flip_pc1:
        projected[:, 0] = -projected[:, 0]

    coordinates: Dict[int, Tuple[float, float]] = {
        record_id: (float(projected[i, 0]), float(projected[i, 1]))
        for i, record_id in enumerate(dataset.ids)
    }

    total_variance = float(np.trace(centered.T @ centered) / max(len(dataset) - 1, 1))
    if total_variance > 0:
        ratios = (float(values[0] / total_variance), float(values[1] / total_variance))
    else:
        ratios = (0.0, 0.0)

    logger.info(
        "PCA projection computed",
        extra={
            "dataset": dataset.name,
            "n_records": len(dataset),
            "n_fields": len(fields),
            "explained_variance_ratio": ratios,
        },
    )

    components = vectors.copy()
    components.setflags(write=False)

    return PCAProjection(
        coordinates=MappingProxyType(coordinates),
        fields=fields,
        components=components,
        eigenvalues=(float(values[0]), float(values[1])),
        explained_variance_ratio=ratios,
        degenerate=degenerate,
        flip_pc1=flip_pc1,
    )
