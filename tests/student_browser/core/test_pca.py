import numpy as np
import pandas as pd
import pytest

from student_browser.core.dataset import Dataset
from student_browser.core.exceptions import EmptyDatasetError, SingularInputError
from student_browser.core.pca import compute_projection, get_principal_components
from student_browser.core.schema import DatasetSchema

SCHEMA = DatasetSchema(
    numeric=("a", "b", "c"),
    categorical=(),
    target="c",
    pca_fields=("a", "b", "c"),
)


def _make_dataset(n: int = 30, seed: int = 1) -> Dataset:
    rng = np.random.default_rng(seed)
    a = rng.normal(size=n)
    frame = pd.DataFrame(
        {
            "a": a,
            "b": 2 * a + rng.normal(scale=0.5, size=n),
            "c": rng.normal(size=n),
        }
    )
    return Dataset(frame, schema=SCHEMA)


def test_principal_components_sorted_and_orthonormal():
    matrix = _make_dataset().numeric_matrix(["a", "b", "c"])

    vectors, values = get_principal_components(matrix, 3)

    assert vectors.shape == (3, 3)
    assert values[0] >= values[1] >= values[2] >= 0
    assert vectors.T @ vectors == pytest.approx(np.eye(3), abs=1e-9)


def test_principal_components_pads_when_k_exceeds_fields():
    vectors, values = get_principal_components(np.array([[1.0], [2.0], [4.0]]), 2)

    assert vectors.shape == (1, 2)
    assert values[1] == 0.0
    assert vectors[:, 1].tolist() == [0.0]


def test_projection_covers_every_record():
    ds = _make_dataset()
    proj = compute_projection(ds)

    assert len(proj) == len(ds)
    assert set(proj.coordinates) == set(ds.ids)
    assert list(proj.to_frame().columns) == ["x", "y"]
    assert not proj.degenerate
    assert proj.explained_variance_ratio[0] >= proj.explained_variance_ratio[1]


def test_projection_is_deterministic():
    ds = _make_dataset()

    first = compute_projection(ds).to_frame()
    second = compute_projection(ds).to_frame()

    assert np.abs(first.to_numpy() - second.to_numpy()).max() <= 1e-9


def test_pc1_flip_negates_only_first_axis():
    ds = _make_dataset()

    flipped = compute_projection(ds, flip_pc1=True).to_frame()
    plain = compute_projection(ds, flip_pc1=False).to_frame()

    assert flipped["x"].to_numpy() == pytest.approx(-plain["x"].to_numpy())
    assert flipped["y"].to_numpy() == pytest.approx(plain["y"].to_numpy())


def test_axis_interpretation_ranks_by_absolute_weight():
    proj = compute_projection(_make_dataset())
    pc1 = proj.axis_interpretation(top_n=2)[0]

    # a and b are strongly correlated, so they dominate PC1
    assert {name for name, _ in pc1} == {"a", "b"}
    assert all(weight >= 0 for _, weight in pc1)


def test_degenerate_input_zeroes_missing_axis(caplog):
    # Only one field varies, so there is a single usable eigen-pair
    frame = pd.DataFrame({"a": [1.0, 2.0, 3.0, 4.0], "b": [5.0] * 4, "c": [0.0] * 4})
    ds = Dataset(frame, schema=SCHEMA)

    with caplog.at_level("WARNING"):
        proj = compute_projection(ds)

    assert proj.degenerate
    assert proj.to_frame()["y"].tolist() == [0.0, 0.0, 0.0, 0.0]
    assert any("usable eigen-pair" in r.message for r in caplog.records)


def test_degenerate_input_raises_in_strict_mode():
    frame = pd.DataFrame({"a": [1.0, 1.0], "b": [5.0, 5.0], "c": [0.0, 0.0]})
    ds = Dataset(frame, schema=SCHEMA)

    with pytest.raises(SingularInputError):
        compute_projection(ds, strict=True)


def test_single_record_projects_to_origin():
    ds = Dataset(pd.DataFrame({"a": [1.0], "b": [2.0], "c": [3.0]}), schema=SCHEMA)

    proj = compute_projection(ds)

    assert proj[0] == (0.0, 0.0)
    assert proj.degenerate


def test_empty_dataset_raises():
    with pytest.raises(EmptyDatasetError):
        compute_projection(Dataset.from_records([], schema=SCHEMA))


def test_custom_solver_is_used():
    calls = []

    def solver(matrix, k):
        calls.append(matrix.shape)
        return get_principal_components(matrix, k)

    compute_projection(_make_dataset(n=10), solver=solver)

    assert calls == [(10, 3)]


def test_components_are_read_only():
    proj = compute_projection(_make_dataset())
    before = proj.axis_interpretation()

    with pytest.raises(ValueError):
        proj.components[:] = 0.0

    assert proj.axis_interpretation() == before
