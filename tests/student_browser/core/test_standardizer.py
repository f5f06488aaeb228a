import numpy as np
import pandas as pd
import pytest

from student_browser.core.dataset import Dataset
from student_browser.core.exceptions import EmptyDatasetError, ValidationError
from student_browser.core.schema import DatasetSchema
from student_browser.core.standardizer import Standardizer

SCHEMA = DatasetSchema(
    numeric=("age", "studytime", "G3"),
    categorical=(),
    target="G3",
    pca_fields=("age", "studytime", "G3"),
)


def _make_dataset() -> Dataset:
    frame = pd.DataFrame(
        {
            "age": [15.0, 16.0, 17.0, 18.0],
            "studytime": [2.0, 2.0, 2.0, 2.0],  # constant
            "G3": [10.0, 12.0, 14.0, 20.0],
        }
    )
    return Dataset(frame, schema=SCHEMA)


def test_fit_uses_sample_standard_deviation():
    std = Standardizer.fit(_make_dataset(), ["age", "G3"])
    stats = std.as_dict()

    assert stats["age"].mean == pytest.approx(16.5)
    assert stats["age"].sd == pytest.approx(np.std([15, 16, 17, 18], ddof=1))
    assert not stats["age"].constant


def test_constant_field_standardizes_to_exact_zero():
    ds = _make_dataset()
    std = Standardizer.fit(ds, ["age", "studytime"])

    z = std.transform_dataset(ds)

    assert std.as_dict()["studytime"].sd == 1.0
    assert std.constant_mask.tolist() == [False, True]
    assert np.all(z[:, 1] == 0.0)
    assert np.all(np.isfinite(z))


def test_standardized_columns_have_zero_mean_unit_variance():
    ds = _make_dataset()
    std = Standardizer.fit(ds, ["age", "G3"])

    z = std.transform_dataset(ds)

    assert z.mean(axis=0).tolist() == pytest.approx([0.0, 0.0], abs=1e-12)
    assert z.std(axis=0, ddof=1).tolist() == pytest.approx([1.0, 1.0])


def test_transform_record_matches_dataset_row():
    ds = _make_dataset()
    std = Standardizer.fit(ds, ["age", "G3"])

    row = std.transform(ds.record(2))

    assert row == pytest.approx(std.transform_dataset(ds)[2])


def test_single_record_dataset_standardizes_to_zero():
    ds = Dataset(pd.DataFrame({"age": [16.0], "studytime": [3.0], "G3": [11.0]}), schema=SCHEMA)
    std = Standardizer.fit(ds, SCHEMA.numeric)

    assert std.transform_dataset(ds).tolist() == [[0.0, 0.0, 0.0]]


def test_empty_dataset_raises():
    ds = Dataset.from_records([], schema=SCHEMA)

    with pytest.raises(EmptyDatasetError):
        Standardizer.fit(ds, ["age"])


def test_unknown_field_raises_validation_error():
    with pytest.raises(ValidationError):
        Standardizer.fit(_make_dataset(), ["age", "health"])
