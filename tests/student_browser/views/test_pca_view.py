import numpy as np
import pandas as pd
import plotly.graph_objs as go
import pytest

from student_browser.core.coordinator import Coordinator
from student_browser.core.dataset import Dataset
from student_browser.core.filter_evaluator import evaluate
from student_browser.core.filter_state import FilterState
from student_browser.core.pca import compute_projection
from student_browser.core.schema import STUDENT_SCHEMA
from student_browser.views.pca_view import PCAView


def _make_dataset(n: int = 12) -> Dataset:
    """Full 16-field student rows with reproducible random values."""
    rng = np.random.default_rng(7)
    frame = pd.DataFrame({name: rng.integers(0, 6, size=n) for name in STUDENT_SCHEMA.numeric})
    frame["G3"] = rng.integers(0, 21, size=n)
    for name in STUDENT_SCHEMA.categorical:
        frame[name] = rng.choice(["yes", "no"], size=n)
    return Dataset(frame, schema=STUDENT_SCHEMA)


def test_pca_view_needs_a_projection():
    ds = _make_dataset()
    view = PCAView(ds)

    with pytest.raises(RuntimeError):
        view.compute_data(evaluate(ds, FilterState()))


def test_pca_view_compute_data_uses_cached_projection():
    ds = _make_dataset()
    projection = compute_projection(ds)
    view = PCAView(ds)
    view.bind(lambda event: None, projection)

    data = view.compute_data(evaluate(ds, FilterState(selection=5)))

    assert list(data.index) == list(ds.ids)
    assert data.loc[5, "x"] == projection[5][0]
    assert data["active"].sum() == 1
    assert bool(data.loc[5, "active"])
    assert data.attrs["x_label"].startswith("PC 1: ")
    assert data.attrs["y_label"].startswith("PC 2: ")


def test_pca_view_render_figure():
    ds = _make_dataset()
    view = PCAView(ds)
    view.bind(lambda event: None, compute_projection(ds))
    view.update_selection(evaluate(ds, FilterState()))

    fig = view.figure()

    assert isinstance(fig, go.Figure)
    assert len(fig.data) == 2
    assert len(fig.data[1].x) == len(ds)
    assert fig.layout.xaxis.title.text.startswith("PC 1")


def test_pca_view_cannot_mutate_coordinator_projection():
    ds = _make_dataset()
    view = PCAView(ds)
    coord = Coordinator()
    coord.initialize(ds, views=[view])
    before = coord.projection.axis_interpretation()

    with pytest.raises(ValueError):
        view.projection.components[:] = 0.0

    assert coord.projection.axis_interpretation() == before
