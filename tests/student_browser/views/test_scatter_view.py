import pandas as pd
import plotly.graph_objs as go

from student_browser.core.dataset import Dataset
from student_browser.core.events import PointSelected
from student_browser.core.filter_evaluator import evaluate
from student_browser.core.filter_state import FilterState
from student_browser.core.schema import DatasetSchema
from student_browser.views.scatter_view import ScatterView

SCHEMA = DatasetSchema(
    numeric=("age", "studytime", "absences", "G3"),
    categorical=("internet",),
    target="G3",
    pca_fields=("age", "studytime", "absences", "G3"),
)


def _make_dataset() -> Dataset:
    frame = pd.DataFrame(
        {
            "age": [16, 17, 18, 16],
            "studytime": [1, 2, 3, 4],
            "absences": [0, 2, 4, 6],
            "G3": [5, 10, 15, 20],
            "internet": ["yes", "no", "yes", "no"],
        }
    )
    return Dataset(frame, schema=SCHEMA)


def test_scatter_view_compute_data_marks_active_points():
    ds = _make_dataset()
    view = ScatterView(ds)

    data = view.compute_data(evaluate(ds, FilterState(categorical_filters={"internet": "yes"})))

    assert isinstance(data, pd.DataFrame)
    assert list(data.index) == [0, 1, 2, 3]
    assert list(data["active"]) == [True, False, True, False]
    assert list(data["grade"]) == [5, 10, 15, 20]

    # jitter stays within half a study-time step
    assert ((data["x"] - ds.values("studytime")).abs() <= 0.3).all()


def test_scatter_view_jitter_is_stable_across_broadcasts():
    ds = _make_dataset()
    view = ScatterView(ds)

    first = view.compute_data(evaluate(ds, FilterState()))
    second = view.compute_data(evaluate(ds, FilterState(selection=1)))

    assert first["x"].tolist() == second["x"].tolist()
    assert first["y"].tolist() == second["y"].tolist()


def test_scatter_view_render_figure_splits_traces():
    ds = _make_dataset()
    view = ScatterView(ds)
    view.update_selection(evaluate(ds, FilterState(selection=2)))

    fig = view.figure()

    assert isinstance(fig, go.Figure)
    assert len(fig.data) == 2
    inactive, active = fig.data
    assert list(active.customdata) == [2]
    assert sorted(inactive.customdata) == [0, 1, 3]


def test_scatter_view_click_publishes_point_selected():
    ds = _make_dataset()
    view = ScatterView(ds)
    events = []
    view.bind(events.append)

    view.on_point_click(3)

    assert events == [PointSelected(record_id=3)]


def test_scatter_view_placeholder_before_first_broadcast():
    view = ScatterView(_make_dataset())

    fig = view.figure()

    assert len(fig.data) == 0
    assert "waiting" in fig.layout.title.text


def test_scatter_view_marks_struggling_region():
    ds = _make_dataset()
    view = ScatterView(ds)
    view.update_selection(evaluate(ds, FilterState()))

    fig = view.figure()

    rect = fig.layout.shapes[0]
    assert (rect.x0, rect.x1, rect.y0, rect.y1) == (3.5, 4.5, 0, 9)
    assert fig.layout.annotations[0].text == "Struggling?"
