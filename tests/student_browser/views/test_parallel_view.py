import pandas as pd
import plotly.graph_objs as go
import pytest

from student_browser.core.coordinator import Coordinator
from student_browser.core.dataset import Dataset
from student_browser.core.events import RangeFilterChanged
from student_browser.core.filter_evaluator import evaluate
from student_browser.core.filter_state import FilterState
from student_browser.core.schema import DatasetSchema
from student_browser.views.parallel_view import ParallelCoordinatesView

NUMERIC = ("age", "studytime", "failures", "Dalc", "Walc", "health", "absences", "G3")

SCHEMA = DatasetSchema(numeric=NUMERIC, categorical=(), target="G3", pca_fields=NUMERIC)


def _make_dataset() -> Dataset:
    frame = pd.DataFrame(
        {
            "age": [15, 16, 17, 18],
            "studytime": [1, 2, 3, 4],
            "failures": [0, 0, 1, 3],
            "Dalc": [1, 1, 2, 5],
            "Walc": [1, 2, 3, 5],
            "health": [5, 4, 3, 1],
            "absences": [0, 2, 4, 10],
            "G3": [15, 12, 10, 4],
        }
    )
    return Dataset(frame, schema=SCHEMA)


def test_parallel_view_uses_the_six_lifestyle_axes():
    ds = _make_dataset()
    view = ParallelCoordinatesView(ds)

    data = view.compute_data(evaluate(ds, FilterState()))

    assert view.dimensions == ("age", "studytime", "failures", "Dalc", "Walc", "health")
    assert list(data.columns) == list(view.dimensions) + ["active"]
    assert data["active"].all()


def test_parallel_view_drops_axes_missing_from_dataset():
    ds = _make_dataset()

    view = ParallelCoordinatesView(ds, dimensions=("age", "goout", "health"))

    assert view.dimensions == ("age", "health")


def test_on_brush_publishes_whole_brush_map():
    ds = _make_dataset()
    view = ParallelCoordinatesView(ds)
    events = []
    view.bind(events.append)

    view.on_brush("age", (17, 15))
    view.on_brush("Dalc", (1, 2))
    view.on_brush("age", None)

    assert events[0] == RangeFilterChanged(ranges={"age": (15.0, 17.0)})
    assert events[-1] == RangeFilterChanged(ranges={"Dalc": (1.0, 2.0)})

    with pytest.raises(KeyError):
        view.on_brush("G3", (0, 1))


@pytest.mark.parametrize(
    "value, expected",
    [
        ([[16, 17]], {"studytime": (16.0, 17.0)}),
        ([16, 17], {"studytime": (16.0, 17.0)}),
        ([[[1, 2], [3, 4]]], {"studytime": (3.0, 4.0)}),
        ([None], {}),
    ],
)
def test_apply_restyle_parses_constraint_formats(value, expected):
    ds = _make_dataset()
    view = ParallelCoordinatesView(ds)
    events = []
    view.bind(events.append)

    changed = view.apply_restyle([{"dimensions[1].constraintrange": value}, [0]])

    assert changed
    assert events == [RangeFilterChanged(ranges=expected)]


def test_apply_restyle_ignores_unrelated_changes():
    view = ParallelCoordinatesView(_make_dataset())
    view.bind(lambda event: None)

    assert not view.apply_restyle(None)
    assert not view.apply_restyle([{"line.color": "red"}, [0]])
    assert not view.apply_restyle([{"dimensions[9].constraintrange": [1, 2]}, [0]])


def test_brushes_follow_coordinator_filters_and_clear_on_reset():
    ds = _make_dataset()
    view = ParallelCoordinatesView(ds)
    coord = Coordinator()
    coord.initialize(ds, views=[view])

    view.on_brush("failures", (1, 3))
    assert coord.filtered_ids() == (2, 3)
    assert view.brushes == {"failures": (1.0, 3.0)}

    coord.reset()
    assert view.brushes == {}
    assert coord.filtered_ids() == ds.ids


def test_parallel_view_render_figure():
    ds = _make_dataset()
    view = ParallelCoordinatesView(ds)
    view.brushes = {"age": (15.0, 16.0)}

    fig = view.render_figure(view.compute_data(evaluate(ds, FilterState())))

    assert isinstance(fig, go.Figure)
    assert isinstance(fig.data[0], go.Parcoords)
    dims = fig.data[0].dimensions
    assert len(dims) == 6
    assert list(dims[0].constraintrange) == [15.0, 16.0]


def test_second_brush_on_an_axis_replaces_the_first():
    ds = _make_dataset()
    view = ParallelCoordinatesView(ds)
    coord = Coordinator()
    coord.initialize(ds, views=[view])

    view.apply_restyle([{"dimensions[0].constraintrange": [[15, 15.5]]}, [0]])
    assert coord.filtered_ids() == (0,)

    # never the span of both intervals (which would also accept ages 16 and 17)
    view.apply_restyle([{"dimensions[0].constraintrange": [[[15, 15.5], [17.5, 18]]]}, [0]])
    assert coord.filtered_ids() == (3,)
    assert view.brushes == {"age": (17.5, 18.0)}


def test_axes_allow_a_single_interval():
    ds = _make_dataset()
    view = ParallelCoordinatesView(ds)

    fig = view.render_figure(view.compute_data(evaluate(ds, FilterState())))

    assert all(dim.multiselect is False for dim in fig.data[0].dimensions)
