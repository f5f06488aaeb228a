import pandas as pd
import pytest

from student_browser.core.base_view import BaseView
from student_browser.core.dataset import Dataset
from student_browser.core.schema import DatasetSchema
from student_browser.core.view_registry import ViewRegistry

SCHEMA = DatasetSchema(numeric=("G3",), categorical=("internet",), target="G3", pca_fields=("G3",))


def _make_dataset() -> Dataset:
    return Dataset(pd.DataFrame({"G3": [10, 12], "internet": ["yes", "no"]}), schema=SCHEMA)


class DummyView(BaseView):
    id = "dummy"
    label = "Dummy"

    def __init__(self, dataset, attribute="G3"):
        super().__init__(dataset)
        self.attribute = attribute

    def compute_data(self, selection):
        return None

    def render_figure(self, data):
        return self.empty_figure(self.label)


def test_register_and_create_uses_class_id():
    registry = ViewRegistry()
    registry.register(DummyView)

    view = registry.create("dummy", _make_dataset())

    assert isinstance(view, DummyView)
    assert view.id == "dummy"
    assert registry.ids() == ["dummy"]


def test_one_class_can_back_several_panels():
    registry = ViewRegistry()
    registry.register(DummyView, "dummy_a", attribute="internet")
    registry.register(DummyView, "dummy_b")

    views = registry.create_all(_make_dataset())

    assert [v.id for v in views] == ["dummy_a", "dummy_b"]
    assert [v.attribute for v in views] == ["internet", "G3"]
    assert registry.all_classes() == [DummyView, DummyView]


def test_duplicate_id_is_rejected():
    registry = ViewRegistry()
    registry.register(DummyView)

    with pytest.raises(ValueError):
        registry.register(DummyView)


def test_non_view_class_is_rejected():
    with pytest.raises(TypeError):
        ViewRegistry().register(object)


def test_unknown_view_id_raises_key_error():
    with pytest.raises(KeyError):
        ViewRegistry().create("missing", _make_dataset())
