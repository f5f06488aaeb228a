from __future__ import annotations

from typing import Any, Dict, List, Type

from .dataset import Dataset
from .base_view import BaseView


class ViewRegistry:
    """
    Registry for view classes so the app can build its panels dynamically

    Purpose:
    - Decouples the Dash layer from hardcoded view implementations by exposing {@link create(view_id, dataset)}
    - Fixes the broadcast order: views are created in registration order

    Design Notes:
    - Stores the subclasses of {@link BaseView}, not instances, so that each view can be instantiated on demand
    - Enforces variants:
        * only {@link BaseView} subclasses can be registered
        * each view 'id' is unique across the registry
    """

    def __init__(self):
        self._views: Dict[str, Type[BaseView]] = {}
        self._options: Dict[str, Dict[str, Any]] = {}

    def register(self, view_cls: Type[BaseView], view_id: str | None = None, **options: Any) -> None:
        """
        Register a {@link BaseView} with the registry

        :param view_cls: the subclass of {@link BaseView}
        :param view_id: registry key; defaults to the class 'id'. Lets one class
            back several panels (e.g. one bar chart per categorical field)
        :param options: extra constructor keyword arguments for this panel

        Raises:
            TypeError: if view_cls is not a subclass of {@link BaseView}
            ValueError: if a view with same id already exists
        """
        if not isinstance(view_cls, type) or not issubclass(view_cls, BaseView):
            raise TypeError(f"View '{getattr(view_cls, 'id', view_cls)}' must be a subclass of BaseView")

        key = view_id or view_cls.id
        if key in self._views:
            raise ValueError(f"View '{key}' already registered")

        self._views[key] = view_cls
        self._options[key] = dict(options)

    def create(self, view_id: str, dataset: Dataset, **kwargs: Any) -> BaseView:
        """
        Instantiate a view for the given view_id.

        Raises:
            KeyError: if no view with the given id exists in the registry
        """
        try:
            cls = self._views[view_id]
        except KeyError:
            raise KeyError(f"View '{view_id}' not found")
        options = {**self._options[view_id], **kwargs}
        view = cls(dataset, **options)
        view.id = view_id
        return view

    def create_all(self, dataset: Dataset) -> List[BaseView]:
        """Instantiate every registered view, in registration order."""
        return [self.create(view_id, dataset) for view_id in self._views]

    def ids(self) -> List[str]:
        return list(self._views.keys())

    def all_classes(self) -> List[Type[BaseView]]:
        return list(self._views.values())
