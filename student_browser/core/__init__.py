"""
Core domain layer: dataset abstraction, filter state and evaluator, PCA,
stats, view base class, the view registry and the coordinator
"""

from .dataset import Dataset, Record
from .filter_state import FilterState
from .filter_evaluator import Selection, evaluate
from .pca import PCAProjection, compute_projection
from .base_view import BaseView
from .view_registry import ViewRegistry
from .coordinator import Coordinator

__all__ = [
    "Dataset",
    "Record",
    "FilterState",
    "Selection",
    "evaluate",
    "PCAProjection",
    "compute_projection",
    "BaseView",
    "ViewRegistry",
    "Coordinator",
]
