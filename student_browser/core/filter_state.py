from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Any, Dict, Mapping, Optional, Sequence, Tuple

Range = Tuple[float, float]


def _normalise_range(field_name: str, bounds: Sequence[float]) -> Range:
    if len(bounds) != 2:
        raise ValueError(f"Range for '{field_name}' must have exactly two bounds, got {bounds!r}")
    low, high = float(bounds[0]), float(bounds[1])
    if math.isnan(low) or math.isnan(high):
        raise ValueError(f"Range for '{field_name}' has a NaN bound: {bounds!r}")
    return (min(low, high), max(low, high))


@dataclass
class FilterState:
    """
    Represents the current cross-filter selection.

    Fields:

    - range_filters: field -> inclusive (low, high), reported by brush views
    - categorical_filters: field -> the single accepted value for that field
    - selection: optional single record id that overrides every other filter

    Only the Coordinator mutates a FilterState; everything else gets a copy.
    """

    range_filters: Dict[str, Range] = field(default_factory=dict)
    categorical_filters: Dict[str, Any] = field(default_factory=dict)
    selection: Optional[int] = None

    # ------------------------------------------------------------------
    # Mutation protocol
    # ------------------------------------------------------------------
    def set_range_filters(self, mapping: Mapping[str, Sequence[float]]) -> None:
        """
        Replace the whole range-filter map. A brush view reports one interval
        per brushed axis and omits cleared axes. Clears the single selection.
        """
        self.range_filters = {name: _normalise_range(name, bounds) for name, bounds in mapping.items()}
        self.selection = None

    def toggle_categorical_filter(self, field_name: str, value: Any) -> None:
        """
        Same value again removes the filter; a different value replaces it.
        Clears the single selection.
        """
        if field_name in self.categorical_filters and self.categorical_filters[field_name] == value:
            del self.categorical_filters[field_name]
        else:
            self.categorical_filters[field_name] = value
        self.selection = None

    def toggle_single_selection(self, record_id: int) -> None:
        """
        Select `record_id`, or clear the selection if it is already selected.
        Range and categorical filters are left untouched either way.
        """
        record_id = int(record_id)
        if self.selection == record_id:
            self.selection = None
        else:
            self.selection = record_id

    def reset(self) -> None:
        self.range_filters = {}
        self.categorical_filters = {}
        self.selection = None

    # ------------------------------------------------------------------
    # Inspection
    # ------------------------------------------------------------------
    @property
    def has_selection(self) -> bool:
        return self.selection is not None

    @property
    def is_empty(self) -> bool:
        return not self.range_filters and not self.categorical_filters and self.selection is None

    def copy(self) -> FilterState:
        return FilterState(
            range_filters=dict(self.range_filters),
            categorical_filters=dict(self.categorical_filters),
            selection=self.selection,
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "range_filters": {k: [low, high] for k, (low, high) in self.range_filters.items()},
            "categorical_filters": dict(self.categorical_filters),
            "selection": self.selection,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> FilterState:
        selection = data.get("selection")
        return cls(
            range_filters={
                k: _normalise_range(k, v) for k, v in (data.get("range_filters") or {}).items()
            },
            categorical_filters=dict(data.get("categorical_filters") or {}),
            selection=int(selection) if selection is not None else None,
        )
