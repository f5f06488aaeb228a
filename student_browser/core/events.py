"""
View-originated intents. Views publish these; the Coordinator is their only consumer.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Callable, Mapping, Sequence, Union


@dataclass(frozen=True)
class RangeFilterChanged:
    ranges: Mapping[str, Sequence[float]] = field(default_factory=dict)


@dataclass(frozen=True)
class CategoricalToggled:
    field: str
    value: Any


@dataclass(frozen=True)
class PointSelected:
    record_id: int


@dataclass(frozen=True)
class ResetRequested:
    pass


FilterEvent = Union[RangeFilterChanged, CategoricalToggled, PointSelected, ResetRequested]

Publish = Callable[[FilterEvent], None]
