from __future__ import annotations

__all__ = ["IDs", "graph_id"]


class IDs:
    class Control:
        RESET_BTN = "reset-filters-btn"
        STATS_PANEL = "stats-panel"
        DATASET_META = "dataset-meta"
        STATUS_BAR = "status-bar"


def graph_id(view_id: str) -> str:
    """Dash component id of the graph rendering a given view."""
    return f"graph-{view_id}"
