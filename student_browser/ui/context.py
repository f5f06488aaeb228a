from __future__ import annotations

import threading
from dataclasses import dataclass, field
from typing import Dict, Optional

from student_browser.config import AppConfig
from student_browser.core.base_view import BaseView
from student_browser.core.coordinator import Coordinator
from student_browser.core.view_registry import ViewRegistry
from student_browser.ui.stats_panel import StatsPanel


@dataclass
class AppContext:
    config: AppConfig
    coordinator: Coordinator
    registry: ViewRegistry
    views: Dict[str, BaseView] = field(default_factory=dict)
    stats_panel: Optional[StatsPanel] = None

    # Held across dispatch + render so a response never mixes two broadcasts
    lock: threading.Lock = field(default_factory=threading.Lock)

    def view(self, view_id: str) -> BaseView:
        try:
            return self.views[view_id]
        except KeyError:
            raise KeyError(f"View '{view_id}' is not part of this app")
