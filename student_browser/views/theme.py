from __future__ import annotations

COLOR_PRIMARY = "#4caf50"
COLOR_INACTIVE = "#dddddd"
COLOR_BAD = "#d6604d"

# Grades 0-20: red (0) -> yellow (10) -> green (20)
GRADE_COLORSCALE = [
    [0.0, "#d32f2f"],
    [0.5, "#fbc02d"],
    [1.0, "#388e3c"],
]
GRADE_RANGE = (0, 20)

FIGURE_MARGIN = dict(l=50, r=30, t=50, b=40)
