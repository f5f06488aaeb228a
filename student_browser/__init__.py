"""
Top-level package for the student performance browser.

This package exposes the core architecture (domain, views, UI adapters).
Most code should import from submodules such as:
    student_browser.core
    student_browser.views
    student_browser.ui
"""

__all__: list[str] = []
