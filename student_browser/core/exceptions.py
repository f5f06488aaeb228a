from __future__ import annotations

from dataclasses import dataclass


class StudentBrowserError(Exception):
    """Base exception for all student_browser errors"""
    pass


class ConfigError(StudentBrowserError):
    """Invalid or inconsistent config file / dataset path"""
    pass


@dataclass(frozen=True)
class ValidationIssue:
    code: str
    message: str


class ValidationError(StudentBrowserError):
    """
    A record reaching the core is missing a required numeric field, holds a
    non-finite value, or the dataset ids are not dense
    """

    def __init__(self, issues: list[ValidationIssue]):
        self.issues = issues
        super().__init__("\n".join(f"{i.code}: {i.message}" for i in issues))


class EmptyDatasetError(StudentBrowserError):
    """Standardizer / PCA invoked on a dataset with zero records"""
    pass


class SingularInputError(StudentBrowserError):
    """Fewer than two usable eigen-pairs in the standardized covariance"""
    pass
