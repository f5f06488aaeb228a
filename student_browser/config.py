from __future__ import annotations

import json
import logging
import os
from dataclasses import dataclass, fields
from pathlib import Path
from typing import Any, Dict, Mapping, Optional

from student_browser.core.dataset_loader import CleaningPolicy
from student_browser.core.exceptions import ConfigError
from student_browser.core.stats import PASS_THRESHOLD, StatsConfig

logger = logging.getLogger(__name__)

DEFAULT_DATA_PATH = Path("data") / "student-mat.csv"


def _env_flag(value: str) -> bool:
    return value.strip().lower() in ("1", "true", "yes", "on")


@dataclass(frozen=True)
class AppConfig:
    """
    Runtime settings for the browser.

    - data_path: UCI student CSV; relative paths resolve against the config file
    - drop_ghost_records: drop rows with zero absences and zero final grade
    - flip_pc1: negate PC1 for display orientation
    - strict_pca: raise on degenerate PCA instead of zeroing the missing axis
    - pass_threshold / correlation_x / correlation_y: stats panel settings
    """
    data_path: Path = DEFAULT_DATA_PATH
    ui_title: str = "Student Performance Browser"
    drop_ghost_records: bool = False
    flip_pc1: bool = True
    strict_pca: bool = False
    pass_threshold: float = PASS_THRESHOLD
    correlation_x: str = "studytime"
    correlation_y: str = "G3"
    port: int = 8051
    debug: bool = False

    @property
    def cleaning_policy(self) -> CleaningPolicy:
        return CleaningPolicy(drop_ghost_records=self.drop_ghost_records)

    @property
    def stats_config(self) -> StatsConfig:
        return StatsConfig(
            correlation_x=self.correlation_x,
            correlation_y=self.correlation_y,
            pass_threshold=self.pass_threshold,
        )

    @classmethod
    def from_dict(cls, raw: Mapping[str, Any], base_dir: Optional[Path] = None) -> AppConfig:
        known = {f.name for f in fields(cls)}
        unknown = sorted(set(raw) - known)
        if unknown:
            raise ConfigError(f"Unknown config keys: {unknown}")

        values: Dict[str, Any] = dict(raw)
        if "data_path" in values:
            path = Path(values["data_path"])
            if not path.is_absolute() and base_dir is not None:
                path = base_dir / path
            values["data_path"] = path

        try:
            return cls(**values)
        except TypeError as e:
            raise ConfigError(f"Invalid config: {e}") from e


def load_config(path: str | Path | None = None, env: Optional[Mapping[str, str]] = None) -> AppConfig:
    """
    Load settings from an optional JSON file, then apply environment overrides.

    Environment variables:
        STUDENT_BROWSER_DATA, STUDENT_BROWSER_DROP_GHOSTS,
        STUDENT_BROWSER_FLIP_PC1, PORT, DEBUG
    """
    env = os.environ if env is None else env
    raw: Dict[str, Any] = {}
    base_dir: Optional[Path] = None

    if path is not None:
        path = Path(path)
        if not path.is_file():
            raise ConfigError(f"Config file not found at {path}")
        try:
            raw = json.loads(path.read_text())
        except json.JSONDecodeError as e:
            raise ConfigError(f"Config file {path} is not valid JSON: {e}") from e
        if not isinstance(raw, dict):
            raise ConfigError(f"Config file {path} must hold a JSON object")
        base_dir = path.parent
        logger.info("Loaded config file", extra={"config_path": str(path)})

    if "STUDENT_BROWSER_DATA" in env:
        raw["data_path"] = env["STUDENT_BROWSER_DATA"]
        base_dir = None
    if "STUDENT_BROWSER_DROP_GHOSTS" in env:
        raw["drop_ghost_records"] = _env_flag(env["STUDENT_BROWSER_DROP_GHOSTS"])
    if "STUDENT_BROWSER_FLIP_PC1" in env:
        raw["flip_pc1"] = _env_flag(env["STUDENT_BROWSER_FLIP_PC1"])
    if "PORT" in env:
        try:
            raw["port"] = int(env["PORT"])
        except ValueError as e:
            raise ConfigError(f"PORT must be an integer, got {env['PORT']!r}") from e
    if "DEBUG" in env:
        raw["debug"] = _env_flag(env["DEBUG"])

    return AppConfig.from_dict(raw, base_dir=base_dir)
