from __future__ import annotations

import io
import logging
from dataclasses import dataclass
from pathlib import Path

import numpy as np
import pandas as pd

from student_browser.core.dataset import Dataset
from student_browser.core.exceptions import ConfigError
from student_browser.core.schema import DatasetSchema, STUDENT_SCHEMA

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CleaningPolicy:
    """
    Row-level cleaning applied before a Dataset is frozen.

    - drop_invalid: drop rows with a missing/non-numeric required numeric field
      or a missing first categorical field (e.g. 'school')
    - drop_ghost_records: drop rows with zero absences AND zero final grade.
      Off by default; some exports keep these as genuine dropouts.
    """
    drop_invalid: bool = True
    drop_ghost_records: bool = False
    ghost_fields: tuple[str, str] = ("absences", "G3")


def _sniff_delimiter(header_line: str) -> str:
    return ";" if header_line.count(";") > header_line.count(",") else ","


def read_student_table(source: str | Path | io.TextIOBase) -> pd.DataFrame:
    """
    Read a UCI student-performance CSV (';' or ',' delimited) into a raw frame.
    Header names are stripped of whitespace and surrounding quotes.
    """
    if isinstance(source, (str, Path)):
        path = Path(source)
        if not path.is_file():
            raise ConfigError(f"Student data file not found at {path}.")
        text = path.read_text(encoding="utf-8")
    else:
        text = source.read()

    first_line = text.split("\n", 1)[0]
    sep = _sniff_delimiter(first_line)

    raw = pd.read_csv(io.StringIO(text), sep=sep, dtype=str, keep_default_na=True)
    raw.columns = [str(c).strip().strip('"') for c in raw.columns]
    return raw


def clean_student_table(
    raw: pd.DataFrame,
    schema: DatasetSchema = STUDENT_SCHEMA,
    policy: CleaningPolicy = CleaningPolicy(),
) -> pd.DataFrame:
    """
    Convert numeric columns and apply the cleaning policy.

    Returns a frame ready for Dataset construction. Nothing here is done
    silently: every dropped row is counted in the log.
    """
    frame = raw.copy()

    missing = [c for c in schema.numeric if c not in frame.columns]
    if missing:
        raise ConfigError(f"Student data is missing required numeric columns: {missing}")

    for col in schema.numeric:
        frame[col] = pd.to_numeric(frame[col], errors="coerce")

    for col in schema.categorical:
        if col in frame.columns:
            frame[col] = frame[col].where(frame[col].notna(), None)

    original_count = len(frame)
    keep = np.ones(original_count, dtype=bool)

    if policy.drop_invalid:
        numeric = frame[list(schema.numeric)].to_numpy(dtype="float64")
        keep &= np.isfinite(numeric).all(axis=1)
        if schema.categorical and schema.categorical[0] in frame.columns:
            keep &= frame[schema.categorical[0]].notna().to_numpy()

    if policy.drop_ghost_records:
        a, b = policy.ghost_fields
        keep &= ~((frame[a] == 0) & (frame[b] == 0)).to_numpy()

    cleaned = frame.loc[keep].reset_index(drop=True)

    logger.info(
        "Cleaned student table",
        extra={
            "n_input": original_count,
            "n_dropped": original_count - len(cleaned),
            "drop_ghost_records": policy.drop_ghost_records,
        },
    )
    return cleaned


def load_student_dataset(
    source: str | Path | io.TextIOBase,
    schema: DatasetSchema = STUDENT_SCHEMA,
    policy: CleaningPolicy = CleaningPolicy(),
    name: str | None = None,
) -> Dataset:
    """
    Read, clean and freeze a student dataset. Ids follow the cleaned row order.
    """
    if name is None:
        name = Path(source).stem if isinstance(source, (str, Path)) else "students"

    raw = read_student_table(source)
    cleaned = clean_student_table(raw, schema=schema, policy=policy)
    return Dataset(cleaned, schema=schema, name=name)
