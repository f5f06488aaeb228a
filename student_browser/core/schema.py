from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Tuple


@dataclass(frozen=True)
class DatasetSchema:
    """
    Explicit record schema for a Dataset.

    Fields:

    - numeric: numeric (continuous/ordinal) field names. Every one is required
      and must be finite on every record.
    - categorical: categorical (enum/string) field names. Optional per column.
    - target: the grade field used for colouring and aggregate stats.
    - pca_fields: ordered numeric fields fed to the standardizer / PCA.
    - labels: human-readable axis labels, display only.
    """

    numeric: Tuple[str, ...]
    categorical: Tuple[str, ...]
    target: str
    pca_fields: Tuple[str, ...]
    labels: Dict[str, str] = field(default_factory=dict)

    def __post_init__(self) -> None:
        overlap = set(self.numeric) & set(self.categorical)
        if overlap:
            raise ValueError(f"Fields declared both numeric and categorical: {sorted(overlap)}")
        if self.target not in self.numeric:
            raise ValueError(f"Target field '{self.target}' must be numeric")
        missing = [f for f in self.pca_fields if f not in self.numeric]
        if missing:
            raise ValueError(f"PCA fields must be numeric, got {missing}")

    @property
    def fields(self) -> Tuple[str, ...]:
        return self.numeric + self.categorical

    def is_numeric(self, name: str) -> bool:
        return name in self.numeric

    def is_categorical(self, name: str) -> bool:
        return name in self.categorical

    def label(self, name: str) -> str:
        return self.labels.get(name, name)


# UCI student performance (student-mat.csv)
STUDENT_NUMERIC_FIELDS: Tuple[str, ...] = (
    "age", "Medu", "Fedu", "traveltime", "studytime", "failures",
    "famrel", "freetime", "goout", "Dalc", "Walc", "health",
    "absences", "G1", "G2", "G3",
)

STUDENT_CATEGORICAL_FIELDS: Tuple[str, ...] = (
    "school", "sex", "address", "famsize", "Pstatus", "Mjob", "Fjob",
    "guardian", "schoolsup", "famsup", "paid", "activities", "nursery",
    "higher", "internet", "romantic",
)

STUDENT_LABELS: Dict[str, str] = {
    "age": "Age (Years)",
    "studytime": "Weekly Study (1:<2h ... 4:>10h)",
    "failures": "Past Failures (Count)",
    "Dalc": "Workday Alc. (1=Low...5=High)",
    "Walc": "Weekend Alc. (1=Low...5=High)",
    "health": "Health (1=Bad...5=Good)",
    "absences": "Absences",
    "goout": "Going Out",
    "G1": "First Period Grade",
    "G2": "Second Period Grade",
    "G3": "Final Grade (G3)",
    "internet": "Internet Access",
    "romantic": "Romantic Relationship",
}

STUDENT_SCHEMA = DatasetSchema(
    numeric=STUDENT_NUMERIC_FIELDS,
    categorical=STUDENT_CATEGORICAL_FIELDS,
    target="G3",
    pca_fields=STUDENT_NUMERIC_FIELDS,
    labels=STUDENT_LABELS,
)
