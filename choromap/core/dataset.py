from __future__ import annotations

import math
from dataclasses import dataclass
from numbers import Real
from typing import Any, Iterable, Iterator, Mapping, Optional, Sequence, Tuple, Union

import pandas as pd

from .exceptions import DataShapeError

COLUMNS = ["location", "label", "group", "value"]


def _is_missing(value: Any) -> bool:
    if value is None:
        return True
    if isinstance(value, float) and math.isnan(value):
        return True
    return isinstance(value, str) and value == ""


@dataclass(frozen=True)
class DataPoint:
    """
    One observation: a value for a (location, label, group) triple.

    `group` falls back to `label` (and vice versa) when absent in the input,
    so every DataPoint carries both.
    """

    location: str
    label: str
    group: str
    value: float

    @classmethod
    def from_mapping(cls, raw: Mapping[str, Any]) -> DataPoint:
        location = raw.get("location")
        label = raw.get("label")
        group = raw.get("group")
        value = raw.get("value")

        if _is_missing(location):
            raise DataShapeError(f"Record has no location: {dict(raw)!r}")

        if _is_missing(label) and _is_missing(group):
            raise DataShapeError(f"Record needs a label or a group: {dict(raw)!r}")

        if isinstance(value, bool) or not isinstance(value, Real) or math.isnan(value):
            raise DataShapeError(f"Record value must be numeric, got {value!r}")

        if _is_missing(group):
            group = label
        if _is_missing(label):
            label = group

        return cls(
            location=str(location),
            label=str(label),
            group=str(group),
            value=value,
        )


DataInput = Union["Dataset", Iterable[Union[DataPoint, Mapping[str, Any]]]]


def _unique(values: Iterable[str]) -> Tuple[str, ...]:
    # dict keeps first-appearance order
    return tuple(dict.fromkeys(values))


class Dataset:
    """
    Immutable, ordered collection of DataPoints.

    Includes:
    - ingestion of plain mappings (CSV rows, JSON records) into DataPoints
    - cached distinct locations / labels / groups in first-appearance order
    - conversion to and from pandas DataFrames
    """

    def __init__(self, records: Iterable[Union[DataPoint, Mapping[str, Any]]] = ()) -> None:
        self._records: Tuple[DataPoint, ...] = tuple(
            r if isinstance(r, DataPoint) else DataPoint.from_mapping(r)
            for r in records
        )
        self._locations: Optional[Tuple[str, ...]] = None
        self._labels: Optional[Tuple[str, ...]] = None
        self._groups: Optional[Tuple[str, ...]] = None

    @classmethod
    def coerce(cls, data: Optional[DataInput]) -> Dataset:
        if data is None:
            return cls()
        if isinstance(data, Dataset):
            return data
        if isinstance(data, pd.DataFrame):
            return cls.from_frame(data)
        return cls(data)

    @classmethod
    def from_frame(cls, df: pd.DataFrame) -> Dataset:
        """
        Build a Dataset from a DataFrame with a 'location', 'value' and a 'label' and/or 'group' column.
        """
        missing = [c for c in ("location", "value") if c not in df.columns]
        if missing:
            raise DataShapeError(f"DataFrame is missing required columns: {missing}")
        if "label" not in df.columns and "group" not in df.columns:
            raise DataShapeError("DataFrame needs a 'label' or a 'group' column")

        return cls(df.to_dict(orient="records"))

    def to_frame(self) -> pd.DataFrame:
        if not self._records:
            return pd.DataFrame(columns=COLUMNS)
        return pd.DataFrame(
            [(r.location, r.label, r.group, r.value) for r in self._records],
            columns=COLUMNS,
        )

    # ------------------------------------------------------------------
    # Distinct keys
    # ------------------------------------------------------------------
    @property
    def locations(self) -> Tuple[str, ...]:
        if self._locations is None:
            self._locations = _unique(r.location for r in self._records)
        return self._locations

    @property
    def labels(self) -> Tuple[str, ...]:
        if self._labels is None:
            self._labels = _unique(r.label for r in self._records)
        return self._labels

    @property
    def groups(self) -> Tuple[str, ...]:
        if self._groups is None:
            self._groups = _unique(r.group for r in self._records)
        return self._groups

    @property
    def records(self) -> Tuple[DataPoint, ...]:
        return self._records

    def keys(self, dimension: str) -> Tuple[str, ...]:
        """Distinct keys of a filter dimension ('locations', 'labels', 'groups')."""
        if dimension == "locations":
            return self.locations
        if dimension == "labels":
            return self.labels
        if dimension == "groups":
            return self.groups
        raise ValueError(f"Unknown dimension '{dimension}'")

    def __iter__(self) -> Iterator[DataPoint]:
        return iter(self._records)

    def __len__(self) -> int:
        return len(self._records)

    def __getitem__(self, index: int) -> DataPoint:
        return self._records[index]

    def __repr__(self) -> str:
        return (
            f"Dataset(n_records={len(self._records)}, n_locations={len(self.locations)}, "
            f"n_groups={len(self.groups)})"
        )


def record_key(record: DataPoint, dimension: str) -> str:
    if dimension == "locations":
        return record.location
    if dimension == "labels":
        return record.label
    if dimension == "groups":
        return record.group
    raise ValueError(f"Unknown dimension '{dimension}'")


def records_frame(records: Sequence[DataPoint]) -> pd.DataFrame:
    """DataFrame view of a plain record sequence (e.g. a filtered subset)."""
    return Dataset(records).to_frame()

