from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Dict, Optional, Sequence, Tuple

import pandas as pd

from .dataset import DataInput, DataPoint, Dataset, records_frame

logger = logging.getLogger(__name__)

NestedSums = Dict[str, Dict[str, float]]


@dataclass(frozen=True)
class DataView:
    """
    Read-only aggregation snapshot for one render pass.

    Fields:

    - selected_group: the group whose values are displayed (None for an empty dataset)
    - selected_group_data: records of the selected group
    - by_location_label: location -> label -> sum
    - by_location_group: location -> group -> sum
    - location_to_sum: location -> sum
    - max_location / max_label / max_group: largest leaf sum of each table, None when empty.
      None means "no data" and must never be used as a divisor.
    """

    selected_group: Optional[str]
    selected_group_data: Tuple[DataPoint, ...] = ()
    by_location_label: NestedSums = field(default_factory=dict)
    by_location_group: NestedSums = field(default_factory=dict)
    location_to_sum: Dict[str, float] = field(default_factory=dict)
    max_location: Optional[float] = None
    max_label: Optional[float] = None
    max_group: Optional[float] = None

    # Dataset context
    snapshot: Tuple[DataPoint, ...] = ()
    locations: Tuple[str, ...] = ()
    labels: Tuple[str, ...] = ()
    groups: Tuple[str, ...] = ()

    @property
    def is_empty(self) -> bool:
        return not self.location_to_sum


def resolve_group(groups: Sequence[str], previous: Optional[str]) -> Optional[str]:
    """
    Keep `previous` if it still exists, else fall back to the first group.
    """
    if previous is not None and previous in groups:
        return previous

    resolved = groups[0] if groups else None
    if previous is not None:
        logger.debug(
            "Selected group no longer present, falling back",
            extra={"previous_group": previous, "resolved_group": resolved},
        )
    return resolved


def _nested_sums(frame: pd.DataFrame, outer: str, inner: str) -> NestedSums:
    if frame.empty:
        return {}

    sums = frame.groupby([outer, inner], sort=False)["value"].sum()
    nested: NestedSums = {}
    for (outer_key, inner_key), value in sums.items():
        nested.setdefault(outer_key, {})[inner_key] = float(value)
    return nested


def _sums(frame: pd.DataFrame, key: str) -> Dict[str, float]:
    if frame.empty:
        return {}

    sums = frame.groupby(key, sort=False)["value"].sum()
    return {k: float(v) for k, v in sums.items()}


def _nested_max(nested: NestedSums) -> Optional[float]:
    leaves = [v for inner in nested.values() for v in inner.values()]
    return max(leaves) if leaves else None


def compute_data_view(dataset: DataInput, previous_selected_group: Optional[str] = None) -> DataView:
    """
    Aggregate `dataset` for the group to display.

    Zero values are kept, so a location with sum 0 differs from a location without data.

    :param dataset: a Dataset or any iterable of DataPoints / record mappings (may be empty)
    :param previous_selected_group: the group the caller displayed before; may be None or stale
    :return: the DataView, its `selected_group` being the resolved group callers should persist
    """
    ds = Dataset.coerce(dataset)
    selected_group = resolve_group(ds.groups, previous_selected_group)

    selected_data = tuple(r for r in ds if r.group == selected_group)
    frame = records_frame(selected_data)

    by_location_label = _nested_sums(frame, "location", "label")
    by_location_group = _nested_sums(frame, "location", "group")
    location_to_sum = _sums(frame, "location")

    return DataView(
        selected_group=selected_group,
        selected_group_data=selected_data,
        by_location_label=by_location_label,
        by_location_group=by_location_group,
        location_to_sum=location_to_sum,
        max_location=max(location_to_sum.values()) if location_to_sum else None,
        max_label=_nested_max(by_location_label),
        max_group=_nested_max(by_location_group),
        snapshot=ds.records,
        locations=ds.locations,
        labels=ds.labels,
        groups=ds.groups,
    )
