from __future__ import annotations

import logging
from typing import Any, Iterable, List, Optional, Tuple

from .dataset import DataInput, DataPoint, Dataset, record_key
from .events import DATA_DID_CHANGE, EventBus, events, filter_did_change
from .filter_state import DIMENSIONS, FilterState

logger = logging.getLogger(__name__)


class DataController:
    """
    Owns the dataset and the current FilterState of one logical chart group.

    Charts share a controller by holding a reference to it; every mutation goes through
    {@link toggle_filter}, {@link clear} or {@link set_data} and is broadcast on the EventBus
    with the `sender` that caused it, so sibling charts can re-render and the origin can
    recognise its own change.
    """

    def __init__(
        self,
        data: Optional[DataInput] = None,
        bus: Optional[EventBus] = None,
        filter_state: Optional[FilterState] = None,
    ) -> None:
        self._bus = bus if bus is not None else events
        self._dataset = Dataset.coerce(data)
        self._filters = filter_state.copy() if filter_state is not None else FilterState()

    @property
    def bus(self) -> EventBus:
        return self._bus

    # ------------------------------------------------------------------
    # Data
    # ------------------------------------------------------------------
    def data(self) -> Dataset:
        return self._dataset

    def snapshot(self) -> Tuple[DataPoint, ...]:
        """All records, unfiltered. Charts aggregate over this and highlight their selection."""
        return self._dataset.records

    def filtered_snapshot(self, ignore: Iterable[str] = ()) -> Tuple[DataPoint, ...]:
        """
        Records matching every non-empty filter dimension.

        :param ignore: dimensions to leave out, typically the one the calling chart selects on
        """
        ignored = set(ignore)
        active = [
            (dim, set(self._filters.get(dim)))
            for dim in DIMENSIONS
            if dim not in ignored and self._filters.get(dim)
        ]
        if not active:
            return self._dataset.records

        return tuple(
            r for r in self._dataset.records
            if all(record_key(r, dim) in keys for dim, keys in active)
        )

    def set_data(self, data: Optional[DataInput], sender: Any = None) -> None:
        self._dataset = Dataset.coerce(data)
        logger.info(
            "Dataset replaced",
            extra={
                "n_records": len(self._dataset),
                "n_locations": len(self._dataset.locations),
                "n_groups": len(self._dataset.groups),
            },
        )
        self._bus.publish(DATA_DID_CHANGE, sender, self._dataset)

    # ------------------------------------------------------------------
    # Filters
    # ------------------------------------------------------------------
    def toggle_filter(self, dimension: str, key: Any, sender: Any) -> None:
        selected = self._filters.toggle(dimension, str(key))
        logger.debug(
            "Filter toggled",
            extra={"dimension": dimension, "key": str(key), "selected": selected},
        )
        self._publish_filters(dimension, sender)

    def is_filter(self, dimension: str, key: Any) -> bool:
        return self._filters.contains(dimension, str(key))

    def clear(self, dimension: str, sender: Any) -> None:
        # Always notifies, even if the dimension was already empty
        self._filters.clear(dimension)
        self._publish_filters(dimension, sender)

    def clear_all(self, sender: Any) -> None:
        for dimension in DIMENSIONS:
            self.clear(dimension, sender)

    def filters(self, dimension: str) -> List[str]:
        return self._filters.get(dimension)

    def filter_state(self) -> FilterState:
        return self._filters.copy()

    def _publish_filters(self, dimension: str, sender: Any) -> None:
        self._bus.publish(filter_did_change(dimension), sender, self._filters.get(dimension))

    def __repr__(self) -> str:
        return f"DataController({self._dataset!r}, filters={self._filters.to_dict()!r})"
