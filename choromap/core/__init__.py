"""
Core domain layer: dataset abstraction, filter state, event bus,
data controller and the aggregation engine
"""

from .aggregation import DataView, compute_data_view
from .data_controller import DataController
from .dataset import DataPoint, Dataset
from .events import EventBus, events
from .filter_state import FilterState

__all__ = [
    "DataView",
    "compute_data_view",
    "DataController",
    "DataPoint",
    "Dataset",
    "EventBus",
    "events",
    "FilterState",
]
