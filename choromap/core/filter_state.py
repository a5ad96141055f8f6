from __future__ import annotations

from dataclasses import dataclass, field, asdict
from typing import Any, Dict, List

DIMENSIONS = ("locations", "labels", "groups")


@dataclass
class FilterState:
    """
    Represents the current user selection per filter dimension.

    Fields:

    - locations: keys of the locations selected by the user (e.g. clicked map features)
    - labels: labels selected by the user
    - groups: groups selected by the user

    Each list behaves as an insertion-ordered set: toggling a key adds it when absent
    and removes it when present.
    """

    locations: List[str] = field(default_factory=list)
    labels: List[str] = field(default_factory=list)
    groups: List[str] = field(default_factory=list)

    def _keys(self, dimension: str) -> List[str]:
        if dimension not in DIMENSIONS:
            raise ValueError(f"Unknown filter dimension '{dimension}', expected one of {DIMENSIONS}")
        return getattr(self, dimension)

    def toggle(self, dimension: str, key: str) -> bool:
        """
        Flip membership of `key` in `dimension`.
        :return: True if the key is selected afterwards
        """
        keys = self._keys(dimension)
        if key in keys:
            keys.remove(key)
            return False
        keys.append(key)
        return True

    def contains(self, dimension: str, key: str) -> bool:
        return key in self._keys(dimension)

    def clear(self, dimension: str) -> None:
        self._keys(dimension).clear()

    def get(self, dimension: str) -> List[str]:
        return list(self._keys(dimension))

    def is_empty(self) -> bool:
        return not any(getattr(self, d) for d in DIMENSIONS)

    def copy(self) -> FilterState:
        return FilterState(
            locations=list(self.locations),
            labels=list(self.labels),
            groups=list(self.groups),
        )

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> FilterState:
        return cls(
            locations=[str(k) for k in data.get("locations", [])],
            labels=[str(k) for k in data.get("labels", [])],
            groups=[str(k) for k in data.get("groups", [])],
        )
