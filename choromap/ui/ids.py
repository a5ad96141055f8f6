from __future__ import annotations

__all__ = ["IDs", "chart_id"]


class IDs:
    class Chart:
        # Pattern-matching component types, one component per chart index
        GRAPH = "map-graph"
        GROUP_SELECT = "map-group-select"
        CLEAR_BTN = "map-clear-btn"

    class Control:
        SELECTION_SUMMARY = "selection-summary"


def chart_id(kind: str, index: int) -> dict:
    return {"type": kind, "index": index}
