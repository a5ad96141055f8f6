from __future__ import annotations

from typing import Any, Callable, Dict, List, Mapping, Optional, Sequence, Tuple

from choromap.core.aggregation import DataView
from choromap.core.formats import format_number
from choromap.geo.preprocess import Feature

NumberFormat = Callable[[Any], str]

TOOLTIP_MAX_FEATURES = 3
SWATCH = "\u25a0"


def feature_label(
    feature: Feature,
    view: DataView,
    number_format: NumberFormat = format_number,
    labels_exclude: Optional[Sequence[str]] = None,
) -> str:
    """Formatted sum drawn at the feature's centroid; empty for excluded, missing or zero sums."""
    if labels_exclude and feature.feature_id in labels_exclude:
        return ""

    by_label = view.by_location_label.get(feature.feature_id)
    if not by_label:
        return ""

    total = sum(by_label.values())
    return "" if total == 0 else number_format(total)


def tooltip_title(features: Sequence[Feature]) -> str:
    shown = list(features[:TOOLTIP_MAX_FEATURES])
    ids = ", ".join(f.feature_id for f in shown)
    names = ", ".join(f.name for f in shown)

    more = len(features) - len(shown)
    if more > 0:
        return f"IDs: {ids} (+{more})<br>Names: {names} (+{more})"
    return f"IDs: {ids}<br>Names: {names}"


def combined_by_label(features: Sequence[Feature], view: DataView) -> Dict[str, float]:
    """Per-label sums of the selected group over all `features`."""
    combined: Dict[str, float] = {}
    for feature in features:
        for label, value in view.by_location_label.get(feature.feature_id, {}).items():
            combined[label] = combined.get(label, 0) + value
    return combined


def tooltip_values(
    features: Sequence[Feature],
    view: DataView,
    number_format: NumberFormat = format_number,
    label_colors: Optional[Mapping[str, str]] = None,
) -> str:
    """
    Per-label rows and the sum for `features`. With `label_colors`, each row starts
    with a swatch in its label's colour.
    """
    combined = combined_by_label(features, view)
    if not combined:
        return "<br>No Data"

    lines: List[str] = [""]
    total = 0.0
    for label, value in combined.items():
        if value == 0:
            continue
        total += value
        swatch = ""
        if label_colors and label in label_colors:
            swatch = f'<span style="color:{label_colors[label]}">{SWATCH}</span> '
        lines.append(f"{swatch}{label}: <b>{number_format(value)}</b>")

    lines.append("")
    lines.append(f"Sum: <b>{number_format(total)}</b>")
    return "<br>".join(lines)


def tooltip_html(
    features: Sequence[Feature],
    view: DataView,
    number_format: NumberFormat = format_number,
    label_colors: Optional[Mapping[str, str]] = None,
) -> str:
    return "<br>".join(
        [tooltip_title(features), tooltip_values(features, view, number_format, label_colors)]
    )


def legend_entries(view: DataView, number_format: NumberFormat = format_number) -> List[Tuple[str, Optional[float]]]:
    """
    Legend rows as (text, ratio of max_location). 'No Data' has no ratio;
    '0' and '> 0' both sit at the bottom of the scale.
    """
    maximum = view.max_location or 0
    entries: List[Tuple[str, Optional[float]]] = [
        ("No Data", None),
        ("0", 0.0),
        ("> 0", 0.0),
    ]
    for fraction in (0.25, 0.5, 0.75, 1.0):
        entries.append((number_format(fraction * maximum), fraction if maximum else 0.0))
    return entries


def colorbar_ticks(view: DataView, number_format: NumberFormat = format_number) -> Tuple[List[float], List[str]]:
    """Colour bar tick positions and texts taken from {@link legend_entries}, one tick per value."""
    maximum = view.max_location or 0
    tickvals: List[float] = []
    ticktext: List[str] = []
    for text, ratio in legend_entries(view, number_format):
        if ratio is None:
            continue
        value = ratio * maximum
        if value in tickvals:
            continue
        tickvals.append(value)
        ticktext.append(text)
    return tickvals, ticktext
