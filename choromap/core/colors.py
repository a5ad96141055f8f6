from __future__ import annotations

from typing import Any, Dict, List, Sequence

from plotly.colors import qualitative

from .exceptions import ConfigurationError


def scheme_colors(scheme: Any) -> List[str]:
    """
    Colours of a qualitative scheme.

    :param scheme: a plotly.colors.qualitative name ('Plotly', 'D3', 'Set2', ...) or a list of colours
    :raises ConfigurationError: for an unknown name or an empty list
    """
    if isinstance(scheme, str):
        colors = getattr(qualitative, scheme, None) if not scheme.startswith("_") else None
        if not isinstance(colors, list):
            raise ConfigurationError(f"Unknown color scheme '{scheme}'")
        return list(colors)

    try:
        colors = [str(c) for c in scheme]
    except TypeError as exc:
        raise ConfigurationError(f"'color_scheme' must be a scheme name or a list, got {scheme!r}") from exc
    if not colors:
        raise ConfigurationError("'color_scheme' must name a scheme or list at least one colour")
    return colors


def key_colors(keys: Sequence[str], scheme: Any) -> Dict[str, str]:
    """Colour per key, by the key's position; the scheme repeats once exhausted."""
    colors = scheme_colors(scheme)
    return {key: colors[i % len(colors)] for i, key in enumerate(keys)}
