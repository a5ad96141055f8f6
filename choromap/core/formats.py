from __future__ import annotations

from typing import Any


def format_number(value: Any) -> str:
    """
    Default number format: thousands separators, at most three decimals,
    no decimals for integral values.
    """
    if value is None:
        return ""

    number = float(value)
    if number.is_integer():
        return f"{int(number):,}"
    return f"{number:,.3f}".rstrip("0").rstrip(".")


def truncate(text: Any, length: int = 20) -> str:
    """Shorten `text` to at most `length` characters, ending in '...' when cut."""
    text = "" if text is None else str(text)
    if len(text) <= length:
        return text
    return text[: max(0, length - 3)] + "..."
