"""Coercion helpers shared by the schema normalizers.

Every helper is total: whatever shape the provider produced, the helper
returns a value of the requested type. Normalizers rely on this to keep
their "never raises" guarantee.
"""
from __future__ import annotations

import math
import re
from typing import Any, Iterable


_NUMERIC_TEXT = re.compile(r"^\s*([-+]?\d+(?:\.\d+)?)\s*%?\s*$")


def as_mapping(value: Any) -> dict[str, Any]:
    """Return ``value`` if it is a JSON object, else an empty dict."""

    return value if isinstance(value, dict) else {}


def _to_float(value: Any) -> float | None:
    """Numeric reading of ``value``; out-of-range magnitudes become +/-inf."""

    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        try:
            return float(value)
        except OverflowError:
            return math.inf if value > 0 else -math.inf
    if isinstance(value, float):
        return None if math.isnan(value) else value
    if isinstance(value, str):
        match = _NUMERIC_TEXT.match(value)
        return float(match.group(1)) if match else None
    return None


def as_number(value: Any) -> float | None:
    """Interpret ``value`` as a finite number.

    Accepts ints, floats and numeric strings such as ``"15"`` or ``"15%"``.
    Booleans are not numbers here, and neither are magnitudes a float
    cannot hold.
    """

    number = _to_float(value)
    return number if number is not None and math.isfinite(number) else None


def clamp(value: float, low: float, high: float) -> float:
    return max(low, min(high, value))


def clamped_number(value: Any, low: float, high: float, default: float) -> float:
    """Clamp a numeric ``value`` into [low, high]; non-numbers give ``default``.

    Magnitudes too large for a float clamp to the nearest bound.
    """

    number = _to_float(value)
    if number is None:
        return default
    return clamp(number, low, high)


def positive_number(value: Any) -> float | None:
    number = as_number(value)
    if number is None or number <= 0:
        return None
    return number


def as_text(value: Any, default: str = "") -> str:
    """Return a stripped, non-empty string or ``default``."""

    if isinstance(value, str):
        text = value.strip()
        return text or default
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        number = as_number(value)
        if number is None:
            return default
        return str(int(number)) if number.is_integer() else str(number)
    return default


def string_list(value: Any) -> list[str]:
    """Keep the non-empty textual items of a JSON array."""

    if not isinstance(value, list):
        return []
    items = []
    for item in value:
        text = as_text(item)
        if text:
            items.append(text)
    return items


def string_list_or(value: Any, default: Iterable[str]) -> list[str]:
    """Textual items of ``value``, or a copy of ``default`` when there are none."""

    items = string_list(value)
    return items if items else list(default)


def round_half_up(value: float) -> int:
    """Round like the client does (0.5 goes up) rather than banker's rounding."""

    return int(math.floor(value + 0.5))
