"""Normalization helpers.

Centralizes defensive parsing of sensor and location payloads.
"""

from __future__ import annotations

import math
from collections.abc import Mapping, Sequence
from typing import Any


def safe_float(value: Any) -> float | None:
    if value is None or value == "" or isinstance(value, bool):
        return None
    try:
        result = float(value)
    except (TypeError, ValueError):
        return None
    if math.isnan(result) or math.isinf(result):
        return None
    return result


def normalize_timestamp_seconds(value: Any) -> float | None:
    """Normalize payload timestamps to epoch seconds.

    - Empty/missing -> None
    - <= 0 -> None
    - Milliseconds (> 1e11) -> seconds
    """

    ts = safe_float(value)
    if ts is None or ts <= 0:
        return None
    if ts > 1e11:
        ts /= 1000.0
    return ts


def unpack_axes(data: Mapping[str, Any]) -> dict[str, Any]:
    """Spread a ``values: [x, y, z]`` array into ``x``/``y``/``z`` keys.

    Explicit ``x``/``y``/``z`` keys win over the array form.
    """

    values = data.get("values")
    if not isinstance(values, Sequence) or isinstance(values, (str, bytes)) or len(values) < 3:
        return dict(data)
    merged = {"x": values[0], "y": values[1], "z": values[2]}
    merged.update({k: v for k, v in data.items() if k != "values"})
    return merged
