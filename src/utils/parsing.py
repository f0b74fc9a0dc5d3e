"""Pure parsing and conversion utilities shared by the CLOB and REST layers."""

from __future__ import annotations

import json
import math
from typing import Any, Optional


def parse_json_list(value: Any) -> list[Any]:
    if isinstance(value, list):
        return value
    if isinstance(value, str):
        try:
            decoded = json.loads(value)
            return decoded if isinstance(decoded, list) else []
        except json.JSONDecodeError:
            return []
    return []


def _to_float(value: Any, default: float = 0.0) -> float:
    try:
        return float(value)
    except (TypeError, ValueError):
        return default


def _get_field(raw: Any, name: str) -> Any:
    """Read ``name`` from a mapping or an attribute object, ``None`` if absent."""
    if raw is None:
        return None
    if isinstance(raw, dict):
        return raw.get(name)
    return getattr(raw, name, None)


def first_field(raw: Any, names: tuple[str, ...]) -> Any:
    """Return the first non-empty value among ``names``, in order."""
    for name in names:
        value = _get_field(raw, name)
        if value is not None and value != "":
            return value
    return None


def parse_probability(value: Any) -> Optional[float]:
    """Parse a price that must lie strictly inside (0, 1)."""
    price = _to_float(value, default=math.nan)
    if math.isnan(price) or price <= 0 or price >= 1:
        return None
    return price
