"""Snap prices onto the CLOB tick grid."""

from __future__ import annotations

from decimal import ROUND_CEILING, ROUND_FLOOR, ROUND_HALF_UP, Decimal

from src.trading.models import TICK_SIZES

# Max distance between a price and its aligned value for it to count as on-tick.
TICK_TOLERANCE = 1e-12

_ROUNDING = {
    "nearest": ROUND_HALF_UP,
    "down": ROUND_FLOOR,
    "up": ROUND_CEILING,
}


def tick_decimals(tick_size: str) -> int:
    """Number of decimal places in a tick literal ("0.001" -> 3)."""
    if tick_size not in TICK_SIZES:
        raise ValueError(f"Unsupported tick size: {tick_size!r}")
    _, _, frac = tick_size.partition(".")
    return len(frac)


def align_price_to_tick(price: float, tick_size: str, rounding: str = "nearest") -> float:
    """Return the multiple of ``tick_size`` closest to ``price`` under ``rounding``.

    Both values are scaled by ``10**decimals`` and the step count is rounded as
    an exact decimal, so the result carries no float drift beyond the tick's
    own precision. A degenerate (non-positive) tick leaves the price as-is.
    """
    try:
        mode = _ROUNDING[rounding]
    except KeyError:
        raise ValueError(f"Unsupported tick rounding: {rounding!r}") from None

    factor = Decimal(10) ** tick_decimals(tick_size)
    tick_units = Decimal(tick_size) * factor
    if tick_units <= 0:
        return price

    price_units = Decimal(str(price)) * factor
    steps = (price_units / tick_units).to_integral_value(rounding=mode)
    return float(steps * tick_units / factor)


def is_price_on_tick(price: float, tick_size: str, rounding: str = "nearest") -> bool:
    """True when aligning under ``rounding`` leaves the price where it is."""
    aligned = align_price_to_tick(price, tick_size, rounding)
    return abs(aligned - price) <= TICK_TOLERANCE
