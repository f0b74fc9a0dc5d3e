import pytest

from src.trading.models import TICK_SIZES
from src.trading.ticks import align_price_to_tick, is_price_on_tick, tick_decimals


@pytest.mark.parametrize(
    "rounding,expected",
    [("nearest", 0.13), ("down", 0.12), ("up", 0.13)],
)
def test_align_respects_rounding(rounding, expected):
    assert align_price_to_tick(0.127, "0.01", rounding) == expected


def test_nearest_rounds_half_up():
    assert align_price_to_tick(0.125, "0.01", "nearest") == 0.13


def test_align_finer_tick():
    assert align_price_to_tick(0.1234, "0.001", "down") == 0.123
    assert align_price_to_tick(0.1234, "0.001", "up") == 0.124
    assert align_price_to_tick(0.55555, "0.0001", "nearest") == 0.5556


@pytest.mark.parametrize("tick_size", TICK_SIZES)
@pytest.mark.parametrize("rounding", ["nearest", "down", "up"])
def test_align_is_idempotent(tick_size, rounding):
    for price in (0.01, 0.127, 0.5, 0.9876):
        once = align_price_to_tick(price, tick_size, rounding)
        assert align_price_to_tick(once, tick_size, rounding) == once


def test_aligned_price_is_on_tick():
    aligned = align_price_to_tick(0.4567, "0.01", "down")
    assert aligned == 0.45
    assert is_price_on_tick(aligned, "0.01")


def test_off_tick_price_detected():
    assert is_price_on_tick(0.12, "0.01")
    assert not is_price_on_tick(0.127, "0.01")


def test_float_noise_still_on_tick():
    assert is_price_on_tick(0.1 + 0.2, "0.1")


def test_unsupported_tick_raises():
    with pytest.raises(ValueError):
        align_price_to_tick(0.5, "0.05")
    with pytest.raises(ValueError):
        tick_decimals("1")


def test_unsupported_rounding_raises():
    with pytest.raises(ValueError):
        align_price_to_tick(0.5, "0.01", "banker")


def test_tick_decimals():
    assert [tick_decimals(t) for t in TICK_SIZES] == [1, 2, 3, 4]


def test_on_tick_check_honours_rounding():
    assert is_price_on_tick(0.1 + 0.2, "0.01", "nearest")
    assert not is_price_on_tick(0.1 + 0.2, "0.01", "up")
    assert not is_price_on_tick(0.57 - 1e-15, "0.01", "down")
