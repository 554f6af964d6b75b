import pytest

from math import isqrt

from launchpad_core.venues.math import (
    MAX_SQRT_RATIO,
    MAX_TICK,
    MIN_SQRT_RATIO,
    MIN_TICK,
    Q96,
    amounts_for_liquidity,
    babylonian_sqrt,
    encode_sqrt_price_x96,
    full_range_ticks,
    liquidity_for_amounts,
    sqrt_ratio_at_tick,
)


@pytest.mark.parametrize("x", [0, 1, 2, 3, 4, 15, 16, 17, 10 ** 18, 2 ** 192 + 12345, 5 * 10 ** 41])
def test_babylonian_sqrt_matches_isqrt(x):
    assert babylonian_sqrt(x) == isqrt(x)


def test_babylonian_sqrt_negative():
    with pytest.raises(ValueError):
        babylonian_sqrt(-1)


def test_encode_sqrt_price():
    assert encode_sqrt_price_x96(1, 1) == Q96
    assert encode_sqrt_price_x96(1, 4) == 2 * Q96
    assert encode_sqrt_price_x96(4, 1) == Q96 // 2
    with pytest.raises(ValueError):
        encode_sqrt_price_x96(0, 1)


def test_sqrt_ratio_at_tick_bounds():
    assert sqrt_ratio_at_tick(0) == Q96
    assert sqrt_ratio_at_tick(MIN_TICK) == MIN_SQRT_RATIO
    assert sqrt_ratio_at_tick(MAX_TICK) == MAX_SQRT_RATIO
    assert sqrt_ratio_at_tick(-60) < Q96 < sqrt_ratio_at_tick(60)
    with pytest.raises(ValueError):
        sqrt_ratio_at_tick(MAX_TICK + 1)


@pytest.mark.parametrize("spacing, expected", [
    (1, (-887272, 887272)),
    (10, (-887270, 887270)),
    (60, (-887220, 887220)),
    (200, (-887200, 887200)),
])
def test_full_range_ticks(spacing, expected):
    assert full_range_ticks(spacing) == expected


def test_amounts_never_exceed_what_backs_the_liquidity():
    lower, upper = full_range_ticks(60)
    sqrt_a, sqrt_b = sqrt_ratio_at_tick(lower), sqrt_ratio_at_tick(upper)
    price = encode_sqrt_price_x96(500 * 10 ** 18, 1_000 * 10 ** 18)
    liquidity = liquidity_for_amounts(price, sqrt_a, sqrt_b, 500 * 10 ** 18, 1_000 * 10 ** 18)
    amount0, amount1 = amounts_for_liquidity(price, sqrt_a, sqrt_b, liquidity)
    assert liquidity > 0
    assert 0 < amount0 <= 500 * 10 ** 18
    assert 0 < amount1 <= 1_000 * 10 ** 18


def test_single_sided_outside_range():
    sqrt_a, sqrt_b = sqrt_ratio_at_tick(-600), sqrt_ratio_at_tick(600)
    below = liquidity_for_amounts(sqrt_ratio_at_tick(-1200), sqrt_a, sqrt_b, 10 ** 18, 10 ** 18)
    assert amounts_for_liquidity(sqrt_ratio_at_tick(-1200), sqrt_a, sqrt_b, below)[1] == 0
    above = liquidity_for_amounts(sqrt_ratio_at_tick(1200), sqrt_a, sqrt_b, 10 ** 18, 10 ** 18)
    assert amounts_for_liquidity(sqrt_ratio_at_tick(1200), sqrt_a, sqrt_b, above)[0] == 0
