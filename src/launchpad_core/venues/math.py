"""
Integer Q64.96 helpers for concentrated-liquidity venues.

Prices are stored as sqrt(price) * 2**96 where price = amount1 / amount0 in the
sorted (token0, token1) order. Everything here is exact integer math; results
round down.
"""
from typing import Tuple

Q96 = 1 << 96
Q192 = 1 << 192
MIN_TICK = -887272
MAX_TICK = 887272
MIN_SQRT_RATIO = 4295128739
MAX_SQRT_RATIO = 1461446703485210103287273052203988822378723970342


def babylonian_sqrt(x: int) -> int:
    """
    floor(sqrt(x)) by Newton's iteration. Exact for perfect squares.
    """
    if x < 0:
        raise ValueError("square root of a negative number")
    if x > 3:
        y = x
        z = x // 2 + 1
        while z < y:
            y = z
            z = (x // z + z) // 2
        return y
    if x != 0:
        return 1
    return 0


def encode_sqrt_price_x96(amount0: int, amount1: int) -> int:
    """Starting sqrt price for a pool that should trade at amount1 / amount0."""
    if amount0 <= 0 or amount1 <= 0:
        raise ValueError("both amounts must be positive to derive a price")
    return babylonian_sqrt((amount1 << 192) // amount0)


def sqrt_ratio_at_tick(tick: int) -> int:
    if tick < MIN_TICK or tick > MAX_TICK:
        raise ValueError(f"tick {tick} out of range [{MIN_TICK}, {MAX_TICK}]")

    abs_tick = tick if tick >= 0 else -tick
    ratio = 0xFFFCB933BD6FAD37AA2D162D1A594001 if abs_tick & 0x1 else 0x100000000000000000000000000000000

    if abs_tick & 0x2:
        ratio = (ratio * 0xFFF97272373D413259A46990580E213A) >> 128
    if abs_tick & 0x4:
        ratio = (ratio * 0xFFF2E50F5F656932EF12357CF3C7FDCC) >> 128
    if abs_tick & 0x8:
        ratio = (ratio * 0xFFE5CACA7E10E4E61C3624EAA0941CD0) >> 128
    if abs_tick & 0x10:
        ratio = (ratio * 0xFFCB9843D60F6159C9DB58835C926644) >> 128
    if abs_tick & 0x20:
        ratio = (ratio * 0xFF973B41FA98C081472E6896DFB254C0) >> 128
    if abs_tick & 0x40:
        ratio = (ratio * 0xFF2EA16466C96A3843EC78B326B52861) >> 128
    if abs_tick & 0x80:
        ratio = (ratio * 0xFE5DEE046A99A2A811C461F1969C3053) >> 128
    if abs_tick & 0x100:
        ratio = (ratio * 0xFCBE86C7900A88AEDCFFC83B479AA3A4) >> 128
    if abs_tick & 0x200:
        ratio = (ratio * 0xF987A7253AC413176F2B074CF7815E54) >> 128
    if abs_tick & 0x400:
        ratio = (ratio * 0xF3392B0822B70005940C7A398E4B70F3) >> 128
    if abs_tick & 0x800:
        ratio = (ratio * 0xE7159475A2C29B7443B29C7FA6E889D9) >> 128
    if abs_tick & 0x1000:
        ratio = (ratio * 0xD097F3BDFD2022B8845AD8F792AA5825) >> 128
    if abs_tick & 0x2000:
        ratio = (ratio * 0xA9F746462D870FDF8A65DC1F90E061E5) >> 128
    if abs_tick & 0x4000:
        ratio = (ratio * 0x70D869A156D2A1B890BB3DF62BAF32F7) >> 128
    if abs_tick & 0x8000:
        ratio = (ratio * 0x31BE135F97D08FD981231505542FCFA6) >> 128
    if abs_tick & 0x10000:
        ratio = (ratio * 0x9AA508B5B7A84E1C677DE54F3E99BC9) >> 128
    if abs_tick & 0x20000:
        ratio = (ratio * 0x5D6AF8DEDB81196699C329225EE604) >> 128
    if abs_tick & 0x40000:
        ratio = (ratio * 0x2216E584F5FA1EA926041BEDFE98) >> 128
    if abs_tick & 0x80000:
        ratio = (ratio * 0x48A170391F7DC42444E8FA2) >> 128

    if tick > 0:
        ratio = ((1 << 256) - 1) // ratio

    # Q128.128 -> Q64.96, rounding up.
    return (ratio >> 32) + (1 if ratio % (1 << 32) else 0)


def full_range_ticks(tick_spacing: int) -> Tuple[int, int]:
    """Widest usable (tick_lower, tick_upper) for the given spacing."""
    if tick_spacing <= 0:
        raise ValueError("tick spacing must be positive")
    upper = (MAX_TICK // tick_spacing) * tick_spacing
    return -upper, upper


def _sorted(sqrt_a: int, sqrt_b: int) -> Tuple[int, int]:
    return (sqrt_a, sqrt_b) if sqrt_a <= sqrt_b else (sqrt_b, sqrt_a)


def liquidity_for_amount0(sqrt_a: int, sqrt_b: int, amount0: int) -> int:
    a, b = _sorted(sqrt_a, sqrt_b)
    intermediate = a * b // Q96
    return amount0 * intermediate // (b - a)


def liquidity_for_amount1(sqrt_a: int, sqrt_b: int, amount1: int) -> int:
    a, b = _sorted(sqrt_a, sqrt_b)
    return amount1 * Q96 // (b - a)


def liquidity_for_amounts(sqrt_price: int, sqrt_a: int, sqrt_b: int, amount0: int, amount1: int) -> int:
    """Largest liquidity the two amounts can back at 'sqrt_price' within [sqrt_a, sqrt_b]."""
    a, b = _sorted(sqrt_a, sqrt_b)
    if sqrt_price <= a:
        return liquidity_for_amount0(a, b, amount0)
    if sqrt_price >= b:
        return liquidity_for_amount1(a, b, amount1)
    return min(
        liquidity_for_amount0(sqrt_price, b, amount0),
        liquidity_for_amount1(a, sqrt_price, amount1),
    )


def amount0_for_liquidity(sqrt_a: int, sqrt_b: int, liquidity: int) -> int:
    a, b = _sorted(sqrt_a, sqrt_b)
    return ((liquidity << 96) * (b - a) // b) // a


def amount1_for_liquidity(sqrt_a: int, sqrt_b: int, liquidity: int) -> int:
    a, b = _sorted(sqrt_a, sqrt_b)
    return liquidity * (b - a) // Q96


def amounts_for_liquidity(sqrt_price: int, sqrt_a: int, sqrt_b: int, liquidity: int) -> Tuple[int, int]:
    a, b = _sorted(sqrt_a, sqrt_b)
    if sqrt_price <= a:
        return amount0_for_liquidity(a, b, liquidity), 0
    if sqrt_price < b:
        return amount0_for_liquidity(sqrt_price, b, liquidity), amount1_for_liquidity(a, sqrt_price, liquidity)
    return 0, amount1_for_liquidity(a, b, liquidity)
