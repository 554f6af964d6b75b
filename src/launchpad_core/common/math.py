from decimal import Decimal, InvalidOperation, ROUND_DOWN, localcontext
from typing import Union

PRECISION = 10 ** 18

# Enough digits for any uint256 amount.
_CONTEXT_PREC = 80


def mul_div(a: int, b: int, denominator: int) -> int:
    """(a * b) // denominator, multiplying first so no precision is lost before the division."""
    if denominator == 0:
        raise ZeroDivisionError("mul_div denominator is zero")
    return (a * b) // denominator


def _to_decimal(value: Union[Decimal, str, int]) -> Decimal:
    if isinstance(value, Decimal):
        return value
    if isinstance(value, int) and not isinstance(value, bool):
        return Decimal(value)
    return Decimal(str(value).strip())


def to_base_units(amount: Union[Decimal, str, int], decimals: int) -> int:
    """
    Converts a human-readable amount (e.g. Decimal("1.5")) into integer base units,
    truncating anything below the smallest unit.
    """
    try:
        amt = _to_decimal(amount)
    except InvalidOperation as exc:
        raise ValueError(f"Invalid amount: {amount}") from exc
    if not amt.is_finite() or amt < 0:
        raise ValueError(f"Amount must be a finite non-negative number, got {amount}")
    # The default 28-digit context would round amounts beyond that many digits.
    with localcontext() as ctx:
        ctx.prec = _CONTEXT_PREC
        return int((amt * Decimal(10) ** int(decimals)).to_integral_value(rounding=ROUND_DOWN))


def from_base_units(amount: int, decimals: int) -> Decimal:
    with localcontext() as ctx:
        ctx.prec = _CONTEXT_PREC
        return Decimal(amount).scaleb(-decimals)
