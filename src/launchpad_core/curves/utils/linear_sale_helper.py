from math import isqrt

from launchpad_core.common.math import PRECISION, mul_div


class LinearSaleCurveHelper:
    """Integer arithmetic shared by LinearSaleCurve, the validator and the web API."""

    @staticmethod
    def initial_price(sale_allocation: int, target_funding: int) -> int:
        """Price of one whole unit before anything is sold, scaled by PRECISION."""
        return mul_div(target_funding, PRECISION, sale_allocation)

    @staticmethod
    def price_at(tokens_sold: int, sale_allocation: int, initial_price: int) -> int:
        """
        price(s) = initial_price * (sale_allocation + s) / sale_allocation
        so the price is exactly twice the initial price once everything is sold.
        """
        return mul_div(initial_price, sale_allocation + tokens_sold, sale_allocation)

    @staticmethod
    def quote(amount_in: int, tokens_sold: int, sale_allocation: int, initial_price: int) -> int:
        """
        Units receivable for 'amount_in' of settlement asset.

        First pass prices the whole order at the current price, then re-prices it at
        the midpoint between the current price and the price the first pass implies:
            units_now = amount_in / price(s)
            avg_price = initial_price * (S + s + units_now / 2) / S
            units_out = amount_in / avg_price
        """
        current_price = LinearSaleCurveHelper.price_at(tokens_sold, sale_allocation, initial_price)
        units_at_current_price = mul_div(amount_in, PRECISION, current_price)
        avg_price = mul_div(initial_price, sale_allocation + tokens_sold + units_at_current_price // 2, sale_allocation)
        return mul_div(amount_in, PRECISION, avg_price)

    @staticmethod
    def exact_units(amount_in: int, tokens_sold: int, sale_allocation: int, initial_price: int) -> int:
        """
        Units the true integral of the linear price would give for 'amount_in':
            cost(d) = initial_price / (S * PRECISION) * ((S + s) * d + d^2 / 2)
        solved for d. Only used to measure how far quote() drifts for large orders.
        """
        base = sale_allocation + tokens_sold
        return isqrt(base * base + 2 * amount_in * sale_allocation * PRECISION // initial_price) - base
