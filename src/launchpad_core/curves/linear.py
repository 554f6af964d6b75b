from launchpad_core.common.errors import ConfigurationError
from launchpad_core.curves.base import SaleCurve
from launchpad_core.curves.utils.linear_sale_helper import LinearSaleCurveHelper as helper


class LinearSaleCurve(SaleCurve):
    """
        Linear price over the sale allocation, starting at target_funding / sale_allocation
        and ending at exactly twice that once the whole allocation is sold:
          price(s) = initial_price * (1 + s / sale_allocation)

        Orders are priced with a one-step midpoint correction instead of the exact
        integral of price(s). For orders that are small relative to the remaining
        allocation both agree closely; for very large single orders quote() hands out
        fewer units than the integral would. The formula, the fixed-point base and the
        multiply-before-divide order are kept as-is so quotes stay reproducible.
    """

    def __init__(self, sale_allocation: int, target_funding: int):
        super().__init__(sale_allocation, target_funding)
        self._initial_price = helper.initial_price(sale_allocation, target_funding)
        if self._initial_price <= 0:
            raise ConfigurationError(
                f"Target funding {target_funding} is too small for sale allocation {sale_allocation}; "
                "initial price rounds to zero."
            )

    @property
    def initial_price(self) -> int:
        return self._initial_price

    def get_spot_price(self, tokens_sold: int) -> int:
        return helper.price_at(tokens_sold, self._sale_allocation, self._initial_price)

    def quote(self, amount_in: int, tokens_sold: int) -> int:
        if amount_in <= 0:
            return 0
        return helper.quote(amount_in, tokens_sold, self._sale_allocation, self._initial_price)

    def exact_quote(self, amount_in: int, tokens_sold: int) -> int:
        """Units the exact integral of price(s) would give; for comparison only."""
        if amount_in <= 0:
            return 0
        return helper.exact_units(amount_in, tokens_sold, self._sale_allocation, self._initial_price)


def quote(settlement_amount_in: int, tokens_sold: int, sale_allocation: int, target_funding: int) -> int:
    """Stateless form of LinearSaleCurve.quote."""
    return LinearSaleCurve(sale_allocation, target_funding).quote(settlement_amount_in, tokens_sold)
