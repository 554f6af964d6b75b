from abc import ABC, abstractmethod

from launchpad_core.common.errors import ConfigurationError


class SaleCurve(ABC):
    """Abstract base class for the pricing of a bounded primary sale."""
    def __init__(self, sale_allocation: int, target_funding: int):
        """
        :param sale_allocation: int - units (base units) available for purchase
        :param target_funding: int - settlement amount the sale is denominated against
        """
        if sale_allocation <= 0:
            raise ConfigurationError("Sale allocation must be greater than zero.")
        if target_funding <= 0:
            raise ConfigurationError("Target funding must be greater than zero.")
        self._sale_allocation = sale_allocation
        self._target_funding = target_funding

    @property
    def sale_allocation(self) -> int:
        return self._sale_allocation

    @property
    def target_funding(self) -> int:
        return self._target_funding

    @abstractmethod
    def get_spot_price(self, tokens_sold: int) -> int:
        """
        Returns the price of one whole unit once 'tokens_sold' units are gone, scaled by PRECISION.

        :param tokens_sold: int - cumulative units sold.
        :return: int: the price at that point.
        """
        pass

    @abstractmethod
    def quote(self, amount_in: int, tokens_sold: int) -> int:
        """
        Returns how many units 'amount_in' of settlement asset buys when 'tokens_sold' units are already gone.
        Must be a pure function of its inputs and the curve's construction parameters.

        :param amount_in: int - settlement asset offered.
        :param tokens_sold: int - cumulative units sold before this order.
        :return: units receivable.
        """
        pass
