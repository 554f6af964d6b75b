from decimal import Decimal
from typing import Iterable, Optional

from loguru import logger

from launchpad_core.assets.fungible import InMemoryFungibleAsset
from launchpad_core.common.address import derive_address
from launchpad_core.common.enums import VenueType
from launchpad_core.common.errors import SaleStateError, SaleValidationError
from launchpad_core.common.host import Host
from launchpad_core.common.model import SaleParams, SimulationResult, Token, VenueConfig
from launchpad_core.sale.sale import Sale
from launchpad_core.venues.factory import build_reference_adapter


def simulate_purchases(
    params: SaleParams,
    amounts: Iterable[int],
    venue_config: Optional[VenueConfig] = None,
    **options,
) -> SimulationResult:
    """
    Replays a sequence of buys against a fresh in-memory sale. Each amount is
    bought by its own account. Orders the sale rejects are skipped and listed in
    metadata["rejected"] as (index, amount, reason).
    """
    host = Host()
    settlement = InMemoryFungibleAsset(host, Token(name="Settlement", symbol="USD"), address=params.settlement_asset)
    config = venue_config or VenueConfig(VenueType.SIMPLE_PAIR)
    sale = Sale(host, params, build_reference_adapter(host, config), **options)

    result = SimulationResult()
    rejected = []
    for i, amount in enumerate(amounts):
        buyer = derive_address("simulated-buyer", i)
        settlement.mint(buyer, amount)
        settlement.approve(buyer, sale.address, amount)
        try:
            result.transactions.append(sale.buy(buyer, amount))
        except (SaleValidationError, SaleStateError) as e:
            logger.debug(f"Simulated order {i} of {amount} rejected: {e}")
            rejected.append((i, amount, type(e).__name__))

    total_in = sum(t.amount_in for t in result.transactions)
    total_units = sum(t.units_out for t in result.transactions)
    result.final_tokens_sold = sale.tokens_sold
    result.final_price = sale.current_price()
    if total_units:
        result.average_purchase_price = Decimal(total_in) / Decimal(total_units)
    result.metadata = {
        "total_raised": sale.total_raised,
        "funding_complete": sale.funding_complete,
        "remaining_allocation": sale.remaining_allocation(),
        "rejected": rejected,
    }
    return result
