import functools
from dataclasses import replace
from datetime import datetime
from typing import Optional

from loguru import logger

from launchpad_core.assets.access import AccessControl, OwnableAccessControl
from launchpad_core.assets.fungible import InMemoryFungibleAsset, safe_transfer, safe_transfer_from
from launchpad_core.common.address import derive_address, require_address
from launchpad_core.common.enums import SaleState, SettlementSplit
from launchpad_core.common.errors import (
    AllocationExceeded,
    AlreadyFinalized,
    ConfigurationError,
    FundingNotComplete,
    InvalidLiquidityParameters,
    ReentrantCall,
    SaleClosed,
    SlippageExceeded,
    ZeroAmount,
)
from launchpad_core.common.host import Host
from launchpad_core.common.math import PRECISION
from launchpad_core.common.model import Campaign, FinalizeResult, PurchaseResult, SaleParams, Token
from launchpad_core.curves.linear import LinearSaleCurve
from launchpad_core.sale.distributor import DistributionPlan, Distributor
from launchpad_core.venues.base import LiquidityVenueAdapter


def non_reentrant(fn):
    @functools.wraps(fn)
    def wrapper(self, *args, **kwargs):
        if self._locked:
            raise ReentrantCall(fn.__name__)
        self._locked = True
        try:
            return fn(self, *args, **kwargs)
        finally:
            self._locked = False
    return wrapper


class Sale:
    """
        Bonding-curve sale of a fixed-supply asset, ending in a one-shot finalize.

        Lifecycle (one direction only):
          OPEN      - buy() sells units from the sale allocation along the curve
          FUNDED    - the sale allocation is sold out, buy() is closed
          FINALIZED - allocations and proceeds are paid out and liquidity is deployed

        The entire supply is minted to the sale's own address at creation. buy() and
        finalize() run as atomic operations on the host: any failure, including a
        failing transfer or venue deposit, leaves no trace.
    """

    def __init__(
        self,
        host: Host,
        params: SaleParams,
        venue: LiquidityVenueAdapter,
        access_control: Optional[AccessControl] = None,
        **kwargs,
    ):
        if venue is None:
            raise ConfigurationError("A liquidity venue adapter is required.")
        self._host = host
        self._params = params
        self._venue = venue
        self._access = access_control or OwnableAccessControl(params.creator)
        self._platform_fee_account = params.platform_fee_account
        self._settlement = host.asset(params.settlement_asset)
        self._curve = LinearSaleCurve(params.allocation.sale, params.target_funding)
        self._campaign = Campaign(target_funding=params.target_funding, allocation=params.allocation)
        self._locked = False

        self.options = {
            "require_funding_complete": True,
            "settlement_split": SettlementSplit.BALANCE,
            "deadline_horizon": 300,
        }
        for k, v in kwargs.items():
            if k in self.options:
                self.options[k] = v
            else:
                if "custom" not in self.options:
                    self.options["custom"] = {}
                self.options["custom"][k] = v
        if isinstance(self.options["settlement_split"], str):
            self.options["settlement_split"] = SettlementSplit.from_str(self.options["settlement_split"])
        if self.options["deadline_horizon"] <= 0:
            raise ConfigurationError("deadline_horizon must be positive.")

        self.address = derive_address("sale", params.creator, params.name, params.symbol)
        self.token = InMemoryFungibleAsset(
            host,
            Token(name=params.name, symbol=params.symbol, decimals=params.decimals),
            address=derive_address("token", self.address),
        )
        self._distributor = Distributor(host, self.address)
        self.token.mint_once(self.address, params.allocation.total_supply)
        logger.info(
            f"Created sale {params.symbol} at {self.address}: target {params.target_funding}, "
            f"sale allocation {params.allocation.sale}, venue {venue.venue_type}"
        )

    # Read-only views

    @property
    def params(self) -> SaleParams:
        return self._params

    @property
    def campaign(self) -> Campaign:
        """Snapshot of the campaign record; changing it has no effect on the sale."""
        return replace(self._campaign)

    @property
    def settlement(self):
        return self._settlement

    @property
    def platform_fee_account(self) -> str:
        return self._platform_fee_account

    @property
    def state(self) -> SaleState:
        if self._campaign.liquidity_deployed:
            return SaleState.FINALIZED
        if self._campaign.funding_complete:
            return SaleState.FUNDED
        return SaleState.OPEN

    @property
    def total_raised(self) -> int:
        return self._campaign.total_raised

    @property
    def tokens_sold(self) -> int:
        return self._campaign.tokens_sold

    @property
    def funding_complete(self) -> bool:
        return self._campaign.funding_complete

    @property
    def liquidity_deployed(self) -> bool:
        return self._campaign.liquidity_deployed

    @property
    def venue_pool(self) -> Optional[str]:
        return self._campaign.venue_pool

    def initial_price(self) -> int:
        return self._curve.initial_price

    def current_price(self) -> int:
        return self._curve.get_spot_price(self._campaign.tokens_sold)

    def quote(self, amount_in: int) -> int:
        units = self._curve.quote(amount_in, self._campaign.tokens_sold)
        logger.debug(f"Quote {amount_in} -> {units} at {self._campaign.tokens_sold} sold")
        return units

    def remaining_allocation(self) -> int:
        return self._campaign.allocation.sale - self._campaign.tokens_sold

    def get_sale_allocation(self) -> int:
        return self._campaign.allocation.sale

    def get_creator_allocation(self) -> int:
        return self._campaign.allocation.creator

    def get_liquidity_allocation(self) -> int:
        return self._campaign.allocation.liquidity

    def get_platform_fee_allocation(self) -> int:
        return self._campaign.allocation.platform_fee

    # Transitions

    @non_reentrant
    def buy(self, buyer: str, amount_in: int, min_units_out: int = 0) -> PurchaseResult:
        """
        Sells units along the curve for 'amount_in' of settlement asset, which 'buyer'
        must have approved to the sale. Orders that would overshoot the sale allocation
        are rejected whole, so when one base unit of settlement buys several units near
        the end, a remainder smaller than that stays unsold (see SaleValidator).
        Such a sale needs require_funding_complete=False to be finalized.

        :param buyer: paying and receiving account
        :param amount_in: settlement asset offered
        :param min_units_out: reject the order if it would deliver fewer units
        """
        campaign = self._campaign
        if campaign.funding_complete or campaign.liquidity_deployed:
            raise SaleClosed(campaign.tokens_sold, campaign.allocation.sale)
        if amount_in <= 0:
            raise ZeroAmount("amount_in")
        buyer = require_address(buyer, "buyer")

        units_out = self.quote(amount_in)
        if units_out == 0:
            raise ZeroAmount("units_out")
        if campaign.tokens_sold + units_out > campaign.allocation.sale:
            raise AllocationExceeded(campaign.tokens_sold, units_out, campaign.allocation.sale)
        if units_out < min_units_out:
            raise SlippageExceeded(units_out, min_units_out)

        with self._host.atomic("buy"):
            safe_transfer_from(self._settlement, self.address, buyer, self.address, amount_in)
            self._host.set_attr(campaign, "total_raised", campaign.total_raised + amount_in)
            self._host.set_attr(campaign, "tokens_sold", campaign.tokens_sold + units_out)
            safe_transfer(self.token, self.address, buyer, units_out)
            if campaign.tokens_sold >= campaign.allocation.sale:
                self._host.set_attr(campaign, "funding_complete", True)
                logger.info(f"Funding complete for {self._params.symbol}: raised {campaign.total_raised}")

        logger.info(f"{buyer} bought {units_out} {self._params.symbol} for {amount_in}")
        return PurchaseResult(
            buyer=buyer,
            amount_in=amount_in,
            units_out=units_out,
            average_price=amount_in * PRECISION // units_out,
            price_after=self.current_price(),
            tokens_sold=campaign.tokens_sold,
            funding_complete=campaign.funding_complete,
            timestamp=datetime.now(),
        )

    @non_reentrant
    def finalize(self, caller: str) -> FinalizeResult:
        """
        Pays out the creator and platform allocations and the creator's share of the
        proceeds, then deploys the liquidity allocation with the rest of the proceeds
        to the venue. Runs at most once; any failure undoes the whole operation.
        """
        self._access.require(caller, "finalize")
        campaign = self._campaign
        if campaign.liquidity_deployed:
            raise AlreadyFinalized(campaign.venue_pool)
        if self.options["require_funding_complete"] and not campaign.funding_complete:
            raise FundingNotComplete(campaign.tokens_sold, campaign.allocation.sale)

        allocation = campaign.allocation
        with self._host.atomic("finalize"):
            if not campaign.funding_complete:
                # Early finalization closes the sale for good.
                self._host.set_attr(campaign, "funding_complete", True)

            if self.options["settlement_split"] == SettlementSplit.RAISED:
                basis = campaign.total_raised
            else:
                basis = self._settlement.balance_of(self.address)
            creator_settlement, liquidity_settlement = allocation.split_settlement(basis)
            if allocation.liquidity <= 0 or liquidity_settlement <= 0:
                raise InvalidLiquidityParameters(allocation.liquidity, liquidity_settlement)

            self._distributor.distribute(DistributionPlan(
                token=self.token,
                settlement=self._settlement,
                creator=self._params.creator,
                platform_fee_account=self._platform_fee_account,
                creator_tokens=allocation.creator,
                platform_fee_tokens=allocation.platform_fee,
                creator_settlement=creator_settlement,
            ))

            liquidity = self._venue.deploy(
                self.address,
                self.token,
                self._settlement,
                allocation.liquidity,
                liquidity_settlement,
                self._params.creator,
                self._host.timestamp + self.options["deadline_horizon"],
            )
            self._host.set_attr(campaign, "venue_pool", liquidity.pool)
            self._host.set_attr(campaign, "liquidity_deployed", True)

        logger.info(f"Finalized {self._params.symbol}: liquidity deployed to {liquidity.pool}")
        return FinalizeResult(
            creator_tokens=allocation.creator,
            platform_fee_tokens=allocation.platform_fee,
            creator_settlement=creator_settlement,
            liquidity_settlement=liquidity_settlement,
            liquidity=liquidity,
            timestamp=datetime.now(),
        )

    # Admin

    def set_platform_fee_account(self, caller: str, account: str):
        """Redirects the platform fee allocation. Only possible before finalize."""
        self._access.require(caller, "set_platform_fee_account")
        if self._campaign.liquidity_deployed:
            raise AlreadyFinalized(self._campaign.venue_pool)
        self._platform_fee_account = require_address(account, "platform_fee_account")
        logger.info(f"Platform fee account of {self._params.symbol} set to {self._platform_fee_account}")
