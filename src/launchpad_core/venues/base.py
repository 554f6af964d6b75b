from abc import ABC, abstractmethod
from typing import Tuple

from loguru import logger

from launchpad_core.assets.fungible import FungibleAsset, safe_transfer
from launchpad_core.common.address import sort_assets
from launchpad_core.common.errors import (
    DeadlineExpired,
    InsufficientLiquidityMinted,
    InvalidLiquidityParameters,
    LiquidityAddingFailed,
)
from launchpad_core.common.host import Host
from launchpad_core.common.model import LiquidityResult, VenueConfig


class LiquidityVenueAdapter(ABC):
    """
    Turns (token_amount, settlement_amount) held by the sale into a funded,
    price-initialized pool on an external venue.

    Shared rules, whatever the venue:
      - both sides must be above zero (InvalidLiquidityParameters)
      - assets are sorted before any pool key is built
      - a partial deposit is fine; what the venue did not take goes to the recipient
      - zero liquidity is fatal (LiquidityAddingFailed), whether the venue reports
        it as a zero result or refuses the mint itself
    """

    def __init__(self, host: Host, config: VenueConfig):
        self._host = host
        self.config = config

    @property
    def venue_type(self):
        return self.config.venue_type

    @staticmethod
    def order(token: FungibleAsset, settlement: FungibleAsset, token_amount: int, settlement_amount: int
              ) -> Tuple[FungibleAsset, FungibleAsset, int, int]:
        """Returns (asset0, asset1, amount0, amount1) in the venue's canonical order."""
        first, _ = sort_assets(token.address, settlement.address)
        if first == token.address:
            return token, settlement, token_amount, settlement_amount
        return settlement, token, settlement_amount, token_amount

    def deploy(
        self,
        payer: str,
        token: FungibleAsset,
        settlement: FungibleAsset,
        token_amount: int,
        settlement_amount: int,
        recipient: str,
        deadline: int,
    ) -> LiquidityResult:
        """
        Deposits liquidity on behalf of 'payer' (the sale's custody account).

        :param payer: account holding both amounts
        :param recipient: receives pool shares or positions and any unconsumed remainder
        :param deadline: timestamp after which the deposit must not happen
        """
        if token_amount <= 0 or settlement_amount <= 0:
            raise InvalidLiquidityParameters(token_amount, settlement_amount)
        if self._host.timestamp > deadline:
            raise DeadlineExpired(deadline, self._host.timestamp)

        with self._host.atomic(f"{self.venue_type} deploy"):
            try:
                result = self._deploy(payer, token, settlement, token_amount, settlement_amount, recipient, deadline)
            except InsufficientLiquidityMinted as e:
                raise LiquidityAddingFailed(e.pool, token_amount, settlement_amount) from e
            if result.liquidity <= 0:
                raise LiquidityAddingFailed(result.pool, token_amount, settlement_amount)

            result.token_refunded = self._refund(token, payer, recipient, token_amount - result.token_used)
            result.settlement_refunded = self._refund(
                settlement, payer, recipient, settlement_amount - result.settlement_used
            )
        logger.info(
            f"{self.venue_type}: added liquidity {result.liquidity} to {result.pool} "
            f"(token {result.token_used}/{token_amount}, settlement {result.settlement_used}/{settlement_amount})"
        )
        return result

    @staticmethod
    def _refund(asset: FungibleAsset, payer: str, recipient: str, amount: int) -> int:
        if amount <= 0:
            return 0
        safe_transfer(asset, payer, recipient, amount)
        return amount

    @abstractmethod
    def _deploy(
        self,
        payer: str,
        token: FungibleAsset,
        settlement: FungibleAsset,
        token_amount: int,
        settlement_amount: int,
        recipient: str,
        deadline: int,
    ) -> LiquidityResult:
        """
        Venue-specific discovery, initialization and deposit. Must report what was
        actually consumed; refunds and the zero-liquidity check are handled by deploy().
        """
        pass
