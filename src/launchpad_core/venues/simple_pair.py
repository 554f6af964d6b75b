from loguru import logger

from launchpad_core.assets.fungible import FungibleAsset, safe_approve
from launchpad_core.common.host import Host
from launchpad_core.common.model import LiquidityResult, VenueConfig
from launchpad_core.venues.base import LiquidityVenueAdapter
from launchpad_core.venues.memory.pair import PairRouter


def slippage_min(amount: int, slippage_bps: int) -> int:
    bps = max(0, min(10_000, int(slippage_bps)))
    return max(0, (int(amount) * (10_000 - bps)) // 10_000)


class SimplePairAdapter(LiquidityVenueAdapter):
    """
    Two-sided pool venue. Finds or creates the pair, then deposits both sides
    through the router with minimums of (1 - slippage) of the desired amounts.
    Pool shares go to the recipient, never to the sale.
    """

    def __init__(self, host: Host, config: VenueConfig, router: PairRouter):
        super().__init__(host, config)
        self.router = router

    def _deploy(self, payer, token: FungibleAsset, settlement: FungibleAsset, token_amount, settlement_amount,
                recipient, deadline) -> LiquidityResult:
        asset0, asset1, amount0, amount1 = self.order(token, settlement, token_amount, settlement_amount)

        factory = self.router.factory
        pair = factory.get_pair(asset0.address, asset1.address)
        if pair is None:
            pair = factory.create_pair(asset0.address, asset1.address)
        else:
            logger.debug(f"Reusing pair {pair} for {asset0.address}/{asset1.address}")

        safe_approve(asset0, payer, self.router.address, amount0)
        safe_approve(asset1, payer, self.router.address, amount1)
        used0, used1, liquidity = self.router.add_liquidity(
            payer,
            asset0.address,
            asset1.address,
            amount0,
            amount1,
            slippage_min(amount0, self.config.slippage_bps),
            slippage_min(amount1, self.config.slippage_bps),
            recipient,
            deadline,
        )
        safe_approve(asset0, payer, self.router.address, 0)
        safe_approve(asset1, payer, self.router.address, 0)

        token_used, settlement_used = (used0, used1) if asset0 is token else (used1, used0)
        return LiquidityResult(
            pool=pair,
            liquidity=liquidity,
            token_used=token_used,
            settlement_used=settlement_used,
        )
