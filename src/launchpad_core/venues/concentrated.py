from loguru import logger

from launchpad_core.assets.fungible import FungibleAsset, safe_approve
from launchpad_core.common.host import Host
from launchpad_core.common.model import LiquidityResult, VenueConfig
from launchpad_core.venues.base import LiquidityVenueAdapter
from launchpad_core.venues.math import encode_sqrt_price_x96, full_range_ticks
from launchpad_core.venues.memory.concentrated import PositionManager


class ConcentratedPositionAdapter(LiquidityVenueAdapter):
    """
    Concentrated-liquidity venue. Finds or creates the pool at the configured fee
    tier, initializes a fresh pool at the price implied by the deposit, then mints
    a full-range position for the recipient.
    """

    def __init__(self, host: Host, config: VenueConfig, position_manager: PositionManager):
        super().__init__(host, config)
        self.position_manager = position_manager

    def _deploy(self, payer, token: FungibleAsset, settlement: FungibleAsset, token_amount, settlement_amount,
                recipient, deadline) -> LiquidityResult:
        asset0, asset1, amount0, amount1 = self.order(token, settlement, token_amount, settlement_amount)
        fee = self.config.fee

        factory = self.position_manager.factory
        pool_address = factory.get_pool(asset0.address, asset1.address, fee)
        if pool_address is None:
            pool_address = factory.create_pool(asset0.address, asset1.address, fee)
        pool = factory.pool(pool_address)
        if not pool.initialized:
            pool.initialize(encode_sqrt_price_x96(amount0, amount1))
        else:
            logger.debug(f"Pool {pool_address} already trades at sqrtPriceX96={pool.sqrt_price_x96}")

        tick_lower, tick_upper = full_range_ticks(pool.tick_spacing)
        safe_approve(asset0, payer, self.position_manager.address, amount0)
        safe_approve(asset1, payer, self.position_manager.address, amount1)
        position_id, liquidity, used0, used1 = self.position_manager.mint(
            payer,
            asset0.address,
            asset1.address,
            fee,
            tick_lower,
            tick_upper,
            amount0,
            amount1,
            0,
            0,
            recipient,
            deadline,
        )
        safe_approve(asset0, payer, self.position_manager.address, 0)
        safe_approve(asset1, payer, self.position_manager.address, 0)

        token_used, settlement_used = (used0, used1) if asset0 is token else (used1, used0)
        return LiquidityResult(
            pool=pool_address,
            liquidity=liquidity,
            token_used=token_used,
            settlement_used=settlement_used,
            position_id=position_id,
        )
