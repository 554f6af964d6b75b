from loguru import logger

from launchpad_core.assets.fungible import FungibleAsset, safe_transfer
from launchpad_core.common.host import Host
from launchpad_core.common.model import LiquidityResult, VenueConfig
from launchpad_core.venues.base import LiquidityVenueAdapter
from launchpad_core.venues.math import (
    encode_sqrt_price_x96,
    full_range_ticks,
    liquidity_for_amounts,
    sqrt_ratio_at_tick,
)
from launchpad_core.venues.memory.pool_manager import PoolKey, PoolManager


class SingletonSettlementAdapter(LiquidityVenueAdapter):
    """
    Singleton pool-manager venue. The pool is keyed by the sorted currency pair,
    fee and tick spacing. Liquidity is added by a signed delta inside an unlock
    session and each side's debt is paid by transferring it to the manager.
    The payer settles; the position is recorded under the recipient.
    """

    def __init__(self, host: Host, config: VenueConfig, pool_manager: PoolManager):
        super().__init__(host, config)
        self.pool_manager = pool_manager

    def _deploy(self, payer, token: FungibleAsset, settlement: FungibleAsset, token_amount, settlement_amount,
                recipient, deadline) -> LiquidityResult:
        asset0, asset1, amount0, amount1 = self.order(token, settlement, token_amount, settlement_amount)
        key = PoolKey(asset0.address, asset1.address, self.config.fee, self.config.tick_spacing)
        manager = self.pool_manager

        if not manager.is_initialized(key):
            manager.initialize(key, encode_sqrt_price_x96(amount0, amount1))
        sqrt_price = manager.pool(key).sqrt_price_x96

        tick_lower, tick_upper = full_range_ticks(key.tick_spacing)
        liquidity = liquidity_for_amounts(
            sqrt_price, sqrt_ratio_at_tick(tick_lower), sqrt_ratio_at_tick(tick_upper), amount0, amount1
        )
        if liquidity <= 0:
            return LiquidityResult(pool=key.pool_id, liquidity=0, token_used=0, settlement_used=0)

        def add_and_settle(pm: PoolManager):
            delta0, delta1 = pm.modify_liquidity(key, tick_lower, tick_upper, liquidity, owner=recipient)
            paid = []
            for asset, delta in ((asset0, delta0), (asset1, delta1)):
                owed = -delta if delta < 0 else 0
                if owed:
                    pm.sync(asset.address)
                    safe_transfer(asset, payer, pm.address, owed)
                    pm.settle()
                    logger.debug(f"Settled {owed} {asset.address} with pool manager")
                paid.append(owed)
            return paid

        used0, used1 = manager.unlock(payer, add_and_settle)
        token_used, settlement_used = (used0, used1) if asset0 is token else (used1, used0)
        return LiquidityResult(
            pool=key.pool_id,
            liquidity=liquidity,
            token_used=token_used,
            settlement_used=settlement_used,
        )
