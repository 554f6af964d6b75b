"""In-memory concentrated-liquidity venue: pools per (pair, fee tier) and a position manager."""
from dataclasses import dataclass
from typing import Dict, Optional, Tuple

from eth_utils import to_checksum_address
from loguru import logger

from launchpad_core.assets.fungible import safe_transfer_from
from launchpad_core.common.address import derive_address, sort_assets
from launchpad_core.common.errors import (
    DeadlineExpired,
    InsufficientLiquidityMinted,
    PoolAlreadyInitialized,
    VenueError,
)
from launchpad_core.common.host import Host
from launchpad_core.common.model import TICK_SPACING
from launchpad_core.venues.math import (
    MAX_SQRT_RATIO,
    MAX_TICK,
    MIN_SQRT_RATIO,
    MIN_TICK,
    amounts_for_liquidity,
    liquidity_for_amounts,
    sqrt_ratio_at_tick,
)


class ConcentratedPool:
    def __init__(self, host: Host, address: str, token0: str, token1: str, fee: int, tick_spacing: int):
        self._host = host
        self.address = address
        self.token0 = token0
        self.token1 = token1
        self.fee = fee
        self.tick_spacing = tick_spacing
        self.sqrt_price_x96 = 0
        self.liquidity = 0

    @property
    def initialized(self) -> bool:
        return self.sqrt_price_x96 != 0

    def initialize(self, sqrt_price_x96: int):
        if self.initialized:
            raise PoolAlreadyInitialized(self.address)
        if not MIN_SQRT_RATIO <= sqrt_price_x96 < MAX_SQRT_RATIO:
            raise VenueError(f"Pool {self.address}: sqrt price {sqrt_price_x96} out of range")
        self._host.set_attr(self, "sqrt_price_x96", sqrt_price_x96)
        logger.info(f"Initialized pool {self.address} at sqrtPriceX96={sqrt_price_x96}")


class ConcentratedPoolFactory:
    def __init__(self, host: Host):
        self._host = host
        self.address = derive_address("concentrated-factory", id(self))
        self.fee_amount_tick_spacing: Dict[int, int] = dict(TICK_SPACING)
        self._pools: Dict[Tuple[str, str, int], ConcentratedPool] = {}

    def get_pool(self, token_a: str, token_b: str, fee: int) -> Optional[str]:
        pool = self._pools.get((*sort_assets(token_a, token_b), fee))
        return pool.address if pool else None

    def pool(self, address: str) -> ConcentratedPool:
        for pool in self._pools.values():
            if pool.address == address:
                return pool
        raise VenueError(f"Unknown pool {address}")

    def create_pool(self, token_a: str, token_b: str, fee: int) -> str:
        token0, token1 = sort_assets(token_a, token_b)
        spacing = self.fee_amount_tick_spacing.get(fee)
        if spacing is None:
            raise VenueError(f"Fee tier {fee} is not enabled")
        key = (token0, token1, fee)
        if key in self._pools:
            raise VenueError(f"Pool for {key} already exists")
        pool = ConcentratedPool(self._host, derive_address(self.address, *key), token0, token1, fee, spacing)
        self._pools[key] = pool
        self._host.record(lambda: self._pools.pop(key, None))
        logger.info(f"Created pool {pool.address} for {token0}/{token1} fee={fee}")
        return pool.address


@dataclass
class Position:
    owner: str
    pool: str
    tick_lower: int
    tick_upper: int
    liquidity: int


class PositionManager:
    def __init__(self, host: Host, factory: ConcentratedPoolFactory):
        self._host = host
        self.factory = factory
        self.address = derive_address("position-manager", factory.address)
        self.positions: Dict[int, Position] = {}
        self.next_id = 1

    def mint(
        self,
        caller: str,
        token0: str,
        token1: str,
        fee: int,
        tick_lower: int,
        tick_upper: int,
        amount0_desired: int,
        amount1_desired: int,
        amount0_min: int,
        amount1_min: int,
        recipient: str,
        deadline: int,
    ) -> Tuple[int, int, int, int]:
        """
        Opens a position funded by 'caller' (who must have approved this manager).
        Returns (position_id, liquidity, amount0, amount1).
        """
        if self._host.timestamp > deadline:
            raise DeadlineExpired(deadline, self._host.timestamp)
        token0 = to_checksum_address(token0)
        token1 = to_checksum_address(token1)
        if int(token0, 16) >= int(token1, 16):
            raise VenueError("token0 must sort before token1")

        pool_address = self.factory.get_pool(token0, token1, fee)
        if pool_address is None:
            raise VenueError(f"No pool for {token0}/{token1} fee={fee}")
        pool = self.factory.pool(pool_address)
        if not pool.initialized:
            raise VenueError(f"Pool {pool.address} is not initialized")
        if tick_lower >= tick_upper or tick_lower < MIN_TICK or tick_upper > MAX_TICK:
            raise VenueError(f"Invalid tick range [{tick_lower}, {tick_upper}]")
        if tick_lower % pool.tick_spacing or tick_upper % pool.tick_spacing:
            raise VenueError(f"Ticks must be multiples of {pool.tick_spacing}")

        sqrt_a = sqrt_ratio_at_tick(tick_lower)
        sqrt_b = sqrt_ratio_at_tick(tick_upper)
        liquidity = liquidity_for_amounts(pool.sqrt_price_x96, sqrt_a, sqrt_b, amount0_desired, amount1_desired)
        if liquidity <= 0:
            raise InsufficientLiquidityMinted(pool.address, amount0_desired, amount1_desired)
        amount0, amount1 = amounts_for_liquidity(pool.sqrt_price_x96, sqrt_a, sqrt_b, liquidity)
        if amount0 < amount0_min or amount1 < amount1_min:
            raise VenueError("Price slippage check")

        if amount0 > 0:
            safe_transfer_from(self._host.asset(token0), self.address, caller, pool.address, amount0)
        if amount1 > 0:
            safe_transfer_from(self._host.asset(token1), self.address, caller, pool.address, amount1)
        self._host.set_attr(pool, "liquidity", pool.liquidity + liquidity)

        position_id = self.next_id
        self._host.set_attr(self, "next_id", position_id + 1)
        self.positions[position_id] = Position(recipient, pool.address, tick_lower, tick_upper, liquidity)
        self._host.record(lambda: self.positions.pop(position_id, None))
        return position_id, liquidity, amount0, amount1
