"""
In-memory singleton pool manager.

Every pool lives inside one manager and is addressed by its PoolKey. Liquidity
changes happen inside an unlock() session: modify_liquidity() only books
per-currency debts, the caller pays them with sync() + transfer + settle(), and
the session fails unless every debt is cleared before it ends.
"""
from dataclasses import dataclass
from typing import Callable, Dict, Optional, Tuple

from eth_utils import keccak, to_checksum_address
from loguru import logger

from launchpad_core.assets.fungible import safe_transfer
from launchpad_core.common.address import ZERO_ADDRESS, derive_address
from launchpad_core.common.errors import CurrencyNotSettled, PoolAlreadyInitialized, VenueError
from launchpad_core.common.host import Host
from launchpad_core.venues.math import (
    MAX_SQRT_RATIO,
    MAX_TICK,
    MIN_SQRT_RATIO,
    MIN_TICK,
    amounts_for_liquidity,
    sqrt_ratio_at_tick,
)


@dataclass(frozen=True)
class PoolKey:
    currency0: str
    currency1: str
    fee: int
    tick_spacing: int
    hooks: str = ZERO_ADDRESS

    def __post_init__(self):
        if int(self.currency0, 16) >= int(self.currency1, 16):
            raise VenueError("PoolKey currencies must be sorted and distinct")

    @property
    def pool_id(self) -> str:
        encoded = f"{self.currency0}|{self.currency1}|{self.fee}|{self.tick_spacing}|{self.hooks}".encode()
        return "0x" + keccak(encoded).hex()


@dataclass
class PoolState:
    sqrt_price_x96: int
    liquidity: int = 0


class PoolManager:
    def __init__(self, host: Host):
        self._host = host
        self.address = derive_address("pool-manager", id(self))
        self.pools: Dict[str, PoolState] = {}
        self.positions: Dict[Tuple[str, str, int, int], int] = {}
        self._locker: Optional[str] = None
        self._deltas: Dict[str, int] = {}
        self._synced: Optional[Tuple[str, int]] = None

    def is_initialized(self, key: PoolKey) -> bool:
        return key.pool_id in self.pools

    def pool(self, key: PoolKey) -> PoolState:
        state = self.pools.get(key.pool_id)
        if state is None:
            raise VenueError(f"Pool {key.pool_id} is not initialized")
        return state

    def initialize(self, key: PoolKey, sqrt_price_x96: int) -> str:
        pool_id = key.pool_id
        if pool_id in self.pools:
            raise PoolAlreadyInitialized(pool_id)
        if not MIN_SQRT_RATIO <= sqrt_price_x96 < MAX_SQRT_RATIO:
            raise VenueError(f"sqrt price {sqrt_price_x96} out of range")
        self.pools[pool_id] = PoolState(sqrt_price_x96)
        self._host.record(lambda: self.pools.pop(pool_id, None))
        logger.info(f"Initialized pool {pool_id} at sqrtPriceX96={sqrt_price_x96}")
        return pool_id

    def unlock(self, caller: str, callback: Callable[["PoolManager"], object]):
        if self._locker is not None:
            raise VenueError("Pool manager is already unlocked")
        self._locker = to_checksum_address(caller)
        self._deltas = {}
        try:
            result = callback(self)
            for currency, delta in self._deltas.items():
                if delta != 0:
                    raise CurrencyNotSettled(currency, -delta)
            return result
        finally:
            self._locker = None
            self._deltas = {}
            self._synced = None

    def _require_unlocked(self):
        if self._locker is None:
            raise VenueError("Pool manager must be unlocked first")

    def _account(self, currency: str, delta: int):
        self._deltas[currency] = self._deltas.get(currency, 0) + delta

    def modify_liquidity(self, key: PoolKey, tick_lower: int, tick_upper: int, liquidity_delta: int,
                         owner: Optional[str] = None) -> Tuple[int, int]:
        """
        Adds (or removes, when negative) liquidity. The position belongs to 'owner',
        or to the current locker when no owner is given; only the owner may remove.
        Returns the locker's balance delta per currency; negative means owed.
        """
        self._require_unlocked()
        state = self.pool(key)
        if tick_lower >= tick_upper or tick_lower < MIN_TICK or tick_upper > MAX_TICK:
            raise VenueError(f"Invalid tick range [{tick_lower}, {tick_upper}]")
        if tick_lower % key.tick_spacing or tick_upper % key.tick_spacing:
            raise VenueError(f"Ticks must be multiples of {key.tick_spacing}")

        owner = to_checksum_address(owner) if owner else self._locker
        if liquidity_delta < 0 and owner != self._locker:
            raise VenueError(f"{self._locker} cannot remove liquidity owned by {owner}")
        position = (key.pool_id, owner, tick_lower, tick_upper)
        current = self.positions.get(position, 0)
        if current + liquidity_delta < 0:
            raise VenueError("Cannot remove more liquidity than the position holds")

        amount0, amount1 = amounts_for_liquidity(
            state.sqrt_price_x96,
            sqrt_ratio_at_tick(tick_lower),
            sqrt_ratio_at_tick(tick_upper),
            abs(liquidity_delta),
        )
        sign = -1 if liquidity_delta > 0 else 1
        delta0, delta1 = sign * amount0, sign * amount1

        self._host.set_attr(state, "liquidity", state.liquidity + liquidity_delta)
        self.positions[position] = current + liquidity_delta
        self._host.record(lambda: self._restore_position(position, current))

        self._account(key.currency0, delta0)
        self._account(key.currency1, delta1)
        return delta0, delta1

    def _restore_position(self, position, previous: int):
        if previous:
            self.positions[position] = previous
        else:
            self.positions.pop(position, None)

    def sync(self, currency: str):
        currency = to_checksum_address(currency)
        self._synced = (currency, self._host.asset(currency).balance_of(self.address))

    def settle(self) -> int:
        """Credits the locker with whatever arrived for the synced currency since sync()."""
        self._require_unlocked()
        if self._synced is None:
            raise VenueError("settle() without a preceding sync()")
        currency, reserve = self._synced
        paid = self._host.asset(currency).balance_of(self.address) - reserve
        self._synced = None
        self._account(currency, paid)
        return paid

    def take(self, currency: str, to: str, amount: int):
        """Pays 'amount' of a currency the manager owes the locker out to 'to'."""
        self._require_unlocked()
        currency = to_checksum_address(currency)
        safe_transfer(self._host.asset(currency), self.address, to, amount)
        self._account(currency, -amount)
