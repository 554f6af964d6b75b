"""In-memory two-sided pool venue: a pair factory plus a router that adds liquidity."""
from math import isqrt
from typing import Dict, Optional, Tuple

from eth_utils import to_checksum_address
from loguru import logger

from launchpad_core.assets.fungible import InMemoryFungibleAsset, safe_transfer_from
from launchpad_core.common.address import derive_address, sort_assets
from launchpad_core.common.errors import DeadlineExpired, InsufficientLiquidityMinted, VenueError
from launchpad_core.common.host import Host
from launchpad_core.common.model import Token

MINIMUM_LIQUIDITY = 1000
# Receives the permanently locked first MINIMUM_LIQUIDITY shares.
BURN_ADDRESS = "0x000000000000000000000000000000000000dEaD"


class Pair:
    def __init__(self, host: Host, address: str, token0: str, token1: str):
        self._host = host
        self.address = address
        self.token0 = token0
        self.token1 = token1
        self.reserve0 = 0
        self.reserve1 = 0
        self.shares = InMemoryFungibleAsset(host, Token(name=f"LP {address}", symbol="LP"), address=address)

    @property
    def total_shares(self) -> int:
        return self.shares.total_supply

    def mint(self, to: str) -> int:
        """Credits shares for whatever arrived since the last sync, like a pair contract."""
        balance0 = self._host.asset(self.token0).balance_of(self.address)
        balance1 = self._host.asset(self.token1).balance_of(self.address)
        amount0 = balance0 - self.reserve0
        amount1 = balance1 - self.reserve1

        if self.total_shares == 0:
            liquidity = isqrt(amount0 * amount1) - MINIMUM_LIQUIDITY
            if liquidity > 0:
                self.shares.mint(BURN_ADDRESS, MINIMUM_LIQUIDITY)
        else:
            liquidity = min(
                amount0 * self.total_shares // self.reserve0,
                amount1 * self.total_shares // self.reserve1,
            )
        if liquidity <= 0:
            raise InsufficientLiquidityMinted(self.address, amount0, amount1)

        self.shares.mint(to, liquidity)
        self._host.set_attr(self, "reserve0", balance0)
        self._host.set_attr(self, "reserve1", balance1)
        return liquidity


class PairFactory:
    def __init__(self, host: Host):
        self._host = host
        self.address = derive_address("pair-factory", id(self))
        self._pairs: Dict[Tuple[str, str], Pair] = {}

    def get_pair(self, token_a: str, token_b: str) -> Optional[str]:
        pair = self._pairs.get(sort_assets(token_a, token_b))
        return pair.address if pair else None

    def pair(self, address: str) -> Pair:
        for pair in self._pairs.values():
            if pair.address == address:
                return pair
        raise VenueError(f"Unknown pair {address}")

    def create_pair(self, token_a: str, token_b: str) -> str:
        key = sort_assets(token_a, token_b)
        if key in self._pairs:
            raise VenueError(f"Pair for {key} already exists")
        pair = Pair(self._host, derive_address(self.address, *key), *key)
        self._pairs[key] = pair
        self._host.record(lambda: self._pairs.pop(key, None))
        logger.info(f"Created pair {pair.address} for {key[0]}/{key[1]}")
        return pair.address


class PairRouter:
    def __init__(self, host: Host, factory: PairFactory):
        self._host = host
        self.factory = factory
        self.address = derive_address("pair-router", factory.address)

    def quote(self, amount_a: int, reserve_a: int, reserve_b: int) -> int:
        if amount_a <= 0 or reserve_a <= 0 or reserve_b <= 0:
            raise VenueError("Router: insufficient amount or reserves for quote")
        return amount_a * reserve_b // reserve_a

    def add_liquidity(
        self,
        caller: str,
        token_a: str,
        token_b: str,
        amount_a_desired: int,
        amount_b_desired: int,
        amount_a_min: int,
        amount_b_min: int,
        to: str,
        deadline: int,
    ) -> Tuple[int, int, int]:
        """
        Deposits both sides from 'caller' (who must have approved the router) and
        sends the pool shares to 'to'. Returns (amount_a, amount_b, liquidity).
        """
        if self._host.timestamp > deadline:
            raise DeadlineExpired(deadline, self._host.timestamp)

        token_a = to_checksum_address(token_a)
        token_b = to_checksum_address(token_b)
        pair_address = self.factory.get_pair(token_a, token_b) or self.factory.create_pair(token_a, token_b)
        pair = self.factory.pair(pair_address)
        if pair.token0 == token_a:
            reserve_a, reserve_b = pair.reserve0, pair.reserve1
        else:
            reserve_a, reserve_b = pair.reserve1, pair.reserve0

        if reserve_a == 0 and reserve_b == 0:
            amount_a, amount_b = amount_a_desired, amount_b_desired
        else:
            amount_b_optimal = self.quote(amount_a_desired, reserve_a, reserve_b)
            if amount_b_optimal <= amount_b_desired:
                if amount_b_optimal < amount_b_min:
                    raise VenueError("Router: insufficient B amount")
                amount_a, amount_b = amount_a_desired, amount_b_optimal
            else:
                amount_a_optimal = self.quote(amount_b_desired, reserve_b, reserve_a)
                if amount_a_optimal < amount_a_min:
                    raise VenueError("Router: insufficient A amount")
                amount_a, amount_b = amount_a_optimal, amount_b_desired

        safe_transfer_from(self._host.asset(token_a), self.address, caller, pair.address, amount_a)
        safe_transfer_from(self._host.asset(token_b), self.address, caller, pair.address, amount_b)
        liquidity = pair.mint(to)
        return amount_a, amount_b, liquidity
