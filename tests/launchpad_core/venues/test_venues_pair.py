import pytest

from math import isqrt

from launchpad_core.assets.fungible import InMemoryFungibleAsset
from launchpad_core.common.errors import DeadlineExpired, InsufficientLiquidityMinted, VenueError
from launchpad_core.common.host import Host
from launchpad_core.common.model import Token
from launchpad_core.venues.memory.pair import BURN_ADDRESS, MINIMUM_LIQUIDITY, PairFactory, PairRouter

UNIT = 10 ** 18
LP = "0x" + "11" * 20
TO = "0x" + "22" * 20
NOW = 1_700_000_000


@pytest.fixture
def venue():
    host = Host(timestamp=NOW)
    token_a = InMemoryFungibleAsset(host, Token(name="Alpha", symbol="A"), address="0x" + "aa" * 20)
    token_b = InMemoryFungibleAsset(host, Token(name="Beta", symbol="B"), address="0x" + "bb" * 20)
    router = PairRouter(host, PairFactory(host))
    for asset in (token_a, token_b):
        asset.mint(LP, 10_000 * UNIT)
        asset.approve(LP, router.address, 10_000 * UNIT)
    return host, router, token_a, token_b


def _add(router, token_a, token_b, amount_a, amount_b, min_a=0, min_b=0, deadline=NOW + 60):
    return router.add_liquidity(
        LP, token_a.address, token_b.address, amount_a, amount_b, min_a, min_b, TO, deadline
    )


def test_first_deposit(venue):
    _, router, token_a, token_b = venue
    amount_a, amount_b, liquidity = _add(router, token_a, token_b, 1_000 * UNIT, 2_000 * UNIT)
    assert (amount_a, amount_b) == (1_000 * UNIT, 2_000 * UNIT)
    assert liquidity == isqrt(1_000 * UNIT * 2_000 * UNIT) - MINIMUM_LIQUIDITY

    pair = router.factory.pair(router.factory.get_pair(token_a.address, token_b.address))
    assert pair.shares.balance_of(TO) == liquidity
    assert pair.shares.balance_of(BURN_ADDRESS) == MINIMUM_LIQUIDITY
    assert (pair.reserve0, pair.reserve1) == (1_000 * UNIT, 2_000 * UNIT)


def test_pair_lookup_is_order_independent(venue):
    _, router, token_a, token_b = venue
    address = router.factory.create_pair(token_b.address, token_a.address)
    assert router.factory.get_pair(token_a.address, token_b.address) == address
    with pytest.raises(VenueError):
        router.factory.create_pair(token_a.address, token_b.address)


def test_second_deposit_takes_pool_ratio(venue):
    _, router, token_a, token_b = venue
    _add(router, token_a, token_b, 1_000 * UNIT, 2_000 * UNIT)
    amount_a, amount_b, liquidity = _add(router, token_a, token_b, 100 * UNIT, 250 * UNIT)
    assert (amount_a, amount_b) == (100 * UNIT, 200 * UNIT)
    assert liquidity > 0
    assert token_b.balance_of(LP) == 10_000 * UNIT - 2_200 * UNIT


def test_second_deposit_below_minimum(venue):
    _, router, token_a, token_b = venue
    _add(router, token_a, token_b, 1_000 * UNIT, 2_000 * UNIT)
    with pytest.raises(VenueError):
        _add(router, token_a, token_b, 100 * UNIT, 250 * UNIT, min_b=240 * UNIT)


def test_deadline(venue):
    _, router, token_a, token_b = venue
    with pytest.raises(DeadlineExpired):
        _add(router, token_a, token_b, UNIT, UNIT, deadline=NOW - 1)


def test_too_small_first_deposit(venue):
    _, router, token_a, token_b = venue
    with pytest.raises(InsufficientLiquidityMinted) as e:
        _add(router, token_a, token_b, 1, 1_000)
    assert e.value.pool == router.factory.get_pair(token_a.address, token_b.address)
    assert (e.value.amount0, e.value.amount1) == (1, 1_000)
