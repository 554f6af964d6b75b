import pytest

from eth_utils import to_checksum_address

from launchpad_core.assets.fungible import InMemoryFungibleAsset
from launchpad_core.common.address import sort_assets
from launchpad_core.common.enums import VenueType
from launchpad_core.common.errors import (
    DeadlineExpired,
    InvalidLiquidityParameters,
    LiquidityAddingFailed,
    VenueError,
)
from launchpad_core.common.host import Host
from launchpad_core.common.model import Token, VenueConfig
from launchpad_core.venues.concentrated import ConcentratedPositionAdapter
from launchpad_core.venues.factory import build_reference_adapter, build_reference_venue, build_venue_adapter
from launchpad_core.venues.math import encode_sqrt_price_x96, full_range_ticks, sqrt_ratio_at_tick
from launchpad_core.venues.memory.pair import PairRouter
from launchpad_core.venues.memory.pool_manager import PoolKey, PoolManager
from launchpad_core.venues.simple_pair import SimplePairAdapter, slippage_min
from launchpad_core.venues.singleton import SingletonSettlementAdapter

UNIT = 10 ** 18
NOW = 1_700_000_000
PAYER = "0x" + "10" * 20
RECIPIENT = "0x" + "20" * 20
SEEDER = "0x" + "30" * 20


def _assets(host):
    token = InMemoryFungibleAsset(host, Token(name="Launch", symbol="LCH"), address="0x" + "cc" * 20)
    settlement = InMemoryFungibleAsset(host, Token(name="Dollar", symbol="USD"), address="0x" + "0c" * 20)
    for asset in (token, settlement):
        asset.mint(PAYER, 10_000 * UNIT)
        asset.mint(SEEDER, 10_000 * UNIT)
    return token, settlement


def _adapter(venue_type):
    host = Host(timestamp=NOW)
    token, settlement = _assets(host)
    return host, build_reference_adapter(host, VenueConfig(venue_type)), token, settlement


@pytest.mark.parametrize("amount, bps, expected", [
    (1_000, 100, 990),
    (1_000, 0, 1_000),
    (1_000, 10_000, 0),
    (1_000, 20_000, 0),
    (999, 100, 989),
])
def test_slippage_min(amount, bps, expected):
    assert slippage_min(amount, bps) == expected


@pytest.mark.parametrize("venue_type, adapter_class, venue_class", [
    (VenueType.SIMPLE_PAIR, SimplePairAdapter, PairRouter),
    (VenueType.CONCENTRATED, ConcentratedPositionAdapter, None),
    (VenueType.SINGLETON, SingletonSettlementAdapter, PoolManager),
])
def test_factory_dispatch(venue_type, adapter_class, venue_class):
    host = Host()
    config = VenueConfig(venue_type)
    venue = build_reference_venue(host, config)
    if venue_class is not None:
        assert isinstance(venue, venue_class)
    adapter = build_venue_adapter(host, config, venue)
    assert isinstance(adapter, adapter_class)
    assert adapter.venue_type == venue_type


def test_order_sorts_assets():
    host = Host()
    token, settlement = _assets(host)
    asset0, asset1, amount0, amount1 = SimplePairAdapter.order(token, settlement, 5, 7)
    assert (asset0, asset1, amount0, amount1) == (settlement, token, 7, 5)


@pytest.mark.parametrize("venue_type", [VenueType.SIMPLE_PAIR, VenueType.CONCENTRATED, VenueType.SINGLETON])
def test_rejects_empty_side(venue_type):
    _, adapter, token, settlement = _adapter(venue_type)
    with pytest.raises(InvalidLiquidityParameters):
        adapter.deploy(PAYER, token, settlement, 0, UNIT, RECIPIENT, NOW + 60)


@pytest.mark.parametrize("venue_type", [VenueType.SIMPLE_PAIR, VenueType.CONCENTRATED, VenueType.SINGLETON])
def test_rejects_expired_deadline(venue_type):
    _, adapter, token, settlement = _adapter(venue_type)
    with pytest.raises(DeadlineExpired):
        adapter.deploy(PAYER, token, settlement, UNIT, UNIT, RECIPIENT, NOW - 1)


@pytest.mark.parametrize("venue_type", [VenueType.SIMPLE_PAIR, VenueType.CONCENTRATED, VenueType.SINGLETON])
def test_fresh_deposit_leaves_nothing_with_payer(venue_type):
    _, adapter, token, settlement = _adapter(venue_type)
    result = adapter.deploy(PAYER, token, settlement, 500 * UNIT, 1_000 * UNIT, RECIPIENT, NOW + 60)
    assert result.liquidity > 0
    assert token.balance_of(PAYER) == 9_500 * UNIT
    assert settlement.balance_of(PAYER) == 9_000 * UNIT
    assert token.balance_of(RECIPIENT) == result.token_refunded
    assert settlement.balance_of(RECIPIENT) == result.settlement_refunded


def test_simple_pair_reuses_pool_and_refunds():
    host, adapter, token, settlement = _adapter(VenueType.SIMPLE_PAIR)
    router = adapter.router
    token.approve(SEEDER, router.address, 500 * UNIT)
    settlement.approve(SEEDER, router.address, 1_005 * UNIT)
    router.add_liquidity(
        SEEDER, token.address, settlement.address, 500 * UNIT, 1_005 * UNIT, 0, 0, SEEDER, NOW + 60
    )

    result = adapter.deploy(PAYER, token, settlement, 500 * UNIT, 1_000 * UNIT, RECIPIENT, NOW + 60)
    assert result.pool == router.factory.get_pair(token.address, settlement.address)
    assert result.settlement_used == 1_000 * UNIT
    assert result.token_used == 1_000 * UNIT * 500 * UNIT // (1_005 * UNIT)
    assert result.token_refunded == 500 * UNIT - result.token_used > 0
    assert token.balance_of(RECIPIENT) == result.token_refunded
    assert token.allowance(PAYER, router.address) == 0
    assert settlement.allowance(PAYER, router.address) == 0


def test_simple_pair_slippage_against_skewed_pool():
    host, adapter, token, settlement = _adapter(VenueType.SIMPLE_PAIR)
    router = adapter.router
    token.approve(SEEDER, router.address, 500 * UNIT)
    settlement.approve(SEEDER, router.address, 1_100 * UNIT)
    router.add_liquidity(
        SEEDER, token.address, settlement.address, 500 * UNIT, 1_100 * UNIT, 0, 0, SEEDER, NOW + 60
    )

    with pytest.raises(VenueError):
        with host.atomic():
            adapter.deploy(PAYER, token, settlement, 500 * UNIT, 1_000 * UNIT, RECIPIENT, NOW + 60)
    assert token.balance_of(PAYER) == 10_000 * UNIT
    assert token.allowance(PAYER, router.address) == 0


def test_concentrated_reuses_initialized_pool_and_refunds():
    _, adapter, token, settlement = _adapter(VenueType.CONCENTRATED)
    factory = adapter.position_manager.factory
    pool = factory.pool(factory.create_pool(token.address, settlement.address, adapter.config.fee))
    pool.initialize(encode_sqrt_price_x96(1, 1))

    result = adapter.deploy(PAYER, token, settlement, 500 * UNIT, 1_000 * UNIT, RECIPIENT, NOW + 60)
    assert result.pool == pool.address
    assert pool.sqrt_price_x96 == encode_sqrt_price_x96(1, 1)
    assert result.settlement_refunded > 400 * UNIT
    assert result.token_used + result.token_refunded == 500 * UNIT
    assert settlement.balance_of(RECIPIENT) == result.settlement_refunded
    assert adapter.position_manager.positions[result.position_id].owner == RECIPIENT


def test_singleton_reuses_initialized_pool():
    _, adapter, token, settlement = _adapter(VenueType.SINGLETON)
    first = adapter.deploy(PAYER, token, settlement, 500 * UNIT, 1_000 * UNIT, RECIPIENT, NOW + 60)
    second = adapter.deploy(PAYER, token, settlement, 100 * UNIT, 100 * UNIT, RECIPIENT, NOW + 60)
    assert first.pool == second.pool
    assert second.liquidity > 0
    assert settlement.balance_of(adapter.pool_manager.address) == first.settlement_used + second.settlement_used


def _open_at_extreme_price(adapter, token, settlement):
    extreme = sqrt_ratio_at_tick(-800_000)
    if adapter.venue_type == VenueType.CONCENTRATED:
        factory = adapter.position_manager.factory
        factory.pool(factory.create_pool(token.address, settlement.address, adapter.config.fee)).initialize(extreme)
    elif adapter.venue_type == VenueType.SINGLETON:
        currency0, currency1 = sort_assets(token.address, settlement.address)
        adapter.pool_manager.initialize(
            PoolKey(currency0, currency1, adapter.config.fee, adapter.config.tick_spacing), extreme
        )


@pytest.mark.parametrize("venue_type", [VenueType.SIMPLE_PAIR, VenueType.CONCENTRATED, VenueType.SINGLETON])
def test_zero_liquidity_is_liquidity_adding_failed(venue_type):
    _, adapter, token, settlement = _adapter(venue_type)
    _open_at_extreme_price(adapter, token, settlement)

    with pytest.raises(LiquidityAddingFailed) as e:
        adapter.deploy(PAYER, token, settlement, 1, 1_000, RECIPIENT, NOW + 60)
    assert (e.value.token_amount, e.value.settlement_amount) == (1, 1_000)
    assert token.balance_of(PAYER) == 10_000 * UNIT
    assert settlement.balance_of(PAYER) == 10_000 * UNIT
    assert token.balance_of(RECIPIENT) == 0
    assert settlement.balance_of(RECIPIENT) == 0


def test_simple_pair_failed_deploy_leaves_no_pair():
    _, adapter, token, settlement = _adapter(VenueType.SIMPLE_PAIR)
    with pytest.raises(LiquidityAddingFailed):
        adapter.deploy(PAYER, token, settlement, 1, 1_000, RECIPIENT, NOW + 60)
    assert adapter.router.factory.get_pair(token.address, settlement.address) is None


def test_singleton_position_recorded_under_recipient():
    _, adapter, token, settlement = _adapter(VenueType.SINGLETON)
    result = adapter.deploy(PAYER, token, settlement, 500 * UNIT, 1_000 * UNIT, RECIPIENT, NOW + 60)
    lower, upper = full_range_ticks(adapter.config.tick_spacing)
    positions = adapter.pool_manager.positions
    assert positions == {(result.pool, to_checksum_address(RECIPIENT), lower, upper): result.liquidity}
