from typing import Union

from launchpad_core.common.enums import VenueType
from launchpad_core.common.host import Host
from launchpad_core.common.model import VenueConfig
from launchpad_core.venues.base import LiquidityVenueAdapter
from launchpad_core.venues.concentrated import ConcentratedPositionAdapter
from launchpad_core.venues.memory.concentrated import ConcentratedPoolFactory, PositionManager
from launchpad_core.venues.memory.pair import PairFactory, PairRouter
from launchpad_core.venues.memory.pool_manager import PoolManager
from launchpad_core.venues.simple_pair import SimplePairAdapter
from launchpad_core.venues.singleton import SingletonSettlementAdapter

Venue = Union[PairRouter, PositionManager, PoolManager]


def build_venue_adapter(host: Host, config: VenueConfig, venue: Venue) -> LiquidityVenueAdapter:
    """
    Picks the adapter for config.venue_type. 'venue' is the entry point of that venue:
    the router, the position manager or the pool manager.
    """
    if config.venue_type == VenueType.SIMPLE_PAIR:
        return SimplePairAdapter(host, config, venue)
    elif config.venue_type == VenueType.CONCENTRATED:
        return ConcentratedPositionAdapter(host, config, venue)
    elif config.venue_type == VenueType.SINGLETON:
        return SingletonSettlementAdapter(host, config, venue)
    else:
        raise NotImplementedError(f"No adapter for venue type {config.venue_type}")


def build_reference_venue(host: Host, config: VenueConfig) -> Venue:
    """In-memory venue of the configured type, for simulations and tests."""
    if config.venue_type == VenueType.SIMPLE_PAIR:
        return PairRouter(host, PairFactory(host))
    elif config.venue_type == VenueType.CONCENTRATED:
        return PositionManager(host, ConcentratedPoolFactory(host))
    elif config.venue_type == VenueType.SINGLETON:
        return PoolManager(host)
    else:
        raise NotImplementedError(f"No reference venue for venue type {config.venue_type}")


def build_reference_adapter(host: Host, config: VenueConfig) -> LiquidityVenueAdapter:
    return build_venue_adapter(host, config, build_reference_venue(host, config))
