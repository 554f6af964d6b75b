from dataclasses import dataclass
from typing import Tuple

from launchpad_core.common.errors import ConfigurationError
from launchpad_core.common.math import mul_div

UNIT = 10 ** 18

TOTAL_SUPPLY = 1_000_000_000 * UNIT
SALE_ALLOCATION = 500_000_000 * UNIT
CREATOR_ALLOCATION = 200_000_000 * UNIT
LIQUIDITY_ALLOCATION = 250_000_000 * UNIT
PLATFORM_FEE_ALLOCATION = 50_000_000 * UNIT

BPS_DENOMINATOR = 10_000
CREATOR_SETTLEMENT_BPS = 5_000


@dataclass(frozen=True)
class AllocationTable:
    """
    Partition of the fixed total supply into four disjoint buckets, plus the rule
    splitting settlement proceeds between the creator and the liquidity venue.
    """
    sale: int = SALE_ALLOCATION
    creator: int = CREATOR_ALLOCATION
    liquidity: int = LIQUIDITY_ALLOCATION
    platform_fee: int = PLATFORM_FEE_ALLOCATION
    creator_settlement_bps: int = CREATOR_SETTLEMENT_BPS

    def __post_init__(self):
        for name in ("sale", "creator", "liquidity", "platform_fee"):
            value = getattr(self, name)
            if not isinstance(value, int) or value < 0:
                raise ConfigurationError(f"Allocation '{name}' must be a non-negative integer, got {value!r}.")
        if self.sale == 0:
            raise ConfigurationError("Sale allocation must be greater than zero.")
        if not 0 <= self.creator_settlement_bps <= BPS_DENOMINATOR:
            raise ConfigurationError(
                f"creator_settlement_bps must be within [0, {BPS_DENOMINATOR}], got {self.creator_settlement_bps}."
            )

    @property
    def total_supply(self) -> int:
        return self.sale + self.creator + self.liquidity + self.platform_fee

    def split_settlement(self, amount: int) -> Tuple[int, int]:
        """
        Returns (creator_share, liquidity_share). The liquidity share takes the
        remainder, so the two always add back up to 'amount'.
        """
        creator_share = mul_div(amount, self.creator_settlement_bps, BPS_DENOMINATOR)
        return creator_share, amount - creator_share
