from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from typing import Dict, List, Optional

from launchpad_core.common.address import require_address
from launchpad_core.common.enums import VenueType
from launchpad_core.common.errors import ConfigurationError
from launchpad_core.sale.allocation import AllocationTable

TICK_SPACING: Dict[int, int] = {100: 1, 500: 10, 3000: 60, 10000: 200}


@dataclass
class Token:
    """Metadata of a fungible asset."""
    name: str
    symbol: str
    decimals: int = 18
    total_supply: int = 0


@dataclass
class SaleParams:
    """Everything a sale instance is created with. Immutable once the sale exists."""
    name: str
    symbol: str
    target_funding: int
    creator: str
    settlement_asset: str
    platform_fee_account: str
    decimals: int = 18
    allocation: AllocationTable = field(default_factory=AllocationTable)

    def __post_init__(self):
        if not self.name or not self.name.strip():
            raise ConfigurationError("Name must not be empty.")
        if not self.symbol or not self.symbol.strip():
            raise ConfigurationError("Symbol must not be empty.")
        if not isinstance(self.target_funding, int) or self.target_funding <= 0:
            raise ConfigurationError(f"Target funding must be a positive integer, got {self.target_funding!r}.")
        if not 0 <= self.decimals <= 36:
            raise ConfigurationError(f"Decimals must be within [0, 36], got {self.decimals}.")
        self.creator = require_address(self.creator, "creator")
        self.settlement_asset = require_address(self.settlement_asset, "settlement_asset")
        self.platform_fee_account = require_address(self.platform_fee_account, "platform_fee_account")


@dataclass
class VenueConfig:
    """Selects and tunes the liquidity venue used at finalize."""
    venue_type: VenueType
    fee: int = 3000
    tick_spacing: Optional[int] = None
    slippage_bps: int = 100

    def __post_init__(self):
        if isinstance(self.venue_type, str):
            self.venue_type = VenueType.from_str(self.venue_type)
        if self.tick_spacing is None:
            if self.fee not in TICK_SPACING:
                raise ConfigurationError(f"Unknown fee tier {self.fee}; expected one of {list(TICK_SPACING)}")
            self.tick_spacing = TICK_SPACING[self.fee]
        if self.tick_spacing <= 0:
            raise ConfigurationError("Tick spacing must be positive.")
        if not 0 <= self.slippage_bps <= 10_000:
            raise ConfigurationError(f"slippage_bps must be within [0, 10000], got {self.slippage_bps}.")


@dataclass
class Campaign:
    """Mutable record of one sale. Only Sale.buy and Sale.finalize write to it."""
    target_funding: int
    allocation: AllocationTable
    total_raised: int = 0
    tokens_sold: int = 0
    funding_complete: bool = False
    liquidity_deployed: bool = False
    venue_pool: Optional[str] = None


@dataclass
class PurchaseResult:
    """Outcome of a buy."""
    buyer: str
    amount_in: int
    units_out: int
    average_price: int
    price_after: int
    tokens_sold: int
    funding_complete: bool
    timestamp: datetime


@dataclass
class LiquidityResult:
    """What a venue adapter deposited, and what it handed back."""
    pool: str
    liquidity: int
    token_used: int
    settlement_used: int
    token_refunded: int = 0
    settlement_refunded: int = 0
    position_id: Optional[int] = None


@dataclass
class FinalizeResult:
    creator_tokens: int
    platform_fee_tokens: int
    creator_settlement: int
    liquidity_settlement: int
    liquidity: LiquidityResult
    timestamp: datetime


@dataclass
class SimulationResult:
    """Holds the aggregated results of simulating multiple purchases."""
    transactions: List[PurchaseResult] = field(default_factory=list)
    final_tokens_sold: int = 0
    final_price: int = 0
    average_purchase_price: Optional[Decimal] = Decimal('0.0')
    metadata: Dict = field(default_factory=dict)
