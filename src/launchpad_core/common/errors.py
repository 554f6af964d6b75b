from typing import Optional


class LaunchpadError(Exception):
    """Base class for every condition raised by the sale core."""


# Configuration

class ConfigurationError(LaunchpadError, ValueError):
    """Invalid construction parameters; the object is never created."""


# Validation

class SaleValidationError(LaunchpadError, ValueError):
    """A call was rejected before any state was touched."""


class ZeroAmount(SaleValidationError):
    def __init__(self, what: str = "amount"):
        self.what = what
        super().__init__(f"{what} must be greater than zero")


class AllocationExceeded(SaleValidationError):
    def __init__(self, tokens_sold: int, units_out: int, sale_allocation: int):
        self.tokens_sold = tokens_sold
        self.units_out = units_out
        self.sale_allocation = sale_allocation
        super().__init__(
            f"Purchase of {units_out} units on top of {tokens_sold} sold exceeds "
            f"sale allocation {sale_allocation}"
        )


class SlippageExceeded(SaleValidationError):
    def __init__(self, units_out: int, min_units_out: int):
        self.units_out = units_out
        self.min_units_out = min_units_out
        super().__init__(f"Quoted {units_out} units is below the requested minimum {min_units_out}")


class InvalidLiquidityParameters(SaleValidationError):
    def __init__(self, token_amount: int, settlement_amount: int):
        self.token_amount = token_amount
        self.settlement_amount = settlement_amount
        super().__init__(
            f"Liquidity deposit needs both sides above zero "
            f"(token={token_amount}, settlement={settlement_amount})"
        )


# Transfers

class TransferFailed(LaunchpadError):
    def __init__(self, asset: str, sender: str, recipient: str, amount: int, reason: Optional[str] = None):
        self.asset = asset
        self.sender = sender
        self.recipient = recipient
        self.amount = amount
        self.reason = reason
        msg = f"Transfer of {amount} {asset} from {sender} to {recipient} failed"
        if reason:
            msg += f": {reason}"
        super().__init__(msg)


# State

class SaleStateError(LaunchpadError):
    """The operation is not allowed in the sale's current lifecycle state."""


class SaleClosed(SaleStateError):
    def __init__(self, tokens_sold: int, sale_allocation: int):
        self.tokens_sold = tokens_sold
        self.sale_allocation = sale_allocation
        super().__init__(f"Sale is closed ({tokens_sold}/{sale_allocation} sold)")


class AlreadyFinalized(SaleStateError):
    def __init__(self, venue_pool: Optional[str] = None):
        self.venue_pool = venue_pool
        super().__init__(f"Liquidity already deployed to pool {venue_pool}")


class FundingNotComplete(SaleStateError):
    def __init__(self, tokens_sold: int, sale_allocation: int):
        self.tokens_sold = tokens_sold
        self.sale_allocation = sale_allocation
        super().__init__(
            f"Funding is not complete yet ({tokens_sold}/{sale_allocation} sold)"
        )


class ReentrantCall(SaleStateError):
    def __init__(self, operation: str):
        self.operation = operation
        super().__init__(f"Re-entrant call into {operation}")


class Unauthorized(LaunchpadError):
    def __init__(self, caller: str, action: str = "this operation"):
        self.caller = caller
        self.action = action
        super().__init__(f"{caller} is not authorized to perform {action}")


# Venue

class VenueError(LaunchpadError):
    """Raised by a liquidity venue or its adapter."""


class LiquidityAddingFailed(VenueError):
    def __init__(self, pool: str, token_amount: int, settlement_amount: int):
        self.pool = pool
        self.token_amount = token_amount
        self.settlement_amount = settlement_amount
        super().__init__(
            f"No liquidity minted in pool {pool} for token={token_amount}, "
            f"settlement={settlement_amount}"
        )


class InsufficientLiquidityMinted(VenueError):
    def __init__(self, pool: str, amount0: int, amount1: int):
        self.pool = pool
        self.amount0 = amount0
        self.amount1 = amount1
        super().__init__(f"Pool {pool}: insufficient liquidity minted for amount0={amount0}, amount1={amount1}")


class DeadlineExpired(VenueError):
    def __init__(self, deadline: int, timestamp: int):
        self.deadline = deadline
        self.timestamp = timestamp
        super().__init__(f"Deadline {deadline} passed (now {timestamp})")


class PoolAlreadyInitialized(VenueError):
    def __init__(self, pool: str):
        self.pool = pool
        super().__init__(f"Pool {pool} is already initialized")


class CurrencyNotSettled(VenueError):
    def __init__(self, currency: str, owed: int):
        self.currency = currency
        self.owed = owed
        super().__init__(f"Currency {currency} still owes {owed} at the end of the session")
