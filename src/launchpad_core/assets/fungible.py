from abc import ABC, abstractmethod
from typing import Dict, Optional, Tuple

from eth_utils import is_address, to_checksum_address
from loguru import logger

from launchpad_core.common.address import derive_address, require_address
from launchpad_core.common.errors import ConfigurationError, TransferFailed
from launchpad_core.common.host import Host
from launchpad_core.common.model import Token


class FungibleAsset(ABC):
    """
    Capability the sale core relies on for moving value. Every call names its
    caller explicitly and reports success with a boolean.
    """

    @property
    @abstractmethod
    def address(self) -> str:
        pass

    @property
    @abstractmethod
    def total_supply(self) -> int:
        pass

    @abstractmethod
    def balance_of(self, account: str) -> int:
        pass

    @abstractmethod
    def allowance(self, owner: str, spender: str) -> int:
        pass

    @abstractmethod
    def transfer(self, caller: str, to: str, amount: int) -> bool:
        pass

    @abstractmethod
    def transfer_from(self, caller: str, from_: str, to: str, amount: int) -> bool:
        pass

    @abstractmethod
    def approve(self, caller: str, spender: str, amount: int) -> bool:
        pass


class InMemoryFungibleAsset(FungibleAsset):
    """
    Ledger-backed asset living on a Host. Balance and allowance writes are
    journaled, so they are undone when the surrounding atomic block fails.
    """

    def __init__(self, host: Host, token: Token, address: Optional[str] = None):
        self._host = host
        self.token = token
        self._address = require_address(address, "asset") if address else derive_address("asset", token.name, token.symbol)
        self._balances: Dict[str, int] = {}
        self._allowances: Dict[Tuple[str, str], int] = {}
        self._minted = False
        host.register_asset(self)

    def __repr__(self):
        return f"InMemoryFungibleAsset({self.token.symbol}@{self._address})"

    @property
    def address(self) -> str:
        return self._address

    @property
    def symbol(self) -> str:
        return self.token.symbol

    @property
    def total_supply(self) -> int:
        return self.token.total_supply

    def balance_of(self, account: str) -> int:
        return self._balances.get(to_checksum_address(account), 0)

    def allowance(self, owner: str, spender: str) -> int:
        return self._allowances.get((to_checksum_address(owner), to_checksum_address(spender)), 0)

    def mint(self, to: str, amount: int):
        """Creates 'amount' new units for 'to'. Used for fixtures and external assets."""
        if amount < 0:
            raise ValueError("Cannot mint a negative amount.")
        to = require_address(to, "to")
        self._set_balance(to, self.balance_of(to) + amount)
        self._host.set_attr(self.token, "total_supply", self.token.total_supply + amount)

    def mint_once(self, to: str, amount: int):
        """Mints the entire fixed supply. A second call is a configuration error."""
        if self._minted:
            raise ConfigurationError(f"{self.token.symbol} supply has already been minted.")
        self.mint(to, amount)
        self._host.set_attr(self, "_minted", True)

    def transfer(self, caller: str, to: str, amount: int) -> bool:
        return self._move(caller, to, amount)

    def transfer_from(self, caller: str, from_: str, to: str, amount: int) -> bool:
        if not is_address(caller) or not is_address(from_):
            return False
        caller = to_checksum_address(caller)
        from_ = to_checksum_address(from_)
        current = self.allowance(from_, caller)
        if current < amount:
            logger.debug(f"{self.token.symbol}: allowance {current} of {caller} over {from_} below {amount}")
            return False
        if self.balance_of(from_) < amount:
            return False
        self._set_allowance(from_, caller, current - amount)
        return self._move(from_, to, amount)

    def approve(self, caller: str, spender: str, amount: int) -> bool:
        if amount < 0 or not is_address(caller) or not is_address(spender):
            return False
        self._set_allowance(to_checksum_address(caller), to_checksum_address(spender), amount)
        return True

    def _move(self, sender: str, to: str, amount: int) -> bool:
        if amount < 0 or not is_address(sender) or not is_address(to):
            return False
        sender = to_checksum_address(sender)
        to = to_checksum_address(to)
        if int(to, 16) == 0:
            return False
        balance = self.balance_of(sender)
        if balance < amount:
            logger.debug(f"{self.token.symbol}: balance {balance} of {sender} below {amount}")
            return False
        self._set_balance(sender, balance - amount)
        self._set_balance(to, self.balance_of(to) + amount)
        return True

    def _set_balance(self, account: str, value: int):
        previous = self._balances.get(account)
        self._balances[account] = value
        self._host.record(lambda: self._restore(self._balances, account, previous))

    def _set_allowance(self, owner: str, spender: str, value: int):
        key = (owner, spender)
        previous = self._allowances.get(key)
        self._allowances[key] = value
        self._host.record(lambda: self._restore(self._allowances, key, previous))

    @staticmethod
    def _restore(store: dict, key, previous):
        if previous is None:
            store.pop(key, None)
        else:
            store[key] = previous


def _symbol(asset: FungibleAsset) -> str:
    return getattr(asset, "symbol", asset.address)


def safe_transfer(asset: FungibleAsset, caller: str, to: str, amount: int):
    """Calls asset.transfer and raises TransferFailed on a False return or any exception."""
    try:
        ok = asset.transfer(caller, to, amount)
    except Exception as e:
        raise TransferFailed(_symbol(asset), caller, to, amount, reason=str(e)) from e
    if not ok:
        raise TransferFailed(_symbol(asset), caller, to, amount)
    logger.debug(f"Transferred {amount} {_symbol(asset)} {caller} -> {to}")


def safe_transfer_from(asset: FungibleAsset, caller: str, from_: str, to: str, amount: int):
    try:
        ok = asset.transfer_from(caller, from_, to, amount)
    except Exception as e:
        raise TransferFailed(_symbol(asset), from_, to, amount, reason=str(e)) from e
    if not ok:
        raise TransferFailed(_symbol(asset), from_, to, amount)
    logger.debug(f"Pulled {amount} {_symbol(asset)} {from_} -> {to}")


def safe_approve(asset: FungibleAsset, caller: str, spender: str, amount: int):
    try:
        ok = asset.approve(caller, spender, amount)
    except Exception as e:
        raise TransferFailed(_symbol(asset), caller, spender, amount, reason=f"approve failed: {e}") from e
    if not ok:
        raise TransferFailed(_symbol(asset), caller, spender, amount, reason="approve returned false")
