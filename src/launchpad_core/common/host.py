import time
from contextlib import contextmanager
from typing import Callable, Dict, List, Optional

from eth_utils import to_checksum_address
from loguru import logger

from launchpad_core.common.errors import ConfigurationError


class Journal:
    """
    Undo log backing Host.atomic().

    Every journaled mutation registers the callable that reverses it. A failing
    atomic block replays those callables newest-first down to the mark taken
    when the block was entered, leaving state exactly as it was before.
    """

    def __init__(self):
        self._undo: List[Callable[[], None]] = []
        self._depth = 0

    @property
    def depth(self) -> int:
        return self._depth

    def record(self, undo: Callable[[], None]):
        # Outside an atomic block nothing can be rolled back, so nothing is kept.
        if self._depth > 0:
            self._undo.append(undo)

    def mark(self) -> int:
        return len(self._undo)

    def rollback_to(self, mark: int):
        while len(self._undo) > mark:
            self._undo.pop()()

    def enter(self) -> int:
        self._depth += 1
        return self.mark()

    def exit(self, mark: int, failed: bool):
        try:
            if failed:
                self.rollback_to(mark)
        finally:
            self._depth -= 1
            if self._depth == 0:
                self._undo.clear()


class Host:
    """
    The serial execution environment every sale, asset and venue shares.

    Provides all-or-nothing operations through atomic() and the operation
    timestamp used for venue deadlines.
    """

    def __init__(self, timestamp: Optional[int] = None):
        self.journal = Journal()
        self.assets: Dict[str, "FungibleAsset"] = {}
        self._timestamp = timestamp

    def register_asset(self, asset: "FungibleAsset"):
        if asset.address in self.assets:
            raise ConfigurationError(f"Asset {asset.address} is already registered.")
        self.assets[asset.address] = asset
        self.record(lambda: self.assets.pop(asset.address, None))

    def asset(self, address: str) -> "FungibleAsset":
        try:
            return self.assets[to_checksum_address(address)]
        except (KeyError, ValueError):
            raise ConfigurationError(f"Unknown asset {address}") from None

    @property
    def timestamp(self) -> int:
        if self._timestamp is not None:
            return self._timestamp
        return int(time.time())

    @timestamp.setter
    def timestamp(self, value: Optional[int]):
        self._timestamp = value

    def advance(self, seconds: int):
        self._timestamp = self.timestamp + seconds

    def record(self, undo: Callable[[], None]):
        self.journal.record(undo)

    def set_attr(self, obj, name: str, value):
        """setattr() that is reverted if the enclosing atomic block fails."""
        previous = getattr(obj, name)
        setattr(obj, name, value)
        self.record(lambda: setattr(obj, name, previous))

    @contextmanager
    def atomic(self, label: str = "operation"):
        mark = self.journal.enter()
        failed = False
        try:
            yield self
        except BaseException as e:
            failed = True
            logger.warning(f"Rolling back {label}: {e}")
            raise
        finally:
            self.journal.exit(mark, failed)
