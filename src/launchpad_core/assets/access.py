from abc import ABC, abstractmethod

from eth_utils import is_address, to_checksum_address
from loguru import logger

from launchpad_core.common.address import require_address
from launchpad_core.common.errors import Unauthorized


class AccessControl(ABC):
    """Answers whether a caller may run privileged operations."""

    @abstractmethod
    def is_authorized(self, caller: str) -> bool:
        pass

    def require(self, caller: str, action: str = "this operation"):
        if not self.is_authorized(caller):
            raise Unauthorized(caller, action)


class OwnableAccessControl(AccessControl):
    """Single-owner access control. Ownership can be handed over by the current owner."""

    def __init__(self, owner: str):
        self._owner = require_address(owner, "owner")

    @property
    def owner(self) -> str:
        return self._owner

    def is_authorized(self, caller: str) -> bool:
        if not isinstance(caller, str) or not is_address(caller):
            return False
        return to_checksum_address(caller) == self._owner

    def transfer_ownership(self, caller: str, new_owner: str):
        self.require(caller, "transfer_ownership")
        previous = self._owner
        self._owner = require_address(new_owner, "new_owner")
        logger.info(f"Ownership transferred from {previous} to {self._owner}")
