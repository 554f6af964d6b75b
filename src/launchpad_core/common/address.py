from typing import Tuple

from eth_utils import is_address, keccak, to_checksum_address

from launchpad_core.common.errors import ConfigurationError

ZERO_ADDRESS = "0x0000000000000000000000000000000000000000"


def require_address(value: str, field: str = "address") -> str:
    """
    Normalizes 'value' to a checksummed address.
    Raises ConfigurationError for malformed input or the zero address.
    """
    if not isinstance(value, str) or not is_address(value):
        raise ConfigurationError(f"'{field}' is not a valid address: {value!r}")
    checksummed = to_checksum_address(value)
    if int(checksummed, 16) == 0:
        raise ConfigurationError(f"'{field}' must not be the zero address.")
    return checksummed


def derive_address(*parts) -> str:
    """Deterministic address from the keccak hash of the given parts (last 20 bytes)."""
    payload = "|".join(str(p) for p in parts).encode()
    return to_checksum_address(keccak(payload)[-20:])


def sort_assets(asset_a: str, asset_b: str) -> Tuple[str, str]:
    """Orders two asset identifiers numerically, as venues key pools by the lower one first."""
    a = to_checksum_address(asset_a)
    b = to_checksum_address(asset_b)
    if int(a, 16) == int(b, 16):
        raise ConfigurationError(f"Identical assets cannot form a pair: {a}")
    if int(a, 16) > int(b, 16):
        return b, a
    return a, b
