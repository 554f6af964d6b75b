import pytest

from launchpad_core.common.address import ZERO_ADDRESS, derive_address, require_address, sort_assets
from launchpad_core.common.errors import ConfigurationError

LOW = "0x" + "00" * 19 + "01"
HIGH = "0x" + "99" * 20


def test_require_address_normalizes():
    lower = "0x" + "ab" * 20
    checksummed = require_address(lower)
    assert checksummed.lower() == lower
    assert require_address(checksummed) == checksummed


@pytest.mark.parametrize("value", [ZERO_ADDRESS, "", "0x1234", "not an address", None, 42])
def test_require_address_rejects_invalid(value):
    with pytest.raises(ConfigurationError):
        require_address(value, "creator")


def test_sort_assets_orders_numerically():
    assert sort_assets(HIGH, LOW) == (LOW, HIGH)
    assert sort_assets(LOW, HIGH) == (LOW, HIGH)


def test_sort_assets_rejects_identical():
    with pytest.raises(ConfigurationError):
        sort_assets(LOW, LOW)


def test_derive_address_is_deterministic():
    first = derive_address("sale", LOW, "Name")
    assert first == derive_address("sale", LOW, "Name")
    assert first != derive_address("sale", LOW, "Other")
    assert require_address(first) == first
