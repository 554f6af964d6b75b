import pytest

from unittest.mock import patch

from launchpad_core.assets.fungible import InMemoryFungibleAsset
from launchpad_core.common.errors import TransferFailed
from launchpad_core.common.host import Host
from launchpad_core.common.model import Token
from launchpad_core.sale.distributor import DistributionPlan, Distributor

CUSTODY = "0x" + "10" * 20
CREATOR = "0x" + "11" * 20
PLATFORM = "0x" + "22" * 20


@pytest.fixture
def setup():
    host = Host()
    token = InMemoryFungibleAsset(host, Token(name="Launch", symbol="LCH"), address="0x" + "aa" * 20)
    settlement = InMemoryFungibleAsset(host, Token(name="Dollar", symbol="USD"), address="0x" + "bb" * 20)
    token.mint(CUSTODY, 1_000)
    settlement.mint(CUSTODY, 500)
    return host, token, settlement


def _plan(token, settlement, **overrides):
    values = dict(
        token=token,
        settlement=settlement,
        creator=CREATOR,
        platform_fee_account=PLATFORM,
        creator_tokens=400,
        platform_fee_tokens=100,
        creator_settlement=250,
    )
    values.update(overrides)
    return DistributionPlan(**values)


def test_distribute_pays_every_leg(setup):
    host, token, settlement = setup
    Distributor(host, CUSTODY).distribute(_plan(token, settlement))
    assert token.balance_of(CREATOR) == 400
    assert token.balance_of(PLATFORM) == 100
    assert settlement.balance_of(CREATOR) == 250
    assert token.balance_of(CUSTODY) == 500
    assert settlement.balance_of(CUSTODY) == 250


def test_zero_legs_are_skipped(setup):
    host, token, settlement = setup
    with patch.object(token, "transfer", wraps=token.transfer) as transfer:
        Distributor(host, CUSTODY).distribute(_plan(token, settlement, platform_fee_tokens=0))
    assert transfer.call_count == 1
    assert token.balance_of(PLATFORM) == 0


def test_failing_leg_rolls_back_paid_legs(setup):
    host, token, settlement = setup
    with patch.object(settlement, "transfer", return_value=False):
        with pytest.raises(TransferFailed):
            Distributor(host, CUSTODY).distribute(_plan(token, settlement))
    assert token.balance_of(CREATOR) == 0
    assert token.balance_of(PLATFORM) == 0
    assert token.balance_of(CUSTODY) == 1_000


def test_legs_order():
    plan = _plan("token", "settlement")
    assert [leg[0] for leg in plan.legs()] == [
        "creator allocation",
        "platform fee allocation",
        "creator settlement share",
    ]
