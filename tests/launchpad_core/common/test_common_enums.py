import pytest

from launchpad_core.common.enums import SaleState, SettlementSplit, VenueType


class TestSaleState:
    @pytest.mark.parametrize("input_str, expected", [
        ("open", SaleState.OPEN),
        ("FUNDED", SaleState.FUNDED),
        ("Finalized", SaleState.FINALIZED),
    ])
    def test_from_str(self, input_str, expected):
        assert SaleState.from_str(input_str) == expected

    def test_from_str_invalid(self):
        with pytest.raises(NotImplementedError):
            SaleState.from_str("closed")

    def test_str_and_repr(self):
        assert str(SaleState.OPEN) == "OPEN"
        assert repr(SaleState.FINALIZED) == "FINALIZED"


class TestVenueType:
    @pytest.mark.parametrize("input_str, expected", [
        ("simple_pair", VenueType.SIMPLE_PAIR),
        ("CONCENTRATED", VenueType.CONCENTRATED),
        ("Singleton", VenueType.SINGLETON),
    ])
    def test_from_str(self, input_str, expected):
        assert VenueType.from_str(input_str) == expected

    def test_from_str_invalid(self):
        with pytest.raises(NotImplementedError):
            VenueType.from_str("orderbook")

    def test_hashable(self):
        assert {VenueType.SINGLETON: 1}[VenueType.SINGLETON] == 1


class TestSettlementSplit:
    def test_from_str(self):
        assert SettlementSplit.from_str("balance") == SettlementSplit.BALANCE
        assert SettlementSplit.from_str("RAISED") == SettlementSplit.RAISED

    def test_from_str_invalid(self):
        with pytest.raises(NotImplementedError):
            SettlementSplit.from_str("half")

    def test_str(self):
        assert str(SettlementSplit.RAISED) == "RAISED"
