from enum import Enum


class SaleState(Enum):
    OPEN = "OPEN"
    FUNDED = "FUNDED"
    FINALIZED = "FINALIZED"

    @classmethod
    def from_str(cls, state_str: str) -> "SaleState":
        """
        Convert a string to a SaleState enum.
        :param state_str: str
        :return: SaleState or NotImplementedError
        """
        if state_str.upper() == SaleState.OPEN.name:
            return SaleState.OPEN
        elif state_str.upper() == SaleState.FUNDED.name:
            return SaleState.FUNDED
        elif state_str.upper() == SaleState.FINALIZED.name:
            return SaleState.FINALIZED
        else:
            raise NotImplementedError(f"No sale state enum for {state_str}")

    def __str__(self):
        return self.name

    def __repr__(self):
        return self.__str__()


class VenueType(Enum):
    SIMPLE_PAIR = "SIMPLE_PAIR"
    CONCENTRATED = "CONCENTRATED"
    SINGLETON = "SINGLETON"

    @classmethod
    def from_str(cls, venue_str):
        if venue_str.upper() == VenueType.SIMPLE_PAIR.name:
            return VenueType.SIMPLE_PAIR
        elif venue_str.upper() == VenueType.CONCENTRATED.name:
            return VenueType.CONCENTRATED
        elif venue_str.upper() == VenueType.SINGLETON.name:
            return VenueType.SINGLETON
        else:
            raise NotImplementedError(f"No venue type enum for {venue_str}")

    def __hash__(self):
        return hash(self.value)

    def __str__(self):
        return self.name

    def __repr__(self):
        return self.__str__()


class SettlementSplit(Enum):
    """How the creator's half of the proceeds is measured at finalize."""
    BALANCE = "BALANCE"
    RAISED = "RAISED"

    @classmethod
    def from_str(cls, split_str):
        if split_str.upper() == SettlementSplit.BALANCE.name:
            return SettlementSplit.BALANCE
        elif split_str.upper() == SettlementSplit.RAISED.name:
            return SettlementSplit.RAISED
        else:
            raise NotImplementedError(f"No settlement split enum for {split_str}")

    def __str__(self):
        return self.name

    def __repr__(self):
        return self.__str__()
