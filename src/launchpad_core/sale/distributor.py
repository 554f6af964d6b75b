from dataclasses import dataclass
from typing import List, Tuple

from loguru import logger

from launchpad_core.assets.fungible import FungibleAsset, safe_transfer
from launchpad_core.common.host import Host


@dataclass
class DistributionPlan:
    """The one-shot payout computed by the sale at finalize."""
    token: FungibleAsset
    settlement: FungibleAsset
    creator: str
    platform_fee_account: str
    creator_tokens: int
    platform_fee_tokens: int
    creator_settlement: int

    def legs(self) -> List[Tuple[str, FungibleAsset, str, int]]:
        # Order only matters for which leg a TransferFailed names.
        return [
            ("creator allocation", self.token, self.creator, self.creator_tokens),
            ("platform fee allocation", self.token, self.platform_fee_account, self.platform_fee_tokens),
            ("creator settlement share", self.settlement, self.creator, self.creator_settlement),
        ]


class Distributor:
    """Moves the creator and platform allocations and the creator's settlement share out of custody."""

    def __init__(self, host: Host, custody: str):
        self._host = host
        self.custody = custody

    def distribute(self, plan: DistributionPlan):
        """
        Executes every leg or none: the first failing leg raises TransferFailed
        and the legs already paid are rolled back with it.
        """
        with self._host.atomic("distribution"):
            for label, asset, recipient, amount in plan.legs():
                if amount == 0:
                    logger.debug(f"Skipping empty {label} leg")
                    continue
                safe_transfer(asset, self.custody, recipient, amount)
                logger.info(f"Paid {label}: {amount} to {recipient}")
