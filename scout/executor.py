"""
Simulated execution collaborator.

On-chain settlement is out of scope; this stands in for it in demo mode.
A live executor only has to provide execute_rebalance() with the same
signature and raise ExecutionError on failure.
"""

import logging
import secrets

from scout.errors import ExecutionError
from scout.models import BinRange

logger = logging.getLogger(__name__)


class SimulatedExecutor:
    def __init__(self, positions=None, fail_pools=()):
        # positions: optional SimulatedPositionData to re-center after success
        self.positions = positions
        self.fail_pools = set(fail_pools)

    def execute_rebalance(
        self, pool_address: str, position_address: str, new_range: BinRange
    ) -> list[str]:
        logger.info(
            "DEMO MODE: simulating rebalance of %s on %s -> [%d, %d]",
            position_address,
            pool_address,
            new_range.lower_bin,
            new_range.upper_bin,
        )
        if pool_address in self.fail_pools:
            raise ExecutionError(f"Simulated rebalance failure for pool {pool_address}")

        if self.positions is not None:
            self.positions.move_position(pool_address, new_range)
        return ["demo_tx_signature_" + secrets.token_hex(8)]
