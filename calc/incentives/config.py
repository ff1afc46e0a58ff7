"""
Tunables for the incentive calculator.

All amounts are wei-scaled integers (1e18 = 1.0). APRs use the same scale,
so NON_TRIVIAL_ANNUAL_RATE = 5e15 is 0.5% per year.

Timing windows:
- SNAPSHOT_INTERVAL: minimum length of a supply measurement window (4h)
- MAX_SNAPSHOT_AGE: freshness floor, a pool is always re-measured after 24h
- SUPPLY_RECHECK_AGE: raw supply drift only triggers a snapshot after 8h
"""

from __future__ import annotations

import os
from dataclasses import dataclass

# ============================================================================
# CONSTANTS
# ============================================================================

WAD = 10**18
SECONDS_IN_YEAR = 365 * 24 * 60 * 60
SECONDS_IN_DAY = 24 * 60 * 60
SECONDS_IN_HOUR = 60 * 60

SNAPSHOT_INTERVAL = 4 * SECONDS_IN_HOUR
MAX_SNAPSHOT_AGE = 24 * SECONDS_IN_HOUR
SUPPLY_RECHECK_AGE = 8 * SECONDS_IN_HOUR
CHANGE_THRESHOLD_PCT = 5

MAX_CREDITS = 48
CREDITS_PER_DAY = 2
NON_TRIVIAL_ANNUAL_RATE = 5 * 10**15  # 0.5%
MATERIAL_IMPROVEMENT_PCT = 10

PRICE_MAX_STALENESS = 2 * SECONDS_IN_DAY

ZERO_ADDRESS = "0x" + "0" * 40

APR_ID_PREFIX = "incentive-v4"


def is_zero_address(address: str | None) -> bool:
    """True for None, "" and the all-zero address in any case."""
    return not address or address.lower() == ZERO_ADDRESS


# ============================================================================
# ENVIRONMENT / RPC CONFIGURATION
# ============================================================================


def get_eth_rpc_url() -> str:
    """Get Ethereum RPC URL from environment. Errors loudly if not set."""
    url = os.environ.get("ALCHEMY_ETH_RPC_URL")
    if not url:
        raise RuntimeError(
            "ALCHEMY_ETH_RPC_URL not set in environment. "
            "Set it in your .env file or environment variables. "
            "Example: ALCHEMY_ETH_RPC_URL=https://eth-mainnet.g.alchemy.com/v2/YOUR_KEY"
        )
    return url


# ============================================================================
# CALCULATOR CONFIGURATION (immutable per calculator)
# ============================================================================


@dataclass(frozen=True)
class IncentiveConfig:
    """
    Immutable parameters for one incentive calculator.

    Defaults match the deployed calculators; tests shrink the windows to
    exercise edge timing without huge timestamps.
    """

    # Snapshot windows (seconds)
    snapshot_interval: int = SNAPSHOT_INTERVAL
    max_snapshot_age: int = MAX_SNAPSHOT_AGE
    supply_recheck_age: int = SUPPLY_RECHECK_AGE
    change_threshold_pct: int = CHANGE_THRESHOLD_PCT

    # Credit state machine
    max_credits: int = MAX_CREDITS
    credits_per_day: int = CREDITS_PER_DAY
    non_trivial_annual_rate: int = NON_TRIVIAL_ANNUAL_RATE
    material_improvement_pct: int = MATERIAL_IMPROVEMENT_PCT

    # Pricing
    price_max_staleness: int = PRICE_MAX_STALENESS

    def __post_init__(self) -> None:
        if self.snapshot_interval <= 0:
            raise ValueError(f"snapshot_interval must be positive, got {self.snapshot_interval}")
        if self.max_credits <= 0:
            raise ValueError(f"max_credits must be positive, got {self.max_credits}")
        if not 0 <= self.change_threshold_pct <= 100:
            raise ValueError(
                f"change_threshold_pct must be within [0, 100], got {self.change_threshold_pct}"
            )
        if self.material_improvement_pct < 0:
            raise ValueError(
                f"material_improvement_pct must be non-negative, got {self.material_improvement_pct}"
            )

    def exceeds_change_threshold(self, current: int, reference: int) -> bool:
        """
        Whether current differs from reference by more than change_threshold_pct.

        A zero reference counts any non-zero current as a change.
        """
        if reference == 0:
            return current != 0
        return abs(current - reference) * 100 > reference * self.change_threshold_pct

    def improved_materially(self, current: int, reference: int) -> bool:
        """
        Whether current is more than material_improvement_pct above reference.

        Any positive value is a material improvement over a zero reference.
        """
        return current * 100 > reference * (100 + self.material_improvement_pct)
