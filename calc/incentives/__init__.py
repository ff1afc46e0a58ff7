"""
Incentive Calculator: staking incentive APR, safe supply and credit tracking.

For one reward program (a Convex/Aura rewarder plus its extra reward pools)
the calculator:
- measures a flash-deposit resistant "safe total supply" per pool over
  4-hour windows of reward-per-token accrual
- aggregates the annualized incentive rate across main, platform and extra
  reward rows
- maintains bounded incentive credits (0..48) that accrue daily while the
  APR is non-trivial and decay hourly once it is not

Core workflow:
    >>> from incentives import (
    ...     ConvexRewardFamily, IncentiveCalculator, IncentiveInitData,
    ... )
    >>> from incentives.evm import RpcConvexStashToken, RpcErc20, RpcRewardPool
    >>>
    >>> family = ConvexRewardFamily(erc20_at=RpcErc20, stash_at=RpcConvexStashToken)
    >>> calc = IncentiveCalculator(family=family, price_oracle=oracle, pricing=pricing)
    >>> calc.initialize([], IncentiveInitData(RpcRewardPool(REWARDER), stats, CVX))
    >>> if calc.should_snapshot():
    ...     calc.snapshot()
    >>> calc.current().staking_incentive_stats.incentive_credits
"""

from .apr import AprAggregator
from .calculator import IncentiveCalculator, IncentiveInitData
from .config import (
    MAX_CREDITS,
    NON_TRIVIAL_ANNUAL_RATE,
    SECONDS_IN_YEAR,
    SNAPSHOT_INTERVAL,
    ZERO_ADDRESS,
    IncentiveConfig,
)
from .credits import CreditDecayEngine, CreditPhase
from .errors import (
    ConfigurationError,
    ExternalDependencyError,
    IncentiveCalculatorError,
    RpcError,
    SnapshotInvariantError,
    StalePriceError,
)
from .events import EventLog
from .families import AuraRewardFamily, ConvexRewardFamily, RewardFamily
from .replay import ReplayResult, load_observations, replay_observations
from .snapshot import RewardPoolSnapshotTracker, SnapshotStatus, classify_snapshot_status
from .state import (
    DexLSTStats,
    EngineState,
    IncentiveRow,
    IncentiveSnapshotEvent,
    SnapshotState,
    StakingIncentiveStats,
)

__all__ = [
    # Config
    "IncentiveConfig",
    "MAX_CREDITS",
    "NON_TRIVIAL_ANNUAL_RATE",
    "SECONDS_IN_YEAR",
    "SNAPSHOT_INTERVAL",
    "ZERO_ADDRESS",
    # State
    "SnapshotState",
    "EngineState",
    "IncentiveRow",
    "StakingIncentiveStats",
    "DexLSTStats",
    "IncentiveSnapshotEvent",
    # Snapshot tracking
    "SnapshotStatus",
    "classify_snapshot_status",
    "RewardPoolSnapshotTracker",
    # APR
    "AprAggregator",
    # Credits
    "CreditDecayEngine",
    "CreditPhase",
    # Families
    "RewardFamily",
    "ConvexRewardFamily",
    "AuraRewardFamily",
    # Calculator
    "IncentiveCalculator",
    "IncentiveInitData",
    "EventLog",
    # Replay
    "ReplayResult",
    "load_observations",
    "replay_observations",
    # Errors
    "IncentiveCalculatorError",
    "ConfigurationError",
    "SnapshotInvariantError",
    "ExternalDependencyError",
    "StalePriceError",
    "RpcError",
]
