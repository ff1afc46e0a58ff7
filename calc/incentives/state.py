"""
State objects for the incentive calculator.

SnapshotState: per reward pool measurement window and safe total supply
EngineState: credit counter and decay flags, one per calculator
IncentiveRow / StakingIncentiveStats / DexLSTStats: read-side results of current()
IncentiveSnapshotEvent: emitted on every committed snapshot()

Key distinction:
- safe_total_supply is derived from the reward-per-token accrual measured
  over a window, never from a raw total_supply() read
- an open window is last_snapshot_reward_per_token is not None; a measured
  reward-per-token of 0 is a legitimate value
"""

from __future__ import annotations

from copy import copy
from dataclasses import dataclass, field
from typing import Any

# ============================================================================
# PER-POOL SNAPSHOT STATE (mutable)
# ============================================================================


@dataclass
class SnapshotState:
    """
    Measurement state for a single reward pool.

    Created with zero values on first reference. Only the tracker's
    start/restart, finalize and zero-supply transitions change it.
    """

    last_snapshot_timestamp: int = 0
    last_snapshot_reward_per_token: int | None = None  # None = no window open
    last_snapshot_reward_rate: int = 0
    safe_total_supply: int = 0

    @property
    def started(self) -> bool:
        """Whether a measurement window is currently open."""
        return self.last_snapshot_reward_per_token is not None

    def open_window(self, reward_per_token: int, reward_rate: int, now: int) -> None:
        self.last_snapshot_reward_per_token = reward_per_token
        self.last_snapshot_reward_rate = reward_rate
        self.last_snapshot_timestamp = now

    def close_window(self, safe_total_supply: int, now: int) -> None:
        self.safe_total_supply = safe_total_supply
        self.last_snapshot_reward_per_token = None
        self.last_snapshot_timestamp = now


# ============================================================================
# ENGINE STATE (mutable, one per calculator)
# ============================================================================


@dataclass
class EngineState:
    """Credit counter and decay bookkeeping. incentive_credits stays in [0, max_credits]."""

    last_snapshot_total_apr: int = 0
    incentive_credits: int = 0
    last_incentive_timestamp: int = 0
    decay_init_timestamp: int = 0
    decay_state: bool = False

    def copy(self) -> EngineState:
        return copy(self)


# ============================================================================
# EVENTS
# ============================================================================


@dataclass(frozen=True)
class IncentiveSnapshotEvent:
    """Emitted once per committed snapshot()."""

    timestamp: int
    total_apr: int
    incentive_credits: int
    last_incentive_timestamp: int
    decay_state: bool
    decay_init_timestamp: int

    def as_dict(self) -> dict[str, Any]:
        return {
            "timestamp": self.timestamp,
            "total_apr": self.total_apr,
            "incentive_credits": self.incentive_credits,
            "last_incentive_timestamp": self.last_incentive_timestamp,
            "decay_state": self.decay_state,
            "decay_init_timestamp": self.decay_init_timestamp,
        }


# ============================================================================
# READ-SIDE RESULTS (immutable)
# ============================================================================


@dataclass(frozen=True)
class IncentiveRow:
    """One reward stream: main token, platform token, or an extra reward."""

    reward_token: str
    safe_total_supply: int
    annualized_reward_amount: int
    period_finish: int


@dataclass(frozen=True)
class StakingIncentiveStats:
    """
    Incentive view consumed by the rebalancing strategy.

    safe_total_supply is the main rewarder's; per-row supplies are in rows.
    """

    safe_total_supply: int
    incentive_credits: int
    rows: tuple[IncentiveRow, ...] = field(default_factory=tuple)

    @property
    def reward_tokens(self) -> list[str]:
        return [row.reward_token for row in self.rows]

    @property
    def annualized_reward_amounts(self) -> list[int]:
        return [row.annualized_reward_amount for row in self.rows]

    @property
    def period_finish_for_rewards(self) -> list[int]:
        return [row.period_finish for row in self.rows]


@dataclass(frozen=True)
class DexLSTStats:
    """Underlyer stats passed through untouched, merged with the incentive view."""

    underlyer: Any
    staking_incentive_stats: StakingIncentiveStats
