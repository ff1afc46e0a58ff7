"""
Safe total supply tracking for reward pools.

A naive total_supply() read can be inflated for a single block by a flash
deposit. Instead, each pool is measured over a window of at least
snapshot_interval seconds:

    start:    record reward_per_token R0 and reward_rate r at t0
    finalize: R1 at t1, safe_total_supply = r * (t1 - t0) * 1e18 / (R1 - R0)

which inverts the accrual rule reward_per_token += dt * rate * 1e18 / supply.
A rate change inside the window invalidates the measurement and restarts it.
"""

from __future__ import annotations

import logging
from copy import copy
from enum import Enum

from .config import WAD, IncentiveConfig
from .errors import SnapshotInvariantError
from .interfaces import RewardPool
from .state import SnapshotState

logger = logging.getLogger(__name__)


# ============================================================================
# STATUS CLASSIFICATION (pure)
# ============================================================================


class SnapshotStatus(Enum):
    NO_SNAPSHOT = "no_snapshot"
    TOO_SOON = "too_soon"
    SHOULD_RESTART = "should_restart"
    SHOULD_FINALIZE = "should_finalize"


def classify_snapshot_status(
    state: SnapshotState,
    current_reward_rate: int,
    now: int,
    snapshot_interval: int,
) -> SnapshotStatus:
    """
    Classify a pool's measurement window.

    A recorded rate of 0 does not force a restart: it only means the pool
    was just added, so the window is allowed to run to completion.
    """
    if not state.started:
        return SnapshotStatus.NO_SNAPSHOT

    if (
        current_reward_rate != state.last_snapshot_reward_rate
        and state.last_snapshot_reward_rate != 0
    ):
        return SnapshotStatus.SHOULD_RESTART

    if now < state.last_snapshot_timestamp + snapshot_interval:
        return SnapshotStatus.TOO_SOON

    return SnapshotStatus.SHOULD_FINALIZE


# ============================================================================
# TRACKER (mutable, one SnapshotState per pool)
# ============================================================================


class RewardPoolSnapshotTracker:
    """Owns the SnapshotState of every reward pool a calculator has seen."""

    def __init__(self, config: IncentiveConfig | None = None):
        self.config = config or IncentiveConfig()
        self._states: dict[str, SnapshotState] = {}

    @staticmethod
    def _key(pool: RewardPool | str) -> str:
        address = pool if isinstance(pool, str) else pool.address
        return address.lower()

    def state_for(self, pool: RewardPool | str) -> SnapshotState:
        """SnapshotState for a pool, created with zero values on first reference."""
        key = self._key(pool)
        state = self._states.get(key)
        if state is None:
            state = SnapshotState()
            self._states[key] = state
        return state

    def peek(self, pool: RewardPool | str) -> SnapshotState:
        """Read-only view: returns a zero state without registering the pool."""
        return self._states.get(self._key(pool)) or SnapshotState()

    def safe_total_supply(self, pool: RewardPool | str) -> int:
        return self.peek(pool).safe_total_supply

    def fork(self) -> RewardPoolSnapshotTracker:
        """Independent copy used as a working set for an all-or-nothing pass."""
        clone = RewardPoolSnapshotTracker(self.config)
        clone._states = {key: copy(state) for key, state in self._states.items()}
        return clone

    def classify(self, pool: RewardPool | str, current_reward_rate: int, now: int) -> SnapshotStatus:
        return classify_snapshot_status(
            self.peek(pool), current_reward_rate, now, self.config.snapshot_interval
        )

    def should_snapshot_pool(
        self,
        pool: RewardPool | str,
        reward_rate: int,
        period_finish: int,
        total_supply: int,
        now: int,
    ) -> bool:
        """
        Whether pool needs a snapshot transition now.

        Order matters: an open window decides first, then the daily
        freshness floor, then the cheap rate/supply drift checks.
        """
        cfg = self.config
        state = self.peek(pool)
        status = classify_snapshot_status(state, reward_rate, now, cfg.snapshot_interval)

        if status in (SnapshotStatus.SHOULD_FINALIZE, SnapshotStatus.SHOULD_RESTART):
            return True
        if status is SnapshotStatus.TOO_SOON:
            return False

        elapsed = now - state.last_snapshot_timestamp
        if elapsed > cfg.max_snapshot_age:
            return True

        if reward_rate == 0:
            return False
        if now > period_finish:
            return False
        if total_supply == 0:
            return True

        if cfg.exceeds_change_threshold(reward_rate, state.last_snapshot_reward_rate):
            return True

        if (
            cfg.exceeds_change_threshold(total_supply, state.safe_total_supply)
            and elapsed > cfg.supply_recheck_age
        ):
            return True

        return False

    def snapshot_pool(
        self,
        pool: RewardPool,
        total_supply: int,
        reward_rate: int,
        now: int,
    ) -> SnapshotStatus | None:
        """
        Apply one snapshot transition to pool.

        Returns the status that was acted on, or None for the zero-supply
        reset. Raises SnapshotInvariantError for TOO_SOON.
        """
        state = self.state_for(pool)

        if total_supply == 0:
            state.close_window(0, now)
            logger.debug("Pool %s has zero supply, safe supply reset", pool.address)
            return None

        status = classify_snapshot_status(state, reward_rate, now, self.config.snapshot_interval)

        if status in (SnapshotStatus.NO_SNAPSHOT, SnapshotStatus.SHOULD_RESTART):
            reward_per_token = pool.reward_per_token()
            state.open_window(reward_per_token, reward_rate, now)
            logger.debug(
                "Pool %s window %s at %d (rpt=%d, rate=%d)",
                pool.address,
                "started" if status is SnapshotStatus.NO_SNAPSHOT else "restarted",
                now,
                reward_per_token,
                reward_rate,
            )
            return status

        if status is SnapshotStatus.SHOULD_FINALIZE:
            diff = pool.reward_per_token() - state.last_snapshot_reward_per_token
            if diff < 0:
                raise SnapshotInvariantError(
                    f"reward_per_token of pool {pool.address} decreased inside a window"
                )
            elapsed = now - state.last_snapshot_timestamp
            safe_supply = 0 if diff == 0 else reward_rate * elapsed * WAD // diff
            state.close_window(safe_supply, now)
            logger.debug(
                "Pool %s window finalized after %ds, safe supply %d", pool.address, elapsed, safe_supply
            )
            return status

        raise SnapshotInvariantError(
            f"Cannot snapshot pool {pool.address} in status {status.value}"
        )
