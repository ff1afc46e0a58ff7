"""
Incentive credit state machine.

Credits are a slow confidence signal that a pool keeps paying non-trivial
incentives. They accrue by the day and decay by the hour:

    Accruing:  apr >= threshold, credits < max, >= 1 day since last accrual
               credits += credits_per_day * whole_days (capped)
    Steady:    apr >= threshold otherwise, only clears decay_state
    Decaying:  apr < threshold; first call arms decay, later calls subtract
               one credit per whole hour since decay_init_timestamp

Leaving Decaying costs nothing beyond what already decayed.

current() shows decay speculatively: the pending whole hours are subtracted
for display while the live APR stays within material_improvement_pct of the
last persisted APR and below the threshold.
"""

from __future__ import annotations

from enum import Enum

from .config import SECONDS_IN_DAY, SECONDS_IN_HOUR, IncentiveConfig
from .state import EngineState, IncentiveSnapshotEvent


class CreditPhase(Enum):
    ACCRUING = "accruing"
    STEADY = "steady"
    DECAYING = "decaying"


class CreditDecayEngine:
    """Applies one credit transition per snapshot to an EngineState."""

    def __init__(self, config: IncentiveConfig | None = None):
        self.config = config or IncentiveConfig()

    def phase_for(self, state: EngineState, apr: int, now: int) -> CreditPhase:
        cfg = self.config
        if apr < cfg.non_trivial_annual_rate:
            return CreditPhase.DECAYING
        if (
            state.incentive_credits < cfg.max_credits
            and now - state.last_incentive_timestamp >= SECONDS_IN_DAY
        ):
            return CreditPhase.ACCRUING
        return CreditPhase.STEADY

    def update(self, state: EngineState, apr: int, now: int) -> IncentiveSnapshotEvent:
        """Mutate state for a snapshot at `now` with total APR `apr`."""
        cfg = self.config
        phase = self.phase_for(state, apr, now)

        if phase is CreditPhase.ACCRUING:
            days = (now - state.last_incentive_timestamp) // SECONDS_IN_DAY
            state.incentive_credits = min(
                cfg.max_credits, state.incentive_credits + cfg.credits_per_day * days
            )
            state.last_incentive_timestamp = now
            state.decay_state = False

        elif phase is CreditPhase.STEADY:
            state.decay_state = False

        else:
            if not state.decay_state:
                state.decay_state = True
                state.decay_init_timestamp = now
            else:
                hours_passed = (now - state.decay_init_timestamp) // SECONDS_IN_HOUR
                if hours_passed > 0:
                    state.incentive_credits = max(0, state.incentive_credits - hours_passed)
                    state.decay_init_timestamp = now
            state.last_incentive_timestamp = now

        state.last_snapshot_total_apr = apr

        return IncentiveSnapshotEvent(
            timestamp=now,
            total_apr=apr,
            incentive_credits=state.incentive_credits,
            last_incentive_timestamp=state.last_incentive_timestamp,
            decay_state=state.decay_state,
            decay_init_timestamp=state.decay_init_timestamp,
        )

    def speculative_credits(self, state: EngineState, apr: int, now: int) -> int:
        """
        Credits as current() displays them. Does not mutate state.

        While decay is armed, whole hours since decay_init_timestamp are
        subtracted unless apr has improved materially over the APR persisted
        by the last snapshot. An apr back at the threshold always shows the
        persisted value, since the next snapshot would clear decay.
        """
        cfg = self.config
        credits = state.incentive_credits
        if not state.decay_state:
            return credits
        if apr >= cfg.non_trivial_annual_rate:
            return credits
        if cfg.improved_materially(apr, state.last_snapshot_total_apr):
            return credits

        hours_passed = max(0, now - state.decay_init_timestamp) // SECONDS_IN_HOUR
        return max(0, credits - hours_passed)
