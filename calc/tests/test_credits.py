"""
Tests for the incentive credit state machine.
"""

import numpy as np
from incentives.config import NON_TRIVIAL_ANNUAL_RATE, IncentiveConfig
from incentives.credits import CreditDecayEngine, CreditPhase
from incentives.state import EngineState

T0 = 1_700_000_000
DAY = 86_400
HOUR = 3_600

HIGH = NON_TRIVIAL_ANNUAL_RATE
LOW = NON_TRIVIAL_ANNUAL_RATE - 1


def fresh_state(credits: int = 0, now: int = T0) -> EngineState:
    return EngineState(
        incentive_credits=credits,
        last_incentive_timestamp=now,
        decay_init_timestamp=now,
    )


# ============================================================================
# ACCRUAL
# ============================================================================


class TestAccrual:
    def test_three_days_at_threshold(self):
        """APR exactly at the threshold for 3 daily snapshots → 6 credits."""
        engine = CreditDecayEngine()
        state = fresh_state()
        for day in range(1, 4):
            event = engine.update(state, HIGH, T0 + day * DAY)
        assert state.incentive_credits == 6
        assert event.incentive_credits == 6
        assert event.decay_state is False

    def test_multiple_days_in_one_step(self):
        engine = CreditDecayEngine()
        state = fresh_state()
        engine.update(state, HIGH, T0 + 3 * DAY + HOUR)
        assert state.incentive_credits == 6
        assert state.last_incentive_timestamp == T0 + 3 * DAY + HOUR

    def test_less_than_a_day_is_steady(self):
        engine = CreditDecayEngine()
        state = fresh_state()
        assert engine.phase_for(state, HIGH, T0 + DAY - 1) is CreditPhase.STEADY
        engine.update(state, HIGH, T0 + DAY - 1)
        assert state.incentive_credits == 0
        assert state.last_incentive_timestamp == T0

    def test_cap(self):
        engine = CreditDecayEngine()
        state = fresh_state(credits=47)
        engine.update(state, HIGH, T0 + 5 * DAY)
        assert state.incentive_credits == 48

    def test_repeated_daily_accrual_never_exceeds_cap(self):
        engine = CreditDecayEngine()
        state = fresh_state()
        for day in range(1, 60):
            engine.update(state, HIGH + day, T0 + day * DAY)
            assert state.incentive_credits <= 48
        assert state.incentive_credits == 48

    def test_full_credits_are_steady(self):
        engine = CreditDecayEngine()
        state = fresh_state(credits=48)
        assert engine.phase_for(state, HIGH, T0 + 10 * DAY) is CreditPhase.STEADY
        engine.update(state, HIGH, T0 + 10 * DAY)
        assert state.last_incentive_timestamp == T0

    def test_custom_config(self):
        engine = CreditDecayEngine(IncentiveConfig(max_credits=10, credits_per_day=4))
        state = fresh_state()
        engine.update(state, HIGH, T0 + 2 * DAY)
        assert state.incentive_credits == 8
        engine.update(state, HIGH, T0 + 4 * DAY)
        assert state.incentive_credits == 10


# ============================================================================
# DECAY
# ============================================================================


class TestDecay:
    def test_first_low_snapshot_arms_decay(self):
        engine = CreditDecayEngine()
        state = fresh_state(credits=10)
        event = engine.update(state, LOW, T0 + 5 * HOUR)
        assert state.decay_state is True
        assert state.decay_init_timestamp == T0 + 5 * HOUR
        assert state.last_incentive_timestamp == T0 + 5 * HOUR
        assert state.incentive_credits == 10
        assert event.decay_state is True

    def test_thirty_hourly_snapshots(self):
        """10 credits drain to 0 and stay there."""
        engine = CreditDecayEngine()
        state = fresh_state(credits=10)
        for hour in range(1, 31):
            engine.update(state, 0, T0 + hour * HOUR)
            assert 0 <= state.incentive_credits <= 10
        assert state.incentive_credits == 0
        engine.update(state, 0, T0 + 40 * HOUR)
        assert state.incentive_credits == 0
        assert state.decay_state is True

    def test_partial_hour_keeps_decay_init(self):
        engine = CreditDecayEngine()
        state = fresh_state(credits=10)
        engine.update(state, LOW, T0)
        engine.update(state, LOW, T0 + HOUR - 1)
        assert state.incentive_credits == 10
        assert state.decay_init_timestamp == T0
        assert state.last_incentive_timestamp == T0 + HOUR - 1

    def test_monotonic_decay_over_whole_hours(self):
        """Across a decay run of H hours: credits == max(0, initial - H)."""
        rng = np.random.RandomState(11)
        engine = CreditDecayEngine()
        for _ in range(30):
            initial = int(rng.randint(0, 49))
            state = fresh_state(credits=initial)
            engine.update(state, LOW, T0)  # arm

            now = T0
            hours = 0
            previous = initial
            for _ in range(int(rng.randint(1, 15))):
                step = int(rng.randint(0, 6))
                now += step * HOUR
                hours += step
                engine.update(state, int(rng.randint(0, LOW, dtype=np.int64)), now)
                assert state.incentive_credits <= previous
                previous = state.incentive_credits
            assert state.incentive_credits == max(0, initial - hours)

    def test_recovery_clears_decay_without_penalty(self):
        engine = CreditDecayEngine()
        state = fresh_state(credits=20)
        engine.update(state, LOW, T0 + HOUR)
        engine.update(state, LOW, T0 + 4 * HOUR)
        assert state.incentive_credits == 17

        engine.update(state, HIGH, T0 + 5 * HOUR)
        assert state.decay_state is False
        assert state.incentive_credits == 17

    def test_last_snapshot_total_apr_recorded(self):
        engine = CreditDecayEngine()
        state = fresh_state()
        engine.update(state, 123, T0 + 1)
        assert state.last_snapshot_total_apr == 123
        engine.update(state, HIGH, T0 + 2)
        assert state.last_snapshot_total_apr == HIGH


# ============================================================================
# SPECULATIVE DECAY (current() path)
# ============================================================================


class TestSpeculativeCredits:
    def test_no_decay_when_not_armed(self):
        engine = CreditDecayEngine()
        state = fresh_state(credits=12)
        assert engine.speculative_credits(state, 0, T0 + 10 * HOUR) == 12

    def test_applies_pending_hours(self):
        engine = CreditDecayEngine()
        state = fresh_state(credits=12)
        engine.update(state, LOW, T0)
        assert engine.speculative_credits(state, LOW, T0 + 5 * HOUR + 59) == 7
        assert engine.speculative_credits(state, LOW, T0 + 20 * HOUR) == 0

    def test_does_not_persist(self):
        engine = CreditDecayEngine()
        state = fresh_state(credits=12)
        engine.update(state, LOW, T0)
        before = state.copy()
        engine.speculative_credits(state, LOW, T0 + 5 * HOUR)
        assert state == before

    def test_recovered_apr_shows_persisted_value(self):
        engine = CreditDecayEngine()
        state = fresh_state(credits=12)
        engine.update(state, LOW, T0)
        assert engine.speculative_credits(state, HIGH, T0 + 5 * HOUR) == 12

    def test_material_improvement_below_threshold_shows_persisted_value(self):
        """APR 500x over the persisted value but still under the threshold."""
        engine = CreditDecayEngine()
        state = fresh_state(credits=20)
        engine.update(state, 10**13, T0)
        assert engine.speculative_credits(state, LOW, T0 + 10 * HOUR) == 20

    def test_small_improvement_keeps_decaying(self):
        engine = CreditDecayEngine()
        state = fresh_state(credits=20)
        engine.update(state, 10**13, T0)
        # +10% is the margin itself, not above it
        assert engine.speculative_credits(state, 11 * 10**12, T0 + 10 * HOUR) == 10
        assert engine.speculative_credits(state, 11 * 10**12 + 1, T0 + 10 * HOUR) == 20

    def test_lower_apr_keeps_decaying(self):
        engine = CreditDecayEngine()
        state = fresh_state(credits=20)
        engine.update(state, 10**13, T0)
        assert engine.speculative_credits(state, 0, T0 + 10 * HOUR) == 10

    def test_custom_margin(self):
        engine = CreditDecayEngine(IncentiveConfig(material_improvement_pct=1000))
        state = fresh_state(credits=20)
        engine.update(state, 10**13, T0)
        assert engine.speculative_credits(state, 10 * 10**13, T0 + 10 * HOUR) == 10
        assert engine.speculative_credits(state, 12 * 10**13, T0 + 10 * HOUR) == 20

    def test_bounded(self):
        rng = np.random.RandomState(3)
        engine = CreditDecayEngine()
        for _ in range(100):
            state = fresh_state(credits=int(rng.randint(0, 49)))
            state.decay_state = bool(rng.randint(0, 2))
            value = engine.speculative_credits(
                state, int(rng.randint(0, 2 * HIGH, dtype=np.int64)), T0 + int(rng.randint(0, 100 * HOUR))
            )
            assert 0 <= value <= state.incentive_credits
