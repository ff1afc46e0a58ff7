"""
Incentive calculator: public lifecycle for one reward program.

    calc = IncentiveCalculator(family=ConvexRewardFamily(...), price_oracle=..., pricing=...)
    calc.initialize([], IncentiveInitData(rewarder, underlyer_stats, platform_token))

    if calc.should_snapshot():     # keeper decides whether to pay for a snapshot
        calc.snapshot()            # measure pools, update credits, emit event
    stats = calc.current()         # strategy read, never mutates

snapshot() is all-or-nothing: it runs against a forked tracker and a copy
of the engine state and commits both only after the whole pass succeeded.
Any collaborator failure propagates and leaves persisted state untouched.

current() and snapshot() intentionally disagree on credits while decay is
armed: snapshot() persists whole-hour decay, current() shows the decay that
the next snapshot would apply without writing it.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Callable, Sequence
from dataclasses import dataclass

from eth_utils import keccak, to_canonical_address, to_checksum_address

from .apr import AprAggregator
from .config import APR_ID_PREFIX, IncentiveConfig, is_zero_address
from .credits import CreditDecayEngine
from .errors import ConfigurationError
from .events import EventLog
from .families import RewardFamily
from .interfaces import IncentivePricing, PriceOracle, RewardPool, UnderlyerStats
from .snapshot import RewardPoolSnapshotTracker
from .state import (
    DexLSTStats,
    EngineState,
    IncentiveSnapshotEvent,
    SnapshotState,
    StakingIncentiveStats,
)

logger = logging.getLogger(__name__)


def wall_clock() -> int:
    return int(time.time())


@dataclass(frozen=True)
class IncentiveInitData:
    rewarder: RewardPool
    underlyer_stats: UnderlyerStats
    platform_token: str


class IncentiveCalculator:
    """Snapshot/APR/credit engine for one rewarder and its extra reward pools."""

    def __init__(
        self,
        family: RewardFamily,
        price_oracle: PriceOracle,
        pricing: IncentivePricing,
        config: IncentiveConfig | None = None,
        clock: Callable[[], int] | None = None,
        event_log: EventLog | None = None,
    ):
        self.config = config or IncentiveConfig()
        self.family = family
        self.price_oracle = price_oracle
        self.pricing = pricing
        self.clock = clock or wall_clock
        self.events = event_log if event_log is not None else EventLog()

        self.tracker = RewardPoolSnapshotTracker(self.config)
        self.credit_engine = CreditDecayEngine(self.config)

        self.engine_state: EngineState | None = None
        self.aggregator: AprAggregator | None = None
        self.underlyer_stats: UnderlyerStats | None = None
        self.dependent_apr_ids: tuple[str, ...] = ()
        self._address_id = ""
        self._apr_id = ""

    # ========================================================================
    # SETUP
    # ========================================================================

    @property
    def initialized(self) -> bool:
        return self.engine_state is not None

    def initialize(self, dependent_apr_ids: Sequence[str], init_data: IncentiveInitData) -> None:
        """One-time setup. Raises ConfigurationError on reuse or missing collaborators."""
        if self.initialized:
            raise ConfigurationError("Incentive calculator is already initialized")

        rewarder = init_data.rewarder
        if rewarder is None or is_zero_address(getattr(rewarder, "address", None)):
            raise ConfigurationError("rewarder must be a non-zero address")
        if init_data.underlyer_stats is None:
            raise ConfigurationError("underlyer_stats must be provided")
        if is_zero_address(init_data.platform_token):
            raise ConfigurationError("platform_token must be a non-zero address")

        lp_token = init_data.underlyer_stats.lp_token()
        if is_zero_address(lp_token):
            raise ConfigurationError("underlyer_stats reported a zero lp token")

        try:
            address_id = to_checksum_address(rewarder.address)
            apr_id = "0x" + keccak(
                APR_ID_PREFIX.encode()
                + to_canonical_address(init_data.platform_token)
                + to_canonical_address(rewarder.address)
            ).hex()
        except (ValueError, TypeError) as e:
            raise ConfigurationError(f"Malformed rewarder or platform token address: {e}") from e

        now = self.clock()

        self.underlyer_stats = init_data.underlyer_stats
        self.dependent_apr_ids = tuple(dependent_apr_ids)
        self.aggregator = AprAggregator(
            rewarder=rewarder,
            family=self.family,
            platform_token=init_data.platform_token,
            lp_token=lp_token,
            price_oracle=self.price_oracle,
            pricing=self.pricing,
            config=self.config,
        )
        self._address_id = address_id
        self._apr_id = apr_id
        self.engine_state = EngineState(
            last_incentive_timestamp=now,
            decay_init_timestamp=now,
        )

        logger.info(
            "Initialized %s incentive calculator for rewarder %s (apr id %s)",
            self.family.name,
            self._address_id,
            self._apr_id,
        )

    def _require_initialized(self) -> None:
        if not self.initialized:
            raise ConfigurationError("Incentive calculator is not initialized")

    # ========================================================================
    # IDENTITY
    # ========================================================================

    def get_address_id(self) -> str:
        self._require_initialized()
        return self._address_id

    def get_apr_id(self) -> str:
        self._require_initialized()
        return self._apr_id

    @property
    def rewarder(self) -> RewardPool:
        self._require_initialized()
        return self.aggregator.rewarder

    @property
    def incentive_credits(self) -> int:
        """Persisted credits (no speculative decay)."""
        self._require_initialized()
        return self.engine_state.incentive_credits

    def snapshot_state(self, pool: RewardPool | str) -> SnapshotState:
        """Copy of the persisted SnapshotState of a pool."""
        state = self.tracker.peek(pool)
        return SnapshotState(
            last_snapshot_timestamp=state.last_snapshot_timestamp,
            last_snapshot_reward_per_token=state.last_snapshot_reward_per_token,
            last_snapshot_reward_rate=state.last_snapshot_reward_rate,
            safe_total_supply=state.safe_total_supply,
        )

    def safe_total_supply(self, pool: RewardPool | str) -> int:
        return self.tracker.safe_total_supply(pool)

    # ========================================================================
    # LIFECYCLE
    # ========================================================================

    def should_snapshot(self) -> bool:
        """Whether any tracked pool is due. Read-only."""
        self._require_initialized()
        return self.aggregator.should_snapshot(self.tracker, self.clock())

    def snapshot(self) -> IncentiveSnapshotEvent:
        """Measure due pools, recompute the total APR and update credits."""
        self._require_initialized()
        now = self.clock()

        tracker = self.tracker.fork()
        state = self.engine_state.copy()
        try:
            apr = self.aggregator.compute_total_apr(tracker, now, snapshot=True)
            event = self.credit_engine.update(state, apr, now)
        except Exception:
            logger.warning("Incentive snapshot at %d aborted, nothing committed", now)
            raise

        self.tracker = tracker
        self.engine_state = state
        self.events.add(event)

        logger.info(
            "Incentive snapshot: apr=%d credits=%d decay=%s",
            event.total_apr,
            event.incentive_credits,
            event.decay_state,
        )
        return event

    def current(self) -> DexLSTStats:
        """
        Canonical read for the rebalancing strategy.

        Never touches persisted snapshot state. Credits include speculative
        decay while decay is armed and the APR has not recovered.
        """
        self._require_initialized()
        now = self.clock()

        underlyer = self.underlyer_stats.current()
        apr = self.aggregator.compute_total_apr(self.tracker, now, snapshot=False)
        credits = self.credit_engine.speculative_credits(self.engine_state, apr, now)
        rows = self.aggregator.rows(self.tracker)

        stats = StakingIncentiveStats(
            safe_total_supply=self.tracker.safe_total_supply(self.aggregator.rewarder),
            incentive_credits=credits,
            rows=tuple(rows),
        )
        return DexLSTStats(underlyer=underlyer, staking_incentive_stats=stats)
