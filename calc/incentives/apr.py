"""
Aggregate incentive APR across a reward program.

A program contributes three kinds of rows:
- main:     the rewarder's own reward token (CRV / BAL)
- platform: platform token minted alongside the main reward (CVX / AURA),
            same supply and period as main, rate from the reward family
- extra:    each extra reward pool whose token resolves to non-zero

Per row:
    apr = rate * SECONDS_IN_YEAR * price * 1e18 / (safe_total_supply * lp_price)

with price = min(fast, slow) from the incentive pricing oracle, so a
short-lived price spike never inflates the rate. Rows whose period has
finished or whose rate is zero contribute 0 without touching the oracle.
"""

from __future__ import annotations

from collections.abc import Iterator

from .config import SECONDS_IN_YEAR, WAD, IncentiveConfig, is_zero_address
from .families import RewardFamily
from .interfaces import IncentivePricing, PriceOracle, RewardPool
from .snapshot import RewardPoolSnapshotTracker
from .state import IncentiveRow


def pool_stats(pool: RewardPool) -> tuple[int, int, int]:
    """(reward_rate, total_supply, period_finish) for a pool."""
    return pool.reward_rate(), pool.total_supply(), pool.period_finish()


class AprAggregator:
    """
    Computes the total APR of one reward program.

    Holds no mutable state of its own: safe supplies live in the tracker
    passed to each call, so the calculator can hand in a working copy.
    """

    def __init__(
        self,
        rewarder: RewardPool,
        family: RewardFamily,
        platform_token: str,
        lp_token: str,
        price_oracle: PriceOracle,
        pricing: IncentivePricing,
        config: IncentiveConfig | None = None,
    ):
        self.rewarder = rewarder
        self.family = family
        self.platform_token = platform_token
        self.lp_token = lp_token
        self.price_oracle = price_oracle
        self.pricing = pricing
        self.config = config or IncentiveConfig()

    # ------------------------------------------------------------------
    # Pool walking
    # ------------------------------------------------------------------

    def resolved_extras(self) -> Iterator[tuple[RewardPool, str]]:
        """Yield (extra_pool, reward_token) for extras with a usable token."""
        for i in range(self.rewarder.extra_rewards_length()):
            extra = self.rewarder.extra_rewards(i)
            token = self.family.resolve_reward_token(self.rewarder, extra)
            if not is_zero_address(token):
                yield extra, token

    def _snapshot_if_due(
        self,
        tracker: RewardPoolSnapshotTracker,
        pool: RewardPool,
        rate: int,
        total_supply: int,
        period_finish: int,
        now: int,
    ) -> None:
        if tracker.should_snapshot_pool(pool, rate, period_finish, total_supply, now):
            tracker.snapshot_pool(pool, total_supply, rate, now)

    def should_snapshot(self, tracker: RewardPoolSnapshotTracker, now: int) -> bool:
        """Whether the main pool or any resolved extra pool is due. Never mutates."""
        rate, total_supply, period_finish = pool_stats(self.rewarder)
        if tracker.should_snapshot_pool(self.rewarder, rate, period_finish, total_supply, now):
            return True

        for extra, _ in self.resolved_extras():
            rate, total_supply, period_finish = pool_stats(extra)
            if tracker.should_snapshot_pool(extra, rate, period_finish, total_supply, now):
                return True

        return False

    # ------------------------------------------------------------------
    # APR
    # ------------------------------------------------------------------

    def compute_apr(
        self,
        tracker: RewardPoolSnapshotTracker,
        pool: RewardPool,
        lp_price: int,
        token: str,
        rate: int,
        period_finish: int,
        now: int,
    ) -> int:
        """APR (1e18-scaled) of one reward row. 0 until a safe supply exists."""
        if now > period_finish or rate == 0:
            return 0

        fast, slow = self.pricing.get_price(token, self.config.price_max_staleness)
        price = min(fast, slow)

        denominator = tracker.safe_total_supply(pool) * lp_price
        if denominator == 0:
            return 0

        return rate * SECONDS_IN_YEAR * price * WAD // denominator

    def compute_total_apr(
        self,
        tracker: RewardPoolSnapshotTracker,
        now: int,
        snapshot: bool = True,
    ) -> int:
        """
        Sum of row APRs.

        With snapshot=True each pool is snapshotted (if due) before its own
        APR is computed, so a finalize in this pass is already reflected.
        With snapshot=False the tracker is only read.
        """
        rewarder = self.rewarder
        rate, total_supply, period_finish = pool_stats(rewarder)
        if snapshot:
            self._snapshot_if_due(tracker, rewarder, rate, total_supply, period_finish, now)

        lp_price = self.price_oracle.get_price_in_eth(self.lp_token)

        total = self.compute_apr(
            tracker, rewarder, lp_price, rewarder.reward_token(), rate, period_finish, now
        )

        platform_rate = self.family.platform_mint_amount(self.platform_token, rate)
        total += self.compute_apr(
            tracker, rewarder, lp_price, self.platform_token, platform_rate, period_finish, now
        )

        for extra, token in self.resolved_extras():
            extra_rate, extra_supply, extra_finish = pool_stats(extra)
            if snapshot:
                self._snapshot_if_due(tracker, extra, extra_rate, extra_supply, extra_finish, now)
            total += self.compute_apr(
                tracker, extra, lp_price, token, extra_rate, extra_finish, now
            )

        return total

    # ------------------------------------------------------------------
    # Read-side rows
    # ------------------------------------------------------------------

    def rows(self, tracker: RewardPoolSnapshotTracker) -> list[IncentiveRow]:
        """Main, platform and resolved extra rows from persisted safe supplies."""
        rewarder = self.rewarder
        rate, _, period_finish = pool_stats(rewarder)
        main_supply = tracker.safe_total_supply(rewarder)
        annualized = rate * SECONDS_IN_YEAR

        rows = [
            IncentiveRow(rewarder.reward_token(), main_supply, annualized, period_finish),
            IncentiveRow(
                self.platform_token,
                main_supply,
                self.family.platform_mint_amount(self.platform_token, annualized),
                period_finish,
            ),
        ]

        for extra, token in self.resolved_extras():
            extra_rate, _, extra_finish = pool_stats(extra)
            rows.append(
                IncentiveRow(
                    token,
                    tracker.safe_total_supply(extra),
                    extra_rate * SECONDS_IN_YEAR,
                    extra_finish,
                )
            )

        return rows
