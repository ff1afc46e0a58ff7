"""
Offline replay of reward pool observations through an incentive calculator.

Each row of the observation table is one keeper tick:

    timestamp, reward_rate, total_supply, period_finish, reward_price, lp_price
    [reward_per_token]   measured value; accrued from the previous row if absent
    [platform_supply]    platform token total supply (drives the mint cliff)
    [platform_price]     platform token price, defaults to 0

At every tick the calculator snapshots only when should_snapshot() is true,
exactly as the on-chain keeper does, and the committed events are returned.

Usage:
    frame = load_observations("observations.csv")
    result = replay_observations(frame, family="convex")
    result.events.to_frame().to_csv("credits.csv", index=False)
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from decimal import Decimal
from pathlib import Path

import pandas as pd

from .calculator import IncentiveCalculator, IncentiveInitData
from .config import IncentiveConfig
from .events import EventLog
from .families import AuraRewardFamily, ConvexRewardFamily, RewardFamily
from .static import (
    ManualClock,
    StaticErc20,
    StaticPriceOracle,
    StaticPricing,
    StaticRewardPool,
    StaticUnderlyerStats,
    lookup,
)

logger = logging.getLogger(__name__)

REQUIRED_COLUMNS = (
    "timestamp",
    "reward_rate",
    "total_supply",
    "period_finish",
    "reward_price",
    "lp_price",
)

REPLAY_REWARDER = "0x00000000000000000000000000000000000000a1"
REPLAY_REWARD_TOKEN = "0x00000000000000000000000000000000000000b1"
REPLAY_PLATFORM_TOKEN = "0x00000000000000000000000000000000000000c1"
REPLAY_LP_TOKEN = "0x00000000000000000000000000000000000000d1"


@dataclass
class ReplayResult:
    calculator: IncentiveCalculator
    events: EventLog
    ticks: int
    snapshots: int


def _to_int(value) -> int:
    """Exact int from CSV text or numbers, including '1e22' style values."""
    return int(Decimal(str(value)))


def load_observations(path: str | Path) -> pd.DataFrame:
    """Read an observation CSV as text so wei-scale values keep full precision."""
    frame = pd.read_csv(path, dtype=str)
    missing = [c for c in REQUIRED_COLUMNS if c not in frame.columns]
    if missing:
        raise ValueError(f"Observation file {path} is missing columns: {missing}")
    return frame


def _build_family(name: str, platform: StaticErc20) -> RewardFamily:
    erc20_at = lookup({platform.address: platform})
    stash_at = lookup({})
    if name == "convex":
        return ConvexRewardFamily(erc20_at=erc20_at, stash_at=stash_at)
    if name == "aura":
        return AuraRewardFamily(erc20_at=erc20_at, stash_at=stash_at)
    raise ValueError(f"Unknown reward family: {name!r} (expected 'convex' or 'aura')")


def replay_observations(
    frame: pd.DataFrame,
    family: str = "convex",
    config: IncentiveConfig | None = None,
) -> ReplayResult:
    """
    Drive a fresh calculator through `frame` and collect committed snapshots.

    The calculator is initialized at the first row's timestamp.
    """
    missing = [c for c in REQUIRED_COLUMNS if c not in frame.columns]
    if missing:
        raise ValueError(f"Observation frame is missing columns: {missing}")
    if frame.empty:
        raise ValueError("Observation frame is empty")

    has_rpt = "reward_per_token" in frame.columns
    has_platform_supply = "platform_supply" in frame.columns
    has_platform_price = "platform_price" in frame.columns

    rows = frame.to_dict("records")
    clock = ManualClock(_to_int(rows[0]["timestamp"]))

    pool = StaticRewardPool(address=REPLAY_REWARDER, token=REPLAY_REWARD_TOKEN)
    platform = StaticErc20(REPLAY_PLATFORM_TOKEN)
    oracle = StaticPriceOracle()
    pricing = StaticPricing(clock)

    calculator = IncentiveCalculator(
        family=_build_family(family, platform),
        price_oracle=oracle,
        pricing=pricing,
        config=config,
        clock=clock,
    )
    calculator.initialize(
        [],
        IncentiveInitData(
            rewarder=pool,
            underlyer_stats=StaticUnderlyerStats(REPLAY_LP_TOKEN),
            platform_token=REPLAY_PLATFORM_TOKEN,
        ),
    )

    snapshots = 0
    for row in rows:
        timestamp = _to_int(row["timestamp"])
        elapsed = timestamp - clock.now
        clock.set(timestamp)

        if has_rpt:
            pool.rpt = _to_int(row["reward_per_token"])
        else:
            pool.accrue(elapsed)

        pool.rate = _to_int(row["reward_rate"])
        pool.supply = _to_int(row["total_supply"])
        pool.finish = _to_int(row["period_finish"])
        if has_platform_supply:
            platform.supply = _to_int(row["platform_supply"])

        oracle.set_price(REPLAY_LP_TOKEN, _to_int(row["lp_price"]))
        pricing.set_price(REPLAY_REWARD_TOKEN, _to_int(row["reward_price"]))
        platform_price = _to_int(row["platform_price"]) if has_platform_price else 0
        pricing.set_price(REPLAY_PLATFORM_TOKEN, platform_price)

        if calculator.should_snapshot():
            calculator.snapshot()
            snapshots += 1

    logger.info("Replayed %d ticks, %d snapshots committed", len(rows), snapshots)
    return ReplayResult(
        calculator=calculator,
        events=calculator.events,
        ticks=len(rows),
        snapshots=snapshots,
    )
