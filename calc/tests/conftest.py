"""
Shared fixtures: an in-memory Convex reward program.

Default world:
- rewarder pays 1e16 CRV/sec to 1e22 staked LP, program runs 30 days
- CVX supply 50M (cliff 500 → 0.5 CVX minted per CRV)
- CRV priced (fast=2e15, slow=3e15) ETH, CVX 1e15 ETH, LP 1e18 ETH
"""

from dataclasses import dataclass

import pytest
from incentives.calculator import IncentiveCalculator, IncentiveInitData
from incentives.config import IncentiveConfig
from incentives.families import ConvexRewardFamily
from incentives.static import (
    ManualClock,
    StaticConvexStashToken,
    StaticErc20,
    StaticPriceOracle,
    StaticPricing,
    StaticRewardPool,
    StaticUnderlyerStats,
    lookup,
)

REWARDER = "0x1111111111111111111111111111111111111111"
CRV = "0x2222222222222222222222222222222222222222"
CVX = "0x3333333333333333333333333333333333333333"
LP = "0x4444444444444444444444444444444444444444"

START = 1_700_000_000
DAY = 86_400
HOUR = 3_600


@dataclass
class World:
    clock: ManualClock
    rewarder: StaticRewardPool
    cvx: StaticErc20
    oracle: StaticPriceOracle
    pricing: StaticPricing
    underlyer: StaticUnderlyerStats
    stashes: dict
    family: ConvexRewardFamily
    calculator: IncentiveCalculator

    rewarder_address = REWARDER
    crv = CRV
    cvx_address = CVX
    lp = LP

    def advance(self, seconds: int, accrue: bool = True) -> int:
        """Advance time; reward_per_token of every pool accrues as on-chain."""
        if accrue:
            for pool in [self.rewarder, *self.rewarder.extras]:
                pool.accrue(seconds)
        return self.clock.advance(seconds)

    def refresh_prices(self) -> None:
        self.pricing.touch()

    def add_extra(
        self,
        address: str,
        token: str,
        rate: int = 10**15,
        supply: int = 10**22,
        price: int = 10**15,
        stash: str | None = None,
        invalid: bool = False,
    ) -> StaticRewardPool:
        """
        Add an extra reward pool.

        With stash, its reward token is a stash wrapper and the rewarder is
        moved to the first pid that uses stash tokens.
        """
        reward_token = token
        if stash is not None:
            self.rewarder.pool_id = self.family.stash_pid_threshold
            self.stashes[stash.lower()] = StaticConvexStashToken(stash, token, invalid=invalid)
            reward_token = stash
        extra = StaticRewardPool(
            address=address,
            rate=rate,
            supply=supply,
            finish=self.rewarder.finish,
            token=reward_token,
        )
        self.rewarder.extras.append(extra)
        self.pricing.set_price(token, price)
        return extra


def build_world(config: IncentiveConfig | None = None, initialize: bool = True) -> World:
    clock = ManualClock(START)
    rewarder = StaticRewardPool(
        address=REWARDER,
        rate=10**16,
        supply=10**22,
        finish=START + 30 * DAY,
        token=CRV,
        rpt=5 * 10**17,
        pool_id=10,
    )
    cvx = StaticErc20(CVX, supply=50_000_000 * 10**18)
    oracle = StaticPriceOracle({LP: 10**18})
    pricing = StaticPricing(clock, {CRV: (2 * 10**15, 3 * 10**15), CVX: (10**15, 10**15)})
    underlyer = StaticUnderlyerStats(LP, stats={"fee_apr": 123})
    stashes: dict = {}
    family = ConvexRewardFamily(
        erc20_at=lookup({CVX: cvx}),
        stash_at=lambda address: stashes[address.lower()],
    )
    calculator = IncentiveCalculator(
        family=family,
        price_oracle=oracle,
        pricing=pricing,
        config=config,
        clock=clock,
    )
    if initialize:
        calculator.initialize([], IncentiveInitData(rewarder, underlyer, CVX))
    return World(
        clock=clock,
        rewarder=rewarder,
        cvx=cvx,
        oracle=oracle,
        pricing=pricing,
        underlyer=underlyer,
        stashes=stashes,
        family=family,
        calculator=calculator,
    )


@pytest.fixture
def world() -> World:
    return build_world()


@pytest.fixture
def fresh_world() -> World:
    """World whose calculator is not initialized yet."""
    return build_world(initialize=False)
