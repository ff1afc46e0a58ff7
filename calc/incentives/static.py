"""
In-memory collaborators for offline replay and tests.

StaticRewardPool follows the Synthetix accrual rule, so reward_per_token
moves exactly as it would on-chain when time is advanced with accrue():

    reward_per_token += elapsed * reward_rate * 1e18 / total_supply
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from .config import WAD
from .errors import ExternalDependencyError, StalePriceError

# ============================================================================
# CLOCK
# ============================================================================


class ManualClock:
    """Callable clock returning a settable unix timestamp."""

    def __init__(self, now: int = 1_700_000_000):
        self.now = now

    def __call__(self) -> int:
        return self.now

    def advance(self, seconds: int) -> int:
        self.now += seconds
        return self.now

    def set(self, now: int) -> None:
        if now < self.now:
            raise ValueError(f"Clock cannot move backwards ({now} < {self.now})")
        self.now = now


# ============================================================================
# POOLS AND TOKENS
# ============================================================================


@dataclass
class StaticRewardPool:
    address: str
    rate: int = 0
    supply: int = 0
    finish: int = 0
    token: str = ""
    rpt: int = 0
    extras: list[StaticRewardPool] = field(default_factory=list)
    pool_id: int = 0

    def reward_rate(self) -> int:
        return self.rate

    def total_supply(self) -> int:
        return self.supply

    def period_finish(self) -> int:
        return self.finish

    def reward_token(self) -> str:
        return self.token

    def reward_per_token(self) -> int:
        return self.rpt

    def extra_rewards_length(self) -> int:
        return len(self.extras)

    def extra_rewards(self, index: int) -> StaticRewardPool:
        return self.extras[index]

    def pid(self) -> int:
        return self.pool_id

    def accrue(self, seconds: int) -> int:
        """Advance reward_per_token by `seconds` of accrual at the current rate and supply."""
        if self.supply > 0:
            self.rpt += seconds * self.rate * WAD // self.supply
        return self.rpt


@dataclass
class StaticErc20:
    address: str
    supply: int = 0

    def total_supply(self) -> int:
        return self.supply


@dataclass
class StaticConvexStashToken:
    address: str
    wrapped: str
    invalid: bool = False

    def is_invalid(self) -> bool:
        return self.invalid

    def token(self) -> str:
        return self.wrapped


@dataclass
class StaticAuraStashToken:
    address: str
    wrapped: str
    valid: bool = True

    def is_valid(self) -> bool:
        return self.valid

    def base_token(self) -> str:
        return self.wrapped


def lookup(contracts: dict[str, Any]):
    """Address → contract resolver over a dict, case-insensitive."""
    by_address = {address.lower(): contract for address, contract in contracts.items()}

    def resolve(address: str) -> Any:
        try:
            return by_address[address.lower()]
        except KeyError:
            raise ExternalDependencyError(f"No contract registered at {address}") from None

    return resolve


# ============================================================================
# PRICING
# ============================================================================


class StaticPriceOracle:
    """PriceOracle with fixed ETH prices."""

    def __init__(self, prices: dict[str, int] | None = None):
        self.prices = {k.lower(): v for k, v in (prices or {}).items()}

    def set_price(self, token: str, price: int) -> None:
        self.prices[token.lower()] = price

    def get_price_in_eth(self, token: str) -> int:
        try:
            return self.prices[token.lower()]
        except KeyError:
            raise ExternalDependencyError(f"No ETH price for {token}") from None


class StaticPricing:
    """
    IncentivePricing with settable (fast, slow) prices and update times.

    get_price raises StalePriceError once the price is older than max_staleness.
    """

    def __init__(self, clock, prices: dict[str, tuple[int, int]] | None = None):
        self.clock = clock
        self._prices: dict[str, tuple[int, int, int]] = {}
        for token, (fast, slow) in (prices or {}).items():
            self.set_price(token, fast, slow)

    def set_price(self, token: str, fast: int, slow: int | None = None) -> None:
        self._prices[token.lower()] = (fast, fast if slow is None else slow, self.clock())

    def touch(self) -> None:
        """Re-stamp every price at the current clock time."""
        now = self.clock()
        for token, (fast, slow, _) in list(self._prices.items()):
            self._prices[token] = (fast, slow, now)

    def get_price(self, token: str, max_staleness: int) -> tuple[int, int]:
        try:
            fast, slow, updated_at = self._prices[token.lower()]
        except KeyError:
            raise ExternalDependencyError(f"No incentive price for {token}") from None

        age = self.clock() - updated_at
        if max_staleness > 0 and age > max_staleness:
            raise StalePriceError(token, age, max_staleness)
        return fast, slow


# ============================================================================
# UNDERLYER
# ============================================================================


@dataclass
class StaticUnderlyerStats:
    lp: str
    stats: Any = None

    def current(self) -> Any:
        return self.stats

    def lp_token(self) -> str:
        return self.lp
