"""
Collaborator interfaces consumed by the incentive calculator.

The calculator never owns these objects. Implementations live in
evm.py (JSON-RPC against a live chain) and static.py (in-memory, for
replay and tests). Any method may raise ExternalDependencyError.
"""

from __future__ import annotations

from typing import Any, Protocol


class RewardPool(Protocol):
    """Synthetix-style staking reward pool (Convex/Aura BaseRewardPool)."""

    address: str

    def reward_rate(self) -> int: ...

    def total_supply(self) -> int: ...

    def period_finish(self) -> int: ...

    def reward_token(self) -> str: ...

    def reward_per_token(self) -> int: ...

    def extra_rewards_length(self) -> int: ...

    def extra_rewards(self, index: int) -> RewardPool: ...

    def pid(self) -> int: ...


class Erc20(Protocol):
    address: str

    def total_supply(self) -> int: ...


class ConvexStashToken(Protocol):
    """Convex StashTokenWrapper: wraps the real reward token, can be invalidated."""

    def is_invalid(self) -> bool: ...

    def token(self) -> str: ...


class AuraStashToken(Protocol):
    """Aura stash token: wraps the real reward token behind a validity flag."""

    def is_valid(self) -> bool: ...

    def base_token(self) -> str: ...


class PriceOracle(Protocol):
    def get_price_in_eth(self, token: str) -> int:
        """Price of one whole token in ETH, 1e18-scaled."""
        ...


class IncentivePricing(Protocol):
    def get_price(self, token: str, max_staleness: int) -> tuple[int, int]:
        """(fast, slow) moving-average prices in ETH, 1e18-scaled."""
        ...


class UnderlyerStats(Protocol):
    """Pool-level DEX/LST stats merged into current() as a pass-through."""

    def current(self) -> Any: ...

    def lp_token(self) -> str: ...
