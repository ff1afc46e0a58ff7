"""
Reward families: per staking platform conventions injected into a calculator.

Each family answers two questions the generic calculator cannot:

1. resolve_reward_token(rewarder, extra_pool): which ERC-20 does an extra
   reward pool actually pay out? Newer Convex and Aura pools wrap the
   real token in a stash token carrying a validity flag. An invalid stash
   resolves to ZERO_ADDRESS and the row is skipped.
2. platform_mint_amount(platform_token, amount): how many platform tokens
   (CVX / AURA) are minted alongside `amount` of the main reward token
   (CRV / BAL). Both follow a cliff schedule over platform token supply.

Families are strategies, selected at construction time:

    >>> family = ConvexRewardFamily(erc20_at=..., stash_at=...)
    >>> calc = IncentiveCalculator(family=family, ...)
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Callable

from .config import ZERO_ADDRESS
from .interfaces import AuraStashToken, ConvexStashToken, Erc20, RewardPool

# ============================================================================
# BASE FAMILY
# ============================================================================


class RewardFamily(ABC):
    """Strategy interface for a staking platform's reward conventions."""

    name: str = "base"

    def __init__(self, erc20_at: Callable[[str], Erc20]):
        self.erc20_at = erc20_at

    @abstractmethod
    def resolve_reward_token(self, rewarder: RewardPool, extra_pool: RewardPool) -> str:
        """Real reward token of extra_pool, or ZERO_ADDRESS when it must be skipped."""

    @abstractmethod
    def platform_mint_amount(self, platform_token: str, amount: int) -> int:
        """Platform tokens minted for `amount` of the main reward token."""


# ============================================================================
# CONVEX (CRV → CVX)
# ============================================================================


class ConvexRewardFamily(RewardFamily):
    """
    Convex Finance booster conventions.

    CVX mint (Cvx.mint):
        cliff = supply / reduction_per_cliff
        minted = amount * (total_cliffs - cliff) / total_cliffs
        capped at max_supply - supply, 0 once every cliff is passed

    Pools with pid >= stash_pid_threshold pay extras through a
    StashTokenWrapper that can be marked invalid.
    """

    name = "convex"

    TOTAL_CLIFFS = 1000
    REDUCTION_PER_CLIFF = 100_000 * 10**18
    MAX_SUPPLY = 100_000_000 * 10**18

    def __init__(
        self,
        erc20_at: Callable[[str], Erc20],
        stash_at: Callable[[str], ConvexStashToken],
        stash_pid_threshold: int = 151,
    ):
        super().__init__(erc20_at)
        self.stash_at = stash_at
        self.stash_pid_threshold = stash_pid_threshold

    def resolve_reward_token(self, rewarder: RewardPool, extra_pool: RewardPool) -> str:
        reward_token = extra_pool.reward_token()
        if rewarder.pid() < self.stash_pid_threshold:
            return reward_token

        stash = self.stash_at(reward_token)
        if stash.is_invalid():
            return ZERO_ADDRESS
        return stash.token()

    def platform_mint_amount(self, platform_token: str, amount: int) -> int:
        supply = self.erc20_at(platform_token).total_supply()
        cliff = supply // self.REDUCTION_PER_CLIFF
        if cliff >= self.TOTAL_CLIFFS:
            return 0

        reduction = self.TOTAL_CLIFFS - cliff
        minted = amount * reduction // self.TOTAL_CLIFFS
        return min(minted, self.MAX_SUPPLY - supply)


# ============================================================================
# AURA (BAL → AURA)
# ============================================================================


class AuraRewardFamily(RewardFamily):
    """
    Aura Finance booster conventions.

    AURA mint (AuraToken.mint), emissions counted above the initial mint:
        emitted = supply - init_mint
        cliff = emitted / reduction_per_cliff
        reduction = (total_cliffs - cliff) * 5 / 2 + 700
        minted = amount * reduction / total_cliffs
        capped at emissions_max_supply - emitted

    Extras on pools with pid >= stash_pid_threshold pay through a stash
    token whose base_token() is the real reward.
    """

    name = "aura"

    TOTAL_CLIFFS = 500
    EMISSIONS_MAX_SUPPLY = 50_000_000 * 10**18
    INIT_MINT_AMOUNT = 50_000_000 * 10**18
    REDUCTION_PER_CLIFF = EMISSIONS_MAX_SUPPLY // TOTAL_CLIFFS

    def __init__(
        self,
        erc20_at: Callable[[str], Erc20],
        stash_at: Callable[[str], AuraStashToken],
        stash_pid_threshold: int = 0,
    ):
        super().__init__(erc20_at)
        self.stash_at = stash_at
        self.stash_pid_threshold = stash_pid_threshold

    def resolve_reward_token(self, rewarder: RewardPool, extra_pool: RewardPool) -> str:
        reward_token = extra_pool.reward_token()
        if rewarder.pid() < self.stash_pid_threshold:
            return reward_token

        stash = self.stash_at(reward_token)
        if not stash.is_valid():
            return ZERO_ADDRESS
        return stash.base_token()

    def platform_mint_amount(self, platform_token: str, amount: int) -> int:
        supply = self.erc20_at(platform_token).total_supply()
        emitted = max(0, supply - self.INIT_MINT_AMOUNT)
        cliff = emitted // self.REDUCTION_PER_CLIFF
        if cliff >= self.TOTAL_CLIFFS:
            return 0

        reduction = (self.TOTAL_CLIFFS - cliff) * 5 // 2 + 700
        minted = amount * reduction // self.TOTAL_CLIFFS
        return min(minted, self.EMISSIONS_MAX_SUPPLY - emitted)
