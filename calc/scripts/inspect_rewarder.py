#!/usr/bin/env python
"""
Inspect a live Convex/Aura rewarder: reward rows and snapshot due-ness.

Reads the rewarder and its extra reward pools over JSON-RPC and prints, per
pool, the raw stats, the resolved reward token and whether a fresh calculator
would snapshot it right now. No prices are fetched.

Usage:
    python scripts/inspect_rewarder.py 0xRewarder --family convex --platform-token 0x4e3F...
"""

from __future__ import annotations

import argparse
import os
import time

from dotenv import load_dotenv
from incentives.config import SECONDS_IN_YEAR, get_eth_rpc_url
from incentives.evm import RpcAuraStashToken, RpcConvexStashToken, RpcErc20, RpcRewardPool
from incentives.families import AuraRewardFamily, ConvexRewardFamily
from incentives.snapshot import RewardPoolSnapshotTracker

load_dotenv(os.path.join(os.path.dirname(__file__), "..", ".env"))


def main():
    parser = argparse.ArgumentParser(description="Inspect a live staking rewarder")
    parser.add_argument("rewarder", help="BaseRewardPool address")
    parser.add_argument("--family", default="convex", choices=["convex", "aura"])
    parser.add_argument("--platform-token", required=True, help="CVX or AURA token address")
    args = parser.parse_args()

    rpc_url = get_eth_rpc_url()

    def erc20_at(address):
        return RpcErc20(address, rpc_url)

    if args.family == "convex":
        family = ConvexRewardFamily(
            erc20_at=erc20_at, stash_at=lambda a: RpcConvexStashToken(a, rpc_url)
        )
    else:
        family = AuraRewardFamily(
            erc20_at=erc20_at, stash_at=lambda a: RpcAuraStashToken(a, rpc_url)
        )

    rewarder = RpcRewardPool(args.rewarder, rpc_url)
    tracker = RewardPoolSnapshotTracker()
    now = int(time.time())

    def describe(pool, token):
        rate = pool.reward_rate()
        supply = pool.total_supply()
        finish = pool.period_finish()
        due = tracker.should_snapshot_pool(pool, rate, finish, supply, now)
        print(f"  pool:          {pool.address}")
        print(f"  reward token:  {token}")
        print(f"  rate/year:     {rate * SECONDS_IN_YEAR / 1e18:,.2f}")
        print(f"  total supply:  {supply / 1e18:,.2f}")
        print(f"  period finish: {finish} ({'active' if finish >= now else 'ended'})")
        print(f"  snapshot due:  {due}")
        return rate

    print(f"Rewarder ({family.name}, pid {rewarder.pid()})")
    rate = describe(rewarder, rewarder.reward_token())

    minted = family.platform_mint_amount(args.platform_token, rate * SECONDS_IN_YEAR)
    print(f"Platform token {args.platform_token}: {minted / 1e18:,.2f} minted per year")

    for i in range(rewarder.extra_rewards_length()):
        extra = rewarder.extra_rewards(i)
        token = family.resolve_reward_token(rewarder, extra)
        print(f"Extra reward #{i}")
        describe(extra, token)


if __name__ == "__main__":
    main()
