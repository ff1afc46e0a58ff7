#!/usr/bin/env python
"""
Replay a table of reward pool observations through an incentive calculator.

Input CSV columns (wei-scale integers):
    timestamp, reward_rate, total_supply, period_finish, reward_price, lp_price
    optional: reward_per_token, platform_supply, platform_price

Usage:
    python scripts/replay_incentives.py observations.csv --family convex --output results/credits.csv
"""

from __future__ import annotations

import argparse
import logging
from pathlib import Path

from incentives.config import IncentiveConfig
from incentives.replay import load_observations, replay_observations


def main():
    parser = argparse.ArgumentParser(description="Replay pool observations through the incentive calculator")
    parser.add_argument("observations", help="Observation CSV file")
    parser.add_argument(
        "--family",
        default="convex",
        choices=["convex", "aura"],
        help="Reward family used for platform token minting",
    )
    parser.add_argument(
        "--snapshot-interval",
        type=int,
        default=IncentiveConfig().snapshot_interval,
        help="Measurement window length in seconds",
    )
    parser.add_argument(
        "--output",
        default="results/credits.csv",
    )
    parser.add_argument("--verbose", action="store_true")
    args = parser.parse_args()

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    frame = load_observations(args.observations)
    config = IncentiveConfig(snapshot_interval=args.snapshot_interval)
    result = replay_observations(frame, family=args.family, config=config)

    out = Path(args.output)
    out.parent.mkdir(parents=True, exist_ok=True)
    history = result.events.to_frame()
    history.to_csv(out, index=False)

    print(f"Ticks:      {result.ticks}")
    print(f"Snapshots:  {result.snapshots}")
    if len(history):
        last = history.iloc[-1]
        print(f"Final APR:  {last['apr']:.4%}")
        print(f"Credits:    {last['incentive_credits']}")
    print(f"Saved history to {out}")


if __name__ == "__main__":
    main()
