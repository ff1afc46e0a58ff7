"""
Tests for offline replay of keeper observations.

Hourly ticks for three days: 1e16 reward/sec over 1e22 LP, reward priced
2e15 ETH, LP 1e18 ETH. Windows open at t0, t0+29h, t0+58h (daily floor) and
finalize 4h later, so six snapshots are committed and credits reach 4.
"""

import pandas as pd
import pytest
from incentives.config import SECONDS_IN_YEAR
from incentives.replay import (
    REPLAY_REWARDER,
    REQUIRED_COLUMNS,
    load_observations,
    replay_observations,
)

T0 = 1_700_000_000
HOUR = 3_600
MAIN_APR = 10**16 * SECONDS_IN_YEAR * 2 * 10**15 // 10**22


def observations(hours: int = 72, with_rpt: bool = False, **extra) -> pd.DataFrame:
    rows = []
    rpt = 0
    for h in range(hours + 1):
        row = {
            "timestamp": str(T0 + h * HOUR),
            "reward_rate": str(10**16),
            "total_supply": str(10**22),
            "period_finish": str(T0 + 30 * 24 * HOUR),
            "reward_price": str(2 * 10**15),
            "lp_price": str(10**18),
        }
        if with_rpt:
            row["reward_per_token"] = str(rpt)
            rpt += HOUR * 10**16 * 10**18 // 10**22
        row.update({k: str(v) for k, v in extra.items()})
        rows.append(row)
    return pd.DataFrame(rows)


class TestReplay:
    def test_accrued_reward_per_token(self):
        result = replay_observations(observations())
        calc = result.calculator

        assert result.ticks == 73
        assert result.snapshots == 6
        assert calc.safe_total_supply(REPLAY_REWARDER) == 10**22
        assert calc.incentive_credits == 4

        frame = result.events.to_frame()
        assert list(frame["timestamp"]) == [T0 + h * HOUR for h in (0, 4, 29, 33, 58, 62)]
        assert frame["total_apr"].iloc[0] == 0
        assert frame["total_apr"].iloc[-1] == MAIN_APR
        assert frame["apr"].iloc[-1] == pytest.approx(0.063072)

    def test_measured_reward_per_token_matches(self):
        accrued = replay_observations(observations())
        measured = replay_observations(observations(with_rpt=True))
        assert [e.as_dict() for e in measured.events.events] == [
            e.as_dict() for e in accrued.events.events
        ]

    def test_aura_platform_rewards_add_apr(self):
        result = replay_observations(
            observations(platform_supply=0, platform_price=10**15), family="aura"
        )
        assert result.events.latest.total_apr > MAIN_APR

    def test_unknown_family(self):
        with pytest.raises(ValueError, match="Unknown reward family"):
            replay_observations(observations(hours=1), family="curve")

    def test_missing_columns(self):
        frame = observations(hours=1).drop(columns=["lp_price"])
        with pytest.raises(ValueError, match="lp_price"):
            replay_observations(frame)

    def test_empty_frame(self):
        with pytest.raises(ValueError, match="empty"):
            replay_observations(pd.DataFrame(columns=list(REQUIRED_COLUMNS)))


class TestLoadObservations:
    def test_scientific_notation_keeps_precision(self, tmp_path):
        path = tmp_path / "obs.csv"
        frame = observations(hours=8)
        frame["total_supply"] = "1e22"
        frame.to_csv(path, index=False)

        loaded = load_observations(path)
        assert loaded["total_supply"].iloc[0] == "1e22"

        result = replay_observations(loaded)
        assert result.calculator.safe_total_supply(REPLAY_REWARDER) == 10**22

    def test_missing_column_rejected(self, tmp_path):
        path = tmp_path / "obs.csv"
        observations(hours=1).drop(columns=["reward_price"]).to_csv(path, index=False)
        with pytest.raises(ValueError, match="reward_price"):
            load_observations(path)
