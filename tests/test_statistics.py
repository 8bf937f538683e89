"""Tests for batch statistics."""

import math

import pytest

from src.game_manager.round_state import BonusEvent, RoundOutcome, RoundResult
from src.results_pipeline.statistics import SimulationStatistics
from src.simulation_engine.models import BonusType


def _make_result(outcome, final_step, winnings=0.0, cost=1.0, **overrides):
    defaults = {
        "round_number": 1,
        "final_step": final_step,
        "outcome": outcome,
        "total_cost": cost,
        "total_winnings": winnings,
        "crash_step": 8,
        "cashout_step": 4,
    }
    defaults.update(overrides)
    return RoundResult(**defaults)


def _make_stats():
    stats = SimulationStatistics(10, ["Normal", "Fast", "Swift"])
    redistributed = BonusEvent(
        round_number=3,
        bonus_type=BonusType.MYSTIC,
        is_free=False,
        step_before=0,
        step_after=5,
        cost=2.0,
        payout=3.0,
        crash_step_before=4,
        crash_step_after=9,
    )
    results = [
        _make_result(RoundOutcome.CASHED_OUT, 4, winnings=2.0, speed_mode="Normal"),
        _make_result(RoundOutcome.CRASHED_DURING_MOVE, 2, crash_step=3, speed_mode="Fast"),
        _make_result(
            RoundOutcome.CASHED_OUT,
            7,
            winnings=6.0,
            cost=3.0,
            crash_step=9,
            cashout_step=7,
            used_bonus=BonusType.MYSTIC,
            bonus_events=(redistributed,),
            speed_mode="Fast",
        ),
        _make_result(
            RoundOutcome.REACHED_TOP,
            10,
            winnings=20.0,
            crash_step=11,
            cashout_step=0,
            speed_mode="Swift",
        ),
    ]
    for result in results:
        stats.add(result)
    return stats


class TestTallies:
    def setup_method(self):
        self.stats = _make_stats()

    def test_totals(self):
        assert self.stats.rounds == 4
        assert self.stats.total_winnings == pytest.approx(28.0)
        assert self.stats.total_cost == pytest.approx(6.0)
        assert self.stats.net_profit == pytest.approx(22.0)
        assert self.stats.average_final_step == pytest.approx(23 / 4)

    def test_outcome_counts(self):
        assert self.stats.crashes == 1
        assert self.stats.cash_outs == 2
        assert self.stats.reached_top == 1

    def test_reaching_top_counts_as_cashout_on_last_step(self):
        assert self.stats.cashout_counts[10] == 1
        assert self.stats.cashout_counts[4] == 1
        assert self.stats.crash_counts[2] == 1

    def test_sampled_points(self):
        assert self.stats.crash_point_counts[11] == 1
        assert self.stats.crash_point_counts[8] == 1
        assert self.stats.cashout_point_counts[4] == 2

    def test_bonus_counts(self):
        assert self.stats.bonus_activations == 1
        assert self.stats.redistributions == 1

    def test_rtp_in_percent(self):
        assert self.stats.rtp == pytest.approx(28.0 / 6.0 * 100)

    def test_speed_modes(self):
        assert self.stats.speed_mode_counts == {"Normal": 1, "Fast": 2, "Swift": 1}


class TestSummary:
    def test_percentages(self):
        summary = _make_stats().summary()
        assert summary["crash_pct"] == pytest.approx(25.0)
        assert summary["cash_out_pct"] == pytest.approx(50.0)
        assert summary["reached_top_pct"] == pytest.approx(25.0)

    def test_empty_batch(self):
        stats = SimulationStatistics(10)
        summary = stats.summary()
        assert summary["rounds"] == 0
        assert summary["rtp"] == 0.0
        assert summary["average_final_step"] == 0.0
        assert summary["crash_pct"] == 0.0


class TestTables:
    def test_speed_mode_table(self):
        df = _make_stats().speed_mode_table()
        assert list(df.columns) == ["Mode", "% Rounds"]
        assert df.set_index("Mode")["% Rounds"].to_dict() == {
            "Normal": 25.0,
            "Fast": 50.0,
            "Swift": 25.0,
        }

    def test_per_step_table_shape(self):
        df = _make_stats().per_step_table()
        assert df["Step"].tolist() == list(range(1, 12))
        assert list(df.columns) == [
            "Step", "% Crashes", "% Cashouts", "% Crash Points", "% Cashout Points",
        ]

    def test_beyond_range_row(self):
        last = _make_stats().per_step_table().iloc[-1]
        assert last["Step"] == 11
        assert last["% Crash Points"] == pytest.approx(25.0)
        assert math.isnan(last["% Cashouts"])
        assert math.isnan(last["% Cashout Points"])

    def test_per_step_values(self):
        df = _make_stats().per_step_table().set_index("Step")
        assert df.loc[2, "% Crashes"] == pytest.approx(25.0)
        assert df.loc[10, "% Cashouts"] == pytest.approx(25.0)
        assert df.loc[4, "% Cashout Points"] == pytest.approx(50.0)
