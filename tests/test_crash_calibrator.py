"""Tests for crash distribution calibration and crash-step sampling."""

import logging
import math
import random

import pytest

from src.simulation_engine.crash_calibrator import (
    SUM_TOLERANCE,
    calibrate_crash_distribution,
    expected_payout,
)
from src.simulation_engine.models import ConfigurationError, GameConfig
from src.simulation_engine.multiplier_curve import (
    MultiplierTable,
    build_multiplier_table,
)


# ── Helpers ──────────────────────────────────────────────────────────


def _calibrate(preset="50", **overrides):
    config = GameConfig.from_preset(preset, **overrides)
    return calibrate_crash_distribution(config, build_multiplier_table(config))


# ── Calibration ─────────────────────────────────────────────────────


class TestCalibration:
    @pytest.mark.parametrize("preset", ["50", "100"])
    def test_probabilities_sum_to_one(self, preset):
        dist = _calibrate(preset)
        total = sum(dist.step_probabilities) + dist.tail_probability
        assert abs(total - 1.0) <= SUM_TOLERANCE

    @pytest.mark.parametrize(
        "overrides",
        [
            {"target_rtp": 0.5},
            {"lambda_crash": 0.05},
            {"tail_crash_probability": 0.0},
            {"target_max_multiplier": 50.0},
        ],
    )
    def test_probabilities_sum_to_one_for_custom_configs(self, overrides):
        dist = _calibrate("50", **overrides)
        total = sum(dist.step_probabilities) + dist.tail_probability
        assert abs(total - 1.0) <= SUM_TOLERANCE

    def test_all_probabilities_non_negative(self):
        dist = _calibrate("100")
        assert all(p >= 0 for p in dist.step_probabilities)
        assert dist.tail_probability >= 0

    def test_one_probability_per_step(self):
        dist = _calibrate("50")
        assert dist.total_steps == 50
        assert dist.beyond_range_step == 51

    def test_tail_probability_is_reserved(self):
        dist = _calibrate("50")
        assert dist.tail_probability == pytest.approx(0.0001, rel=1e-9)

    def test_first_step_probability_for_100_steps(self):
        dist = _calibrate("100")
        assert dist.probability(1) == pytest.approx(0.0961, abs=0.001)

    def test_first_step_probability_for_50_steps(self):
        dist = _calibrate("50")
        expected = (1 - math.exp(-0.202)) / (1 - math.exp(-0.202 * 50)) * (1 - 0.0001)
        assert dist.probability(1) == pytest.approx(expected, rel=1e-9)

    def test_probabilities_decay_with_step(self):
        probs = _calibrate("50").step_probabilities
        assert all(b < a for a, b in zip(probs, probs[1:]))

    def test_scaled_payout_hits_target(self):
        dist = _calibrate("50")
        assert dist.scaled_expected_payout == pytest.approx(0.97, rel=1e-9)
        assert dist.scaling_factor == pytest.approx(
            0.97 / dist.initial_expected_payout
        )

    def test_renormalisation_reports_drift(self):
        dist = _calibrate("50")
        assert dist.realized_rtp == pytest.approx(dist.initial_expected_payout, rel=1e-9)
        assert dist.rtp_drift == pytest.approx(dist.realized_rtp - 0.97)
        assert dist.relative_drift == pytest.approx(dist.rtp_drift / 0.97)

    def test_drift_is_logged(self, caplog):
        with caplog.at_level(logging.WARNING):
            _calibrate("50")
        assert "Calibration drift" in caplog.text

    def test_cumulative_ends_below_one_by_tail(self):
        dist = _calibrate("50")
        assert dist.cumulative[-1] == pytest.approx(1 - dist.tail_probability, abs=1e-12)

    def test_table_mismatch_raises(self, config_50):
        table = build_multiplier_table(GameConfig.from_preset("100"))
        with pytest.raises(ConfigurationError, match="Multiplier table has 100 steps"):
            calibrate_crash_distribution(config_50, table)


class TestProbabilityLookup:
    def test_beyond_range_step_is_tail(self):
        dist = _calibrate("50")
        assert dist.probability(51) == dist.tail_probability

    @pytest.mark.parametrize("step", [0, 52])
    def test_out_of_range_raises(self, step):
        with pytest.raises(ValueError, match="outside"):
            _calibrate("50").probability(step)


class TestExpectedPayout:
    def test_crash_pays_previous_step_multiplier(self):
        table = MultiplierTable.from_values([1.0, 2.0, 4.0])
        # crash@1 pays 1x, crash@2 pays 2x, beyond range pays 4x
        assert expected_payout([0.5, 0.25], 0.25, table) == pytest.approx(
            0.5 * 1 + 0.25 * 2 + 0.25 * 4
        )


# ── Sampling ─────────────────────────────────────────────────────────


class TestDrawCrashStep:
    def setup_method(self):
        self.dist = _calibrate("50")

    def test_draws_within_bounds(self):
        rng = random.Random(1)
        draws = [self.dist.draw_crash_step(rng) for _ in range(5000)]
        assert all(1 <= d <= 51 for d in draws)

    def test_low_uniform_maps_to_first_step(self, scripted_rng):
        assert self.dist.draw_crash_step(scripted_rng([0.0])) == 1
        assert self.dist.draw_crash_step(scripted_rng([self.dist.cumulative[0]])) == 1

    def test_uniform_just_above_first_bucket(self, scripted_rng):
        u = self.dist.cumulative[0] + 1e-12
        assert self.dist.draw_crash_step(scripted_rng([u])) == 2

    def test_uniform_in_tail_maps_beyond_range(self, scripted_rng):
        assert self.dist.draw_crash_step(scripted_rng([0.99995])) == 51

    def test_seeded_draws_are_reproducible(self):
        first = [self.dist.draw_crash_step(random.Random(7)) for _ in range(3)]
        second = [self.dist.draw_crash_step(random.Random(7)) for _ in range(3)]
        assert first == second


class TestConditionalDraw:
    def setup_method(self):
        self.dist = _calibrate("50")

    def test_always_after_start_step(self):
        rng = random.Random(3)
        draws = [self.dist.draw_crash_step(rng, start_step=30) for _ in range(2000)]
        assert all(30 < d <= 50 for d in draws)

    def test_low_uniform_maps_to_next_step(self, scripted_rng):
        assert self.dist.draw_crash_step(scripted_rng([0.0]), start_step=12) == 13

    def test_start_at_top_is_beyond_range(self, scripted_rng):
        # No draw is consumed when nothing remains to sample
        rng = scripted_rng()
        assert self.dist.draw_crash_step(rng, start_step=50) == 51
        assert rng.calls == []

    def test_last_step_only(self, scripted_rng):
        assert self.dist.draw_crash_step(scripted_rng([0.5]), start_step=49) == 50

    def test_renormalised_over_remaining_steps(self):
        rng = random.Random(11)
        draws = [self.dist.draw_crash_step(rng, start_step=40) for _ in range(20000)]
        remaining = self.dist.step_probabilities[40:]
        expected_share = remaining[0] / sum(remaining)
        assert draws.count(41) / len(draws) == pytest.approx(expected_share, abs=0.02)
