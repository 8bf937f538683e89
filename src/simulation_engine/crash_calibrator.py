"""Crash-step distribution calibrated towards a target RTP.

Starts from a discretised exponential hazard over steps ``1..N``, reserves
a fixed mass for "no crash within range" (step ``N+1``), then applies a
single scaling pass towards the target expected payout followed by a
re-normalisation.

The pass is not iterated to a fixed point. Re-normalising after a uniform
rescale divides the scaling factor back out, so the realised RTP is reported
alongside the target as ``rtp_drift`` rather than forced to match.
"""

import bisect
import logging
import math
from dataclasses import dataclass
from itertools import accumulate
from typing import Optional, Tuple

from src.simulation_engine.models import ConfigurationError, GameConfig
from src.simulation_engine.multiplier_curve import MultiplierTable

logger = logging.getLogger(__name__)

SUM_TOLERANCE = 1e-9


@dataclass(frozen=True)
class CrashDistribution:
    """Finalised crash probabilities plus calibration diagnostics.

    ``step_probabilities[i]`` is the probability of crashing at step ``i + 1``.
    """

    step_probabilities: Tuple[float, ...]
    tail_probability: float
    cumulative: Tuple[float, ...]
    target_rtp: float
    initial_expected_payout: float
    scaling_factor: float
    scaled_expected_payout: float
    realized_rtp: float

    @property
    def total_steps(self) -> int:
        return len(self.step_probabilities)

    @property
    def beyond_range_step(self) -> int:
        return self.total_steps + 1

    @property
    def rtp_drift(self) -> float:
        """Realised RTP minus target RTP."""
        return self.realized_rtp - self.target_rtp

    @property
    def relative_drift(self) -> float:
        return self.rtp_drift / self.target_rtp

    def probability(self, step: int) -> float:
        """Probability of the crash landing on *step* (``1..N+1``)."""
        if step == self.beyond_range_step:
            return self.tail_probability
        if not 1 <= step <= self.total_steps:
            raise ValueError(
                f"Crash step {step} outside [1, {self.beyond_range_step}]"
            )
        return self.step_probabilities[step - 1]

    def draw_crash_step(self, rng, start_step: Optional[int] = None) -> int:
        """Sample a crash step by inverse CDF.

        With *start_step*, sample conditioned on surviving past it: the
        probabilities of steps ``> start_step`` are renormalised and the
        result is always greater than *start_step*.
        """
        if start_step is not None:
            return self._draw_after(rng, start_step)

        u = rng.random()
        if u < self.cumulative[-1]:
            return bisect.bisect_left(self.cumulative, u) + 1
        return self.beyond_range_step

    def _draw_after(self, rng, start_step: int) -> int:
        if start_step >= self.total_steps:
            return self.beyond_range_step

        remaining = self.step_probabilities[max(start_step, 0):]
        total = sum(remaining)
        if total <= 0:
            return self.beyond_range_step

        u = rng.random()
        running = 0.0
        for offset, prob in enumerate(remaining, start=1):
            running += prob / total
            if u <= running:
                return max(start_step, 0) + offset
        return self.beyond_range_step


def expected_payout(
    step_probabilities, tail_probability: float, table: MultiplierTable
) -> float:
    """Expected payout of an ideal player who cashes out just before the crash.

    A crash at step ``s`` pays the multiplier of the last completed step
    ``s - 1``; no crash within range pays the top multiplier.
    """
    payout = sum(
        prob * table.multiplier(step)
        for step, prob in enumerate(step_probabilities)
    )
    return payout + tail_probability * table.multiplier(table.total_steps)


def calibrate_crash_distribution(
    config: GameConfig, table: MultiplierTable
) -> CrashDistribution:
    """Calibrate the crash distribution for *config*.

    Raises:
        ConfigurationError: If the table does not match the step count or
            the exponential prior cannot be normalised.
    """
    n = config.total_steps
    if table.total_steps != n:
        raise ConfigurationError(
            f"Multiplier table has {table.total_steps} steps, config has {n}"
        )

    lam = config.lambda_crash
    initial = [
        math.exp(-lam * (step - 1)) - math.exp(-lam * step)
        for step in range(1, n + 1)
    ]
    initial_total = sum(initial)
    if initial_total <= 0:
        raise ConfigurationError(
            f"Exponential prior with lambda={lam} cannot be normalised"
        )

    tail = config.tail_crash_probability
    in_range_mass = 1.0 - tail
    adjusted = [p / initial_total * in_range_mass for p in initial]

    initial_payout = expected_payout(adjusted, tail, table)
    scaling_factor = config.target_rtp / initial_payout

    scaled = [p * scaling_factor for p in adjusted]
    scaled_tail = tail * scaling_factor
    scaled_payout = expected_payout(scaled, scaled_tail, table)

    scaled_total = sum(scaled) + scaled_tail
    final = tuple(p / scaled_total for p in scaled)
    final_tail = scaled_tail / scaled_total

    mass = sum(final) + final_tail
    if abs(mass - 1.0) > SUM_TOLERANCE:
        raise ConfigurationError(
            f"Calibrated distribution sums to {mass!r}, expected 1"
        )

    distribution = CrashDistribution(
        step_probabilities=final,
        tail_probability=final_tail,
        cumulative=tuple(accumulate(final)),
        target_rtp=config.target_rtp,
        initial_expected_payout=initial_payout,
        scaling_factor=scaling_factor,
        scaled_expected_payout=scaled_payout,
        realized_rtp=expected_payout(final, final_tail, table),
    )

    logger.info(
        "Calibrated %s: initial E=%.4f, scale=%.6f, realised RTP=%.4f "
        "(target %.4f), P(crash@1)=%.4f%%",
        config.name,
        initial_payout,
        scaling_factor,
        distribution.realized_rtp,
        config.target_rtp,
        final[0] * 100,
    )
    if abs(distribution.relative_drift) > 0.005:
        logger.warning(
            "Calibration drift for %s: realised RTP %.4f vs target %.4f (%+.2f%%)",
            config.name,
            distribution.realized_rtp,
            config.target_rtp,
            distribution.relative_drift * 100,
        )

    return distribution
