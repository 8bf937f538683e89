"""Bonus jump sampling and bonus pricing."""

import logging
from typing import Optional

from src.simulation_engine.models import (
    BonusSpec,
    BonusType,
    GameConfig,
    JumpBin,
    JumpBinKind,
    JumpResult,
)
from src.simulation_engine.multiplier_curve import MultiplierTable

logger = logging.getLogger(__name__)


class BonusJumpSampler:
    """Draw forward jumps for the Mystic and Dragon bonuses.

    Every edge case of the draw (no room left, empty clamped range,
    probability mass exhausted) resolves to "no jump, not crashed" rather
    than an error.
    """

    def __init__(self, config: GameConfig, table: MultiplierTable):
        self.config = config
        self.table = table

    # ------------------------------------------------------------------
    # Pricing
    # ------------------------------------------------------------------

    def is_bonus_feasible(self, current_step: int, bonus_type: BonusType) -> bool:
        """A bonus can be bought only while its target jump stays below the top."""
        spec = self.config.bonus_spec(bonus_type)
        return current_step + spec.target_jump_steps < self.config.total_steps

    def bonus_cost(self, current_step: int, bonus_type: BonusType) -> Optional[float]:
        """Fee for buying *bonus_type* at *current_step*.

        Formula::

            cost = (multiplier(target) - multiplier(current)) / bonus_rtp
            target = min(current + target_jump_steps, N)

        Returns None when the bonus is infeasible at this step.
        """
        if not self.is_bonus_feasible(current_step, bonus_type):
            return None
        spec = self.config.bonus_spec(bonus_type)
        target_step = min(current_step + spec.target_jump_steps, self.config.total_steps)
        gain = self.table.multiplier(target_step) - self.table.multiplier(current_step)
        return gain / self.config.bonus_rtp

    # ------------------------------------------------------------------
    # Sampling
    # ------------------------------------------------------------------

    def sample_jump(self, current_step: int, bonus_type: BonusType, rng) -> JumpResult:
        """Draw the landing step of one bonus activation.

        Args:
            current_step: Step the bonus is activated on.
            bonus_type: Which bonus distribution to use.
            rng: ``random.Random``-compatible source.

        Returns:
            :class:`JumpResult` with the new step, or ``crashed=True`` if a
            risky bonus failed before jumping.
        """
        spec = self.config.bonus_spec(bonus_type)
        max_jump = max(0, self.config.total_steps - current_step)
        stay = JumpResult(new_step=current_step)

        if max_jump == 0:
            return stay

        if spec.crash_probability > 0 and rng.random() < spec.crash_probability:
            logger.debug("%s bonus crashed at step %d", bonus_type.display_name, current_step)
            return JumpResult(new_step=current_step, crashed=True)

        jump_bin = self._select_bin(spec, rng.random())
        if jump_bin is None:
            return stay

        jump = self._jump_distance(jump_bin, current_step, max_jump, rng)
        if jump is None:
            return stay
        return JumpResult(new_step=current_step + jump)

    @staticmethod
    def _select_bin(spec: BonusSpec, u: float) -> Optional[JumpBin]:
        """First bin whose cumulative probability reaches *u*."""
        cumulative = 0.0
        for jump_bin in spec.jump_distribution:
            cumulative += jump_bin.probability
            if u <= cumulative:
                return jump_bin
        return None

    def _jump_distance(
        self, jump_bin: JumpBin, current_step: int, max_jump: int, rng
    ) -> Optional[int]:
        """Jump distance for *jump_bin*, or None when its range is empty."""
        if jump_bin.kind == JumpBinKind.TO_TOP:
            return max_jump

        if jump_bin.kind == JumpBinKind.TAIL_RANGE:
            min_step = max(jump_bin.low, current_step + 1)
            max_step = min(jump_bin.high, self.config.total_steps)
            if min_step > max_step:
                return None
            return rng.randint(min_step, max_step) - current_step

        if jump_bin.kind == JumpBinKind.EXACT:
            return min(jump_bin.low, max_jump)

        low = max(0, jump_bin.low)
        high = min(jump_bin.high, max_jump)
        if low > high:
            return None
        return rng.randint(low, high)
