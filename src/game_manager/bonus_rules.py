"""Bonus activation rules for each simulation mode."""

from dataclasses import dataclass
from typing import Optional

from src.game_manager.game_initializer import SimulationContext
from src.game_manager.round_state import SimulationMode
from src.simulation_engine.models import BonusType


@dataclass(frozen=True)
class BonusDecision:
    """A bonus the player activates on the current step."""

    bonus_type: BonusType
    is_free: bool = False


class BonusRules:
    """Decides when a bonus is activated during a round.

    * ``BASE`` mode: no paid bonuses. With free bonuses enabled, a free
      bonus fires with a probability that decays linearly from
      ``free_bonus_probability`` at step 0 to zero at
      ``free_bonus_step_threshold``.
    * ``MYSTIC`` / ``DRAGON`` modes: the paid bonus fires with
      ``bonus_activation_probability`` on every move.

    A bonus whose target jump would reach the top is never activated.
    """

    def __init__(
        self,
        context: SimulationContext,
        mode: SimulationMode,
        enable_free_bonuses: bool = False,
    ):
        self.context = context
        self.mode = mode
        self.enable_free_bonuses = enable_free_bonuses

    def free_bonus_probability(self, step: int) -> float:
        config = self.context.config
        threshold = config.free_bonus_step_threshold
        if threshold <= 0:
            return 0.0
        return config.free_bonus_probability * max(0.0, (threshold - step) / threshold)

    def decide(self, current_step: int, rng) -> Optional[BonusDecision]:
        """Bonus to activate at *current_step*, or None."""
        if self.mode is SimulationMode.BASE:
            return self._decide_free(current_step, rng)

        if rng.random() >= self.context.config.bonus_activation_probability:
            return None
        bonus_type = self.mode.bonus_type
        if not self.context.jump_sampler.is_bonus_feasible(current_step, bonus_type):
            return None
        return BonusDecision(bonus_type=bonus_type)

    def _decide_free(self, current_step: int, rng) -> Optional[BonusDecision]:
        if not self.enable_free_bonuses:
            return None

        probability = self.free_bonus_probability(current_step)
        if probability <= 0 or rng.random() >= probability:
            return None

        free_types = self.context.config.free_bonus_types
        if len(free_types) == 1:
            bonus_type = free_types[0]
        else:
            bonus_type = rng.choice(free_types)

        if not self.context.jump_sampler.is_bonus_feasible(current_step, bonus_type):
            return None
        return BonusDecision(bonus_type=bonus_type, is_free=True)
