"""Round controller - runs the per-round state machine."""

import logging
import random
from typing import Optional

from src.game_manager.bonus_rules import BonusDecision, BonusRules
from src.game_manager.game_initializer import GameInitializer, SimulationContext
from src.game_manager.round_state import (
    BonusEvent,
    CashoutStrategy,
    RoundOutcome,
    RoundResult,
    RoundState,
    SimulationMode,
)
from src.simulation_engine.models import ConfigurationError

logger = logging.getLogger(__name__)


class RoundController:
    """Plays rounds of one simulation mode against a shared context.

    A round starts ACTIVE on step 0 and ends in exactly one of CASHED_OUT,
    CRASHED_DURING_MOVE, CRASHED_ON_BONUS or REACHED_TOP. Each iteration
    first offers a bonus (per BonusRules), then makes an ordinary move of
    ``speed_increment`` steps. The step pointer strictly increases on every
    ordinary move, so a round takes at most N iterations.
    """

    def __init__(
        self,
        context: SimulationContext,
        mode: SimulationMode = SimulationMode.BASE,
        enable_free_bonuses: bool = False,
    ):
        self.context = context
        self.mode = mode
        self.rules = BonusRules(context, mode, enable_free_bonuses)

    def simulate_round(
        self,
        speed_increment: int,
        cashout_strategy: CashoutStrategy,
        rng,
        round_number: int = 1,
        speed_mode: Optional[str] = None,
    ) -> RoundResult:
        """Play one round to its terminal outcome.

        Args:
            speed_increment: Steps advanced by each ordinary move.
            cashout_strategy: Random or fixed cashout step.
            rng: ``random.Random``-compatible source.
            round_number: Label carried into the result and bonus events.
            speed_mode: Name of the speed mode, for reporting only.

        Raises:
            ConfigurationError: If the speed or fixed cashout step is invalid.
        """
        config = self.context.config
        total_steps = config.total_steps

        if speed_increment < 1:
            raise ConfigurationError(
                f"speed_increment must be at least 1, got {speed_increment}"
            )
        if not cashout_strategy.is_random:
            GameInitializer.validate_cashout_step(
                cashout_strategy.fixed_step, total_steps
            )

        state = RoundState.create_new(
            round_number=round_number,
            crash_step=self.context.distribution.draw_crash_step(rng),
            cashout_step=cashout_strategy.choose(rng, total_steps),
            base_stake=config.base_stake,
        )

        while state.current_step < total_steps:
            decision = self.rules.decide(state.current_step, rng)
            if decision is not None:
                result = self._apply_bonus(state, decision, rng, speed_mode)
                if result is not None:
                    return result

            next_step = min(state.current_step + speed_increment, total_steps)

            if (
                state.cashout_reached(state.current_step, next_step)
                and state.crash_step > state.cashout_step
            ):
                return self._cash_out(state, speed_mode)

            if state.crash_step <= next_step:
                # The player keeps nothing; report the last step survived.
                return state.finish(
                    RoundOutcome.CRASHED_DURING_MOVE,
                    state.current_step,
                    speed_mode=speed_mode,
                )

            state.advance_to(next_step)

        if (
            state.crash_step > state.cashout_step
            or state.crash_step == config.beyond_range_step
        ):
            return state.finish(
                RoundOutcome.REACHED_TOP,
                total_steps,
                winnings=config.base_stake * self.context.multiplier(total_steps),
                speed_mode=speed_mode,
            )
        return state.finish(
            RoundOutcome.CRASHED_DURING_MOVE,
            state.current_step,
            speed_mode=speed_mode,
        )

    def _apply_bonus(
        self,
        state: RoundState,
        decision: BonusDecision,
        rng,
        speed_mode: Optional[str],
    ) -> Optional[RoundResult]:
        """Charge and resolve one bonus jump.

        Returns the terminal result if the bonus ended the round, else None
        after moving the state to the landing step.
        """
        sampler = self.context.jump_sampler
        bonus_type = decision.bonus_type
        step_before = state.current_step

        if decision.is_free:
            cost = 0.0
        else:
            cost = sampler.bonus_cost(step_before, bonus_type)
            if cost is None:
                return None
        state.total_cost += cost

        crash_before = state.crash_step
        jump = sampler.sample_jump(step_before, bonus_type, rng)

        crash_after = None
        if not jump.crashed and state.crash_skipped(step_before, jump.new_step):
            state.crash_step = self.context.distribution.draw_crash_step(
                rng, start_step=jump.new_step
            )
            crash_after = state.crash_step

        payout = 0.0
        if not jump.crashed:
            payout = self.context.config.base_stake * self.context.multiplier(jump.new_step)

        state.bonus_events.append(
            BonusEvent(
                round_number=state.round_number,
                bonus_type=bonus_type,
                is_free=decision.is_free,
                step_before=step_before,
                step_after=step_before if jump.crashed else jump.new_step,
                cost=cost,
                payout=payout,
                crash_step_before=crash_before,
                crash_step_after=crash_after,
                crashed=jump.crashed,
            )
        )
        logger.debug(
            "Round %d: %s bonus %d -> %d (cost %.2f, crash %d -> %s)",
            state.round_number,
            bonus_type.display_name,
            step_before,
            step_before if jump.crashed else jump.new_step,
            cost,
            crash_before,
            crash_after,
        )

        if jump.crashed:
            state.used_bonus = bonus_type
            return state.finish(
                RoundOutcome.CRASHED_ON_BONUS, step_before, speed_mode=speed_mode
            )

        if (
            state.cashout_reached(step_before, jump.new_step)
            and state.crash_step > state.cashout_step
        ):
            return self._cash_out(state, speed_mode)

        state.advance_to(jump.new_step)
        state.used_bonus = bonus_type
        return None

    def _cash_out(self, state: RoundState, speed_mode: Optional[str]) -> RoundResult:
        winnings = self.context.config.base_stake * self.context.multiplier(
            state.cashout_step
        )
        return state.finish(
            RoundOutcome.CASHED_OUT,
            state.cashout_step,
            winnings=winnings,
            speed_mode=speed_mode,
        )


def simulate_round(
    context: SimulationContext,
    mode: SimulationMode,
    speed_increment: int,
    cashout_strategy: CashoutStrategy,
    rng=None,
    round_number: int = 1,
    enable_free_bonuses: bool = False,
    speed_mode: Optional[str] = None,
) -> RoundResult:
    """Play a single round; see :meth:`RoundController.simulate_round`."""
    controller = RoundController(context, mode, enable_free_bonuses)
    return controller.simulate_round(
        speed_increment,
        cashout_strategy,
        rng if rng is not None else random.Random(),
        round_number=round_number,
        speed_mode=speed_mode,
    )
