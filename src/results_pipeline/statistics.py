"""Aggregate statistics over a batch of simulated rounds."""

import logging
from typing import Dict, Iterable

import pandas as pd

from src.game_manager.round_state import RoundOutcome, RoundResult

logger = logging.getLogger(__name__)


class SimulationStatistics:
    """Tally round results into batch totals and per-step counts.

    Per-step arrays are indexed by step:

    * ``crash_counts``: final step of rounds that crashed (``0..N+1``)
    * ``cashout_counts``: final step of rounds that cashed out; reaching
      the top counts as a cash-out on step N (``0..N``)
    * ``crash_point_counts`` / ``cashout_point_counts``: the sampled crash
      and cashout targets, whatever the outcome
    """

    def __init__(self, total_steps: int, speed_modes: Iterable[str] = ()):
        self.total_steps = total_steps
        self.rounds = 0
        self.total_winnings = 0.0
        self.total_cost = 0.0
        self.total_final_steps = 0
        self.crashes = 0
        self.cash_outs = 0
        self.reached_top = 0
        self.bonus_activations = 0
        self.redistributions = 0
        self.crash_counts = [0] * (total_steps + 2)
        self.cashout_counts = [0] * (total_steps + 1)
        self.crash_point_counts = [0] * (total_steps + 2)
        self.cashout_point_counts = [0] * (total_steps + 1)
        self.speed_mode_counts: Dict[str, int] = {mode: 0 for mode in speed_modes}

    def add(self, result: RoundResult):
        """Fold one round into the tallies."""
        self.rounds += 1
        self.total_winnings += result.total_winnings
        self.total_cost += result.total_cost
        self.total_final_steps += result.final_step

        self.crash_point_counts[result.crash_step] += 1
        self.cashout_point_counts[result.cashout_step] += 1

        if result.outcome.is_crash:
            self.crashes += 1
            self.crash_counts[result.final_step] += 1
        elif result.outcome is RoundOutcome.CASHED_OUT:
            self.cash_outs += 1
            self.cashout_counts[result.final_step] += 1
        elif result.outcome is RoundOutcome.REACHED_TOP:
            self.reached_top += 1
            self.cashout_counts[self.total_steps] += 1

        if result.speed_mode is not None:
            self.speed_mode_counts[result.speed_mode] = (
                self.speed_mode_counts.get(result.speed_mode, 0) + 1
            )

        self.bonus_activations += len(result.bonus_events)
        self.redistributions += sum(
            1 for event in result.bonus_events if event.was_redistributed
        )

    # ------------------------------------------------------------------
    # Derived values
    # ------------------------------------------------------------------

    @property
    def net_profit(self) -> float:
        return self.total_winnings - self.total_cost

    @property
    def rtp(self) -> float:
        """Winnings over cost, in percent (0 when nothing was staked)."""
        if self.total_cost <= 0:
            return 0.0
        return self.total_winnings / self.total_cost * 100

    @property
    def average_final_step(self) -> float:
        if self.rounds == 0:
            return 0.0
        return self.total_final_steps / self.rounds

    def _pct(self, count: int) -> float:
        if self.rounds == 0:
            return 0.0
        return count / self.rounds * 100

    def summary(self) -> Dict:
        """Batch totals as a plain dict."""
        return {
            "rounds": self.rounds,
            "total_winnings": self.total_winnings,
            "total_cost": self.total_cost,
            "net_profit": self.net_profit,
            "average_final_step": self.average_final_step,
            "crashes": self.crashes,
            "crash_pct": self._pct(self.crashes),
            "cash_outs": self.cash_outs,
            "cash_out_pct": self._pct(self.cash_outs),
            "reached_top": self.reached_top,
            "reached_top_pct": self._pct(self.reached_top),
            "bonus_activations": self.bonus_activations,
            "redistributions": self.redistributions,
            "rtp": self.rtp,
        }

    def speed_mode_table(self) -> pd.DataFrame:
        """Share of rounds played at each speed mode."""
        return pd.DataFrame(
            {
                "Mode": list(self.speed_mode_counts),
                "% Rounds": [self._pct(c) for c in self.speed_mode_counts.values()],
            }
        )

    def per_step_table(self) -> pd.DataFrame:
        """Per-step percentages for steps ``1..N+1``.

        The cash-out columns are NaN on step N+1, which only exists as a
        crash point.
        """
        steps = range(1, self.total_steps + 2)
        beyond = self.total_steps + 1
        df = pd.DataFrame(
            {
                "Step": list(steps),
                "% Crashes": [self._pct(self.crash_counts[s]) for s in steps],
                "% Cashouts": [
                    float("nan") if s == beyond else self._pct(self.cashout_counts[s])
                    for s in steps
                ],
                "% Crash Points": [self._pct(self.crash_point_counts[s]) for s in steps],
                "% Cashout Points": [
                    float("nan") if s == beyond else self._pct(self.cashout_point_counts[s])
                    for s in steps
                ],
            }
        )
        logger.debug("Built per-step table over %d rounds", self.rounds)
        return df
