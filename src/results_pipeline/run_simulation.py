"""Run a batch of Knight Ascent rounds and report the statistics.

Usage:
    python -m src.results_pipeline.run_simulation MODE ROUNDS [FREE] [CASHOUT] [PRESET] [SEED]

    MODE     base | mystic | dragon
    ROUNDS   number of rounds to simulate
    FREE     y/n - free bonuses in base mode (default n)
    CASHOUT  R for a random cashout step, or a step number (default R)
    PRESET   tuned configuration, "50" or "100" (default "50")
    SEED     integer seed for a reproducible run

Examples:
    python -m src.results_pipeline.run_simulation base 100000 y
    python -m src.results_pipeline.run_simulation dragon 50000 n 20 100 7
"""

import logging
import random
import sys
from pathlib import Path
from typing import List, Optional

from src.game_manager.config import DEFAULT_CASHOUT_STRATEGY, DEFAULT_MODE
from src.game_manager.game_initializer import GameInitializer, SimulationContext
from src.game_manager.round_controller import RoundController
from src.game_manager.round_state import CashoutStrategy, SimulationMode
from src.logging_config import setup_logging
from src.results_pipeline.report import (
    bonus_cost_report,
    crash_probability_report,
    statistics_report,
)
from src.results_pipeline.round_log import RoundLogWriter
from src.results_pipeline.statistics import SimulationStatistics
from src.simulation_engine.config import DEFAULT_PRESET

logger = logging.getLogger(__name__)


def run_simulation(
    context: SimulationContext,
    mode: SimulationMode,
    num_rounds: int,
    enable_free_bonuses: bool = False,
    cashout_strategy: Optional[CashoutStrategy] = None,
    seed: Optional[int] = None,
    speed_mode: Optional[str] = None,
    output_dir: Optional[Path] = None,
    write_logs: bool = True,
) -> SimulationStatistics:
    """Simulate *num_rounds* rounds and tally the results.

    Args:
        context: Shared simulation context.
        mode: Bonus activation mode.
        num_rounds: Number of rounds (must be positive).
        enable_free_bonuses: Free bonuses in BASE mode.
        cashout_strategy: Random (default) or fixed cashout step.
        seed: Seed for a reproducible run.
        speed_mode: Fixed speed mode; by default one is drawn per round.
        output_dir: Directory for the round and bonus CSV logs.
        write_logs: Skip the CSV logs when False.

    Returns:
        The aggregated :class:`SimulationStatistics`.

    Raises:
        ValueError: If *num_rounds* is not positive.
        ConfigurationError: If the speed mode or cashout step is invalid.
    """
    if num_rounds <= 0:
        raise ValueError(f"Number of rounds must be positive, got {num_rounds}")

    config = context.config
    cashout_strategy = cashout_strategy or CashoutStrategy.random()
    if speed_mode is not None:
        config.speed_increment(speed_mode)
    if not cashout_strategy.is_random:
        GameInitializer.validate_cashout_step(
            cashout_strategy.fixed_step, config.total_steps
        )

    rng = random.Random(seed)
    controller = RoundController(context, mode, enable_free_bonuses)
    stats = SimulationStatistics(config.total_steps, config.speed_modes)
    speed_names = list(config.speed_modes)

    logger.info(
        "Simulating %d rounds in %s mode (preset %s, free bonuses %s, cashout %s)",
        num_rounds,
        mode.value,
        config.name,
        "on" if enable_free_bonuses else "off",
        cashout_strategy.describe(config.total_steps),
    )

    log_writer = RoundLogWriter(context.table, output_dir) if write_logs else None
    if log_writer is not None:
        log_writer.start()

    try:
        for round_number in range(1, num_rounds + 1):
            round_speed = speed_mode or rng.choice(speed_names)
            result = controller.simulate_round(
                config.speed_increment(round_speed),
                cashout_strategy,
                rng,
                round_number=round_number,
                speed_mode=round_speed,
            )
            stats.add(result)
            if log_writer is not None:
                log_writer.record(result)
    finally:
        if log_writer is not None:
            log_writer.close()

    logger.info(
        "Simulation complete: %d rounds, RTP %.2f%%, net %.2f",
        stats.rounds, stats.rtp, stats.net_profit,
    )
    return stats


def _parse_flag(value: str) -> bool:
    value = value.strip().lower()
    if value in ("y", "yes"):
        return True
    if value in ("n", "no"):
        return False
    raise ValueError(f"Expected y/n, got {value!r}")


def main(argv: Optional[List[str]] = None) -> int:
    """Command-line entry point; returns the process exit status."""
    setup_logging()
    args = sys.argv[1:] if argv is None else argv

    try:
        mode = SimulationMode((args[0] if len(args) > 0 else DEFAULT_MODE).lower())
        num_rounds = int(args[1]) if len(args) > 1 else 0
        if num_rounds <= 0:
            raise ValueError("Number of rounds must be a positive integer")
        enable_free = _parse_flag(args[2]) if len(args) > 2 else False
        cashout = CashoutStrategy.parse(
            args[3] if len(args) > 3 else DEFAULT_CASHOUT_STRATEGY
        )
        preset = args[4] if len(args) > 4 else DEFAULT_PRESET
        seed = int(args[5]) if len(args) > 5 else None
    except ValueError as e:
        print(f"Invalid arguments: {e}")
        print(__doc__)
        return 1

    if enable_free and mode is not SimulationMode.BASE:
        logger.warning("Free bonuses only apply in base mode; ignoring")
        enable_free = False

    try:
        context = GameInitializer().create_context(preset)
        print(crash_probability_report(context))
        print()
        print(bonus_cost_report(context))

        stats = run_simulation(
            context,
            mode,
            num_rounds,
            enable_free_bonuses=enable_free,
            cashout_strategy=cashout,
            seed=seed,
        )
        description = f"Cashout strategy: {cashout.describe(context.total_steps)}"
        if mode is SimulationMode.BASE:
            description += (
                f"\nFree bonuses in Base mode: {'Enabled' if enable_free else 'Disabled'}"
            )
        print()
        print(statistics_report(stats, mode, description))
    except Exception:
        logger.exception("Simulation failed")
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
