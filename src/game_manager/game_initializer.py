"""Game initialization - validates a configuration and builds its simulation context."""

import logging
import math
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Union

from src.game_manager.table_persistence import MultiplierTablePersistence
from src.simulation_engine.crash_calibrator import (
    CrashDistribution,
    calibrate_crash_distribution,
)
from src.simulation_engine.jump_sampler import BonusJumpSampler
from src.simulation_engine.models import (
    BonusType,
    ConfigurationError,
    GameConfig,
    JumpBinKind,
)
from src.simulation_engine.multiplier_curve import (
    MultiplierTable,
    build_multiplier_table,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SimulationContext:
    """Everything computed once per configuration and shared by all rounds.

    Read-only after construction, so one context can serve any number of
    rounds or independent workers.
    """

    config: GameConfig
    table: MultiplierTable
    distribution: CrashDistribution
    jump_sampler: BonusJumpSampler

    @property
    def total_steps(self) -> int:
        return self.config.total_steps

    def multiplier(self, step: int) -> float:
        return self.table.multiplier(step)


class GameInitializer:
    """Handles creation of simulation contexts."""

    def __init__(
        self,
        tables_dir: Optional[Path] = None,
        use_table_cache: bool = True,
    ):
        self.tables_dir = tables_dir
        self.use_table_cache = use_table_cache

    def create_context(self, config: Union[GameConfig, str]) -> SimulationContext:
        """
        Build the simulation context for a configuration.

        Args:
            config: A GameConfig, or the name of a preset ("50", "100")

        Returns:
            SimulationContext ready for simulate_round

        Raises:
            ConfigurationError: If the configuration cannot be simulated
        """
        if isinstance(config, str):
            config = GameConfig.from_preset(config)

        self._validate_config(config)

        if self.use_table_cache:
            table = MultiplierTablePersistence(self.tables_dir).load_or_build(config)
        else:
            table = build_multiplier_table(config)

        distribution = calibrate_crash_distribution(config, table)
        context = SimulationContext(
            config=config,
            table=table,
            distribution=distribution,
            jump_sampler=BonusJumpSampler(config, table),
        )

        logger.info(
            "Created context %s: %d steps, base %.6f, max %.0fx, RTP target %.2f%%",
            config.name,
            config.total_steps,
            config.multiplier_base,
            config.target_max_multiplier,
            config.target_rtp * 100,
        )
        return context

    def _validate_config(self, config: GameConfig):
        """Validate configuration values before any round runs."""
        n = config.total_steps
        if not isinstance(n, int) or n < 1:
            raise ConfigurationError(f"total_steps must be a positive integer, got {n!r}")

        if config.target_max_multiplier <= 1:
            raise ConfigurationError(
                "target_max_multiplier must be greater than 1 "
                f"(got {config.target_max_multiplier})"
            )

        for name in ("lambda_crash", "base_stake", "target_rtp", "bonus_rtp"):
            value = getattr(config, name)
            if not (value > 0 and math.isfinite(value)):
                raise ConfigurationError(f"{name} must be positive, got {value!r}")

        if not 0 <= config.tail_crash_probability < 1:
            raise ConfigurationError(
                "tail_crash_probability must be in [0, 1) "
                f"(got {config.tail_crash_probability})"
            )

        if not config.speed_modes:
            raise ConfigurationError("At least one speed mode is required")
        for mode, increment in config.speed_modes.items():
            if not isinstance(increment, int) or increment < 1:
                raise ConfigurationError(
                    f"Speed mode {mode!r} must advance at least one step, got {increment!r}"
                )

        if not 0 <= config.free_bonus_probability <= 1:
            raise ConfigurationError("free_bonus_probability must be in [0, 1]")
        if not 0 <= config.bonus_activation_probability <= 1:
            raise ConfigurationError("bonus_activation_probability must be in [0, 1]")
        if config.free_bonus_step_threshold < 0:
            raise ConfigurationError("free_bonus_step_threshold cannot be negative")

        configured = {spec.bonus_type for spec in config.bonuses}
        missing = set(BonusType) - configured
        if missing:
            raise ConfigurationError(
                f"Bonus specs missing for: {sorted(b.value for b in missing)}"
            )
        for bonus_type in config.free_bonus_types:
            if bonus_type not in configured:
                raise ConfigurationError(
                    f"Free bonus type {bonus_type.value!r} has no bonus spec"
                )

        for spec in config.bonuses:
            self._validate_bonus_spec(spec, n)

    @staticmethod
    def _validate_bonus_spec(spec, total_steps: int):
        label = spec.bonus_type.display_name

        if spec.target_jump_steps < 1:
            raise ConfigurationError(f"{label} target_jump_steps must be at least 1")
        if not 0 <= spec.crash_probability <= 1:
            raise ConfigurationError(f"{label} crash_probability must be in [0, 1]")
        if not spec.jump_distribution:
            raise ConfigurationError(f"{label} jump distribution is empty")

        total = 0.0
        for jump_bin in spec.jump_distribution:
            if jump_bin.probability < 0:
                raise ConfigurationError(
                    f"{label} jump bin {jump_bin} has negative probability"
                )
            total += jump_bin.probability

            if jump_bin.kind == JumpBinKind.TO_TOP:
                continue
            if jump_bin.low is None or jump_bin.high is None:
                raise ConfigurationError(f"{label} jump bin {jump_bin} needs bounds")
            if jump_bin.low > jump_bin.high:
                raise ConfigurationError(
                    f"{label} jump bin bounds crossed: [{jump_bin.low}, {jump_bin.high}]"
                )
            if jump_bin.kind == JumpBinKind.TAIL_RANGE and not (
                0 <= jump_bin.low and jump_bin.high <= total_steps
            ):
                raise ConfigurationError(
                    f"{label} tail range [{jump_bin.low}, {jump_bin.high}] "
                    f"outside [0, {total_steps}]"
                )

        if total <= 0 or total > 1 + 1e-9:
            raise ConfigurationError(
                f"{label} jump probabilities must sum to (0, 1], got {total:.6f}"
            )

    @staticmethod
    def validate_cashout_step(step: int, total_steps: int):
        """Raise ConfigurationError if a fixed cashout step is out of range."""
        if not 0 <= step <= total_steps:
            raise ConfigurationError(
                f"Cashout step {step} must be between 0 and {total_steps}"
            )
