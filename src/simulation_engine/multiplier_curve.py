"""Geometric multiplier curve.

``multiplier(step) = base ** step`` with ``base = max_multiplier ** (1 / N)``,
so the curve starts at 1x on step 0 and reaches the configured maximum on
the last step.
"""

import logging
from dataclasses import dataclass
from typing import Iterable, Tuple

from src.simulation_engine.models import ConfigurationError, GameConfig

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class MultiplierTable:
    """Multipliers indexed by step ``0..N``."""

    values: Tuple[float, ...]

    def __post_init__(self):
        if len(self.values) < 2:
            raise ConfigurationError("Multiplier table needs at least two steps")
        if self.values[0] != 1.0:
            raise ConfigurationError(
                f"Multiplier table must start at 1 on step 0, got {self.values[0]}"
            )
        if any(b <= a for a, b in zip(self.values, self.values[1:])):
            raise ConfigurationError("Multiplier table must be strictly increasing")

    @classmethod
    def from_values(cls, values: Iterable[float]) -> "MultiplierTable":
        return cls(tuple(float(v) for v in values))

    @property
    def total_steps(self) -> int:
        return len(self.values) - 1

    def multiplier(self, step: int) -> float:
        """Multiplier at *step*; ``ValueError`` outside ``[0, N]``."""
        if not 0 <= step <= self.total_steps:
            raise ValueError(
                f"Step {step} outside multiplier range [0, {self.total_steps}]"
            )
        return self.values[step]


def build_multiplier_table(config: GameConfig) -> MultiplierTable:
    """Build the geometric multiplier table for *config*."""
    base = config.multiplier_base
    table = MultiplierTable.from_values(
        base ** step for step in range(config.total_steps + 1)
    )
    logger.debug(
        "Built multiplier table: %d steps, base %.6f, top %.2fx",
        config.total_steps, base, table.values[-1],
    )
    return table
