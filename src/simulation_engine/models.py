"""Data models for the simulation engine."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, Optional, Tuple

from src.simulation_engine.config import (
    BASE_STAKE,
    BONUS_ACTIVATION_PROBABILITY,
    BONUS_RTP,
    FREE_BONUS_PROBABILITY,
    PRESETS,
    SPEED_MODES,
    TAIL_CRASH_PROBABILITY,
    TARGET_MAX_MULTIPLIER,
    TARGET_RTP,
)


class ConfigurationError(ValueError):
    """Raised when a game configuration cannot be simulated."""

    pass


class BonusType(str, Enum):
    MYSTIC = "mystic"
    DRAGON = "dragon"

    @property
    def display_name(self) -> str:
        return self.value.capitalize()


class JumpBinKind(str, Enum):
    RANGED = "ranged"
    EXACT = "exact"
    TO_TOP = "top"
    TAIL_RANGE = "tail_range"


@dataclass(frozen=True)
class JumpBin:
    """One bin of a bonus jump distribution.

    ``low``/``high`` are jump distances for RANGED and EXACT bins and
    absolute steps for TAIL_RANGE bins. TO_TOP bins carry no bounds.
    """

    kind: JumpBinKind
    probability: float
    low: Optional[int] = None
    high: Optional[int] = None

    @classmethod
    def ranged(cls, low: int, high: int, probability: float) -> "JumpBin":
        return cls(JumpBinKind.RANGED, probability, low, high)

    @classmethod
    def exact(cls, steps: int, probability: float) -> "JumpBin":
        return cls(JumpBinKind.EXACT, probability, steps, steps)

    @classmethod
    def to_top(cls, probability: float) -> "JumpBin":
        return cls(JumpBinKind.TO_TOP, probability)

    @classmethod
    def tail_range(cls, low: int, high: int, probability: float) -> "JumpBin":
        return cls(JumpBinKind.TAIL_RANGE, probability, low, high)

    @classmethod
    def from_tuple(cls, entry: Tuple) -> "JumpBin":
        """Build a bin from a ``(kind, low, high, probability)`` preset entry."""
        kind, low, high, probability = entry
        try:
            kind = JumpBinKind(kind)
        except ValueError as e:
            raise ConfigurationError(f"Unknown jump bin kind: {kind!r}") from e

        probability = float(probability)
        if kind == JumpBinKind.TO_TOP:
            return cls.to_top(probability)
        if kind == JumpBinKind.EXACT:
            return cls.exact(low, probability)
        if kind == JumpBinKind.TAIL_RANGE:
            return cls.tail_range(low, high, probability)
        return cls.ranged(low, high, probability)


@dataclass(frozen=True)
class JumpResult:
    """Outcome of a single bonus jump draw."""

    new_step: int
    crashed: bool = False


@dataclass(frozen=True)
class BonusSpec:
    """Tuned parameters of one bonus type."""

    bonus_type: BonusType
    target_jump_steps: int
    jump_distribution: Tuple[JumpBin, ...]
    crash_probability: float = 0.0


@dataclass(frozen=True)
class GameConfig:
    """Immutable configuration of one simulated game."""

    name: str
    total_steps: int
    lambda_crash: float
    bonuses: Tuple[BonusSpec, ...]
    target_max_multiplier: float = TARGET_MAX_MULTIPLIER
    base_stake: float = BASE_STAKE
    target_rtp: float = TARGET_RTP
    tail_crash_probability: float = TAIL_CRASH_PROBABILITY
    bonus_rtp: float = BONUS_RTP
    speed_modes: Dict[str, int] = field(default_factory=lambda: dict(SPEED_MODES))
    free_bonus_probability: float = FREE_BONUS_PROBABILITY
    free_bonus_step_threshold: int = 5
    free_bonus_types: Tuple[BonusType, ...] = (BonusType.MYSTIC,)
    bonus_activation_probability: float = BONUS_ACTIVATION_PROBABILITY

    @property
    def multiplier_base(self) -> float:
        return self.target_max_multiplier ** (1.0 / self.total_steps)

    @property
    def beyond_range_step(self) -> int:
        """Crash step meaning "no crash within range"."""
        return self.total_steps + 1

    def bonus_spec(self, bonus_type: BonusType) -> BonusSpec:
        for spec in self.bonuses:
            if spec.bonus_type == bonus_type:
                return spec
        raise ConfigurationError(
            f"No bonus configured for {bonus_type.value!r} in {self.name!r}"
        )

    def speed_increment(self, speed_mode: str) -> int:
        try:
            return self.speed_modes[speed_mode]
        except KeyError:
            raise ConfigurationError(
                f"Unknown speed mode {speed_mode!r}. "
                f"Available: {sorted(self.speed_modes)}"
            ) from None

    @classmethod
    def from_preset(cls, name: str, **overrides) -> "GameConfig":
        """Build a configuration from one of the tuned presets.

        Keyword overrides replace top-level fields, e.g.
        ``GameConfig.from_preset("50", target_rtp=0.96)``.
        """
        if name not in PRESETS:
            raise ConfigurationError(
                f"Unknown preset {name!r}. Available: {sorted(PRESETS)}"
            )
        preset = PRESETS[name]

        bonuses = tuple(
            BonusSpec(
                bonus_type=BonusType(bonus_key),
                target_jump_steps=spec["target_jump_steps"],
                jump_distribution=tuple(
                    JumpBin.from_tuple(entry) for entry in spec["jump_distribution"]
                ),
                crash_probability=spec["crash_probability"],
            )
            for bonus_key, spec in preset["bonuses"].items()
        )

        values = {
            "name": name,
            "total_steps": preset["total_steps"],
            "lambda_crash": preset["lambda_crash"],
            "bonuses": bonuses,
            "free_bonus_step_threshold": preset["free_bonus_step_threshold"],
            "free_bonus_types": tuple(
                BonusType(b) for b in preset["free_bonus_types"]
            ),
        }
        values.update(overrides)
        return cls(**values)
