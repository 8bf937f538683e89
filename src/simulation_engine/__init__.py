from src.simulation_engine.crash_calibrator import (
    CrashDistribution,
    calibrate_crash_distribution,
)
from src.simulation_engine.jump_sampler import BonusJumpSampler
from src.simulation_engine.models import (
    BonusSpec,
    BonusType,
    ConfigurationError,
    GameConfig,
    JumpBin,
    JumpBinKind,
    JumpResult,
)
from src.simulation_engine.multiplier_curve import (
    MultiplierTable,
    build_multiplier_table,
)

__all__ = [
    "BonusJumpSampler",
    "BonusSpec",
    "BonusType",
    "ConfigurationError",
    "CrashDistribution",
    "GameConfig",
    "JumpBin",
    "JumpBinKind",
    "JumpResult",
    "MultiplierTable",
    "build_multiplier_table",
    "calibrate_crash_distribution",
]
