"""Multiplier table persistence - cache the table as ``Step,Multiplier`` CSV."""

import logging
import math
from pathlib import Path
from typing import Optional

import pandas as pd

from src.game_manager.config import (
    MULTIPLIER_COLUMNS,
    MULTIPLIER_CSV_PATTERN,
    TABLES_DIR,
)
from src.simulation_engine.models import GameConfig
from src.simulation_engine.multiplier_curve import (
    MultiplierTable,
    build_multiplier_table,
)

logger = logging.getLogger(__name__)


def _format_number(value: float) -> str:
    """Shortest round-trip text, without a trailing ``.0`` on whole numbers."""
    if float(value).is_integer():
        return str(int(value))
    return repr(float(value))


class MultiplierTablePersistence:
    """Loads cached multiplier tables, generating and saving them on a miss."""

    def __init__(self, storage_dir: Optional[Path] = None):
        self.storage_dir = storage_dir or TABLES_DIR
        self.storage_dir.mkdir(parents=True, exist_ok=True)

    def table_path(self, total_steps: int) -> Path:
        return self.storage_dir / MULTIPLIER_CSV_PATTERN.format(total_steps=total_steps)

    def load_or_build(self, config: GameConfig) -> MultiplierTable:
        """Return the cached table for *config*, generating it if needed.

        A cached file that is unreadable or does not match *config* (step
        count or top multiplier) is regenerated and overwritten.
        """
        filepath = self.table_path(config.total_steps)

        if filepath.exists():
            table = self.load_table(filepath)
            if table is not None and self._matches(table, config):
                logger.info("Loaded multiplier table from %s", filepath)
                return table
            logger.warning("Stale multiplier table %s, regenerating", filepath)

        table = build_multiplier_table(config)
        self.save_table(table, filepath)
        logger.info("Generated multiplier table and saved to %s", filepath)
        return table

    def load_table(self, filepath: Path) -> Optional[MultiplierTable]:
        """Read a ``Step,Multiplier`` CSV.

        Returns:
            The table, or None if the file is corrupt.
        """
        try:
            df = pd.read_csv(
                filepath, usecols=MULTIPLIER_COLUMNS, float_precision="round_trip"
            )
            df = df.sort_values("Step")
            steps = df["Step"].astype(int).tolist()
            if steps != list(range(len(steps))):
                raise ValueError(f"steps are not contiguous from 0: {steps[:5]}...")
            return MultiplierTable.from_values(df["Multiplier"].astype(float))
        except (
            OSError,
            KeyError,
            ValueError,
            pd.errors.EmptyDataError,
            pd.errors.ParserError,
        ) as e:
            logger.warning("Corrupt multiplier table %s: %s", filepath, e)
            return None

    def save_table(self, table: MultiplierTable, filepath: Path) -> Path:
        """Write *table* to *filepath*; returns the path written.

        Multipliers are pre-formatted as text so whole numbers stay bare
        (``0,1``) and the rest keep their shortest round-trip digits.
        """
        df = pd.DataFrame(
            {
                "Step": range(len(table.values)),
                "Multiplier": [_format_number(value) for value in table.values],
            },
            columns=MULTIPLIER_COLUMNS,
        )
        df.to_csv(filepath, index=False, encoding="utf-8", lineterminator="\n")
        return filepath

    @staticmethod
    def _matches(table: MultiplierTable, config: GameConfig) -> bool:
        if table.total_steps != config.total_steps:
            return False
        return math.isclose(
            table.values[-1], config.target_max_multiplier, rel_tol=1e-9
        )
