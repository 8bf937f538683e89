"""CSV logs of simulated rounds and bonus activations.

Both files are truncated and given a header when a run starts, then rows
are buffered and appended in chunks of ``FLUSH_EVERY``.
"""

import logging
import math
from pathlib import Path
from typing import List, Optional

import pandas as pd

from src.game_manager.round_state import BonusEvent, RoundResult
from src.results_pipeline.config import (
    BONUS_COLUMNS,
    BONUS_CSV_PATTERN,
    FLUSH_EVERY,
    OUTPUT_DIR,
    ROUND_COLUMNS,
    ROUNDS_CSV_PATTERN,
)
from src.simulation_engine.multiplier_curve import MultiplierTable

logger = logging.getLogger(__name__)


def _money(value: float) -> str:
    return f"{value:.2f}"


def _percent(ratio: float) -> str:
    if math.isinf(ratio):
        return "Infinity"
    return f"{ratio * 100:.2f}"


class RoundLogWriter:
    """Writes per-round and per-bonus CSV rows for one simulation run."""

    def __init__(
        self,
        table: MultiplierTable,
        output_dir: Optional[Path] = None,
        flush_every: int = FLUSH_EVERY,
    ):
        self.table = table
        self.output_dir = output_dir or OUTPUT_DIR
        self.flush_every = flush_every
        self.rounds_path = self.output_dir / ROUNDS_CSV_PATTERN.format(
            total_steps=table.total_steps
        )
        self.bonus_path = self.output_dir / BONUS_CSV_PATTERN.format(
            total_steps=table.total_steps
        )
        self._round_rows: List[list] = []
        self._bonus_rows: List[list] = []

    def start(self):
        """Create (or truncate) both files and write their headers."""
        self.output_dir.mkdir(parents=True, exist_ok=True)
        pd.DataFrame(columns=ROUND_COLUMNS).to_csv(self.rounds_path, index=False)
        pd.DataFrame(columns=BONUS_COLUMNS).to_csv(self.bonus_path, index=False)
        logger.info("Writing round log to %s", self.rounds_path)
        logger.info("Writing bonus log to %s", self.bonus_path)

    def record(self, result: RoundResult):
        """Buffer *result* and its bonus events, flushing when the buffer is full."""
        self._round_rows.append(self._round_row(result))
        self._bonus_rows.extend(self._bonus_row(event) for event in result.bonus_events)
        if len(self._round_rows) >= self.flush_every:
            self.flush()

    def flush(self):
        """Append buffered rows to disk."""
        if self._round_rows:
            pd.DataFrame(self._round_rows, columns=ROUND_COLUMNS).to_csv(
                self.rounds_path, mode="a", header=False, index=False
            )
            self._round_rows = []
        if self._bonus_rows:
            pd.DataFrame(self._bonus_rows, columns=BONUS_COLUMNS).to_csv(
                self.bonus_path, mode="a", header=False, index=False
            )
            self._bonus_rows = []

    def close(self):
        self.flush()

    def __enter__(self):
        self.start()
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()
        return False

    def _round_row(self, result: RoundResult) -> list:
        return [
            result.round_number,
            result.final_step,
            _money(self.table.multiplier(result.final_step)),
            result.outcome.value,
            _money(result.total_winnings),
            _money(result.total_cost),
            result.crash_step,
            result.cashout_step,
            result.used_bonus.display_name if result.used_bonus else "None",
        ]

    @staticmethod
    def _bonus_row(event: BonusEvent) -> list:
        return [
            event.round_number,
            event.step_before,
            event.step_after,
            _money(event.cost),
            _percent(event.rtp),
            event.crash_step_before,
            event.crash_step_after if event.was_redistributed else "N/A",
        ]
