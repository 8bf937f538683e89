"""Round state data models - everything one simulated round knows about itself."""

from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional, Tuple

from src.simulation_engine.models import BonusType


class SimulationMode(str, Enum):
    """How bonuses are activated during a batch."""

    BASE = "base"  # No paid bonuses; optional free bonuses early on
    MYSTIC = "mystic"  # Paid Mystic bonus offered on every move
    DRAGON = "dragon"  # Paid Dragon bonus offered on every move

    @property
    def bonus_type(self) -> Optional[BonusType]:
        if self is SimulationMode.MYSTIC:
            return BonusType.MYSTIC
        if self is SimulationMode.DRAGON:
            return BonusType.DRAGON
        return None


class RoundOutcome(str, Enum):
    CASHED_OUT = "Cashed out"
    CRASHED_DURING_MOVE = "Crashed during move"
    CRASHED_ON_BONUS = "Crashed on bonus"
    REACHED_TOP = "Reached the top"

    @property
    def is_crash(self) -> bool:
        return self in (RoundOutcome.CRASHED_DURING_MOVE, RoundOutcome.CRASHED_ON_BONUS)


@dataclass(frozen=True)
class CashoutStrategy:
    """Where the player intends to cash out: a fixed step, or random per round."""

    fixed_step: Optional[int] = None

    @classmethod
    def random(cls) -> "CashoutStrategy":
        return cls()

    @classmethod
    def fixed(cls, step: int) -> "CashoutStrategy":
        return cls(fixed_step=step)

    @classmethod
    def parse(cls, value: str) -> "CashoutStrategy":
        """Parse ``"R"`` (random) or a step number."""
        value = str(value).strip()
        if value.lower() == "r":
            return cls.random()
        try:
            return cls.fixed(int(value))
        except ValueError:
            raise ValueError(
                f"Invalid cashout strategy {value!r}: use 'R' or a step number"
            ) from None

    @property
    def is_random(self) -> bool:
        return self.fixed_step is None

    def choose(self, rng, total_steps: int) -> int:
        """Cashout step for one round."""
        if self.fixed_step is None:
            return rng.randint(0, total_steps)
        return self.fixed_step

    def describe(self, total_steps: int) -> str:
        if self.fixed_step is None:
            return f"Random (0-{total_steps})"
        return f"Fixed at step {self.fixed_step}"


@dataclass(frozen=True)
class BonusEvent:
    """One bonus activation inside a round."""

    round_number: int
    bonus_type: BonusType
    is_free: bool
    step_before: int
    step_after: int
    cost: float
    payout: float
    crash_step_before: int
    crash_step_after: Optional[int] = None  # Set only when the crash was redistributed
    crashed: bool = False

    @property
    def rtp(self) -> float:
        """Payout per unit of cost; infinite for a free bonus that paid out."""
        if self.cost > 0:
            return self.payout / self.cost
        return float("inf") if self.payout > 0 else 0.0

    @property
    def was_redistributed(self) -> bool:
        return self.crash_step_after is not None


@dataclass(frozen=True)
class RoundResult:
    """Terminal record of one round, handed to the aggregator and CSV logs."""

    round_number: int
    final_step: int
    outcome: RoundOutcome
    total_cost: float
    total_winnings: float
    crash_step: int
    cashout_step: int
    used_bonus: Optional[BonusType] = None
    speed_mode: Optional[str] = None
    bonus_events: Tuple[BonusEvent, ...] = ()


@dataclass
class RoundState:
    """Mutable state of a round in progress."""

    round_number: int
    crash_step: int
    cashout_step: int
    total_cost: float
    current_step: int = 0
    total_winnings: float = 0.0
    used_bonus: Optional[BonusType] = None
    bonus_events: List[BonusEvent] = field(default_factory=list)

    @classmethod
    def create_new(
        cls,
        round_number: int,
        crash_step: int,
        cashout_step: int,
        base_stake: float,
    ) -> "RoundState":
        """Factory method for a round that has not moved yet."""
        return cls(
            round_number=round_number,
            crash_step=crash_step,
            cashout_step=cashout_step,
            total_cost=base_stake,
        )

    def cashout_reached(self, from_step: int, to_step: int) -> bool:
        """Whether the cashout step lies in ``(from_step, to_step]``."""
        return from_step < self.cashout_step <= to_step

    def crash_skipped(self, from_step: int, to_step: int) -> bool:
        """Whether the pending crash step lies in ``(from_step, to_step]``."""
        return from_step < self.crash_step <= to_step

    def advance_to(self, step: int):
        """Move forward; the step pointer never moves back within a round."""
        if step < self.current_step:
            raise ValueError(
                f"Cannot move back from step {self.current_step} to {step}"
            )
        self.current_step = step

    def finish(
        self,
        outcome: RoundOutcome,
        final_step: int,
        winnings: float = 0.0,
        speed_mode: Optional[str] = None,
    ) -> RoundResult:
        """Freeze the round into its terminal :class:`RoundResult`."""
        self.total_winnings = winnings
        return RoundResult(
            round_number=self.round_number,
            final_step=final_step,
            outcome=outcome,
            total_cost=self.total_cost,
            total_winnings=self.total_winnings,
            crash_step=self.crash_step,
            cashout_step=self.cashout_step,
            used_bonus=self.used_bonus,
            speed_mode=speed_mode,
            bonus_events=tuple(self.bonus_events),
        )
