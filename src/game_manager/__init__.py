from src.game_manager.bonus_rules import BonusDecision, BonusRules
from src.game_manager.game_initializer import GameInitializer, SimulationContext
from src.game_manager.round_controller import RoundController, simulate_round
from src.game_manager.round_state import (
    BonusEvent,
    CashoutStrategy,
    RoundOutcome,
    RoundResult,
    RoundState,
    SimulationMode,
)
from src.game_manager.table_persistence import MultiplierTablePersistence

__all__ = [
    "BonusDecision",
    "BonusEvent",
    "BonusRules",
    "CashoutStrategy",
    "GameInitializer",
    "MultiplierTablePersistence",
    "RoundController",
    "RoundOutcome",
    "RoundResult",
    "RoundState",
    "SimulationContext",
    "SimulationMode",
    "simulate_round",
]
