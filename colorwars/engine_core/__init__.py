"""
Engine Core - Deterministic board simulation.

The engine is the runtime that:
1. Creates boards and sessions
2. Validates moves
3. Applies moves via the rules engine
4. Resolves chain reactions
5. Detects the winner

The same module backs local play, AI lookahead and server validation.
"""

from .board import Board, Cell, compute_capacity
from .errors import ColorWarsError, IllegalMove, InvalidConfiguration, InternalInvariant
from .explosion import ExplosionEngine, ExplosionEvent, explode
from .state import GameSession, GameStatus, Move, MoveRecord, PLAYER_COLORS
from .rules import (
    RulesEngine,
    MoveResult,
    create_session,
    board_size_for,
    is_legal_move,
    get_valid_moves,
    apply_move,
    check_winner,
    undo,
    new_game,
)
from .serialization import to_wire, from_wire

__all__ = [
    "Board",
    "Cell",
    "compute_capacity",
    "ColorWarsError",
    "IllegalMove",
    "InvalidConfiguration",
    "InternalInvariant",
    "ExplosionEngine",
    "ExplosionEvent",
    "explode",
    "GameSession",
    "GameStatus",
    "Move",
    "MoveRecord",
    "PLAYER_COLORS",
    "RulesEngine",
    "MoveResult",
    "create_session",
    "board_size_for",
    "is_legal_move",
    "get_valid_moves",
    "apply_move",
    "check_winner",
    "undo",
    "new_game",
    "to_wire",
    "from_wire",
]
