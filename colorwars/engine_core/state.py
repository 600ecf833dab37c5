"""
Game State - The session container every core call operates on.

Design principles:
- Explicit: the hosting layer owns a GameSession and passes it in;
  the core keeps no global game
- Serializable: see serialization.py for the wire format
- Undoable: every accepted move leaves a snapshot in move_history
"""

from __future__ import annotations
from dataclasses import dataclass, field
from enum import Enum

from .board import Board


class GameStatus(Enum):
    """Session lifecycle states."""
    WAITING = "waiting"  # Online lobby, not enough players yet
    PLAYING = "playing"
    ENDED = "ended"


# Turn order is the order of this sequence
PLAYER_COLORS: tuple[str, ...] = ("red", "blue", "green", "yellow", "purple", "orange")

MIN_PLAYERS = 2
MAX_PLAYERS = len(PLAYER_COLORS)

# Player count -> board size
BOARD_SIZES: dict[int, int] = {2: 5, 3: 6, 4: 7, 5: 8, 6: 9}

# Dots placed by a player's opening move (clamped to capacity)
OPENING_DOTS = 3


@dataclass(frozen=True)
class Move:
    """A request to act on one cell."""
    row: int
    col: int
    player: str

    def to_dict(self) -> dict:
        return {"row": self.row, "col": self.col}


@dataclass
class MoveRecord:
    """
    One entry of the move history.

    Holds everything undo needs to put the session back exactly
    as it was before the move.
    """
    board_snapshot: Board | None
    player: str
    move: Move
    player_index: int
    status_before: GameStatus = GameStatus.PLAYING


@dataclass
class GameSession:
    """
    Complete state of one game.

    Mutated only through the rules engine (apply_move, undo, new_game).
    """
    board: Board
    players: list[str]
    current_player_index: int = 0
    status: GameStatus = GameStatus.PLAYING
    move_history: list[MoveRecord] = field(default_factory=list)
    winner: str | None = None

    @property
    def current_player(self) -> str:
        return self.players[self.current_player_index]

    @property
    def num_players(self) -> int:
        return len(self.players)

    @property
    def is_opening_phase(self) -> bool:
        """Not every player has placed their opening move yet."""
        return len(self.move_history) < len(self.players)

    @property
    def is_over(self) -> bool:
        return self.status == GameStatus.ENDED

    def has_moved(self, player: str) -> bool:
        """Whether player already has an entry in the move history."""
        return any(record.player == player for record in self.move_history)

    def cell_counts(self) -> dict[str, int]:
        """Cells owned per player, including players with none."""
        owners = self.board.owners()
        return {player: owners.get(player, 0) for player in self.players}

    def clone(self) -> GameSession:
        """
        Independent copy for lookahead.

        History snapshots are never mutated, so the records themselves
        are shared; the board is deep-copied.
        """
        return GameSession(
            board=self.board.clone(),
            players=list(self.players),
            current_player_index=self.current_player_index,
            status=self.status,
            move_history=list(self.move_history),
            winner=self.winner,
        )
