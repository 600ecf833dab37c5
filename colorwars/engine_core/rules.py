"""
Rules Engine - Move legality, move application, win detection and undo.

The rules engine is the single point of session mutation.
Every accepted move runs the same pipeline, whether it comes from a
local player, an AI lookahead on a cloned session, or a server
validating a remote move:

    validate -> snapshot -> place -> explode -> check winner -> rotate

Design principles:
- Validates before applying: a rejected move leaves the session untouched
- Opening moves seed 3 dots (clamped to capacity) and never explode
- No hidden state: everything lives in GameSession
"""

from __future__ import annotations
from dataclasses import dataclass, field

from .board import Board
from .errors import IllegalMove, InternalInvariant, InvalidConfiguration
from .explosion import ExplosionEngine, ExplosionEvent
from .state import (
    GameSession,
    GameStatus,
    Move,
    MoveRecord,
    BOARD_SIZES,
    MAX_PLAYERS,
    MIN_PLAYERS,
    OPENING_DOTS,
    PLAYER_COLORS,
)


@dataclass
class MoveResult:
    """
    Result of applying a move.

    Contains:
    - The (mutated) session
    - The move that was applied
    - The explosion trace, in processing order
    - The winner, if the move ended the game
    """
    session: GameSession
    move: Move
    is_opening: bool = False
    explosions: list[ExplosionEvent] = field(default_factory=list)
    winner: str | None = None

    @property
    def exploded(self) -> bool:
        return bool(self.explosions)


def board_size_for(player_count: int) -> int:
    """Board size used for a player count."""
    if player_count not in BOARD_SIZES:
        raise InvalidConfiguration(
            f"Player count must be between {MIN_PLAYERS} and {MAX_PLAYERS}, got {player_count}"
        )
    return BOARD_SIZES[player_count]


def create_session(
    player_count: int = 2,
    board_size: int | None = None,
    status: GameStatus = GameStatus.PLAYING,
) -> GameSession:
    """
    Create a new game session.

    Args:
        player_count: Number of players (2-6)
        board_size: Optional override of the size picked for player_count
        status: PLAYING for local games, WAITING for an online lobby

    Raises:
        InvalidConfiguration: unsupported player count or board size
    """
    size = board_size_for(player_count)
    if board_size is not None:
        size = board_size

    return GameSession(
        board=Board.create(size),
        players=list(PLAYER_COLORS[:player_count]),
        status=status,
    )


@dataclass
class RulesEngine:
    """
    Applies moves to sessions.

    Stateless - all state is in GameSession.
    """
    explosion_engine: ExplosionEngine = field(default_factory=ExplosionEngine)

    def validate(self, session: GameSession, row: int, col: int) -> str | None:
        """
        Check a move for the current player.

        Returns error message if illegal, None if legal.
        """
        if session.status != GameStatus.PLAYING:
            return f"Game is not in progress ({session.status.value})"

        if not session.board.in_bounds(row, col):
            return f"Cell ({row}, {col}) is off the board"

        cell = session.board.cell(row, col)

        # Opening placement: any empty cell
        if session.is_opening_phase and cell.owner is None:
            return None

        if cell.owner != session.current_player:
            if cell.owner is None:
                return "Empty cells can only be taken with an opening move"
            return f"Cell ({row}, {col}) belongs to {cell.owner}"

        return None

    def is_legal(self, session: GameSession, row: int, col: int) -> bool:
        return self.validate(session, row, col) is None

    def valid_moves(self, session: GameSession, player: str) -> list[tuple[int, int]]:
        """
        Cells player may act on when it is their turn.

        Unowned cells count only while player still has an opening move
        to make; after that, only cells they own.
        """
        opening = session.is_opening_phase and not session.has_moved(player)
        moves = []
        for row, col in session.board.positions():
            owner = session.board.cell(row, col).owner
            if owner == player or (opening and owner is None):
                moves.append((row, col))
        return moves

    def apply(self, session: GameSession, row: int, col: int) -> MoveResult:
        """
        Apply a move for the current player.

        Raises:
            IllegalMove: the move is not legal; session unchanged
            InternalInvariant: the cascade did not terminate; the game is ended
        """
        error = self.validate(session, row, col)
        if error:
            raise IllegalMove(error, row=row, col=col)

        player = session.current_player
        is_first_move = not session.has_moved(player)
        move = Move(row=row, col=col, player=player)

        session.move_history.append(
            MoveRecord(
                board_snapshot=session.board.clone(),
                player=player,
                move=move,
                player_index=session.current_player_index,
                status_before=session.status,
            )
        )

        cell = session.board.cell(row, col)
        cell.owner = player
        if is_first_move:
            cell.count = min(OPENING_DOTS, cell.capacity)
        else:
            cell.count += 1

        explosions: list[ExplosionEvent] = []
        if not is_first_move and cell.count >= cell.capacity:
            try:
                explosions = self.explosion_engine.explode(session.board, row, col, player)
            except InternalInvariant:
                # The board is no longer trustworthy; stop the game
                session.status = GameStatus.ENDED
                raise

        winner = self.check_winner(session)
        if winner:
            session.status = GameStatus.ENDED
            session.winner = winner
        else:
            session.current_player_index = self.next_player_index(session)

        return MoveResult(
            session=session,
            move=move,
            is_opening=is_first_move,
            explosions=explosions,
            winner=winner,
        )

    def check_winner(self, session: GameSession) -> str | None:
        """
        The only player left with cells, once everyone has opened.

        Returns None during the opening phase, and whenever zero or
        several players hold cells.
        """
        if session.is_opening_phase:
            return None

        alive = [player for player, count in session.cell_counts().items() if count > 0]
        if len(alive) == 1:
            return alive[0]
        return None

    def next_player_index(self, session: GameSession) -> int:
        """
        Index of the player who moves next.

        Skips players that have opened and lost all their cells.
        """
        counts = session.cell_counts()
        n = session.num_players
        for step in range(1, n + 1):
            idx = (session.current_player_index + step) % n
            player = session.players[idx]
            if counts[player] > 0 or not session.has_moved(player):
                return idx
        return (session.current_player_index + 1) % n

    def undo(self, session: GameSession) -> GameSession:
        """
        Revert the most recent move.

        Restores board, current player and status (an undo can
        reverse a game-ending move).

        Raises:
            IllegalMove: nothing to undo, or the last move has no snapshot
        """
        if not session.move_history:
            raise IllegalMove("No moves to undo")

        record = session.move_history[-1]
        if record.board_snapshot is None:
            raise IllegalMove("Move history has no snapshot to restore")

        session.move_history.pop()
        session.board = record.board_snapshot.clone()
        session.current_player_index = record.player_index
        session.status = record.status_before
        session.winner = None
        return session

    def new_game(self, session: GameSession) -> GameSession:
        """Discard board and history; same players and board size."""
        session.board = Board.create(session.board.size)
        session.current_player_index = 0
        session.status = GameStatus.PLAYING
        session.move_history = []
        session.winner = None
        return session


_default_engine = RulesEngine()


def is_legal_move(session: GameSession, row: int, col: int) -> bool:
    """Whether the current player may act on (row, col)."""
    return _default_engine.is_legal(session, row, col)


def get_valid_moves(session: GameSession, player: str) -> list[tuple[int, int]]:
    """Cells player may act on when it is their turn."""
    return _default_engine.valid_moves(session, player)


def apply_move(session: GameSession, row: int, col: int) -> MoveResult:
    """
    Convenience function to apply a move.

    Uses a shared RulesEngine; mutates session in place.
    """
    return _default_engine.apply(session, row, col)


def check_winner(session: GameSession) -> str | None:
    return _default_engine.check_winner(session)


def undo(session: GameSession) -> GameSession:
    return _default_engine.undo(session)


def new_game(session: GameSession) -> GameSession:
    return _default_engine.new_game(session)
