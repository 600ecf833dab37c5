"""
Heuristic Evaluator - Scores boards and moves for bot decision-making.

The board score values both territory (cells held) and material
(dots stored):

    score = sum(count + 1 for own cells) - sum(count + 1 for every other owned cell)

Every opponent counts against the player, not a single rival, so the
same score works for any player count.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from ..engine_core.rules import RulesEngine

if TYPE_CHECKING:
    from ..engine_core.board import Board
    from ..engine_core.state import GameSession


# Added to the score of a move that wins the game outright
WIN_BONUS = 1000.0


def score_board(board: Board, player: str) -> int:
    """Territory plus material for player, minus everyone else's."""
    score = 0
    for row in board.cells:
        for cell in row:
            if cell.owner is None:
                continue
            if cell.owner == player:
                score += cell.count + 1
            else:
                score -= cell.count + 1
    return score


@dataclass
class MoveEvaluation:
    """Result of evaluating one candidate move."""
    row: int
    col: int
    score: float
    explosions: int = 0
    wins: bool = False


@dataclass
class HeuristicEvaluator:
    """
    Evaluates moves by playing them on a cloned session.

    Used by bots for 1-ply lookahead:
    1. Clone the session
    2. Apply the move through the real rules engine
    3. Score the resulting board
    """
    rules: RulesEngine = field(default_factory=RulesEngine)
    win_bonus: float = WIN_BONUS

    def evaluate(self, session: GameSession, player: str) -> float:
        """Score the current board from player's perspective."""
        score = float(score_board(session.board, player))
        if session.winner == player:
            score += self.win_bonus
        elif session.winner:
            score -= self.win_bonus
        return score

    def evaluate_move(
        self,
        session: GameSession,
        row: int,
        col: int,
        player: str | None = None,
    ) -> MoveEvaluation:
        """
        Evaluate a move by applying it to a clone.

        The live session is never touched. If player is given and is
        not the player to move, the clone is handed to them first.
        """
        simulated = session.clone()
        if player is not None and player != simulated.current_player:
            simulated.current_player_index = simulated.players.index(player)
        mover = simulated.current_player

        result = self.rules.apply(simulated, row, col)
        return MoveEvaluation(
            row=row,
            col=col,
            score=self.evaluate(simulated, mover),
            explosions=len(result.explosions),
            wins=result.winner == mover,
        )
