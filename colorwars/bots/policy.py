"""
Bot Policy - Interface for bot decision-making.

A BotPolicy takes a session and the moves available to a player and
returns a decision. Three tiers ship with the engine:
- easy: uniform random
- medium: explosions first, then contact with opponents, then random
- hard: exhaustive 1-ply search scored by the heuristic evaluator
"""

from __future__ import annotations
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING, Any
import random

from ..engine_core.errors import IllegalMove, InvalidConfiguration
from ..engine_core.rules import get_valid_moves
from ..engine_core.state import GameStatus
from .evaluator import HeuristicEvaluator

if TYPE_CHECKING:
    from ..engine_core.state import GameSession


class Difficulty(str, Enum):
    """AI difficulty tiers."""
    EASY = "easy"
    MEDIUM = "medium"
    HARD = "hard"


@dataclass
class BotDecision:
    """
    A move chosen by a bot.

    Contains:
    - The cell to play
    - Explanation (for UI/debugging)
    - Confidence in the decision
    """
    row: int
    col: int
    player: str
    explanation: str = ""
    confidence: float = 1.0

    # Evaluation details (for debugging)
    evaluated_moves: int = 0
    best_score: float = 0.0
    evaluation_details: dict[str, Any] = field(default_factory=dict)

    @property
    def position(self) -> tuple[int, int]:
        return self.row, self.col

    def to_dict(self) -> dict[str, int]:
        return {"row": self.row, "col": self.col}


class BotPolicy(ABC):
    """
    Abstract base class for bot policies.

    A policy defines how a bot selects moves.
    Implementations range from random play to lookahead search.
    """

    @abstractmethod
    def select_move(
        self,
        session: GameSession,
        player: str,
        valid_moves: list[tuple[int, int]],
    ) -> BotDecision:
        """
        Select a move from the valid moves.

        Args:
            session: Current game session (never mutated)
            player: The player the bot moves for
            valid_moves: Cells the player may act on

        Returns:
            BotDecision with the selected cell
        """
        pass

    def get_name(self) -> str:
        """Get the bot's name/identifier."""
        return self.__class__.__name__


class RandomPolicy(BotPolicy):
    """
    Random policy - picks uniformly among valid moves.

    The easy tier, and the forced move for an expired turn timer.
    """

    def __init__(self, seed: int | None = None):
        self.rng = random.Random(seed)

    def select_move(
        self,
        session: GameSession,
        player: str,
        valid_moves: list[tuple[int, int]],
    ) -> BotDecision:
        if not valid_moves:
            raise ValueError("No valid moves available")

        row, col = self.rng.choice(valid_moves)
        return BotDecision(
            row=row,
            col=col,
            player=player,
            explanation="Selected randomly",
            confidence=1.0 / len(valid_moves),
            evaluated_moves=len(valid_moves),
        )


class AggressivePolicy(RandomPolicy):
    """
    Medium tier.

    Prefers moves that bring a cell to capacity, then moves touching
    an opponent's cell, then anything.
    """

    def select_move(
        self,
        session: GameSession,
        player: str,
        valid_moves: list[tuple[int, int]],
    ) -> BotDecision:
        if not valid_moves:
            raise ValueError("No valid moves available")

        board = session.board

        explosive = [(r, c) for r, c in valid_moves if board.cell(r, c).is_critical]
        if explosive:
            return self._pick(explosive, player, "Triggers an explosion", len(valid_moves))

        contact = [
            (r, c) for r, c in valid_moves
            if any(
                board.cell(nr, nc).owner not in (None, player)
                for nr, nc in board.neighbors(r, c)
            )
        ]
        if contact:
            return self._pick(contact, player, "Next to an opponent", len(valid_moves))

        return self._pick(valid_moves, player, "Selected randomly", len(valid_moves))

    def _pick(
        self,
        candidates: list[tuple[int, int]],
        player: str,
        explanation: str,
        evaluated: int,
    ) -> BotDecision:
        row, col = self.rng.choice(candidates)
        return BotDecision(
            row=row,
            col=col,
            player=player,
            explanation=explanation,
            confidence=1.0 / len(candidates),
            evaluated_moves=evaluated,
            evaluation_details={"candidates": len(candidates)},
        )


class GreedyPolicy(BotPolicy):
    """
    Hard tier - exhaustive 1-ply search.

    Every valid move is played on a clone and scored; the strictly
    highest score wins, so ties go to the first move in board order.
    """

    def __init__(self, evaluator: HeuristicEvaluator | None = None):
        self.evaluator = evaluator or HeuristicEvaluator()

    def select_move(
        self,
        session: GameSession,
        player: str,
        valid_moves: list[tuple[int, int]],
    ) -> BotDecision:
        if not valid_moves:
            raise ValueError("No valid moves available")

        best = None
        scores: dict[str, float] = {}
        for row, col in valid_moves:
            evaluation = self.evaluator.evaluate_move(session, row, col, player)
            scores[f"{row},{col}"] = evaluation.score
            if best is None or evaluation.score > best.score:
                best = evaluation

        explanation = "Wins the game" if best.wins else f"Best board score ({best.score:g})"
        return BotDecision(
            row=best.row,
            col=best.col,
            player=player,
            explanation=explanation,
            evaluated_moves=len(valid_moves),
            best_score=best.score,
            evaluation_details={"scores": scores, "explosions": best.explosions},
        )


def get_policy(difficulty: Difficulty | str, seed: int | None = None) -> BotPolicy:
    """
    Build the policy for a difficulty tier.

    Raises:
        InvalidConfiguration: unknown difficulty
    """
    try:
        tier = Difficulty(difficulty)
    except ValueError:
        raise InvalidConfiguration(f"Unknown difficulty: {difficulty}")

    if tier == Difficulty.EASY:
        return RandomPolicy(seed=seed)
    if tier == Difficulty.MEDIUM:
        return AggressivePolicy(seed=seed)
    return GreedyPolicy()


def ai_move(
    session: GameSession,
    difficulty: Difficulty | str = Difficulty.MEDIUM,
    seed: int | None = None,
    policy: BotPolicy | None = None,
) -> BotDecision:
    """
    Choose a move for the player whose turn it is.

    Raises:
        IllegalMove: the game is not in progress or the player has no move
    """
    player = session.current_player
    valid_moves = _moves_for_current_player(session)
    policy = policy or get_policy(difficulty, seed=seed)
    return policy.select_move(session, player, valid_moves)


def evaluate_hint(session: GameSession) -> BotDecision:
    """Hard-tier suggestion for the player whose turn it is."""
    valid_moves = _moves_for_current_player(session)
    return GreedyPolicy().select_move(session, session.current_player, valid_moves)


def _moves_for_current_player(session: GameSession) -> list[tuple[int, int]]:
    if session.status != GameStatus.PLAYING:
        raise IllegalMove(f"Game is not in progress ({session.status.value})")

    valid_moves = get_valid_moves(session, session.current_player)
    if not valid_moves:
        raise IllegalMove(f"{session.current_player} has no valid moves")
    return valid_moves
