"""
Game Loop - Drives a local game: hot-seat humans and AI opponents.

The loop:
1. Human submits a move
2. Rules engine validates and applies it
3. AI players take their turns until a human is up again
4. Caller shows the board and the explosion trace
5. Repeat

The loop is the single writer for its session; a move is fully
resolved before the next one is accepted.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from enum import Enum
import logging

from ..engine_core.errors import IllegalMove
from ..engine_core.rules import MoveResult, RulesEngine, create_session, get_valid_moves
from ..engine_core.state import GameSession, GameStatus
from ..bots import BotDecision, BotPolicy, evaluate_hint

logger = logging.getLogger(__name__)


class LoopState(Enum):
    """State of the game loop."""
    WAITING_HUMAN = "waiting_human"
    RUNNING_AI = "running_ai"
    GAME_OVER = "game_over"


@dataclass
class TurnResult:
    """
    Result of processing a human move.

    Contains every move applied (the human's, then the AI replies)
    so the caller can replay them in order.
    """
    success: bool
    loop_state: LoopState
    moves: list[MoveResult] = field(default_factory=list)
    errors: list[str] = field(default_factory=list)
    winner: str | None = None


class GameLoop:
    """
    The local game driver.

    Usage:
        loop = GameLoop.create(player_count=2, bots={"blue": get_policy("hard")})

        result = loop.play(2, 3)
        if not result.success:
            show_errors(result.errors)

        show_board(loop.session.board)
    """

    def __init__(
        self,
        session: GameSession,
        bots: dict[str, BotPolicy] | None = None,
        rules: RulesEngine | None = None,
    ):
        self.session = session
        self.bots = bots or {}
        self.rules = rules or RulesEngine()
        self.state = LoopState.WAITING_HUMAN

    @classmethod
    def create(
        cls,
        player_count: int = 2,
        board_size: int | None = None,
        bots: dict[str, BotPolicy] | None = None,
    ) -> GameLoop:
        return cls(create_session(player_count, board_size=board_size), bots=bots)

    def is_bot_turn(self) -> bool:
        return self.session.current_player in self.bots

    def start(self) -> TurnResult:
        """Run AI turns if a bot moves first (e.g. an all-AI game)."""
        return self._run_ai_turns([])

    def play(self, row: int, col: int) -> TurnResult:
        """
        Apply a human move, then the AI replies.

        Illegal moves come back as a failed TurnResult; the session
        is unchanged.
        """
        if self.session.status != GameStatus.PLAYING:
            return TurnResult(
                success=False,
                loop_state=self.state,
                errors=["Game is over - start a new game"],
            )
        if self.is_bot_turn():
            return TurnResult(
                success=False,
                loop_state=self.state,
                errors=[f"It is {self.session.current_player}'s (AI) turn"],
            )

        try:
            result = self.rules.apply(self.session, row, col)
        except IllegalMove as e:
            return TurnResult(success=False, loop_state=self.state, errors=[str(e)])

        return self._run_ai_turns([result])

    def undo(self) -> bool:
        """
        Undo back to the most recent human turn.

        Returns False when there is nothing to undo.
        """
        if not self.session.move_history:
            return False

        self.rules.undo(self.session)
        while self.session.move_history and self.is_bot_turn():
            self.rules.undo(self.session)

        self.state = LoopState.WAITING_HUMAN
        return True

    def hint(self) -> BotDecision:
        return evaluate_hint(self.session)

    def new_game(self) -> TurnResult:
        self.rules.new_game(self.session)
        self.state = LoopState.WAITING_HUMAN
        return self.start()

    def _run_ai_turns(self, moves: list[MoveResult]) -> TurnResult:
        """Run AI turns until a human is up or the game ends."""
        self.state = LoopState.RUNNING_AI
        while self.session.status == GameStatus.PLAYING and self.is_bot_turn():
            player = self.session.current_player
            policy = self.bots[player]
            decision = policy.select_move(
                self.session, player, get_valid_moves(self.session, player)
            )
            logger.debug("%s (%s) plays %s", player, policy.get_name(), decision.position)
            moves.append(self.rules.apply(self.session, decision.row, decision.col))

        if self.session.status == GameStatus.ENDED:
            self.state = LoopState.GAME_OVER
        else:
            self.state = LoopState.WAITING_HUMAN

        return TurnResult(
            success=True,
            loop_state=self.state,
            moves=moves,
            winner=self.session.winner,
        )
