"""
Pytest fixtures for ColorWars tests.
"""

import pytest

from ..engine_core.board import Board
from ..engine_core.rules import apply_move, create_session
from ..engine_core.state import GameSession


def place(board: Board, row: int, col: int, owner: str | None, count: int) -> None:
    """Put a cell into a given state (test setup only)."""
    cell = board.cell(row, col)
    cell.owner = owner
    cell.count = count


@pytest.fixture
def empty_board() -> Board:
    """A 5x5 board."""
    return Board.create(5)


@pytest.fixture
def two_player_session() -> GameSession:
    """A fresh 2-player game (red to move, 5x5)."""
    return create_session(2)


@pytest.fixture
def three_player_session() -> GameSession:
    """A fresh 3-player game (6x6)."""
    return create_session(3)


@pytest.fixture
def opened_session(two_player_session: GameSession) -> GameSession:
    """
    Both players have made their opening move.

    Red holds the top-left corner (2 dots), blue the bottom-right
    corner (2 dots). Red to move.
    """
    session = two_player_session
    apply_move(session, 0, 0)
    apply_move(session, 4, 4)
    return session


@pytest.fixture
def winning_session(two_player_session: GameSession) -> GameSession:
    """
    Red can win with its next move.

    Red: (0,0) with 2 dots. Blue: only (0,1) with 3 dots, which red's
    explosion at (0,0) captures. Red to move.
    """
    session = two_player_session
    apply_move(session, 0, 0)
    apply_move(session, 0, 1)
    return session
