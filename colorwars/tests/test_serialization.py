"""
Tests for the session wire format.
"""

import pytest

from ..engine_core.errors import IllegalMove, InvalidConfiguration
from ..engine_core.rules import apply_move, undo
from ..engine_core.serialization import board_from_wire, board_to_wire, from_wire, to_wire
from ..engine_core.state import GameStatus


class TestToWire:
    """Tests for serializing sessions."""

    def test_shape(self, opened_session):
        data = to_wire(opened_session)

        assert set(data) == {"board", "players", "currentPlayer", "status", "moveHistory", "winner"}
        assert data["players"] == ["red", "blue"]
        assert data["currentPlayer"] == "red"
        assert data["status"] == "playing"
        assert data["winner"] is None
        assert data["board"][0][0] == {"owner": "red", "count": 2, "capacity": 2}
        assert data["board"][2][2] == {"owner": None, "count": 0, "capacity": 4}
        assert data["moveHistory"] == [
            {"player": "red", "move": {"row": 0, "col": 0}},
            {"player": "blue", "move": {"row": 4, "col": 4}},
        ]

    def test_ended_game(self, winning_session):
        apply_move(winning_session, 0, 0)

        data = to_wire(winning_session)

        assert data["status"] == "ended"
        assert data["winner"] == "red"


class TestFromWire:
    """Tests for rebuilding sessions."""

    def test_rebuilds_state(self, opened_session):
        rebuilt = from_wire(to_wire(opened_session))

        assert rebuilt.board == opened_session.board
        assert rebuilt.players == opened_session.players
        assert rebuilt.current_player == "red"
        assert rebuilt.status == GameStatus.PLAYING
        assert [r.move for r in rebuilt.move_history] == [
            r.move for r in opened_session.move_history
        ]

    def test_rebuilt_session_keeps_playing(self, opened_session):
        rebuilt = from_wire(to_wire(opened_session))

        result = apply_move(rebuilt, 0, 0)

        assert len(result.explosions) == 1
        assert rebuilt.current_player == "blue"

    def test_received_moves_cannot_be_undone(self, opened_session):
        rebuilt = from_wire(to_wire(opened_session))

        with pytest.raises(IllegalMove):
            undo(rebuilt)

        # Moves made after rebuilding still have snapshots
        apply_move(rebuilt, 0, 0)
        undo(rebuilt)
        assert rebuilt.board.cell(0, 0).count == 2

    def test_unknown_current_player(self, opened_session):
        data = to_wire(opened_session)
        data["currentPlayer"] = "green"

        with pytest.raises(InvalidConfiguration):
            from_wire(data)

    def test_unknown_status(self, opened_session):
        data = to_wire(opened_session)
        data["status"] = "paused"

        with pytest.raises(InvalidConfiguration):
            from_wire(data)

    def test_unknown_cell_owner(self, opened_session):
        data = to_wire(opened_session)
        data["board"][1][1]["owner"] = "green"
        data["board"][1][1]["count"] = 1

        with pytest.raises(InvalidConfiguration):
            from_wire(data)


class TestBoardWire:
    """Tests for the board codec."""

    def test_capacity_mismatch(self, empty_board):
        rows = board_to_wire(empty_board)
        rows[0][0]["capacity"] = 4

        with pytest.raises(InvalidConfiguration):
            board_from_wire(rows)

    def test_ragged_rows(self, empty_board):
        rows = board_to_wire(empty_board)
        rows[3].pop()

        with pytest.raises(InvalidConfiguration):
            board_from_wire(rows)

    def test_negative_count(self, empty_board):
        rows = board_to_wire(empty_board)
        rows[2][2]["count"] = -1

        with pytest.raises(InvalidConfiguration):
            board_from_wire(rows)

    def test_unsupported_size(self):
        rows = [[{"owner": None, "count": 0, "capacity": 2}] * 2] * 2

        with pytest.raises(InvalidConfiguration):
            board_from_wire(rows)
