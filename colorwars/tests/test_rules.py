"""
Tests for the rules engine.

Tests:
- Opening moves
- Move legality
- Explosions triggered by moves
- Win detection and gating
- Turn rotation and elimination
- Undo and new game
"""

import pytest

from ..engine_core.errors import IllegalMove, InternalInvariant
from ..engine_core.explosion import ExplosionEngine
from ..engine_core.rules import (
    RulesEngine,
    apply_move,
    check_winner,
    create_session,
    get_valid_moves,
    is_legal_move,
    new_game,
    undo,
)
from ..engine_core.state import GameStatus


class TestOpeningMove:
    """Tests for each player's first placement."""

    def test_corner_opening_clamped(self, two_player_session):
        result = apply_move(two_player_session, 0, 0)

        cell = two_player_session.board.cell(0, 0)
        assert cell.owner == "red"
        assert cell.count == 2
        assert result.is_opening
        assert not result.exploded

    def test_interior_opening_seeds_three(self, two_player_session):
        apply_move(two_player_session, 2, 2)

        assert two_player_session.board.cell(2, 2).count == 3

    def test_opening_passes_turn(self, two_player_session):
        apply_move(two_player_session, 0, 0)

        assert two_player_session.current_player == "blue"
        assert len(two_player_session.move_history) == 1


class TestScenario:
    """The corner opening followed by a corner explosion."""

    def test_red_corner_explodes(self, opened_session):
        board = opened_session.board
        assert board.cell(0, 0).count == 2
        assert board.cell(4, 4).count == 2
        assert board.cell(4, 4).owner == "blue"

        result = apply_move(opened_session, 0, 0)

        assert len(result.explosions) == 1
        assert board.cell(0, 0).count == 0
        assert board.cell(0, 0).owner == "red"
        assert board.cell(0, 1).owner == "red"
        assert board.cell(0, 1).count == 1
        assert board.cell(1, 0).owner == "red"
        assert board.cell(1, 0).count == 1
        assert result.winner is None
        assert opened_session.current_player == "blue"


class TestLegality:
    """Tests for is_legal_move and validation."""

    def test_any_empty_cell_during_opening(self, two_player_session):
        for row, col in two_player_session.board.positions():
            assert is_legal_move(two_player_session, row, col)

    def test_cannot_open_on_opponent_cell(self, two_player_session):
        apply_move(two_player_session, 2, 2)

        assert not is_legal_move(two_player_session, 2, 2)
        assert is_legal_move(two_player_session, 2, 3)

    def test_only_own_cells_after_opening(self, opened_session):
        assert is_legal_move(opened_session, 0, 0)
        assert not is_legal_move(opened_session, 4, 4)
        assert not is_legal_move(opened_session, 2, 2)

    def test_off_board(self, opened_session):
        assert not is_legal_move(opened_session, -1, 0)
        assert not is_legal_move(opened_session, 0, 5)

    def test_illegal_move_raises(self, opened_session):
        with pytest.raises(IllegalMove) as exc_info:
            apply_move(opened_session, 4, 4)

        assert exc_info.value.row == 4
        assert exc_info.value.col == 4
        assert "blue" in str(exc_info.value)

    def test_illegal_move_leaves_session_unchanged(self, opened_session):
        board_before = opened_session.board.clone()

        with pytest.raises(IllegalMove):
            apply_move(opened_session, 2, 2)

        assert opened_session.board == board_before
        assert len(opened_session.move_history) == 2
        assert opened_session.current_player == "red"

    def test_no_moves_after_game_over(self, winning_session):
        apply_move(winning_session, 0, 0)

        assert not is_legal_move(winning_session, 1, 0)
        with pytest.raises(IllegalMove):
            apply_move(winning_session, 1, 0)


class TestValidMoves:
    """Tests for get_valid_moves."""

    def test_all_cells_before_opening(self, two_player_session):
        assert len(get_valid_moves(two_player_session, "red")) == 25

    def test_opponent_cells_excluded(self, two_player_session):
        apply_move(two_player_session, 0, 0)

        moves = get_valid_moves(two_player_session, "blue")
        assert len(moves) == 24
        assert (0, 0) not in moves

    def test_own_cells_after_opening(self, opened_session):
        assert get_valid_moves(opened_session, "red") == [(0, 0)]
        assert get_valid_moves(opened_session, "blue") == [(4, 4)]

    def test_every_valid_move_is_legal(self, opened_session):
        for row, col in get_valid_moves(opened_session, "red"):
            assert is_legal_move(opened_session, row, col)


class TestWinCondition:
    """Tests for winner detection."""

    def test_no_winner_during_opening(self, two_player_session):
        apply_move(two_player_session, 0, 0)

        # Red is the only player with cells, but blue has not moved yet
        assert check_winner(two_player_session) is None
        assert two_player_session.status == GameStatus.PLAYING

    def test_no_winner_on_empty_board(self, two_player_session):
        assert check_winner(two_player_session) is None

    def test_capturing_last_cell_wins(self, winning_session):
        result = apply_move(winning_session, 0, 0)

        assert result.winner == "red"
        assert winning_session.winner == "red"
        assert winning_session.status == GameStatus.ENDED
        assert winning_session.is_over
        assert winning_session.board.count_cells("blue") == 0

    def test_winner_keeps_turn(self, winning_session):
        apply_move(winning_session, 0, 0)

        assert winning_session.current_player == "red"

    def test_finished_board_can_stay_over_capacity(self, winning_session):
        apply_move(winning_session, 0, 0)

        # The captured edge cell was never exploded: the game ended first
        cell = winning_session.board.cell(0, 1)
        assert winning_session.status == GameStatus.ENDED
        assert cell.owner == "red"
        assert cell.count == 4
        assert cell.count >= cell.capacity

    def test_running_board_is_at_rest(self, three_player_session):
        session = three_player_session
        for row, col in [(0, 0), (5, 5), (0, 5), (0, 0)]:
            apply_move(session, row, col)

        assert session.status == GameStatus.PLAYING
        for row, col in session.board.positions():
            cell = session.board.cell(row, col)
            assert cell.count < cell.capacity


class TestBrokenCascade:
    """A cascade that trips the explosion limit."""

    def test_game_ended_and_error_raised(self, opened_session):
        engine = RulesEngine(explosion_engine=ExplosionEngine(max_explosions=0))

        with pytest.raises(InternalInvariant):
            engine.apply(opened_session, 0, 0)

        assert opened_session.status == GameStatus.ENDED
        assert opened_session.winner is None
        assert not is_legal_move(opened_session, 0, 0)


class TestTurnRotation:
    """Tests for turn order."""

    def test_full_round_returns_to_first_player(self, three_player_session):
        for row, col in [(0, 0), (5, 5), (0, 5)]:
            apply_move(three_player_session, row, col)

        assert three_player_session.current_player_index == 0

    def test_order_follows_players(self, three_player_session):
        seen = []
        for row, col in [(0, 0), (5, 5), (0, 5)]:
            seen.append(three_player_session.current_player)
            apply_move(three_player_session, row, col)

        assert seen == ["red", "blue", "green"]

    def test_eliminated_player_skipped(self, three_player_session):
        session = three_player_session
        apply_move(session, 0, 0)  # red, corner: 2 dots
        apply_move(session, 0, 1)  # blue, edge: 3 dots
        apply_move(session, 5, 5)  # green

        result = apply_move(session, 0, 0)

        assert [(e.row, e.col) for e in result.explosions] == [(0, 0), (0, 1)]
        assert session.board.count_cells("blue") == 0
        assert result.winner is None
        assert session.current_player == "green"

    def test_player_yet_to_open_not_skipped(self, three_player_session):
        apply_move(three_player_session, 0, 0)

        assert three_player_session.current_player == "blue"


class TestUndo:
    """Tests for undo."""

    def test_round_trip(self, opened_session):
        board_before = opened_session.board.clone()
        index_before = opened_session.current_player_index

        apply_move(opened_session, 0, 0)
        undo(opened_session)

        assert opened_session.board == board_before
        assert opened_session.current_player_index == index_before
        assert opened_session.status == GameStatus.PLAYING
        assert len(opened_session.move_history) == 2

    def test_undo_opening_move(self, two_player_session):
        apply_move(two_player_session, 2, 2)
        undo(two_player_session)

        assert two_player_session.board.owners() == {}
        assert two_player_session.current_player == "red"
        assert two_player_session.is_opening_phase

    def test_undo_reverses_win(self, winning_session):
        apply_move(winning_session, 0, 0)
        undo(winning_session)

        assert winning_session.status == GameStatus.PLAYING
        assert winning_session.winner is None
        assert winning_session.current_player == "red"
        assert winning_session.board.cell(0, 1).owner == "blue"

    def test_undo_empty_history(self, two_player_session):
        with pytest.raises(IllegalMove):
            undo(two_player_session)

    def test_snapshot_not_aliased(self, opened_session):
        apply_move(opened_session, 0, 0)
        snapshot = opened_session.move_history[-1].board_snapshot

        undo(opened_session)
        apply_move(opened_session, 0, 0)

        # Replaying must not have written into the restored snapshot
        assert snapshot.cell(0, 0).count == 2


class TestNewGame:
    """Tests for resetting a session."""

    def test_resets_everything(self, winning_session):
        apply_move(winning_session, 0, 0)

        new_game(winning_session)

        assert winning_session.board.owners() == {}
        assert winning_session.board.size == 5
        assert winning_session.move_history == []
        assert winning_session.current_player == "red"
        assert winning_session.status == GameStatus.PLAYING
        assert winning_session.winner is None

    def test_keeps_board_size_override(self):
        session = create_session(2, board_size=7)
        apply_move(session, 3, 3)

        new_game(session)

        assert session.board.size == 7


class TestDeterminism:
    """Same session plus same move gives the same board."""

    def test_identical_results(self, opened_session):
        first = opened_session.clone()
        second = opened_session.clone()

        result_a = apply_move(first, 0, 0)
        result_b = apply_move(second, 0, 0)

        assert first.board == second.board
        assert [e.to_dict() for e in result_a.explosions] == [
            e.to_dict() for e in result_b.explosions
        ]

    def test_clone_leaves_source_untouched(self, opened_session):
        board_before = opened_session.board.clone()

        lookahead = opened_session.clone()
        RulesEngine().apply(lookahead, 0, 0)

        assert opened_session.board == board_before
        assert len(opened_session.move_history) == 2
