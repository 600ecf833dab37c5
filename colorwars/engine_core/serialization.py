"""
Wire format for sessions.

This is exactly what an authoritative server broadcasts after each
accepted move and what a client rebuilds its board and turn from:

    {
        "board": [[{"owner": str | None, "count": int, "capacity": int}]],
        "players": [str],
        "currentPlayer": str,
        "status": str,
        "moveHistory": [{"player": str, "move": {"row": int, "col": int}}],
        "winner": str | None,
    }

History board snapshots are not sent. A session rebuilt with
from_wire() plays on normally but cannot undo moves it received.
"""

from __future__ import annotations
from typing import Any

from .board import Board, Cell, compute_capacity
from .errors import InvalidConfiguration
from .state import GameSession, GameStatus, Move, MoveRecord


def board_to_wire(board: Board) -> list[list[dict[str, Any]]]:
    return [
        [{"owner": cell.owner, "count": cell.count, "capacity": cell.capacity} for cell in row]
        for row in board.cells
    ]


def board_from_wire(rows: list[list[dict[str, Any]]]) -> Board:
    """
    Rebuild a board.

    Capacities are recomputed from position and must match what was sent.
    """
    size = len(rows)
    board = Board.create(size)
    for r, row in enumerate(rows):
        if len(row) != size:
            raise InvalidConfiguration(f"Board row {r} has {len(row)} cells, expected {size}")
        for c, data in enumerate(row):
            capacity = compute_capacity(r, c, size)
            if data.get("capacity", capacity) != capacity:
                raise InvalidConfiguration(
                    f"Cell ({r}, {c}) has capacity {data['capacity']}, expected {capacity}"
                )
            count = int(data.get("count", 0))
            if count < 0:
                raise InvalidConfiguration(f"Cell ({r}, {c}) has negative count {count}")
            board.cells[r][c] = Cell(capacity=capacity, owner=data.get("owner"), count=count)
    return board


def to_wire(session: GameSession) -> dict[str, Any]:
    """Serialize a session to its wire shape."""
    return {
        "board": board_to_wire(session.board),
        "players": list(session.players),
        "currentPlayer": session.current_player,
        "status": session.status.value,
        "moveHistory": [
            {"player": record.player, "move": record.move.to_dict()}
            for record in session.move_history
        ],
        "winner": session.winner,
    }


def from_wire(data: dict[str, Any]) -> GameSession:
    """
    Rebuild a session from its wire shape.

    Raises:
        InvalidConfiguration: unknown status, player or malformed board
    """
    players = list(data["players"])
    current = data["currentPlayer"]
    if current not in players:
        raise InvalidConfiguration(f"Current player {current!r} is not in {players}")

    try:
        status = GameStatus(data["status"])
    except ValueError:
        raise InvalidConfiguration(f"Unknown status {data['status']!r}")

    history = []
    for entry in data.get("moveHistory", []):
        player = entry["player"]
        if player not in players:
            raise InvalidConfiguration(f"History player {player!r} is not in {players}")
        move = Move(row=entry["move"]["row"], col=entry["move"]["col"], player=player)
        history.append(
            MoveRecord(
                board_snapshot=None,
                player=player,
                move=move,
                player_index=players.index(player),
            )
        )

    board = board_from_wire(data["board"])
    for row in board.cells:
        for cell in row:
            if cell.owner is not None and cell.owner not in players:
                raise InvalidConfiguration(f"Cell owner {cell.owner!r} is not in {players}")

    return GameSession(
        board=board,
        players=players,
        current_player_index=players.index(current),
        status=status,
        move_history=history,
        winner=data.get("winner"),
    )
