"""
Session Module - Hosts games on top of the engine core.

Two hosts:
- RoomManager: authoritative multiplayer rooms for the server
- GameLoop: local hot-seat and vs-AI play

Sessions are EPHEMERAL:
- No persistence to database
- Rooms are deleted when their last player leaves
"""

from .manager import (
    RoomManager,
    Room,
    RoomState,
    Seat,
    RoomNotFound,
    RoomFull,
    PlayerNotFound,
    NotYourTurn,
    GameNotInProgress,
)
from .game_loop import GameLoop, LoopState, TurnResult

__all__ = [
    "RoomManager",
    "Room",
    "RoomState",
    "Seat",
    "RoomNotFound",
    "RoomFull",
    "PlayerNotFound",
    "NotYourTurn",
    "GameNotInProgress",
    "GameLoop",
    "LoopState",
    "TurnResult",
]
