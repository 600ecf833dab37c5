"""
API Module - Authoritative multiplayer server.

Exposes the engine via REST and WebSocket. A client:
1. Creates or joins a room
2. Submits moves, which the server validates with the engine rules
3. Receives the new game state and explosion trace after every move

All state is room-scoped. No persistent user accounts required.
"""

from .schemas import (
    # Requests
    CreateRoomRequest,
    JoinRoomRequest,
    LeaveRoomRequest,
    MoveRequest,
    AIMoveRequest,
    UndoRequest,
    # Responses
    RoomResponse,
    JoinResponse,
    LeaveResponse,
    MoveResponse,
    HintResponse,
    RoomListResponse,
    ErrorResponse,
    HealthResponse,
    # Shared
    GameStateModel,
    CellState,
    ExplosionInfo,
    PlayerInfo,
    ErrorCode,
    RoomStatus,
)
from .service import APIService
from .app import create_app

__all__ = [
    # Requests
    "CreateRoomRequest",
    "JoinRoomRequest",
    "LeaveRoomRequest",
    "MoveRequest",
    "AIMoveRequest",
    "UndoRequest",
    # Responses
    "RoomResponse",
    "JoinResponse",
    "LeaveResponse",
    "MoveResponse",
    "HintResponse",
    "RoomListResponse",
    "ErrorResponse",
    "HealthResponse",
    # Shared
    "GameStateModel",
    "CellState",
    "ExplosionInfo",
    "PlayerInfo",
    "ErrorCode",
    "RoomStatus",
    # Service
    "APIService",
    "create_app",
]
