"""
Pydantic Schemas for API - Request/response models for OpenAPI.

These models define the exact contract between game clients and the
authoritative server. GameStateModel mirrors the engine wire format
(engine_core.serialization) field for field, including its camelCase
keys, so clients rebuild the board from it directly.

Error Codes:
- ROOM_NOT_FOUND: Room does not exist or was cleaned up
- ROOM_FULL: Every colour in the room is taken
- PLAYER_NOT_FOUND: Player id is not seated in the room
- NOT_YOUR_TURN: Move submitted out of turn
- ILLEGAL_MOVE: Move breaks the placement rules
- GAME_NOT_IN_PROGRESS: Room is waiting for players or the game ended
- INVALID_CONFIGURATION: Unsupported player count, board size or difficulty
- VALIDATION_ERROR: Request body failed schema validation
"""

from enum import Enum
from typing import Optional, Any
from pydantic import BaseModel, Field

from ..bots import Difficulty


# =============================================================================
# Enums
# =============================================================================

class RoomStatus(str, Enum):
    """Room status values."""
    WAITING = "waiting"
    PLAYING = "playing"
    ENDED = "ended"


class ErrorCode(str, Enum):
    """Structured error codes."""
    ROOM_NOT_FOUND = "ROOM_NOT_FOUND"
    ROOM_FULL = "ROOM_FULL"
    PLAYER_NOT_FOUND = "PLAYER_NOT_FOUND"
    NOT_YOUR_TURN = "NOT_YOUR_TURN"
    ILLEGAL_MOVE = "ILLEGAL_MOVE"
    GAME_NOT_IN_PROGRESS = "GAME_NOT_IN_PROGRESS"
    INVALID_CONFIGURATION = "INVALID_CONFIGURATION"
    VALIDATION_ERROR = "VALIDATION_ERROR"
    INTERNAL_ERROR = "INTERNAL_ERROR"


# =============================================================================
# Game State (wire format)
# =============================================================================

class CellState(BaseModel):
    """One board cell."""
    owner: Optional[str] = None
    count: int = Field(0, ge=0)
    capacity: int


class MoveRef(BaseModel):
    """Board coordinates of a move."""
    row: int
    col: int


class HistoryEntry(BaseModel):
    """One accepted move."""
    player: str
    move: MoveRef


class GameStateModel(BaseModel):
    """Full board and turn state, as broadcast after every move."""
    board: list[list[CellState]]
    players: list[str]
    currentPlayer: str
    status: RoomStatus
    moveHistory: list[HistoryEntry] = Field(default_factory=list)
    winner: Optional[str] = None


class ExplosionInfo(BaseModel):
    """One explosion of a cascade, in processing order."""
    row: int
    col: int
    player: str
    wave: int = Field(description="Distance from the cell the move landed on")
    captured: list[MoveRef] = Field(default_factory=list)


# =============================================================================
# Requests
# =============================================================================

class CreateRoomRequest(BaseModel):
    """Create a multiplayer room."""
    player_name: str = Field(min_length=1, max_length=40)
    player_count: int = Field(2, ge=2, le=6)
    board_size: Optional[int] = Field(None, ge=3, le=12, description="Override the size picked for player_count")


class JoinRoomRequest(BaseModel):
    """Join an existing room."""
    player_name: str = Field(min_length=1, max_length=40)


class LeaveRoomRequest(BaseModel):
    """Leave a room."""
    player_id: str


class MoveRequest(BaseModel):
    """Submit a move for validation."""
    player_id: str
    row: int = Field(ge=0)
    col: int = Field(ge=0)


class AIMoveRequest(BaseModel):
    """Let the AI take the caller's turn."""
    player_id: str
    difficulty: Difficulty = Difficulty.HARD


class UndoRequest(BaseModel):
    """Undo the last move in a room."""
    player_id: str


# =============================================================================
# Responses
# =============================================================================

class PlayerInfo(BaseModel):
    """Public information about a seated player."""
    name: str
    color: str
    is_current_turn: bool = False
    cell_count: int = 0


class RoomResponse(BaseModel):
    """Room with its full game state."""
    room_id: str
    status: RoomStatus
    players: list[PlayerInfo] = Field(default_factory=list)
    max_players: int
    created_at: float
    game_state: GameStateModel


class JoinResponse(BaseModel):
    """
    Seat assigned to the caller.

    player_id is the caller's credential for moves; it is not
    shown to other players.
    """
    room_id: str
    player_id: str
    color: str
    room: RoomResponse


class LeaveResponse(BaseModel):
    success: bool
    room_id: str
    room_deleted: bool = False


class MoveResponse(BaseModel):
    """Result of an accepted move."""
    room_id: str
    player: str
    move: MoveRef
    is_opening: bool = False
    explosions: list[ExplosionInfo] = Field(default_factory=list)
    winner: Optional[str] = None
    game_state: GameStateModel


class HintResponse(BaseModel):
    """Suggested move for the current player."""
    room_id: str
    player: str
    row: int
    col: int
    explanation: str = ""
    score: float = 0.0


class RoomSummary(BaseModel):
    """Room entry for the room browser."""
    room_id: str
    players: int
    max_players: int
    status: RoomStatus
    created_at: float


class RoomListResponse(BaseModel):
    rooms: list[RoomSummary] = Field(default_factory=list)
    count: int = 0


class ErrorResponse(BaseModel):
    """Error response with structured error code."""
    error: str
    error_code: ErrorCode
    details: Optional[dict[str, Any]] = None


class HealthResponse(BaseModel):
    status: str = "healthy"
    service: str = "colorwars-engine"
    version: str
