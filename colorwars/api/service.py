"""
API Service - Business logic layer between API and engine.

The service:
1. Translates API requests to room manager calls
2. Converts engine results to response models
3. Turns engine errors into ErrorResponse

This layer is framework-agnostic (can be used with FastAPI, Flask, etc.)
"""

from __future__ import annotations
from dataclasses import dataclass, field
import logging

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
    RoomSummary,
    RoomListResponse,
    ErrorResponse,
    # Shared
    GameStateModel,
    ExplosionInfo,
    MoveRef,
    PlayerInfo,
    # Enums
    ErrorCode,
    RoomStatus,
)
from ..engine_core.errors import ColorWarsError
from ..engine_core.rules import MoveResult
from ..engine_core.serialization import to_wire
from ..session import RoomManager, Room

logger = logging.getLogger(__name__)


@dataclass
class APIService:
    """
    Main API service for game clients.

    Usage:
        service = APIService()

        # Create a room and seat the creator
        joined = service.create_room(CreateRoomRequest(player_name="Ana"))

        # Submit a move
        response = service.make_move(joined.room_id, MoveRequest(...))
    """
    room_manager: RoomManager = field(default_factory=RoomManager)

    def create_room(self, request: CreateRoomRequest) -> JoinResponse | ErrorResponse:
        """Create a room; the caller takes the first colour."""
        try:
            room, seat = self.room_manager.create_room(
                player_name=request.player_name,
                player_count=request.player_count,
                board_size=request.board_size,
            )
        except ColorWarsError as e:
            return self._error(e)

        return JoinResponse(
            room_id=room.room_id,
            player_id=seat.player_id,
            color=seat.color,
            room=self._room_to_response(room),
        )

    def join_room(self, room_id: str, request: JoinRoomRequest) -> JoinResponse | ErrorResponse:
        try:
            seat = self.room_manager.join_room(room_id, request.player_name)
            room = self.room_manager.get_room(room_id)
        except ColorWarsError as e:
            return self._error(e)

        return JoinResponse(
            room_id=room_id,
            player_id=seat.player_id,
            color=seat.color,
            room=self._room_to_response(room),
        )

    def leave_room(self, room_id: str, request: LeaveRoomRequest) -> LeaveResponse | ErrorResponse:
        try:
            deleted = self.room_manager.leave_room(room_id, request.player_id)
        except ColorWarsError as e:
            return self._error(e)
        return LeaveResponse(success=True, room_id=room_id, room_deleted=deleted)

    def get_room(self, room_id: str) -> RoomResponse | ErrorResponse:
        try:
            room = self.room_manager.get_room(room_id)
        except ColorWarsError as e:
            return self._error(e)
        return self._room_to_response(room)

    def is_seated(self, room_id: str, player_id: str) -> bool:
        try:
            room = self.room_manager.get_room(room_id)
        except ColorWarsError:
            return False
        return room.get_seat(player_id) is not None

    def list_rooms(self) -> RoomListResponse:
        rooms = [
            RoomSummary(
                room_id=room.room_id,
                players=len(room.seats),
                max_players=room.max_players,
                status=RoomStatus(room.state.value),
                created_at=room.created_at,
            )
            for room in self.room_manager.list_rooms()
        ]
        return RoomListResponse(rooms=rooms, count=len(rooms))

    def make_move(self, room_id: str, request: MoveRequest) -> MoveResponse | ErrorResponse:
        """Validate and apply a move on the authoritative board."""
        try:
            result = self.room_manager.make_move(
                room_id, request.player_id, request.row, request.col
            )
        except ColorWarsError as e:
            return self._error(e)
        return self._move_to_response(room_id, result)

    def ai_move(self, room_id: str, request: AIMoveRequest) -> MoveResponse | ErrorResponse:
        try:
            result = self.room_manager.play_ai_move(
                room_id, request.player_id, request.difficulty
            )
        except ColorWarsError as e:
            return self._error(e)
        return self._move_to_response(room_id, result)

    def undo(self, room_id: str, request: UndoRequest) -> RoomResponse | ErrorResponse:
        try:
            self.room_manager.undo(room_id, request.player_id)
            room = self.room_manager.get_room(room_id)
        except ColorWarsError as e:
            return self._error(e)
        return self._room_to_response(room)

    def hint(self, room_id: str) -> HintResponse | ErrorResponse:
        try:
            decision = self.room_manager.hint(room_id)
        except ColorWarsError as e:
            return self._error(e)
        return HintResponse(
            room_id=room_id,
            player=decision.player,
            row=decision.row,
            col=decision.col,
            explanation=decision.explanation,
            score=decision.best_score,
        )

    def cleanup(
        self,
        max_age_seconds: int,
        abandoned_after_seconds: int | None = None,
    ) -> list[str]:
        return self.room_manager.cleanup_stale_rooms(max_age_seconds, abandoned_after_seconds)

    # =========================================================================
    # Conversion helpers
    # =========================================================================

    def _room_to_response(self, room: Room) -> RoomResponse:
        game = room.game
        counts = game.cell_counts()
        return RoomResponse(
            room_id=room.room_id,
            status=RoomStatus(room.state.value),
            players=[
                PlayerInfo(
                    name=seat.name,
                    color=seat.color,
                    is_current_turn=seat.color == game.current_player,
                    cell_count=counts.get(seat.color, 0),
                )
                for seat in room.seats
            ],
            max_players=room.max_players,
            created_at=room.created_at,
            game_state=GameStateModel.model_validate(to_wire(game)),
        )

    def _move_to_response(self, room_id: str, result: MoveResult) -> MoveResponse:
        return MoveResponse(
            room_id=room_id,
            player=result.move.player,
            move=MoveRef(row=result.move.row, col=result.move.col),
            is_opening=result.is_opening,
            explosions=[ExplosionInfo.model_validate(e.to_dict()) for e in result.explosions],
            winner=result.winner,
            game_state=GameStateModel.model_validate(to_wire(result.session)),
        )

    def _error(self, error: ColorWarsError) -> ErrorResponse:
        try:
            code = ErrorCode(error.error_code)
        except ValueError:
            code = ErrorCode.INTERNAL_ERROR

        if code == ErrorCode.INTERNAL_ERROR:
            logger.error("Engine error: %s", error)
        else:
            logger.info("Rejected request: %s (%s)", error, code.value)

        details = None
        row = getattr(error, "row", None)
        col = getattr(error, "col", None)
        if row is not None and col is not None:
            details = {"row": row, "col": col}

        return ErrorResponse(error=str(error), error_code=code, details=details)
