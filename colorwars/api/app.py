"""
FastAPI Application - Authoritative multiplayer server.

Endpoints:
    GET    /health                         Health check
    POST   /api/v1/rooms                   Create room (caller takes first colour)
    GET    /api/v1/rooms                   List rooms
    GET    /api/v1/rooms/{id}              Room and game state
    POST   /api/v1/rooms/{id}/join         Join room
    POST   /api/v1/rooms/{id}/leave        Leave room
    POST   /api/v1/rooms/{id}/moves        Submit a move
    POST   /api/v1/rooms/{id}/undo         Undo the last move (seated players)
    GET    /api/v1/rooms/{id}/hint         Suggested move for the current player
    POST   /api/v1/rooms/{id}/ai-move      AI takes the caller's turn
    WS     /api/v1/rooms/{id}/ws           Real-time updates (?player_id= to
                                           leave the room on disconnect)

Move Flow:
    1. POST /moves with player_id, row, col
    2. The room validates turn and ownership with the engine rules
    3. The engine applies the move and resolves the cascade
    4. Response and WebSocket broadcast carry the new game state
       and the explosion trace

All responses are JSON with explicit Pydantic schemas.
"""

from contextlib import asynccontextmanager
from typing import Union
import asyncio
import json
import logging
import os

from fastapi import FastAPI, Request, WebSocket, WebSocketDisconnect
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from .. import __version__
from .service import APIService
from .schemas import (
    # Request models
    CreateRoomRequest,
    JoinRoomRequest,
    LeaveRoomRequest,
    MoveRequest,
    AIMoveRequest,
    UndoRequest,
    # Response models
    RoomResponse,
    JoinResponse,
    LeaveResponse,
    MoveResponse,
    HintResponse,
    RoomListResponse,
    ErrorResponse,
    HealthResponse,
    # Enums
    ErrorCode,
)

logger = logging.getLogger(__name__)

# Environment configuration
COLORWARS_ENV = os.getenv("COLORWARS_ENV", "development")
ALLOWED_ORIGINS = os.getenv("ALLOWED_ORIGINS", "*").split(",")
ROOM_TTL_SECONDS = int(os.getenv("COLORWARS_ROOM_TTL", "60"))
CLEANUP_INTERVAL_SECONDS = int(os.getenv("COLORWARS_CLEANUP_INTERVAL", "30"))
# Rooms with a game in progress are reaped only after this much silence
ABANDONED_ROOM_TTL_SECONDS = int(os.getenv("COLORWARS_ABANDONED_TTL", "3600"))

STATUS_CODES = {
    ErrorCode.ROOM_NOT_FOUND: 404,
    ErrorCode.PLAYER_NOT_FOUND: 404,
    ErrorCode.ROOM_FULL: 409,
    ErrorCode.NOT_YOUR_TURN: 409,
    ErrorCode.GAME_NOT_IN_PROGRESS: 409,
    ErrorCode.ILLEGAL_MOVE: 400,
    ErrorCode.INVALID_CONFIGURATION: 400,
    ErrorCode.VALIDATION_ERROR: 400,
    ErrorCode.INTERNAL_ERROR: 500,
}


def create_app(service: APIService | None = None) -> FastAPI:
    """
    Create the FastAPI application.

    Args:
        service: Optional APIService instance (creates new if not provided)

    Returns:
        FastAPI application instance
    """
    api_service = service or APIService()

    # WebSocket connections per room
    ws_connections: dict[str, list[WebSocket]] = {}

    async def cleanup_loop():
        while True:
            await asyncio.sleep(CLEANUP_INTERVAL_SECONDS)
            for room_id in api_service.cleanup(ROOM_TTL_SECONDS, ABANDONED_ROOM_TTL_SECONDS):
                ws_connections.pop(room_id, None)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        task = asyncio.create_task(cleanup_loop())
        logger.info("ColorWars server starting (%s)", COLORWARS_ENV)
        try:
            yield
        finally:
            task.cancel()

    app = FastAPI(
        title="ColorWars Engine API",
        description="""
Chain-reaction territory game - authoritative multiplayer server.

## Error Codes

| Code | Description |
|------|-------------|
| `ROOM_NOT_FOUND` | Room does not exist |
| `ROOM_FULL` | All colours are taken |
| `PLAYER_NOT_FOUND` | Player is not seated in the room |
| `NOT_YOUR_TURN` | Move submitted out of turn |
| `ILLEGAL_MOVE` | Move breaks the placement rules |
| `GAME_NOT_IN_PROGRESS` | Room is waiting or the game ended |
| `INVALID_CONFIGURATION` | Unsupported player count or board size |
| `VALIDATION_ERROR` | Request body failed schema validation |
        """,
        version=__version__,
        docs_url="/api/docs",
        redoc_url="/api/redoc",
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=ALLOWED_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # =========================================================================
    # Error helpers
    # =========================================================================

    def make_error_response(error: ErrorResponse) -> JSONResponse:
        """Create a standardized error response."""
        return JSONResponse(
            status_code=STATUS_CODES.get(error.error_code, 400),
            content=error.model_dump(mode="json"),
        )

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(request: Request, exc: RequestValidationError):
        """Malformed request bodies use the same error envelope as engine errors."""
        return make_error_response(ErrorResponse(
            error="Invalid request",
            error_code=ErrorCode.VALIDATION_ERROR,
            details={"errors": jsonable_encoder(exc.errors())},
        ))

    async def broadcast_to_room(room_id: str, message: dict):
        """Broadcast a message to all WebSocket connections for a room."""
        if room_id in ws_connections:
            dead_connections = []
            for ws in ws_connections[room_id]:
                try:
                    await ws.send_json(message)
                except Exception:
                    dead_connections.append(ws)
            for ws in dead_connections:
                ws_connections[room_id].remove(ws)

    # =========================================================================
    # Room Endpoints
    # =========================================================================

    @app.post(
        "/api/v1/rooms",
        response_model=JoinResponse,
        responses={400: {"model": ErrorResponse}},
        tags=["Rooms"],
        summary="Create a room",
    )
    async def create_room(body: CreateRoomRequest) -> Union[JoinResponse, JSONResponse]:
        """Create a room. The creator is seated as the first colour."""
        response = api_service.create_room(body)
        if isinstance(response, ErrorResponse):
            return make_error_response(response)
        return response

    @app.get(
        "/api/v1/rooms",
        response_model=RoomListResponse,
        tags=["Rooms"],
        summary="List rooms",
    )
    async def list_rooms() -> RoomListResponse:
        return api_service.list_rooms()

    @app.get(
        "/api/v1/rooms/{room_id}",
        response_model=RoomResponse,
        responses={404: {"model": ErrorResponse}},
        tags=["Rooms"],
        summary="Get room and game state",
    )
    async def get_room(room_id: str) -> Union[RoomResponse, JSONResponse]:
        response = api_service.get_room(room_id)
        if isinstance(response, ErrorResponse):
            return make_error_response(response)
        return response

    @app.post(
        "/api/v1/rooms/{room_id}/join",
        response_model=JoinResponse,
        responses={404: {"model": ErrorResponse}, 409: {"model": ErrorResponse}},
        tags=["Rooms"],
        summary="Join a room",
    )
    async def join_room(room_id: str, body: JoinRoomRequest) -> Union[JoinResponse, JSONResponse]:
        """Join a room. Filling the last seat starts the game."""
        response = api_service.join_room(room_id, body)
        if isinstance(response, ErrorResponse):
            return make_error_response(response)

        await broadcast_to_room(room_id, {
            "type": "player_joined",
            "payload": response.room.model_dump(mode="json"),
        })
        return response

    @app.post(
        "/api/v1/rooms/{room_id}/leave",
        response_model=LeaveResponse,
        responses={404: {"model": ErrorResponse}},
        tags=["Rooms"],
        summary="Leave a room",
    )
    async def leave_room(room_id: str, body: LeaveRoomRequest) -> Union[LeaveResponse, JSONResponse]:
        response = api_service.leave_room(room_id, body)
        if isinstance(response, ErrorResponse):
            return make_error_response(response)

        await announce_leave(room_id, response)
        return response

    async def announce_leave(room_id: str, response: LeaveResponse):
        """Tell the remaining connections, or drop them if the room is gone."""
        if response.room_deleted:
            ws_connections.pop(room_id, None)
            return

        room = api_service.get_room(room_id)
        if isinstance(room, RoomResponse):
            await broadcast_to_room(room_id, {
                "type": "player_left",
                "payload": room.model_dump(mode="json"),
            })

    # =========================================================================
    # Game Endpoints
    # =========================================================================

    @app.post(
        "/api/v1/rooms/{room_id}/moves",
        response_model=MoveResponse,
        responses={
            400: {"model": ErrorResponse, "description": "Illegal move"},
            404: {"model": ErrorResponse, "description": "Room or player not found"},
            409: {"model": ErrorResponse, "description": "Not your turn or game not running"},
        },
        tags=["Game"],
        summary="Submit a move",
    )
    async def make_move(room_id: str, body: MoveRequest) -> Union[MoveResponse, JSONResponse]:
        """
        Validate and apply a move on the authoritative board.

        The response and the `move_made` broadcast carry the explosion
        trace in processing order, for clients that animate cascades.
        """
        response = api_service.make_move(room_id, body)
        if isinstance(response, ErrorResponse):
            return make_error_response(response)

        await broadcast_to_room(room_id, {
            "type": "move_made",
            "payload": response.model_dump(mode="json"),
        })
        return response

    @app.post(
        "/api/v1/rooms/{room_id}/ai-move",
        response_model=MoveResponse,
        responses={404: {"model": ErrorResponse}, 409: {"model": ErrorResponse}},
        tags=["Game"],
        summary="Let the AI take the caller's turn",
    )
    async def ai_move(room_id: str, body: AIMoveRequest) -> Union[MoveResponse, JSONResponse]:
        response = api_service.ai_move(room_id, body)
        if isinstance(response, ErrorResponse):
            return make_error_response(response)

        await broadcast_to_room(room_id, {
            "type": "move_made",
            "payload": response.model_dump(mode="json"),
        })
        return response

    @app.post(
        "/api/v1/rooms/{room_id}/undo",
        response_model=RoomResponse,
        responses={
            400: {"model": ErrorResponse},
            404: {"model": ErrorResponse},
            409: {"model": ErrorResponse},
        },
        tags=["Game"],
        summary="Undo the last move",
    )
    async def undo(room_id: str, body: UndoRequest) -> Union[RoomResponse, JSONResponse]:
        response = api_service.undo(room_id, body)
        if isinstance(response, ErrorResponse):
            return make_error_response(response)

        await broadcast_to_room(room_id, {
            "type": "state_update",
            "payload": response.model_dump(mode="json"),
        })
        return response

    @app.get(
        "/api/v1/rooms/{room_id}/hint",
        response_model=HintResponse,
        responses={404: {"model": ErrorResponse}, 409: {"model": ErrorResponse}},
        tags=["Game"],
        summary="Suggested move for the current player",
    )
    async def hint(room_id: str) -> Union[HintResponse, JSONResponse]:
        response = api_service.hint(room_id)
        if isinstance(response, ErrorResponse):
            return make_error_response(response)
        return response

    # =========================================================================
    # WebSocket Endpoint
    # =========================================================================

    @app.websocket("/api/v1/rooms/{room_id}/ws")
    async def websocket_endpoint(websocket: WebSocket, room_id: str, player_id: str | None = None):
        """
        WebSocket for real-time updates.

        A seated player connects with ?player_id=...; when that socket
        drops, the player leaves the room. Spectators connect without it.

        Messages from server:
        - state_update: Game state changed (sent on connect and after undo)
        - move_made: A move was applied (with explosion trace)
        - player_joined / player_left: Seats changed
        - error: Error occurred

        Messages from client:
        - ping: Keep-alive
        """
        await websocket.accept()

        response = api_service.get_room(room_id)
        if isinstance(response, ErrorResponse):
            await websocket.send_json({
                "type": "error",
                "payload": response.model_dump(mode="json"),
            })
            await websocket.close()
            return

        if player_id is not None and not api_service.is_seated(room_id, player_id):
            error = ErrorResponse(
                error=f"Player {player_id} is not in room {room_id}",
                error_code=ErrorCode.PLAYER_NOT_FOUND,
            )
            await websocket.send_json({
                "type": "error",
                "payload": error.model_dump(mode="json"),
            })
            await websocket.close()
            return

        ws_connections.setdefault(room_id, []).append(websocket)

        try:
            await websocket.send_json({
                "type": "state_update",
                "payload": response.model_dump(mode="json"),
            })

            while True:
                data = await websocket.receive_text()
                try:
                    message = json.loads(data)
                    if message.get("type") == "ping":
                        await websocket.send_json({"type": "pong"})
                except json.JSONDecodeError:
                    await websocket.send_json({
                        "type": "error",
                        "payload": {"message": "Invalid JSON"},
                    })

        except WebSocketDisconnect:
            logger.debug("WebSocket closed for room %s", room_id)
        finally:
            if room_id in ws_connections and websocket in ws_connections[room_id]:
                ws_connections[room_id].remove(websocket)

        # Already gone if the player left over HTTP first
        if player_id is not None and api_service.is_seated(room_id, player_id):
            response = api_service.leave_room(room_id, LeaveRoomRequest(player_id=player_id))
            if isinstance(response, LeaveResponse):
                logger.info("Player %s left room %s on disconnect", player_id, room_id)
                await announce_leave(room_id, response)

    # =========================================================================
    # Health Check
    # =========================================================================

    @app.get(
        "/health",
        response_model=HealthResponse,
        tags=["System"],
        summary="Health check",
    )
    async def health_check() -> HealthResponse:
        """Health check endpoint for load balancers."""
        return HealthResponse(version=__version__)

    @app.get("/", tags=["System"])
    async def root():
        """Root endpoint with API info."""
        return {
            "name": "ColorWars Engine API",
            "version": __version__,
            "docs": "/api/docs",
            "health": "/health",
        }

    return app


# For running directly: uvicorn colorwars.api.app:app
app = create_app()
