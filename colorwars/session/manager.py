"""
Room Manager - Hosts multiplayer games on an authoritative server.

LIFECYCLE:
1. A player creates a room -> session created in WAITING
2. Others join, one colour each, in turn order
3. Room full -> fresh board, status PLAYING
4. Moves are validated and applied by the same rules engine every
   client runs; the resulting wire state is broadcast by the caller
5. A player leaves a running or finished game -> back to WAITING
6. Last player leaves -> room deleted

A room is touched by every join, leave, move and undo; idle rooms are
reaped by cleanup_stale_rooms.

PERSISTENCE RULES:
- Rooms live in memory only
- Nothing survives a process restart

CONCURRENCY:
- One lock per room; the whole validate/apply step runs under it
- Rooms share no mutable state and may run in parallel
"""

from __future__ import annotations
from dataclasses import dataclass, field
from enum import Enum
import logging
import threading
import time
import uuid

from ..engine_core.errors import ColorWarsError, IllegalMove, InternalInvariant
from ..engine_core.rules import MoveResult, RulesEngine, create_session
from ..engine_core.state import GameSession, GameStatus
from ..bots import BotDecision, Difficulty, ai_move, evaluate_hint

logger = logging.getLogger(__name__)


class RoomNotFound(ColorWarsError):
    error_code = "ROOM_NOT_FOUND"


class RoomFull(ColorWarsError):
    error_code = "ROOM_FULL"


class PlayerNotFound(ColorWarsError):
    error_code = "PLAYER_NOT_FOUND"


class NotYourTurn(IllegalMove):
    error_code = "NOT_YOUR_TURN"


class GameNotInProgress(IllegalMove):
    error_code = "GAME_NOT_IN_PROGRESS"


class RoomState(Enum):
    """State of a room, derived from its game."""
    WAITING = "waiting"
    PLAYING = "playing"
    ENDED = "ended"


@dataclass
class Seat:
    """A player seated in a room."""
    player_id: str
    name: str
    color: str

    def to_dict(self) -> dict[str, str]:
        return {"id": self.player_id, "name": self.name, "color": self.color}


@dataclass
class Room:
    """
    An ephemeral multiplayer room.

    Contains:
    - The authoritative game session
    - Seated players, one colour each
    - The lock that serialises moves
    """
    room_id: str
    game: GameSession
    created_at: float
    last_active: float = 0.0
    seats: list[Seat] = field(default_factory=list)
    lock: threading.Lock = field(default_factory=threading.Lock, repr=False)

    @property
    def max_players(self) -> int:
        return self.game.num_players

    @property
    def is_full(self) -> bool:
        return len(self.seats) >= self.max_players

    @property
    def state(self) -> RoomState:
        return RoomState(self.game.status.value)

    def get_seat(self, player_id: str) -> Seat | None:
        for seat in self.seats:
            if seat.player_id == player_id:
                return seat
        return None

    def free_colors(self) -> list[str]:
        taken = {seat.color for seat in self.seats}
        return [color for color in self.game.players if color not in taken]

    def touch(self):
        self.last_active = time.time()


class RoomManager:
    """
    Manages multiplayer rooms.

    Responsibilities:
    - Create rooms and seat players
    - Run moves through the rules engine, one at a time per room
    - Clean up abandoned rooms

    No persistence - rooms are in-memory only.
    """

    def __init__(self, rules: RulesEngine | None = None):
        self.rules = rules or RulesEngine()
        self._rooms: dict[str, Room] = {}
        self._lock = threading.Lock()

    def create_room(
        self,
        player_name: str,
        player_count: int = 2,
        board_size: int | None = None,
    ) -> tuple[Room, Seat]:
        """
        Create a room and seat its creator as the first colour.

        Raises:
            InvalidConfiguration: unsupported player count or board size
        """
        game = create_session(player_count, board_size=board_size, status=GameStatus.WAITING)
        room = Room(
            room_id=uuid.uuid4().hex[:8],
            game=game,
            created_at=time.time(),
        )
        room.touch()
        with self._lock:
            self._rooms[room.room_id] = room

        seat = self.join_room(room.room_id, player_name)
        logger.info("Room %s created for %d players", room.room_id, player_count)
        return room, seat

    def join_room(self, room_id: str, player_name: str) -> Seat:
        """
        Seat a player in the next free colour.

        Filling the last seat starts a fresh game.

        Raises:
            RoomNotFound, RoomFull
        """
        room = self.get_room(room_id)
        with room.lock:
            if room.is_full:
                raise RoomFull(f"Room {room_id} is full")

            seat = Seat(
                player_id=uuid.uuid4().hex,
                name=player_name,
                color=room.free_colors()[0],
            )
            room.seats.append(seat)
            room.touch()

            if room.is_full:
                self.rules.new_game(room.game)
                logger.info("Room %s is full, game started", room_id)

        return seat

    def leave_room(self, room_id: str, player_id: str) -> bool:
        """
        Remove a player.

        A room left by anyone other than its last player waits for a new
        player, even after the game ended, so no game can resume with an
        empty seat. Returns True if the room was deleted because it emptied.
        """
        room = self.get_room(room_id)
        with room.lock:
            seat = self._require_seat(room, player_id)
            room.seats.remove(seat)
            room.touch()

            if not room.seats:
                with self._lock:
                    self._rooms.pop(room_id, None)
                logger.info("Room %s deleted (empty)", room_id)
                return True

            if room.game.status != GameStatus.WAITING:
                room.game.status = GameStatus.WAITING
                logger.info("Room %s waiting: %s left", room_id, seat.name)

        return False

    def get_room(self, room_id: str) -> Room:
        room = self._rooms.get(room_id)
        if room is None:
            raise RoomNotFound(f"Room {room_id} not found")
        return room

    def list_rooms(self) -> list[Room]:
        with self._lock:
            return list(self._rooms.values())

    def make_move(self, room_id: str, player_id: str, row: int, col: int) -> MoveResult:
        """
        Validate and apply a move from a seated player.

        Raises:
            RoomNotFound, PlayerNotFound, GameNotInProgress, NotYourTurn,
            IllegalMove, InternalInvariant
        """
        room = self.get_room(room_id)
        with room.lock:
            seat = self._require_seat(room, player_id)
            self._require_playing(room)
            if seat.color != room.game.current_player:
                raise NotYourTurn(f"It is {room.game.current_player}'s turn, not {seat.color}'s")

            result = self._apply(room, row, col)

        if result.winner:
            logger.info("Room %s: %s wins", room_id, result.winner)
        return result

    def play_ai_move(
        self,
        room_id: str,
        player_id: str,
        difficulty: Difficulty | str = Difficulty.HARD,
    ) -> MoveResult:
        """
        Let the AI make the caller's move (e.g. on turn timeout).

        Raises:
            RoomNotFound, PlayerNotFound, GameNotInProgress, NotYourTurn
        """
        room = self.get_room(room_id)
        with room.lock:
            seat = self._require_seat(room, player_id)
            self._require_playing(room)
            if seat.color != room.game.current_player:
                raise NotYourTurn(f"It is {room.game.current_player}'s turn, not {seat.color}'s")

            decision = ai_move(room.game, difficulty)
            return self._apply(room, decision.row, decision.col)

    def hint(self, room_id: str) -> BotDecision:
        room = self.get_room(room_id)
        with room.lock:
            self._require_playing(room)
            return evaluate_hint(room.game)

    def undo(self, room_id: str, player_id: str) -> GameSession:
        """
        Undo the last move on behalf of a seated player.

        Raises:
            RoomNotFound, PlayerNotFound, GameNotInProgress, IllegalMove
        """
        room = self.get_room(room_id)
        with room.lock:
            self._require_seat(room, player_id)
            if room.game.status == GameStatus.WAITING or not room.is_full:
                raise GameNotInProgress(f"Game in room {room_id} is waiting for players")
            room.touch()
            return self.rules.undo(room.game)

    def cleanup_stale_rooms(
        self,
        max_age_seconds: int = 60,
        abandoned_after_seconds: int | None = None,
    ) -> list[str]:
        """
        Delete rooms nobody has touched for a while.

        Waiting or finished rooms go after max_age_seconds. Rooms with a
        game in progress go only after abandoned_after_seconds, and never
        when that is None.
        Called periodically to free memory.
        """
        current_time = time.time()
        with self._lock:
            stale = []
            for room_id, room in self._rooms.items():
                idle = current_time - room.last_active
                if room.state == RoomState.PLAYING:
                    if abandoned_after_seconds is not None and idle > abandoned_after_seconds:
                        stale.append(room_id)
                elif idle > max_age_seconds:
                    stale.append(room_id)
            for room_id in stale:
                del self._rooms[room_id]

        for room_id in stale:
            logger.info("Cleaned up idle room %s", room_id)
        return stale

    def _require_seat(self, room: Room, player_id: str) -> Seat:
        seat = room.get_seat(player_id)
        if seat is None:
            raise PlayerNotFound(f"Player {player_id} is not in room {room.room_id}")
        return seat

    def _require_playing(self, room: Room):
        if room.game.status != GameStatus.PLAYING:
            raise GameNotInProgress(f"Game in room {room.room_id} is {room.game.status.value}")

    def _apply(self, room: Room, row: int, col: int) -> MoveResult:
        """Apply under the room lock."""
        room.touch()
        try:
            return self.rules.apply(room.game, row, col)
        except InternalInvariant:
            logger.exception("Room %s: board invariant broken, game stopped", room.room_id)
            raise
