"""
Explosion Engine - Resolves capacity overflow into chain reactions.

A cell at or over capacity explodes:
1. Its count drops to 0 (owner is kept)
2. Each in-bounds neighbor is captured and gains one dot
3. Neighbors that reach capacity explode in turn

Cascades run on an explicit FIFO worklist instead of recursion, in the
fixed neighbor order from board.DIRECTIONS. The returned trace is the
exact sequence a consumer (animation, network broadcast) replays.

A cascade stops as soon as the mover holds every occupied cell, since the
game is over at that point. A finished board can therefore keep cells at
or over capacity; only boards of games still in progress are guaranteed
to be at rest.
"""

from __future__ import annotations
from collections import deque
from dataclasses import dataclass, field
import logging

from .board import Board
from .errors import InternalInvariant

logger = logging.getLogger(__name__)

# Explosions allowed per cell of the board before a cascade is declared corrupt
CASCADE_LIMIT_PER_CELL = 64


@dataclass
class ExplosionEvent:
    """
    One explosion in a cascade.

    wave is the distance from the triggering cell in the cascade tree
    (0 for the cell the move landed on).
    """
    row: int
    col: int
    player: str
    wave: int
    captured: list[tuple[int, int]] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "row": self.row,
            "col": self.col,
            "player": self.player,
            "wave": self.wave,
            "captured": [{"row": r, "col": c} for r, c in self.captured],
        }


@dataclass
class ExplosionEngine:
    """
    Stateless cascade resolver.

    The limit is a guard against a corrupted board; normal play
    never comes near it.
    """
    limit_per_cell: int = CASCADE_LIMIT_PER_CELL
    max_explosions: int | None = None  # Overrides the per-cell limit when set

    def explode(self, board: Board, row: int, col: int, player: str) -> list[ExplosionEvent]:
        """
        Explode (row, col) for player and resolve the whole cascade.

        If the board held opponent cells when the cascade began and the
        cascade captures the last of them, resolution stops there: the
        move has already won, and a board saturated by one player never
        settles.
        """
        limit = self.max_explosions
        if limit is None:
            limit = board.size * board.size * self.limit_per_cell
        opponents = sum(
            count for owner, count in board.owners().items() if owner != player
        )
        had_opponents = opponents > 0

        events: list[ExplosionEvent] = []
        queue: deque[tuple[int, int, int]] = deque([(row, col, 0)])
        queued = {(row, col)}

        while queue:
            r, c, wave = queue.popleft()
            queued.discard((r, c))
            cell = board.cell(r, c)

            if len(events) >= limit:
                raise InternalInvariant(
                    f"Cascade from ({row}, {col}) exceeded {limit} explosions"
                )

            cell.count = 0
            cell.owner = player
            event = ExplosionEvent(row=r, col=c, player=player, wave=wave)

            for nr, nc in board.neighbors(r, c):
                neighbor = board.cell(nr, nc)
                if neighbor.owner is not None and neighbor.owner != player:
                    opponents -= 1
                if neighbor.owner != player:
                    event.captured.append((nr, nc))
                neighbor.owner = player
                neighbor.count += 1
                if neighbor.count >= neighbor.capacity and (nr, nc) not in queued:
                    queue.append((nr, nc, wave + 1))
                    queued.add((nr, nc))

            events.append(event)

            if had_opponents and opponents == 0:
                break

        logger.debug(
            "Cascade from (%d, %d) for %s: %d explosion(s)",
            row, col, player, len(events),
        )
        return events


def explode(board: Board, row: int, col: int, player: str) -> list[ExplosionEvent]:
    """
    Convenience function to resolve a cascade.

    Creates an ExplosionEngine and runs it on the board in place.
    """
    return ExplosionEngine().explode(board, row, col, player)
