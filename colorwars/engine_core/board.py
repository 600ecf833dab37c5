"""
Board Model - Grid of cells with owner, dot count and capacity.

Design principles:
- Capacity is a pure function of position, fixed at creation
- Clones never share cells with their source
- Neighbor order is fixed (up, down, left, right) so every consumer
  sees the same cascade sequence
"""

from __future__ import annotations
from dataclasses import dataclass, field

from .errors import InvalidConfiguration


# Orthogonal directions in processing order: up, down, left, right
DIRECTIONS: tuple[tuple[int, int], ...] = ((-1, 0), (1, 0), (0, -1), (0, 1))

MIN_BOARD_SIZE = 3
MAX_BOARD_SIZE = 12


def compute_capacity(row: int, col: int, size: int) -> int:
    """
    Dots a cell can hold before it explodes.

    Corner -> 2, edge -> 3, interior -> 4. Equal to the number
    of in-bounds neighbors.
    """
    on_row_edge = row == 0 or row == size - 1
    on_col_edge = col == 0 or col == size - 1

    if on_row_edge and on_col_edge:
        return 2
    if on_row_edge or on_col_edge:
        return 3
    return 4


@dataclass
class Cell:
    """A single board cell."""
    capacity: int
    owner: str | None = None
    count: int = 0

    @property
    def is_empty(self) -> bool:
        return self.owner is None

    @property
    def is_critical(self) -> bool:
        """One more dot makes this cell explode."""
        return self.count + 1 >= self.capacity

    def copy(self) -> Cell:
        return Cell(capacity=self.capacity, owner=self.owner, count=self.count)


@dataclass
class Board:
    """
    A square grid of cells.

    Owned by exactly one session at a time. Anything that wants
    to look ahead or keep a snapshot works on clone().
    """
    size: int
    cells: list[list[Cell]] = field(default_factory=list)

    @classmethod
    def create(cls, size: int) -> Board:
        """Create an empty board with capacities set by position."""
        if not MIN_BOARD_SIZE <= size <= MAX_BOARD_SIZE:
            raise InvalidConfiguration(
                f"Board size must be between {MIN_BOARD_SIZE} and {MAX_BOARD_SIZE}, got {size}"
            )
        cells = [
            [Cell(capacity=compute_capacity(row, col, size)) for col in range(size)]
            for row in range(size)
        ]
        return cls(size=size, cells=cells)

    def clone(self) -> Board:
        """Deep copy - no cell is shared with the source."""
        return Board(
            size=self.size,
            cells=[[cell.copy() for cell in row] for row in self.cells],
        )

    def in_bounds(self, row: int, col: int) -> bool:
        return 0 <= row < self.size and 0 <= col < self.size

    def cell(self, row: int, col: int) -> Cell:
        """Get a cell. Callers check bounds first."""
        return self.cells[row][col]

    def neighbors(self, row: int, col: int) -> list[tuple[int, int]]:
        """In-bounds orthogonal neighbors, in up/down/left/right order."""
        result = []
        for dr, dc in DIRECTIONS:
            r, c = row + dr, col + dc
            if self.in_bounds(r, c):
                result.append((r, c))
        return result

    def positions(self):
        """Iterate all (row, col) positions in row-major order."""
        for row in range(self.size):
            for col in range(self.size):
                yield row, col

    def count_cells(self, player: str) -> int:
        """Number of cells owned by a player."""
        return sum(1 for row in self.cells for cell in row if cell.owner == player)

    def owners(self) -> dict[str, int]:
        """Cells owned per player (players with no cells are absent)."""
        counts: dict[str, int] = {}
        for row in self.cells:
            for cell in row:
                if cell.owner is not None:
                    counts[cell.owner] = counts.get(cell.owner, 0) + 1
        return counts

    def total_dots(self) -> int:
        return sum(cell.count for row in self.cells for cell in row)

    def is_stable(self) -> bool:
        """True when no cell is at or over capacity."""
        return all(cell.count < cell.capacity for row in self.cells for cell in row)
