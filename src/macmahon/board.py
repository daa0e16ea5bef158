"""Classes and functions for representing the game board."""

from collections.abc import Iterable, Iterator, Mapping
from typing import NamedTuple, TextIO

import numpy as np
from sortedcontainers import SortedSet

from macmahon.tiles import EDGE_COLORS, Color, Direction, Tile


class Position(NamedTuple):
    """A cell on the board."""

    row: int
    col: int


class BorderPosition(NamedTuple):
    """One unit-length segment of the board's perimeter.

    TOP and BOTTOM segments are indexed by column, LEFT and RIGHT segments by row.
    """

    side: Direction
    index: int


BorderColors = dict[BorderPosition, Color]


class Board:
    """A rows x cols grid of optional tiles, with holes and border color requirements.

    The board only implements grid mechanics; game rules (is a placement allowed, does it
    match its neighbors) live in `macmahon.solver.constraints` and `macmahon.game`.
    """

    def __init__(
        self,
        n_rows: int,
        n_cols: int,
        border_colors: Mapping[BorderPosition, Color] | None = None,
        holes: Iterable[tuple[int, int]] = (),
    ) -> None:
        if n_rows <= 0 or n_cols <= 0:
            raise ValueError(f"Board dimensions must be positive, got {n_rows}x{n_cols}.")

        self.n_rows = n_rows
        self.n_cols = n_cols

        self.tiles: np.ndarray = np.empty((n_rows, n_cols), dtype=object)
        """Tile at each cell, or None."""

        self.holes: SortedSet = SortedSet()
        """Positions of hole cells, kept sorted for deterministic iteration."""
        for row, col in holes:
            self._check_bounds(row, col)
            self.holes.add(Position(row, col))

        self.border_colors: BorderColors = {}
        """Required color facing each border segment.  Absent segments are unconstrained."""
        for border_pos, color in (border_colors or {}).items():
            self.set_border_color(border_pos, color)

    @property
    def dims(self) -> tuple[int, int]:
        return (self.n_rows, self.n_cols)

    def in_bounds(self, row: int, col: int) -> bool:
        return 0 <= row < self.n_rows and 0 <= col < self.n_cols

    def _check_bounds(self, row: int, col: int) -> None:
        if not self.in_bounds(row, col):
            raise IndexError(
                f"Cell ({row}, {col}) is outside the {self.n_rows}x{self.n_cols} board."
            )

    def tile_at(self, row: int, col: int) -> Tile | None:
        self._check_bounds(row, col)
        return self.tiles[row, col]

    def is_empty(self, row: int, col: int) -> bool:
        return self.tile_at(row, col) is None

    def is_hole(self, row: int, col: int) -> bool:
        self._check_bounds(row, col)
        return (row, col) in self.holes

    def place(self, row: int, col: int, tile: Tile) -> None:
        """Put a tile in a cell, replacing whatever was there."""
        self._check_bounds(row, col)
        tile.placement = (row, col)
        self.tiles[row, col] = tile

    def clear(self, row: int, col: int) -> Tile | None:
        """Empty a cell and return the tile that was in it."""
        self._check_bounds(row, col)
        tile = self.tiles[row, col]
        self.tiles[row, col] = None
        return tile

    def set_hole(self, row: int, col: int) -> None:
        """Mark a cell as a hole.

        Raises:
            ValueError: If the cell holds a tile.
        """
        if not self.is_empty(row, col):
            raise ValueError(f"Cell ({row}, {col}) is occupied and cannot become a hole.")
        self.holes.add(Position(row, col))

    def remove_hole(self, row: int, col: int) -> None:
        self._check_bounds(row, col)
        self.holes.discard(Position(row, col))

    @property
    def n_holes(self) -> int:
        return len(self.holes)

    def neighbor(self, row: int, col: int, direction: Direction) -> Position:
        """Cell next to (row, col) in `direction`.  May be off the board."""
        delta_r, delta_c = direction.delta
        return Position(row + delta_r, col + delta_c)

    def border_position_for(
        self, row: int, col: int, direction: Direction
    ) -> BorderPosition | None:
        """Border segment faced by the `direction` edge of (row, col), or None if the edge
        faces another cell."""
        if direction == Direction.TOP and row == 0:
            return BorderPosition(Direction.TOP, col)
        if direction == Direction.RIGHT and col == self.n_cols - 1:
            return BorderPosition(Direction.RIGHT, row)
        if direction == Direction.BOTTOM and row == self.n_rows - 1:
            return BorderPosition(Direction.BOTTOM, col)
        if direction == Direction.LEFT and col == 0:
            return BorderPosition(Direction.LEFT, row)
        return None

    def adjacent_cell(self, border_pos: BorderPosition) -> Position:
        """Cell touching a border segment."""
        self._check_border_position(border_pos)
        side, index = border_pos
        if side == Direction.TOP:
            return Position(0, index)
        if side == Direction.BOTTOM:
            return Position(self.n_rows - 1, index)
        if side == Direction.LEFT:
            return Position(index, 0)
        return Position(index, self.n_cols - 1)

    def _check_border_position(self, border_pos: BorderPosition) -> None:
        side, index = border_pos
        limit = self.n_cols if side in (Direction.TOP, Direction.BOTTOM) else self.n_rows
        if not 0 <= index < limit:
            raise IndexError(f"Border segment {Direction(side).name}_{index} is outside the board.")

    def border_positions(self) -> Iterator[BorderPosition]:
        """All border segments: TOP and BOTTOM by column, then LEFT and RIGHT by row."""
        for col in range(self.n_cols):
            yield BorderPosition(Direction.TOP, col)
            yield BorderPosition(Direction.BOTTOM, col)
        for row in range(self.n_rows):
            yield BorderPosition(Direction.LEFT, row)
            yield BorderPosition(Direction.RIGHT, row)

    def border_color(self, border_pos: BorderPosition) -> Color:
        return self.border_colors.get(border_pos, Color.NONE)

    def set_border_color(self, border_pos: BorderPosition, color: Color) -> None:
        """Set the required color of a border segment.  NONE removes the requirement."""
        border_pos = BorderPosition(Direction(border_pos[0]), border_pos[1])
        self._check_border_position(border_pos)
        if color == Color.NONE:
            self.border_colors.pop(border_pos, None)
            return
        if color not in EDGE_COLORS:
            raise ValueError(f"Border segments take an edge color or NONE, got {color.name}.")
        self.border_colors[border_pos] = color

    def cells(self) -> Iterator[Position]:
        """All cells in row-major order."""
        for row, col in np.ndindex(self.dims):
            yield Position(row, col)

    def free_cells(self) -> Iterator[Position]:
        """Empty, non-hole cells in row-major order."""
        for pos in self.cells():
            if self.tiles[pos.row, pos.col] is None and pos not in self.holes:
                yield pos

    def placed_tiles(self) -> Iterator[tuple[Position, Tile]]:
        """(position, tile) for every occupied cell, in row-major order."""
        for pos in self.cells():
            tile = self.tiles[pos.row, pos.col]
            if tile is not None:
                yield pos, tile

    @property
    def n_free_cells(self) -> int:
        return sum(1 for _ in self.free_cells())

    def find_next_empty(self) -> Position | None:
        """First empty non-hole cell in row-major order, or None."""
        return next(self.free_cells(), None)

    def find_most_constrained_empty(self) -> Position | None:
        """Empty non-hole cell with the most fixed neighbors, or None.

        A neighbor is fixed if it is off the board (a border) or holds a tile.  Ties go to
        the first cell in row-major order.
        """
        best: Position | None = None
        max_constraints = -1
        for pos in self.free_cells():
            n_constraints = 0
            for direction in Direction:
                n_row, n_col = self.neighbor(pos.row, pos.col, direction)
                if not self.in_bounds(n_row, n_col) or self.tiles[n_row, n_col] is not None:
                    n_constraints += 1
            if n_constraints > max_constraints:
                max_constraints = n_constraints
                best = pos
        return best

    def deep_copy(self) -> "Board":
        """Copy the board.

        The copy has its own tile grid, hole set and border map, but the grid holds
        references to the same Tile objects.
        """
        copy = Board(self.n_rows, self.n_cols)
        copy.tiles = self.tiles.copy()
        copy.holes = SortedSet(self.holes)
        copy.border_colors = dict(self.border_colors)
        return copy

    def __str__(self) -> str:
        """Returns a string representation of the board, one row per line."""
        lines = []
        for row in range(self.n_rows):
            cells = []
            for col in range(self.n_cols):
                tile = self.tiles[row, col]
                if (row, col) in self.holes:
                    cells.append("####")
                elif tile is None:
                    cells.append("....")
                else:
                    cells.append(tile.effective_pattern)
            lines.append(" ".join(cells))
        return "\n".join(lines)

    def print(self, file: TextIO | None = None) -> None:
        """Print the board to the console, or to `file` if given."""
        print(str(self), file=file, flush=True)
