"""Loader and writer for serialized puzzle files.

A puzzle file is a JSON document `{"field": [[...], ...]}` holding a (rows + 2) x (cols + 2)
grid of 4-character edge patterns in (TOP, RIGHT, BOTTOM, LEFT) order.  The outer ring
encodes border colors: only the character facing the interior is meaningful, and the four
corners carry nothing.  Interior cells are "NNNN" (empty), "HHHH" (hole) or the effective
pattern of a placed tile.
"""

import logging
from collections.abc import Iterable
from dataclasses import dataclass, field
from os import PathLike
from pathlib import Path

import numpy as np
from pydantic import BaseModel, ValidationError, model_validator

from macmahon.board import Board, BorderPosition, Position
from macmahon.canonical import CanonicalResolver
from macmahon.tiles import EDGE_COLORS, EDGE_COUNT, Color, Direction, Tile, pattern_code

logger = logging.getLogger(__name__)

EMPTY_CELL = "NNNN"
HOLE_CELL = "HHHH"


class PuzzleFormatError(ValueError):
    """Raised when a puzzle document is structurally invalid."""

    pass


class PuzzleFile(BaseModel):
    """Shape of a puzzle document."""

    field: list[list[str]]
    """Border-inclusive grid of edge patterns, row-major."""

    @model_validator(mode="after")
    def _check_shape(self) -> "PuzzleFile":
        if not self.field or not self.field[0]:
            raise ValueError("field must not be empty")
        width = len(self.field[0])
        if any(len(row) != width for row in self.field):
            raise ValueError("field rows must all have the same length")
        if len(self.field) < 3 or width < 3:
            raise ValueError("field must be at least 3x3 (one cell plus the border ring)")
        return self

    @property
    def dims(self) -> tuple[int, int]:
        """Height and width of the game area (excluding the border ring)."""
        return (len(self.field) - 2, len(self.field[0]) - 2)


@dataclass
class PuzzleState:
    """A board reconstructed from a puzzle file."""

    board: Board
    """The reconstructed board."""

    placed: list[Tile] = field(default_factory=list)
    """Tiles placed on the board, in row-major order."""

    corrupt_cells: list[Position] = field(default_factory=list)
    """Game cells whose pattern matched no master tile; left empty."""

    corrupt_borders: list[BorderPosition] = field(default_factory=list)
    """Border segments with an unusable color; left unconstrained."""

    @property
    def degraded(self) -> bool:
        """Whether anything in the document had to be skipped."""
        return bool(self.corrupt_cells or self.corrupt_borders)


def border_position_for_coords(
    row: int, col: int, n_rows: int, n_cols: int
) -> BorderPosition | None:
    """Map full-grid coordinates to the border segment they encode.

    Args:
        row (int): Row in the border-inclusive grid.
        col (int): Column in the border-inclusive grid.
        n_rows (int): Height of the border-inclusive grid.
        n_cols (int): Width of the border-inclusive grid.

    Returns:
        The BorderPosition, or None for corners and interior cells.
    """
    on_row_edge = row in (0, n_rows - 1)
    on_col_edge = col in (0, n_cols - 1)
    if on_row_edge and on_col_edge:
        return None  # Corner
    if row == 0:
        return BorderPosition(Direction.TOP, col - 1)
    if row == n_rows - 1:
        return BorderPosition(Direction.BOTTOM, col - 1)
    if col == 0:
        return BorderPosition(Direction.LEFT, row - 1)
    if col == n_cols - 1:
        return BorderPosition(Direction.RIGHT, row - 1)
    return None


def _border_pattern(side: Direction, color: Color) -> str:
    """Pattern for a border-ring cell: `color` on the edge facing the interior."""
    colors = [Color.NONE] * EDGE_COUNT
    colors[side.opposite()] = color
    return pattern_code(colors)


def _border_color(side: Direction, pattern: str) -> Color | None:
    """Read the interior-facing color of a border-ring cell, or None if unusable."""
    if len(pattern) != EDGE_COUNT:
        return None
    try:
        color = Color.from_code(pattern[side.opposite()])
    except ValueError:
        return None
    if color != Color.NONE and color not in EDGE_COLORS:
        return None
    return color


def parse_puzzle(puzzle_file: PuzzleFile, master_tiles: Iterable[Tile]) -> PuzzleState:
    """Reconstruct a board from a validated puzzle document.

    Corrupt cells and border segments are logged, recorded on the returned state and
    skipped; the rest of the document is still loaded.
    """
    resolver = CanonicalResolver(master_tiles)
    grid = puzzle_file.field
    full_dims = (len(grid), len(grid[0]))
    state = PuzzleState(board=Board(*puzzle_file.dims))
    board = state.board

    for row, col in np.ndindex(full_dims):
        pattern = grid[row][col]
        border_pos = border_position_for_coords(row, col, *full_dims)

        if border_pos is not None:
            color = _border_color(border_pos.side, pattern)
            if color is None:
                logger.warning("Unusable border pattern %r at %s", pattern, border_pos)
                state.corrupt_borders.append(border_pos)
            else:
                board.set_border_color(border_pos, color)
            continue
        if row in (0, full_dims[0] - 1) or col in (0, full_dims[1] - 1):
            continue  # Corner

        pos = Position(row - 1, col - 1)
        if pattern == EMPTY_CELL:
            continue
        if pattern == HOLE_CELL:
            board.set_hole(*pos)
            continue

        tile = resolver.resolve_tile(pattern)
        if tile is None:
            state.corrupt_cells.append(pos)
            continue
        board.place(pos.row, pos.col, tile)
        state.placed.append(tile)

    if state.degraded:
        logger.warning(
            "Puzzle loaded with %d corrupt cell(s) and %d corrupt border segment(s)",
            len(state.corrupt_cells),
            len(state.corrupt_borders),
        )
    return state


def loads(text: str, master_tiles: Iterable[Tile]) -> PuzzleState:
    """Parse a puzzle document from a JSON string.

    Raises:
        PuzzleFormatError: If the document is not valid JSON or has the wrong shape.
    """
    try:
        puzzle_file = PuzzleFile.model_validate_json(text)
    except ValidationError as e:
        raise PuzzleFormatError(f"Invalid puzzle document: {e}") from e
    return parse_puzzle(puzzle_file, master_tiles)


def load(path: str | PathLike, master_tiles: Iterable[Tile]) -> PuzzleState:
    """Load a puzzle document from a file.  See `loads`."""
    return loads(Path(path).read_text(encoding="utf-8"), master_tiles)


def to_puzzle_file(board: Board) -> PuzzleFile:
    """Serialize a board into a puzzle document."""
    full_rows, full_cols = board.n_rows + 2, board.n_cols + 2
    grid = [[EMPTY_CELL] * full_cols for _ in range(full_rows)]

    for border_pos in board.border_positions():
        color = board.border_color(border_pos)
        if color == Color.NONE:
            continue
        row, col = board.adjacent_cell(border_pos)
        n_row, n_col = board.neighbor(row, col, border_pos.side)
        grid[n_row + 1][n_col + 1] = _border_pattern(border_pos.side, color)

    for row, col in board.cells():
        tile = board.tiles[row, col]
        if board.is_hole(row, col):
            grid[row + 1][col + 1] = HOLE_CELL
        elif tile is not None:
            grid[row + 1][col + 1] = tile.effective_pattern

    return PuzzleFile(field=grid)


def dumps(board: Board) -> str:
    """Serialize a board to a JSON string."""
    return to_puzzle_file(board).model_dump_json(indent=2)


def dump(board: Board, path: str | PathLike) -> None:
    """Write a board to a puzzle file."""
    Path(path).write_text(dumps(board), encoding="utf-8")
