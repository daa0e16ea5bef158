"""Backtracking search for the MacMahon mosaic solver."""

import logging
from collections.abc import Sequence
from dataclasses import dataclass, field
from time import time

from macmahon.board import Board
from macmahon.solver.constraints import (
    BorderMap,
    can_meet_constraints,
    cell_constraints,
    is_valid_placement,
)
from macmahon.tiles import ORIENTATIONS, Tile

logger = logging.getLogger(__name__)


@dataclass
class SolverStats:
    """Statistics collected during solving."""

    nodes_visited: int = 0
    """Number of search nodes (cell selections) visited."""

    placements_tried: int = 0
    """Number of valid trial placements made."""

    backtracks: int = 0
    """Number of trial placements undone."""

    max_depth_reached: int = 0
    """Maximum recursion depth reached during solving."""

    start_time: float = field(default_factory=time)
    """Timestamp when solving started."""

    @property
    def elapsed(self) -> float:
        """Seconds since `start_time`."""
        return time() - self.start_time

    def __str__(self) -> str:
        return (
            f"nodes visited: {self.nodes_visited:,}, placements tried: {self.placements_tried:,}, "
            f"backtracks: {self.backtracks:,}, max depth: {self.max_depth_reached}, "
            f"elapsed: {self.elapsed:.3f}s"
        )


def solve(
    board: Board,
    available: Sequence[Tile],
    border_colors: BorderMap | None = None,
    *,
    stats: SolverStats | None = None,
) -> Board | None:
    """Fill every free cell of `board` with tiles from `available`.

    The board is mutated in place and is expected to be a scratch copy.  On failure every
    trial placement has been undone, so the board is left as it was given.

    Args:
        board (Board): The board to fill.
        available (Sequence[Tile]): Tiles that may be placed, in the order to try them.
            These tiles are never mutated; each trial uses a fresh Tile.
        border_colors (BorderMap | None): Border requirements.  If None, uses the board's own.
        stats (SolverStats | None): Statistics to update, if given.

    Returns:
        The filled board (the same object as `board`) if a solution is found, else None.
    """
    if stats is None:
        stats = SolverStats()
    result = _solve(board, list(available), border_colors, stats, depth=0)
    logger.debug("Search %s: %s", "succeeded" if result is not None else "failed", stats)
    return result


def _solve(
    board: Board,
    available: list[Tile],
    border_colors: BorderMap | None,
    stats: SolverStats,
    depth: int,
) -> Board | None:
    stats.nodes_visited += 1
    stats.max_depth_reached = max(stats.max_depth_reached, depth)

    pos = board.find_most_constrained_empty()
    if pos is None:
        return board  # Solved
    row, col = pos

    # Drop tiles that cannot meet this cell's constraints in any orientation
    constraints = cell_constraints(row, col, board, border_colors)
    candidates = [
        (idx, tile) for idx, tile in enumerate(available) if can_meet_constraints(tile, constraints)
    ]

    for idx, tile in candidates:
        remaining = available[:idx] + available[idx + 1 :]
        tried_edges = set()
        for orientation in ORIENTATIONS:
            # Symmetric tiles repeat effective patterns; those branches are identical
            edges = tile.edges_at(orientation)
            if edges in tried_edges:
                continue
            tried_edges.add(edges)

            trial = tile.oriented(orientation)
            if not is_valid_placement(trial, row, col, board, border_colors):
                continue

            stats.placements_tried += 1
            board.place(row, col, trial)
            result = _solve(board, remaining, border_colors, stats, depth + 1)
            if result is not None:
                return result
            board.clear(row, col)
            stats.backtracks += 1

    # No tile fits this cell, backtrack
    return None
