"""Edge-supply feasibility check.

Counts the edge colors the free cells of a board require against the edge colors the
available tiles can supply.  A shortfall in any color proves the board unsolvable; no
shortfall proves nothing, but tells the caller the full search is worth running.
"""

from collections import Counter
from collections.abc import Iterable
from dataclasses import dataclass, field

from macmahon.board import Board
from macmahon.solver.constraints import BorderMap, required_edge_color
from macmahon.tiles import EDGE_COLORS, Color, Direction, Tile


@dataclass(kw_only=True)
class EdgeSupplyReport:
    """Result of an edge-supply check."""

    required: Counter[Color] = field(default_factory=Counter)
    """Edges required by the free cells, per color."""

    available: Counter[Color] = field(default_factory=Counter)
    """Edges supplied by the available tiles, per color."""

    shortfall: list[Color] = field(default_factory=list)
    """Colors for which more edges are required than available, in RED, GREEN, YELLOW order."""

    @property
    def feasible(self) -> bool:
        return not self.shortfall

    def __str__(self) -> str:
        parts = [
            f"{color.name}: {self.required[color]}/{self.available[color]}" for color in EDGE_COLORS
        ]
        verdict = "ok" if self.feasible else "short of " + ", ".join(c.name for c in self.shortfall)
        return f"edge supply (required/available) {'; '.join(parts)} -> {verdict}"


def count_available_edges(available: Iterable[Tile]) -> Counter[Color]:
    """Tally every edge of every tile.  Orientation does not matter."""
    counts: Counter[Color] = Counter()
    for tile in available:
        for color in EDGE_COLORS:
            counts[color] += tile.edge_count(color)
    return counts


def count_required_edges(board: Board, border_colors: BorderMap | None = None) -> Counter[Color]:
    """Tally the constrained edges of every free (empty, non-hole) cell."""
    counts: Counter[Color] = Counter()
    for row, col in board.free_cells():
        for direction in Direction:
            color = required_edge_color(row, col, direction, board, border_colors)
            if color != Color.NONE:
                counts[color] += 1
    return counts


def check_edge_supply(
    board: Board, available: Iterable[Tile], border_colors: BorderMap | None = None
) -> EdgeSupplyReport:
    """Compare required edge colors with the supply of the available tiles.

    Args:
        board (Board): The board to check.
        available (Iterable[Tile]): Tiles not yet placed.
        border_colors (BorderMap | None): Border requirements.  If None, uses the board's own.

    Returns:
        An EdgeSupplyReport.  A board with no free cells is always feasible.
    """
    required = count_required_edges(board, border_colors)
    supplied = count_available_edges(available)
    shortfall = [color for color in EDGE_COLORS if required[color] > supplied[color]]
    return EdgeSupplyReport(required=required, available=supplied, shortfall=shortfall)
