"""Edge-matching rules for the MacMahon mosaic solver."""

from collections.abc import Mapping, Sequence

from macmahon.board import Board, BorderPosition, Position
from macmahon.tiles import ORIENTATIONS, Color, Direction, Tile

BorderMap = Mapping[BorderPosition, Color]
Constraints = dict[Direction, Color]


def required_edge_color(
    row: int,
    col: int,
    direction: Direction,
    board: Board,
    border_colors: BorderMap | None = None,
) -> Color:
    """Return the color required of the `direction` edge of a tile at (row, col).

    Args:
        row (int): Row of the cell.
        col (int): Column of the cell.
        direction (Direction): The edge to check.
        board (Board): The board to check against.  May be a scratch copy.
        border_colors (BorderMap | None): Border requirements.  If None, uses the board's own.

    Returns:
        The neighbor's facing color, the border requirement, or `Color.NONE` if the edge is
        unconstrained (empty neighbor, hole neighbor or uncolored border).
    """
    if border_colors is None:
        border_colors = board.border_colors

    n_row, n_col = board.neighbor(row, col, direction)
    if not board.in_bounds(n_row, n_col):
        border_pos = board.border_position_for(row, col, direction)
        return border_colors.get(border_pos, Color.NONE)

    # Holes never constrain their neighbors
    if (n_row, n_col) in board.holes:
        return Color.NONE

    neighbor_tile = board.tiles[n_row, n_col]
    if neighbor_tile is None:
        return Color.NONE
    return neighbor_tile.effective_edge(direction.opposite())


def cell_constraints(
    row: int, col: int, board: Board, border_colors: BorderMap | None = None
) -> Constraints:
    """Return the colors required at each constrained edge of (row, col).

    Unconstrained directions are omitted.
    """
    constraints: Constraints = {}
    for direction in Direction:
        color = required_edge_color(row, col, direction, board, border_colors)
        if color != Color.NONE:
            constraints[direction] = color
    return constraints


def is_valid_placement(
    tile: Tile,
    row: int,
    col: int,
    board: Board,
    border_colors: BorderMap | None = None,
) -> bool:
    """Returns whether `tile`, at its current orientation, matches every constraint at (row, col).

    Whatever currently occupies (row, col) is ignored; only the neighbors and borders matter.
    """
    for direction in Direction:
        required = required_edge_color(row, col, direction, board, border_colors)
        if required != Color.NONE and required != tile.effective_edge(direction):
            return False
    return True


def matches_constraints(edges: Sequence[Color], constraints: Constraints) -> bool:
    """Returns whether effective (TOP, RIGHT, BOTTOM, LEFT) edges satisfy the constraints."""
    return all(edges[direction] == color for direction, color in constraints.items())


def can_meet_constraints(tile: Tile, constraints: Constraints) -> bool:
    """Returns whether some orientation of `tile` satisfies every constraint.

    A tile with no constraints to satisfy trivially passes.
    """
    if not constraints:
        return True
    return any(matches_constraints(tile.edges_at(o), constraints) for o in ORIENTATIONS)


def find_invalid_placements(
    board: Board, border_colors: BorderMap | None = None
) -> list[Position]:
    """Return the positions of placed tiles that conflict with a neighbor or border,
    in row-major order."""
    return [
        pos
        for pos, tile in board.placed_tiles()
        if not is_valid_placement(tile, pos.row, pos.col, board, border_colors)
    ]
