"""Tests for the Board grid mechanics."""

import pytest

from macmahon.board import Board, BorderPosition, Position
from macmahon.tiles import Color, Direction, Tile


class TestBoardBasics:
    """Tests for cell queries and mutation."""

    def test_new_board_is_empty(self) -> None:
        """Test that a new board has no tiles, holes or border colors."""
        board = Board(2, 3)
        assert board.dims == (2, 3)
        assert all(board.is_empty(r, c) for r, c in board.cells())
        assert board.n_holes == 0
        assert board.border_colors == {}
        assert board.n_free_cells == 6

    @pytest.mark.parametrize("dims", [(0, 3), (3, 0), (-1, 2)])
    def test_rejects_non_positive_dimensions(self, dims) -> None:
        """Test that boards need at least one row and one column."""
        with pytest.raises(ValueError):
            Board(*dims)

    def test_place_and_clear(self) -> None:
        """Test that place stores the tile and clear returns it."""
        board = Board(2, 2)
        tile = Tile.from_pattern("RGYG")
        board.place(1, 0, tile)
        assert board.tile_at(1, 0) is tile
        assert tile.placement == (1, 0)
        assert not board.is_empty(1, 0)
        assert board.clear(1, 0) is tile
        assert board.is_empty(1, 0)
        assert board.clear(1, 0) is None

    @pytest.mark.parametrize("cell", [(-1, 0), (0, -1), (2, 0), (0, 3)])
    def test_out_of_bounds_access_raises(self, cell) -> None:
        """Test that out-of-bounds coordinates fail loudly instead of wrapping."""
        board = Board(2, 3)
        with pytest.raises(IndexError):
            board.is_empty(*cell)
        with pytest.raises(IndexError):
            board.is_hole(*cell)
        with pytest.raises(IndexError):
            board.place(*cell, Tile.from_pattern("RRRR"))

    def test_holes(self) -> None:
        """Test adding and removing holes."""
        board = Board(2, 2, holes=[(0, 1)])
        assert board.is_hole(0, 1)
        board.set_hole(1, 1)
        assert list(board.holes) == [Position(0, 1), Position(1, 1)]
        board.remove_hole(0, 1)
        assert not board.is_hole(0, 1)
        assert board.n_holes == 1

    def test_hole_on_occupied_cell_rejected(self) -> None:
        """Test that a cell holding a tile cannot become a hole."""
        board = Board(2, 2)
        board.place(0, 0, Tile.from_pattern("RRRR"))
        with pytest.raises(ValueError):
            board.set_hole(0, 0)

    def test_hole_out_of_bounds_rejected(self) -> None:
        """Test that holes must lie on the board."""
        with pytest.raises(IndexError):
            Board(2, 2, holes=[(2, 0)])


class TestBorders:
    """Tests for border segment bookkeeping."""

    def test_set_and_clear_border_color(self) -> None:
        """Test that NONE removes a border requirement."""
        board = Board(2, 3)
        pos = BorderPosition(Direction.TOP, 2)
        board.set_border_color(pos, Color.RED)
        assert board.border_color(pos) is Color.RED
        board.set_border_color(pos, Color.NONE)
        assert board.border_color(pos) is Color.NONE
        assert pos not in board.border_colors

    def test_border_index_range(self) -> None:
        """Test that TOP/BOTTOM are indexed by column and LEFT/RIGHT by row."""
        board = Board(2, 3)
        board.set_border_color(BorderPosition(Direction.BOTTOM, 2), Color.GREEN)
        board.set_border_color(BorderPosition(Direction.RIGHT, 1), Color.GREEN)
        with pytest.raises(IndexError):
            board.set_border_color(BorderPosition(Direction.TOP, 3), Color.GREEN)
        with pytest.raises(IndexError):
            board.set_border_color(BorderPosition(Direction.LEFT, 2), Color.GREEN)

    def test_hole_is_not_a_border_color(self) -> None:
        """Test that border segments only take edge colors."""
        board = Board(2, 2)
        with pytest.raises(ValueError):
            board.set_border_color(BorderPosition(Direction.TOP, 0), Color.HOLE)

    def test_border_positions_cover_perimeter(self) -> None:
        """Test that every perimeter segment is listed once."""
        board = Board(2, 3)
        positions = list(board.border_positions())
        assert len(positions) == 2 * 3 + 2 * 2
        assert len(set(positions)) == len(positions)

    def test_border_position_for(self) -> None:
        """Test mapping cell edges to border segments."""
        board = Board(2, 3)
        assert board.border_position_for(0, 1, Direction.TOP) == (Direction.TOP, 1)
        assert board.border_position_for(1, 2, Direction.RIGHT) == (Direction.RIGHT, 1)
        assert board.border_position_for(1, 0, Direction.BOTTOM) == (Direction.BOTTOM, 0)
        assert board.border_position_for(0, 0, Direction.LEFT) == (Direction.LEFT, 0)
        assert board.border_position_for(0, 1, Direction.BOTTOM) is None

    def test_adjacent_cell(self) -> None:
        """Test finding the cell next to a border segment."""
        board = Board(2, 3)
        assert board.adjacent_cell(BorderPosition(Direction.TOP, 1)) == (0, 1)
        assert board.adjacent_cell(BorderPosition(Direction.BOTTOM, 2)) == (1, 2)
        assert board.adjacent_cell(BorderPosition(Direction.LEFT, 1)) == (1, 0)
        assert board.adjacent_cell(BorderPosition(Direction.RIGHT, 0)) == (0, 2)


class TestCellSelection:
    """Tests for the empty-cell search order."""

    def test_find_next_empty_skips_holes_and_tiles(self) -> None:
        """Test that the row-major scan skips holes and occupied cells."""
        board = Board(2, 2, holes=[(0, 1)])
        board.place(0, 0, Tile.from_pattern("RRRR"))
        assert board.find_next_empty() == (1, 0)

    def test_find_next_empty_full_board(self) -> None:
        """Test that a board with no free cells has no next empty cell."""
        board = Board(1, 2, holes=[(0, 0)])
        board.place(0, 1, Tile.from_pattern("RRRR"))
        assert board.find_next_empty() is None
        assert board.find_most_constrained_empty() is None

    def test_most_constrained_prefers_corners_on_empty_board(self) -> None:
        """Test that the first corner wins on an empty board (two off-grid neighbors)."""
        board = Board(3, 3)
        assert board.find_most_constrained_empty() == (0, 0)

    def test_most_constrained_counts_occupied_neighbors(self) -> None:
        """Test that a cell surrounded by tiles is chosen first."""
        board = Board(3, 3)
        for cell in [(0, 1), (1, 0), (1, 2), (2, 1)]:
            board.place(*cell, Tile.from_pattern("RRRR"))
        assert board.find_most_constrained_empty() == (1, 1)

    def test_holes_do_not_count_as_constraints(self) -> None:
        """Test that a hole neighbor does not make a cell more constrained."""
        board = Board(1, 4, holes=[(0, 1)])
        # (0, 0) has 3 off-grid neighbors plus a hole; (0, 3) has 3 off-grid neighbors
        board.place(0, 2, Tile.from_pattern("RRRR"))
        # (0, 3) also touches the tile at (0, 2)
        assert board.find_most_constrained_empty() == (0, 3)


class TestDeepCopy:
    """Tests for Board.deep_copy."""

    def test_copy_is_independent(self) -> None:
        """Test that mutating the copy leaves the original alone."""
        board = Board(2, 2, {BorderPosition(Direction.TOP, 0): Color.RED}, holes=[(1, 1)])
        tile = Tile.from_pattern("RGYG")
        board.place(0, 0, tile)

        copy = board.deep_copy()
        assert copy.tile_at(0, 0) is tile
        copy.clear(0, 0)
        copy.place(0, 1, Tile.from_pattern("GGGG"))
        copy.set_hole(1, 0)
        copy.set_border_color(BorderPosition(Direction.TOP, 1), Color.GREEN)

        assert board.tile_at(0, 0) is tile
        assert board.is_empty(0, 1)
        assert not board.is_hole(1, 0)
        assert board.border_color(BorderPosition(Direction.TOP, 1)) is Color.NONE

    def test_str(self) -> None:
        """Test the text rendering of a board."""
        board = Board(1, 3, holes=[(0, 2)])
        board.place(0, 0, Tile.from_pattern("RGYG", 90))
        assert str(board) == "GRGY .... ####"
