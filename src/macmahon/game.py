"""Game orchestration: the live board, the tile pool, editor rules and hints.

The Game owns all mutable puzzle state and reports every change to a GameListener.
Status messages are reported as keys plus arguments:

- status.*: informational
- warning.*: the action succeeded but the result may not be what the user wants
- error.*: the action was refused or the puzzle is not playable
"""

import logging
from collections.abc import Sequence
from os import PathLike
from pathlib import Path

from macmahon import puzzle_file
from macmahon.board import Board, BorderPosition, Position
from macmahon.listener import GameListener, LoggingListener
from macmahon.solver import solver
from macmahon.solver.config import SolverConfig
from macmahon.solver.config import config as solver_config
from macmahon.solver.constraints import find_invalid_placements, is_valid_placement
from macmahon.solver.supply import check_edge_supply
from macmahon.tiles import DEFAULT_TILES_PATH, Color, Tile, TileDefinitionsError, load_master_tiles

logger = logging.getLogger(__name__)


class Game:
    """A MacMahon mosaic game session."""

    def __init__(
        self,
        listener: GameListener | None = None,
        master_tiles: Sequence[Tile] | None = None,
        *,
        config: SolverConfig = solver_config,
    ) -> None:
        """Create a game session.

        Args:
            listener (GameListener | None): Notification sink.  Defaults to a LoggingListener.
            master_tiles (Sequence[Tile] | None): The master tile inventory.  If None, loads
                it from `config.tiles_path` or the packaged list.
            config (SolverConfig): Solver settings.

        Raises:
            TileDefinitionsError: If no master tiles are available.
        """
        if master_tiles is None:
            master_tiles = load_master_tiles(config.tiles_path or DEFAULT_TILES_PATH)
        if not master_tiles:
            raise TileDefinitionsError("No tile definitions; cannot start a game.")

        self.listener: GameListener = listener if listener is not None else LoggingListener()
        self.master_tiles: tuple[Tile, ...] = tuple(master_tiles)
        self.config = config

        self.board: Board | None = None
        """The live board, or None before a board is created or loaded."""

        self.available: list[Tile] = []
        """Master tiles not on the board, in master order."""

        self.editor_mode = False
        self.dirty = False
        """Whether the board changed since it was last loaded or saved."""

        self.solution: Board | None = None
        """Solved copy of the board from the last solvability check, if still consistent."""

    def _require_board(self) -> Board:
        if self.board is None:
            raise RuntimeError("No board; start the editor or load a puzzle first.")
        return self.board

    # --- Listener updates ---

    def _publish_available(self) -> None:
        self.listener.display_available_tiles([tile.base_pattern for tile in self.available])

    def _publish_cell(self, row: int, col: int) -> None:
        board = self._require_board()
        tile = board.tiles[row, col]
        if tile is None:
            self.listener.update_cell(row, col, None, 0, False, board.is_hole(row, col))
        else:
            is_error = not is_valid_placement(tile, row, col, board)
            self.listener.update_cell(
                row, col, tile.base_pattern, tile.orientation, is_error, False
            )

    def _redraw_board(self) -> None:
        board = self._require_board()
        self.listener.initialize_board_view(board.n_rows, board.n_cols, dict(board.border_colors))
        for row, col in board.cells():
            self._publish_cell(row, col)

    # --- Tile pool ---

    def _pool_index(self, tile: Tile) -> int | None:
        key = tile.rotation_key
        for idx, pool_tile in enumerate(self.available):
            if pool_tile.rotation_key == key:
                return idx
        return None

    def _return_to_pool(self, tile: Tile) -> None:
        keys = {pool_tile.rotation_key for pool_tile in self.available}
        keys.add(tile.rotation_key)
        self.available = [master for master in self.master_tiles if master.rotation_key in keys]

    # --- Setup, load and save ---

    def start_editor(self, n_rows: int, n_cols: int) -> None:
        """Start editing a new empty board with no border colors or holes."""
        self.board = Board(n_rows, n_cols)
        self.available = list(self.master_tiles)
        self.solution = None
        self.dirty = False
        self.editor_mode = True

        self._redraw_board()
        self._publish_available()
        self.listener.set_editor_mode(True)
        self.listener.show_status("status.editor_started", n_rows, n_cols)

    def load_from_string(self, text: str) -> bool:
        """Load a puzzle document and report whether it is playable.

        Returns:
            False if the document is structurally invalid, else True (even if degraded).
        """
        try:
            state = puzzle_file.loads(text, self.master_tiles)
        except puzzle_file.PuzzleFormatError as e:
            logger.warning("Could not load puzzle: %s", e)
            self.listener.show_status("error.invalid_puzzle_file", str(e))
            return False
        self._apply_state(state)
        return True

    def load_from_file(self, path: str | PathLike) -> bool:
        """Load a puzzle file.  See `load_from_string`."""
        try:
            text = Path(path).read_text(encoding="utf-8")
        except OSError as e:
            logger.warning("Could not read puzzle file %s: %s", path, e)
            self.listener.show_status("error.cannot_read_file", str(path))
            return False
        return self.load_from_string(text)

    def _apply_state(self, state: puzzle_file.PuzzleState) -> None:
        self.board = state.board
        self.available = solver.unplaced_tiles(self.master_tiles, state.board)
        self.solution = None
        self.dirty = False
        self.editor_mode = False

        self._redraw_board()
        self._publish_available()
        if state.degraded:
            self.listener.show_status(
                "warning.corrupt_cells", list(state.corrupt_cells), list(state.corrupt_borders)
            )

        invalid = find_invalid_placements(state.board)
        if invalid:
            self.editor_mode = True
            self.listener.set_editor_mode(True)
            self.listener.show_status("error.invalid_placements", invalid)
            return

        if self.is_won():
            self.listener.set_editor_mode(False)
            self.listener.show_game_end("game_end.title", "game_end.already_solved")
        elif self._search_too_large():
            self.listener.set_editor_mode(False)
            self.listener.show_status(
                "status.solvability_check_skipped", state.board.n_free_cells
            )
        elif self.is_solvable():
            self.listener.set_editor_mode(False)
            self.listener.show_status("status.loaded_playable")
        else:
            # Unsolvable puzzles go back to the editor
            self.editor_mode = True
            self.listener.set_editor_mode(True)
            self.listener.show_status("warning.loaded_unsolvable")

    def save_to_string(self) -> str:
        """Serialize the live board."""
        text = puzzle_file.dumps(self._require_board())
        self.dirty = False
        return text

    def save_to_file(self, path: str | PathLike) -> bool:
        """Write the live board to a puzzle file.  Returns whether the write succeeded."""
        board = self._require_board()
        try:
            puzzle_file.dump(board, path)
        except OSError as e:
            logger.warning("Could not write puzzle file %s: %s", path, e)
            self.listener.show_status("error.cannot_write_file", str(path))
            return False
        self.dirty = False
        self.listener.show_status("status.saved", str(path))
        return True

    # --- Play ---

    def attempt_place(self, tile: Tile, row: int, col: int) -> bool:
        """Place a copy of `tile`, at its current orientation, on an empty non-hole cell.

        The tile's rotation class must still be in the available pool.

        A placement that conflicts with a neighbor or border is still made, and reported
        as an error cell.

        Returns:
            Whether the tile was placed.
        """
        board = self._require_board()
        if board.is_hole(row, col):
            self.listener.show_status("error.place_on_hole", row, col)
            return False
        if not board.is_empty(row, col):
            self.listener.show_status("error.cell_occupied", row, col)
            return False

        pool_idx = self._pool_index(tile)
        if pool_idx is None:
            self.listener.show_status("error.tile_not_available", tile.base_pattern)
            return False

        placed = tile.oriented(tile.orientation)
        valid = is_valid_placement(placed, row, col, board)
        board.place(row, col, placed)
        del self.available[pool_idx]

        # Keep the cached solution only if this placement agrees with it
        if self.solution is not None:
            cached = self.solution.tiles[row, col]
            if cached is None or cached.effective_pattern != placed.effective_pattern:
                self.solution = None

        self.listener.update_cell(
            row, col, placed.base_pattern, placed.orientation, not valid, False
        )
        self._publish_available()
        if valid:
            self.listener.show_status("status.tile_placed", placed.base_pattern, row, col)
        else:
            self.listener.show_status("error.placement_conflict", row, col)
        self.dirty = True

        if self.is_won():
            self.listener.show_game_end("game_end.title", "game_end.solved")
        return True

    def remove_tile(self, row: int, col: int) -> Tile | None:
        """Remove the tile at (row, col) and return it to the pool.

        Returns:
            The removed tile, or None if the cell is a hole or empty.
        """
        board = self._require_board()
        if board.is_hole(row, col):
            self.listener.show_status("error.remove_from_hole", row, col)
            return None
        if board.is_empty(row, col):
            self.listener.show_status("error.cell_empty", row, col)
            return None

        tile = board.clear(row, col)
        self._return_to_pool(tile)
        self.solution = None
        self.dirty = True

        self.listener.update_cell(row, col, None, 0, False, False)
        self._publish_available()
        self.listener.show_status("status.tile_removed", tile.base_pattern, row, col)
        return tile

    def clear_board(self) -> None:
        """Remove every tile from the board."""
        board = self._require_board()
        for (row, col), _ in list(board.placed_tiles()):
            self.remove_tile(row, col)

    def is_won(self) -> bool:
        """Returns whether every non-hole cell is filled and every placement is valid."""
        board = self._require_board()
        return board.n_free_cells == 0 and not find_invalid_placements(board)

    def free_cell_count(self) -> int:
        return self._require_board().n_free_cells

    def _search_too_large(self) -> bool:
        """Whether the board has too many free cells for an interactive search.

        Clears the cached solution when it does.
        """
        threshold = self.config.solvability_check_max_free_cells
        if threshold is None or self._require_board().n_free_cells <= threshold:
            return False
        self.solution = None
        return True

    def is_solvable(self) -> bool:
        """Check whether the live board can be completed, caching the solution."""
        board = self._require_board()
        result = solver.is_solvable(
            board, self.available, use_supply_check=self.config.use_edge_supply_check
        )
        logger.debug("Solvability check: %s (%s)", result.solvable, result.stats)
        self.solution = result.solution
        return result.solvable

    def provide_hint(self) -> Position | None:
        """Place the solution's tile in the first empty cell, in row-major order.

        Returns:
            The hinted cell, or None if there is no empty cell or no solution.
        """
        board = self._require_board()
        pos = board.find_next_empty()
        if pos is None:
            self.listener.show_status("status.no_empty_cells")
            return None

        if self.solution is None:
            self.is_solvable()
        if self.solution is None or self.solution.tile_at(*pos) is None:
            self.listener.show_status("status.no_hint")
            return None

        cached = self.solution.tile_at(*pos)
        hint = cached.oriented(cached.orientation)
        self.listener.show_status("status.hint", hint.base_pattern, pos.row, pos.col)
        self.attempt_place(hint, pos.row, pos.col)
        self.listener.highlight_cell(pos.row, pos.col, hint.base_pattern)
        return pos

    # --- Editor ---

    def switch_to_editor_mode(self) -> None:
        """Enter editor mode.  The board is cleared of tiles."""
        self.clear_board()
        self.editor_mode = True
        self.listener.set_editor_mode(True)
        self.listener.show_status("status.editor_mode")

    def switch_to_game_mode(self) -> None:
        """Leave editor mode with an empty board and the full tile pool."""
        self.clear_board()
        self.available = list(self.master_tiles)
        self.editor_mode = False
        self.listener.set_editor_mode(False)
        self._publish_available()
        self.listener.show_status("status.game_mode")

    def toggle_hole(self, row: int, col: int) -> bool:
        """Remove a hole, or add one where the board needs more holes.

        Holes are only allowed on boards with more cells than the master inventory has
        tiles, and only up to `cells - max_pieces` of them.

        Returns:
            Whether the cell changed.
        """
        board = self._require_board()
        if board.is_hole(row, col):
            board.remove_hole(row, col)
            self._after_edit()
            self._publish_cell(row, col)
            self.listener.show_status("status.hole_removed", row, col)
            return True

        max_pieces = self.config.max_pieces
        n_cells = board.n_rows * board.n_cols
        if n_cells <= max_pieces:
            self.listener.show_status("error.holes_not_allowed", max_pieces)
            return False
        required_holes = n_cells - max_pieces
        if board.n_holes >= required_holes:
            self.listener.show_status("error.enough_holes", required_holes)
            return False
        if not board.is_empty(row, col):
            self.listener.show_status("error.cell_occupied", row, col)
            return False

        board.set_hole(row, col)
        self._after_edit()
        self._publish_cell(row, col)
        self.listener.show_status(
            "status.hole_added", row, col, required_holes - board.n_holes
        )
        return True

    def set_border_color(self, position: BorderPosition, color: Color) -> None:
        """Set the required color of a border segment.  NONE clears it.

        Raises:
            IndexError: If the segment is outside the board.
            ValueError: If `color` is HOLE.
        """
        board = self._require_board()
        board.set_border_color(position, color)
        self._after_edit()
        self.listener.update_border_color(position, color)
        row, col = board.adjacent_cell(position)
        if not board.is_empty(row, col):
            self._publish_cell(row, col)

    def _after_edit(self) -> None:
        self.solution = None
        self.dirty = True

    def is_border_segment_valid(self, position: BorderPosition) -> bool:
        """A segment is valid if it has a color, or if it is uncolored next to a hole."""
        board = self._require_board()
        if board.border_color(position) != Color.NONE:
            return True
        return board.is_hole(*board.adjacent_cell(position))

    def is_ready_to_play(self) -> bool:
        """Check that an edited puzzle is complete and solvable, reporting the first problem."""
        board = self._require_board()

        if self.config.use_edge_supply_check:
            report = check_edge_supply(board, self.available)
            if not report.feasible:
                self.listener.show_status(
                    "error.not_enough_edges", [color.name for color in report.shortfall]
                )
                return False

        for position in board.border_positions():
            if not self.is_border_segment_valid(position):
                self.listener.show_alert("alert.not_playable.title", "alert.not_playable.body")
                self.listener.show_status(
                    "error.border_needs_color", position.side.name, position.index
                )
                return False

        n_cells = board.n_rows * board.n_cols
        required_holes = n_cells - self.config.max_pieces
        if required_holes > 0 and board.n_holes < required_holes:
            self.listener.show_status(
                "error.holes_required", board.n_rows, board.n_cols, required_holes
            )
            return False

        if self._search_too_large():
            self.listener.show_alert(
                "alert.solvability_skipped.title", "alert.solvability_skipped.body"
            )
            self.listener.show_status("status.solvability_check_skipped", board.n_free_cells)
            return True

        if not self.is_solvable():
            self.listener.show_status("error.not_solvable")
            return False
        return True
