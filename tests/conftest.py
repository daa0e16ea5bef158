"""Shared fixtures for the MacMahon mosaic test suite."""

import json
from collections.abc import Callable, Sequence

import pytest

from macmahon.board import Board, BorderPosition
from macmahon.game import Game
from macmahon.solver.config import SolverConfig
from macmahon.tiles import Color, Direction, Tile, load_master_tiles

# A valid 4x3 tiling (effective patterns, row by row) using 12 distinct master tiles
SOLVED_4X3 = [
    ["GRYG", "GRYR", "GGYR"],
    ["YGRR", "YGRG", "YRRG"],
    ["RYYG", "RYGY", "RGYY"],
    ["YGYY", "GGGG", "YGGG"],
]
BORDERS_4X3 = {"top": "GGG", "right": "GRGG", "bottom": "YGG", "left": "GRGY"}


class RecordingListener:
    """A GameListener that records every call as (method name, args)."""

    def __init__(self) -> None:
        self.calls: list[tuple[str, tuple]] = []

    def _record(self, name: str, *args: object) -> None:
        self.calls.append((name, args))

    def initialize_board_view(self, n_rows, n_cols, border_colors) -> None:
        self._record("initialize_board_view", n_rows, n_cols, border_colors)

    def update_cell(self, row, col, pattern, orientation, is_error, is_hole) -> None:
        self._record("update_cell", row, col, pattern, orientation, is_error, is_hole)

    def display_available_tiles(self, patterns) -> None:
        self._record("display_available_tiles", list(patterns))

    def update_border_color(self, position, color) -> None:
        self._record("update_border_color", position, color)

    def highlight_cell(self, row, col, pattern) -> None:
        self._record("highlight_cell", row, col, pattern)

    def set_editor_mode(self, enabled) -> None:
        self._record("set_editor_mode", enabled)

    def show_status(self, key, *args) -> None:
        self._record("show_status", key, *args)

    def show_alert(self, title_key, body_key, *args) -> None:
        self._record("show_alert", title_key, body_key, *args)

    def show_game_end(self, title_key, message_key, *args) -> None:
        self._record("show_game_end", title_key, message_key, *args)

    def named(self, name: str) -> list[tuple]:
        """Args of every call to `name`, in order."""
        return [args for call, args in self.calls if call == name]

    @property
    def status_keys(self) -> list[str]:
        return [args[0] for args in self.named("show_status")]


def make_border_colors(
    top: str = "", right: str = "", bottom: str = "", left: str = ""
) -> dict[BorderPosition, Color]:
    """Border map from color-code strings, one character per segment ("N" skips one)."""
    border_colors = {}
    for side, codes in (
        (Direction.TOP, top),
        (Direction.RIGHT, right),
        (Direction.BOTTOM, bottom),
        (Direction.LEFT, left),
    ):
        for idx, code in enumerate(codes):
            if code != "N":
                border_colors[BorderPosition(side, idx)] = Color.from_code(code)
    return border_colors


def fill_board(board: Board, rows: Sequence[Sequence[str | None]]) -> Board:
    """Place tiles given as effective patterns; None leaves a cell alone."""
    for row, patterns in enumerate(rows):
        for col, pattern in enumerate(patterns):
            if pattern is not None:
                board.place(row, col, Tile.from_pattern(pattern))
    return board


def puzzle_document(board_rows: Sequence[Sequence[str]]) -> str:
    """JSON puzzle document from a border-inclusive grid of patterns."""
    return json.dumps({"field": [list(row) for row in board_rows]})


@pytest.fixture(scope="session")
def master_tiles() -> tuple[Tile, ...]:
    """The packaged 24 MacMahon tiles."""
    return load_master_tiles()


@pytest.fixture
def board_factory() -> Callable[..., Board]:
    """Build a board from dimensions, border strings, holes and placed patterns."""

    def _make(
        n_rows: int,
        n_cols: int,
        *,
        top: str = "",
        right: str = "",
        bottom: str = "",
        left: str = "",
        holes: Sequence[tuple[int, int]] = (),
        tiles: Sequence[Sequence[str | None]] = (),
    ) -> Board:
        board = Board(n_rows, n_cols, make_border_colors(top, right, bottom, left), holes)
        return fill_board(board, tiles)

    return _make


@pytest.fixture
def bordered_4x3(board_factory) -> Board:
    """Empty 4x3 board with the borders of SOLVED_4X3."""
    return board_factory(4, 3, **BORDERS_4X3)


@pytest.fixture
def solved_4x3(board_factory) -> Board:
    """The 4x3 board with every cell filled as in SOLVED_4X3."""
    return board_factory(4, 3, **BORDERS_4X3, tiles=SOLVED_4X3)


@pytest.fixture
def listener() -> RecordingListener:
    return RecordingListener()


@pytest.fixture
def solver_settings() -> SolverConfig:
    """Default solver settings, independent of the environment."""
    return SolverConfig(
        tiles_path=None,
        max_pieces=24,
        solvability_check_max_free_cells=18,
        use_edge_supply_check=True,
    )


@pytest.fixture
def game(listener, master_tiles, solver_settings) -> Game:
    return Game(listener, master_tiles, config=solver_settings)
